# rtpmidi

Read and write the packets of RTP-MIDI (also known as AppleMIDI): MIDI
command lists carried in RTP packets, and the AppleMIDI clock
synchronisation control packet.

The package uses only the standard library and works on Python 3.10 and later.

## Installation

```
pip install rtpmidi
```

## MIDI packets

```python
from rtpmidi.midi_command import NoteOn
from rtpmidi.timed_command import TimedCommand
from rtpmidi.midi_packet import MidiPacket

commands = [TimedCommand(None, NoteOn(channel=1, key=64, velocity=127))]
packet = MidiPacket.create(1, 1234, 0x11111111, commands)

data = packet.to_bytes(False)
parsed = MidiPacket.from_bytes(data)
assert parsed.sequence_number() == 1
assert parsed.timestamp() == 1234
assert parsed.commands()[0].command == NoteOn(channel=1, key=64, velocity=127)
```

`MidiPacket.create` fills in a standard RTP header (version 2, payload
type 97). The `z_flag` argument of `to_bytes`, `write` and `size` says
whether the first command in the list is preceded by a delta time.

The modules, from the bottom up:

- `rtpmidi.wire`: `read_delta_time`, `write_delta_time` and
  `delta_time_size` for the MIDI variable-length delta time encoding, and
  `read_exact` for reading a fixed number of bytes from a binary stream.
- `rtpmidi.midi_command`: the commands `NoteOff`, `NoteOn`,
  `PolyphonicKeyPressure`, `ControlChange`, `ProgramChange`,
  `ChannelPressure`, `PitchBend` and `SysEx`, all subclasses of
  `MidiCommand` with `status()`, `size()` and `write(stream, running_status)`;
  `read_midi_command(stream, running_status)` reads one back. A status
  byte equal to the running status is left out when writing and is
  supplied from the running status when reading.
- `rtpmidi.timed_command`: `TimedCommand`, a command with an optional
  delta time, with `read` and `write`.
- `rtpmidi.command_list`: `CommandListBody`, `CommandListFlags` and
  `CommandListHeader`, the MIDI command section and its one- or two-byte
  header (the B, J, Z and P flags and the section length).
- `rtpmidi.midi_packet`: `MidiPacketHeaderFlags`, `MidiPacketHeader` and
  `MidiPacket`.

## Control packets

```python
from rtpmidi.control import ClockSyncPacket, is_control_packet

sync = ClockSyncPacket(count=2, timestamps=(1, 2, 3), sender_ssrc=0x11111111)
data = sync.to_bytes()
assert len(data) == ClockSyncPacket.SIZE
assert is_control_packet(data)
```

`ClockSyncPacket.read(stream)` reads the packet body that follows the
four-byte control header; `write_control_header(stream, command)` writes
that header. `read_optional_string(stream)` reads a NUL-terminated UTF-8
name, returning `None` when the stream is already at its end.

## Errors

Malformed input raises `rtpmidi.wire.PacketError` (a `ValueError`); input
that ends too early raises its subclass `rtpmidi.wire.TruncatedPacketError`.

## What the package does not do

- It only encodes and decodes packets. It opens no sockets, runs no
  session, and sends or accepts no invitations; the caller moves the
  bytes.
- Of the control packets only clock synchronisation ("CK") is decoded.
  There is no parser for the session packets ("IN", "OK", "NO", "BY") and
  no single entry point that tells a control packet from a MIDI packet
  and decodes either; `is_control_packet` only checks the header.
- The recovery journal is not implemented: the J flag is read and
  written, but a journal is never produced or parsed, so lost packets
  cannot be recovered.

## Running the tests

```
pip install -e ".[test]"
pytest
```