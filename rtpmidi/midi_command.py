"""MIDI commands as carried in RTP-MIDI command lists."""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields
from typing import BinaryIO, ClassVar

from .wire import PacketError, read_exact

__all__ = [
    "MidiCommand",
    "NoteOff",
    "NoteOn",
    "PolyphonicKeyPressure",
    "ControlChange",
    "ProgramChange",
    "ChannelPressure",
    "PitchBend",
    "SysEx",
    "read_midi_command",
]

SYSEX_START = 0xF0
SYSEX_END = 0xF7


class MidiCommand:
    """Base class of all MIDI commands."""

    def status(self) -> int:
        """Return the status byte of this command."""
        raise NotImplementedError

    def _payload(self) -> bytes:
        raise NotImplementedError

    def size(self) -> int:
        """Return the size of the command without its status byte."""
        return len(self._payload())

    def write(self, stream: BinaryIO, running_status: int | None = None) -> int:
        """Write the command, omitting the status byte if it equals ``running_status``."""
        out = bytearray()
        status = self.status()
        if running_status is None or status != running_status:
            out.append(status)
        out += self._payload()
        stream.write(bytes(out))
        return len(out)


@dataclass(frozen=True)
class _ChannelCommand(MidiCommand):
    STATUS_NIBBLE: ClassVar[int] = 0

    channel: int

    def status(self) -> int:
        return self.STATUS_NIBBLE | (self.channel & 0x0F)

    def _payload(self) -> bytes:
        return bytes(astuple(self)[1:])


@dataclass(frozen=True)
class NoteOff(_ChannelCommand):
    STATUS_NIBBLE: ClassVar[int] = 0x80

    key: int
    velocity: int


@dataclass(frozen=True)
class NoteOn(_ChannelCommand):
    STATUS_NIBBLE: ClassVar[int] = 0x90

    key: int
    velocity: int


@dataclass(frozen=True)
class PolyphonicKeyPressure(_ChannelCommand):
    STATUS_NIBBLE: ClassVar[int] = 0xA0

    key: int
    pressure: int


@dataclass(frozen=True)
class ControlChange(_ChannelCommand):
    STATUS_NIBBLE: ClassVar[int] = 0xB0

    controller: int
    value: int


@dataclass(frozen=True)
class ProgramChange(_ChannelCommand):
    STATUS_NIBBLE: ClassVar[int] = 0xC0

    program: int


@dataclass(frozen=True)
class ChannelPressure(_ChannelCommand):
    STATUS_NIBBLE: ClassVar[int] = 0xD0

    pressure: int


@dataclass(frozen=True)
class PitchBend(_ChannelCommand):
    STATUS_NIBBLE: ClassVar[int] = 0xE0

    lsb: int
    msb: int


@dataclass(frozen=True)
class SysEx(MidiCommand):
    """A System Exclusive message; ``data`` excludes the framing bytes."""

    data: bytes

    def status(self) -> int:
        return SYSEX_START

    def _payload(self) -> bytes:
        return bytes([SYSEX_START]) + bytes(self.data) + bytes([SYSEX_END])


_CHANNEL_COMMANDS: dict[int, type[_ChannelCommand]] = {
    cls.STATUS_NIBBLE: cls
    for cls in (
        NoteOff,
        NoteOn,
        PolyphonicKeyPressure,
        ControlChange,
        ProgramChange,
        ChannelPressure,
        PitchBend,
    )
}


def _read_sysex(stream: BinaryIO) -> SysEx:
    data = bytearray()
    while True:
        (byte,) = read_exact(stream, 1)
        if byte == SYSEX_END:
            return SysEx(bytes(data))
        data.append(byte)


def read_midi_command(stream: BinaryIO, running_status: int | None = None) -> MidiCommand:
    """Read one MIDI command, using ``running_status`` when the status byte is omitted."""
    (first_byte,) = read_exact(stream, 1)
    if first_byte == SYSEX_START:
        return _read_sysex(stream)

    if first_byte & 0x80:
        status = first_byte
        data = b""
    elif running_status is None:
        raise PacketError("No status with no running status byte")
    else:
        status = running_status
        data = bytes([first_byte])

    cls = _CHANNEL_COMMANDS.get(status & 0xF0)
    if cls is None:
        raise PacketError("Invalid MIDI command")

    wanted = len(fields(cls)) - 1
    if len(data) < wanted:
        data += read_exact(stream, wanted - len(data))
    return cls(status & 0x0F, *data[:wanted])