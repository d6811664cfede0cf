import io

import pytest

from rtpmidi.command_list import CommandListBody, CommandListFlags, CommandListHeader
from rtpmidi.midi_command import NoteOff, NoteOn
from rtpmidi.timed_command import TimedCommand
from rtpmidi.wire import PacketError


def test_new_and_commands():
    timed = TimedCommand(None, NoteOn(channel=1, key=60, velocity=100))
    body = CommandListBody([timed])
    assert len(body.commands) == 1
    assert body.commands[0] == timed


def test_size_and_write_read_roundtrip():
    timed1 = TimedCommand(None, NoteOn(channel=1, key=60, velocity=100))
    timed2 = TimedCommand(0, NoteOff(channel=1, key=60, velocity=0))
    body = CommandListBody([timed1, timed2])
    size = body.size(False)
    buf = io.BytesIO()
    written = body.write(buf, False)
    assert written == size == 7
    buf.seek(0)
    parsed = CommandListBody.read(buf, False)
    assert len(parsed.commands) == 2
    assert parsed.commands[0] == timed1
    assert parsed.commands[1] == timed2


def test_running_status_omits_repeated_status():
    body = CommandListBody(
        [
            TimedCommand(None, NoteOn(0, 60, 100)),
            TimedCommand(0, NoteOn(0, 62, 100)),
        ]
    )
    buf = io.BytesIO()
    body.write(buf, False)
    assert buf.getvalue() == bytes([0x90, 60, 100, 0x00, 62, 100])
    assert body.size(False) == 6
    buf.seek(0)
    assert CommandListBody.read(buf, False) == body


def test_z_flag_writes_first_delta_time():
    body = CommandListBody([TimedCommand(3, NoteOn(0, 60, 100))])
    buf = io.BytesIO()
    body.write(buf, True)
    assert buf.getvalue() == bytes([0x03, 0x90, 60, 100])
    assert body.size(True) == 4
    buf.seek(0)
    assert CommandListBody.read(buf, True) == body


def test_large_body_size_includes_long_header_byte():
    body = CommandListBody(
        [TimedCommand(None if ch == 0 else 0, NoteOn(ch, 60, 100)) for ch in range(5)]
    )
    buf = io.BytesIO()
    written = body.write(buf, False)
    assert written == 19
    assert body.size(False) == written + 1


def test_read_empty_stream_gives_empty_body():
    assert CommandListBody.read(io.BytesIO(b""), False).commands == ()


def test_read_without_status_raises():
    with pytest.raises(PacketError):
        CommandListBody.read(io.BytesIO(b"\x40\x7f"), False)


def test_midi_command_list_header_roundtrip():
    header = CommandListHeader(CommandListFlags(True, False, True, False), 0x123)
    buf = io.BytesIO()
    assert header.write(buf) == 2
    assert buf.getvalue() == bytes([0xA1, 0x23])
    buf.seek(0)
    read_header = CommandListHeader.read(buf)
    assert read_header.flags == header.flags
    assert read_header.length == header.length


def test_short_header_roundtrip():
    header = CommandListHeader(CommandListFlags(False, True, False, True), 0x0A)
    buf = io.BytesIO()
    assert header.write(buf) == 1
    assert buf.getvalue() == bytes([0x5A])
    buf.seek(0)
    assert CommandListHeader.read(buf) == header


def test_flags_from_byte_ignores_low_nibble():
    flags = CommandListFlags.from_byte(0xAF)
    assert flags == CommandListFlags(True, False, True, False)
    assert flags.to_byte() == 0xA0


@pytest.mark.parametrize("size, expected", [(0, False), (0x0F, False), (0x10, True)])
def test_needs_b_flag(size, expected):
    assert CommandListFlags.needs_b_flag(size) is expected


@pytest.mark.parametrize("b_flag, expected", [(True, 2), (False, 1)])
def test_header_size(b_flag, expected):
    assert CommandListHeader.header_size(b_flag) == expected


def test_build_for_small_body():
    body = CommandListBody([TimedCommand(None, NoteOn(1, 60, 100))])
    header = CommandListHeader.build_for(body, False, False, False)
    assert header.length == 3
    assert header.flags == CommandListFlags(False, False, False, False)


def test_build_for_large_body_sets_b_flag():
    body = CommandListBody(
        [TimedCommand(None if ch == 0 else 0, NoteOn(ch, 60, 100)) for ch in range(5)]
    )
    header = CommandListHeader.build_for(body, False, True, False)
    assert header.flags.b_flag is True
    assert header.flags.z_flag is True
    assert header.length == body.size(True)