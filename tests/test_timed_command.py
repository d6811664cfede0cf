import io

import pytest

from rtpmidi.midi_command import NoteOn
from rtpmidi.timed_command import TimedCommand
from rtpmidi.wire import TruncatedPacketError, write_delta_time

DELTA = 0x123456
COMMAND = NoteOn(channel=7, key=0x40, velocity=0x7F)


def _expected(delta_time):
    buf = io.BytesIO()
    if delta_time is not None:
        write_delta_time(buf, delta_time)
    COMMAND.write(buf, None)
    return buf.getvalue()


def test_timed_command_fields():
    timed = TimedCommand(DELTA, COMMAND)
    assert timed.delta_time == DELTA
    assert timed.command == COMMAND


def test_read_with_delta_time():
    timed = TimedCommand.read(io.BytesIO(_expected(DELTA)), None, True)
    assert timed.command == COMMAND
    assert timed.delta_time == DELTA


def test_read_without_delta_time():
    timed = TimedCommand.read(io.BytesIO(_expected(None)), None, False)
    assert timed.command == COMMAND
    assert timed.delta_time is None


def test_write_with_delta_time():
    buf = io.BytesIO()
    written = TimedCommand(DELTA, COMMAND).write(buf, None, True)
    assert buf.getvalue() == _expected(DELTA)
    assert buf.getvalue() == bytes([0xC8, 0xE8, 0x56, 0x97, 0x40, 0x7F])
    assert written == 6


def test_write_without_delta_time():
    buf = io.BytesIO()
    written = TimedCommand(None, COMMAND).write(buf, None, False)
    assert written == 3
    assert buf.getvalue() == _expected(None)


def test_write_missing_delta_time_as_zero():
    buf = io.BytesIO()
    written = TimedCommand(None, COMMAND).write(buf, None, True)
    assert written == 4
    assert buf.getvalue() == _expected(0)
    assert buf.getvalue() == bytes([0x00, 0x97, 0x40, 0x7F])


def test_serialize_and_deserialize():
    original = TimedCommand(DELTA, COMMAND)
    buf = io.BytesIO()
    original.write(buf, None, True)
    buf.seek(0)
    assert TimedCommand.read(buf, None, True) == original


def test_read_with_running_status():
    timed = TimedCommand.read(io.BytesIO(b"\x00\x40\x7f"), 0x94, True)
    assert timed == TimedCommand(0, NoteOn(4, 0x40, 0x7F))


def test_write_omits_running_status():
    buf = io.BytesIO()
    written = TimedCommand(5, COMMAND).write(buf, 0x97, True)
    assert written == 3
    assert buf.getvalue() == bytes([0x05, 0x40, 0x7F])


def test_read_truncated_raises():
    with pytest.raises(TruncatedPacketError):
        TimedCommand.read(io.BytesIO(b"\x00\x97\x40"), None, True)