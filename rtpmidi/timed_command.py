"""MIDI commands paired with an optional delta time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from .midi_command import MidiCommand, read_midi_command
from .wire import read_delta_time, write_delta_time

__all__ = ["TimedCommand"]


@dataclass(frozen=True)
class TimedCommand:
    """A MIDI command with the delta time that precedes it in a command list."""

    delta_time: int | None
    command: MidiCommand

    @classmethod
    def read(
        cls,
        stream: BinaryIO,
        running_status: int | None = None,
        has_delta_time: bool = False,
    ) -> TimedCommand:
        """Read a command, preceded by a delta time when ``has_delta_time`` is set."""
        delta_time = read_delta_time(stream) if has_delta_time else None
        command = read_midi_command(stream, running_status)
        return cls(delta_time, command)

    def write(
        self,
        stream: BinaryIO,
        running_status: int | None = None,
        write_delta_time: bool = False,
    ) -> int:
        """Write the command and return the number of bytes written.

        When ``write_delta_time`` is set, a missing delta time is written as zero.
        """
        written = 0
        if write_delta_time:
            written += _write_delta(stream, self.delta_time or 0)
        written += self.command.write(stream, running_status)
        return written


def _write_delta(stream: BinaryIO, delta_time: int) -> int:
    return write_delta_time(stream, delta_time)