"""The MIDI command section of an RTP-MIDI packet: header flags and body."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Iterable

from .timed_command import TimedCommand
from .wire import TruncatedPacketError, delta_time_size, read_exact

__all__ = ["CommandListBody", "CommandListFlags", "CommandListHeader"]

_B_MASK = 0b1000_0000
_J_MASK = 0b0100_0000
_Z_MASK = 0b0010_0000
_P_MASK = 0b0001_0000

_SHORT_LENGTH_LIMIT = 0x0F

_FLAG_BITS = 4
_SHORT_LENGTH_BITS = 4
_LONG_LENGTH_BITS = 12


@dataclass(frozen=True)
class CommandListBody:
    """An ordered list of timed MIDI commands."""

    commands: tuple[TimedCommand, ...] = ()

    def __init__(self, commands: Iterable[TimedCommand] = ()) -> None:
        object.__setattr__(self, "commands", tuple(commands))

    def size(self, z_flag: bool) -> int:
        """Return the encoded length, plus one byte when a long header is needed."""
        length = 0
        running_status: int | None = None
        for index, timed in enumerate(self.commands):
            if index > 0 or z_flag:
                length += 1 if timed.delta_time is None else delta_time_size(timed.delta_time)
            status = timed.command.status()
            if status != running_status:
                length += 1
            length += timed.command.size()
            running_status = status
        if length > _SHORT_LENGTH_LIMIT:
            length += 1
        return length

    @classmethod
    def read(cls, stream: BinaryIO, z_flag: bool) -> CommandListBody:
        """Read commands until the stream runs out."""
        commands: list[TimedCommand] = []
        running_status: int | None = None
        has_delta_time = z_flag
        while True:
            try:
                timed = TimedCommand.read(stream, running_status, has_delta_time)
            except TruncatedPacketError:
                break
            has_delta_time = True
            running_status = timed.command.status()
            commands.append(timed)
        return cls(commands)

    def write(self, stream: BinaryIO, z_flag: bool) -> int:
        """Write all commands using running status and return the bytes written."""
        written = 0
        running_status: int | None = None
        for index, timed in enumerate(self.commands):
            write_delta = z_flag if index == 0 else True
            written += timed.write(stream, running_status, write_delta)
            running_status = timed.command.status()
        return written


@dataclass(frozen=True)
class CommandListFlags:
    """The B, J, Z and P flags of a command section header."""

    b_flag: bool = False
    j_flag: bool = False
    z_flag: bool = False
    p_flag: bool = False

    @classmethod
    def from_byte(cls, byte: int) -> CommandListFlags:
        """Decode the flags from the high nibble of ``byte``."""
        return cls(
            b_flag=bool(byte & _B_MASK),
            j_flag=bool(byte & _J_MASK),
            z_flag=bool(byte & _Z_MASK),
            p_flag=bool(byte & _P_MASK),
        )

    def to_byte(self) -> int:
        """Encode the flags into the high nibble of a byte."""
        return (
            (_B_MASK if self.b_flag else 0)
            | (_J_MASK if self.j_flag else 0)
            | (_Z_MASK if self.z_flag else 0)
            | (_P_MASK if self.p_flag else 0)
        )

    @staticmethod
    def needs_b_flag(size: int) -> bool:
        """Return whether a section of ``size`` bytes needs the long header."""
        return size > _SHORT_LENGTH_LIMIT


@dataclass(frozen=True)
class CommandListHeader:
    """The header of a command section: flags and section length."""

    flags: CommandListFlags
    length: int

    @staticmethod
    def header_size(b_flag: bool) -> int:
        """Return the header size in bytes: flag bits plus a 4- or 12-bit length."""
        length_bits = _LONG_LENGTH_BITS if b_flag else _SHORT_LENGTH_BITS
        return (_FLAG_BITS + length_bits) // 8

    @classmethod
    def build_for(
        cls, body: CommandListBody, j_flag: bool, z_flag: bool, p_flag: bool
    ) -> CommandListHeader:
        """Build a header describing ``body``."""
        length = body.size(z_flag)
        flags = CommandListFlags(CommandListFlags.needs_b_flag(length), j_flag, z_flag, p_flag)
        return cls(flags, length)

    @classmethod
    def read(cls, stream: BinaryIO) -> CommandListHeader:
        """Read a one- or two-byte header."""
        (first_byte,) = read_exact(stream, 1)
        flags = CommandListFlags.from_byte(first_byte)
        if flags.b_flag:
            (length_lsb,) = read_exact(stream, 1)
            length = ((first_byte & 0x0F) << 8) | length_lsb
        else:
            length = first_byte & 0x0F
        return cls(flags, length)

    def write(self, stream: BinaryIO) -> int:
        """Write the header and return the number of bytes written."""
        flag_bits = self.flags.to_byte()
        size = self.header_size(self.flags.b_flag)
        if self.flags.b_flag:
            value = (0x8000 | (flag_bits << 8) | (self.length & 0x0FFF)) & 0xFFFF
        else:
            value = (flag_bits | (self.length & 0x0F)) & 0xFF
        stream.write(value.to_bytes(size, "big"))
        return size