"""RTP-MIDI data packets: the RTP header followed by a MIDI command section."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable

from .command_list import CommandListBody, CommandListFlags, CommandListHeader
from .timed_command import TimedCommand
from .wire import TruncatedPacketError, read_exact

__all__ = ["MidiPacketHeaderFlags", "MidiPacketHeader", "MidiPacket"]

_HEADER_STRUCT = struct.Struct(">HHII")

_VERSION_SHIFT = 14
_P_MASK = 0b0010_0000_0000_0000
_X_MASK = 0b0001_0000_0000_0000
_CC_SHIFT = 8
_M_MASK = 0b0000_0000_1000_0000
_PT_MASK = 0b0000_0000_0111_1111

RTP_VERSION = 2
RTP_MIDI_PAYLOAD_TYPE = 97


@dataclass(frozen=True)
class MidiPacketHeaderFlags:
    """The first 16 bits of an RTP header: version, P, X, CC, M and payload type."""

    version: int = RTP_VERSION
    p: bool = False
    x: bool = False
    cc: int = 0
    m: bool = False
    pt: int = RTP_MIDI_PAYLOAD_TYPE

    @classmethod
    def from_int(cls, value: int) -> MidiPacketHeaderFlags:
        """Decode the flags from a 16-bit value."""
        return cls(
            version=(value >> _VERSION_SHIFT) & 0b11,
            p=bool(value & _P_MASK),
            x=bool(value & _X_MASK),
            cc=(value >> _CC_SHIFT) & 0x0F,
            m=bool(value & _M_MASK),
            pt=value & _PT_MASK,
        )

    def to_int(self) -> int:
        """Encode the flags into a 16-bit value."""
        return (
            ((self.version & 0b11) << _VERSION_SHIFT)
            | (_P_MASK if self.p else 0)
            | (_X_MASK if self.x else 0)
            | ((self.cc & 0x0F) << _CC_SHIFT)
            | (_M_MASK if self.m else 0)
            | (self.pt & _PT_MASK)
        )


@dataclass(frozen=True)
class MidiPacketHeader:
    """The fixed 12-byte RTP header of an RTP-MIDI packet."""

    SIZE = _HEADER_STRUCT.size

    sequence_number: int
    timestamp: int
    ssrc: int
    flags: MidiPacketHeaderFlags = field(default_factory=MidiPacketHeaderFlags)

    @classmethod
    def read(cls, stream: BinaryIO) -> MidiPacketHeader:
        """Read a header from ``stream``."""
        flags, sequence_number, timestamp, ssrc = _HEADER_STRUCT.unpack(
            read_exact(stream, _HEADER_STRUCT.size)
        )
        return cls(sequence_number, timestamp, ssrc, MidiPacketHeaderFlags.from_int(flags))

    def write(self, stream: BinaryIO) -> int:
        """Write the header and return the number of bytes written."""
        stream.write(
            _HEADER_STRUCT.pack(
                self.flags.to_int(), self.sequence_number, self.timestamp, self.ssrc
            )
        )
        return _HEADER_STRUCT.size


@dataclass(frozen=True)
class MidiPacket:
    """An RTP-MIDI packet carrying a list of timed MIDI commands."""

    header: MidiPacketHeader
    command_list: CommandListBody

    @classmethod
    def create(
        cls,
        sequence_number: int,
        timestamp: int,
        ssrc: int,
        commands: Iterable[TimedCommand],
    ) -> MidiPacket:
        """Build a packet with a default header and the given commands."""
        return cls(
            MidiPacketHeader(sequence_number, timestamp, ssrc),
            CommandListBody(commands),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> MidiPacket:
        """Parse a packet from ``data``."""
        data = bytes(data)
        reader = io.BytesIO(data)
        header = MidiPacketHeader.read(reader)
        section_header = CommandListHeader.read(reader)
        start = reader.tell()
        end = start + section_header.length
        if end > len(data):
            raise TruncatedPacketError(
                f"command section needs {section_header.length} bytes, "
                f"only {len(data) - start} available"
            )
        body = CommandListBody.read(io.BytesIO(data[start:end]), section_header.flags.z_flag)
        return cls(header, body)

    def write(self, stream: BinaryIO, z_flag: bool) -> int:
        """Write the packet and return the number of bytes written."""
        written = self.header.write(stream)
        section_header = CommandListHeader.build_for(self.command_list, False, z_flag, False)
        written += section_header.write(stream)
        written += self.command_list.write(stream, z_flag)
        return written

    def to_bytes(self, z_flag: bool) -> bytes:
        """Encode the packet into a buffer of exactly ``size(z_flag)`` bytes."""
        size = self.size(z_flag)
        buffer = io.BytesIO()
        self.write(buffer, z_flag)
        data = buffer.getvalue()
        return data[:size].ljust(size, b"\x00")

    def size(self, z_flag: bool) -> int:
        """Return the encoded size of the packet."""
        section_size = self.command_list.size(z_flag)
        section_header_size = CommandListHeader.header_size(
            CommandListFlags.needs_b_flag(section_size)
        )
        return MidiPacketHeader.SIZE + section_header_size + section_size

    def commands(self) -> tuple[TimedCommand, ...]:
        """Return the commands carried by the packet."""
        return self.command_list.commands

    def sequence_number(self) -> int:
        """Return the RTP sequence number."""
        return self.header.sequence_number

    def timestamp(self) -> int:
        """Return the RTP timestamp."""
        return self.header.timestamp