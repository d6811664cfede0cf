"""AppleMIDI control packets: header helpers and clock synchronisation."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Iterable

from .wire import PacketError, TruncatedPacketError, read_exact

__all__ = [
    "ClockSyncPacket",
    "write_control_header",
    "is_control_packet",
    "read_optional_string",
]

CONTROL_SIGNATURE = b"\xff\xff"
CONTROL_HEADER_SIZE = 4

_CLOCK_SYNC_BODY = struct.Struct(">IB3xQQQ")


def write_control_header(stream: BinaryIO, command: bytes) -> int:
    """Write the control signature and two-byte ``command``; return the bytes written."""
    command = bytes(command)
    if len(command) != 2:
        raise ValueError(f"control command must be 2 bytes, got {len(command)}")
    stream.write(CONTROL_SIGNATURE + command)
    return CONTROL_HEADER_SIZE


def is_control_packet(data: bytes) -> bool:
    """Return whether ``data`` starts with a control packet header."""
    return len(data) >= CONTROL_HEADER_SIZE and bytes(data[:2]) == CONTROL_SIGNATURE


def read_optional_string(stream: BinaryIO) -> str | None:
    """Read a NUL-terminated UTF-8 string, or None if the stream is already exhausted."""
    name = bytearray()
    while True:
        try:
            (byte,) = read_exact(stream, 1)
        except TruncatedPacketError:
            if not name:
                return None
            raise PacketError(
                "Name field present but not null-terminated before EOF"
            ) from None
        if byte == 0:
            try:
                return name.decode("utf-8")
            except UnicodeDecodeError:
                raise PacketError("Name contains invalid UTF-8") from None
        name.append(byte)


@dataclass(frozen=True)
class ClockSyncPacket:
    """A clock synchronisation ("CK") packet."""

    SIZE = CONTROL_HEADER_SIZE + _CLOCK_SYNC_BODY.size
    COMMAND = b"CK"

    count: int
    timestamps: tuple[int, int, int]
    sender_ssrc: int

    def __init__(self, count: int, timestamps: Iterable[int], sender_ssrc: int) -> None:
        stamps = tuple(timestamps)
        if len(stamps) != 3:
            raise ValueError(f"expected 3 timestamps, got {len(stamps)}")
        object.__setattr__(self, "count", count)
        object.__setattr__(self, "timestamps", stamps)
        object.__setattr__(self, "sender_ssrc", sender_ssrc)

    @classmethod
    def read(cls, stream: BinaryIO) -> ClockSyncPacket:
        """Read the packet body that follows the control header."""
        sender_ssrc, count, *timestamps = _CLOCK_SYNC_BODY.unpack(
            read_exact(stream, _CLOCK_SYNC_BODY.size)
        )
        return cls(count, timestamps, sender_ssrc)

    def write(self, stream: BinaryIO) -> int:
        """Write the whole packet, header included, and return its size."""
        write_control_header(stream, self.COMMAND)
        stream.write(_CLOCK_SYNC_BODY.pack(self.sender_ssrc, self.count, *self.timestamps))
        return self.SIZE

    def to_bytes(self) -> bytes:
        """Return the encoded packet."""
        return (
            CONTROL_SIGNATURE
            + self.COMMAND
            + _CLOCK_SYNC_BODY.pack(self.sender_ssrc, self.count, *self.timestamps)
        )