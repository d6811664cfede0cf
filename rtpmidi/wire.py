"""Low-level helpers for reading and writing RTP-MIDI wire data."""

from __future__ import annotations

from typing import BinaryIO

__all__ = [
    "PacketError",
    "TruncatedPacketError",
    "read_exact",
    "read_delta_time",
    "write_delta_time",
    "delta_time_size",
]

_U32_MASK = 0xFFFFFFFF


class PacketError(ValueError):
    """Raised when packet data is malformed."""


class TruncatedPacketError(PacketError):
    """Raised when packet data ends before a field is complete."""


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes from ``stream`` or raise TruncatedPacketError."""
    data = stream.read(size)
    if data is None or len(data) < size:
        got = 0 if data is None else len(data)
        raise TruncatedPacketError(f"expected {size} bytes, got {got}")
    return data


def read_delta_time(stream: BinaryIO) -> int:
    """Read a variable-length delta time (7 bits per byte, high bit continues)."""
    delta_time = 0
    while True:
        (byte,) = read_exact(stream, 1)
        delta_time = ((delta_time << 7) | (byte & 0x7F)) & _U32_MASK
        if not byte & 0x80:
            return delta_time


def delta_time_size(delta_time: int) -> int:
    """Return the number of bytes needed to encode ``delta_time``."""
    _check_delta_time(delta_time)
    return max(1, (delta_time.bit_length() + 6) // 7)


def write_delta_time(stream: BinaryIO, delta_time: int) -> int:
    """Write ``delta_time`` in variable-length form and return the bytes written."""
    num_bytes = delta_time_size(delta_time)
    encoded = bytes(
        ((delta_time >> (shift * 7)) & 0x7F) | (0x80 if shift > 0 else 0)
        for shift in reversed(range(num_bytes))
    )
    stream.write(encoded)
    return num_bytes


def _check_delta_time(delta_time: int) -> None:
    if not 0 <= delta_time <= _U32_MASK:
        raise ValueError(f"delta time out of range: {delta_time}")