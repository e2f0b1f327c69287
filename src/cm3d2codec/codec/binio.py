"""Primitive wire codec shared by the COM3D2 formats.

Strings are UTF-8 prefixed by their byte length as a 7-bit varint (the
.NET ``BinaryWriter`` convention). Integers and floats are fixed-width
little-endian.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Sequence, Tuple

from .errors import malformed, truncated

__all__ = ["BinaryReader", "BinaryWriter", "encode_string"]

_INT32 = struct.Struct("<i")
_FLOAT32 = struct.Struct("<f")
_MAX_VARINT_BYTES = 5


def encode_string(value: str) -> bytes:
    """Return ``value`` as a length-prefixed byte string."""
    raw = value.encode("utf-8")
    n = len(raw)
    prefix = bytearray()
    while n >= 0x80:
        prefix.append((n & 0x7F) | 0x80)
        n >>= 7
    prefix.append(n)
    return bytes(prefix) + raw


class BinaryReader:
    """Forward-only reader over a binary stream."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def read_exact(self, size: int) -> bytes:
        if size < 0:
            raise malformed(f"negative length {size}", length=size)
        data = self.stream.read(size)
        if len(data) != size:
            raise truncated(size, len(data))
        return data

    def read_length(self) -> int:
        result = 0
        for i in range(_MAX_VARINT_BYTES):
            b = self.read_exact(1)[0]
            result |= (b & 0x7F) << (7 * i)
            if not b & 0x80:
                return result
        raise malformed("string length prefix exceeds 5 bytes")

    def read_string(self) -> str:
        raw = self.read_exact(self.read_length())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise malformed(f"invalid utf-8 string: {e}") from e

    def read_int32(self) -> int:
        return _INT32.unpack(self.read_exact(4))[0]

    def read_float32(self) -> float:
        return _FLOAT32.unpack(self.read_exact(4))[0]

    def read_floats(self, count: int) -> Tuple[float, ...]:
        return struct.unpack(f"<{count}f", self.read_exact(4 * count))


class BinaryWriter:
    """Mirror of :class:`BinaryReader`."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def write_bytes(self, data: bytes) -> None:
        self.stream.write(data)

    def write_string(self, value: str) -> None:
        if not isinstance(value, str):
            raise malformed(f"expected str, got {type(value).__name__}")
        self.stream.write(encode_string(value))

    def write_int32(self, value: int) -> None:
        try:
            self.stream.write(_INT32.pack(value))
        except struct.error as e:
            raise malformed(f"int32 out of range: {value!r}") from e

    def write_float32(self, value: float) -> None:
        try:
            self.stream.write(_FLOAT32.pack(value))
        except (struct.error, OverflowError) as e:
            raise malformed(f"invalid float32: {value!r}") from e

    def write_floats(self, values: Sequence[float], count: int) -> None:
        if len(values) != count:
            raise malformed(
                f"expected {count} floats, got {len(values)}",
                length=len(values),
            )
        try:
            self.stream.write(struct.pack(f"<{count}f", *values))
        except (struct.error, OverflowError) as e:
            raise malformed(f"invalid float32 in {list(values)!r}") from e
