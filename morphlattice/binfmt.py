"""Compact little-endian binary encoding used by the dictionary files.

Integers are fixed width, booleans are one byte, and byte strings,
text and lists carry a u64 length prefix.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable

from .errors import LinderaErrorKind


class Encoder:
    """Accumulates encoded values; every writer returns the encoder."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def _pack(self, fmt: str, value: int) -> "Encoder":
        try:
            self._buffer += struct.pack(fmt, value)
        except struct.error as err:
            raise LinderaErrorKind.SERIALIZE.with_error(err) from err
        return self

    def u8(self, value: int) -> "Encoder":
        return self._pack("<B", value)

    def u16(self, value: int) -> "Encoder":
        return self._pack("<H", value)

    def i16(self, value: int) -> "Encoder":
        return self._pack("<h", value)

    def u32(self, value: int) -> "Encoder":
        return self._pack("<I", value)

    def i32(self, value: int) -> "Encoder":
        return self._pack("<i", value)

    def u64(self, value: int) -> "Encoder":
        return self._pack("<Q", value)

    def boolean(self, value: bool) -> "Encoder":
        return self.u8(1 if value else 0)

    def raw_bytes(self, value: bytes) -> "Encoder":
        self.u64(len(value))
        self._buffer += value
        return self

    def string(self, value: str) -> "Encoder":
        return self.raw_bytes(value.encode("utf-8"))

    def string_list(self, values: Iterable[str]) -> "Encoder":
        items = list(values)
        self.u64(len(items))
        for item in items:
            self.string(item)
        return self

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)


class Decoder:
    """Reads values written by :class:`Encoder` from a byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    def _take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise LinderaErrorKind.DESERIALIZE.with_error(
                f"unexpected end of data: need {size} bytes at offset {self._pos}"
            )
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def _unpack(self, fmt: str) -> int:
        return struct.unpack(fmt, self._take(struct.calcsize(fmt)))[0]

    def u8(self) -> int:
        return self._unpack("<B")

    def u16(self) -> int:
        return self._unpack("<H")

    def i16(self) -> int:
        return self._unpack("<h")

    def u32(self) -> int:
        return self._unpack("<I")

    def i32(self) -> int:
        return self._unpack("<i")

    def u64(self) -> int:
        return self._unpack("<Q")

    def boolean(self) -> bool:
        value = self.u8()
        if value not in (0, 1):
            raise LinderaErrorKind.DESERIALIZE.with_error(f"invalid boolean byte {value}")
        return value == 1

    def raw_bytes(self) -> bytes:
        return self._take(self.u64())

    def string(self) -> str:
        raw = self.raw_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise LinderaErrorKind.DESERIALIZE.with_error(err) from err

    def string_list(self) -> list[str]:
        return [self.string() for _ in range(self.u64())]

    def at_end(self) -> bool:
        return self._pos >= len(self._data)