"""Minimal Borsh reader/writer for Token Metadata payloads."""

from __future__ import annotations

import struct


class BorshError(ValueError):
    """Raised when a Borsh buffer cannot be decoded."""


class BorshWriter:
    def __init__(self) -> None:
        self._buffer = bytearray()

    def u8(self, value: int) -> "BorshWriter":
        self._buffer += struct.pack("<B", value)
        return self

    def u16(self, value: int) -> "BorshWriter":
        self._buffer += struct.pack("<H", value)
        return self

    def u32(self, value: int) -> "BorshWriter":
        self._buffer += struct.pack("<I", value)
        return self

    def u64(self, value: int) -> "BorshWriter":
        self._buffer += struct.pack("<Q", value)
        return self

    def bool(self, value: bool) -> "BorshWriter":
        return self.u8(1 if value else 0)

    def fixed(self, value: bytes) -> "BorshWriter":
        self._buffer += value
        return self

    def string(self, value: str) -> "BorshWriter":
        encoded = value.encode("utf-8")
        self.u32(len(encoded))
        self._buffer += encoded
        return self

    def none(self) -> "BorshWriter":
        return self.u8(0)

    def some(self) -> "BorshWriter":
        return self.u8(1)

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)


class BorshReader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _take(self, size: int) -> bytes:
        if self._offset + size > len(self._data):
            raise BorshError(f"Buffer underrun reading {size} bytes at offset {self._offset}")
        chunk = self._data[self._offset : self._offset + size]
        self._offset += size
        return chunk

    def u8(self) -> int:
        return self._take(1)[0]

    def u16(self) -> int:
        return struct.unpack("<H", self._take(2))[0]

    def u32(self) -> int:
        return struct.unpack("<I", self._take(4))[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self._take(8))[0]

    def bool(self) -> bool:
        return self.u8() != 0

    def fixed(self, size: int) -> bytes:
        return self._take(size)

    def string(self) -> str:
        length = self.u32()
        # On-chain strings are zero padded to their maximum length.
        raw = self._take(length)
        try:
            return raw.decode("utf-8").rstrip("\x00")
        except UnicodeDecodeError as exc:
            raise BorshError(f"Invalid UTF-8 string at offset {self._offset - length}") from exc

    def option(self) -> bool:
        return self.u8() == 1


__all__ = ["BorshError", "BorshReader", "BorshWriter"]
