"""Compact little-endian binary encoding used for wire formats."""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

_COMPACT_MAX_BYTES = 67


class CodecError(ValueError):
    """Raised when input cannot be decoded."""


def _encode_uint(value: int, size: int) -> bytes:
    if value < 0 or value >= 1 << (8 * size):
        raise ValueError(f"value {value} does not fit in {8 * size} unsigned bits")
    return value.to_bytes(size, "little")


def encode_u8(value: int) -> bytes:
    """Encode an unsigned 8-bit integer."""
    return _encode_uint(value, 1)


def encode_u16(value: int) -> bytes:
    """Encode an unsigned 16-bit integer, little-endian."""
    return _encode_uint(value, 2)


def encode_u32(value: int) -> bytes:
    """Encode an unsigned 32-bit integer, little-endian."""
    return _encode_uint(value, 4)


def encode_u64(value: int) -> bytes:
    """Encode an unsigned 64-bit integer, little-endian."""
    return _encode_uint(value, 8)


def encode_compact(value: int) -> bytes:
    """Encode a non-negative integer in the variable-length compact form."""
    if value < 0:
        raise ValueError("compact encoding requires a non-negative integer")
    if value < 1 << 6:
        return bytes([value << 2])
    if value < 1 << 14:
        return ((value << 2) | 0b01).to_bytes(2, "little")
    if value < 1 << 30:
        return ((value << 2) | 0b10).to_bytes(4, "little")
    n_bytes = max(4, (value.bit_length() + 7) // 8)
    if n_bytes > _COMPACT_MAX_BYTES:
        raise ValueError("value too large for compact encoding")
    return bytes([((n_bytes - 4) << 2) | 0b11]) + value.to_bytes(n_bytes, "little")


def encode_bytes(data: bytes) -> bytes:
    """Encode a byte string prefixed with its compact length."""
    return encode_compact(len(data)) + bytes(data)


def encode_option(value: Optional[T], encode_item: Callable[[T], bytes]) -> bytes:
    """Encode an optional value: a 0 byte for None, a 1 byte and the item otherwise."""
    if value is None:
        return b"\x00"
    return b"\x01" + encode_item(value)


def encode_vec(items: Iterable[T], encode_item: Callable[[T], bytes]) -> bytes:
    """Encode a sequence prefixed with its compact length."""
    encoded = [encode_item(item) for item in items]
    return encode_compact(len(encoded)) + b"".join(encoded)


class Reader:
    """Sequential decoder over a byte buffer."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def read(self, n: int) -> bytes:
        """Read exactly ``n`` raw bytes."""
        if n < 0:
            raise ValueError("cannot read a negative number of bytes")
        end = self._pos + n
        if end > len(self._data):
            raise CodecError("unexpected end of input")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def _read_uint(self, size: int) -> int:
        return int.from_bytes(self.read(size), "little")

    def read_u8(self) -> int:
        return self._read_uint(1)

    def read_u16(self) -> int:
        return self._read_uint(2)

    def read_u32(self) -> int:
        return self._read_uint(4)

    def read_u64(self) -> int:
        return self._read_uint(8)

    def read_compact(self) -> int:
        """Read a compact-encoded integer, rejecting non-canonical forms."""
        first = self.read_u8()
        mode = first & 0b11
        if mode == 0b00:
            return first >> 2
        if mode == 0b01:
            value = int.from_bytes(bytes([first]) + self.read(1), "little") >> 2
            if value < 1 << 6:
                raise CodecError("non-canonical compact encoding")
            return value
        if mode == 0b10:
            value = int.from_bytes(bytes([first]) + self.read(3), "little") >> 2
            if value < 1 << 14:
                raise CodecError("non-canonical compact encoding")
            return value
        n_bytes = (first >> 2) + 4
        value = int.from_bytes(self.read(n_bytes), "little")
        if value < 1 << 30 or (n_bytes > 4 and value < 1 << (8 * (n_bytes - 1))):
            raise CodecError("non-canonical compact encoding")
        return value

    def read_bytes(self) -> bytes:
        """Read a byte string prefixed with its compact length."""
        return self.read(self.read_compact())

    def read_option(self, decode_item: Callable[["Reader"], T]) -> Optional[T]:
        """Read an optional value written by :func:`encode_option`."""
        tag = self.read_u8()
        if tag == 0:
            return None
        if tag == 1:
            return decode_item(self)
        raise CodecError(f"invalid option tag {tag}")

    def read_vec(self, decode_item: Callable[["Reader"], T]) -> List[T]:
        """Read a sequence written by :func:`encode_vec`."""
        count = self.read_compact()
        return [decode_item(self) for _ in range(count)]

    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return len(self._data) - self._pos