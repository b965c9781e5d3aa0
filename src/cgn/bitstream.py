"""Bit-level cursors and LEB128 varints.

A :class:`BitReader` is created by, and owned by, a single decode call; the
read position lives on the cursor, never in module state.
"""

from __future__ import annotations

from cgn.errors import TruncatedStream

_VARINT_MAX_BYTES = 10


class BitWriter:
    """Accumulates bits MSB-first and produces zero-padded bytes."""

    __slots__ = ("_buffer", "_current", "_filled")

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._current = 0
        self._filled = 0  # bits already placed in _current

    def write_bit(self, bit: int) -> None:
        self._current = (self._current << 1) | (bit & 1)
        self._filled += 1
        if self._filled == 8:
            self._buffer.append(self._current)
            self._current = 0
            self._filled = 0

    def write_bits(self, value: int, length: int) -> None:
        """Write the low *length* bits of *value*, most significant first."""
        for shift in range(length - 1, -1, -1):
            self.write_bit(value >> shift)

    @property
    def bit_length(self) -> int:
        return len(self._buffer) * 8 + self._filled

    def to_bytes(self) -> bytes:
        """Return the stream with the final byte padded by zero bits."""
        if not self._filled:
            return bytes(self._buffer)
        return bytes(self._buffer) + bytes([self._current << (8 - self._filled)])


class BitReader:
    """Explicit read cursor over a byte buffer: ``(data, position)``."""

    __slots__ = ("_data", "position")

    def __init__(self, data: bytes | memoryview, position: int = 0) -> None:
        self._data = bytes(data)
        self.position = position  # absolute bit offset

    @property
    def remaining_bits(self) -> int:
        return len(self._data) * 8 - self.position

    def read_bit(self) -> int:
        if self.position >= len(self._data) * 8:
            raise TruncatedStream(f"bitstream ended after {self.position} bits")
        byte = self._data[self.position >> 3]
        bit = (byte >> (7 - (self.position & 7))) & 1
        self.position += 1
        return bit

    def read_bits(self, length: int) -> int:
        value = 0
        for _ in range(length):
            value = (value << 1) | self.read_bit()
        return value

    def padding_is_clean(self) -> bool:
        """True when fewer than eight bits remain and all of them are zero."""
        remaining = self.remaining_bits
        if remaining >= 8:
            return False
        if remaining == 0:
            return True
        return self._data[-1] & ((1 << remaining) - 1) == 0


def write_varint(buffer: bytearray, value: int) -> None:
    """Append *value* as unsigned LEB128."""
    if value < 0:
        raise ValueError(f"varint must be non-negative, got {value}")
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            buffer.append(byte | 0x80)
        else:
            buffer.append(byte)
            return


def read_varint(data: bytes | memoryview, offset: int) -> tuple[int, int]:
    """Read an unsigned LEB128 value at *offset*; return ``(value, new_offset)``."""
    value = 0
    for index in range(_VARINT_MAX_BYTES):
        if offset >= len(data):
            raise TruncatedStream("data ended inside a varint")
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            return value, offset
    raise TruncatedStream("varint is longer than any encoded length")


def write_string(buffer: bytearray, text: str) -> None:
    """Append UTF-8 *text* prefixed by its byte length."""
    raw = text.encode("utf-8")
    write_varint(buffer, len(raw))
    buffer += raw


def read_string(data: bytes | memoryview, offset: int) -> tuple[str, int]:
    length, offset = read_varint(data, offset)
    end = offset + length
    if end > len(data):
        raise TruncatedStream(f"string of {length} bytes runs past the data")
    return bytes(data[offset:end]).decode("utf-8"), end
