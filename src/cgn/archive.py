"""Container for several game blobs in one file."""

from __future__ import annotations

from collections.abc import Iterable

from cgn.bitstream import read_varint, write_varint
from cgn.errors import CorruptHeader, SchemaVersionMismatch, TruncatedStream

ARCHIVE_MAGIC = b"CGNA"
ARCHIVE_VERSION = 1


def is_archive(data: bytes) -> bool:
    """True for archives; single blobs start with an algorithm tag 0..3."""
    return data[: len(ARCHIVE_MAGIC)] == ARCHIVE_MAGIC


def pack_blobs(blobs: Iterable[bytes]) -> bytes:
    blobs = list(blobs)
    out = bytearray(ARCHIVE_MAGIC)
    out.append(ARCHIVE_VERSION)
    write_varint(out, len(blobs))
    for blob in blobs:
        write_varint(out, len(blob))
        out += blob
    return bytes(out)


def unpack_blobs(data: bytes) -> list[bytes]:
    if not is_archive(data):
        raise CorruptHeader("missing archive magic")
    offset = len(ARCHIVE_MAGIC)
    if offset >= len(data):
        raise TruncatedStream("archive ends before its version byte")
    if data[offset] != ARCHIVE_VERSION:
        raise SchemaVersionMismatch(
            f"archive version {data[offset]}, expected {ARCHIVE_VERSION}"
        )
    count, offset = read_varint(data, offset + 1)
    blobs: list[bytes] = []
    for index in range(count):
        length, offset = read_varint(data, offset)
        end = offset + length
        if end > len(data):
            raise TruncatedStream(f"blob {index} runs past the end of the archive")
        blobs.append(bytes(data[offset:end]))
        offset = end
    if offset != len(data):
        raise CorruptHeader(f"{len(data) - offset} unexpected bytes after {count} blobs")
    return blobs
