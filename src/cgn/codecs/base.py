"""Pieces shared by every codec: algorithm tags, envelope, tag section."""

from __future__ import annotations

import binascii
from collections.abc import Mapping
from enum import IntEnum
from typing import Protocol

from cgn.bitstream import read_string, read_varint, write_string, write_varint
from cgn.core.notation import PGN_RESULT_TOKENS
from cgn.errors import CorruptHeader, SchemaVersionMismatch, TruncatedStream, UnknownAlgorithmTag
from cgn.game import Game

FORMAT_VERSION = 1

# Tag keys common enough to be stored as a single byte (index + 1).
KNOWN_TAG_KEYS: tuple[str, ...] = (
    "Event",
    "Site",
    "Date",
    "Round",
    "White",
    "Black",
    "Result",
    "WhiteElo",
    "BlackElo",
    "ECO",
    "Opening",
    "TimeControl",
    "Termination",
    "UTCDate",
    "UTCTime",
    "WhiteRatingDiff",
    "BlackRatingDiff",
    "Variant",
    "SetUp",
    "FEN",
    "Annotator",
    "PlyCount",
    "EventDate",
    "WhiteTitle",
    "BlackTitle",
)
_KEY_CODES: dict[str, int] = {key: index + 1 for index, key in enumerate(KNOWN_TAG_KEYS)}


class Algorithm(IntEnum):
    """Codec identifiers; the value is the blob's leading tag byte."""

    BINCODE = 0
    HUFFMAN = 1
    DYNAMIC_HUFFMAN = 2
    OPENING_HUFFMAN = 3

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")

    @classmethod
    def parse(cls, text: str) -> Algorithm:
        """Accept a label (``"opening-huffman"``) or a level (``"3"``)."""
        cleaned = text.strip().lower()
        if cleaned.isdigit():
            try:
                return cls(int(cleaned))
            except ValueError:
                raise ValueError(f"Optimization level must be between 0 and 3, got {text}") from None
        for algorithm in cls:
            if algorithm.label == cleaned:
                return algorithm
        names = ", ".join(algorithm.label for algorithm in cls)
        raise ValueError(f"Unknown algorithm {text!r}; expected one of {names}")


class Codec(Protocol):
    """Turns one game into one self-describing blob and back."""

    algorithm: Algorithm

    def encode(self, game: Game) -> bytes: ...

    def decode(self, blob: bytes) -> Game: ...


# -- Envelope ------------------------------------------------------------------


def write_envelope(algorithm: Algorithm, header: bytes, body: bytes = b"") -> bytes:
    """``[tag][version][crc16][varint header length][header][body]``."""
    length = bytearray()
    write_varint(length, len(header))
    prefix = bytes((algorithm, FORMAT_VERSION))
    crc = binascii.crc_hqx(prefix + length + header, 0)
    return prefix + crc.to_bytes(2, "big") + bytes(length) + header + body


def read_envelope(blob: bytes, algorithm: Algorithm) -> tuple[bytes, bytes]:
    """Validate the envelope of *blob*; return ``(header, body)``."""
    if not blob:
        raise UnknownAlgorithmTag("empty blob")
    if blob[0] != algorithm:
        raise UnknownAlgorithmTag(f"tag {blob[0]} is not {algorithm.label} ({int(algorithm)})")
    if len(blob) < 2:
        raise TruncatedStream("blob ends before the version byte")
    if blob[1] != FORMAT_VERSION:
        raise SchemaVersionMismatch(f"version {blob[1]}, expected {FORMAT_VERSION}")
    if len(blob) < 5:
        raise TruncatedStream("blob ends inside the envelope")
    try:
        header_length, offset = read_varint(blob, 4)
    except TruncatedStream:
        raise CorruptHeader("unreadable header length") from None
    end = offset + header_length
    if end > len(blob):
        raise CorruptHeader(f"header length {header_length} exceeds the {len(blob)}-byte blob")
    expected = int.from_bytes(blob[2:4], "big")
    actual = binascii.crc_hqx(blob[:2] + blob[4:end], 0)
    if actual != expected:
        raise CorruptHeader(f"header checksum {actual:#06x} does not match {expected:#06x}")
    return blob[offset:end], blob[end:]


# -- Tag section ---------------------------------------------------------------


def result_code(result: str) -> int:
    return PGN_RESULT_TOKENS.index(result)


def result_from_code(code: int) -> str:
    if not 0 <= code < len(PGN_RESULT_TOKENS):
        raise CorruptHeader(f"unknown result code {code}")
    return PGN_RESULT_TOKENS[code]


def write_tags(buffer: bytearray, tags: Mapping[str, str]) -> None:
    write_varint(buffer, len(tags))
    for key, value in tags.items():
        code = _KEY_CODES.get(key, 0)
        buffer.append(code)
        if not code:
            write_string(buffer, key)
        write_string(buffer, value)


def read_tags(data: bytes, offset: int) -> tuple[dict[str, str], int]:
    count, offset = read_varint(data, offset)
    tags: dict[str, str] = {}
    for _ in range(count):
        if offset >= len(data):
            raise TruncatedStream("tag section ends early")
        code = data[offset]
        offset += 1
        if code > len(KNOWN_TAG_KEYS):
            raise CorruptHeader(f"unknown tag key code {code}")
        if code:
            key = KNOWN_TAG_KEYS[code - 1]
        else:
            key, offset = _read_text(data, offset)
        value, offset = _read_text(data, offset)
        if key in tags:
            raise CorruptHeader(f"duplicate tag {key!r}")
        tags[key] = value
    return tags, offset


def write_tag_section(buffer: bytearray, game: Game) -> None:
    """Result code byte followed by the tag pairs."""
    buffer.append(result_code(game.result))
    write_tags(buffer, game.tags)


def read_tag_section(data: bytes, offset: int) -> tuple[dict[str, str], str, int]:
    if offset >= len(data):
        raise TruncatedStream("header ends before the result code")
    result = result_from_code(data[offset])
    tags, offset = read_tags(data, offset + 1)
    return tags, result, offset


def _read_text(data: bytes, offset: int) -> tuple[str, int]:
    try:
        return read_string(data, offset)
    except UnicodeDecodeError as exc:
        raise CorruptHeader(f"tag text is not UTF-8: {exc}") from None
