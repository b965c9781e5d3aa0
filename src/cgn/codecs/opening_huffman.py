"""Opening-aware Huffman codec.

Plies up to move ``K`` are ranked book-first and coded with the opening
table; later plies use plain ranking and the general table. ``K`` travels
in the header, so decoding never depends on local settings.
"""

from __future__ import annotations

import logging

from cgn.bitstream import BitReader, read_varint, write_varint
from cgn.book import OpeningBook, default_book
from cgn.codecs.base import (
    Algorithm,
    read_envelope,
    read_tag_section,
    write_envelope,
    write_tag_section,
)
from cgn.codecs.entropy import decode_plies, encode_plies
from cgn.codecs.static_huffman import cached_code
from cgn.errors import CorruptHeader, TableMismatch, TruncatedStream
from cgn.game import Game
from cgn.huffman import HuffmanCode
from cgn.settings import MAX_OPENING_THRESHOLD, CodecSettings
from cgn.symbols import SymbolMapper
from cgn.tables import GENERAL_TABLE, OPENING_TABLE

_LOGGER = logging.getLogger(__name__)


class _ThresholdSchedule:
    __slots__ = ("_threshold", "_opening", "_general")

    def __init__(self, threshold: int) -> None:
        self._threshold = threshold
        self._opening = cached_code(OPENING_TABLE)
        self._general = cached_code(GENERAL_TABLE)

    def code_for_ply(self, move_number: int) -> tuple[HuffmanCode, bool]:
        if move_number <= self._threshold:
            return self._opening, True
        return self._general, False

    def observe(self, symbol: int) -> None:
        pass


class OpeningHuffmanCodec:
    """Header: K byte, ply count, tag section. Body: codewords, zero padded."""

    algorithm = Algorithm.OPENING_HUFFMAN

    __slots__ = ("_threshold", "_mapper")

    def __init__(
        self,
        settings: CodecSettings | None = None,
        book: OpeningBook | None = None,
    ) -> None:
        settings = settings or CodecSettings()
        self._threshold = settings.opening_threshold
        self._mapper = SymbolMapper(book if book is not None else default_book())

    @property
    def threshold(self) -> int:
        return self._threshold

    def encode(self, game: Game) -> bytes:
        body, symbols = encode_plies(game, self._mapper, _ThresholdSchedule(self._threshold))
        header = bytearray((self._threshold,))
        write_varint(header, len(game.plies))
        write_tag_section(header, game)
        blob = write_envelope(self.algorithm, bytes(header), body)
        _LOGGER.debug(
            "%s: encoded %d plies (K=%d, %d index-0 symbols) into %d bytes",
            self.algorithm.label,
            len(game.plies),
            self._threshold,
            symbols.count(0),
            len(blob),
        )
        return blob

    def decode(self, blob: bytes) -> Game:
        header, body = read_envelope(blob, self.algorithm)
        if not header:
            raise CorruptHeader("header is empty")
        threshold = header[0]
        if not 1 <= threshold <= MAX_OPENING_THRESHOLD:
            raise TableMismatch(
                f"opening threshold {threshold} is outside 1..{MAX_OPENING_THRESHOLD}"
            )
        try:
            count, offset = read_varint(header, 1)
            tags, result, offset = read_tag_section(header, offset)
        except TruncatedStream as exc:
            raise CorruptHeader(f"malformed header: {exc}") from None
        if offset != len(header):
            raise CorruptHeader(f"{len(header) - offset} unexpected bytes after the tags")

        reader = BitReader(body)
        if count > reader.remaining_bits:
            raise CorruptHeader(
                f"{count} plies declared but only {reader.remaining_bits} bits of data"
            )
        start_fen = Game(tags=tags, result=result).start_fen
        plies, _ = decode_plies(
            reader, count, start_fen, self._mapper, _ThresholdSchedule(threshold)
        )
        if not reader.padding_is_clean():
            raise TableMismatch(
                f"{reader.remaining_bits} bits left after {count} plies with K={threshold}"
            )
        _LOGGER.debug("%s: decoded %d plies (K=%d)", self.algorithm.label, count, threshold)
        return Game(tags=tags, plies=plies, result=result)
