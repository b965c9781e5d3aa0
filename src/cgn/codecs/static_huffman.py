"""Static Huffman codec: one fixed code for every ply."""

from __future__ import annotations

import functools
import logging

from cgn.bitstream import BitReader, read_varint, write_varint
from cgn.codecs.base import (
    Algorithm,
    read_envelope,
    read_tag_section,
    write_envelope,
    write_tag_section,
)
from cgn.codecs.entropy import decode_plies, encode_plies
from cgn.errors import CorruptHeader, TruncatedStream
from cgn.game import Game
from cgn.huffman import HuffmanCode
from cgn.symbols import SymbolMapper
from cgn.tables import GENERAL_TABLE, FrequencyTable

_LOGGER = logging.getLogger(__name__)


@functools.cache
def cached_code(table: FrequencyTable) -> HuffmanCode:
    """Huffman code for an immutable table, built once per process."""
    return HuffmanCode.from_table(table)


class _FixedSchedule:
    __slots__ = ("_code",)

    def __init__(self, code: HuffmanCode) -> None:
        self._code = code

    def code_for_ply(self, move_number: int) -> tuple[HuffmanCode, bool]:
        return self._code, False

    def observe(self, symbol: int) -> None:
        pass


class StaticHuffmanCodec:
    """Header: ply count and tag section. Body: codewords, zero padded."""

    algorithm = Algorithm.HUFFMAN

    __slots__ = ("_schedule", "_mapper")

    def __init__(self, table: FrequencyTable = GENERAL_TABLE) -> None:
        self._schedule = _FixedSchedule(cached_code(table))
        self._mapper = SymbolMapper()

    def encode(self, game: Game) -> bytes:
        body, _ = encode_plies(game, self._mapper, self._schedule)
        header = bytearray()
        write_varint(header, len(game.plies))
        write_tag_section(header, game)
        blob = write_envelope(self.algorithm, bytes(header), body)
        _LOGGER.debug(
            "%s: encoded %d plies into %d bytes", self.algorithm.label, len(game.plies), len(blob)
        )
        return blob

    def decode(self, blob: bytes) -> Game:
        header, body = read_envelope(blob, self.algorithm)
        try:
            count, offset = read_varint(header, 0)
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
        plies, _ = decode_plies(reader, count, start_fen, self._mapper, self._schedule)
        if not reader.padding_is_clean():
            raise CorruptHeader(
                f"{reader.remaining_bits} bits left after {count} plies are not zero padding"
            )
        _LOGGER.debug("%s: decoded %d plies", self.algorithm.label, count)
        return Game(tags=tags, plies=plies, result=result)
