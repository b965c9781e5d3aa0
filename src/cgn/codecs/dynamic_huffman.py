"""Adaptive Huffman codec.

Encoder and decoder start from the same prior and apply the same update
after every symbol, so both sides always hold the same code.
"""

from __future__ import annotations

import binascii
import logging
from enum import Enum, auto

from cgn.bitstream import BitReader, read_varint, write_varint
from cgn.codecs.base import (
    Algorithm,
    read_envelope,
    read_tag_section,
    write_envelope,
    write_tag_section,
)
from cgn.codecs.entropy import decode_plies, encode_plies
from cgn.errors import CorruptHeader, DesyncDetected, TruncatedStream
from cgn.game import Game
from cgn.huffman import HuffmanCode
from cgn.symbols import SymbolMapper
from cgn.tables import AdaptiveModel

_LOGGER = logging.getLogger(__name__)


class SessionState(Enum):
    INITIALIZED = auto()
    CODING = auto()
    FINALIZED = auto()


class AdaptiveSession:
    """Per-call model plus the code derived from it."""

    __slots__ = ("_model", "_code", "state")

    def __init__(self, model: AdaptiveModel | None = None) -> None:
        self._model = model if model is not None else AdaptiveModel()
        self._code: HuffmanCode | None = None
        self.state = SessionState.INITIALIZED

    def code_for_ply(self, move_number: int) -> tuple[HuffmanCode, bool]:
        if self.state is SessionState.FINALIZED:
            raise RuntimeError("adaptive session is already finalized")
        self.state = SessionState.CODING
        if self._code is None:
            self._code = HuffmanCode.from_table(self._model)
        return self._code, False

    def observe(self, symbol: int) -> None:
        self.step(symbol)

    def step(self, symbol: int) -> None:
        """Record *symbol* and invalidate the current code."""
        if self.state is not SessionState.CODING:
            raise RuntimeError(f"cannot step an adaptive session in state {self.state.name}")
        self._model.update(symbol)
        self._code = None

    def finish(self) -> None:
        self.state = SessionState.FINALIZED


def symbol_digest(symbols: list[int]) -> int:
    """One-byte checksum of a symbol sequence."""
    return binascii.crc_hqx(bytes(symbols), 0) & 0xFF


class DynamicHuffmanCodec:
    """Header: ply count, symbol digest, tag section. Body: codewords."""

    algorithm = Algorithm.DYNAMIC_HUFFMAN

    __slots__ = ("_mapper",)

    def __init__(self) -> None:
        self._mapper = SymbolMapper()

    def encode(self, game: Game) -> bytes:
        session = AdaptiveSession()
        body, symbols = encode_plies(game, self._mapper, session)
        session.finish()
        header = bytearray()
        write_varint(header, len(game.plies))
        header.append(symbol_digest(symbols))
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
            if offset >= len(header):
                raise TruncatedStream("header ends before the symbol digest")
            digest = header[offset]
            tags, result, offset = read_tag_section(header, offset + 1)
        except TruncatedStream as exc:
            raise CorruptHeader(f"malformed header: {exc}") from None
        if offset != len(header):
            raise CorruptHeader(f"{len(header) - offset} unexpected bytes after the tags")

        reader = BitReader(body)
        if count > reader.remaining_bits:
            raise CorruptHeader(
                f"{count} plies declared but only {reader.remaining_bits} bits of data"
            )
        session = AdaptiveSession()
        start_fen = Game(tags=tags, result=result).start_fen
        plies, symbols = decode_plies(reader, count, start_fen, self._mapper, session)
        session.finish()
        if symbol_digest(symbols) != digest:
            raise DesyncDetected("decoded symbols do not match the stored digest")
        if not reader.padding_is_clean():
            raise DesyncDetected(
                f"{reader.remaining_bits} bits left after {count} plies are not zero padding"
            )
        _LOGGER.debug("%s: decoded %d plies", self.algorithm.label, count)
        return Game(tags=tags, plies=plies, result=result)
