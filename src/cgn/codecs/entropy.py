"""Move-stream loop shared by the Huffman codecs.

Each codec supplies a :class:`CodeSchedule` that picks the code (and whether
the opening book applies) for the next ply, and is told every symbol once
it has been coded.
"""

from __future__ import annotations

from typing import Protocol

from cgn.bitstream import BitReader, BitWriter
from cgn.errors import CorruptHeader
from cgn.game import Game, Ply
from cgn.huffman import HuffmanCode
from cgn.symbols import MoveContext, SymbolMapper


class CodeSchedule(Protocol):
    def code_for_ply(self, move_number: int) -> tuple[HuffmanCode, bool]: ...

    def observe(self, symbol: int) -> None: ...


def encode_plies(
    game: Game,
    mapper: SymbolMapper,
    schedule: CodeSchedule,
) -> tuple[bytes, list[int]]:
    """Return the padded bitstream for *game* and the symbols it carries."""
    context = MoveContext.for_game(game)
    writer = BitWriter()
    symbols: list[int] = []
    for ply in game.plies:
        code, use_book = schedule.code_for_ply(ply.move_number)
        symbol = mapper.to_symbol(ply, context, use_book)
        code.encode_symbol(symbol, writer)
        schedule.observe(symbol)
        symbols.append(symbol)
        mapper.advance(context, ply)
    return writer.to_bytes(), symbols


def decode_plies(
    reader: BitReader,
    count: int,
    start_fen: str,
    mapper: SymbolMapper,
    schedule: CodeSchedule,
) -> tuple[list[Ply], list[int]]:
    """Decode *count* plies; the reader is left just past the last codeword."""
    try:
        context = MoveContext.start(start_fen)
    except ValueError as exc:
        raise CorruptHeader(f"invalid start position: {exc}") from None
    plies: list[Ply] = []
    symbols: list[int] = []
    for _ in range(count):
        code, use_book = schedule.code_for_ply(context.position.fullmove_number)
        symbol = code.decode_symbol(reader)
        schedule.observe(symbol)
        ply = mapper.from_symbol(symbol, context, use_book)
        plies.append(ply)
        symbols.append(symbol)
        mapper.advance(context, ply)
    return plies, symbols
