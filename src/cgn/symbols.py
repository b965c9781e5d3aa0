"""Move <-> symbol mapping.

A symbol is the index of the played move inside a deterministic ordering of
the legal moves of the current position. Good moves are ranked first, so
low indices dominate and compress well.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from cgn.book import OpeningBook
from cgn.core.enums import Color, MoveFlag, PieceType
from cgn.core.move import Move
from cgn.core.move_generator import PAWN_ATTACKERS, MoveGenerator
from cgn.core.notation import position_from_fen
from cgn.core.position import Position
from cgn.core.types import Square, file_of, rank_of
from cgn.errors import DesyncDetected, InvalidMoveKind
from cgn.game import Game, Ply
from cgn.tables import VOCABULARY_SIZE

_PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 0,
}
_PROMOTION_BONUS = 20_000
_CAPTURE_BONUS = 10_000
_RECAPTURE_BONUS = 2_000
_CASTLE_BONUS = 120
_CHECK_BONUS = 80


@dataclass(slots=True)
class MoveContext:
    """Board state reconstructed so far, plus the last move played."""

    position: Position
    previous: Move | None = None

    @classmethod
    def start(cls, fen: str) -> MoveContext:
        return cls(position_from_fen(fen))

    @classmethod
    def for_game(cls, game: Game) -> MoveContext:
        return cls.start(game.start_fen)

    def push(self, move: Move) -> None:
        self.position.make_move(move)
        self.previous = move


class SymbolMapper:
    """Ranks legal moves and converts between plies and their indices."""

    __slots__ = ("_book",)

    def __init__(self, book: OpeningBook | None = None) -> None:
        self._book = book

    @property
    def book(self) -> OpeningBook | None:
        return self._book

    def ordered_moves(self, context: MoveContext, use_book: bool = False) -> list[Move]:
        position = context.position
        legal = MoveGenerator(position).generate_legal_moves()
        ranked = sorted(
            legal,
            key=lambda move: (-_move_order_score(position, move, context.previous), move.sort_key),
        )
        if not use_book or self._book is None:
            return ranked
        book_moves = [move for move in self._book.moves_for(position) if move in legal]
        if not book_moves:
            return ranked
        return book_moves + [move for move in ranked if move not in book_moves]

    def to_symbol(self, ply: Ply, context: MoveContext, use_book: bool = False) -> int:
        """Index of *ply* in the ordered legal moves of *context*."""
        ordered = self.ordered_moves(context, use_book)
        move = ply.move
        try:
            symbol = ordered.index(move)
        except ValueError:
            raise InvalidMoveKind(
                f"{ply.san!r} ({move}) is not legal in {context.position!r}"
            ) from None
        if symbol >= VOCABULARY_SIZE:
            raise InvalidMoveKind(f"move index {symbol} exceeds the symbol alphabet")
        canonical = Ply.from_move(context.position, move, ordered)
        if canonical != ply:
            raise InvalidMoveKind(
                f"ply {ply.san!r} does not match its canonical form {canonical.san!r} "
                f"(move number {canonical.move_number})"
            )
        return symbol

    def from_symbol(self, symbol: int, context: MoveContext, use_book: bool = False) -> Ply:
        """The ply whose index in the ordered legal moves is *symbol*."""
        ordered = self.ordered_moves(context, use_book)
        if not 0 <= symbol < len(ordered):
            raise DesyncDetected(
                f"symbol {symbol} is out of range for {len(ordered)} legal moves"
            )
        return Ply.from_move(context.position, ordered[symbol], ordered)

    def advance(self, context: MoveContext, ply: Ply) -> MoveContext:
        context.push(ply.move)
        return context


def game_symbols(
    game: Game,
    mapper: SymbolMapper,
    use_book_until: int = 0,
) -> list[int]:
    """Symbols for every ply of *game*; the book is used while
    ``move_number <= use_book_until``."""
    context = MoveContext.for_game(game)
    symbols: list[int] = []
    for ply in game.plies:
        symbols.append(mapper.to_symbol(ply, context, ply.move_number <= use_book_until))
        mapper.advance(context, ply)
    return symbols


def iter_plies(
    symbols: Iterable[int],
    start_fen: str,
    mapper: SymbolMapper,
    use_book_until: int = 0,
) -> Iterator[Ply]:
    context = MoveContext.start(start_fen)
    for symbol in symbols:
        use_book = context.position.fullmove_number <= use_book_until
        ply = mapper.from_symbol(symbol, context, use_book)
        mapper.advance(context, ply)
        yield ply


def game_from_symbols(
    symbols: Iterable[int],
    mapper: SymbolMapper,
    tags: Mapping[str, str] | None = None,
    result: str = "*",
    use_book_until: int = 0,
) -> Game:
    """Inverse of :func:`game_symbols`."""
    tags = dict(tags or {})
    start_fen = Game(tags=tags, result=result).start_fen
    plies = tuple(iter_plies(symbols, start_fen, mapper, use_book_until))
    return Game(tags=tags, plies=plies, result=result)


# -- Move ordering -----------------------------------------------------------


def _move_order_score(position: Position, move: Move, previous: Move | None) -> int:
    board = position.board
    moving_piece = board[move.from_sq]
    if moving_piece is None:
        return 0

    score = 0
    if move.flag == MoveFlag.PROMOTION and move.promotion is not None:
        score += _PROMOTION_BONUS + _PIECE_VALUES[move.promotion]

    target_piece = board[move.to_sq]
    if target_piece is not None:
        score += _CAPTURE_BONUS
        score += 10 * _PIECE_VALUES[target_piece.piece_type]
        score -= _PIECE_VALUES[moving_piece.piece_type]
        if previous is not None and previous.to_sq == move.to_sq:
            score += _RECAPTURE_BONUS
    elif move.flag == MoveFlag.EN_PASSANT:
        score += _CAPTURE_BONUS
        score += 10 * _PIECE_VALUES[PieceType.PAWN]
        score -= _PIECE_VALUES[moving_piece.piece_type]

    if move.flag.is_castle:
        score += _CASTLE_BONUS

    if moving_piece.piece_type not in (PieceType.PAWN, PieceType.KING):
        enemy = moving_piece.color.opposite
        enemy_pawns = board.pieces_bitboard(enemy, PieceType.PAWN)
        if PAWN_ATTACKERS[enemy][move.to_sq] & enemy_pawns:
            score -= _PIECE_VALUES[moving_piece.piece_type] // 2

    score += _piece_square_delta(
        moving_piece.piece_type,
        moving_piece.color,
        move.from_sq,
        move.to_sq,
    )
    if _gives_check(position, move):
        score += _CHECK_BONUS
    return score


def _gives_check(position: Position, move: Move) -> bool:
    mover = position.side_to_move
    position.make_move(move)
    try:
        return MoveGenerator(position).is_in_check(mover.opposite)
    finally:
        position.unmake_move(move)


def _piece_square_delta(
    piece_type: PieceType,
    color: Color,
    from_sq: Square,
    to_sq: Square,
) -> int:
    return _piece_square_bonus(piece_type, color, to_sq) - _piece_square_bonus(
        piece_type, color, from_sq
    )


def _piece_square_bonus(piece_type: PieceType, color: Color, sq: Square) -> int:
    file_idx = file_of(sq)
    rank_idx = rank_of(sq)
    if color == Color.BLACK:
        rank_idx = 7 - rank_idx

    center_dist = abs(file_idx - 3) + abs(rank_idx - 3)

    if piece_type == PieceType.PAWN:
        return rank_idx * 12 - abs(file_idx - 3) * 2
    if piece_type == PieceType.KNIGHT:
        return 28 - center_dist * 8
    if piece_type == PieceType.BISHOP:
        return 22 - center_dist * 5 + rank_idx * 2
    if piece_type == PieceType.ROOK:
        return 10 + rank_idx * 3 - abs(file_idx - 3)
    if piece_type == PieceType.QUEEN:
        return 6 - center_dist * 2

    # King: favor the back rank.
    if rank_idx <= 1:
        return 18 - abs(file_idx - 4) * 2
    return -rank_idx * 8

