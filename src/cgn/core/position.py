"""Position: board plus side to move, castling, en passant and counters, with make/unmake."""

from __future__ import annotations

from dataclasses import dataclass

from cgn.core import zobrist
from cgn.core.board import Board
from cgn.core.enums import CastlingRights, Color, MoveFlag, PieceType
from cgn.core.move import Move
from cgn.core.piece import Piece
from cgn.core.types import Square, file_of, make_square, rank_of

# Rook (from, to) squares per castling flag, indexed by color.
_ROOK_SLIDES: dict[MoveFlag, tuple[tuple[Square, Square], tuple[Square, Square]]] = {
    MoveFlag.CASTLE_KINGSIDE: ((7, 5), (63, 61)),
    MoveFlag.CASTLE_QUEENSIDE: ((0, 3), (56, 59)),
}

_ROOK_CORNERS: dict[Square, CastlingRights] = {
    0: CastlingRights.WHITE_QUEENSIDE,
    7: CastlingRights.WHITE_KINGSIDE,
    56: CastlingRights.BLACK_QUEENSIDE,
    63: CastlingRights.BLACK_KINGSIDE,
}


@dataclass(slots=True)
class _UndoState:
    """Snapshot saved before each move so we can undo it."""

    castling: CastlingRights
    en_passant: Square | None
    halfmove_clock: int
    captured_piece: Piece | None
    zobrist_hash: int


class Position:
    """Full chess position: board + side to move + castling + en passant + clocks.

    Supports :meth:`make_move` / :meth:`unmake_move` via an internal undo
    stack, and keeps an incrementally updated Zobrist hash.
    """

    __slots__ = (
        "board",
        "side_to_move",
        "castling",
        "en_passant",
        "halfmove_clock",
        "fullmove_number",
        "zobrist_hash",
        "_history",
    )

    def __init__(
        self,
        board: Board | None = None,
        side_to_move: Color = Color.WHITE,
        castling: CastlingRights = CastlingRights.ALL,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> None:
        self.board = board if board is not None else Board.initial()
        self.side_to_move = side_to_move
        self.castling = castling
        self.en_passant = en_passant
        self.halfmove_clock = halfmove_clock
        self.fullmove_number = fullmove_number
        self.zobrist_hash = self._compute_zobrist_hash()
        self._history: list[_UndoState] = []

    def make_move(self, move: Move) -> None:
        """Apply *move*, pushing undo state onto the history stack."""
        board = self.board
        piece = board[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on {move.from_sq}")

        capture_sq = move.to_sq
        if move.flag == MoveFlag.EN_PASSANT:
            capture_sq = make_square(file_of(move.to_sq), rank_of(move.from_sq))
        captured = board[capture_sq]

        self._history.append(
            _UndoState(
                castling=self.castling,
                en_passant=self.en_passant,
                halfmove_clock=self.halfmove_clock,
                captured_piece=captured,
                zobrist_hash=self.zobrist_hash,
            )
        )

        key = self.zobrist_hash ^ self._en_passant_key()
        key ^= zobrist.piece_key(piece, move.from_sq)
        board[move.from_sq] = None
        if captured is not None:
            key ^= zobrist.piece_key(captured, capture_sq)
            board[capture_sq] = None

        placed = piece
        if move.flag == MoveFlag.PROMOTION and move.promotion is not None:
            placed = Piece(piece.color, move.promotion)
        board[move.to_sq] = placed
        key ^= zobrist.piece_key(placed, move.to_sq)

        slide = _ROOK_SLIDES.get(move.flag)
        if slide is not None:
            rook_from, rook_to = slide[piece.color]
            rook = board[rook_from]
            assert rook is not None
            board[rook_from] = None
            board[rook_to] = rook
            key ^= zobrist.piece_key(rook, rook_from) ^ zobrist.piece_key(rook, rook_to)

        self.en_passant = None
        if move.flag == MoveFlag.DOUBLE_PAWN:
            self.en_passant = (move.from_sq + move.to_sq) // 2

        castling = self.castling
        if piece.piece_type == PieceType.KING:
            castling &= ~(
                CastlingRights.WHITE_BOTH
                if piece.color == Color.WHITE
                else CastlingRights.BLACK_BOTH
            )
        for sq in (move.from_sq, move.to_sq):
            if sq in _ROOK_CORNERS:
                castling &= ~_ROOK_CORNERS[sq]
        if castling != self.castling:
            key ^= zobrist.castling_key(self.castling) ^ zobrist.castling_key(castling)
            self.castling = castling

        if piece.piece_type == PieceType.PAWN or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if self.side_to_move == Color.BLACK:
            self.fullmove_number += 1

        self.side_to_move = self.side_to_move.opposite
        self.zobrist_hash = key ^ self._en_passant_key() ^ zobrist.side_to_move_key()

    def unmake_move(self, move: Move) -> None:
        """Undo the last :meth:`make_move`."""
        state = self._history.pop()
        board = self.board

        self.side_to_move = self.side_to_move.opposite
        if self.side_to_move == Color.BLACK:
            self.fullmove_number -= 1

        piece = board[move.to_sq]
        assert piece is not None
        if move.flag == MoveFlag.PROMOTION:
            piece = Piece(piece.color, PieceType.PAWN)

        board[move.from_sq] = piece
        if move.flag == MoveFlag.EN_PASSANT:
            board[move.to_sq] = None
            board[make_square(file_of(move.to_sq), rank_of(move.from_sq))] = (
                state.captured_piece
            )
        else:
            board[move.to_sq] = state.captured_piece

        slide = _ROOK_SLIDES.get(move.flag)
        if slide is not None:
            rook_from, rook_to = slide[piece.color]
            board[rook_from] = board[rook_to]
            board[rook_to] = None

        self.castling = state.castling
        self.en_passant = state.en_passant
        self.halfmove_clock = state.halfmove_clock
        self.zobrist_hash = state.zobrist_hash

    def copy(self) -> Position:
        """Deep copy without history."""
        pos = Position(
            board=self.board.copy(),
            side_to_move=self.side_to_move,
            castling=self.castling,
            en_passant=self.en_passant,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
        )
        return pos

    def _compute_zobrist_hash(self) -> int:
        key = zobrist.castling_key(self.castling)
        if self.side_to_move == Color.BLACK:
            key ^= zobrist.side_to_move_key()
        key ^= self._en_passant_key()
        for sq in range(64):
            piece = self.board[sq]
            if piece is not None:
                key ^= zobrist.piece_key(piece, sq)
        return key

    def _en_passant_key(self) -> int:
        """Zobrist term for the en-passant square, 0 unless a pawn can take there."""
        sq = self.en_passant
        if sq is None:
            return 0
        mover = self.side_to_move
        rank = rank_of(sq) + (-1 if mover == Color.WHITE else 1)
        if not 0 <= rank < 8:
            return 0
        pawn = Piece(mover, PieceType.PAWN)
        for file in (file_of(sq) - 1, file_of(sq) + 1):
            if 0 <= file < 8 and self.board[make_square(file, rank)] == pawn:
                return zobrist.en_passant_key(sq)
        return 0
