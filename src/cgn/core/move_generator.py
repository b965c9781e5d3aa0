"""Legal and pseudo-legal move generation + attack detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cgn.core.board import iter_bits
from cgn.core.enums import CastlingRights, Color, MoveFlag, PieceType
from cgn.core.move import Move
from cgn.core.piece import Piece
from cgn.core.types import Square, make_square

if TYPE_CHECKING:
    from cgn.core.position import Position


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)
KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)
BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))

# Promotion pieces in generation order.
PROMOTION_TYPES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)


# -- Precomputed lookup tables ---------------------------------------------


def _on_board(file_idx: int, rank_idx: int) -> bool:
    return 0 <= file_idx < 8 and 0 <= rank_idx < 8


def _build_targets(offsets: tuple[tuple[int, int], ...]) -> tuple[tuple[Square, ...], ...]:
    return tuple(
        tuple(
            make_square((sq & 7) + df, (sq >> 3) + dr)
            for df, dr in offsets
            if _on_board((sq & 7) + df, (sq >> 3) + dr)
        )
        for sq in range(64)
    )


def _build_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    per_square: list[tuple[tuple[Square, ...], ...]] = []
    for sq in range(64):
        rays: list[tuple[Square, ...]] = []
        for df, dr in directions:
            ray: list[Square] = []
            f, r = (sq & 7) + df, (sq >> 3) + dr
            while _on_board(f, r):
                ray.append(make_square(f, r))
                f += df
                r += dr
            rays.append(tuple(ray))
        per_square.append(tuple(rays))
    return tuple(per_square)


def _mask(squares: tuple[Square, ...]) -> int:
    mask = 0
    for sq in squares:
        mask |= 1 << sq
    return mask


def _build_pawn_attackers(color: Color) -> tuple[int, ...]:
    """[sq] -> squares from which a *color* pawn would attack *sq*."""
    back = -1 if color == Color.WHITE else 1
    return tuple(
        _mask(
            tuple(
                make_square((sq & 7) + df, (sq >> 3) + back)
                for df in (-1, 1)
                if _on_board((sq & 7) + df, (sq >> 3) + back)
            )
        )
        for sq in range(64)
    )


KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
KING_TARGETS = _build_targets(KING_OFFSETS)
_KNIGHT_MASKS = tuple(_mask(t) for t in KNIGHT_TARGETS)
_KING_MASKS = tuple(_mask(t) for t in KING_TARGETS)
PAWN_ATTACKERS = (_build_pawn_attackers(Color.WHITE), _build_pawn_attackers(Color.BLACK))

_BISHOP_RAYS = _build_rays(BISHOP_DIRS)
_ROOK_RAYS = _build_rays(ROOK_DIRS)
_QUEEN_RAYS = _build_rays(BISHOP_DIRS + ROOK_DIRS)
_SLIDER_RAYS = {
    PieceType.BISHOP: _BISHOP_RAYS,
    PieceType.ROOK: _ROOK_RAYS,
    PieceType.QUEEN: _QUEEN_RAYS,
}

# Per color: (push direction, start rank, promotion-from rank).
_PAWN_GEOMETRY: tuple[tuple[int, int, int], tuple[int, int, int]] = ((8, 1, 6), (-8, 6, 1))


class MoveGenerator:
    """Generates legal moves for a given :class:`Position`.

    The generator mutates the position via ``make_move`` / ``unmake_move``
    internally but always restores it before returning.
    """

    __slots__ = ("_pos", "_board")

    def __init__(self, position: Position) -> None:
        self._pos = position
        self._board = position.board

    def generate_legal_moves(self) -> list[Move]:
        """All strictly legal moves for the side to move."""
        legal: list[Move] = []
        color = self._pos.side_to_move
        for move in self.generate_pseudo_legal_moves():
            self._pos.make_move(move)
            if not self.is_in_check(color):
                legal.append(move)
            self._pos.unmake_move(move)
        return legal

    def generate_pseudo_legal_moves(self) -> list[Move]:
        """All pseudo-legal moves (may leave own king in check)."""
        moves: list[Move] = []
        color = self._pos.side_to_move
        board = self._board

        for sq in iter_bits(board.pieces_bitboard(color, PieceType.PAWN)):
            self._gen_pawn(sq, color, moves)
        for sq in iter_bits(board.pieces_bitboard(color, PieceType.KNIGHT)):
            self._gen_steps(sq, color, KNIGHT_TARGETS[sq], moves)
        for piece_type, rays in _SLIDER_RAYS.items():
            for sq in iter_bits(board.pieces_bitboard(color, piece_type)):
                self._gen_sliding(sq, color, rays[sq], moves)
        for sq in iter_bits(board.pieces_bitboard(color, PieceType.KING)):
            self._gen_steps(sq, color, KING_TARGETS[sq], moves)
            self._gen_castling(sq, color, moves)
        return moves

    # -- Attack detection ---------------------------------------------------

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked by the opponent?"""
        return self.is_square_attacked(self._board.king_square(color), color.opposite)

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        """Is *sq* attacked by any piece of *by_color*?"""
        board = self._board
        if board.pieces_bitboard(by_color, PieceType.PAWN) & PAWN_ATTACKERS[by_color][sq]:
            return True
        if board.pieces_bitboard(by_color, PieceType.KNIGHT) & _KNIGHT_MASKS[sq]:
            return True
        if board.pieces_bitboard(by_color, PieceType.KING) & _KING_MASKS[sq]:
            return True

        queens = board.pieces_bitboard(by_color, PieceType.QUEEN)
        for rays, slider in ((_BISHOP_RAYS, PieceType.BISHOP), (_ROOK_RAYS, PieceType.ROOK)):
            attackers = queens | board.pieces_bitboard(by_color, slider)
            if not attackers:
                continue
            for ray in rays[sq]:
                for to_sq in ray:
                    if board[to_sq] is None:
                        continue
                    if attackers & (1 << to_sq):
                        return True
                    break
        return False

    # -- Piece-specific generators -----------------------------------------

    def _gen_pawn(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._board
        step, start_rank, promo_rank = _PAWN_GEOMETRY[color]
        rank_idx = sq >> 3
        promotes = rank_idx == promo_rank

        def add(to_sq: Square, flag: MoveFlag = MoveFlag.NORMAL) -> None:
            if promotes:
                for pt in PROMOTION_TYPES:
                    moves.append(Move(sq, to_sq, MoveFlag.PROMOTION, pt))
            else:
                moves.append(Move(sq, to_sq, flag))

        one_step = sq + step
        if not 0 <= one_step < 64:
            return
        if board.is_empty(one_step):
            add(one_step)
            two_step = one_step + step
            if rank_idx == start_rank and board.is_empty(two_step):
                moves.append(Move(sq, two_step, MoveFlag.DOUBLE_PAWN))

        file_idx = sq & 7
        for df in (-1, 1):
            if not 0 <= file_idx + df < 8:
                continue
            cap_sq = one_step + df
            target = board[cap_sq]
            if target is not None and target.color != color:
                add(cap_sq)
            elif cap_sq == self._pos.en_passant:
                moves.append(Move(sq, cap_sq, MoveFlag.EN_PASSANT))

    def _gen_steps(
        self,
        sq: Square,
        color: Color,
        targets: tuple[Square, ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for to_sq in targets:
            target = board[to_sq]
            if target is None or target.color != color:
                moves.append(Move(sq, to_sq))

    def _gen_sliding(
        self,
        sq: Square,
        color: Color,
        rays: tuple[tuple[Square, ...], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    moves.append(Move(sq, to_sq))
                    continue
                if target.color != color:
                    moves.append(Move(sq, to_sq))
                break

    def _gen_castling(self, king_sq: Square, color: Color, moves: list[Move]) -> None:
        rights = self._pos.castling
        if color == Color.WHITE:
            kingside, queenside, base = (
                CastlingRights.WHITE_KINGSIDE,
                CastlingRights.WHITE_QUEENSIDE,
                0,
            )
        else:
            kingside, queenside, base = (
                CastlingRights.BLACK_KINGSIDE,
                CastlingRights.BLACK_QUEENSIDE,
                56,
            )
        if not rights & (kingside | queenside) or king_sq != base + 4:
            return
        if self.is_in_check(color):
            return

        board = self._board
        opponent = color.opposite
        if (
            rights & kingside
            and board[base + 7] == Piece(color, PieceType.ROOK)
            and board.is_empty(base + 5)
            and board.is_empty(base + 6)
            and not self.is_square_attacked(base + 5, opponent)
            and not self.is_square_attacked(base + 6, opponent)
        ):
            moves.append(Move(king_sq, base + 6, MoveFlag.CASTLE_KINGSIDE))
        if (
            rights & queenside
            and board[base] == Piece(color, PieceType.ROOK)
            and board.is_empty(base + 1)
            and board.is_empty(base + 2)
            and board.is_empty(base + 3)
            and not self.is_square_attacked(base + 2, opponent)
            and not self.is_square_attacked(base + 3, opponent)
        ):
            moves.append(Move(king_sq, base + 2, MoveFlag.CASTLE_QUEENSIDE))
