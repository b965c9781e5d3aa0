"""Board - piece placement on an 8x8 board."""

from __future__ import annotations

from cgn.core.enums import Color, PieceType
from cgn.core.piece import Piece
from cgn.core.types import Square, make_square

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def iter_bits(bitboard: int) -> list[Square]:
    """Squares set in *bitboard*, lowest first."""
    squares: list[Square] = []
    while bitboard:
        lsb = bitboard & -bitboard
        squares.append(lsb.bit_length() - 1)
        bitboard ^= lsb
    return squares


class Board:
    """Mutable 64-square board with per-piece bitboards kept in sync."""

    __slots__ = ("_squares", "_bitboards", "_king_squares")

    def __init__(self) -> None:
        self._squares: list[Piece | None] = [None] * 64
        # [color][piece_type] -> bitboard; index 0 holds all pieces of that color.
        self._bitboards: list[list[int]] = [[0] * 7 for _ in range(2)]
        self._king_squares: list[Square | None] = [None, None]

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._squares[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        old = self._squares[sq]
        if old == piece:
            return

        mask = 1 << sq
        if old is not None:
            boards = self._bitboards[old.color]
            boards[old.piece_type] &= ~mask
            boards[0] &= ~mask
            if old.piece_type == PieceType.KING and self._king_squares[old.color] == sq:
                self._king_squares[old.color] = None

        self._squares[sq] = piece
        if piece is None:
            return

        boards = self._bitboards[piece.color]
        boards[piece.piece_type] |= mask
        boards[0] |= mask
        if piece.piece_type == PieceType.KING:
            self._king_squares[piece.color] = sq

    def is_empty(self, sq: Square) -> bool:
        return self._squares[sq] is None

    def pieces_bitboard(self, color: Color, piece_type: PieceType) -> int:
        """Bitboard of squares occupied by *color*'s *piece_type*."""
        return self._bitboards[color][piece_type]

    def occupancy(self, color: Color) -> int:
        """Bitboard of all squares occupied by *color*."""
        return self._bitboards[color][0]

    def king_square(self, color: Color) -> Square:
        sq = self._king_squares[color]
        if sq is None:
            raise ValueError(f"No {color} king on board")
        return sq

    def copy(self) -> Board:
        b = Board()
        b._squares = self._squares.copy()
        b._bitboards = [row.copy() for row in self._bitboards]
        b._king_squares = self._king_squares.copy()
        return b

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position."""
        b = cls()
        for file, piece_type in enumerate(_BACK_RANK):
            b[make_square(file, 0)] = Piece(Color.WHITE, piece_type)
            b[make_square(file, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            b[make_square(file, 6)] = Piece(Color.BLACK, PieceType.PAWN)
            b[make_square(file, 7)] = Piece(Color.BLACK, piece_type)
        return b

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares

    def __repr__(self) -> str:
        rows = []
        for rank in range(7, -1, -1):
            cells = (self[make_square(file, rank)] for file in range(8))
            rows.append(f"{rank + 1} " + " ".join(str(p) if p else "." for p in cells))
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
