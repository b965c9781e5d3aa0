"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from cgn.core.enums import Color, PieceType

# Indexed by PieceType value; white pieces are upper case in FEN.
_LETTERS = " PNBRQK"


@dataclass(frozen=True, slots=True)
class Piece:
    """A colored piece as it sits on a square."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        letter = _LETTERS[self.piece_type]
        return letter if self.color == Color.WHITE else letter.lower()

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Parse a FEN piece letter, e.g. ``"n"`` is a black knight."""
        index = _LETTERS.find(char.upper()) if len(char) == 1 else -1
        if index < 1:
            raise ValueError(f"Invalid piece character: {char!r}")
        color = Color.WHITE if char.isupper() else Color.BLACK
        return cls(color, PieceType(index))
