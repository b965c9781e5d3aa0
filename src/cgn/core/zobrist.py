"""Zobrist keys: the opening book identifies positions by these hashes."""

from __future__ import annotations

from typing import Final

from cgn.core.enums import CastlingRights
from cgn.core.piece import Piece
from cgn.core.types import Square

_SEED: Final = 0xA5B3C7D9E1F23412
_MASK_64: Final = 0xFFFFFFFFFFFFFFFF


def _splitmix64(state: int) -> int:
    z = (state + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


# Keys must be identical in every process that decodes a blob, so they are
# derived from a fixed seed rather than a random generator.
_KEYS: Final = tuple(_splitmix64(_SEED + idx) for idx in range(768 + 1 + 16 + 8))
_SIDE_TO_MOVE_OFFSET: Final = 768
_CASTLING_OFFSET: Final = 769
_EN_PASSANT_FILE_OFFSET: Final = 785


def piece_key(piece: Piece, sq: Square) -> int:
    return _KEYS[piece.color * 384 + (piece.piece_type - 1) * 64 + sq]


def side_to_move_key() -> int:
    return _KEYS[_SIDE_TO_MOVE_OFFSET]


def castling_key(rights: CastlingRights) -> int:
    return _KEYS[_CASTLING_OFFSET + int(rights)]


def en_passant_key(sq: Square) -> int:
    """Key for an en passant target; only the file matters."""
    return _KEYS[_EN_PASSANT_FILE_OFFSET + (sq & 7)]
