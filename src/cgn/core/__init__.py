"""Board model used to rank moves: positions, legal moves, FEN and SAN.

Everything the codecs replay lives here::

    from cgn.core import MoveGenerator, position_from_fen, STARTING_FEN

    pos = position_from_fen(STARTING_FEN)
    legal = MoveGenerator(pos).generate_legal_moves()
"""

from cgn.core.board import Board
from cgn.core.enums import CastlingRights, Color, MoveFlag, PieceType
from cgn.core.move import Move
from cgn.core.move_generator import MoveGenerator
from cgn.core.notation import (
    STARTING_FEN,
    move_to_san,
    parse_san,
    position_from_fen,
    position_to_fen,
)
from cgn.core.piece import Piece
from cgn.core.position import Position
from cgn.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "MoveFlag",
    "PieceType",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "Board",
    "Move",
    "MoveGenerator",
    "Piece",
    "Position",
    # Notation
    "STARTING_FEN",
    "move_to_san",
    "parse_san",
    "position_from_fen",
    "position_to_fen",
]
