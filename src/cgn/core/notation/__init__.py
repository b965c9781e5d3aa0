"""Notation package: FEN / SAN / PGN parsing and serialization."""

from cgn.core.notation.fen import STARTING_FEN, position_from_fen, position_to_fen
from cgn.core.notation.models import ParsedPgn
from cgn.core.notation.pgn import (
    PGN_RESULT_TOKENS,
    build_pgn,
    parse_pgn_game,
    pgn_movetext_from_sans,
    split_pgn_games,
)
from cgn.core.notation.san import move_to_san, parse_san, strip_san_suffix

__all__ = [
    "PGN_RESULT_TOKENS",
    "STARTING_FEN",
    "ParsedPgn",
    "build_pgn",
    "move_to_san",
    "parse_pgn_game",
    "parse_san",
    "pgn_movetext_from_sans",
    "position_from_fen",
    "position_to_fen",
    "split_pgn_games",
    "strip_san_suffix",
]
