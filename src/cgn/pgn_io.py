"""Conversion between PGN text and the Move Model."""

from __future__ import annotations

from collections.abc import Iterable

from cgn.core.enums import Color
from cgn.core.move_generator import MoveGenerator
from cgn.core.notation import (
    ParsedPgn,
    build_pgn,
    parse_pgn_game,
    parse_san,
    pgn_movetext_from_sans,
    position_from_fen,
    split_pgn_games,
)
from cgn.game import Game, Ply


def game_from_parsed(parsed: ParsedPgn) -> Game:
    """Replay the main line of *parsed*; raises ``ValueError`` on illegal SAN."""
    tags = dict(parsed.headers)
    start = Game(tags=tags, result=parsed.result_token)
    position = position_from_fen(start.start_fen)
    plies: list[Ply] = []
    for index, san in enumerate(parsed.sans, start=1):
        try:
            move = parse_san(position, san)
        except ValueError as exc:
            raise ValueError(f"ply {index} ({san!r}): {exc}") from None
        legal = MoveGenerator(position).generate_legal_moves()
        plies.append(Ply.from_move(position, move, legal))
        position.make_move(move)
    return Game(tags=tags, plies=tuple(plies), result=parsed.result_token)


def parse_game(pgn_text: str) -> Game:
    """Parse a single-game PGN document."""
    return game_from_parsed(parse_pgn_game(pgn_text))


def parse_games(pgn_text: str) -> list[Game]:
    """Parse every game of a PGN database, in order."""
    return [parse_game(chunk) for chunk in split_pgn_games(pgn_text)]


def render_game(game: Game) -> str:
    if game.plies:
        first = game.plies[0]
        first_move, black_first = first.move_number, first.color == Color.BLACK
    else:
        position = position_from_fen(game.start_fen)
        first_move = position.fullmove_number
        black_first = position.side_to_move == Color.BLACK
    movetext = pgn_movetext_from_sans(
        [ply.san for ply in game.plies], game.result, first_move, black_first
    )
    return build_pgn(game.tags, movetext)


def render_games(games: Iterable[Game]) -> str:
    return "\n".join(render_game(game) for game in games)
