"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from cgn.game import Game
from cgn.pgn_io import parse_games

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(scope="session")
def famous_pgn() -> str:
    return (DATA_DIR / "famous_games.pgn").read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def famous_games(famous_pgn: str) -> list[Game]:
    """Every game of the corpus, parsed once per session."""
    return parse_games(famous_pgn)


@pytest.fixture(scope="session")
def opera_game(famous_games: list[Game]) -> Game:
    return famous_games[0]


@pytest.fixture(scope="session")
def immortal_game(famous_games: list[Game]) -> Game:
    return famous_games[1]


@pytest.fixture(scope="session")
def special_moves_game(famous_games: list[Game]) -> Game:
    """En passant and a capturing promotion."""
    return famous_games[5]


@pytest.fixture(scope="session")
def fen_game(famous_games: list[Game]) -> Game:
    """Starts from a set-up position with Black to move."""
    return famous_games[6]
