"""Opening book: popular continuations keyed by Zobrist hash.

Lines are listed most popular first. Within a position, moves keep the
order in which the lines first reach them, so the most popular reply
lands on index 0 of the ordered move list.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from cgn.core.move import Move
from cgn.core.notation import STARTING_FEN, parse_san, position_from_fen
from cgn.core.position import Position

_LOGGER = logging.getLogger(__name__)

OPENING_LINES: tuple[str, ...] = (
    # 1.e4 e5
    "e4 e5 Nf3 Nc6 Bb5 a6 Ba4 Nf6 O-O Be7 Re1 b5 Bb3 d6 c3 O-O h3",
    "e4 e5 Nf3 Nc6 Bb5 Nf6 O-O Nxe4 d4 Nd6 Bxc6 dxc6 dxe5 Nf5 Qxd8+ Kxd8",
    "e4 e5 Nf3 Nc6 Bc4 Bc5 c3 Nf6 d3 d6 O-O O-O",
    "e4 e5 Nf3 Nc6 Bc4 Nf6 Ng5 d5 exd5 Na5 Bb5+ c6 dxc6 bxc6 Be2 h6 Nf3 e4 Ne5",
    "e4 e5 Nf3 Nc6 d4 exd4 Nxd4 Nf6 Nxc6 bxc6 e5 Qe7 Qe2 Nd5 c4",
    "e4 e5 Nf3 Nc6 Nc3 Nf6 Bb5 Bb4 O-O O-O d3 d6",
    "e4 e5 Nf3 Nf6 Nxe5 d6 Nf3 Nxe4 d4 d5 Bd3",
    "e4 e5 Nf3 d6 d4 exd4 Nxd4 Nf6 Nc3 Be7",
    "e4 e5 Nf3 d6 d4 Bg4 dxe5 Bxf3 Qxf3 dxe5 Bc4 Nf6 Qb3 Qe7",
    "e4 e5 Nf3 d6 Bc4 Bg4 Nc3 g6 Nxe5 Bxd1 Bxf7+ Ke7 Nd5#",
    "e4 e5 f4 exf4 Nf3 g5 h4 g4 Ne5",
    "e4 e5 f4 exf4 Bc4 Qh4+ Kf1 b5 Bxb5 Nf6 Nf3 Qh6 d3 Nh5 Nh4 Qg5 Nf5 c6",
    "e4 e5 Nc3 Nf6 f4 d5 fxe5 Nxe4 Nf3",
    "e4 e5 Qh5 Nc6 Bc4 g6 Qf3 Nf6",
    "e4 e5 Qh5 Nc6 Bc4 Nf6 Qxf7#",
    # 1.e4 others
    "e4 c5 Nf3 d6 d4 cxd4 Nxd4 Nf6 Nc3 a6 Be3 e5 Nb3 Be6 f3",
    "e4 c5 Nf3 d6 d4 cxd4 Nxd4 Nf6 Nc3 g6 Be3 Bg7 f3 O-O Qd2 Nc6",
    "e4 c5 Nf3 Nc6 d4 cxd4 Nxd4 Nf6 Nc3 e5 Ndb5 d6 Bg5 a6 Na3 b5",
    "e4 c5 Nf3 e6 d4 cxd4 Nxd4 Nc6 Nc3 Qc7 Be3 a6",
    "e4 c5 Nc3 Nc6 g3 g6 Bg2 Bg7 d3 d6",
    "e4 c5 c3 Nf6 e5 Nd5 d4 cxd4 Nf3 Nc6",
    "e4 e6 d4 d5 Nc3 Bb4 e5 c5 a3 Bxc3+ bxc3 Ne7",
    "e4 e6 d4 d5 Nd2 Nf6 e5 Nfd7 Bd3 c5 c3 Nc6",
    "e4 e6 d4 d5 e5 c5 c3 Nc6 Nf3 Qb6",
    "e4 c6 d4 d5 Nc3 dxe4 Nxe4 Bf5 Ng3 Bg6 h4 h6 Nf3 Nd7",
    "e4 c6 d4 d5 e5 Bf5 Nf3 e6 Be2",
    "e4 d5 exd5 Qxd5 Nc3 Qa5 d4 Nf6 Nf3 c6",
    "e4 d6 d4 Nf6 Nc3 g6 f4 Bg7 Nf3 O-O",
    "e4 Nf6 e5 Nd5 d4 d6 Nf3 Bg4 Be2 e6",
    "e4 g6 d4 Bg7 Nc3 d6",
    # 1.d4
    "d4 d5 c4 e6 Nc3 Nf6 Bg5 Be7 e3 O-O Nf3 h6 Bh4 b6",
    "d4 d5 c4 c6 Nf3 Nf6 Nc3 dxc4 a4 Bf5 e3 e6 Bxc4",
    "d4 d5 c4 dxc4 Nf3 Nf6 e3 e6 Bxc4 c5 O-O a6",
    "d4 Nf6 c4 g6 Nc3 Bg7 e4 d6 Nf3 O-O Be2 e5 O-O Nc6 d5 Ne7",
    "d4 Nf6 c4 e6 Nc3 Bb4 e3 O-O Bd3 d5 Nf3 c5 O-O",
    "d4 Nf6 c4 e6 Nf3 b6 g3 Ba6 b3 Bb4+ Bd2 Be7",
    "d4 Nf6 c4 g6 Nc3 d5 cxd5 Nxd5 e4 Nxc3 bxc3 Bg7 Nf3 c5",
    "d4 Nf6 c4 c5 d5 b5 cxb5 a6 bxa6 Bxa6",
    "d4 Nf6 c4 e6 g3 d5 Bg2 Be7 Nf3 O-O O-O dxc4",
    "d4 f5 g3 Nf6 Bg2 g6 Nf3 Bg7 O-O O-O c4 d6",
    "d4 d5 Nf3 Nf6 Bf4 c5 e3 Nc6 c3",
    "d4 Nf6 Bg5 Ne4 Bf4 c5",
    # flank openings
    "c4 e5 Nc3 Nf6 Nf3 Nc6 g3 d5 cxd5 Nxd5 Bg2 Nb6 O-O Be7",
    "c4 c5 Nf3 Nf6 Nc3 Nc6 g3 g6 Bg2 Bg7 O-O O-O",
    "c4 Nf6 Nc3 e6 e4 d5 e5 d4",
    "Nf3 d5 g3 Nf6 Bg2 c6 O-O Bg4 d3 Nbd7",
    "Nf3 Nf6 c4 g6 Nc3 Bg7 e4 d6 d4 O-O",
    "g3 d5 Bg2 Nf6 Nf3 c6 O-O",
    "b3 e5 Bb2 Nc6 e3 d5 Bb5 Bd6",
    "f4 d5 Nf3 Nf6 e3 g6",
    "f3 e5 g4 Qh4#",
)


class OpeningBook:
    """Immutable map from a position's Zobrist hash to its book moves."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[int, tuple[Move, ...]]) -> None:
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        start_fen: str = STARTING_FEN,
    ) -> OpeningBook:
        """Replay space-separated SAN *lines* from *start_fen*.

        Raises ``ValueError`` if a line contains an illegal move.
        """
        entries: dict[int, list[Move]] = {}
        for line in lines:
            position = position_from_fen(start_fen)
            for san in line.split():
                move = parse_san(position, san)
                known = entries.setdefault(position.zobrist_hash, [])
                if move not in known:
                    known.append(move)
                position.make_move(move)
        return cls({key: tuple(moves) for key, moves in entries.items()})

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, position: object) -> bool:
        return isinstance(position, Position) and position.zobrist_hash in self._entries

    def moves_for(self, position: Position) -> tuple[Move, ...]:
        """Book moves for *position*, most popular first (possibly empty)."""
        return self._entries.get(position.zobrist_hash, ())


@functools.cache
def default_book() -> OpeningBook:
    """The built-in book, built once per process on first use."""
    book = OpeningBook.from_lines(OPENING_LINES)
    _LOGGER.debug("Built opening book with %d positions", len(book))
    return book
