"""Perft tests: the gold standard for move-generator correctness.

Reference values: https://www.chessprogramming.org/Perft_Results
"""

import pytest

from cgn.core.enums import Color, MoveFlag
from cgn.core.move_generator import MoveGenerator
from cgn.core.notation import STARTING_FEN, position_from_fen
from cgn.core.position import Position
from cgn.core.types import parse_square


def perft(position: Position, depth: int) -> int:
    """Count leaf nodes at *depth* using make/unmake."""
    if depth == 0:
        return 1
    nodes = 0
    for move in MoveGenerator(position).generate_legal_moves():
        position.make_move(move)
        nodes += perft(position, depth - 1)
        position.unmake_move(move)
    return nodes


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
POS3 = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"
POS4 = "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1"
POS5 = "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8"


@pytest.mark.parametrize(
    ("fen", "depth", "expected"),
    [
        (STARTING_FEN, 1, 20),
        (STARTING_FEN, 2, 400),
        (KIWIPETE, 1, 48),
        (KIWIPETE, 2, 2_039),
        (POS3, 1, 14),
        (POS3, 2, 191),
        (POS4, 1, 6),
        (POS4, 2, 264),
        (POS5, 1, 44),
        (POS5, 2, 1_486),
    ],
)
def test_perft_shallow(fen: str, depth: int, expected: int) -> None:
    assert perft(position_from_fen(fen), depth) == expected


@pytest.mark.slow
@pytest.mark.parametrize(
    ("fen", "expected"),
    [
        (STARTING_FEN, 8_902),
        (KIWIPETE, 97_862),
        (POS3, 2_812),
        (POS4, 9_467),
        (POS5, 62_379),
    ],
)
def test_perft_depth_3(fen: str, expected: int) -> None:
    assert perft(position_from_fen(fen), 3) == expected


class TestAttacks:
    def test_starting_not_in_check(self) -> None:
        gen = MoveGenerator(position_from_fen(STARTING_FEN))
        assert not gen.is_in_check(Color.WHITE)
        assert not gen.is_in_check(Color.BLACK)

    def test_fools_mate_in_check(self) -> None:
        pos = position_from_fen("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")
        gen = MoveGenerator(pos)
        assert gen.is_in_check(Color.WHITE)
        assert gen.generate_legal_moves() == []

    def test_square_attacked_by_pawn(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        gen = MoveGenerator(pos)
        assert gen.is_square_attacked(parse_square("d3"), Color.WHITE)
        assert not gen.is_square_attacked(parse_square("d4"), Color.WHITE)

    def test_no_castling_through_attacked_square(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/5r2/R3K2R w KQ - 0 1")
        castles = [m for m in MoveGenerator(pos).generate_legal_moves() if m.flag.is_castle]
        assert [m.flag for m in castles] == [MoveFlag.CASTLE_QUEENSIDE]

    def test_no_castling_out_of_check(self) -> None:
        pos = position_from_fen("4k3/4r3/8/8/8/8/8/R3K2R w KQ - 0 1")
        castles = [m for m in MoveGenerator(pos).generate_legal_moves() if m.flag.is_castle]
        assert castles == []
