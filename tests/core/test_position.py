"""Tests for Position make/unmake and incremental Zobrist hashing."""

from cgn.core.enums import CastlingRights, Color, MoveFlag, PieceType
from cgn.core.move import Move
from cgn.core.move_generator import MoveGenerator
from cgn.core.notation import STARTING_FEN, parse_san, position_from_fen, position_to_fen
from cgn.core.piece import Piece
from cgn.core.types import D7, E1, E2, parse_square

CASTLING_FEN = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1"
E4 = parse_square("e4")


class TestMakeUnmake:
    def test_side_switches(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        pos.make_move(Move(E2, E4, MoveFlag.DOUBLE_PAWN))
        assert pos.side_to_move == Color.BLACK

    def test_unmake_restores_fen(self) -> None:
        """After make+unmake of every legal move, FEN must match original."""
        pos = position_from_fen(STARTING_FEN)
        fen_before = position_to_fen(pos)
        for move in MoveGenerator(pos).generate_legal_moves():
            pos.make_move(move)
            pos.unmake_move(move)
            assert position_to_fen(pos) == fen_before, f"Failed for {move}"

    def test_en_passant_set_and_replaced(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        pos.make_move(Move(E2, E4, MoveFlag.DOUBLE_PAWN))
        assert pos.en_passant == parse_square("e3")
        pos.make_move(Move(D7, parse_square("d5"), MoveFlag.DOUBLE_PAWN))
        assert pos.en_passant == parse_square("d6")

    def test_capture_restores_piece(self) -> None:
        fen = "rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2"
        pos = position_from_fen(fen)
        d5 = parse_square("d5")
        capture = Move(E4, d5)
        pos.make_move(capture)
        assert pos.board[d5] == Piece(Color.WHITE, PieceType.PAWN)
        pos.unmake_move(capture)
        assert position_to_fen(pos) == fen

    def test_fullmove_number_advances_after_black(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        pos.make_move(parse_san(pos, "e4"))
        assert pos.fullmove_number == 1
        pos.make_move(parse_san(pos, "e5"))
        assert pos.fullmove_number == 2


class TestCastlingRightsUpdate:
    def test_king_move_removes_rights(self) -> None:
        pos = position_from_fen(CASTLING_FEN)
        pos.make_move(Move(E1, parse_square("f1")))
        assert not (pos.castling & CastlingRights.WHITE_BOTH)

    def test_rook_move_removes_one_right(self) -> None:
        pos = position_from_fen(CASTLING_FEN.replace("PPPPPPPP/R", "1PPPPPPP/R"))
        pos.make_move(Move(parse_square("a1"), parse_square("a2")))
        assert not (pos.castling & CastlingRights.WHITE_QUEENSIDE)
        assert pos.castling & CastlingRights.WHITE_KINGSIDE

    def test_castling_both_sides(self) -> None:
        for flag, king_to, rook_to, corner in (
            (MoveFlag.CASTLE_KINGSIDE, "g1", "f1", "h1"),
            (MoveFlag.CASTLE_QUEENSIDE, "c1", "d1", "a1"),
        ):
            pos = position_from_fen(CASTLING_FEN)
            pos.make_move(Move(E1, parse_square(king_to), flag))
            assert pos.board[parse_square(king_to)] == Piece(Color.WHITE, PieceType.KING)
            assert pos.board[parse_square(rook_to)] == Piece(Color.WHITE, PieceType.ROOK)
            assert pos.board[parse_square(corner)] is None


class TestPromotion:
    FEN = "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"

    def test_promote_and_unmake(self) -> None:
        pos = position_from_fen(self.FEN)
        move = Move(parse_square("e7"), parse_square("e8"), MoveFlag.PROMOTION, PieceType.QUEEN)
        pos.make_move(move)
        assert pos.board[parse_square("e8")] == Piece(Color.WHITE, PieceType.QUEEN)
        pos.unmake_move(move)
        assert position_to_fen(pos) == self.FEN


class TestZobrist:
    def test_incremental_hash_matches_fresh_position(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        for san in ("e4", "d5", "exd5", "Qxd5", "Nc3", "Qa5", "d4", "Nf6", "Bd2", "c6"):
            pos.make_move(parse_san(pos, san))
            fresh = position_from_fen(position_to_fen(pos))
            assert pos.zobrist_hash == fresh.zobrist_hash, san

    def test_transpositions_share_a_hash(self) -> None:
        first = position_from_fen(STARTING_FEN)
        second = position_from_fen(STARTING_FEN)
        for san in ("Nf3", "Nf6", "d4"):
            first.make_move(parse_san(first, san))
        for san in ("d4", "Nf6", "Nf3"):
            second.make_move(parse_san(second, san))
        assert first.zobrist_hash == second.zobrist_hash

    def test_en_passant_counts_only_when_capturable(self) -> None:
        base = "rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR w KQkq {} 0 3"
        with_ep = position_from_fen(base.format("f6"))
        without = position_from_fen(base.format("-"))
        assert with_ep.zobrist_hash != without.zobrist_hash

        quiet = "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq {} 0 2"
        assert (
            position_from_fen(quiet.format("e6")).zobrist_hash
            == position_from_fen(quiet.format("-")).zobrist_hash
        )

    def test_unmake_restores_hash(self) -> None:
        pos = position_from_fen(CASTLING_FEN)
        before = pos.zobrist_hash
        for move in MoveGenerator(pos).generate_legal_moves():
            pos.make_move(move)
            assert pos.zobrist_hash != before
            pos.unmake_move(move)
            assert pos.zobrist_hash == before
