"""SAN (Standard Algebraic Notation) conversion and parsing."""

from __future__ import annotations

from cgn.core.enums import MoveFlag, PieceType
from cgn.core.move import Move
from cgn.core.move_generator import MoveGenerator
from cgn.core.position import Position
from cgn.core.types import file_of, parse_square, rank_of, square_name

SAN_PIECE: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_SAN_PIECE_REV: dict[str, PieceType] = {v: k for k, v in SAN_PIECE.items()}


def strip_san_suffix(san: str) -> str:
    """Drop check/mate markers and annotation glyphs (``Nf3+!?`` → ``Nf3``)."""
    return san.rstrip("+#!?")


def move_to_san(
    position: Position,
    move: Move,
    legal_moves: list[Move] | None = None,
) -> str:
    """Convert a legal *move* to SAN given the *position* before the move.

    *legal_moves* may be passed when the caller already generated them; it
    is only needed for disambiguation.
    """
    board = position.board
    piece = board[move.from_sq]
    assert piece is not None

    if move.flag == MoveFlag.CASTLE_KINGSIDE:
        san = "O-O"
    elif move.flag == MoveFlag.CASTLE_QUEENSIDE:
        san = "O-O-O"
    else:
        san = ""
        is_capture = board[move.to_sq] is not None or move.flag == MoveFlag.EN_PASSANT

        if piece.piece_type == PieceType.PAWN:
            if is_capture:
                san += chr(ord("a") + file_of(move.from_sq))
        else:
            san += SAN_PIECE[piece.piece_type]
            if legal_moves is None:
                legal_moves = MoveGenerator(position).generate_legal_moves()
            rivals = [
                m.from_sq
                for m in legal_moves
                if m.to_sq == move.to_sq
                and m.from_sq != move.from_sq
                and board[m.from_sq] == piece
            ]
            if rivals:
                if all(file_of(sq) != file_of(move.from_sq) for sq in rivals):
                    san += chr(ord("a") + file_of(move.from_sq))
                elif all(rank_of(sq) != rank_of(move.from_sq) for sq in rivals):
                    san += str(rank_of(move.from_sq) + 1)
                else:
                    san += square_name(move.from_sq)

        if is_capture:
            san += "x"
        san += square_name(move.to_sq)

        if move.flag == MoveFlag.PROMOTION and move.promotion is not None:
            san += "=" + SAN_PIECE[move.promotion]

    position.make_move(move)
    gen_after = MoveGenerator(position)
    if gen_after.is_in_check(position.side_to_move):
        san += "+" if gen_after.generate_legal_moves() else "#"
    position.unmake_move(move)
    return san


def parse_san(position: Position, san: str) -> Move:
    """Parse a SAN string into a :class:`Move` given the current *position*."""
    legal = MoveGenerator(position).generate_legal_moves()
    clean = strip_san_suffix(san)

    if clean in ("O-O", "0-0", "O-O-O", "0-0-0"):
        flag = MoveFlag.CASTLE_KINGSIDE if len(clean) == 3 else MoveFlag.CASTLE_QUEENSIDE
        for m in legal:
            if m.flag == flag:
                return m
        raise ValueError(f"Illegal move: {san}")

    promotion: PieceType | None = None
    if "=" in clean:
        promotion = _SAN_PIECE_REV.get(clean[-1])
        if promotion is None:
            raise ValueError(f"Invalid promotion piece: {san}")
        clean = clean[:-2]

    try:
        to_sq = parse_square(clean[-2:])
    except ValueError:
        raise ValueError(f"Invalid SAN move: {san}") from None
    clean = clean[:-2].removesuffix("x")

    piece_type = PieceType.PAWN
    if clean and clean[0] in _SAN_PIECE_REV:
        piece_type = _SAN_PIECE_REV[clean[0]]
        clean = clean[1:]

    from_file: int | None = None
    from_rank: int | None = None
    for ch in clean:
        if "a" <= ch <= "h":
            from_file = ord(ch) - ord("a")
        elif "1" <= ch <= "8":
            from_rank = int(ch) - 1
        else:
            raise ValueError(f"Invalid SAN move: {san}")

    candidates: list[Move] = []
    for m in legal:
        p = position.board[m.from_sq]
        if p is None or p.piece_type != piece_type or m.to_sq != to_sq:
            continue
        if m.promotion != promotion:
            continue
        if from_file is not None and file_of(m.from_sq) != from_file:
            continue
        if from_rank is not None and rank_of(m.from_sq) != from_rank:
            continue
        candidates.append(m)

    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise ValueError(f"Illegal move: {san}")
    raise ValueError(f"Ambiguous move: {san} -> {[str(m) for m in candidates]}")
