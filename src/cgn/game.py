"""Move Model: plies and games, independent of any encoding."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import IntEnum

from cgn.core.enums import Color, MoveFlag, PieceType
from cgn.core.move import Move
from cgn.core.move_generator import MoveGenerator
from cgn.core.notation import PGN_RESULT_TOKENS, STARTING_FEN, move_to_san
from cgn.core.position import Position
from cgn.core.types import Square


class CheckMark(IntEnum):
    """Check annotation carried by a ply."""

    NONE = 0
    CHECK = 1
    CHECKMATE = 2

    @classmethod
    def from_san(cls, san: str) -> CheckMark:
        if san.endswith("#"):
            return cls.CHECKMATE
        if san.endswith("+"):
            return cls.CHECK
        return cls.NONE


@dataclass(frozen=True, slots=True)
class Ply:
    """One half-move, immutable once created."""

    san: str
    from_sq: Square
    to_sq: Square
    piece: PieceType
    color: Color
    kind: MoveFlag = MoveFlag.NORMAL
    promotion: PieceType | None = None
    capture: bool = False
    check: CheckMark = CheckMark.NONE
    move_number: int = 1

    @property
    def move(self) -> Move:
        """The board-level move this ply describes."""
        return Move(self.from_sq, self.to_sq, self.kind, self.promotion)

    @classmethod
    def from_move(
        cls,
        position: Position,
        move: Move,
        legal_moves: list[Move] | None = None,
    ) -> Ply:
        """Canonical ply for a legal *move* played in *position*."""
        piece = position.board[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on the origin square of {move}")
        if legal_moves is None:
            legal_moves = MoveGenerator(position).generate_legal_moves()
        san = move_to_san(position, move, legal_moves)
        return cls(
            san=san,
            from_sq=move.from_sq,
            to_sq=move.to_sq,
            piece=piece.piece_type,
            color=piece.color,
            kind=move.flag,
            promotion=move.promotion,
            capture=(
                move.flag == MoveFlag.EN_PASSANT or position.board[move.to_sq] is not None
            ),
            check=CheckMark.from_san(san),
            move_number=position.fullmove_number,
        )


class TagPairs(Mapping[str, str]):
    """Read-only PGN tag pairs in insertion order."""

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Mapping[str, str] | None = None) -> None:
        self._pairs = dict(pairs or {})

    def __getitem__(self, key: str) -> str:
        return self._pairs[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __hash__(self) -> int:
        return hash(frozenset(self._pairs.items()))

    def __reduce__(self):
        return type(self), (self._pairs,)

    def __repr__(self) -> str:
        return f"TagPairs({self._pairs!r})"


@dataclass(frozen=True)
class Game:
    """Ordered plies of the main line plus PGN tag pairs.

    Invariants:
        - ``tags`` is a read-only copy of the mapping passed in;
        - move numbers never decrease along ``plies``;
        - ``result`` is one of the four PGN result tokens.
    """

    tags: Mapping[str, str] = field(default_factory=TagPairs)
    plies: tuple[Ply, ...] = ()
    result: str = "*"

    def __post_init__(self) -> None:
        if not isinstance(self.tags, TagPairs):
            object.__setattr__(self, "tags", TagPairs(self.tags))
        if not isinstance(self.plies, tuple):
            object.__setattr__(self, "plies", tuple(self.plies))
        if self.result not in PGN_RESULT_TOKENS:
            raise ValueError(f"Invalid PGN result token: {self.result!r}")
        for prev, ply in zip(self.plies, self.plies[1:]):
            if ply.move_number < prev.move_number:
                raise ValueError(
                    f"Move numbers must not decrease: {prev.move_number} then "
                    f"{ply.move_number} at {ply.san!r}"
                )

    @property
    def start_fen(self) -> str:
        """FEN of the position the first ply is played from."""
        fen = self.tags.get("FEN")
        if fen and self.tags.get("SetUp", "1") == "1":
            return fen
        return STARTING_FEN
