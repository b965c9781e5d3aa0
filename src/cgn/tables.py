"""Frequency tables over the move-index alphabet.

Both static tables span the whole vocabulary: indices past the explicit
head get weight 1, so any legal move index is always encodable.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence

from cgn.errors import UnknownSymbol

VOCABULARY_SIZE = 256

# Prior mass and per-symbol increment of the adaptive model (format v1).
DYNAMIC_PRIOR_MASS = 4096
DYNAMIC_INCREMENT = 32


class FrequencyTable(Mapping[int, int]):
    """Immutable mapping ``symbol -> positive weight``."""

    __slots__ = ("_weights", "_total", "_hash")

    def __init__(self, weights: Mapping[int, int]) -> None:
        cleaned: dict[int, int] = {}
        for symbol in sorted(weights):
            weight = weights[symbol]
            if symbol < 0:
                raise ValueError(f"Symbols must be non-negative, got {symbol}")
            if weight < 0:
                raise ValueError(f"Negative weight {weight} for symbol {symbol}")
            if weight:
                cleaned[symbol] = weight
        self._weights = cleaned
        self._total = sum(cleaned.values())
        self._hash = hash(tuple(cleaned.items()))

    @classmethod
    def from_weights(cls, weights: Mapping[int, int] | Sequence[int]) -> FrequencyTable:
        """Build from a mapping, or from a sequence indexed by symbol."""
        if isinstance(weights, Mapping):
            return cls(weights)
        return cls(dict(enumerate(weights)))

    def __getitem__(self, symbol: int) -> int:
        return self._weights[symbol]

    def __iter__(self) -> Iterator[int]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        return f"FrequencyTable(symbols={len(self)}, total={self._total})"

    @property
    def total(self) -> int:
        return self._total

    def symbols(self) -> tuple[int, ...]:
        return tuple(self._weights)

    def weight(self, symbol: int) -> int:
        try:
            return self._weights[symbol]
        except KeyError:
            raise UnknownSymbol(f"symbol {symbol} is not in the table") from None

    def scaled(self, mass: int) -> FrequencyTable:
        """Rescale so weights sum to roughly *mass*; every weight stays >= 1."""
        if mass <= 0:
            raise ValueError(f"mass must be positive, got {mass}")
        return FrequencyTable(
            {
                symbol: max(1, weight * mass // self._total)
                for symbol, weight in self._weights.items()
            }
        )


class AdaptiveModel(Mapping[int, int]):
    """Mutable per-session weights for the dynamic codec."""

    __slots__ = ("_weights", "_increment")

    def __init__(
        self,
        prior: FrequencyTable | None = None,
        increment: int = DYNAMIC_INCREMENT,
    ) -> None:
        if prior is None:
            prior = GENERAL_TABLE.scaled(DYNAMIC_PRIOR_MASS)
        self._weights = dict(prior.items())
        self._increment = increment

    def __getitem__(self, symbol: int) -> int:
        return self._weights[symbol]

    def __iter__(self) -> Iterator[int]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def update(self, symbol: int) -> None:
        if symbol not in self._weights:
            raise UnknownSymbol(f"symbol {symbol} is not in the adaptive model")
        self._weights[symbol] += self._increment

    def snapshot(self) -> FrequencyTable:
        return FrequencyTable(self._weights)


def _with_tail(head: tuple[int, ...]) -> FrequencyTable:
    return FrequencyTable.from_weights(head + (1,) * (VOCABULARY_SIZE - len(head)))


# Index 0 is the top-ranked legal move. Weights follow a long-tailed
# distribution over ranked move indices.
_GENERAL_HEAD: tuple[int, ...] = (
    2400, 1500, 1150, 950, 800, 690, 600, 530, 470, 420,
    375, 335, 300, 270, 242, 218, 196, 176, 158, 142,
    128, 115, 103, 92, 82, 73, 65, 58, 52, 46,
    41, 36, 32, 28, 25, 22, 19, 17, 15, 13,
    11, 10, 9, 8, 7, 6, 5, 5, 4, 4,
    3, 3, 3, 3, 3, 3, 2, 2, 2, 2,
    2, 2, 2, 2,
)

# Book moves occupy the lowest indices during the opening.
_OPENING_HEAD: tuple[int, ...] = (
    6000, 1600, 1000, 720, 560, 450, 370, 310, 265, 228,
    197, 172, 151, 133, 117, 104, 92, 82, 73, 65,
    58, 52, 46, 41, 36, 32, 28, 25, 22, 19,
    17, 15, 13, 11, 10, 9, 8, 7, 6, 5,
    5, 4, 4, 3, 3, 3, 3, 2, 2, 2,
    2, 2, 2, 2,
)

GENERAL_TABLE = _with_tail(_GENERAL_HEAD)
OPENING_TABLE = _with_tail(_OPENING_HEAD)
