"""Benchmark every codec on a PGN corpus."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from time import perf_counter

from cgn.codecs import Algorithm
from cgn.dispatcher import codec_for
from cgn.errors import DesyncDetected
from cgn.game import Game
from cgn.settings import CodecSettings

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class BenchResult:
    """Totals for one algorithm over the whole corpus."""

    algorithm: Algorithm
    games: int
    total_bytes: int
    ratio: float
    encode_seconds: float
    decode_seconds: float

    @property
    def bytes_per_game(self) -> float:
        return self.total_bytes / self.games if self.games else 0.0


def run_bench(
    games: Sequence[Game],
    pgn_bytes: int,
    algorithms: Sequence[Algorithm] = tuple(Algorithm),
    settings: CodecSettings | None = None,
) -> list[BenchResult]:
    """Encode and decode every game with each algorithm.

    *pgn_bytes* is the size of the source PGN text, used for the ratio.
    Raises :class:`DesyncDetected` if any game fails to round-trip.
    """
    results: list[BenchResult] = []
    for algorithm in algorithms:
        codec = codec_for(algorithm, settings)
        started = perf_counter()
        blobs = [codec.encode(game) for game in games]
        encoded = perf_counter()
        decoded = [codec.decode(blob) for blob in blobs]
        finished = perf_counter()

        for index, (game, back) in enumerate(zip(games, decoded)):
            if back != game:
                raise DesyncDetected(f"{algorithm.label}: game {index + 1} did not round-trip")

        total = sum(len(blob) for blob in blobs)
        result = BenchResult(
            algorithm=algorithm,
            games=len(games),
            total_bytes=total,
            ratio=total / pgn_bytes if pgn_bytes else 0.0,
            encode_seconds=encoded - started,
            decode_seconds=finished - encoded,
        )
        _LOGGER.info(
            "%s: %d games, %d bytes, %.2fs encode, %.2fs decode",
            algorithm.label,
            result.games,
            result.total_bytes,
            result.encode_seconds,
            result.decode_seconds,
        )
        results.append(result)
    return results


def format_report(results: Sequence[BenchResult], pgn_bytes: int) -> str:
    lines = [
        f"PGN size: {pgn_bytes} bytes",
        f"{'algorithm':<16} {'games':>6} {'bytes':>10} {'avg':>8} {'ratio':>7} "
        f"{'encode s':>9} {'decode s':>9}",
    ]
    for result in results:
        lines.append(
            f"{result.algorithm.label:<16} {result.games:>6} {result.total_bytes:>10} "
            f"{result.bytes_per_game:>8.1f} {result.ratio:>7.2%} "
            f"{result.encode_seconds:>9.3f} {result.decode_seconds:>9.3f}"
        )
    return "\n".join(lines) + "\n"
