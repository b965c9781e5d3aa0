"""Command line shell: ``cgn compress | decompress | bench``."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from cgn.archive import is_archive, pack_blobs, unpack_blobs
from cgn.bench import format_report, run_bench
from cgn.codecs import Algorithm
from cgn.core.notation import split_pgn_games
from cgn.dispatcher import decode_batch, encode_batch, peek_algorithm
from cgn.errors import CgnError, UnknownAlgorithmTag
from cgn.pgn_io import parse_game, parse_games, render_games
from cgn.settings import CodecSettings

_LOGGER = logging.getLogger(__name__)


def _algorithm_arg(text: str) -> Algorithm:
    try:
        return Algorithm.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _count_arg(text: str) -> int | None:
    if text.lower() == "all":
        return None
    try:
        count = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number or 'all', got {text!r}") from None
    if count < 1:
        raise argparse.ArgumentTypeError("number of games must be positive")
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cgn",
        description="Compress chess games in PGN into compact binary blobs.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="-v for progress, -vv for codec debug output",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    compress = sub.add_parser("compress", help="compress a PGN file")
    compress.add_argument("input", type=Path)
    compress.add_argument("output", type=Path)
    choice = compress.add_mutually_exclusive_group()
    choice.add_argument(
        "--algorithm",
        type=_algorithm_arg,
        help="opening-huffman, dynamic-huffman, huffman or bincode",
    )
    choice.add_argument(
        "-o",
        dest="level",
        type=_algorithm_arg,
        metavar="LEVEL",
        help="optimization level 0-3 (default 3)",
    )
    compress.add_argument("--opening-threshold", type=int, metavar="K")
    compress.add_argument("--workers", type=int)

    decompress = sub.add_parser("decompress", help="decompress a blob or archive to PGN")
    decompress.add_argument("input", type=Path)
    decompress.add_argument("output", type=Path)
    decompress.add_argument(
        "--algorithm",
        type=_algorithm_arg,
        help="fail unless every blob was written with this algorithm",
    )
    decompress.add_argument("--workers", type=int)

    bench = sub.add_parser("bench", help="benchmark every algorithm on a PGN database")
    bench.add_argument("database", type=Path)
    bench.add_argument(
        "-n",
        dest="count",
        type=_count_arg,
        default=None,
        metavar="N|all",
        help="number of games to use (default all)",
    )
    bench.add_argument("--output", type=Path, help="also write the report to this file")
    bench.add_argument("--opening-threshold", type=int, metavar="K")
    return parser


def _settings(args: argparse.Namespace) -> CodecSettings:
    return CodecSettings.from_env().with_overrides(
        opening_threshold=getattr(args, "opening_threshold", None),
        batch_workers=getattr(args, "workers", None),
    )


def _compress(args: argparse.Namespace) -> None:
    settings = _settings(args)
    algorithm = Algorithm.OPENING_HUFFMAN
    for chosen in (args.algorithm, args.level):
        if chosen is not None:
            algorithm = chosen
    games = parse_games(args.input.read_text(encoding="utf-8"))
    if not games:
        raise ValueError(f"no games found in {args.input}")
    blobs = encode_batch(games, algorithm, settings, workers=settings.batch_workers)
    data = blobs[0] if len(blobs) == 1 else pack_blobs(blobs)
    args.output.write_bytes(data)
    _LOGGER.info(
        "Compressed %d game(s) with %s into %d bytes", len(games), algorithm.label, len(data)
    )


def _decompress(args: argparse.Namespace) -> None:
    settings = _settings(args)
    data = args.input.read_bytes()
    blobs = unpack_blobs(data) if is_archive(data) else [data]
    if args.algorithm is not None:
        for index, blob in enumerate(blobs):
            found = peek_algorithm(blob)
            if found != args.algorithm:
                raise UnknownAlgorithmTag(
                    f"blob {index + 1} was written with {found.label}, "
                    f"not {args.algorithm.label}"
                )
    games = decode_batch(blobs, settings, workers=settings.batch_workers)
    args.output.write_text(render_games(games), encoding="utf-8")
    _LOGGER.info("Decompressed %d game(s) into %s", len(games), args.output)


def _bench(args: argparse.Namespace) -> None:
    settings = _settings(args)
    chunks = split_pgn_games(args.database.read_text(encoding="utf-8"))
    if args.count is not None:
        chunks = chunks[: args.count]
    if not chunks:
        raise ValueError(f"no games found in {args.database}")
    games = [parse_game(chunk) for chunk in chunks]
    pgn_bytes = sum(len(chunk.encode("utf-8")) for chunk in chunks)
    report = format_report(run_bench(games, pgn_bytes, settings=settings), pgn_bytes)
    sys.stdout.write(report)
    if args.output is not None:
        args.output.write_text(report, encoding="utf-8")


_COMMANDS = {
    "compress": _compress,
    "decompress": _decompress,
    "bench": _bench,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        _COMMANDS[args.command](args)
    except CgnError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as exc:
        print(f"error: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    return 0
