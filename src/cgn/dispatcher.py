"""Codec Dispatcher: route games and blobs to the right codec."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ProcessPoolExecutor
from typing import TypeVar

from cgn.codecs import (
    Algorithm,
    Codec,
    DynamicHuffmanCodec,
    OpeningHuffmanCodec,
    StaticHuffmanCodec,
    StructuredCodec,
)
from cgn.errors import UnknownAlgorithmTag
from cgn.game import Game
from cgn.settings import CodecSettings

_LOGGER = logging.getLogger(__name__)

DEFAULT_ALGORITHM = Algorithm.OPENING_HUFFMAN

_T = TypeVar("_T")
_R = TypeVar("_R")


def codec_for(algorithm: Algorithm, settings: CodecSettings | None = None) -> Codec:
    """Fresh codec instance for *algorithm*."""
    if algorithm == Algorithm.BINCODE:
        return StructuredCodec()
    if algorithm == Algorithm.HUFFMAN:
        return StaticHuffmanCodec()
    if algorithm == Algorithm.DYNAMIC_HUFFMAN:
        return DynamicHuffmanCodec()
    if algorithm == Algorithm.OPENING_HUFFMAN:
        return OpeningHuffmanCodec(settings)
    raise UnknownAlgorithmTag(f"no codec for {algorithm!r}")


def peek_algorithm(blob: bytes) -> Algorithm:
    """Algorithm named by the leading tag byte of *blob*."""
    if not blob:
        raise UnknownAlgorithmTag("empty blob")
    try:
        return Algorithm(blob[0])
    except ValueError:
        raise UnknownAlgorithmTag(f"unknown algorithm tag {blob[0]}") from None


def encode(
    game: Game,
    algorithm: Algorithm = DEFAULT_ALGORITHM,
    settings: CodecSettings | None = None,
) -> bytes:
    return codec_for(algorithm, settings).encode(game)


def decode(blob: bytes, settings: CodecSettings | None = None) -> Game:
    """Decode any blob; the tag byte picks the codec.

    Parameters stored in the blob always win over *settings*.
    """
    blob = bytes(blob)
    return codec_for(peek_algorithm(blob), settings).decode(blob)


def encode_batch(
    games: Iterable[Game],
    algorithm: Algorithm = DEFAULT_ALGORITHM,
    settings: CodecSettings | None = None,
    *,
    workers: int | None = None,
) -> list[bytes]:
    """Encode *games* in order, across processes when ``workers > 1``."""
    games = list(games)
    task = functools.partial(encode, algorithm=algorithm, settings=settings)
    return _run(task, games, _worker_count(workers, settings))


def decode_batch(
    blobs: Iterable[bytes],
    settings: CodecSettings | None = None,
    *,
    workers: int | None = None,
) -> list[Game]:
    blobs = [bytes(blob) for blob in blobs]
    task = functools.partial(decode, settings=settings)
    return _run(task, blobs, _worker_count(workers, settings))


def _worker_count(workers: int | None, settings: CodecSettings | None) -> int:
    if workers is not None:
        return max(1, workers)
    return settings.batch_workers if settings is not None else 1


def _run(task: Callable[[_T], _R], items: list[_T], workers: int) -> list[_R]:
    if workers <= 1 or len(items) <= 1:
        return [task(item) for item in items]
    _LOGGER.info("Running %d jobs on %d worker processes", len(items), workers)
    with ProcessPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(task, items))
