"""CGN: compressed game notation for chess games.

Quick start::

    from cgn import Algorithm, decode, encode, parse_game

    game = parse_game(pgn_text)
    blob = encode(game, Algorithm.OPENING_HUFFMAN)
    assert decode(blob) == game
"""

from cgn.archive import is_archive, pack_blobs, unpack_blobs
from cgn.codecs import Algorithm, Codec
from cgn.dispatcher import codec_for, decode, decode_batch, encode, encode_batch
from cgn.errors import (
    CgnError,
    CorruptHeader,
    DesyncDetected,
    InvalidMoveKind,
    SchemaVersionMismatch,
    TableMismatch,
    TruncatedStream,
    UnknownAlgorithmTag,
    UnknownSymbol,
)
from cgn.game import CheckMark, Game, Ply
from cgn.pgn_io import parse_game, parse_games, render_game, render_games
from cgn.settings import CodecSettings

__version__ = "0.1.0"

__all__ = [
    # Model
    "CheckMark",
    "Game",
    "Ply",
    # Codecs
    "Algorithm",
    "Codec",
    "CodecSettings",
    "codec_for",
    "decode",
    "decode_batch",
    "encode",
    "encode_batch",
    # Archive
    "is_archive",
    "pack_blobs",
    "unpack_blobs",
    # PGN
    "parse_game",
    "parse_games",
    "render_game",
    "render_games",
    # Errors
    "CgnError",
    "CorruptHeader",
    "DesyncDetected",
    "InvalidMoveKind",
    "SchemaVersionMismatch",
    "TableMismatch",
    "TruncatedStream",
    "UnknownAlgorithmTag",
    "UnknownSymbol",
]
