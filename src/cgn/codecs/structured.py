"""Structured binary codec: every ply field stored verbatim, no board replay."""

from __future__ import annotations

import logging

from cgn.bitstream import read_varint, write_varint
from cgn.codecs.base import (
    Algorithm,
    read_envelope,
    read_tags,
    result_code,
    result_from_code,
    write_envelope,
    write_tags,
)
from cgn.core.enums import Color, MoveFlag, PieceType
from cgn.errors import CorruptHeader, TruncatedStream
from cgn.game import CheckMark, Game, Ply

_LOGGER = logging.getLogger(__name__)

_PLY_FIXED_BYTES = 4


def _pack_ply(buffer: bytearray, ply: Ply) -> None:
    buffer.append(ply.from_sq)
    buffer.append(ply.to_sq)
    buffer.append(
        int(ply.piece) | (int(ply.kind) << 3) | (int(ply.color) << 6) | (int(ply.capture) << 7)
    )
    buffer.append(int(ply.promotion or 0) | (int(ply.check) << 3))
    write_varint(buffer, ply.move_number)
    try:
        san = ply.san.encode("ascii")
    except UnicodeEncodeError:
        raise ValueError(f"SAN must be ASCII, got {ply.san!r}") from None
    write_varint(buffer, len(san))
    buffer += san


def _unpack_ply(data: bytes, offset: int) -> tuple[Ply, int]:
    if offset + _PLY_FIXED_BYTES > len(data):
        raise TruncatedStream("ply record ends early")
    from_sq, to_sq, packed, extra = data[offset : offset + _PLY_FIXED_BYTES]
    offset += _PLY_FIXED_BYTES
    if from_sq > 63 or to_sq > 63:
        raise CorruptHeader(f"square out of range: {from_sq} -> {to_sq}")
    try:
        piece = PieceType(packed & 0b111)
        kind = MoveFlag((packed >> 3) & 0b111)
        promotion = PieceType(extra & 0b111) if extra & 0b111 else None
        check = CheckMark(extra >> 3)
    except ValueError as exc:
        raise CorruptHeader(f"invalid packed ply field: {exc}") from None
    color = Color((packed >> 6) & 1)
    capture = bool(packed >> 7)

    move_number, offset = read_varint(data, offset)
    length, offset = read_varint(data, offset)
    end = offset + length
    if end > len(data):
        raise TruncatedStream("SAN text ends early")
    try:
        san = data[offset:end].decode("ascii")
    except UnicodeDecodeError:
        raise CorruptHeader("SAN text is not ASCII") from None
    ply = Ply(
        san=san,
        from_sq=from_sq,
        to_sq=to_sq,
        piece=piece,
        color=color,
        kind=kind,
        promotion=promotion,
        capture=capture,
        check=check,
        move_number=move_number,
    )
    return ply, end


class StructuredCodec:
    """Fast, uncompressed layout; everything lives in the checksummed header."""

    algorithm = Algorithm.BINCODE

    __slots__ = ()

    def encode(self, game: Game) -> bytes:
        header = bytearray((result_code(game.result),))
        write_tags(header, game.tags)
        write_varint(header, len(game.plies))
        for ply in game.plies:
            _pack_ply(header, ply)
        blob = write_envelope(self.algorithm, bytes(header))
        _LOGGER.debug(
            "%s: encoded %d plies into %d bytes", self.algorithm.label, len(game.plies), len(blob)
        )
        return blob

    def decode(self, blob: bytes) -> Game:
        header, body = read_envelope(blob, self.algorithm)
        if body:
            raise CorruptHeader(f"{len(body)} unexpected bytes after the header")
        if not header:
            raise TruncatedStream("header is empty")
        result = result_from_code(header[0])
        tags, offset = read_tags(header, 1)
        count, offset = read_varint(header, offset)
        plies: list[Ply] = []
        for _ in range(count):
            ply, offset = _unpack_ply(header, offset)
            plies.append(ply)
        if offset != len(header):
            raise CorruptHeader(f"{len(header) - offset} unexpected bytes after the plies")
        try:
            game = Game(tags=tags, plies=tuple(plies), result=result)
        except ValueError as exc:
            raise CorruptHeader(str(exc)) from None
        _LOGGER.debug("%s: decoded %d plies", self.algorithm.label, count)
        return game
