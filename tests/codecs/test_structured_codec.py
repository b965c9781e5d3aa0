"""Tests for the structured (uncompressed) codec."""

import dataclasses

import pytest

from cgn.codecs import Algorithm, StructuredCodec
from cgn.codecs.base import read_envelope, write_envelope
from cgn.errors import CorruptHeader, TruncatedStream
from cgn.game import Game


class TestStructuredCodec:
    def test_round_trips_corpus(self, famous_games: list[Game]) -> None:
        codec = StructuredCodec()
        for game in famous_games:
            assert codec.decode(codec.encode(game)) == game

    def test_body_is_empty(self, opera_game: Game) -> None:
        blob = StructuredCodec().encode(opera_game)
        assert blob[0] == Algorithm.BINCODE
        _, body = read_envelope(blob, Algorithm.BINCODE)
        assert body == b""

    def test_stores_plies_verbatim(self, opera_game: Game) -> None:
        # No board replay: even an inconsistent ply survives unchanged.
        odd = dataclasses.replace(opera_game.plies[0], san="e4!?")
        game = Game(tags={}, plies=(odd,), result="*")
        assert StructuredCodec().decode(StructuredCodec().encode(game)) == game

    def test_empty_game(self) -> None:
        game = Game(tags={"Event": "Empty"}, result="1/2-1/2")
        assert StructuredCodec().decode(StructuredCodec().encode(game)) == game

    def test_trailing_body_rejected(self, opera_game: Game) -> None:
        blob = StructuredCodec().encode(opera_game) + b"\x00"
        with pytest.raises(CorruptHeader):
            StructuredCodec().decode(blob)

    def test_empty_header_rejected(self) -> None:
        with pytest.raises(TruncatedStream):
            StructuredCodec().decode(write_envelope(Algorithm.BINCODE, b""))

    def test_square_out_of_range(self) -> None:
        # result, no tags, one ply from square 64
        header = bytes((0, 0, 1, 64, 0, 1, 0, 1, 0))
        with pytest.raises(CorruptHeader):
            StructuredCodec().decode(write_envelope(Algorithm.BINCODE, header))

    def test_bad_result_code(self) -> None:
        with pytest.raises(CorruptHeader):
            StructuredCodec().decode(write_envelope(Algorithm.BINCODE, bytes((9, 0, 0))))

    def test_decreasing_move_numbers_rejected(self, opera_game: Game) -> None:
        first, second = opera_game.plies[:2]
        blob = StructuredCodec().encode(Game(plies=(first, second)))
        header, _ = read_envelope(blob, Algorithm.BINCODE)
        patched = bytearray(header)
        # The second record ends with its move number, SAN length and SAN.
        second_record = patched.rindex(second.san.encode()) - 2
        assert patched[second_record] == 1
        patched[second_record] = 0
        with pytest.raises(CorruptHeader):
            StructuredCodec().decode(write_envelope(Algorithm.BINCODE, bytes(patched)))

    def test_non_ascii_san_rejected(self, opera_game: Game) -> None:
        odd = dataclasses.replace(opera_game.plies[0], san="é4")
        with pytest.raises(ValueError):
            StructuredCodec().encode(Game(plies=(odd,)))
