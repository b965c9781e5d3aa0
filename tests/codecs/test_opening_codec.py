"""Tests for the opening-aware Huffman codec."""

import pytest

from cgn.bitstream import read_varint
from cgn.codecs import Algorithm, OpeningHuffmanCodec, StaticHuffmanCodec
from cgn.codecs.base import read_envelope, write_envelope
from cgn.errors import CorruptHeader, TableMismatch
from cgn.game import Game
from cgn.settings import CodecSettings


def _codec(threshold: int) -> OpeningHuffmanCodec:
    return OpeningHuffmanCodec(CodecSettings(opening_threshold=threshold))


class TestOpeningHuffmanCodec:
    def test_round_trips_corpus(self, famous_games: list[Game]) -> None:
        codec = OpeningHuffmanCodec()
        for game in famous_games:
            blob = codec.encode(game)
            assert blob[0] == Algorithm.OPENING_HUFFMAN
            assert codec.decode(blob) == game

    def test_default_threshold(self) -> None:
        assert OpeningHuffmanCodec().threshold == 10

    def test_threshold_travels_in_header(self, opera_game: Game) -> None:
        blob = _codec(4).encode(opera_game)
        header, _ = read_envelope(blob, Algorithm.OPENING_HUFFMAN)
        assert header[0] == 4
        assert read_varint(header, 1)[0] == len(opera_game.plies)
        # A decoder configured differently still follows the header.
        assert _codec(30).decode(blob) == opera_game

    @pytest.mark.parametrize("threshold", [1, 10, 40])
    def test_any_threshold_round_trips(self, threshold: int, immortal_game: Game) -> None:
        codec = _codec(threshold)
        assert codec.decode(codec.encode(immortal_game)) == immortal_game

    def test_book_game_beats_static_code(self, famous_games: list[Game]) -> None:
        scholars = famous_games[3]
        assert len(OpeningHuffmanCodec().encode(scholars)) <= len(
            StaticHuffmanCodec().encode(scholars)
        )

    @pytest.mark.parametrize("threshold", [0, 41, 255])
    def test_threshold_out_of_range(self, threshold: int) -> None:
        blob = write_envelope(Algorithm.OPENING_HUFFMAN, bytes((threshold, 0, 0, 0)))
        with pytest.raises(TableMismatch):
            OpeningHuffmanCodec().decode(blob)

    def test_empty_header(self) -> None:
        with pytest.raises(CorruptHeader):
            OpeningHuffmanCodec().decode(write_envelope(Algorithm.OPENING_HUFFMAN, b""))

    def test_trailing_bytes_rejected(self, opera_game: Game) -> None:
        blob = OpeningHuffmanCodec().encode(opera_game) + b"\x00"
        with pytest.raises(TableMismatch):
            OpeningHuffmanCodec().decode(blob)

    @pytest.mark.parametrize("threshold", [0, 41])
    def test_settings_reject_bad_threshold(self, threshold: int) -> None:
        with pytest.raises(ValueError):
            CodecSettings(opening_threshold=threshold)
