"""Tests for the static Huffman codec."""

import pytest

from cgn.bitstream import write_varint
from cgn.codecs import Algorithm, StaticHuffmanCodec
from cgn.codecs.base import read_envelope, write_envelope
from cgn.codecs.static_huffman import cached_code
from cgn.core.notation import STARTING_FEN
from cgn.errors import CorruptHeader
from cgn.game import Game, Ply
from cgn.symbols import MoveContext, SymbolMapper
from cgn.tables import GENERAL_TABLE, FrequencyTable


def _skewed_table() -> FrequencyTable:
    weights = {symbol: 1 for symbol in range(256)}
    weights[5] = 1000
    return FrequencyTable.from_weights(weights)


def _sixth_ranked_move_game() -> Game:
    context = MoveContext.start(STARTING_FEN)
    ordered = SymbolMapper().ordered_moves(context)
    return Game(plies=(Ply.from_move(context.position, ordered[5], ordered),))


class TestStaticHuffmanCodec:
    def test_round_trips_corpus(self, famous_games: list[Game]) -> None:
        codec = StaticHuffmanCodec()
        for game in famous_games:
            blob = codec.encode(game)
            assert blob[0] == Algorithm.HUFFMAN
            assert codec.decode(blob) == game

    def test_single_favoured_symbol_fits_one_bit(self) -> None:
        codec = StaticHuffmanCodec(_skewed_table())
        blob = codec.encode(_sixth_ranked_move_game())
        header, body = read_envelope(blob, Algorithm.HUFFMAN)
        assert header[0] == 1
        assert body == b"\x00"
        assert codec.decode(blob) == _sixth_ranked_move_game()

    def test_is_deterministic(self, opera_game: Game) -> None:
        assert StaticHuffmanCodec().encode(opera_game) == StaticHuffmanCodec().encode(opera_game)

    def test_code_is_cached_per_table(self) -> None:
        assert cached_code(GENERAL_TABLE) is cached_code(GENERAL_TABLE)

    def test_starts_from_fen(self, fen_game: Game) -> None:
        codec = StaticHuffmanCodec()
        decoded = codec.decode(codec.encode(fen_game))
        assert decoded.plies[0].san == "Kd7"
        assert decoded.plies[0].move_number == 40

    def test_empty_game(self) -> None:
        codec = StaticHuffmanCodec()
        game = Game(tags={"Event": "Forfeit"}, result="1-0")
        blob = codec.encode(game)
        _, body = read_envelope(blob, Algorithm.HUFFMAN)
        assert body == b""
        assert codec.decode(blob) == game

    def test_count_exceeds_data(self) -> None:
        header = bytearray()
        write_varint(header, 100)
        header += bytes((0, 0))
        with pytest.raises(CorruptHeader):
            StaticHuffmanCodec().decode(write_envelope(Algorithm.HUFFMAN, bytes(header), b"\x00"))

    def test_trailing_bytes_rejected(self, opera_game: Game) -> None:
        blob = StaticHuffmanCodec().encode(opera_game) + b"\x00"
        with pytest.raises(CorruptHeader):
            StaticHuffmanCodec().decode(blob)

    def test_extra_header_bytes_rejected(self) -> None:
        header = bytes((0, 0, 0, 7))
        with pytest.raises(CorruptHeader):
            StaticHuffmanCodec().decode(write_envelope(Algorithm.HUFFMAN, header))

    def test_truncated_header(self) -> None:
        with pytest.raises(CorruptHeader):
            StaticHuffmanCodec().decode(write_envelope(Algorithm.HUFFMAN, b"\x00"))
