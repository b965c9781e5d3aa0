"""Tests for canonical Huffman codes."""

import pytest

from cgn.bitstream import BitReader, BitWriter
from cgn.errors import TruncatedStream, UnknownSymbol
from cgn.huffman import HuffmanCode
from cgn.tables import GENERAL_TABLE, FrequencyTable


def _is_prefix_free(code: HuffmanCode, symbols: list[int]) -> bool:
    words = []
    for symbol in symbols:
        bits, length = code.code_for(symbol)
        words.append(format(bits, f"0{length}b"))
    return not any(a != b and b.startswith(a) for a in words for b in words)


class TestConstruction:
    def test_canonical_codes(self) -> None:
        code = HuffmanCode.from_table(FrequencyTable.from_weights({0: 5, 1: 2, 2: 1, 3: 1}))
        assert code.lengths == {0: 1, 1: 2, 2: 3, 3: 3}
        assert code.code_for(0) == (0b0, 1)
        assert code.code_for(1) == (0b10, 2)
        assert code.code_for(2) == (0b110, 3)
        assert code.code_for(3) == (0b111, 3)

    def test_ties_favour_lower_symbol(self) -> None:
        code = HuffmanCode.from_table(FrequencyTable.from_weights([1, 1, 1, 1]))
        assert [code.code_for(s) for s in range(4)] == [(0, 2), (1, 2), (2, 2), (3, 2)]

    def test_single_symbol_gets_one_bit(self) -> None:
        code = HuffmanCode.from_table(FrequencyTable.from_weights({9: 4}))
        assert code.code_for(9) == (0, 1)

    def test_empty_table_rejected(self) -> None:
        with pytest.raises(ValueError):
            HuffmanCode.from_table(FrequencyTable.from_weights({}))

    def test_deterministic(self) -> None:
        first = HuffmanCode.from_table(GENERAL_TABLE)
        second = HuffmanCode.from_table(GENERAL_TABLE)
        assert first.lengths == second.lengths

    def test_general_code_is_prefix_free(self) -> None:
        code = HuffmanCode.from_table(GENERAL_TABLE)
        symbols = list(GENERAL_TABLE.symbols())
        assert len(code) == len(symbols)
        assert _is_prefix_free(code, symbols)
        assert code.lengths[0] <= code.lengths[100]

    def test_shortest_code_can_belong_to_any_symbol(self) -> None:
        weights = {symbol: 1 for symbol in range(16)}
        weights[5] = 1000
        code = HuffmanCode.from_table(FrequencyTable.from_weights(weights))
        assert code.code_for(5) == (0, 1)


class TestCoding:
    def test_symbol_sequence(self) -> None:
        code = HuffmanCode.from_table(GENERAL_TABLE)
        symbols = [0, 0, 3, 17, 1, 255, 0, 42]
        writer = BitWriter()
        code.encode_symbols(symbols, writer)
        reader = BitReader(writer.to_bytes())
        assert [code.decode_symbol(reader) for _ in symbols] == symbols
        assert reader.padding_is_clean()

    def test_unknown_symbol(self) -> None:
        code = HuffmanCode.from_table(FrequencyTable.from_weights([1, 1]))
        with pytest.raises(UnknownSymbol):
            code.encode_symbol(2, BitWriter())

    def test_truncated_codeword(self) -> None:
        code = HuffmanCode.from_table(FrequencyTable.from_weights({0: 5, 1: 2, 2: 1, 3: 1}))
        reader = BitReader(b"\xff")
        assert code.decode_symbol(reader) == 3
        assert code.decode_symbol(reader) == 3
        with pytest.raises(TruncatedStream):
            code.decode_symbol(reader)
