"""Deterministic canonical Huffman codes."""

from __future__ import annotations

import heapq
from collections.abc import Iterable, Mapping

from cgn.bitstream import BitReader, BitWriter
from cgn.errors import DesyncDetected, UnknownSymbol

# A tree node is either a leaf symbol or a (zero, one) pair of subtrees.
_Node = int | tuple["_Node", "_Node"]


def _code_lengths(weights: Mapping[int, int]) -> dict[int, int]:
    if len(weights) == 1:
        return {next(iter(weights)): 1}
    # (weight, smallest symbol in subtree, subtree); the first two fields are
    # unique per entry so subtrees are never compared.
    heap: list[tuple[int, int, _Node]] = [
        (weight, symbol, symbol) for symbol, weight in sorted(weights.items())
    ]
    heapq.heapify(heap)
    while len(heap) > 1:
        weight_a, min_a, node_a = heapq.heappop(heap)
        weight_b, min_b, node_b = heapq.heappop(heap)
        heapq.heappush(heap, (weight_a + weight_b, min(min_a, min_b), (node_a, node_b)))

    lengths: dict[int, int] = {}
    stack: list[tuple[_Node, int]] = [(heap[0][2], 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, tuple):
            stack.append((node[0], depth + 1))
            stack.append((node[1], depth + 1))
        else:
            lengths[node] = depth
    return lengths


class HuffmanCode:
    """Prefix code built from symbol weights.

    Code lengths come from a greedy min-weight merge (ties to the lower
    symbol); codewords are then assigned canonically in ``(length, symbol)``
    order, so equal weights always give equal codes.
    """

    __slots__ = ("_codes", "_root")

    def __init__(self, lengths: Mapping[int, int]) -> None:
        codes: dict[int, tuple[int, int]] = {}
        code = 0
        previous_length = 0
        for symbol, length in sorted(lengths.items(), key=lambda item: (item[1], item[0])):
            code <<= length - previous_length
            codes[symbol] = (code, length)
            code += 1
            previous_length = length
        self._codes = codes
        self._root: list | None = None

    @classmethod
    def from_table(cls, table: Mapping[int, int]) -> HuffmanCode:
        if not table:
            raise ValueError("Cannot build a Huffman code from an empty table")
        return cls(_code_lengths(table))

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._codes

    def __len__(self) -> int:
        return len(self._codes)

    @property
    def lengths(self) -> dict[int, int]:
        return {symbol: length for symbol, (_, length) in self._codes.items()}

    def code_for(self, symbol: int) -> tuple[int, int]:
        """Return ``(bits, length)`` for *symbol*."""
        try:
            return self._codes[symbol]
        except KeyError:
            raise UnknownSymbol(f"symbol {symbol} has no codeword") from None

    def encode_symbol(self, symbol: int, writer: BitWriter) -> None:
        bits, length = self.code_for(symbol)
        writer.write_bits(bits, length)

    def encode_symbols(self, symbols: Iterable[int], writer: BitWriter) -> None:
        for symbol in symbols:
            self.encode_symbol(symbol, writer)

    def decode_symbol(self, reader: BitReader) -> int:
        """Walk the decoding tree from the root, one bit at a time."""
        node = self._decoding_tree()
        while True:
            child = node[reader.read_bit()]
            if child is None:
                raise DesyncDetected(f"no codeword ends at bit {reader.position}")
            if isinstance(child, int):
                return child
            node = child

    def _decoding_tree(self) -> list:
        if self._root is None:
            root: list = [None, None]
            for symbol, (bits, length) in self._codes.items():
                node = root
                for shift in range(length - 1, 0, -1):
                    bit = (bits >> shift) & 1
                    if node[bit] is None:
                        node[bit] = [None, None]
                    node = node[bit]
                node[bits & 1] = symbol
            self._root = root
        return self._root
