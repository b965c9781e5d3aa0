"""The four game codecs and the envelope they share."""

from cgn.codecs.base import KNOWN_TAG_KEYS, Algorithm, Codec
from cgn.codecs.dynamic_huffman import AdaptiveSession, DynamicHuffmanCodec, SessionState
from cgn.codecs.opening_huffman import OpeningHuffmanCodec
from cgn.codecs.static_huffman import StaticHuffmanCodec
from cgn.codecs.structured import StructuredCodec

__all__ = [
    "KNOWN_TAG_KEYS",
    "AdaptiveSession",
    "Algorithm",
    "Codec",
    "DynamicHuffmanCodec",
    "OpeningHuffmanCodec",
    "SessionState",
    "StaticHuffmanCodec",
    "StructuredCodec",
]
