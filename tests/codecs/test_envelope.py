"""Tests for the shared blob envelope and tag section."""

import pytest

from cgn.bitstream import read_varint, write_varint
from cgn.codecs import (
    Algorithm,
    DynamicHuffmanCodec,
    OpeningHuffmanCodec,
    StaticHuffmanCodec,
    StructuredCodec,
)
from cgn.codecs.base import (
    read_envelope,
    read_tags,
    write_envelope,
    write_tag_section,
    write_tags,
)
from cgn.errors import (
    CorruptHeader,
    DesyncDetected,
    SchemaVersionMismatch,
    TableMismatch,
    TruncatedStream,
    UnknownAlgorithmTag,
)
from cgn.game import Game

CODECS = [StructuredCodec, StaticHuffmanCodec, DynamicHuffmanCodec, OpeningHuffmanCodec]


def _header_end(blob: bytes) -> int:
    """Offset just past the checksummed header of *blob*."""
    length, offset = read_varint(blob, 4)
    return offset + length


class TestEnvelope:
    def test_layout(self) -> None:
        blob = write_envelope(Algorithm.HUFFMAN, b"\x01\x02", b"\xff")
        assert blob[0] == Algorithm.HUFFMAN
        assert blob[1] == 1
        assert blob[4] == 2
        assert blob[5:] == b"\x01\x02\xff"
        assert read_envelope(blob, Algorithm.HUFFMAN) == (b"\x01\x02", b"\xff")

    def test_empty_blob(self) -> None:
        with pytest.raises(UnknownAlgorithmTag):
            read_envelope(b"", Algorithm.HUFFMAN)

    def test_wrong_tag(self) -> None:
        blob = write_envelope(Algorithm.HUFFMAN, b"")
        with pytest.raises(UnknownAlgorithmTag):
            read_envelope(blob, Algorithm.BINCODE)

    def test_future_version(self) -> None:
        blob = bytearray(write_envelope(Algorithm.HUFFMAN, b"abc"))
        blob[1] = 2
        with pytest.raises(SchemaVersionMismatch):
            read_envelope(bytes(blob), Algorithm.HUFFMAN)

    def test_short_blob(self) -> None:
        with pytest.raises(TruncatedStream):
            read_envelope(bytes((Algorithm.HUFFMAN, 1, 0)), Algorithm.HUFFMAN)

    def test_header_length_past_end(self) -> None:
        blob = bytearray(write_envelope(Algorithm.HUFFMAN, b"abc"))
        blob[4] = 9
        with pytest.raises(CorruptHeader):
            read_envelope(bytes(blob), Algorithm.HUFFMAN)

    @pytest.mark.parametrize("codec_cls", CODECS)
    def test_every_header_byte_flip_detected(self, codec_cls, opera_game: Game) -> None:
        codec = codec_cls()
        blob = codec.encode(opera_game)
        for index in range(_header_end(blob)):
            corrupted = bytearray(blob)
            corrupted[index] ^= 0x01
            with pytest.raises(
                (
                    CorruptHeader,
                    TableMismatch,
                    DesyncDetected,
                    SchemaVersionMismatch,
                    UnknownAlgorithmTag,
                )
            ):
                codec.decode(bytes(corrupted))

    @pytest.mark.parametrize("codec_cls", CODECS)
    def test_version_flip_is_schema_mismatch(self, codec_cls, opera_game: Game) -> None:
        codec = codec_cls()
        corrupted = bytearray(codec.encode(opera_game))
        corrupted[1] = 0
        with pytest.raises(SchemaVersionMismatch):
            codec.decode(bytes(corrupted))


HUFFMAN_CODECS = [StaticHuffmanCodec, DynamicHuffmanCodec, OpeningHuffmanCodec]


def _blob_with_start_fen(codec_cls, fen: str) -> bytes:
    """A checksum-valid one-ply blob whose FEN tag is *fen*."""
    header = bytearray()
    if codec_cls is OpeningHuffmanCodec:
        header.append(10)
    write_varint(header, 1)
    if codec_cls is DynamicHuffmanCodec:
        header.append(0)
    write_tag_section(header, Game(tags={"SetUp": "1", "FEN": fen}))
    return write_envelope(codec_cls.algorithm, bytes(header), b"\x00")


class TestStartPosition:
    @pytest.mark.parametrize("codec_cls", HUFFMAN_CODECS)
    @pytest.mark.parametrize(
        "fen",
        [
            "garbage",
            "8/8/8/8/8/8/8/K7 w - - 0 1",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR x KQkq - 0 1",
        ],
    )
    def test_bad_fen_tag_is_corrupt_header(self, codec_cls, fen: str) -> None:
        with pytest.raises(CorruptHeader, match="invalid start position"):
            codec_cls().decode(_blob_with_start_fen(codec_cls, fen))


class TestTags:
    def test_known_and_custom_keys(self) -> None:
        tags = {"White": "Morphy", "Black": "Duke", "MyTag": "ünïcode"}
        buffer = bytearray()
        write_tags(buffer, tags)
        # White and Black take one key byte each; MyTag is spelled out.
        assert buffer[1] == 5
        decoded, offset = read_tags(bytes(buffer), 0)
        assert decoded == tags
        assert list(decoded) == list(tags)
        assert offset == len(buffer)

    def test_unknown_key_code(self) -> None:
        with pytest.raises(CorruptHeader):
            read_tags(bytes((1, 200, 0)), 0)

    def test_duplicate_key(self) -> None:
        data = bytes((2, 1, 1, ord("a"), 1, 1, ord("b")))
        with pytest.raises(CorruptHeader):
            read_tags(data, 0)

    def test_truncated_section(self) -> None:
        with pytest.raises(TruncatedStream):
            read_tags(bytes((3, 1, 0)), 0)

    def test_invalid_utf8(self) -> None:
        with pytest.raises(CorruptHeader):
            read_tags(bytes((1, 1, 1, 0xFF)), 0)


class TestAlgorithm:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("0", Algorithm.BINCODE),
            ("3", Algorithm.OPENING_HUFFMAN),
            ("huffman", Algorithm.HUFFMAN),
            ("Dynamic-Huffman", Algorithm.DYNAMIC_HUFFMAN),
            ("bincode", Algorithm.BINCODE),
        ],
    )
    def test_parse(self, text: str, expected: Algorithm) -> None:
        assert Algorithm.parse(text) is expected

    @pytest.mark.parametrize("text", ["4", "zip", ""])
    def test_parse_rejects(self, text: str) -> None:
        with pytest.raises(ValueError):
            Algorithm.parse(text)

    def test_labels(self) -> None:
        assert [a.label for a in Algorithm] == [
            "bincode",
            "huffman",
            "dynamic-huffman",
            "opening-huffman",
        ]
