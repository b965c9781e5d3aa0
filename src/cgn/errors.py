"""Error taxonomy for encode/decode failures.

Every error is terminal for the call that raised it: no partial game or
partial blob is ever returned. Chess-rule and PGN-text problems outside the
codecs raise plain :class:`ValueError`, as the notation layer does.
"""

from __future__ import annotations


class CgnError(Exception):
    """Base class for all codec failures."""

    kind = "CgnError"

    def __str__(self) -> str:
        message = super().__str__()
        return f"{self.kind}: {message}" if message else self.kind


class InvalidMoveKind(CgnError):
    """A ply cannot be mapped to a symbol in its position."""

    kind = "InvalidMoveKind"


class UnknownSymbol(CgnError):
    """A symbol is absent from the frequency table in use."""

    kind = "UnknownSymbol"


class TruncatedStream(CgnError):
    """The data ended in the middle of a value or codeword."""

    kind = "TruncatedStream"


class CorruptHeader(CgnError):
    """Header checksum, lengths or counts do not match the data."""

    kind = "CorruptHeader"


class TableMismatch(CgnError):
    """The opening threshold in the header does not fit the stream."""

    kind = "TableMismatch"


class DesyncDetected(CgnError):
    """Decoded symbols disagree with the integrity data or the board."""

    kind = "DesyncDetected"


class SchemaVersionMismatch(CgnError):
    """The blob's format version is not the one this decoder reads."""

    kind = "SchemaVersionMismatch"


class UnknownAlgorithmTag(CgnError):
    """The leading tag byte names no known codec."""

    kind = "UnknownAlgorithmTag"
