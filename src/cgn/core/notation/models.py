"""Shared notation-layer data models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class ParsedPgn:
    """One PGN game as raw text tokens: tag pairs, mainline SANs, result."""

    headers: dict[str, str] = field(default_factory=dict)
    sans: list[str] = field(default_factory=list)
    result_token: str = "*"
