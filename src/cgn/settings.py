"""Codec configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

DEFAULT_OPENING_THRESHOLD = 10
MAX_OPENING_THRESHOLD = 40

ENV_OPENING_THRESHOLD = "CGN_OPENING_THRESHOLD"
ENV_WORKERS = "CGN_WORKERS"


@dataclass(slots=True, frozen=True)
class CodecSettings:
    """Tunable codec parameters."""

    # Last full move coded with the opening table and book.
    opening_threshold: int = DEFAULT_OPENING_THRESHOLD
    # Process count for batch encode/decode; 1 runs in-process.
    batch_workers: int = 1

    def __post_init__(self) -> None:
        if not 1 <= self.opening_threshold <= MAX_OPENING_THRESHOLD:
            raise ValueError(
                f"opening_threshold must be in 1..{MAX_OPENING_THRESHOLD}, "
                f"got {self.opening_threshold}"
            )
        if self.batch_workers < 1:
            raise ValueError(f"batch_workers must be at least 1, got {self.batch_workers}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CodecSettings:
        """Read ``CGN_OPENING_THRESHOLD`` and ``CGN_WORKERS``; unset means default."""
        environ = os.environ if environ is None else environ
        return cls(
            opening_threshold=_int_from(environ, ENV_OPENING_THRESHOLD, DEFAULT_OPENING_THRESHOLD),
            batch_workers=_int_from(environ, ENV_WORKERS, 1),
        )

    def with_overrides(
        self,
        opening_threshold: int | None = None,
        batch_workers: int | None = None,
    ) -> CodecSettings:
        changes: dict[str, int] = {}
        if opening_threshold is not None:
            changes["opening_threshold"] = opening_threshold
        if batch_workers is not None:
            changes["batch_workers"] = batch_workers
        return replace(self, **changes)


def _int_from(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
