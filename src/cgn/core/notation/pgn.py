"""PGN text parsing and serialization helpers."""

from __future__ import annotations

import re
from collections.abc import Mapping

from cgn.core.notation.models import ParsedPgn

_PGN_HEADER_RE = re.compile(r'^\[(\w+)\s+"((?:[^"\\]|\\.)*)"\]\s*$')
_MOVE_NUMBER_RE = re.compile(r"^\d+\.(?:\.\.)?$")
_MOVE_NUMBER_PREFIX_RE = re.compile(r"^\d+\.+")
PGN_RESULT_TOKENS = ("*", "1-0", "0-1", "1/2-1/2")


def pgn_movetext_from_sans(
    sans: list[str],
    result_token: str,
    first_move: int = 1,
    black_first: bool = False,
) -> str:
    """Build PGN movetext from SAN moves and a result token.

    *first_move* / *black_first* describe games set up from a FEN, where the
    first ply may be Black's (written ``12... Nf6``).
    """
    parts: list[str] = []
    move_number = first_move
    for ply, san in enumerate(sans):
        white_to_move = (ply % 2 == 0) != black_first
        if white_to_move:
            parts.append(f"{move_number}.")
        elif ply == 0:
            parts.append(f"{move_number}...")
        parts.append(san)
        if not white_to_move:
            move_number += 1
    parts.append(result_token)
    return " ".join(parts)


def build_pgn(headers: Mapping[str, str], movetext: str) -> str:
    """Build a single-game PGN document from tag pairs and movetext."""
    lines: list[str] = []
    for key, value in headers.items():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        lines.append(f'[{key} "{escaped}"]')
    if lines:
        lines.append("")
    lines.append(movetext)
    lines.append("")
    return "\n".join(lines)


def _parse_movetext_mainline(movetext: str) -> tuple[list[str], str]:
    """Return mainline SAN tokens plus the result token.

    Comments, NAGs and recursive variations are skipped.
    """
    sans: list[str] = []
    result_token = "*"
    variation_depth = 0
    idx = 0
    total = len(movetext)

    while idx < total:
        ch = movetext[idx]

        if ch.isspace():
            idx += 1
            continue

        if ch == "{":
            end = movetext.find("}", idx + 1)
            idx = total if end < 0 else end + 1
            continue

        if ch == ";":
            end = movetext.find("\n", idx + 1)
            idx = total if end < 0 else end
            continue

        if ch == "(":
            variation_depth += 1
            idx += 1
            continue

        if ch == ")":
            variation_depth = max(0, variation_depth - 1)
            idx += 1
            continue

        token_end = idx
        while (
            token_end < total
            and not movetext[token_end].isspace()
            and movetext[token_end] not in "{};()"
        ):
            token_end += 1
        token = movetext[idx:token_end]
        idx = token_end

        if variation_depth > 0:
            continue
        if token in PGN_RESULT_TOKENS:
            result_token = token
            continue
        if _MOVE_NUMBER_RE.match(token) or token.startswith("$"):
            continue

        token = _MOVE_NUMBER_PREFIX_RE.sub("", token).lstrip(".")
        if token:
            sans.append(token)

    return sans, result_token


def split_pgn_games(pgn_text: str) -> list[str]:
    """Split a PGN database into per-game chunks.

    A new game starts at a tag line that follows movetext.
    """
    games: list[list[str]] = []
    current: list[str] = []
    seen_movetext = False

    for raw_line in pgn_text.splitlines():
        line = raw_line.strip()
        if line.startswith("[") and seen_movetext:
            games.append(current)
            current = []
            seen_movetext = False
        if line and not line.startswith("[") and not line.startswith("%"):
            seen_movetext = True
        current.append(raw_line)

    if any(line.strip() for line in current):
        games.append(current)
    return ["\n".join(lines) for lines in games]


def parse_pgn_game(pgn_text: str) -> ParsedPgn:
    """Parse a single PGN game into structured headers/SANs/result."""
    parsed = ParsedPgn()
    move_lines: list[str] = []
    in_headers = True

    for raw_line in pgn_text.splitlines():
        line = raw_line.strip()
        if not line:
            if parsed.headers:
                in_headers = False
            continue

        if in_headers and line.startswith("["):
            match = _PGN_HEADER_RE.match(line)
            if match is None:
                raise ValueError(f"Invalid PGN header line: {line}")
            key, raw_value = match.groups()
            parsed.headers[key] = raw_value.replace('\\"', '"').replace("\\\\", "\\")
            continue

        in_headers = False
        if not line.startswith("%"):
            move_lines.append(line)

    parsed.sans, parsed.result_token = _parse_movetext_mainline("\n".join(move_lines))
    header_result = parsed.headers.get("Result")
    if parsed.result_token == "*" and header_result in PGN_RESULT_TOKENS:
        parsed.result_token = header_result
    return parsed
