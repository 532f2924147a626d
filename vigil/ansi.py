"""ANSI-aware width measurement and clipping.

Escape sequences pass through untouched and never count toward the width,
so styled lines can be fitted to the terminal without breaking colors.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def char_display_width(ch: str) -> int:
    """Terminal columns used by ``ch``: 0 for combining marks, 2 for wide glyphs."""
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    return sum(char_display_width(ch) for ch in ANSI_ESCAPE_RE.sub("", text))


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns."""
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    pos = 0
    while pos < len(text):
        match = ANSI_ESCAPE_RE.match(text, pos) if text[pos] == "\x1b" else None
        if match is not None:
            out.append(match.group(0))
            pos = match.end()
            continue
        ch = text[pos]
        width = char_display_width(ch)
        if col + width > max_cols:
            break
        out.append(ch)
        col += width
        pos += 1
    return "".join(out)
