"""Dashboard rendering.

Builds header, scrollable body and footer rows from a ``Snapshot`` and writes
one fully composed ANSI frame. Nothing here mutates the snapshot.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .ansi import clip_ansi_line
from .snapshot import NO_UPSTREAM, BranchDivergence, BranchFileDiff, FileChange, Snapshot, StatusCode
from .ui_theme import UITheme

BANNER = (
    " █░█ █ █▀▀ █ █░░",
    " ▀▄▀ █ █▄█ █ █▄▄",
)
HELP_TEXT = "q quit · r refresh · j/k scroll · PgUp/PgDn page · g/G top/bottom"
FOOTER_ROWS = 2

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")


@dataclass(frozen=True)
class Frame:
    header: list[str]
    body: list[str]
    footer: list[str]


def _styled(style: str, text: str, theme: UITheme) -> str:
    if not style:
        return text
    return f"{style}{text}{theme.reset}"


def escape_control_chars(text: str) -> str:
    """Make control characters in a path visible instead of sending them to the terminal."""
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", text)


def _display_path(path: str, orig_path: str | None) -> str:
    if orig_path is None:
        return escape_control_chars(path)
    return f"{escape_control_chars(orig_path)} → {escape_control_chars(path)}"


def status_style(code: str, theme: UITheme) -> str:
    """Pick the color for a two-character (or one-letter) status code."""
    if code == "??":
        return theme.status_untracked
    if "M" in code or "T" in code:
        return theme.status_modified
    if "A" in code:
        return theme.status_added
    if "D" in code:
        return theme.status_deleted
    if "R" in code or "C" in code:
        return theme.status_renamed
    return theme.status_other


def format_divergence(divergence: BranchDivergence | None, theme: UITheme) -> str:
    if divergence is None:
        return _styled(theme.absent, "checking upstream…", theme)
    if not divergence.has_upstream:
        return _styled(theme.absent, divergence.error or NO_UPSTREAM, theme)
    if divergence.in_sync:
        return "up to date"
    parts: list[str] = []
    if divergence.ahead:
        parts.append(_styled(theme.ahead, f"↑{divergence.ahead} ahead", theme))
    if divergence.behind:
        parts.append(_styled(theme.behind, f"↓{divergence.behind} behind", theme))
    return "  ".join(parts)


def format_file_change(change: FileChange, theme: UITheme) -> str:
    code = change.code
    path = _display_path(change.path, change.orig_path)
    return (
        f"  {_styled(status_style(code, theme), code.ljust(2), theme)} "
        f"{_styled(theme.file, path, theme)} {_styled(theme.label, f'({change.label})', theme)}"
    )


def format_branch_file(entry: BranchFileDiff, theme: UITheme) -> str:
    code = entry.status.value if entry.status is not StatusCode.UNMODIFIED else "?"
    path = _display_path(entry.path, entry.orig_path)
    return f"  {_styled(status_style(code, theme), code.ljust(2), theme)} {_styled(theme.file, path, theme)}"


def build_header_lines(root: Path, snapshot: Snapshot, theme: UITheme) -> list[str]:
    lines = [_styled(theme.banner, row, theme) for row in BANNER]
    lines.append(_styled(theme.path, escape_control_chars(str(root)), theme))
    lines.append("")
    lines.append(f"Branch: {_styled(theme.branch, escape_control_chars(snapshot.branch), theme)}")
    lines.append(f"Upstream: {format_divergence(snapshot.divergence, theme)}")
    lines.append("")
    return lines


def build_body_lines(snapshot: Snapshot, theme: UITheme) -> list[str]:
    """Scrollable content: working-tree changes, then branch-local changes."""
    lines: list[str] = []
    if snapshot.changes:
        lines.append(_styled(theme.heading, f"Changed Files ({len(snapshot.changes)}):", theme))
        lines.extend(format_file_change(change, theme) for change in snapshot.changes)
    else:
        lines.append(_styled(theme.help, "No changes detected", theme))

    if snapshot.branch_files:
        base = snapshot.default_branch or "default branch"
        lines.append("")
        lines.append(
            _styled(theme.heading, f"Branch Changes vs {base} ({len(snapshot.branch_files)}):", theme)
        )
        lines.extend(format_branch_file(entry, theme) for entry in snapshot.branch_files)
    elif snapshot.default_branch is None:
        lines.append("")
        lines.append(_styled(theme.absent, "Branch Changes: default branch unknown", theme))
    elif snapshot.branch_files is None:
        lines.append("")
        lines.append(
            _styled(
                theme.absent,
                f"Branch Changes vs {snapshot.default_branch}: unavailable (default branch or merge base not found)",
                theme,
            )
        )
    return lines


def build_footer_lines(theme: UITheme, status_message: str = "") -> list[str]:
    message = _styled(theme.message, status_message, theme) if status_message else ""
    return [message, _styled(theme.help, HELP_TEXT, theme)]


def body_rows_for(total_rows: int, header_rows: int) -> int:
    return max(1, total_rows - header_rows - FOOTER_ROWS)


def build_frame(
    root: Path,
    snapshot: Snapshot,
    theme: UITheme,
    status_message: str = "",
) -> Frame:
    return Frame(
        header=build_header_lines(root, snapshot, theme),
        body=build_body_lines(snapshot, theme),
        footer=build_footer_lines(theme, status_message),
    )


def compose_frame(frame: Frame, start: int, columns: int, rows: int) -> str:
    """Lay out ``frame`` into exactly ``rows`` terminal rows starting at body line ``start``."""
    width = max(1, columns - 1)
    body_rows = body_rows_for(rows, len(frame.header))
    visible: list[str] = list(frame.header)
    visible.extend(frame.body[start:start + body_rows])
    visible.extend("" for _ in range(body_rows - len(frame.body[start:start + body_rows])))
    visible.extend(frame.footer)

    out: list[str] = ["\033[H\033[J"]
    for row, text in enumerate(visible[:rows]):
        clipped = clip_ansi_line(text, width)
        out.append(clipped)
        if "\033" in clipped:
            out.append("\033[0m")
        if row < rows - 1:
            out.append("\r\n")
    return "".join(out)
