"""Porcelain status parsing and change labels.

Pure functions from raw ``git status --porcelain=v1 -z`` output to
``FileChange`` records; no subprocess is involved here.
"""

from __future__ import annotations

from ..snapshot import FileChange, StatusCode

STATUS_ARGS = ["status", "--porcelain=v1", "-z", "--untracked-files=all"]
MIN_RECORD_WIDTH = 4

_STAGED_FRAGMENTS: dict[StatusCode, str] = {
    StatusCode.MODIFIED: "modified (staged)",
    StatusCode.ADDED: "added (staged)",
    StatusCode.DELETED: "deleted (staged)",
    StatusCode.RENAMED: "renamed (staged)",
    StatusCode.COPIED: "copied (staged)",
    StatusCode.TYPE_CHANGED: "type changed (staged)",
}

_UNSTAGED_FRAGMENTS: dict[StatusCode, str] = {
    StatusCode.MODIFIED: "modified",
    StatusCode.DELETED: "deleted",
    StatusCode.ADDED: "added",
    StatusCode.RENAMED: "renamed",
    StatusCode.COPIED: "copied",
    StatusCode.TYPE_CHANGED: "type changed",
}


def status_label(staged: StatusCode, unstaged: StatusCode) -> str:
    """Describe a staged/unstaged status pair in words.

    ``??`` is "untracked" and ``!!`` is "ignored". Otherwise each column
    contributes at most one fragment; a conflict in either column reads
    "unmerged", and a pair with no known fragment reads "changed".
    """
    if staged is StatusCode.UNTRACKED and unstaged is StatusCode.UNTRACKED:
        return "untracked"
    if staged is StatusCode.IGNORED and unstaged is StatusCode.IGNORED:
        return "ignored"
    if StatusCode.UNMERGED in (staged, unstaged):
        return "unmerged"

    parts: list[str] = []
    staged_part = _STAGED_FRAGMENTS.get(staged)
    if staged_part:
        parts.append(staged_part)
    unstaged_part = _UNSTAGED_FRAGMENTS.get(unstaged)
    if unstaged_part:
        parts.append(unstaged_part)

    if not parts:
        return "changed"
    return ", ".join(parts)


def parse_porcelain_status(output: str) -> list[FileChange]:
    """Parse NUL-separated porcelain v1 records in the order git reported them.

    Records shorter than ``XY <path>`` are skipped. Renamed/copied entries are
    followed by an extra token holding the source path.
    """
    changes: list[FileChange] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if len(token) < MIN_RECORD_WIDTH or token[2] != " ":
            continue

        staged = StatusCode.from_char(token[0])
        unstaged = StatusCode.from_char(token[1])
        orig_path: str | None = None
        if StatusCode.RENAMED in (staged, unstaged) or StatusCode.COPIED in (staged, unstaged):
            if index < len(tokens) and tokens[index]:
                orig_path = tokens[index]
            index += 1

        changes.append(
            FileChange(
                staged=staged,
                unstaged=unstaged,
                label=status_label(staged, unstaged),
                path=token[3:],
                orig_path=orig_path,
            )
        )
    return changes
