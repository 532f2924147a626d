"""Render-ready repository state.

A ``Snapshot`` is built wholly by one refresh cycle and replaced wholesale by
the next; nothing here is mutated after construction.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum

NO_UPSTREAM = "no upstream"
UNEXPECTED_OUTPUT = "unexpected output"


class StatusCode(str, Enum):
    """One porcelain status column."""

    UNMODIFIED = " "
    MODIFIED = "M"
    ADDED = "A"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    UNTRACKED = "?"
    IGNORED = "!"
    TYPE_CHANGED = "T"
    UNMERGED = "U"

    @classmethod
    def from_char(cls, ch: str) -> StatusCode:
        """Classify one status character; unknown characters count as unmodified."""
        try:
            return cls(ch)
        except ValueError:
            return cls.UNMODIFIED


@dataclass(frozen=True)
class FileChange:
    staged: StatusCode
    unstaged: StatusCode
    label: str
    path: str
    orig_path: str | None = None

    @property
    def code(self) -> str:
        """Two-character porcelain code, e.g. ``"M "`` or ``"??"``."""
        return f"{self.staged.value}{self.unstaged.value}"


@dataclass(frozen=True)
class BranchDivergence:
    """Commits ahead of / behind the upstream.

    ``error`` is set when the counts are meaningless, most notably
    ``NO_UPSTREAM``; ``(0, 0, None)`` means genuinely in sync.
    """

    ahead: int = 0
    behind: int = 0
    error: str | None = None

    @classmethod
    def no_upstream(cls) -> BranchDivergence:
        return cls(error=NO_UPSTREAM)

    @property
    def has_upstream(self) -> bool:
        return self.error is None

    @property
    def in_sync(self) -> bool:
        return self.error is None and self.ahead == 0 and self.behind == 0


@dataclass(frozen=True)
class BranchFileDiff:
    status: StatusCode
    path: str
    orig_path: str | None = None


@dataclass(frozen=True)
class Snapshot:
    branch: str
    divergence: BranchDivergence | None = None
    changes: tuple[FileChange, ...] = ()
    # None when the default branch, or the merge base with it, cannot be resolved.
    branch_files: tuple[BranchFileDiff, ...] | None = ()
    default_branch: str | None = None
    captured_at: float = field(default_factory=time.time, compare=False)

    def with_divergence(self, divergence: BranchDivergence) -> Snapshot:
        """Return a new snapshot carrying ``divergence`` and a fresh timestamp."""
        return replace(self, divergence=divergence, captured_at=time.time())


__all__ = [
    "NO_UPSTREAM",
    "UNEXPECTED_OUTPUT",
    "BranchDivergence",
    "BranchFileDiff",
    "FileChange",
    "Snapshot",
    "StatusCode",
]
