"""Repository state extraction via the ``git`` command-line tool.

Subprocess plumbing lives in ``runner``; the parsers in ``status``,
``branch`` and ``upstream`` are pure functions over command output.
"""

from __future__ import annotations

from .branch import (
    DETACHED_PREFIX,
    NO_COMMITS_SUFFIX,
    UNKNOWN_BRANCH,
    DefaultBranchMemo,
    parse_name_status,
    resolve_branch_label,
)
from .repository import GitRepository, resolve_repository_root
from .runner import GitRunner
from .status import parse_porcelain_status, status_label
from .upstream import parse_ahead_behind

__all__ = [
    "DETACHED_PREFIX",
    "NO_COMMITS_SUFFIX",
    "UNKNOWN_BRANCH",
    "DefaultBranchMemo",
    "GitRepository",
    "GitRunner",
    "parse_ahead_behind",
    "parse_name_status",
    "parse_porcelain_status",
    "resolve_branch_label",
    "resolve_repository_root",
    "status_label",
]
