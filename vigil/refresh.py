"""Snapshot construction from repository queries.

Transient failures keep the previous value of the affected field; the next
trigger simply tries again.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .snapshot import BranchDivergence, BranchFileDiff, FileChange, Snapshot

logger = logging.getLogger(__name__)


class RepositoryQueries(Protocol):
    def current_branch(self) -> str: ...

    def status(self) -> list[FileChange] | None: ...

    def ahead_behind(self) -> BranchDivergence | None: ...

    def default_branch_name(self) -> str | None: ...

    def branch_file_diff(self) -> list[BranchFileDiff] | None: ...


class SnapshotBuilder:
    """Turn repository queries into fresh ``Snapshot`` values."""

    def __init__(self, repository: RepositoryQueries) -> None:
        self.repository = repository
        self.local_refresh_count = 0

    def build_local(self, previous: Snapshot | None) -> Snapshot:
        """Branch, working-tree status and branch file diff; keeps prior divergence."""
        self.local_refresh_count += 1
        branch = self.repository.current_branch()
        changes = self.repository.status()
        if changes is None:
            logger.info("git status failed; keeping previous file list")
            kept_changes = previous.changes if previous is not None else ()
        else:
            kept_changes = tuple(changes)
        diff = self.repository.branch_file_diff()
        branch_files = tuple(diff) if diff is not None else None
        return Snapshot(
            branch=branch,
            divergence=previous.divergence if previous is not None else None,
            changes=kept_changes,
            branch_files=branch_files,
            default_branch=self.repository.default_branch_name(),
        )

    def fetch_divergence(self) -> BranchDivergence | None:
        """Network-touching upstream check; meant to run off the consumer thread."""
        return self.repository.ahead_behind()

    def apply_divergence(self, previous: Snapshot, divergence: BranchDivergence | None) -> Snapshot:
        if divergence is None:
            logger.info("upstream check could not run; keeping previous divergence")
            return previous
        if divergence == previous.divergence:
            return previous
        return previous.with_divergence(divergence)
