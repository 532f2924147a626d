"""Repository facade used by the refresh loop.

Bundles one ``GitRunner`` with the per-run default-branch memo so each
extraction can be called independently.
"""

from __future__ import annotations

from pathlib import Path

from ..snapshot import BranchDivergence, BranchFileDiff, FileChange
from .branch import DefaultBranchMemo, branch_file_diff, current_branch
from .runner import DEFAULT_TIMEOUT_SECONDS, GitRunner
from .status import STATUS_ARGS, parse_porcelain_status
from .upstream import ahead_behind

DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0


def resolve_repository_root(path: Path, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> Path | None:
    """Return the top-level work tree containing ``path``, if any."""
    toplevel = GitRunner(path, timeout_seconds).output(["rev-parse", "--show-toplevel"])
    if not toplevel:
        return None
    return Path(toplevel).resolve()


class GitRepository:
    """State queries against one working directory."""

    def __init__(
        self,
        root: Path,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        runner: GitRunner | None = None,
    ) -> None:
        self.root = root
        self.runner = runner if runner is not None else GitRunner(root, timeout_seconds)
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self._default_branch = DefaultBranchMemo()

    def is_repository(self) -> bool:
        return self.runner.output(["rev-parse", "--is-inside-work-tree"]) == "true"

    def current_branch(self) -> str:
        return current_branch(self.runner)

    def status(self) -> list[FileChange] | None:
        """Return pending changes, or ``None`` when ``git status`` failed."""
        proc = self.runner.run(STATUS_ARGS)
        if proc is None or proc.returncode != 0:
            return None
        return parse_porcelain_status(proc.stdout)

    def ahead_behind(self) -> BranchDivergence | None:
        return ahead_behind(self.runner, self.fetch_timeout_seconds)

    def default_branch_name(self) -> str | None:
        return self._default_branch.get(self.runner)

    def branch_file_diff(self) -> list[BranchFileDiff] | None:
        """Files changed since forking from the default branch; ``None`` when unavailable."""
        return branch_file_diff(self.runner, self.default_branch_name())
