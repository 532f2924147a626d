"""Branch naming, default-branch discovery and branch-local file changes."""

from __future__ import annotations

import logging

from ..snapshot import BranchFileDiff, StatusCode
from .runner import GitRunner

logger = logging.getLogger(__name__)

NO_COMMITS_SUFFIX = " (no commits)"
DETACHED_PREFIX = "(detached) "
UNKNOWN_BRANCH = "unknown"
ORIGIN_HEAD_REF = "refs/remotes/origin/HEAD"
ORIGIN_REF_PREFIX = "refs/remotes/origin/"


def resolve_branch_label(attached: str | None, symbolic: str | None, short_head: str | None) -> str:
    """Pick the branch label from the three git lookups, in fallback order.

    ``attached`` is the checked-out branch of a repository with commits,
    ``symbolic`` the branch HEAD points at (possibly unborn), ``short_head`` the
    abbreviated commit HEAD resolves to.
    """
    if attached:
        return attached
    if symbolic:
        if short_head:
            return symbolic
        return f"{symbolic}{NO_COMMITS_SUFFIX}"
    if short_head:
        return f"{DETACHED_PREFIX}{short_head}"
    return UNKNOWN_BRANCH


def current_branch(runner: GitRunner) -> str:
    short_head = runner.output(["rev-parse", "--short", "HEAD"]) or None
    # Modern git reports unborn branches from --show-current too, so only
    # trust it once HEAD resolves to a commit.
    attached = runner.output(["branch", "--show-current"]) if short_head else None
    symbolic = None if attached else runner.output(["symbolic-ref", "--short", "HEAD"])
    return resolve_branch_label(attached or None, symbolic or None, short_head)


class DefaultBranchMemo:
    """Remember the repository's default branch for the rest of the run.

    Resolved lazily on first use and never invalidated: if the remote's
    default branch changes while vigil runs, the old name stays in use until
    restart.
    """

    def __init__(self) -> None:
        self._name: str | None = None

    @property
    def resolved(self) -> bool:
        return self._name is not None

    def get(self, runner: GitRunner) -> str | None:
        if not self.resolved:
            self._name = _query_default_branch(runner)
            if self._name is not None:
                logger.info(f"default branch resolved to {self._name!r}")
        return self._name


def _query_default_branch(runner: GitRunner) -> str | None:
    """Ask git for the default branch; ``None`` when git could not answer."""
    proc = runner.run(["symbolic-ref", ORIGIN_HEAD_REF])
    if proc is None:
        return None
    ref = proc.stdout.strip()
    if proc.returncode == 0 and ref:
        if ref.startswith(ORIGIN_REF_PREFIX):
            return ref[len(ORIGIN_REF_PREFIX):]
        return ref.rsplit("/", 1)[-1]

    verify = runner.run(["rev-parse", "--verify", "--quiet", "refs/heads/main"])
    if verify is None:
        return None
    return "main" if verify.returncode == 0 else "master"


def parse_name_status(output: str) -> list[BranchFileDiff]:
    """Parse NUL-separated ``git diff --name-status -z`` output.

    Rename and copy entries (``R100``/``C075``) carry two paths: source first,
    then destination.
    """
    files: list[BranchFileDiff] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        code = tokens[index].strip()
        index += 1
        if not code:
            continue
        status = StatusCode.from_char(code[0])
        if status in (StatusCode.RENAMED, StatusCode.COPIED):
            if index + 1 >= len(tokens):
                break
            orig_path, path = tokens[index], tokens[index + 1]
            index += 2
            if path:
                files.append(BranchFileDiff(status=status, path=path, orig_path=orig_path or None))
            continue
        if index >= len(tokens):
            break
        path = tokens[index]
        index += 1
        if path:
            files.append(BranchFileDiff(status=status, path=path))
    return files


def _resolve_commit(runner: GitRunner, rev: str) -> str | None:
    return runner.output(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"]) or None


def branch_file_diff(runner: GitRunner, default_branch: str | None) -> list[BranchFileDiff] | None:
    """List files changed on this branch since it forked from the default branch.

    HEAD sitting exactly on the default branch yields an empty list. An
    unresolvable HEAD, default branch or merge base yields ``None`` so the
    caller can show the comparison as unavailable rather than empty.
    """
    if not default_branch:
        return None
    head = _resolve_commit(runner, "HEAD")
    if head is None:
        return None
    base_ref = default_branch
    default_rev = _resolve_commit(runner, base_ref)
    if default_rev is None:
        base_ref = f"origin/{default_branch}"
        default_rev = _resolve_commit(runner, base_ref)
    if default_rev is None:
        logger.debug(f"default branch {default_branch!r} does not resolve to a commit")
        return None
    if default_rev == head:
        return []

    merge_base = runner.output(["merge-base", base_ref, "HEAD"])
    if not merge_base:
        return None

    diff = runner.run(["diff", "--name-status", "-z", merge_base, "HEAD"])
    if diff is None or diff.returncode != 0:
        return None
    return parse_name_status(diff.stdout)
