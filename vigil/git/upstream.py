"""Ahead/behind counts against the configured upstream."""

from __future__ import annotations

import logging

from ..snapshot import UNEXPECTED_OUTPUT, BranchDivergence
from .runner import GitRunner

logger = logging.getLogger(__name__)

FETCH_ARGS = ["fetch", "--quiet"]
AHEAD_BEHIND_ARGS = ["rev-list", "--count", "--left-right", "HEAD...@{upstream}"]
# Never block on a credential prompt; there is no terminal to answer it.
FETCH_ENV = {"GIT_TERMINAL_PROMPT": "0", "GIT_ASKPASS": "", "SSH_ASKPASS": ""}


def parse_ahead_behind(output: str) -> BranchDivergence:
    """Parse ``<ahead>\\t<behind>`` from ``rev-list --left-right --count``."""
    parts = output.split()
    if len(parts) != 2:
        return BranchDivergence(error=UNEXPECTED_OUTPUT)
    try:
        ahead, behind = int(parts[0]), int(parts[1])
    except ValueError:
        return BranchDivergence(error=UNEXPECTED_OUTPUT)
    return BranchDivergence(ahead=ahead, behind=behind)


def fetch_remote(runner: GitRunner, timeout_seconds: float) -> bool:
    """Refresh remote-tracking refs; failure (offline, no remote) is logged only."""
    proc = runner.run(FETCH_ARGS, timeout_seconds=timeout_seconds, env=FETCH_ENV)
    if proc is None:
        return False
    if proc.returncode != 0:
        logger.info(f"git fetch failed ({proc.returncode}): {proc.stderr.strip()}")
        return False
    return True


def ahead_behind(runner: GitRunner, fetch_timeout_seconds: float) -> BranchDivergence | None:
    """Fetch, then count commits unique to HEAD and to its upstream.

    A non-zero exit from the count means there is no upstream and is reported
    as ``BranchDivergence.no_upstream()``. ``None`` means git could not be run
    at all this time.
    """
    fetch_remote(runner, fetch_timeout_seconds)
    proc = runner.run(AHEAD_BEHIND_ARGS)
    if proc is None:
        return None
    if proc.returncode != 0:
        return BranchDivergence.no_upstream()
    return parse_ahead_behind(proc.stdout)
