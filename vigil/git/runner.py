"""Thin ``git`` subprocess wrapper.

Every invocation is ``git -C <root> ...`` with captured text output and a
timeout. Failure to start git, or a timeout, yields ``None`` so callers can
tell "could not ask" apart from "git said no" (non-zero exit).
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class GitRunner:
    """Run git commands rooted at one working directory."""

    def __init__(self, root: Path, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.root = root
        self.timeout_seconds = timeout_seconds

    def run(
        self,
        args: list[str],
        timeout_seconds: float | None = None,
        env: dict[str, str] | None = None,
    ) -> subprocess.CompletedProcess[str] | None:
        """Run ``git args`` and return the completed process, or ``None``."""
        timeout = self.timeout_seconds if timeout_seconds is None else timeout_seconds
        run_env = None if env is None else {**os.environ, **env}
        try:
            proc = subprocess.run(
                ["git", "-C", str(self.root), *args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=timeout,
                env=run_env,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"git {' '.join(args)} timed out after {timeout}s")
            return None
        except OSError as exc:
            logger.error(f"git {' '.join(args)} could not be started: {exc}")
            return None

        if proc.returncode != 0:
            logger.debug(f"git {' '.join(args)} exited {proc.returncode}: {proc.stderr.strip()}")
        return proc

    def output(self, args: list[str], timeout_seconds: float | None = None) -> str | None:
        """Return stripped stdout when the command succeeds, else ``None``."""
        proc = self.run(args, timeout_seconds=timeout_seconds)
        if proc is None or proc.returncode != 0:
            return None
        return proc.stdout.strip()
