"""Command-line front door for vigil.

Validates the working directory, checks that it is a git work tree, sets up
logging and then hands over to the interactive dashboard.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .config import load_settings
from .errors import NotARepositoryError, VigilError
from .git import GitRepository, resolve_repository_root
from .log import configure_logging
from .runtime import run_dashboard

logger = logging.getLogger(__name__)

NOT_A_REPOSITORY_MESSAGE = "Error: Not a git repository\nPlease run vigil from within a git repository."


def _resolve_working_directory() -> Path:
    try:
        return Path(os.getcwd()).resolve()
    except OSError as exc:
        raise SystemExit(f"Error getting current directory: {exc}") from exc


def main(argv: list[str] | None = None) -> None:
    """Launch the dashboard for the git work tree containing the current directory.

    Exits with status 1 and a message when the directory cannot be read, is
    not inside a git repository, or the terminal/watcher cannot be set up.
    """
    parser = argparse.ArgumentParser(
        prog="vigil",
        description="Watch the current git working tree: branch, upstream divergence and changed files.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.parse_args(argv)

    cwd = _resolve_working_directory()
    settings = load_settings()
    log_path = configure_logging(settings.log_level)

    repository = GitRepository(
        cwd,
        timeout_seconds=settings.git_timeout_seconds,
        fetch_timeout_seconds=settings.fetch_timeout_seconds,
    )
    try:
        if not repository.is_repository():
            raise NotARepositoryError(cwd)
        root = resolve_repository_root(cwd, settings.git_timeout_seconds) or cwd
        if not (sys.stdin.isatty() and sys.stdout.isatty()):
            raise SystemExit("Error: vigil needs an interactive terminal.")

        logger.info(f"starting vigil {__version__} in {root} (log: {log_path})")
        run_dashboard(root, settings)
    except NotARepositoryError as exc:
        logger.error(str(exc))
        raise SystemExit(NOT_A_REPOSITORY_MESSAGE) from exc
    except VigilError as exc:
        logger.error(str(exc))
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
