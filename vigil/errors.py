"""Exception types that end a vigil session before the dashboard starts."""

from __future__ import annotations


class VigilError(Exception):
    """Base class for fatal startup errors reported by the CLI."""


class NotARepositoryError(VigilError):
    """Raised when the working directory is not inside a git work tree."""

    def __init__(self, path: object) -> None:
        super().__init__(f"Not a git repository: {path}")
        self.path = path


class WatcherError(VigilError):
    """Raised when the filesystem watcher cannot be initialized."""
