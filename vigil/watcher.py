"""Recursive directory watcher with an exclusion prefix.

Each directory under the root gets its own non-recursive ``watchdog`` watch,
so the watched set is explicit and can grow and shrink with the tree.
A newly created directory is registered before its creation event is
forwarded, which keeps the window for missing events inside it to one
event-processing step.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from queue import Empty, Queue
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import WatcherError

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver, ObservedWatch

logger = logging.getLogger(__name__)

OBSERVER_JOIN_TIMEOUT_SECONDS = 5.0
EVENT_POLL_SECONDS = 0.25


class ChangeKind(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"


@dataclass(frozen=True)
class ChangeEvent:
    path: str
    kind: ChangeKind
    is_directory: bool = False
    dest_path: str | None = None


class _TreeEventHandler(FileSystemEventHandler):
    """Route watchdog callbacks into the owning ``TreeWatcher``."""

    def __init__(self, watcher: TreeWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        self._watcher._handle_event(event, ChangeKind.CREATED)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._watcher._handle_event(event, ChangeKind.MODIFIED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._watcher._handle_event(event, ChangeKind.REMOVED)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._watcher._handle_event(event, ChangeKind.RENAMED)


class TreeWatcher:
    """Watch ``root`` and every directory below it except the excluded subtree."""

    def __init__(
        self,
        root: Path,
        exclude: Path | None = None,
        observer: BaseObserver | None = None,
    ) -> None:
        self.root = str(root.resolve())
        self.exclude = str(exclude.resolve()) if exclude is not None else None
        self._observer = observer if observer is not None else Observer()
        self._handler = _TreeEventHandler(self)
        # ``None`` marks a path whose watch is being scheduled right now.
        self._watches: dict[str, ObservedWatch | None] = {}
        self._watches_lock = threading.Lock()
        self._events: Queue[ChangeEvent | None] = Queue()
        self._errors: Queue[Exception] = Queue()
        self._closed = threading.Event()

    @classmethod
    def open(cls, root: Path, exclude: str | None = ".git") -> TreeWatcher:
        """Start watching ``root``; raises ``WatcherError`` if the observer cannot start."""
        resolved_root = root.resolve()
        if not resolved_root.is_dir():
            raise WatcherError(f"Cannot watch {root}: not a directory")
        watcher = cls(resolved_root, resolved_root / exclude if exclude else None)
        try:
            watcher._observer.start()
        except (OSError, RuntimeError) as exc:
            raise WatcherError(f"Cannot start filesystem watcher: {exc}") from exc
        watcher._register_tree(watcher.root)
        if not watcher.watched_directories():
            watcher.close()
            raise WatcherError(f"Cannot watch {resolved_root}: no directory could be registered")
        logger.info(f"watching {len(watcher.watched_directories())} directories under {watcher.root}")
        return watcher

    # Path rules -----------------------------------------------------------

    def is_excluded(self, path: str) -> bool:
        if self.exclude is None:
            return False
        return path == self.exclude or path.startswith(self.exclude + os.sep)

    def _in_tree(self, path: str) -> bool:
        return path == self.root or path.startswith(self.root.rstrip(os.sep) + os.sep)

    # Watch set ------------------------------------------------------------

    def watched_directories(self) -> set[str]:
        with self._watches_lock:
            return {path for path, watch in self._watches.items() if watch is not None}

    def _register(self, directory: str) -> None:
        with self._watches_lock:
            if directory in self._watches:
                return
            self._watches[directory] = None

        try:
            watch = self._observer.schedule(self._handler, directory, recursive=False)
        except (OSError, RuntimeError) as exc:
            with self._watches_lock:
                self._watches.pop(directory, None)
            logger.warning(f"cannot watch {directory}: {exc}")
            self._errors.put(exc)
            return

        with self._watches_lock:
            self._watches[directory] = watch
        logger.debug(f"registered {directory}")

    def _register_tree(self, top: str) -> None:
        """Register ``top`` and every non-excluded directory below it."""

        def on_walk_error(exc: OSError) -> None:
            logger.warning(f"skipping unreadable directory: {exc}")

        for dirpath, dirnames, _filenames in os.walk(top, onerror=on_walk_error):
            if self._closed.is_set():
                return
            if self.is_excluded(dirpath):
                dirnames[:] = []
                continue
            dirnames[:] = [name for name in dirnames if not self.is_excluded(os.path.join(dirpath, name))]
            self._register(dirpath)

    def _unregister_tree(self, top: str) -> None:
        prefix = top.rstrip(os.sep) + os.sep
        with self._watches_lock:
            doomed = [
                (path, watch)
                for path, watch in self._watches.items()
                if watch is not None and (path == top or path.startswith(prefix))
            ]
            for path, _watch in doomed:
                del self._watches[path]

        for path, watch in doomed:
            try:
                self._observer.unschedule(watch)
            except (KeyError, OSError, RuntimeError) as exc:
                logger.debug(f"watch for {path} already gone: {exc}")
            logger.debug(f"unregistered {path}")

    # Event flow -----------------------------------------------------------

    def _handle_event(self, event: FileSystemEvent, kind: ChangeKind) -> None:
        if self._closed.is_set():
            return
        try:
            src_path = os.fsdecode(event.src_path)
            dest_path: str | None = None
            if kind is ChangeKind.RENAMED and getattr(event, "dest_path", ""):
                dest_path = os.fsdecode(event.dest_path)

            src_excluded = self.is_excluded(src_path)
            dest_excluded = dest_path is not None and self.is_excluded(dest_path)
            if src_excluded and (dest_path is None or dest_excluded):
                return
            # A move across the exclusion boundary is a creation or removal
            # from the point of view of the watched tree.
            if kind is ChangeKind.RENAMED and dest_path is not None:
                if src_excluded:
                    kind, src_path, dest_path = ChangeKind.CREATED, dest_path, None
                elif dest_excluded:
                    kind, dest_path = ChangeKind.REMOVED, None

            if event.is_directory:
                if kind is ChangeKind.CREATED:
                    self._register_tree(src_path)
                elif kind is ChangeKind.REMOVED:
                    self._unregister_tree(src_path)
                elif kind is ChangeKind.RENAMED:
                    self._unregister_tree(src_path)
                    if dest_path is not None and self._in_tree(dest_path):
                        self._register_tree(dest_path)

            self._events.put(
                ChangeEvent(
                    path=src_path,
                    kind=kind,
                    is_directory=bool(event.is_directory),
                    dest_path=dest_path,
                )
            )
        except Exception as exc:
            logger.exception(f"error handling filesystem event {event!r}")
            self._errors.put(exc)

    def get_event(self, timeout: float | None = None) -> ChangeEvent | None:
        """Return the next event, or ``None`` on timeout or once closed."""
        if self._closed.is_set():
            return None
        try:
            event = self._events.get(timeout=timeout)
        except Empty:
            return None
        if event is None:
            # Leave the sentinel for any other reader.
            self._events.put(None)
        return event

    def events(self) -> Iterator[ChangeEvent]:
        """Yield change events until ``close`` is called."""
        while not self.closed:
            event = self.get_event(timeout=EVENT_POLL_SECONDS)
            if event is not None:
                yield event

    def drain_errors(self) -> list[Exception]:
        out: list[Exception] = []
        while True:
            try:
                out.append(self._errors.get_nowait())
            except Empty:
                break
        return out

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        """Stop the observer and release every watch; wakes blocked readers."""
        if self._closed.is_set():
            return
        self._closed.set()
        self._events.put(None)
        try:
            self._observer.unschedule_all()
            self._observer.stop()
            if self._observer.is_alive():
                self._observer.join(timeout=OBSERVER_JOIN_TIMEOUT_SECONDS)
        finally:
            with self._watches_lock:
                self._watches.clear()
        logger.info(f"stopped watching {self.root}")


__all__ = ["ChangeEvent", "ChangeKind", "TreeWatcher"]
