"""Runtime composition layer for vigil.

Opens the watcher, builds the first snapshot, wires the trigger sources into
the scheduler and runs the consumer loop. Teardown always closes the watcher
before the workers are stopped.
"""

from __future__ import annotations

import logging
import sys
from functools import partial
from pathlib import Path

from ..config import VigilSettings
from ..git import GitRepository
from ..input import read_key
from ..refresh import SnapshotBuilder
from ..snapshot import BranchDivergence
from ..ui_theme import resolve_theme
from ..watcher import TreeWatcher
from .loop import RuntimeLoopCallbacks, run_main_loop
from .scheduler import RefreshScheduler, TriggerKind
from .state import DashboardState
from .terminal import TerminalController

logger = logging.getLogger(__name__)

KEY_POLL_MS = 120


def run_dashboard(root: Path, settings: VigilSettings, repository: GitRepository | None = None) -> None:
    """Run the interactive dashboard for the work tree at ``root`` until quit.

    Raises ``WatcherError`` if the filesystem watcher cannot be started.
    """
    if repository is None:
        repository = GitRepository(
            root,
            timeout_seconds=settings.git_timeout_seconds,
            fetch_timeout_seconds=settings.fetch_timeout_seconds,
        )
    builder = SnapshotBuilder(repository)
    watcher = TreeWatcher.open(root, settings.exclude)

    scheduler = RefreshScheduler()
    try:
        stdin_fd = sys.stdin.fileno()
        terminal = TerminalController(stdin_fd, sys.stdout.fileno())
        state = DashboardState(
            root=root,
            snapshot=builder.build_local(None),
            theme=resolve_theme(settings.theme),
        )

        def refresh_local() -> None:
            state.replace_snapshot(builder.build_local(state.snapshot))

        def apply_divergence(payload: object) -> None:
            divergence = payload if isinstance(payload, BranchDivergence) else None
            state.replace_snapshot(builder.apply_divergence(state.snapshot, divergence))

        scheduler.add_event_stream(TriggerKind.FILESYSTEM, watcher.events)
        scheduler.add_periodic(TriggerKind.STATUS_TICK, settings.status_poll_seconds)
        scheduler.add_periodic(
            TriggerKind.UPSTREAM,
            settings.upstream_poll_seconds,
            produce=builder.fetch_divergence,
            run_immediately=True,
        )
        scheduler.add_reader(TriggerKind.KEY, partial(read_key, stdin_fd, timeout_ms=KEY_POLL_MS))

        run_main_loop(
            state=state,
            terminal=terminal,
            scheduler=scheduler,
            callbacks=RuntimeLoopCallbacks(
                refresh_local=refresh_local,
                apply_divergence=apply_divergence,
                drain_watch_errors=watcher.drain_errors,
            ),
        )
    finally:
        watcher.close()
        scheduler.stop()
        logger.info(f"dashboard for {root} closed after {builder.local_refresh_count} local refreshes")
