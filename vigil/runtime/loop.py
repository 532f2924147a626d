"""Single-consumer event loop for the dashboard.

Pulls triggers from the scheduler queue in arrival order and turns them into
snapshot refreshes, scroll changes and repaints. All snapshot replacement and
rendering happen on this thread.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..render import body_rows_for, build_frame, compose_frame
from .scheduler import RefreshScheduler, Trigger, TriggerKind
from .state import DashboardState
from .terminal import TerminalController

logger = logging.getLogger(__name__)

RESIZE_POLL_SECONDS = 0.2
STATUS_MESSAGE_SECONDS = 4.0

QUIT_KEYS = frozenset({"q", "Q", "ESC", "CTRL_C"})
REFRESH_KEYS = frozenset({"r", "R", "CTRL_L"})


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    refresh_local: Callable[[], None]
    apply_divergence: Callable[[object], None]
    drain_watch_errors: Callable[[], list[Exception]]


def set_status_message(state: DashboardState, message: str, now: float | None = None) -> None:
    state.status_message = message
    state.status_message_until = (time.monotonic() if now is None else now) + STATUS_MESSAGE_SECONDS
    state.dirty = True


def scroll_by(state: DashboardState, delta: int) -> bool:
    previous = state.start
    state.start = max(0, min(state.start + delta, state.max_start))
    return state.start != previous


def handle_key(key: str, state: DashboardState, refresh_local: Callable[[], None]) -> bool:
    """Apply one key press; return ``True`` when the dashboard should quit."""
    if key in QUIT_KEYS:
        return True
    if key in REFRESH_KEYS:
        refresh_local()
        state.clear_before_render = True
        state.dirty = True
        return False

    page = max(1, state.body_rows)
    moved = False
    if key in {"j", "DOWN", "ENTER"}:
        moved = scroll_by(state, 1)
    elif key in {"k", "UP"}:
        moved = scroll_by(state, -1)
    elif key in {"PAGE_DOWN", "SPACE", "CTRL_D"}:
        moved = scroll_by(state, page)
    elif key == "PAGE_UP":
        moved = scroll_by(state, -page)
    elif key in {"g", "HOME"}:
        moved = scroll_by(state, -state.start)
    elif key in {"G", "END"}:
        moved = scroll_by(state, state.max_start - state.start)
    if moved:
        state.dirty = True
    return False


def dispatch_trigger(trigger: Trigger, state: DashboardState, callbacks: RuntimeLoopCallbacks) -> bool:
    """Handle one trigger; return ``True`` to quit."""
    if trigger.kind in (TriggerKind.FILESYSTEM, TriggerKind.STATUS_TICK):
        callbacks.refresh_local()
        return False
    if trigger.kind is TriggerKind.UPSTREAM:
        callbacks.apply_divergence(trigger.payload)
        return False
    if trigger.kind is TriggerKind.KEY:
        return handle_key(str(trigger.payload), state, callbacks.refresh_local)
    logger.warning(f"ignoring unknown trigger {trigger.kind!r}")
    return False


def paint(state: DashboardState, terminal: TerminalController) -> None:
    """Render the current snapshot into the viewport, clamping scroll first."""
    frame = build_frame(state.root, state.snapshot, state.theme, state.status_message)
    state.body_line_count = len(frame.body)
    state.body_rows = body_rows_for(state.lines, len(frame.header))
    state.clamp_scroll()
    if state.clear_before_render:
        terminal.clear_screen()
        state.clear_before_render = False
    terminal.write(compose_frame(frame, state.start, state.columns, state.lines))


def run_main_loop(
    state: DashboardState,
    terminal: TerminalController,
    scheduler: RefreshScheduler,
    callbacks: RuntimeLoopCallbacks,
) -> None:
    """Run the dashboard until a quit key arrives.

    Each iteration handles resize bookkeeping, surfaces watcher errors,
    repaints when dirty and then handles at most one trigger.
    """
    with terminal.raw_mode():
        while True:
            term = shutil.get_terminal_size((80, 24))
            if (term.columns, term.lines) != (state.columns, state.lines):
                state.columns = term.columns
                state.lines = term.lines
                state.dirty = True

            now = time.monotonic()
            for exc in callbacks.drain_watch_errors():
                set_status_message(state, f"watch error: {exc}", now)
            if state.status_message and now >= state.status_message_until:
                state.status_message = ""
                state.status_message_until = 0.0
                state.dirty = True

            if state.dirty:
                paint(state, terminal)
                state.dirty = False

            trigger = scheduler.next_trigger(timeout=RESIZE_POLL_SECONDS)
            if trigger is None:
                continue
            trigger.source.begin()
            try:
                should_quit = dispatch_trigger(trigger, state, callbacks)
            except Exception as exc:
                logger.exception(f"{trigger.kind.value} trigger handler failed")
                set_status_message(state, f"refresh failed: {exc}")
                should_quit = False
            finally:
                trigger.source.complete()
            if should_quit:
                break
