"""Trigger sources and the queue that multiplexes them.

Every independent source (filesystem events, the status ticker, the upstream
ticker, the keyboard) runs on its own daemon thread and feeds one shared
queue. A source never has more than one trigger queued and one in flight:
it re-arms only after the consumer reports the previous trigger handled.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from queue import Empty, Queue

logger = logging.getLogger(__name__)

STOP_JOIN_TIMEOUT_SECONDS = 1.0


class TriggerKind(str, Enum):
    FILESYSTEM = "filesystem"
    STATUS_TICK = "status_tick"
    UPSTREAM = "upstream"
    KEY = "key"


@dataclass(frozen=True)
class Trigger:
    kind: TriggerKind
    source: TriggerSource
    payload: object = None


class _SourceState(str, Enum):
    IDLE = "idle"
    QUEUED = "queued"
    RUNNING = "running"


class TriggerSource:
    """Coalescing cell for one producer.

    ``fire`` only enqueues from idle. Fires while a trigger is queued are
    absorbed into it; fires while it is being handled collapse into a single
    follow-up that is queued when the handler completes.
    """

    def __init__(self, kind: TriggerKind, queue: Queue[Trigger]) -> None:
        self.kind = kind
        self._queue = queue
        self._lock = threading.Lock()
        self._state = _SourceState.IDLE
        self._follow_up = False
        self._follow_up_payload: object = None
        self._idle = threading.Event()
        self._idle.set()
        self.fired = 0
        self.delivered = 0

    @property
    def idle(self) -> bool:
        return self._idle.is_set()

    def fire(self, payload: object = None) -> bool:
        """Offer a trigger; return whether a new queue entry was created."""
        with self._lock:
            self.fired += 1
            if self._state is _SourceState.IDLE:
                self._state = _SourceState.QUEUED
                self._idle.clear()
                self.delivered += 1
                self._queue.put(Trigger(self.kind, self, payload))
                return True
            if self._state is _SourceState.RUNNING:
                self._follow_up = True
                self._follow_up_payload = payload
            return False

    def begin(self) -> None:
        with self._lock:
            self._state = _SourceState.RUNNING

    def complete(self) -> None:
        """Mark the in-flight trigger handled, queuing the follow-up if one is owed."""
        with self._lock:
            if self._follow_up:
                self._follow_up = False
                payload = self._follow_up_payload
                self._follow_up_payload = None
                self._state = _SourceState.QUEUED
                self.delivered += 1
                self._queue.put(Trigger(self.kind, self, payload))
                return
            self._state = _SourceState.IDLE
            self._idle.set()

    def wait_idle(self, stop: threading.Event, poll_seconds: float = 0.1) -> bool:
        """Block until idle; ``False`` if ``stop`` was set first."""
        while not stop.is_set():
            if self._idle.wait(poll_seconds):
                return True
        return False


class RefreshScheduler:
    """Own the trigger queue, the sources and their worker threads."""

    def __init__(self) -> None:
        self.queue: Queue[Trigger] = Queue()
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def source(self, kind: TriggerKind) -> TriggerSource:
        return TriggerSource(kind, self.queue)

    def _spawn(self, name: str, target: Callable[[], None]) -> None:
        thread = threading.Thread(target=target, name=f"vigil-{name}", daemon=True)
        self._threads.append(thread)
        thread.start()

    def add_event_stream(self, kind: TriggerKind, events: Callable[[], Iterator[object]]) -> TriggerSource:
        """Fire ``kind`` for every item of ``events()``; bursts coalesce."""
        source = self.source(kind)

        def pump() -> None:
            for _event in events():
                if self.stopping:
                    return
                source.fire()

        self._spawn(kind.value, pump)
        return source

    def add_periodic(
        self,
        kind: TriggerKind,
        interval_seconds: float,
        produce: Callable[[], object] | None = None,
        run_immediately: bool = False,
    ) -> TriggerSource:
        """Fire ``kind`` every ``interval_seconds`` after the previous one was handled.

        ``produce`` runs on the worker thread and its result becomes the
        trigger payload, which keeps slow work off the consumer.
        """
        source = self.source(kind)

        def tick() -> None:
            first = run_immediately
            while first or not self._stop.wait(interval_seconds):
                first = False
                payload = None
                if produce is not None:
                    try:
                        payload = produce()
                    except Exception:
                        logger.exception(f"{kind.value} producer failed")
                        continue
                if self.stopping:
                    return
                source.fire(payload)
                if not source.wait_idle(self._stop):
                    return

        self._spawn(kind.value, tick)
        return source

    def add_reader(self, kind: TriggerKind, read: Callable[[], object]) -> TriggerSource:
        """Fire ``kind`` with each non-empty ``read()`` result, one at a time."""
        source = self.source(kind)

        def reader() -> None:
            while not self.stopping:
                try:
                    value = read()
                except OSError as exc:
                    logger.error(f"{kind.value} reader stopped: {exc}")
                    return
                if not value or self.stopping:
                    continue
                source.fire(value)
                if not source.wait_idle(self._stop):
                    return

        self._spawn(kind.value, reader)
        return source

    def next_trigger(self, timeout: float | None = None) -> Trigger | None:
        try:
            return self.queue.get(timeout=timeout)
        except Empty:
            return None

    def stop(self) -> None:
        """Ask all workers to exit and wait briefly for them."""
        self._stop.set()
        for thread in self._threads:
            if thread is threading.current_thread():
                continue
            thread.join(timeout=STOP_JOIN_TIMEOUT_SECONDS)
        self._threads.clear()


__all__ = ["RefreshScheduler", "Trigger", "TriggerKind", "TriggerSource"]
