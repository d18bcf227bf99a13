"""Cancellable timer handles used by the loading coordinator and toasts."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback once after ``delay`` seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingTimerHandle:
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    @property
    def active(self) -> bool:
        return self._timer.is_alive()

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler:
    """Scheduler backed by daemon ``threading.Timer`` instances.

    Callbacks run on the timer thread. UI code that reacts to them must
    marshal back to its own loop (textual's ``call_from_thread``).
    """

    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> ThreadingTimerHandle:
        def run() -> None:
            try:
                callback()
            except Exception as e:
                logger.error("Error in scheduled callback: %s", e)

        timer = threading.Timer(max(0.0, delay), run)
        timer.daemon = True
        timer.start()
        return ThreadingTimerHandle(timer)


class TimerSlot:
    """Holds at most one armed timer and ignores callbacks of replaced ones.

    Every ``arm`` bumps a generation counter, so a timer that was cancelled
    too late to stop its thread still cannot act on newer state.
    """

    def __init__(self, scheduler: Scheduler, name: str = "timer"):
        self._scheduler = scheduler
        self._name = name
        self._handle: TimerHandle | None = None
        self._generation = 0
        self._armed_generation: int | None = None
        self._lock = threading.Lock()

    @property
    def armed(self) -> bool:
        with self._lock:
            return self._armed_generation is not None

    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            generation = self._generation
            self._armed_generation = generation

        def fire() -> None:
            with self._lock:
                if self._armed_generation != generation:
                    logger.debug("Ignoring stale %s callback", self._name)
                    return
                self._armed_generation = None
                self._handle = None
            callback()

        handle = self._scheduler.call_later(delay, fire)
        with self._lock:
            if self._armed_generation == generation:
                self._handle = handle
            else:
                handle.cancel()

    def disarm(self) -> None:
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            self._armed_generation = None

    def _cancel_locked(self) -> None:
        if self._handle is not None:
            try:
                self._handle.cancel()
            finally:
                self._handle = None
