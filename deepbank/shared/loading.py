"""Shared busy signal for blocking operations.

This module provides the loading coordinator every screen funnels its
blocking backend calls through:
- one busy flag (spinner overlay) for the whole application
- a dead-man's switch that flips to a connectivity error when nothing
  completes within the threshold
- a self-dismissing timeout banner
"""

from __future__ import annotations

import itertools
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator

from deepbank.shared.timers import Scheduler, ThreadingScheduler, TimerSlot

logger = logging.getLogger(__name__)


class LoadingPhase(Enum):
    IDLE = "idle"
    BUSY = "busy"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class LoadingState:
    busy: bool = False
    message: str = ""
    timed_out: bool = False
    pending: int = 0

    @property
    def phase(self) -> LoadingPhase:
        if self.busy:
            return LoadingPhase.BUSY
        if self.timed_out:
            return LoadingPhase.TIMED_OUT
        return LoadingPhase.IDLE


@dataclass
class LoadingConfig:
    timeout_seconds: float = 10.0
    banner_seconds: float = 8.0
    counted: bool = True


LoadingListener = Callable[[LoadingState], None]


class LoadingCoordinator:
    """Tracks outstanding operations and escalates when they stall.

    ``begin`` hands out a token per operation. In counted mode (default)
    ``busy`` stays true until every token is released. With
    ``LoadingConfig(counted=False)`` the coordinator behaves as a plain
    level: any ``end`` clears it.
    """

    def __init__(
        self,
        config: LoadingConfig | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.config = config or LoadingConfig()
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.RLock()
        self._tokens = itertools.count(1)
        self._outstanding: list[int] = []
        self._message = ""
        self._timed_out = False
        self._deadline = TimerSlot(self._scheduler, "loading deadline")
        self._banner = TimerSlot(self._scheduler, "timeout banner")
        self._listeners: list[LoadingListener] = []

    @property
    def state(self) -> LoadingState:
        with self._lock:
            return self._snapshot()

    @property
    def busy(self) -> bool:
        with self._lock:
            return bool(self._outstanding)

    @property
    def timed_out(self) -> bool:
        with self._lock:
            return self._timed_out

    @property
    def message(self) -> str:
        with self._lock:
            return self._message

    def _snapshot(self) -> LoadingState:
        pending = len(self._outstanding)
        if not self.config.counted:
            pending = min(pending, 1)
        return LoadingState(
            busy=bool(self._outstanding),
            message=self._message,
            timed_out=self._timed_out,
            pending=pending,
        )

    def subscribe(self, listener: LoadingListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: LoadingState) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception as e:
                logger.error("Error in loading state listener: %s", e)

    def begin(self, message: str = "") -> int:
        with self._lock:
            token = next(self._tokens)
            self._outstanding.append(token)
            self._message = message
            if self._timed_out:
                self._timed_out = False
                self._banner.disarm()
            self._deadline.arm(self.config.timeout_seconds, self._on_deadline)
            state = self._snapshot()

        logger.debug("Loading started (token=%d, pending=%d)", token, state.pending)
        self._publish(state)
        return token

    def end(self, token: int | None = None) -> None:
        with self._lock:
            if not self._outstanding:
                return
            if token is None:
                self._outstanding.clear()
            elif token not in self._outstanding:
                return
            elif self.config.counted:
                self._outstanding.remove(token)
            else:
                self._outstanding.clear()

            if self._outstanding:
                self._deadline.arm(self.config.timeout_seconds, self._on_deadline)
            else:
                self._message = ""
                self._deadline.disarm()
            state = self._snapshot()

        logger.debug("Loading released (pending=%d)", state.pending)
        self._publish(state)

    def begin_with_delayed_end(self, delay: float, message: str = "") -> int:
        token = self.begin(message)
        self._scheduler.call_later(delay, lambda: self.end(token))
        return token

    def show_with_timeout(self, loading: bool, delay: float = 0.0) -> None:
        if loading:
            self.begin(self._message)
        elif delay > 0:
            self._scheduler.call_later(delay, self.end)
        else:
            self.end()

    @contextmanager
    def operation(self, message: str = "") -> Iterator[int]:
        token = self.begin(message)
        try:
            yield token
        finally:
            self.end(token)

    def dismiss_timeout(self) -> None:
        with self._lock:
            if not self._timed_out:
                return
            self._timed_out = False
            self._banner.disarm()
            state = self._snapshot()
        self._publish(state)

    def _on_deadline(self) -> None:
        with self._lock:
            # A begin() that raced the timer thread re-armed the slot.
            if not self._outstanding or self._deadline.armed:
                return
            abandoned = len(self._outstanding)
            self._outstanding.clear()
            self._message = ""
            self._timed_out = True
            self._banner.arm(self.config.banner_seconds, self._on_banner_expired)
            state = self._snapshot()

        logger.warning(
            "No loading operation completed within %.1fs; %d abandoned",
            self.config.timeout_seconds,
            abandoned,
        )
        self._publish(state)

    def _on_banner_expired(self) -> None:
        with self._lock:
            if not self._timed_out or self._banner.armed:
                return
            self._timed_out = False
            state = self._snapshot()
        self._publish(state)


def get_loading_state_message(state: LoadingState) -> tuple[str, str]:
    messages = {
        LoadingPhase.IDLE: ("", ""),
        LoadingPhase.BUSY: ("Please wait", state.message or "Processing..."),
        LoadingPhase.TIMED_OUT: (
            "Connection problem",
            "The server is taking too long to respond. Check your connection and try again.",
        ),
    }
    return messages.get(state.phase, ("", ""))
