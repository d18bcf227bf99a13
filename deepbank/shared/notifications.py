"""Transient user notifications (toasts) with automatic dismissal."""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from deepbank.shared.timers import Scheduler, ThreadingScheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_SECONDS = 3.0
DEFAULT_HISTORY_LIMIT = 100


class Severity(Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFORMATION = "information"


class Remediation(Enum):
    NONE = "none"
    ADD_BANK_ACCOUNT = "add_bank_account"
    DEPOSIT_FUNDS = "deposit_funds"


REMEDIATION_ACTIONS: dict[Remediation, str] = {
    Remediation.ADD_BANK_ACCOUNT: "Add bank account",
    Remediation.DEPOSIT_FUNDS: "Deposit funds",
}


@dataclass(frozen=True)
class Notification:
    severity: Severity
    title: str
    message: str
    remediation: Remediation = Remediation.NONE
    id: int = 0

    @property
    def icon(self) -> str:
        return "✓" if self.severity == Severity.SUCCESS else "✗"

    @property
    def action_label(self) -> str | None:
        return REMEDIATION_ACTIONS.get(self.remediation)


@dataclass
class _Entry:
    notification: Notification
    handle: TimerHandle | None = None


NotificationListener = Callable[[Notification], None]


@dataclass
class NotificationCenter:
    scheduler: Scheduler = field(default_factory=ThreadingScheduler)
    display_seconds: float = DEFAULT_DISPLAY_SECONDS
    history_limit: int = DEFAULT_HISTORY_LIMIT

    def __post_init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._active: dict[int, _Entry] = {}
        self._history: deque[Notification] = deque(maxlen=self.history_limit)
        self._listeners: list[NotificationListener] = []
        self._dismiss_listeners: list[NotificationListener] = []

    def subscribe(
        self,
        on_show: NotificationListener,
        on_dismiss: NotificationListener | None = None,
    ) -> None:
        with self._lock:
            self._listeners.append(on_show)
            if on_dismiss:
                self._dismiss_listeners.append(on_dismiss)

    @property
    def active(self) -> list[Notification]:
        with self._lock:
            return [entry.notification for entry in self._active.values()]

    @property
    def history(self) -> list[Notification]:
        with self._lock:
            return list(self._history)

    def notify(
        self,
        severity: Severity,
        title: str,
        message: str,
        remediation: Remediation = Remediation.NONE,
    ) -> Notification:
        notification = Notification(
            severity=severity,
            title=title,
            message=message,
            remediation=remediation,
            id=next(self._ids),
        )
        entry = _Entry(notification)
        with self._lock:
            self._active[notification.id] = entry
            self._history.append(notification)
            listeners = list(self._listeners)

        entry.handle = self.scheduler.call_later(
            self.display_seconds, lambda: self.dismiss(notification.id)
        )

        for listener in listeners:
            try:
                listener(notification)
            except Exception as e:
                logger.error("Error in notification listener: %s", e)
        return notification

    def success(self, message: str, title: str = "Success") -> Notification:
        return self.notify(Severity.SUCCESS, title, message)

    def error(
        self,
        message: str,
        title: str = "Error",
        remediation: Remediation = Remediation.NONE,
    ) -> Notification:
        return self.notify(Severity.ERROR, title, message, remediation)

    def dismiss(self, notification_id: int) -> bool:
        with self._lock:
            entry = self._active.pop(notification_id, None)
            listeners = list(self._dismiss_listeners)
        if entry is None:
            return False
        if entry.handle is not None:
            entry.handle.cancel()
        for listener in listeners:
            try:
                listener(entry.notification)
            except Exception as e:
                logger.error("Error in notification dismiss listener: %s", e)
        return True
