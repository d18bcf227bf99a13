import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Callable
from zoneinfo import ZoneInfo

import pytest

from deepbank.shared.backend import NotAuthenticatedError, RemoteResult, parse_rpc_response
from deepbank.shared.loading import LoadingConfig, LoadingCoordinator
from deepbank.shared.notifications import NotificationCenter

LUANDA = ZoneInfo("Africa/Luanda")


class FakeTimerHandle:
    def __init__(self, when: float, seq: int, callback: Callable[[], None]):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Virtual clock: callbacks only run when a test calls ``advance``."""

    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._timers: list[FakeTimerHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimerHandle:
        self._seq += 1
        handle = FakeTimerHandle(self.now + delay, self._seq, callback)
        self._timers.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for handle in self._timers if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._timers if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._timers.remove(handle)
            self.now = handle.when
            handle.callback()
        self.now = target


class FakeBackend:
    """In-memory stand-in for ``BackendClient``."""

    def __init__(self, user_id: str | None = "user-1"):
        self.user_id = user_id
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.rpc_responses: dict[str, Any] = {}
        self.rpc_calls: list[tuple[str, dict[str, Any]]] = []
        self.uploads: list[tuple[str, str, bytes, str]] = []
        self.on_rpc: Callable[[str, dict[str, Any]], None] | None = None

    def require_user_id(self) -> str:
        if not self.user_id:
            raise NotAuthenticatedError()
        return self.user_id

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        columns: str = "*",
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        rows = [
            row
            for row in self.tables.get(table, [])
            if all(str(row.get(k)) == str(v) for k, v in (filters or {}).items())
        ]
        return rows[:limit] if limit else rows

    def insert(self, table: str, rows: list[dict[str, Any]] | dict[str, Any]) -> list[dict[str, Any]]:
        created = []
        for row in rows if isinstance(rows, list) else [rows]:
            stored = {"id": f"{table}-{len(self.tables.get(table, [])) + 1}", **row}
            self.tables.setdefault(table, []).append(stored)
            created.append(stored)
        return created

    def rpc(self, function: str, params: dict[str, Any] | None = None) -> RemoteResult:
        params = params or {}
        self.rpc_calls.append((function, params))
        if self.on_rpc:
            self.on_rpc(function, params)
        response = self.rpc_responses.get(function, {"success": True, "id": f"{function}-1"})
        if isinstance(response, Exception):
            raise response
        return parse_rpc_response(response)

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        self.uploads.append((bucket, path, content, content_type))
        return f"{bucket}/{path}"


def luanda_time(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 6, 3, hour, minute, tzinfo=LUANDA)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def loading(scheduler):
    return LoadingCoordinator(LoadingConfig(), scheduler)


@pytest.fixture
def notifications(scheduler):
    return NotificationCenter(scheduler=scheduler)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def open_clock():
    """Clock fixed at 10:00 Luanda time, inside operating hours."""
    return lambda: luanda_time(10)


@pytest.fixture
def closed_clock():
    """Clock fixed at 22:00 Luanda time, after closing."""
    return lambda: luanda_time(22)


@pytest.fixture(autouse=True)
def isolate_app_dir(monkeypatch, request):
    """Run tests with an isolated config directory unless talking to a live backend."""
    if request.node.get_closest_marker("integration"):
        yield
        return

    for name in ("DEEPBANK_BACKEND_URL", "DEEPBANK_API_KEY", "DEEPBANK_TIMEZONE", "DEEPBANK_LOADING_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    with tempfile.TemporaryDirectory(prefix="deepbank-test-") as tmp_dir:
        monkeypatch.setenv("DEEPBANK_DIR", str(Path(tmp_dir)))
        yield


@pytest.fixture
def clock_at():
    """Build a fixed clock for an hour and minute in Luanda time."""

    def build(hour: int, minute: int = 0) -> Callable[[], datetime]:
        return lambda: luanda_time(hour, minute)

    return build
