"""Protocols shared by feature services."""

from __future__ import annotations

from typing import Any, Protocol

from deepbank.shared.backend import RemoteResult


class BackendProtocol(Protocol):
    """Backend operations feature services depend on."""

    def require_user_id(self) -> str: ...

    def rpc(
        self, function: str, params: dict[str, Any] | None = None
    ) -> RemoteResult: ...

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        columns: str = "*",
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...

    def insert(
        self, table: str, rows: list[dict[str, Any]] | dict[str, Any]
    ) -> list[dict[str, Any]]: ...

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str: ...
