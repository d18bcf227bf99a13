"""Binding to the hosted backend (REST tables, RPC functions, auth, storage).

Every wallet rule (balances, approvals, referral rewards) is enforced
server side; this client only moves requests and responses.
"""

from __future__ import annotations

import logging
import re
import threading
import uuid
from dataclasses import dataclass
from typing import Any

from deepbank.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)
from deepbank.shared.wizard import BusinessRuleRejection, SubmissionErrorKind

logger = logging.getLogger(__name__)


class BackendError(Exception):
    pass


class NotAuthenticatedError(BusinessRuleRejection):
    def __init__(self, message: str = "User is not authenticated"):
        super().__init__(SubmissionErrorKind.NOT_AUTHENTICATED, message)


@dataclass
class Session:
    access_token: str
    user_id: str
    email: str = ""
    refresh_token: str = ""


@dataclass
class RemoteResult:
    success: bool
    message: str = ""
    reason: str | None = None
    reference: str | None = None
    data: dict[str, Any] | None = None


REASON_CODES: dict[str, SubmissionErrorKind] = {
    "insufficient_funds": SubmissionErrorKind.INSUFFICIENT_FUNDS,
    "insufficient_balance": SubmissionErrorKind.INSUFFICIENT_FUNDS,
    "outside_business_hours": SubmissionErrorKind.OUTSIDE_OPERATING_HOURS,
    "outside_operating_hours": SubmissionErrorKind.OUTSIDE_OPERATING_HOURS,
    "no_bank_account": SubmissionErrorKind.NO_BANK_ACCOUNT,
    "limit_exceeded": SubmissionErrorKind.LIMIT_EXCEEDED,
    "purchase_limit": SubmissionErrorKind.LIMIT_EXCEEDED,
    "not_authenticated": SubmissionErrorKind.NOT_AUTHENTICATED,
}

REJECTION_PATTERNS: list[tuple[re.Pattern[str], SubmissionErrorKind]] = [
    (
        re.compile(r"insufficient|saldo insuficiente|not enough", re.IGNORECASE),
        SubmissionErrorKind.INSUFFICIENT_FUNDS,
    ),
    (
        re.compile(r"business hours|operating hours|hor[aá]rio", re.IGNORECASE),
        SubmissionErrorKind.OUTSIDE_OPERATING_HOURS,
    ),
    (
        re.compile(r"bank account|conta banc[aá]ria|iban", re.IGNORECASE),
        SubmissionErrorKind.NO_BANK_ACCOUNT,
    ),
    (
        re.compile(r"limit|limite", re.IGNORECASE),
        SubmissionErrorKind.LIMIT_EXCEEDED,
    ),
    (
        re.compile(r"not authenticated|n[aã]o autenticado|jwt", re.IGNORECASE),
        SubmissionErrorKind.NOT_AUTHENTICATED,
    ),
]


def classify_rejection(reason: str | None, message: str = "") -> SubmissionErrorKind:
    if reason and reason.lower() in REASON_CODES:
        return REASON_CODES[reason.lower()]
    for pattern, kind in REJECTION_PATTERNS:
        if pattern.search(message or ""):
            return kind
    return SubmissionErrorKind.UNKNOWN


def parse_rpc_response(data: Any) -> RemoteResult:
    """Normalize the ``{success, message}`` payloads returned by RPC functions."""
    if isinstance(data, list) and len(data) == 1:
        data = data[0]
    if not isinstance(data, dict):
        return RemoteResult(success=data is not None and data is not False, data=None)

    success = bool(data.get("success", False))
    reference = data.get("id") or data.get("reference")
    return RemoteResult(
        success=success,
        message=str(data.get("message") or ""),
        reason=data.get("reason") or data.get("code"),
        reference=str(reference) if reference is not None else None,
        data=data,
    )


def raise_for_rejection(result: RemoteResult) -> RemoteResult:
    if not result.success:
        kind = classify_rejection(result.reason, result.message)
        raise BusinessRuleRejection(kind, result.message)
    return result


def rejection_from_http_error(error: NetworkError) -> BusinessRuleRejection | None:
    """Map a 4xx raised by a database function onto a business-rule rejection.

    PostgREST reports ``RAISE EXCEPTION`` as ``{code, message, hint}``.
    Returns None when the body carries no recognised rule.
    """
    if error.error_type != NetworkErrorType.HTTP_ERROR:
        return None
    if error.status_code is None or not 400 <= error.status_code < 500:
        return None

    response = getattr(error.original_error, "response", None)
    try:
        body = response.json() if response is not None else {}
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = error.response_text or ""
    kind = classify_rejection(body.get("code"), message)
    hint = body.get("hint")
    if kind == SubmissionErrorKind.UNKNOWN and isinstance(hint, str):
        kind = classify_rejection(hint, hint)
    if kind == SubmissionErrorKind.UNKNOWN:
        return None
    return BusinessRuleRejection(kind, message)


def new_reference(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class BackendClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_config: TimeoutConfig | None = None,
        retry_config: RetryConfig | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._session: Session | None = None
        self._lock = threading.Lock()
        self.network = NetworkClient(
            self.base_url,
            timeout_config=timeout_config,
            retry_config=retry_config,
            default_headers=self._headers,
        )

    @property
    def session(self) -> Session | None:
        with self._lock:
            return self._session

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    def require_user_id(self) -> str:
        session = self.session
        if session is None:
            raise NotAuthenticatedError()
        return session.user_id

    def _headers(self) -> dict[str, str]:
        session = self.session
        token = session.access_token if session else self.api_key
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token}",
        }

    def sign_in(self, email: str, password: str) -> Session:
        data = self.network.post(
            "/auth/v1/token?grant_type=password",
            context="Sign in",
            json={"email": email, "password": password},
        )
        if not isinstance(data, dict) or "access_token" not in data:
            raise BackendError("Unexpected sign-in response")

        user = data.get("user") or {}
        session = Session(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", ""),
            user_id=str(user.get("id", "")),
            email=user.get("email", email),
        )
        with self._lock:
            self._session = session
        logger.info("Signed in as user %s", session.user_id)
        return session

    def sign_out(self) -> None:
        if self.session is None:
            return
        try:
            self.network.post("/auth/v1/logout", context="Sign out")
        finally:
            with self._lock:
                self._session = None
        logger.info("Signed out")

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        columns: str = "*",
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit

        rows = self.network.get(f"/rest/v1/{table}", context=f"Read {table}", params=params)
        return rows if isinstance(rows, list) else []

    def insert(
        self, table: str, rows: list[dict[str, Any]] | dict[str, Any]
    ) -> list[dict[str, Any]]:
        payload = rows if isinstance(rows, list) else [rows]
        created = self.network.post(
            f"/rest/v1/{table}",
            context=f"Insert into {table}",
            json=payload,
            headers={"Prefer": "return=representation"},
        )
        return created if isinstance(created, list) else []

    def rpc(self, function: str, params: dict[str, Any] | None = None) -> RemoteResult:
        try:
            data = self.network.post(
                f"/rest/v1/rpc/{function}",
                context=f"RPC {function}",
                json=params or {},
            )
        except NetworkError as e:
            rejection = rejection_from_http_error(e)
            if rejection is None:
                raise
            logger.info(
                "RPC %s rejected with HTTP %s: %s",
                function,
                e.status_code,
                rejection.kind.value,
            )
            raise rejection from e
        result = parse_rpc_response(data)
        logger.info(
            "RPC %s -> success=%s reason=%s", function, result.success, result.reason
        )
        return result

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        self.network.post(
            f"/storage/v1/object/{bucket}/{path}",
            context=f"Upload {bucket}/{path}",
            data=content,
            headers={"Content-Type": content_type},
        )
        return f"{bucket}/{path}"
