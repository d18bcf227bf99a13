"""Profile and balance reads for DeepBank Terminal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from deepbank.shared.protocols import BackendProtocol

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"


@dataclass
class Profile:
    id: str
    phone: str = ""
    balance: float = 0.0
    bonus_balance: float = 0.0
    reloaded_amount: float = 0.0
    invite_code: str = ""

    @property
    def display_id(self) -> str:
        return f"DB-{self.id[:5].upper()}"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Profile":
        return cls(
            id=str(row.get("id", "")),
            phone=row.get("phone") or "",
            balance=float(row.get("balance") or 0),
            bonus_balance=float(row.get("bonus_balance") or 0),
            reloaded_amount=float(row.get("reloaded_amount") or 0),
            invite_code=row.get("invite_code") or "",
        )


class AccountService:
    def __init__(self, backend: BackendProtocol):
        self.backend = backend

    def get_profile(self) -> Profile:
        user_id = self.backend.require_user_id()
        rows = self.backend.select(PROFILES_TABLE, filters={"id": user_id}, limit=1)
        if not rows:
            logger.warning("No profile row for user %s", user_id)
            return Profile(id=user_id)
        return Profile.from_row(rows[0])

    def get_balance(self) -> float:
        return self.get_profile().balance

    def get_bonus_balance(self) -> float:
        return self.get_profile().bonus_balance
