"""Linked bank accounts (withdrawal destinations) for DeepBank Terminal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from deepbank.features.bank_account.validators import (
    BankAccountForm,
    validate_bank_account_form,
)
from deepbank.shared.protocols import BackendProtocol
from deepbank.shared.validation import ValidationResult

logger = logging.getLogger(__name__)

BANK_ACCOUNTS_TABLE = "bancos_clientes"


@dataclass
class BankAccount:
    id: str
    holder_name: str
    bank_name: str
    iban: str

    @property
    def masked_iban(self) -> str:
        return f"AO06 ... {self.iban[-5:]}" if self.iban else ""

    @property
    def label(self) -> str:
        return f"{self.bank_name} ({self.masked_iban})"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "BankAccount":
        return cls(
            id=str(row.get("id", "")),
            holder_name=row.get("nome_completo", "") or "",
            bank_name=row.get("nome_do_banco", "") or "",
            iban=row.get("iban", "") or "",
        )


class BankAccountService:
    def __init__(self, backend: BackendProtocol):
        self.backend = backend

    def list_accounts(self) -> list[BankAccount]:
        user_id = self.backend.require_user_id()
        rows = self.backend.select(
            BANK_ACCOUNTS_TABLE,
            filters={"user_id": user_id},
            order="created_at.asc",
        )
        return [BankAccount.from_row(row) for row in rows]

    def validate(self, full_name: Any, bank_name: Any, iban: Any) -> ValidationResult:
        return validate_bank_account_form(full_name, bank_name, iban)

    def add_account(self, form: BankAccountForm) -> BankAccount:
        user_id = self.backend.require_user_id()
        created = self.backend.insert(
            BANK_ACCOUNTS_TABLE,
            {
                "user_id": user_id,
                "nome_completo": form.full_name,
                "nome_do_banco": form.bank_name,
                "iban": form.iban,
            },
        )
        logger.info("Linked %s account for user %s", form.bank_name, user_id)
        if created:
            return BankAccount.from_row(created[0])
        return BankAccount(
            id="",
            holder_name=form.full_name,
            bank_name=form.bank_name,
            iban=form.iban,
        )
