"""Recharge (deposit) business logic for DeepBank Terminal."""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from deepbank.features.recharge.validators import RechargeStepValidators, utc_now
from deepbank.shared.backend import new_reference, raise_for_rejection
from deepbank.shared.loading import LoadingCoordinator
from deepbank.shared.notifications import NotificationCenter
from deepbank.shared.protocols import BackendProtocol
from deepbank.shared.validation import OperatingHours
from deepbank.shared.wizard import SubmissionReceipt, WizardController, WizardStep

logger = logging.getLogger(__name__)

QUICK_VALUES = [500, 1000, 5000, 10000, 50000, 100000, 500000, 1000000]
DEPOSIT_TABLE = "depositos_clientes"
DEPOSIT_RPC = "request_deposit"
RECEIPT_BUCKET = "comprovativos"


@dataclass(frozen=True)
class PartnerBank:
    id: str
    name: str
    iban: str


PARTNER_BANKS: list[PartnerBank] = [
    PartnerBank("bai", "Banco BAI", "AO06 0040 0000 1234 5678 9012 3"),
    PartnerBank("bfa", "Banco BFA", "AO06 0006 0000 9876 5432 1012 3"),
    PartnerBank("bic", "Banco BIC", "AO06 0051 0000 4455 6677 8812 3"),
    PartnerBank("atlantico", "Banco ATLANTICO", "AO06 0055 0000 1122 3344 5512 3"),
]


@dataclass
class DepositRecord:
    id: str
    amount: float
    bank: str
    status: str
    created_at: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "DepositRecord":
        return cls(
            id=str(row.get("id", "")),
            amount=float(row.get("valor_deposito", 0) or 0),
            bank=row.get("banco", "") or "",
            status=row.get("estado_de_pagamento", "pendente") or "pendente",
            created_at=row.get("created_at", "") or "",
        )


class RechargeService:
    """Deposit requests against the partner banks."""

    STEPS = ("amount", "bank", "confirm")

    def __init__(
        self,
        backend: BackendProtocol,
        operating_hours: OperatingHours | None = None,
        clock: Callable[[], datetime] = utc_now,
        banks: list[PartnerBank] | None = None,
    ):
        self.backend = backend
        self.operating_hours = operating_hours or OperatingHours()
        self.clock = clock
        self.banks = list(banks or PARTNER_BANKS)

    def get_bank(self, bank_id: str) -> PartnerBank | None:
        for bank in self.banks:
            if bank.id == bank_id:
                return bank
        return None

    def build_wizard(
        self,
        loading: LoadingCoordinator,
        notifications: NotificationCenter | None = None,
    ) -> WizardController:
        validators = RechargeStepValidators(
            bank_ids=[bank.id for bank in self.banks],
            operating_hours=self.operating_hours,
            clock=self.clock,
        )
        steps = [
            WizardStep("amount", validators.amount, "Amount"),
            WizardStep("bank", validators.bank, "Partner bank"),
            WizardStep("confirm", validators.confirm, "Transfer & confirm"),
        ]
        return WizardController(
            steps,
            self.submit_deposit,
            loading,
            notifications,
            name="recharge",
            submitting_message="Submitting deposit...",
            success_message="Deposit submitted. Your balance will be credited after review.",
        )

    def upload_receipt(self, user_id: str, receipt_path: str) -> str:
        path = Path(receipt_path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        object_path = f"{user_id}/{new_reference('receipt')}{path.suffix.lower()}"
        stored = self.backend.upload(
            RECEIPT_BUCKET, object_path, path.read_bytes(), content_type
        )
        logger.info("Uploaded deposit receipt to %s", stored)
        return stored

    def submit_deposit(self, payload: dict[str, Any]) -> SubmissionReceipt:
        user_id = self.backend.require_user_id()
        amount = int(payload["amount"])
        bank = self.get_bank(payload["bank_id"])
        if bank is None:
            raise ValueError(f"Unknown partner bank: {payload['bank_id']}")

        receipt_path = payload.get("receipt_path")
        stored_receipt = (
            self.upload_receipt(user_id, receipt_path) if receipt_path else None
        )

        result = self.backend.rpc(
            DEPOSIT_RPC,
            {
                "p_user_id": user_id,
                "p_amount": amount,
                "p_bank_id": bank.id,
                "p_receipt_path": stored_receipt,
            },
        )
        raise_for_rejection(result)
        return SubmissionReceipt(
            reference=result.reference or new_reference("dep"),
            amount=amount,
            message=result.message,
        )

    def get_history(self, limit: int = 20) -> list[DepositRecord]:
        user_id = self.backend.require_user_id()
        rows = self.backend.select(
            DEPOSIT_TABLE,
            filters={"user_id": user_id},
            order="created_at.desc",
            limit=limit,
        )
        return [DepositRecord.from_row(row) for row in rows]
