"""Bonus-to-balance conversion for DeepBank Terminal."""

from __future__ import annotations

import logging
from typing import Any

from deepbank.features.account.service import AccountService
from deepbank.features.bonus.validators import BonusStepValidators
from deepbank.shared.backend import new_reference, raise_for_rejection
from deepbank.shared.loading import LoadingCoordinator
from deepbank.shared.notifications import NotificationCenter
from deepbank.shared.protocols import BackendProtocol
from deepbank.shared.wizard import SubmissionReceipt, WizardController, WizardStep

logger = logging.getLogger(__name__)

CONVERT_BONUS_RPC = "convert_bonus"
QUICK_VALUES = [100, 500, 1000, 5000]


class BonusService:
    def __init__(self, backend: BackendProtocol, accounts: AccountService | None = None):
        self.backend = backend
        self.accounts = accounts or AccountService(backend)

    def get_bonus_balance(self) -> float:
        return self.accounts.get_bonus_balance()

    def build_wizard(
        self,
        bonus_balance: float,
        loading: LoadingCoordinator,
        notifications: NotificationCenter | None = None,
    ) -> WizardController:
        validators = BonusStepValidators(bonus_balance)
        steps = [
            WizardStep("amount", validators.amount, "Amount"),
            WizardStep("confirm", None, "Confirm conversion"),
        ]
        return WizardController(
            steps,
            self.convert,
            loading,
            notifications,
            name="bonus",
            submitting_message="Converting bonus...",
            success_message="Bonus converted successfully!",
        )

    def convert(self, payload: dict[str, Any]) -> SubmissionReceipt:
        user_id = self.backend.require_user_id()
        amount = int(payload["amount"])
        result = self.backend.rpc(
            CONVERT_BONUS_RPC, {"p_user_id": user_id, "p_amount": amount}
        )
        raise_for_rejection(result)
        logger.info("Converted %d Kz of bonus for user %s", amount, user_id)
        return SubmissionReceipt(
            reference=result.reference or new_reference("bonus"),
            amount=amount,
            message=result.message,
        )
