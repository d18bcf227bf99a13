"""Withdrawal business logic for DeepBank Terminal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from deepbank.features.account.service import AccountService
from deepbank.features.bank_account.service import BankAccount, BankAccountService
from deepbank.features.withdrawal.validators import WithdrawalStepValidators
from deepbank.shared.backend import new_reference, raise_for_rejection
from deepbank.shared.loading import LoadingCoordinator
from deepbank.shared.notifications import NotificationCenter, Remediation
from deepbank.shared.protocols import BackendProtocol
from deepbank.shared.validation import WITHDRAWAL_POLICY, AmountPolicy, format_kz
from deepbank.shared.wizard import (
    SubmissionError,
    SubmissionErrorKind,
    SubmissionReceipt,
    WizardController,
    WizardStep,
)

logger = logging.getLogger(__name__)

WITHDRAWAL_TABLE = "retirada_clientes"
WITHDRAWAL_RPC = "request_withdrawal"
WITHDRAWAL_FEE_PERCENT = 10


@dataclass(frozen=True)
class WithdrawalQuote:
    amount: int
    fee: float
    net_amount: float

    @classmethod
    def for_amount(
        cls, amount: int, fee_percent: float = WITHDRAWAL_FEE_PERCENT
    ) -> "WithdrawalQuote":
        fee = amount * fee_percent / 100
        return cls(amount=amount, fee=fee, net_amount=amount - fee)


@dataclass
class WithdrawalRecord:
    id: str
    amount: float
    bank_name: str
    status: str
    created_at: str
    fee_percent: float = WITHDRAWAL_FEE_PERCENT

    @property
    def quote(self) -> WithdrawalQuote:
        return WithdrawalQuote.for_amount(int(self.amount), self.fee_percent)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "WithdrawalRecord":
        return cls(
            id=str(row.get("id", "")),
            amount=float(row.get("valor_solicitado", 0) or 0),
            bank_name=row.get("nome_do_banco", "") or "",
            status=row.get("estado", "pendente") or "pendente",
            created_at=row.get("created_at", "") or "",
            fee_percent=float(row.get("taxa", WITHDRAWAL_FEE_PERCENT) or 0),
        )


@dataclass
class WithdrawalContext:
    """Balance and destinations loaded before the form opens."""

    balance: float
    accounts: list[BankAccount]


class WithdrawalService:
    STEPS = ("amount", "account", "confirm")

    def __init__(
        self,
        backend: BackendProtocol,
        accounts: AccountService | None = None,
        bank_accounts: BankAccountService | None = None,
        policy: AmountPolicy = WITHDRAWAL_POLICY,
    ):
        self.backend = backend
        self.accounts = accounts or AccountService(backend)
        self.bank_accounts = bank_accounts or BankAccountService(backend)
        self.policy = policy

    def load_context(self) -> WithdrawalContext:
        return WithdrawalContext(
            balance=self.accounts.get_balance(),
            accounts=self.bank_accounts.list_accounts(),
        )

    def check_eligibility(self, context: WithdrawalContext) -> SubmissionError | None:
        """Return the blocking condition, if any, before showing the form."""
        if not context.accounts:
            return SubmissionError(
                SubmissionErrorKind.NO_BANK_ACCOUNT,
                "Link a bank account before requesting a withdrawal.",
                Remediation.ADD_BANK_ACCOUNT,
            )
        if context.balance < self.policy.minimum:
            return SubmissionError(
                SubmissionErrorKind.INSUFFICIENT_FUNDS,
                f"The minimum withdrawal is {format_kz(self.policy.minimum)}. "
                "Deposit funds to continue.",
                Remediation.DEPOSIT_FUNDS,
            )
        return None

    def quote(self, amount: int) -> WithdrawalQuote:
        return WithdrawalQuote.for_amount(amount)

    def build_wizard(
        self,
        context: WithdrawalContext,
        loading: LoadingCoordinator,
        notifications: NotificationCenter | None = None,
    ) -> WizardController:
        validators = WithdrawalStepValidators(
            account_ids=[account.id for account in context.accounts],
            balance=context.balance,
            policy=self.policy,
        )
        steps = [
            WizardStep("amount", validators.amount, "Amount"),
            WizardStep("account", validators.account, "Destination account"),
            WizardStep("confirm", None, "Review & confirm"),
        ]
        return WizardController(
            steps,
            self.submit_withdrawal,
            loading,
            notifications,
            name="withdrawal",
            submitting_message="Requesting withdrawal...",
            success_message="Withdrawal requested. It will be processed after review.",
        )

    def submit_withdrawal(self, payload: dict[str, Any]) -> SubmissionReceipt:
        user_id = self.backend.require_user_id()
        amount = int(payload["amount"])
        result = self.backend.rpc(
            WITHDRAWAL_RPC,
            {
                "p_user_id": user_id,
                "p_amount": amount,
                "p_bank_account_id": payload["bank_account_id"],
            },
        )
        raise_for_rejection(result)
        return SubmissionReceipt(
            reference=result.reference or new_reference("wd"),
            amount=amount,
            message=result.message,
        )

    def get_history(self, limit: int = 20) -> list[WithdrawalRecord]:
        user_id = self.backend.require_user_id()
        rows = self.backend.select(
            WITHDRAWAL_TABLE,
            filters={"user_id": user_id},
            order="created_at.desc",
            limit=limit,
        )
        return [WithdrawalRecord.from_row(row) for row in rows]
