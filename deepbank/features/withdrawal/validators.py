"""Withdrawal-specific step validators for DeepBank Terminal."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from deepbank.shared.validation import (
    WITHDRAWAL_POLICY,
    AmountPolicy,
    AmountValidator,
    ChoiceValidator,
    ValidationResult,
)


class WithdrawalStepValidators:
    def __init__(
        self,
        account_ids: Iterable[str],
        balance: float | None = None,
        policy: AmountPolicy = WITHDRAWAL_POLICY,
    ):
        self.account_ids = list(account_ids)
        self.balance = balance
        self.policy = policy

    def amount(self, payload: Mapping[str, Any]) -> ValidationResult:
        result = AmountValidator.validate(
            payload.get("amount"), self.policy, balance=self.balance
        )
        if not result.is_valid:
            return result
        return ValidationResult.ok({"amount": result.normalized_value})

    def account(self, payload: Mapping[str, Any]) -> ValidationResult:
        result = ChoiceValidator.validate(
            payload.get("bank_account_id"), self.account_ids, "bank account"
        )
        if not result.is_valid:
            return result
        return ValidationResult.ok({"bank_account_id": result.normalized_value})
