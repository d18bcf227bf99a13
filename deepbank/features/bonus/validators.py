"""Bonus conversion validators for DeepBank Terminal."""

from __future__ import annotations

from typing import Any, Mapping

from deepbank.shared.validation import (
    BONUS_CONVERSION_POLICY,
    AmountPolicy,
    AmountValidator,
    ValidationResult,
)


class BonusStepValidators:
    def __init__(
        self, bonus_balance: float, policy: AmountPolicy = BONUS_CONVERSION_POLICY
    ):
        self.bonus_balance = bonus_balance
        self.policy = policy

    def amount(self, payload: Mapping[str, Any]) -> ValidationResult:
        result = AmountValidator.validate(
            payload.get("amount"), self.policy, balance=self.bonus_balance
        )
        if not result.is_valid:
            return result
        return ValidationResult.ok({"amount": result.normalized_value})

    def quick_value(self, value: int) -> ValidationResult:
        """Presets larger than the bonus balance are refused up front."""
        return AmountValidator.validate_against_balance(value, self.bonus_balance)
