"""Recharge-specific step validators for DeepBank Terminal."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

from deepbank.shared.validation import (
    RECHARGE_POLICY,
    AmountPolicy,
    AmountValidator,
    ChoiceValidator,
    OperatingHours,
    ValidationErrorKind,
    ValidationResult,
)

RECEIPT_EXTENSIONS = {".jpg", ".jpeg", ".png", ".pdf"}
MAX_RECEIPT_BYTES = 5 * 1024 * 1024


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_receipt_file(value: Any) -> ValidationResult:
    """Check an optional proof-of-payment file before it is uploaded."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return ValidationResult.ok({"receipt_path": None})

    path = Path(str(value)).expanduser()
    if path.suffix.lower() not in RECEIPT_EXTENSIONS:
        allowed = ", ".join(sorted(RECEIPT_EXTENSIONS))
        return ValidationResult.fail(
            ValidationErrorKind.INVALID_FORMAT,
            f"Receipt must be one of: {allowed}",
        )
    if not path.is_file():
        return ValidationResult.fail(
            ValidationErrorKind.INVALID_FORMAT,
            f"Receipt file not found: {path}",
        )
    if path.stat().st_size > MAX_RECEIPT_BYTES:
        return ValidationResult.fail(
            ValidationErrorKind.INVALID_FORMAT,
            "Receipt file is larger than 5 MB",
        )
    return ValidationResult.ok({"receipt_path": str(path)})


class RechargeStepValidators:
    def __init__(
        self,
        bank_ids: Iterable[str],
        operating_hours: OperatingHours | None = None,
        clock: Callable[[], datetime] = utc_now,
        policy: AmountPolicy = RECHARGE_POLICY,
    ):
        self.bank_ids = list(bank_ids)
        self.operating_hours = operating_hours or OperatingHours()
        self.clock = clock
        self.policy = policy

    def amount(self, payload: Mapping[str, Any]) -> ValidationResult:
        result = AmountValidator.validate(payload.get("amount"), self.policy)
        if not result.is_valid:
            return result

        hours_result = self.operating_hours.check(self.clock())
        if not hours_result.is_valid:
            return hours_result

        return ValidationResult.ok({"amount": result.normalized_value})

    def bank(self, payload: Mapping[str, Any]) -> ValidationResult:
        result = ChoiceValidator.validate(payload.get("bank_id"), self.bank_ids, "bank")
        if not result.is_valid:
            return result
        return ValidationResult.ok({"bank_id": result.normalized_value})

    def confirm(self, payload: Mapping[str, Any]) -> ValidationResult:
        return validate_receipt_file(payload.get("receipt_path"))
