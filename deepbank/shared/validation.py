"""Input validation for amounts, operating hours and bank details."""

import re
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Any, Iterable
from zoneinfo import ZoneInfo


class ValidationErrorKind(Enum):
    MISSING_REQUIRED_FIELD = "missing_required_field"
    NOT_NUMERIC = "not_numeric"
    AMOUNT_BELOW_MINIMUM = "amount_below_minimum"
    AMOUNT_ABOVE_MAXIMUM = "amount_above_maximum"
    EXCEEDS_BALANCE = "exceeds_balance"
    OUTSIDE_OPERATING_HOURS = "outside_operating_hours"
    UNKNOWN_OPTION = "unknown_option"
    INVALID_FORMAT = "invalid_format"
    SUBMISSION_IN_PROGRESS = "submission_in_progress"


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None
    error_kind: ValidationErrorKind | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, normalized_value: Any = None) -> "ValidationResult":
        return cls(is_valid=True, normalized_value=normalized_value)

    @classmethod
    def fail(
        cls, kind: ValidationErrorKind, message: str, **details: Any
    ) -> "ValidationResult":
        return cls(
            is_valid=False,
            error_message=message,
            error_kind=kind,
            details=details,
        )


@dataclass(frozen=True)
class AmountPolicy:
    minimum: int
    maximum: int | None = None


RECHARGE_POLICY = AmountPolicy(minimum=500)
WITHDRAWAL_POLICY = AmountPolicy(minimum=3000, maximum=200_000)
BONUS_CONVERSION_POLICY = AmountPolicy(minimum=100)

_PLAIN_DIGITS = re.compile(r"^\d+$")
_GROUPED_DIGITS = re.compile(r"^\d{1,3}(?:([.,\s])\d{3})(?:\1\d{3})*$")


def format_kz(amount: int | float) -> str:
    """Format an amount the way the platform shows kwanza values: ``12 500 Kz``."""
    return f"{int(amount):,}".replace(",", " ") + " Kz"


class AmountValidator:
    @staticmethod
    def parse_amount(value: str | int | None) -> ValidationResult:
        if isinstance(value, bool):
            return ValidationResult.fail(
                ValidationErrorKind.NOT_NUMERIC, "Amount must be a whole number"
            )

        if isinstance(value, int):
            if value <= 0:
                return ValidationResult.fail(
                    ValidationErrorKind.NOT_NUMERIC,
                    "Amount must be greater than zero",
                )
            return ValidationResult.ok(value)

        if value is None or not str(value).strip():
            return ValidationResult.fail(
                ValidationErrorKind.MISSING_REQUIRED_FIELD,
                "Enter an amount to continue",
            )

        raw_amount = str(value).strip().removesuffix("Kz").strip()

        if raw_amount.startswith("-") or raw_amount.startswith("+"):
            return ValidationResult.fail(
                ValidationErrorKind.NOT_NUMERIC,
                "Amount must be a positive number",
            )

        if _PLAIN_DIGITS.match(raw_amount):
            amount = int(raw_amount)
        elif _GROUPED_DIGITS.match(raw_amount):
            amount = int(re.sub(r"\D", "", raw_amount))
        else:
            return ValidationResult.fail(
                ValidationErrorKind.NOT_NUMERIC,
                "Amount must be a whole number of Kz",
            )

        if amount == 0:
            return ValidationResult.fail(
                ValidationErrorKind.NOT_NUMERIC,
                "Amount must be greater than zero",
            )

        return ValidationResult.ok(amount)

    @staticmethod
    def validate_bounds(amount: int, policy: AmountPolicy) -> ValidationResult:
        if amount < policy.minimum:
            return ValidationResult.fail(
                ValidationErrorKind.AMOUNT_BELOW_MINIMUM,
                f"Minimum amount is {format_kz(policy.minimum)}",
                minimum=policy.minimum,
            )

        if policy.maximum is not None and amount > policy.maximum:
            return ValidationResult.fail(
                ValidationErrorKind.AMOUNT_ABOVE_MAXIMUM,
                f"Maximum amount is {format_kz(policy.maximum)}",
                maximum=policy.maximum,
            )

        return ValidationResult.ok(amount)

    @staticmethod
    def validate_against_balance(amount: int, balance: float) -> ValidationResult:
        if amount > balance:
            return ValidationResult.fail(
                ValidationErrorKind.EXCEEDS_BALANCE,
                f"Insufficient balance. You have {format_kz(balance)} available",
                balance=balance,
            )

        return ValidationResult.ok(amount)

    @classmethod
    def validate(
        cls,
        value: str | int | None,
        policy: AmountPolicy,
        balance: float | None = None,
    ) -> ValidationResult:
        parse_result = cls.parse_amount(value)
        if not parse_result.is_valid:
            return parse_result

        amount = parse_result.normalized_value

        bounds_result = cls.validate_bounds(amount, policy)
        if not bounds_result.is_valid:
            return bounds_result

        if balance is not None:
            balance_result = cls.validate_against_balance(amount, balance)
            if not balance_result.is_valid:
                return balance_result

        return ValidationResult.ok(amount)


@dataclass(frozen=True)
class OperatingHours:
    """Daily window in which the platform accepts deposits.

    The window is half-open: ``opens <= now < closes`` in ``timezone``.
    """

    opens: time = time(9, 0)
    closes: time = time(21, 0)
    timezone: str = "Africa/Luanda"

    def localize(self, now: datetime) -> datetime:
        zone = ZoneInfo(self.timezone)
        if now.tzinfo is None:
            return now.replace(tzinfo=zone)
        return now.astimezone(zone)

    def is_open(self, now: datetime) -> bool:
        local = self.localize(now).time()
        return self.opens <= local < self.closes

    def minutes_until_open(self, now: datetime) -> int:
        local = self.localize(now)
        next_open = local.replace(
            hour=self.opens.hour,
            minute=self.opens.minute,
            second=0,
            microsecond=0,
        )
        if local >= next_open:
            next_open += timedelta(days=1)
        seconds = (next_open - local).total_seconds()
        return int(-(-seconds // 60))

    def check(self, now: datetime) -> ValidationResult:
        if self.is_open(now):
            return ValidationResult.ok()

        minutes = self.minutes_until_open(now)
        hours, rest = divmod(minutes, 60)
        return ValidationResult.fail(
            ValidationErrorKind.OUTSIDE_OPERATING_HOURS,
            f"Deposits are accepted from {self.opens:%H:%M} to {self.closes:%H:%M}. "
            f"Opens again in {hours}h{rest:02d}m",
            minutes_remaining=minutes,
        )


class ChoiceValidator:
    @staticmethod
    def validate(value: Any, choices: Iterable[Any], label: str) -> ValidationResult:
        if value is None or (isinstance(value, str) and not value.strip()):
            return ValidationResult.fail(
                ValidationErrorKind.MISSING_REQUIRED_FIELD,
                f"Select a {label}",
            )

        if value not in set(choices):
            return ValidationResult.fail(
                ValidationErrorKind.UNKNOWN_OPTION,
                f"Unknown {label}: {value}",
            )

        return ValidationResult.ok(value)


class IbanValidator:
    DIGITS = 21
    COUNTRY_PREFIX = "AO06"

    @staticmethod
    def validate(value: str | None) -> ValidationResult:
        if not value or not value.strip():
            return ValidationResult.fail(
                ValidationErrorKind.MISSING_REQUIRED_FIELD,
                "IBAN is required",
            )

        normalized = re.sub(r"\s", "", value).upper()
        if normalized.startswith(IbanValidator.COUNTRY_PREFIX):
            normalized = normalized[len(IbanValidator.COUNTRY_PREFIX) :]

        if not normalized.isdigit() or len(normalized) != IbanValidator.DIGITS:
            return ValidationResult.fail(
                ValidationErrorKind.INVALID_FORMAT,
                f"IBAN must contain exactly {IbanValidator.DIGITS} digits",
            )

        return ValidationResult.ok(normalized)


def require_text(value: Any, label: str) -> ValidationResult:
    if value is None or not str(value).strip():
        return ValidationResult.fail(
            ValidationErrorKind.MISSING_REQUIRED_FIELD,
            f"{label} is required",
        )
    return ValidationResult.ok(str(value).strip())
