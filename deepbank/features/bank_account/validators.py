"""Bank account form validation for DeepBank Terminal."""

from dataclasses import dataclass
from typing import Any

from deepbank.shared.validation import (
    ChoiceValidator,
    IbanValidator,
    ValidationResult,
    require_text,
)

AVAILABLE_BANKS = ["Banco BAI", "Banco BFA", "Banco ATLANTICO", "Banco BIC"]


@dataclass
class BankAccountForm:
    full_name: str
    bank_name: str
    iban: str


def validate_bank_account_form(
    full_name: Any, bank_name: Any, iban: Any
) -> ValidationResult:
    name_result = require_text(full_name, "Full name")
    if not name_result.is_valid:
        return name_result

    bank_result = ChoiceValidator.validate(bank_name, AVAILABLE_BANKS, "bank")
    if not bank_result.is_valid:
        return bank_result

    iban_result = IbanValidator.validate(iban)
    if not iban_result.is_valid:
        return iban_result

    return ValidationResult.ok(
        BankAccountForm(
            full_name=name_result.normalized_value,
            bank_name=bank_result.normalized_value,
            iban=iban_result.normalized_value,
        )
    )
