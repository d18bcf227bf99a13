"""Linked bank account feature module for DeepBank Terminal."""

from deepbank.features.bank_account.handlers import BankAccountHandlersMixin
from deepbank.features.bank_account.screen import BankAccountPanel
from deepbank.features.bank_account.service import BankAccount, BankAccountService
from deepbank.features.bank_account.validators import (
    AVAILABLE_BANKS,
    BankAccountForm,
    validate_bank_account_form,
)

__all__ = [
    "BankAccountHandlersMixin",
    "BankAccountPanel",
    "BankAccount",
    "BankAccountService",
    "AVAILABLE_BANKS",
    "BankAccountForm",
    "validate_bank_account_form",
]
