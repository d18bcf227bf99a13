"""Withdrawal feature module for DeepBank Terminal."""

from deepbank.features.withdrawal.handlers import WithdrawalHandlersMixin
from deepbank.features.withdrawal.screen import WithdrawalPanel
from deepbank.features.withdrawal.service import (
    WithdrawalContext,
    WithdrawalQuote,
    WithdrawalRecord,
    WithdrawalService,
)
from deepbank.features.withdrawal.validators import WithdrawalStepValidators

__all__ = [
    "WithdrawalHandlersMixin",
    "WithdrawalPanel",
    "WithdrawalContext",
    "WithdrawalQuote",
    "WithdrawalRecord",
    "WithdrawalService",
    "WithdrawalStepValidators",
]
