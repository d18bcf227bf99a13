"""Recharge feature module for DeepBank Terminal."""

from deepbank.features.recharge.handlers import RechargeHandlersMixin
from deepbank.features.recharge.screen import RechargePanel
from deepbank.features.recharge.service import (
    PARTNER_BANKS,
    DepositRecord,
    PartnerBank,
    RechargeService,
)
from deepbank.features.recharge.validators import (
    RechargeStepValidators,
    validate_receipt_file,
)

__all__ = [
    "RechargeHandlersMixin",
    "RechargePanel",
    "PARTNER_BANKS",
    "DepositRecord",
    "PartnerBank",
    "RechargeService",
    "RechargeStepValidators",
    "validate_receipt_file",
]
