"""DeepBank Terminal - a terminal client for DeepBank accounts.

This package is organized into feature-based modules:
- features.recharge: Deposits through partner banks
- features.withdrawal: Withdrawals to linked bank accounts
- features.bonus: Bonus to balance conversion
- features.bank_account: Linked bank accounts
- shared: Loading coordination, flows, validation, backend access
"""

from deepbank.shared import (
    AmountValidator,
    BackendClient,
    LoadingCoordinator,
    NetworkClient,
    NetworkError,
    NotificationCenter,
    ValidationResult,
    WizardController,
)

__version__ = "0.1.0"
__all__ = [
    "AmountValidator",
    "BackendClient",
    "LoadingCoordinator",
    "NetworkClient",
    "NetworkError",
    "NotificationCenter",
    "ValidationResult",
    "WizardController",
]
