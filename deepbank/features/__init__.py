"""Feature modules for DeepBank Terminal.

- recharge: Deposits through partner banks
- withdrawal: Withdrawals to linked bank accounts
- bonus: Bonus to balance conversion
- bank_account: Linked bank accounts
- account: Profile and balances
"""

from deepbank.features import account
from deepbank.features import bank_account
from deepbank.features import bonus
from deepbank.features import recharge
from deepbank.features import withdrawal

__all__ = ["account", "bank_account", "bonus", "recharge", "withdrawal"]
