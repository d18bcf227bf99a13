"""Profile feature for DeepBank Terminal."""

from deepbank.features.account.service import AccountService, Profile

__all__ = ["AccountService", "Profile"]
