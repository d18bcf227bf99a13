"""Tests for profile reads."""

from __future__ import annotations

from deepbank.features.account.service import AccountService, Profile


def test_profile_from_row(backend):
    backend.tables["profiles"] = [
        {
            "id": "abcdef-123",
            "phone": "923000000",
            "balance": "15000.5",
            "bonus_balance": None,
            "invite_code": "XYZ",
        }
    ]
    backend.user_id = "abcdef-123"

    profile = AccountService(backend).get_profile()

    assert profile.balance == 15000.5
    assert profile.bonus_balance == 0.0
    assert profile.display_id == "DB-ABCDE"


def test_missing_profile_defaults_to_zero(backend):
    service = AccountService(backend)
    assert service.get_profile() == Profile(id="user-1")
    assert service.get_balance() == 0.0
