"""Tests for the withdrawal service."""

from __future__ import annotations

import pytest

from deepbank.features.withdrawal.service import (
    WITHDRAWAL_RPC,
    WITHDRAWAL_TABLE,
    WithdrawalContext,
    WithdrawalQuote,
    WithdrawalRecord,
    WithdrawalService,
)
from deepbank.features.withdrawal.validators import WithdrawalStepValidators
from deepbank.shared.notifications import Remediation
from deepbank.shared.validation import ValidationErrorKind
from deepbank.shared.wizard import (
    BusinessRuleRejection,
    SubmissionError,
    SubmissionErrorKind,
    SubmissionReceipt,
)

IBAN = "004000001234567890123"


def seed(backend, balance=10000, accounts=True):
    backend.tables["profiles"] = [{"id": "user-1", "balance": balance}]
    if accounts:
        backend.tables["bancos_clientes"] = [
            {
                "id": "acc-1",
                "user_id": "user-1",
                "nome_completo": "Ana Silva",
                "nome_do_banco": "Banco BAI",
                "iban": IBAN,
            }
        ]


@pytest.fixture
def service(backend):
    return WithdrawalService(backend)


class TestWithdrawalQuote:
    def test_ten_percent_fee(self):
        quote = WithdrawalQuote.for_amount(3000)
        assert quote.fee == 300
        assert quote.net_amount == 2700

    def test_custom_fee(self):
        assert WithdrawalQuote.for_amount(10000, fee_percent=5).net_amount == 9500


class TestEligibility:
    def test_eligible(self, service, backend):
        seed(backend)
        context = service.load_context()
        assert context.balance == 10000
        assert [account.id for account in context.accounts] == ["acc-1"]
        assert service.check_eligibility(context) is None

    def test_no_bank_account(self, service, backend):
        seed(backend, accounts=False)
        blocked = service.check_eligibility(service.load_context())
        assert blocked.kind == SubmissionErrorKind.NO_BANK_ACCOUNT
        assert blocked.remediation == Remediation.ADD_BANK_ACCOUNT

    def test_balance_below_minimum(self, service, backend):
        seed(backend, balance=2999)
        blocked = service.check_eligibility(service.load_context())
        assert blocked.kind == SubmissionErrorKind.INSUFFICIENT_FUNDS
        assert blocked.remediation == Remediation.DEPOSIT_FUNDS
        assert "3 000 Kz" in blocked.message

    def test_missing_account_checked_first(self, service):
        blocked = service.check_eligibility(WithdrawalContext(balance=0, accounts=[]))
        assert blocked.kind == SubmissionErrorKind.NO_BANK_ACCOUNT


class TestWithdrawalStepValidators:
    def test_exceeds_balance(self):
        validators = WithdrawalStepValidators(["acc-1"], balance=4000)
        result = validators.amount({"amount": "5000"})
        assert result.error_kind == ValidationErrorKind.EXCEEDS_BALANCE

    def test_account_must_be_linked(self):
        validators = WithdrawalStepValidators(["acc-1"], balance=4000)
        assert validators.account({"bank_account_id": "acc-1"}).is_valid
        assert validators.account({"bank_account_id": "acc-2"}).is_valid is False


class TestSubmitWithdrawal:
    def test_full_flow(self, service, backend, loading, notifications):
        seed(backend)
        wizard = service.build_wizard(service.load_context(), loading, notifications)

        assert wizard.advance({"amount": "3.000"}).is_valid
        assert wizard.advance({"bank_account_id": "acc-1"}).is_valid
        outcome = wizard.submit()

        assert isinstance(outcome, SubmissionReceipt)
        assert outcome.amount == 3000
        assert backend.rpc_calls == [
            (
                WITHDRAWAL_RPC,
                {"p_user_id": "user-1", "p_amount": 3000, "p_bank_account_id": "acc-1"},
            )
        ]

    def test_server_side_insufficient_funds(self, service, backend, loading, notifications):
        seed(backend)
        backend.rpc_responses[WITHDRAWAL_RPC] = {
            "success": False,
            "message": "Saldo insuficiente",
        }
        wizard = service.build_wizard(service.load_context(), loading, notifications)
        wizard.advance({"amount": "5000"})
        wizard.advance({"bank_account_id": "acc-1"})

        outcome = wizard.submit()

        assert isinstance(outcome, SubmissionError)
        assert outcome.kind == SubmissionErrorKind.INSUFFICIENT_FUNDS
        assert outcome.remediation == Remediation.DEPOSIT_FUNDS

    def test_direct_rejection(self, service, backend):
        backend.rpc_responses[WITHDRAWAL_RPC] = {"success": False, "reason": "no_bank_account"}
        with pytest.raises(BusinessRuleRejection) as exc_info:
            service.submit_withdrawal({"amount": 3000, "bank_account_id": "acc-9"})
        assert exc_info.value.remediation == Remediation.ADD_BANK_ACCOUNT


class TestWithdrawalHistory:
    def test_history_rows(self, service, backend):
        backend.tables[WITHDRAWAL_TABLE] = [
            {
                "id": 3,
                "user_id": "user-1",
                "valor_solicitado": 10000,
                "nome_do_banco": "Banco BFA",
                "estado": "pago",
                "created_at": "2024-06-03",
            }
        ]

        (record,) = service.get_history()

        assert record.bank_name == "Banco BFA"
        assert record.status == "pago"
        assert record.quote.net_amount == 9000

    def test_record_defaults(self):
        record = WithdrawalRecord.from_row({})
        assert record.status == "pendente"
        assert record.fee_percent == 10
