"""Withdrawal event handlers for DeepBank Terminal TUI."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, cast

from textual.widgets import Button, Input, Select

from deepbank.features.withdrawal.screen import WithdrawalPanel
from deepbank.features.withdrawal.service import WithdrawalContext, WithdrawalService
from deepbank.screens import HistoryScreen
from deepbank.shared.validation import format_kz
from deepbank.shared.wizard import SubmissionOutcome, SubmissionReceipt, WizardController

if TYPE_CHECKING:
    from deepbank.__main__ import DeepBankApp

logger = logging.getLogger(__name__)


class WithdrawalHandlersMixin:
    """Mixin class providing withdrawal-related event handlers for DeepBankApp."""

    withdrawal_service: WithdrawalService
    withdrawal_wizard: WizardController | None
    withdrawal_context: WithdrawalContext | None

    def _withdrawal_panel(self: "DeepBankApp") -> WithdrawalPanel:
        return self.query_one("#withdrawal-tab", WithdrawalPanel)

    def _set_withdrawal_actions_enabled(self: "DeepBankApp", enabled: bool) -> None:
        for button_id in (
            "#withdrawal-next-button",
            "#withdrawal-account-next-button",
            "#withdrawal-submit-button",
            "#withdrawal-confirm-back-button",
        ):
            cast(Button, self.query_one(button_id)).disabled = not enabled

    def start_withdrawal(self: "DeepBankApp") -> None:
        """Load balance and linked accounts, then open the form if eligible."""
        self.withdrawal_wizard = None
        self.withdrawal_context = None
        self._set_withdrawal_actions_enabled(False)
        cast(Input, self.query_one("#withdrawal-amount-input")).value = ""
        self._withdrawal_panel().show_result("")
        self.run_in_background(
            self.withdrawal_service.load_context,
            self._on_withdrawal_context_loaded,
            "Loading balance...",
        )

    def _on_withdrawal_context_loaded(
        self: "DeepBankApp",
        context: WithdrawalContext | None,
        error: Exception | None,
    ) -> None:
        panel = self._withdrawal_panel()
        if error or context is None:
            panel.show_result(f"[red]{self.format_error(error)}[/red]")
            return

        panel.show_context(context.balance, context.accounts)
        blocked = self.withdrawal_service.check_eligibility(context)
        if blocked:
            panel.show_result(f"[red]{blocked.message}[/red]")
            self.notifications.error(
                blocked.message,
                title="Withdrawal unavailable",
                remediation=blocked.remediation,
            )
            return

        self.withdrawal_context = context
        self.withdrawal_wizard = self.withdrawal_service.build_wizard(
            context, self.loading, self.notifications
        )
        self._set_withdrawal_actions_enabled(True)
        panel.show_step(self.withdrawal_wizard)

    def withdrawal_next(self: "DeepBankApp") -> None:
        if self.withdrawal_wizard is None:
            return
        panel = self._withdrawal_panel()
        amount = cast(Input, self.query_one("#withdrawal-amount-input")).value
        result = self.withdrawal_wizard.advance({"amount": amount})
        if not result.is_valid:
            panel.show_result(f"[red]{result.error_message}[/red]")
            return
        panel.show_result("")
        panel.show_step(self.withdrawal_wizard)

    def withdrawal_choose_account(self: "DeepBankApp") -> None:
        if self.withdrawal_wizard is None or self.withdrawal_context is None:
            return
        panel = self._withdrawal_panel()
        value = cast(Select, self.query_one("#withdrawal-account-select")).value
        account_id = value if isinstance(value, str) else None
        result = self.withdrawal_wizard.advance({"bank_account_id": account_id})
        if not result.is_valid:
            panel.show_result(f"[red]{result.error_message}[/red]")
            return

        payload = self.withdrawal_wizard.payload
        account = next(
            a for a in self.withdrawal_context.accounts if a.id == payload["bank_account_id"]
        )
        panel.show_summary(self.withdrawal_service.quote(payload["amount"]), account)
        panel.show_result("")
        panel.show_step(self.withdrawal_wizard)

    def withdrawal_back(self: "DeepBankApp") -> None:
        if self.withdrawal_wizard is None:
            return
        self.withdrawal_wizard.retreat()
        panel = self._withdrawal_panel()
        panel.show_result("")
        panel.show_step(self.withdrawal_wizard)

    def submit_withdrawal(self: "DeepBankApp") -> None:
        wizard = self.withdrawal_wizard
        if wizard is None:
            return
        result = wizard.advance()
        if not result.is_valid:
            self._withdrawal_panel().show_result(f"[red]{result.error_message}[/red]")
            return

        self._set_withdrawal_actions_enabled(False)

        def worker() -> None:
            outcome = wizard.submit()
            self.call_from_thread(self._on_withdrawal_submitted, outcome)

        threading.Thread(target=worker, daemon=True).start()

    def _on_withdrawal_submitted(
        self: "DeepBankApp", outcome: SubmissionOutcome
    ) -> None:
        if isinstance(outcome, SubmissionReceipt):
            logger.info("Withdrawal %s requested", outcome.reference)
            self.start_withdrawal()
            self._withdrawal_panel().show_result(
                f"[green]Withdrawal of {format_kz(outcome.amount)} requested "
                f"(ref {outcome.reference})[/green]"
            )
            self.refresh_account_status()
        else:
            self._set_withdrawal_actions_enabled(True)
            self._withdrawal_panel().show_result(f"[red]{outcome.message}[/red]")

    def show_withdrawal_history(self: "DeepBankApp") -> None:
        def on_loaded(records, error: Exception | None) -> None:
            if error:
                self._withdrawal_panel().show_result(
                    f"[red]{self.format_error(error)}[/red]"
                )
                return
            rows = [
                (
                    record.created_at[:16],
                    format_kz(record.amount),
                    format_kz(record.quote.net_amount),
                    record.bank_name,
                    record.status,
                )
                for record in records
            ]
            self.push_screen(
                HistoryScreen(
                    "📜 Withdrawals",
                    ["Date", "Requested", "Net", "Bank", "Status"],
                    rows,
                )
            )

        self.run_in_background(
            self.withdrawal_service.get_history, on_loaded, "Loading withdrawals..."
        )
