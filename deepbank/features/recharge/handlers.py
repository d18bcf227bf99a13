"""Recharge event handlers for DeepBank Terminal TUI."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, cast

from textual.widgets import Button, Input, Select

from deepbank.features.recharge.screen import RechargePanel
from deepbank.features.recharge.service import RechargeService
from deepbank.screens import HistoryScreen
from deepbank.shared.clipboard import copy_iban
from deepbank.shared.validation import format_kz
from deepbank.shared.wizard import SubmissionReceipt, SubmissionOutcome, WizardController

if TYPE_CHECKING:
    from deepbank.__main__ import DeepBankApp

logger = logging.getLogger(__name__)


class RechargeHandlersMixin:
    """Mixin class providing recharge-related event handlers for DeepBankApp."""

    recharge_service: RechargeService
    recharge_wizard: WizardController | None

    def _recharge_panel(self: "DeepBankApp") -> RechargePanel:
        return self.query_one("#recharge-tab", RechargePanel)

    def _set_recharge_actions_enabled(self: "DeepBankApp", enabled: bool) -> None:
        for button_id in (
            "#recharge-submit-button",
            "#recharge-confirm-back-button",
        ):
            cast(Button, self.query_one(button_id)).disabled = not enabled

    def start_recharge(self: "DeepBankApp") -> None:
        self.recharge_wizard = self.recharge_service.build_wizard(
            self.loading, self.notifications
        )
        panel = self._recharge_panel()
        cast(Input, self.query_one("#recharge-amount-input")).value = ""
        cast(Input, self.query_one("#recharge-receipt-input")).value = ""
        cast(Select, self.query_one("#recharge-bank-select")).clear()
        panel.show_result("")
        panel.show_step(self.recharge_wizard)

    def recharge_quick_value(self: "DeepBankApp", value: int) -> None:
        cast(Input, self.query_one("#recharge-amount-input")).value = str(value)

    def recharge_next(self: "DeepBankApp") -> None:
        if self.recharge_wizard is None:
            return
        panel = self._recharge_panel()
        amount = cast(Input, self.query_one("#recharge-amount-input")).value
        result = self.recharge_wizard.advance({"amount": amount})
        if not result.is_valid:
            panel.show_result(f"[red]{result.error_message}[/red]")
            return
        panel.show_result("")
        panel.show_step(self.recharge_wizard)

    def recharge_choose_bank(self: "DeepBankApp") -> None:
        if self.recharge_wizard is None:
            return
        panel = self._recharge_panel()
        value = cast(Select, self.query_one("#recharge-bank-select")).value
        bank_id = value if isinstance(value, str) else None
        result = self.recharge_wizard.advance({"bank_id": bank_id})
        if not result.is_valid:
            panel.show_result(f"[red]{result.error_message}[/red]")
            return

        payload = self.recharge_wizard.payload
        bank = self.recharge_service.get_bank(payload["bank_id"])
        if bank:
            panel.show_transfer_details(payload["amount"], bank)
        panel.show_result("")
        panel.show_step(self.recharge_wizard)

    def recharge_back(self: "DeepBankApp") -> None:
        if self.recharge_wizard is None:
            return
        self.recharge_wizard.retreat()
        panel = self._recharge_panel()
        panel.show_result("")
        panel.show_step(self.recharge_wizard)

    def copy_recharge_iban(self: "DeepBankApp") -> None:
        if self.recharge_wizard is None:
            return
        bank = self.recharge_service.get_bank(
            self.recharge_wizard.payload.get("bank_id", "")
        )
        if bank is None:
            return
        result = copy_iban(bank.iban, prefer_osc52=self.config.prefer_osc52)
        if result.success:
            self.notify(f"IBAN copied ({result.method})", severity="information")
        else:
            self.notify("Could not access the clipboard", severity="warning")

    def submit_recharge(self: "DeepBankApp") -> None:
        wizard = self.recharge_wizard
        if wizard is None:
            return
        panel = self._recharge_panel()
        receipt_path = cast(Input, self.query_one("#recharge-receipt-input")).value
        result = wizard.advance({"receipt_path": receipt_path})
        if not result.is_valid:
            panel.show_result(f"[red]{result.error_message}[/red]")
            return

        self._set_recharge_actions_enabled(False)
        panel.show_result("")

        def worker() -> None:
            outcome = wizard.submit()
            self.call_from_thread(self._on_recharge_submitted, outcome)

        threading.Thread(target=worker, daemon=True).start()

    def _on_recharge_submitted(self: "DeepBankApp", outcome: SubmissionOutcome) -> None:
        self._set_recharge_actions_enabled(True)
        panel = self._recharge_panel()
        if isinstance(outcome, SubmissionReceipt):
            logger.info("Deposit %s submitted", outcome.reference)
            self.start_recharge()
            panel.show_result(
                f"[green]Deposit of {format_kz(outcome.amount)} submitted "
                f"(ref {outcome.reference})[/green]"
            )
            self.refresh_account_status()
        else:
            panel.show_result(f"[red]{outcome.message}[/red]")

    def show_recharge_history(self: "DeepBankApp") -> None:
        def on_loaded(records, error: Exception | None) -> None:
            if error:
                self._recharge_panel().show_result(
                    f"[red]{self.format_error(error)}[/red]"
                )
                return
            rows = [
                (record.created_at[:16], format_kz(record.amount), record.bank, record.status)
                for record in records
            ]
            self.push_screen(
                HistoryScreen("📜 Deposits", ["Date", "Amount", "Bank", "Status"], rows)
            )

        self.run_in_background(
            self.recharge_service.get_history, on_loaded, "Loading deposits..."
        )
