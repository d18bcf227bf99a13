"""Bonus conversion event handlers for DeepBank Terminal TUI."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, cast

from textual.widgets import Button, Input

from deepbank.features.bonus.screen import BonusPanel
from deepbank.features.bonus.service import BonusService
from deepbank.features.bonus.validators import BonusStepValidators
from deepbank.shared.validation import format_kz
from deepbank.shared.wizard import SubmissionOutcome, SubmissionReceipt, WizardController

if TYPE_CHECKING:
    from deepbank.__main__ import DeepBankApp

logger = logging.getLogger(__name__)


class BonusHandlersMixin:
    """Mixin class providing bonus conversion handlers for DeepBankApp."""

    bonus_service: BonusService
    bonus_wizard: WizardController | None
    bonus_balance: float

    def _bonus_panel(self: "DeepBankApp") -> BonusPanel:
        return self.query_one("#bonus-tab", BonusPanel)

    def _set_bonus_actions_enabled(self: "DeepBankApp", enabled: bool) -> None:
        for button_id in (
            "#bonus-next-button",
            "#bonus-submit-button",
            "#bonus-confirm-back-button",
        ):
            cast(Button, self.query_one(button_id)).disabled = not enabled

    def start_bonus(self: "DeepBankApp") -> None:
        self.bonus_wizard = None
        self._set_bonus_actions_enabled(False)
        cast(Input, self.query_one("#bonus-amount-input")).value = ""
        self._bonus_panel().show_result("")
        self.run_in_background(
            self.bonus_service.get_bonus_balance,
            self._on_bonus_balance_loaded,
            "Loading bonus balance...",
        )

    def _on_bonus_balance_loaded(
        self: "DeepBankApp", balance: float | None, error: Exception | None
    ) -> None:
        panel = self._bonus_panel()
        if error or balance is None:
            panel.show_result(f"[red]{self.format_error(error)}[/red]")
            return
        self.bonus_balance = balance
        panel.show_balance(balance)
        self.bonus_wizard = self.bonus_service.build_wizard(
            balance, self.loading, self.notifications
        )
        self._set_bonus_actions_enabled(True)
        panel.show_step(self.bonus_wizard)

    def bonus_quick_value(self: "DeepBankApp", value: int) -> None:
        check = BonusStepValidators(self.bonus_balance).quick_value(value)
        if not check.is_valid:
            self._bonus_panel().show_result(f"[yellow]{check.error_message}[/yellow]")
            return
        cast(Input, self.query_one("#bonus-amount-input")).value = str(value)

    def bonus_next(self: "DeepBankApp") -> None:
        if self.bonus_wizard is None:
            return
        panel = self._bonus_panel()
        amount = cast(Input, self.query_one("#bonus-amount-input")).value
        result = self.bonus_wizard.advance({"amount": amount})
        if not result.is_valid:
            panel.show_result(f"[red]{result.error_message}[/red]")
            return
        panel.show_summary(self.bonus_wizard.payload["amount"])
        panel.show_result("")
        panel.show_step(self.bonus_wizard)

    def bonus_back(self: "DeepBankApp") -> None:
        if self.bonus_wizard is None:
            return
        self.bonus_wizard.retreat()
        self._bonus_panel().show_step(self.bonus_wizard)

    def submit_bonus(self: "DeepBankApp") -> None:
        wizard = self.bonus_wizard
        if wizard is None:
            return
        self._set_bonus_actions_enabled(False)

        def worker() -> None:
            outcome = wizard.submit()
            self.call_from_thread(self._on_bonus_submitted, outcome)

        threading.Thread(target=worker, daemon=True).start()

    def _on_bonus_submitted(self: "DeepBankApp", outcome: SubmissionOutcome) -> None:
        if isinstance(outcome, SubmissionReceipt):
            logger.info("Bonus conversion %s completed", outcome.reference)
            self.start_bonus()
            self._bonus_panel().show_result(
                f"[green]{format_kz(outcome.amount)} moved to your balance[/green]"
            )
            self.refresh_account_status()
        else:
            self._set_bonus_actions_enabled(True)
            self._bonus_panel().show_result(f"[red]{outcome.message}[/red]")
