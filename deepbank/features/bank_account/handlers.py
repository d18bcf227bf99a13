"""Bank account event handlers for DeepBank Terminal TUI."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from textual.widgets import Input, Select, Static

from deepbank.features.bank_account.screen import BankAccountPanel
from deepbank.features.bank_account.service import BankAccount, BankAccountService

if TYPE_CHECKING:
    from deepbank.__main__ import DeepBankApp

logger = logging.getLogger(__name__)


class BankAccountHandlersMixin:
    """Mixin class providing bank account handlers for DeepBankApp."""

    bank_account_service: BankAccountService

    def _bank_account_panel(self: "DeepBankApp") -> BankAccountPanel:
        return self.query_one("#bank-accounts-tab", BankAccountPanel)

    def refresh_bank_accounts(self: "DeepBankApp") -> None:
        def on_loaded(accounts: list[BankAccount] | None, error: Exception | None) -> None:
            panel = self._bank_account_panel()
            if error:
                panel.query_one("#bank-account-result", Static).update(
                    f"[red]{self.format_error(error)}[/red]"
                )
                return
            panel.show_accounts(accounts or [])

        self.run_in_background(
            self.bank_account_service.list_accounts, on_loaded, "Loading bank accounts..."
        )

    def save_bank_account(self: "DeepBankApp") -> None:
        panel = self._bank_account_panel()
        result_widget = panel.query_one("#bank-account-result", Static)
        bank = cast(Select, self.query_one("#bank-account-bank-select")).value
        result = self.bank_account_service.validate(
            cast(Input, self.query_one("#bank-account-name-input")).value,
            bank if isinstance(bank, str) else None,
            cast(Input, self.query_one("#bank-account-iban-input")).value,
        )
        if not result.is_valid:
            result_widget.update(f"[red]{result.error_message}[/red]")
            return

        form = result.normalized_value

        def on_saved(account: BankAccount | None, error: Exception | None) -> None:
            if error or account is None:
                self.notifications.error(self.format_error(error))
                return
            result_widget.update("")
            panel.clear_form()
            self.notifications.success(f"{account.bank_name} account linked")
            self.refresh_bank_accounts()

        self.run_in_background(
            lambda: self.bank_account_service.add_account(form),
            on_saved,
            "Linking bank account...",
        )
