"""Linked bank account widgets for DeepBank Terminal."""

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, Input, Label, Select, Static

from deepbank.features.bank_account.service import BankAccount
from deepbank.features.bank_account.validators import AVAILABLE_BANKS


class BankAccountPanel(Container):
    def compose(self) -> ComposeResult:
        yield Label("🏦 Bank accounts", classes="tab-title")
        yield DataTable(id="bank-accounts-table")
        yield Label("Account holder")
        yield Input(placeholder="Full name", id="bank-account-name-input")
        yield Label("Bank")
        yield Select(
            [(name, name) for name in AVAILABLE_BANKS],
            prompt="Choose a bank",
            id="bank-account-bank-select",
        )
        yield Label("IBAN (21 digits, AO06 prefix optional)")
        yield Input(placeholder="AO06 0000 0000 0000 0000 0000 0", id="bank-account-iban-input")
        yield Horizontal(
            Button("🔄 Refresh", id="bank-accounts-refresh-button"),
            Button("➕ Link account", id="bank-account-save-button", variant="primary"),
        )
        yield Static(id="bank-account-result", classes="result")

    def on_mount(self) -> None:
        table = self.query_one("#bank-accounts-table", DataTable)
        table.add_columns("Holder", "Bank", "IBAN")

    def show_accounts(self, accounts: list[BankAccount]) -> None:
        table = self.query_one("#bank-accounts-table", DataTable)
        table.clear()
        for account in accounts:
            table.add_row(account.holder_name, account.bank_name, account.masked_iban)

    def clear_form(self) -> None:
        self.query_one("#bank-account-name-input", Input).value = ""
        self.query_one("#bank-account-iban-input", Input).value = ""
        self.query_one("#bank-account-bank-select", Select).clear()
