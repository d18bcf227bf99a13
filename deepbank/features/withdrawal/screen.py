"""Withdrawal tab widgets for DeepBank Terminal."""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, Select, Static

from deepbank.features.bank_account.service import BankAccount
from deepbank.features.withdrawal.service import WITHDRAWAL_FEE_PERCENT, WithdrawalQuote
from deepbank.screens import WizardPanel
from deepbank.shared.validation import WITHDRAWAL_POLICY, format_kz


class WithdrawalPanel(WizardPanel):
    prefix = "withdrawal"
    step_names = ("amount", "account", "confirm")

    def compose(self) -> ComposeResult:
        yield Label("🏧 Withdrawal", classes="tab-title")
        yield Static(id="withdrawal-progress", classes="step-progress")
        yield Static(id="withdrawal-balance", classes="helper")

        with Vertical(id="withdrawal-step-amount"):
            yield Label("Amount (Kz)")
            yield Input(
                placeholder=f"{format_kz(WITHDRAWAL_POLICY.minimum)} - "
                f"{format_kz(WITHDRAWAL_POLICY.maximum or 0)}",
                id="withdrawal-amount-input",
            )
            yield Static(
                f"A {WITHDRAWAL_FEE_PERCENT}% fee is deducted from every withdrawal.",
                classes="helper",
            )
            yield Horizontal(
                Button("📜 History", id="withdrawal-history-button"),
                Button("Continue ▶", id="withdrawal-next-button", variant="primary"),
            )

        with Vertical(id="withdrawal-step-account", classes="hidden"):
            yield Label("Destination account")
            yield Select([], prompt="Choose an account", id="withdrawal-account-select")
            yield Horizontal(
                Button("◀ Back", id="withdrawal-account-back-button"),
                Button("Continue ▶", id="withdrawal-account-next-button", variant="primary"),
            )

        with Vertical(id="withdrawal-step-confirm", classes="hidden"):
            yield Static(id="withdrawal-summary", classes="details")
            yield Horizontal(
                Button("◀ Back", id="withdrawal-confirm-back-button"),
                Button("✅ Request withdrawal", id="withdrawal-submit-button", variant="primary"),
            )

        yield Static(id="withdrawal-result", classes="result")

    def show_context(self, balance: float, accounts: list[BankAccount]) -> None:
        self.query_one("#withdrawal-balance", Static).update(
            f"Available balance: [b]{format_kz(balance)}[/b]"
        )
        select = self.query_one("#withdrawal-account-select", Select)
        select.set_options([(account.label, account.id) for account in accounts])

    def show_summary(self, quote: WithdrawalQuote, account: BankAccount) -> None:
        self.query_one("#withdrawal-summary", Static).update(
            f"Amount: [b]{format_kz(quote.amount)}[/b]\n"
            f"Fee ({WITHDRAWAL_FEE_PERCENT}%): {format_kz(quote.fee)}\n"
            f"You receive: [b]{format_kz(quote.net_amount)}[/b]\n"
            f"Account: {account.holder_name} · {account.label}"
        )
