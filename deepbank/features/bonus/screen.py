"""Bonus conversion tab widgets for DeepBank Terminal."""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, Static

from deepbank.screens import WizardPanel
from deepbank.shared.validation import BONUS_CONVERSION_POLICY, format_kz


class BonusPanel(WizardPanel):
    prefix = "bonus"
    step_names = ("amount", "confirm")

    def __init__(self, quick_values: list[int], **kwargs):
        super().__init__(**kwargs)
        self.quick_values = quick_values

    def compose(self) -> ComposeResult:
        yield Label("🎁 Convert bonus", classes="tab-title")
        yield Static(id="bonus-progress", classes="step-progress")
        yield Static(id="bonus-balance", classes="helper")

        with Vertical(id="bonus-step-amount"):
            yield Label(
                f"Amount to move to your main balance "
                f"(minimum {format_kz(BONUS_CONVERSION_POLICY.minimum)})"
            )
            yield Input(placeholder="e.g. 500", id="bonus-amount-input")
            yield Horizontal(
                *[
                    Button(format_kz(value), id=f"bonus-quick-{value}", classes="quick-value")
                    for value in self.quick_values
                ]
            )
            yield Horizontal(
                Button("Continue ▶", id="bonus-next-button", variant="primary"),
            )

        with Vertical(id="bonus-step-confirm", classes="hidden"):
            yield Static(id="bonus-summary", classes="details")
            yield Horizontal(
                Button("◀ Back", id="bonus-confirm-back-button"),
                Button("✅ Convert", id="bonus-submit-button", variant="primary"),
            )

        yield Static(id="bonus-result", classes="result")

    def show_balance(self, bonus_balance: float) -> None:
        self.query_one("#bonus-balance", Static).update(
            f"Bonus balance: [b]{format_kz(bonus_balance)}[/b]"
        )

    def show_summary(self, amount: int) -> None:
        self.query_one("#bonus-summary", Static).update(
            f"Convert [b]{format_kz(amount)}[/b] of bonus into your main balance?"
        )
