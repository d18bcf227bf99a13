"""Recharge tab widgets for DeepBank Terminal."""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, Select, Static

from deepbank.features.recharge.service import PartnerBank
from deepbank.screens import WizardPanel
from deepbank.shared.validation import RECHARGE_POLICY, OperatingHours, format_kz


class RechargePanel(WizardPanel):
    prefix = "recharge"
    step_names = ("amount", "bank", "confirm")

    def __init__(
        self,
        banks: list[PartnerBank],
        quick_values: list[int],
        operating_hours: OperatingHours,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.banks = banks
        self.quick_values = quick_values
        self.operating_hours = operating_hours

    def compose(self) -> ComposeResult:
        yield Label("💰 Recharge", classes="tab-title")
        yield Static(id="recharge-progress", classes="step-progress")

        with Vertical(id="recharge-step-amount"):
            yield Static(
                f"Deposits are accepted {self.operating_hours.opens:%H:%M}-"
                f"{self.operating_hours.closes:%H:%M} ({self.operating_hours.timezone}). "
                f"Minimum {format_kz(RECHARGE_POLICY.minimum)}.",
                classes="helper",
            )
            yield Label("Amount (Kz)")
            yield Input(placeholder="e.g. 5 000", id="recharge-amount-input")
            half = (len(self.quick_values) + 1) // 2
            for row in (self.quick_values[:half], self.quick_values[half:]):
                yield Horizontal(
                    *[
                        Button(
                            format_kz(value),
                            id=f"recharge-quick-{value}",
                            classes="quick-value",
                        )
                        for value in row
                    ]
                )
            yield Horizontal(
                Button("📜 History", id="recharge-history-button"),
                Button("Continue ▶", id="recharge-next-button", variant="primary"),
            )

        with Vertical(id="recharge-step-bank", classes="hidden"):
            yield Label("Partner bank you will transfer from")
            yield Select(
                [(bank.name, bank.id) for bank in self.banks],
                prompt="Choose a bank",
                id="recharge-bank-select",
            )
            yield Horizontal(
                Button("◀ Back", id="recharge-bank-back-button"),
                Button("Continue ▶", id="recharge-bank-next-button", variant="primary"),
            )

        with Vertical(id="recharge-step-confirm", classes="hidden"):
            yield Static(id="recharge-transfer-details", classes="details")
            yield Label("Proof of payment (optional: .jpg, .png, .pdf)")
            yield Input(placeholder="/path/to/receipt.pdf", id="recharge-receipt-input")
            yield Horizontal(
                Button("📋 Copy IBAN", id="recharge-copy-iban-button"),
                Button("◀ Back", id="recharge-confirm-back-button"),
                Button("✅ Conclude deposit", id="recharge-submit-button", variant="primary"),
            )

        yield Static(id="recharge-result", classes="result")

    def show_transfer_details(self, amount: int, bank: PartnerBank) -> None:
        self.query_one("#recharge-transfer-details", Static).update(
            f"Transfer [b]{format_kz(amount)}[/b] to:\n"
            f"Bank: {bank.name}\n"
            f"IBAN: [b]{bank.iban}[/b]\n"
            "Then attach the receipt and conclude the deposit."
        )
