"""Main application entry point for DeepBank Terminal."""

from __future__ import annotations

import logging
import sys
import threading
from typing import Any, Callable

from textual.app import App, ComposeResult
from textual.widget import Widget
from textual.widgets import Button, Footer, Header, Static, Tab, Tabs

from deepbank.config import AppConfig, ConfigError
from deepbank.features.account import AccountService
from deepbank.features.bank_account.handlers import BankAccountHandlersMixin
from deepbank.features.bank_account.screen import BankAccountPanel
from deepbank.features.bank_account.service import BankAccountService
from deepbank.features.bonus.handlers import BonusHandlersMixin
from deepbank.features.bonus.screen import BonusPanel
from deepbank.features.bonus.service import QUICK_VALUES as BONUS_QUICK_VALUES
from deepbank.features.bonus.service import BonusService
from deepbank.features.recharge.handlers import RechargeHandlersMixin
from deepbank.features.recharge.screen import RechargePanel
from deepbank.features.recharge.service import QUICK_VALUES as RECHARGE_QUICK_VALUES
from deepbank.features.recharge.service import RechargeService
from deepbank.features.withdrawal.handlers import WithdrawalHandlersMixin
from deepbank.features.withdrawal.screen import WithdrawalPanel
from deepbank.features.withdrawal.service import WithdrawalContext, WithdrawalService
from deepbank.screens import LoadingOverlay, LoginScreen, RemediationScreen, TimeoutBanner
from deepbank.shared.backend import BackendClient
from deepbank.shared.loading import LoadingCoordinator, LoadingState
from deepbank.shared.logging import format_error_for_user, setup_logging
from deepbank.shared.notifications import Notification, NotificationCenter, Remediation, Severity
from deepbank.shared.validation import format_kz
from deepbank.shared.wizard import WizardController
from deepbank.styles import CSS

logger = logging.getLogger(__name__)

TABS = ["recharge", "withdrawal", "bonus", "bank_accounts"]
TAB_CONTAINERS = {
    "recharge": "recharge-tab",
    "withdrawal": "withdrawal-tab",
    "bonus": "bonus-tab",
    "bank_accounts": "bank-accounts-tab",
}
SEVERITY_MAP = {
    Severity.SUCCESS: "information",
    Severity.ERROR: "error",
    Severity.INFORMATION: "information",
}
REMEDIATION_TABS = {
    Remediation.ADD_BANK_ACCOUNT: "bank_accounts",
    Remediation.DEPOSIT_FUNDS: "recharge",
}


class DeepBankApp(
    RechargeHandlersMixin,
    WithdrawalHandlersMixin,
    BonusHandlersMixin,
    BankAccountHandlersMixin,
    App,
):
    CSS = CSS
    TITLE = "DeepBank Terminal"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+o", "sign_out", "Sign out"),
        ("ctrl+right", "next_tab", "Next tab"),
        ("ctrl+left", "previous_tab", "Previous tab"),
        ("tab", "focus_next", "Next"),
        ("shift+tab", "focus_previous", "Previous"),
    ]

    is_authenticated = False
    current_tab = "recharge"
    recharge_wizard: WizardController | None = None
    withdrawal_wizard: WizardController | None = None
    withdrawal_context: WithdrawalContext | None = None
    bonus_wizard: WizardController | None = None
    bonus_balance = 0.0

    def __init__(self, config: AppConfig):
        super().__init__()
        self.config = config
        self.loading = LoadingCoordinator(config.loading)
        self.notifications = NotificationCenter()
        self.backend = BackendClient(
            config.backend_url,
            config.api_key,
            timeout_config=config.timeout_config,
            retry_config=config.retry_config,
        )
        self.account_service = AccountService(self.backend)
        self.bank_account_service = BankAccountService(self.backend)
        self.recharge_service = RechargeService(
            self.backend, operating_hours=config.operating_hours
        )
        self.withdrawal_service = WithdrawalService(
            self.backend, self.account_service, self.bank_account_service
        )
        self.bonus_service = BonusService(self.backend, self.account_service)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("[dim]Not signed in[/dim]", id="account-status")
        yield TimeoutBanner(id="timeout-banner")
        self.tabs = Tabs(
            Tab("Recharge", id="recharge-tab-btn"),
            Tab("Withdrawal", id="withdrawal-tab-btn"),
            Tab("Bonus", id="bonus-tab-btn"),
            Tab("Bank accounts", id="bank-accounts-tab-btn"),
        )
        yield self.tabs
        yield RechargePanel(
            self.recharge_service.banks,
            RECHARGE_QUICK_VALUES,
            self.config.operating_hours,
            id="recharge-tab",
        )
        yield WithdrawalPanel(id="withdrawal-tab")
        yield BonusPanel(BONUS_QUICK_VALUES, id="bonus-tab")
        yield BankAccountPanel(id="bank-accounts-tab")
        yield LoadingOverlay(id="loading-overlay")
        yield Footer()

    def on_mount(self) -> None:
        logger.info("DeepBank Terminal starting, backend=%s", self.config.backend_url)
        self.loading.subscribe(self._on_loading_changed)
        self.notifications.subscribe(self._on_notification)
        self.hide_all_tabs()
        self.tabs.display = False
        self.push_screen(LoginScreen(), self._on_login_submitted)

    def _in_ui_thread(self, callback: Callable[..., Any], *args: Any) -> None:
        if threading.current_thread() is threading.main_thread():
            callback(*args)
            return
        try:
            self.call_from_thread(callback, *args)
        except RuntimeError as e:
            logger.debug("UI update dropped: %s", e)

    def run_in_background(
        self,
        work: Callable[[], Any],
        on_done: Callable[[Any, Exception | None], None],
        loading_message: str = "",
    ) -> None:
        """Run a blocking backend call on a worker thread.

        ``on_done(result, error)`` is invoked on the UI thread.
        """

        def worker() -> None:
            try:
                with self.loading.operation(loading_message):
                    result = work()
            except Exception as e:
                logger.error("Background task failed: %s", e, exc_info=True)
                self._in_ui_thread(on_done, None, e)
                return
            self._in_ui_thread(on_done, result, None)

        threading.Thread(target=worker, daemon=True).start()

    def format_error(self, error: Exception | None) -> str:
        if error is None:
            return "Something went wrong. Please try again."
        return format_error_for_user(error)

    def _on_loading_changed(self, state: LoadingState) -> None:
        self._in_ui_thread(self._apply_loading_state, state)

    def _apply_loading_state(self, state: LoadingState) -> None:
        self.query_one("#loading-overlay", LoadingOverlay).show_state(state)
        self.query_one("#timeout-banner", TimeoutBanner).show_state(state)

    def on_timeout_banner_dismissed(self, event: TimeoutBanner.Dismissed) -> None:
        self.loading.dismiss_timeout()

    def _on_notification(self, notification: Notification) -> None:
        self._in_ui_thread(self._show_notification, notification)

    def _show_notification(self, notification: Notification) -> None:
        if notification.remediation != Remediation.NONE:
            self.push_screen(RemediationScreen(notification), self._on_remediation_chosen)
            return
        self.notify(
            notification.message,
            title=f"{notification.icon} {notification.title}",
            severity=SEVERITY_MAP[notification.severity],
            timeout=self.notifications.display_seconds,
        )

    def _on_remediation_chosen(self, remediation: Remediation | None) -> None:
        target = REMEDIATION_TABS.get(remediation or Remediation.NONE)
        if target:
            self.action_switch_tab(target)

    def _on_login_submitted(self, credentials: dict[str, str] | None) -> None:
        if not credentials:
            return

        def on_done(session, error: Exception | None) -> None:
            if error:
                logger.warning("Sign-in failed: %s", error)
                self.push_screen(
                    LoginScreen(credentials["email"], self.format_error(error)),
                    self._on_login_submitted,
                )
                return
            self.is_authenticated = True
            logger.info("Signed in as %s", session.email)
            self.tabs.display = True
            self.action_switch_tab("recharge")
            self.refresh_account_status()

        self.run_in_background(
            lambda: self.backend.sign_in(credentials["email"], credentials["password"]),
            on_done,
            "Signing in...",
        )

    def action_sign_out(self) -> None:
        if not self.is_authenticated:
            return
        wizard = self._active_wizard()
        if wizard and not wizard.can_leave():
            self.notify("Please wait for the current request to finish", severity="warning")
            return

        def on_done(_, error: Exception | None) -> None:
            if error:
                logger.warning("Sign-out request failed: %s", error)
            self.is_authenticated = False
            self.tabs.display = False
            self.hide_all_tabs()
            self.query_one("#account-status", Static).update("[dim]Not signed in[/dim]")
            self.push_screen(LoginScreen(), self._on_login_submitted)

        self.run_in_background(self.backend.sign_out, on_done, "Signing out...")

    def refresh_account_status(self) -> None:
        def on_done(profile, error: Exception | None) -> None:
            status = self.query_one("#account-status", Static)
            if error:
                status.update("[red]● Balance unavailable[/red]")
                return
            status.update(
                f"[green]●[/green] {profile.display_id} · "
                f"Balance {format_kz(profile.balance)} · "
                f"Bonus {format_kz(profile.bonus_balance)}"
            )

        self.run_in_background(self.account_service.get_profile, on_done)

    def _active_wizard(self) -> WizardController | None:
        return {
            "recharge": self.recharge_wizard,
            "withdrawal": self.withdrawal_wizard,
            "bonus": self.bonus_wizard,
        }.get(self.current_tab)

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        if not self.is_authenticated or not event.tab or not event.tab.id:
            return
        tab_name = event.tab.id.replace("-tab-btn", "").replace("-", "_")
        if tab_name != self.current_tab:
            self.action_switch_tab(tab_name)

    def action_switch_tab(self, tab_name: str) -> None:
        if tab_name not in TAB_CONTAINERS:
            logger.warning("Unknown tab name: %s", tab_name)
            return

        wizard = self._active_wizard()
        if tab_name != self.current_tab and wizard and not wizard.can_leave():
            self.notify("Please wait for the current request to finish", severity="warning")
            self.tabs.active = f"{TAB_CONTAINERS[self.current_tab]}-btn"
            return

        if wizard and tab_name != self.current_tab:
            wizard.reset()

        self.current_tab = tab_name
        for name, container_id in TAB_CONTAINERS.items():
            self.query_one(f"#{container_id}").display = name == tab_name
        self.tabs.active = f"{TAB_CONTAINERS[tab_name]}-btn"

        if tab_name == "recharge":
            self.start_recharge()
        elif tab_name == "withdrawal":
            self.start_withdrawal()
        elif tab_name == "bonus":
            self.start_bonus()
        elif tab_name == "bank_accounts":
            self.refresh_bank_accounts()

    def action_next_tab(self) -> None:
        index = TABS.index(self.current_tab)
        self.action_switch_tab(TABS[(index + 1) % len(TABS)])

    def action_previous_tab(self) -> None:
        index = TABS.index(self.current_tab)
        self.action_switch_tab(TABS[(index - 1) % len(TABS)])

    def action_focus_next(self) -> None:
        widgets = self._get_focusable_widgets()
        if not widgets:
            return
        if self.focused in widgets:
            widgets[(widgets.index(self.focused) + 1) % len(widgets)].focus()
        else:
            widgets[0].focus()

    def action_focus_previous(self) -> None:
        widgets = self._get_focusable_widgets()
        if not widgets:
            return
        if self.focused in widgets:
            widgets[(widgets.index(self.focused) - 1) % len(widgets)].focus()
        else:
            widgets[-1].focus()

    def _is_widget_visible(self, widget: Widget) -> bool:
        current: object | None = widget
        while current is not None:
            if getattr(current, "display", True) is False:
                return False
            if "hidden" in getattr(current, "classes", ()):
                return False
            current = getattr(current, "parent", None)
        return True

    def _get_focusable_widgets(self) -> list[Widget]:
        return [
            widget
            for widget in self.query("Tabs, Button, Input, Select, DataTable")
            if widget.can_focus and not widget.disabled and self._is_widget_visible(widget)
        ]

    def hide_all_tabs(self) -> None:
        for container_id in TAB_CONTAINERS.values():
            self.query_one(f"#{container_id}").display = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        logger.debug("Button pressed: %s", button_id)

        if button_id.startswith("recharge-quick-"):
            self.recharge_quick_value(int(button_id.rsplit("-", 1)[1]))
        elif button_id.startswith("bonus-quick-"):
            self.bonus_quick_value(int(button_id.rsplit("-", 1)[1]))
        elif button_id == "recharge-next-button":
            self.recharge_next()
        elif button_id == "recharge-bank-next-button":
            self.recharge_choose_bank()
        elif button_id in ("recharge-bank-back-button", "recharge-confirm-back-button"):
            self.recharge_back()
        elif button_id == "recharge-copy-iban-button":
            self.copy_recharge_iban()
        elif button_id == "recharge-submit-button":
            self.submit_recharge()
        elif button_id == "recharge-history-button":
            self.show_recharge_history()
        elif button_id == "withdrawal-next-button":
            self.withdrawal_next()
        elif button_id == "withdrawal-account-next-button":
            self.withdrawal_choose_account()
        elif button_id in ("withdrawal-account-back-button", "withdrawal-confirm-back-button"):
            self.withdrawal_back()
        elif button_id == "withdrawal-submit-button":
            self.submit_withdrawal()
        elif button_id == "withdrawal-history-button":
            self.show_withdrawal_history()
        elif button_id == "bonus-next-button":
            self.bonus_next()
        elif button_id == "bonus-confirm-back-button":
            self.bonus_back()
        elif button_id == "bonus-submit-button":
            self.submit_bonus()
        elif button_id == "bank-account-save-button":
            self.save_bank_account()
        elif button_id == "bank-accounts-refresh-button":
            self.refresh_bank_accounts()
        else:
            logger.warning("Unknown button ID: %s", button_id)


def main():
    """Entry point for the application."""
    setup_logging()
    try:
        config = AppConfig.load()
        config.require_backend()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    app = DeepBankApp(config)
    app.run()


if __name__ == "__main__":
    main()
