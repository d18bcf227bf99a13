"""Shared modal screens for DeepBank Terminal."""

from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, Label, Static

from deepbank.shared.loading import LoadingState, get_loading_state_message
from deepbank.shared.notifications import Notification, Remediation
from deepbank.shared.wizard import WizardController


class BaseModalScreen(ModalScreen):
    """Base modal screen with common key bindings."""

    BINDINGS = [
        ("escape", "app.pop_screen", "Close"),
        ("tab", "focus_next", "Next"),
        ("shift+tab", "focus_previous", "Previous"),
    ]


class LoginScreen(ModalScreen):
    """Email/password sign-in. Dismisses with ``{"email", "password"}``."""

    BINDINGS = [("enter", "submit", "Sign in")]

    def __init__(self, email: str = "", error: str = ""):
        super().__init__()
        self.email = email
        self.error = error

    def compose(self) -> ComposeResult:
        with Vertical(id="login-dialog"):
            yield Label("🏦 DeepBank - Sign in", id="login-title")
            yield Label("Email")
            yield Input(value=self.email, placeholder="you@example.com", id="login-email")
            yield Label("Password")
            yield Input(password=True, placeholder="Password", id="login-password")
            yield Static(
                f"[red]{self.error}[/red]" if self.error else "", id="login-error"
            )
            yield Horizontal(
                Button("Sign in", id="login-button", variant="primary"),
                Button("Quit", id="login-quit-button"),
            )

    def on_mount(self) -> None:
        target = "#login-password" if self.email else "#login-email"
        self.query_one(target, Input).focus()

    def action_submit(self) -> None:
        email = self.query_one("#login-email", Input).value.strip()
        password = self.query_one("#login-password", Input).value
        if not email or not password:
            self.query_one("#login-error", Static).update(
                "[red]Email and password are required[/red]"
            )
            return
        self.dismiss({"email": email, "password": password})

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "login-button":
            self.action_submit()
        elif event.button.id == "login-quit-button":
            self.app.exit()


class RemediationScreen(BaseModalScreen):
    """Blocking rejection with a direct action that resolves it."""

    def __init__(self, notification: Notification):
        super().__init__()
        self.notification = notification

    def compose(self) -> ComposeResult:
        with Vertical(id="remediation-dialog"):
            yield Label(f"✗ {self.notification.title}", id="remediation-title")
            yield Static(self.notification.message, id="remediation-message")
            yield Horizontal(
                Button(
                    self.notification.action_label or "OK",
                    id="remediation-action-button",
                    variant="primary",
                ),
                Button("Close", id="remediation-close-button"),
            )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "remediation-action-button":
            self.dismiss(self.notification.remediation)
        else:
            self.dismiss(Remediation.NONE)


class LoadingOverlay(Static):
    """Spinner line bound to the loading coordinator's busy flag."""

    FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)
        self._frame = 0
        self._text = ""
        self._timer = None

    def on_mount(self) -> None:
        self.display = False
        self._timer = self.set_interval(0.08, self._tick, pause=True)

    def _tick(self) -> None:
        self._frame = (self._frame + 1) % len(self.FRAMES)
        self.update(f"[yellow]{self.FRAMES[self._frame]} {self._text}[/yellow]")

    def show_state(self, state: LoadingState) -> None:
        if state.busy:
            _, self._text = get_loading_state_message(state)
            self.display = True
            self._tick()
            if self._timer:
                self._timer.resume()
        else:
            self.display = False
            if self._timer:
                self._timer.pause()


class TimeoutBanner(Static):
    """Connectivity error shown while the loading deadline has fired."""

    class Dismissed(Message):
        pass

    def show_state(self, state: LoadingState) -> None:
        if state.timed_out:
            title, message = get_loading_state_message(state)
            self.update(f"[b]⚠ {title}[/b] {message} [dim](click to dismiss)[/dim]")
            self.display = True
        else:
            self.display = False

    def on_mount(self) -> None:
        self.display = False

    def on_click(self) -> None:
        self.post_message(self.Dismissed())


class WizardPanel(Container):
    """Tab body holding one ``Vertical`` per flow step.

    Step containers are named ``#<prefix>-step-<step name>``; only the
    current one is shown.
    """

    prefix = ""
    step_names: tuple[str, ...] = ()

    def show_step(self, wizard: WizardController) -> None:
        current = wizard.current_step
        for name in self.step_names:
            container = self.query_one(f"#{self.prefix}-step-{name}")
            container.set_class(name != current.name, "hidden")
        progress = self.query_one(f"#{self.prefix}-progress", Static)
        progress.update(
            f"Step {wizard.step}/{wizard.step_count} · {current.title or current.name}"
        )

    def show_result(self, text: str) -> None:
        self.query_one(f"#{self.prefix}-result", Static).update(text)


class HistoryScreen(BaseModalScreen):
    """Read-only table of past requests."""

    def __init__(self, title: str, columns: list[str], rows: list[tuple]):
        super().__init__()
        self.title_text = title
        self.columns = columns
        self.rows = rows

    def compose(self) -> ComposeResult:
        with Vertical(id="history-dialog"):
            yield Label(self.title_text, id="history-title")
            yield DataTable(id="history-table")
            if not self.rows:
                yield Static("[dim]Nothing here yet[/dim]")
            yield Button("Close", id="history-close-button")

    def on_mount(self) -> None:
        table = self.query_one("#history-table", DataTable)
        table.add_columns(*self.columns)
        for row in self.rows:
            table.add_row(*row)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "history-close-button":
            self.dismiss(None)
