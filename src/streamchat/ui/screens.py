"""Modal screens for the TUI.

This module hides the design decisions about:
- Settings dialog appearance (CSS, layout)
- Keyboard shortcuts for dialogs
- How edits to the endpoint URL are returned to the app
"""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

from ..settings.models import DEFAULT_ENDPOINT_URL


class SettingsScreen(ModalScreen[str | None]):
    """Modal dialog for editing the provider endpoint URL.

    Dismisses with the new URL on save, ``""`` on reset to default,
    and ``None`` when cancelled.
    """

    CSS = """
    SettingsScreen {
        align: center middle;
        background: $background 70%;
    }

    #settings-dialog {
        width: 80;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #settings-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
        border-bottom: solid $border;
        margin-bottom: 1;
    }

    #settings-hint {
        color: $text-muted;
        margin-top: 1;
    }

    #settings-buttons {
        width: 100%;
        height: 3;
        align: center middle;
        margin-top: 1;
    }

    #settings-buttons Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, endpoint_url: str) -> None:
        super().__init__()
        self._endpoint_url = endpoint_url

    def compose(self) -> ComposeResult:
        with Vertical(id="settings-dialog"):
            yield Static("Settings", id="settings-title")
            yield Static("Endpoint URL")
            yield Input(
                value=self._endpoint_url,
                placeholder=DEFAULT_ENDPOINT_URL,
                id="endpoint-input",
            )
            yield Static(f"Default: {DEFAULT_ENDPOINT_URL}", id="settings-hint")
            with Horizontal(id="settings-buttons"):
                yield Button("Save", id="btn-save", variant="success")
                yield Button("Reset", id="btn-reset", variant="warning")
                yield Button("Cancel", id="btn-cancel", variant="error")

    def on_mount(self) -> None:
        self.query_one("#endpoint-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._save(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-save":
            self._save(self.query_one("#endpoint-input", Input).value)
        elif event.button.id == "btn-reset":
            self.dismiss("")
        elif event.button.id == "btn-cancel":
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save(self, value: str) -> None:
        value = value.strip()
        if not value:
            self.notify("Endpoint URL cannot be empty", severity="warning")
            return
        self.dismiss(value)
