"""Main Textual TUI application.

Orchestrates the UI components and handles user interaction with a ChatSession.
"""

import asyncio
import contextlib
import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.timer import Timer
from textual.widgets import Footer, Header, Select

from ..client.lifecycle import StreamState
from ..client.models import AVAILABLE_MODELS
from ..client.session import ChatSession
from ..settings.store import SettingsStore
from .config import UPDATE_THROTTLE_SECONDS, LogLevel
from .formatting import state_label
from .log_handler import PanelLogHandler
from .screens import SettingsScreen
from .styles import APP_CSS
from .themes import STREAMCHAT_NIGHT
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    RawStreamPanel,
    StatusLine,
)

logger = logging.getLogger(__name__)


class StreamChatApp(App):
    """Textual TUI for streaming chat against the relay."""

    CSS = APP_CSS
    TITLE = "StreamChat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("escape", "stop", "Stop"),
        Binding("ctrl+r", "toggle_raw", "Raw", priority=True),
        Binding("ctrl+l", "clear_raw", "Clear Raw"),
        Binding("ctrl+k", "clear_chat", "Clear Chat", priority=True),
        Binding("ctrl+s", "settings", "Settings", priority=True),
        Binding("ctrl+y", "copy_last_response", "Copy Response", priority=True),
        Binding("ctrl+b", "toggle_maximize_chat", "Max Chat"),
        Binding("ctrl+d", "toggle_debug", "Debug"),
    ]

    def __init__(
        self,
        session: ChatSession,
        settings_store: SettingsStore | None = None,
        log_level: str | None = None,
        show_raw: bool = False,
    ) -> None:
        super().__init__()
        self._session = session
        self._settings_store = settings_store or SettingsStore()
        self._log_level = log_level
        self._show_raw = show_raw
        self._refresh_timer: Timer | None = None
        self._log_handler: PanelLogHandler | None = None

    @property
    def session(self) -> ChatSession:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        yield ChatHistoryWidget(id="chat-history")

        with Vertical(id="right-panel"):
            yield RawStreamPanel(id="raw-stream")
            yield DebugPanel(id="debug-panel")

        with Vertical(id="bottom-bar"):
            with Horizontal(id="status-row"):
                yield StatusLine(id="status-line")
                models = list(AVAILABLE_MODELS)
                if self._session.model not in models:
                    models.insert(0, self._session.model)
                yield Select(
                    [(model, model) for model in models],
                    value=self._session.model,
                    allow_blank=False,
                    id="model-select",
                )
            yield ChatInputBar(id="chat-input-bar")

        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(STREAMCHAT_NIGHT)
        self.theme = "streamchat-night"

        if self._session.endpoint_url is None:
            self._session.endpoint_url = self._settings_store.get_endpoint_url()

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            self._log_handler = PanelLogHandler(log_panel, self, level=log_panel.log_level)
            logging.getLogger("streamchat").addHandler(self._log_handler)
            logger.info("Log panel enabled with level: %s", self._log_level.upper())

        if self._show_raw:
            self.query_one("#raw-stream", RawStreamPanel).display = True

        self._session.add_update_listener(self._schedule_refresh)
        self._session.raw_buffer.add_listener(self._on_raw_text)
        self._session.lifecycle.add_listener(self._on_state_change)

        self.sub_title = self._session.endpoint_url or ""
        self._refresh_view()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        """Detach from the session so late updates don't touch dead widgets."""
        self._session.remove_update_listener(self._schedule_refresh)
        self._session.raw_buffer.remove_listener(self._on_raw_text)
        self._session.lifecycle.remove_listener(self._on_state_change)
        if self._log_handler is not None:
            logging.getLogger("streamchat").removeHandler(self._log_handler)
            self._log_handler = None

    # Session callbacks

    def _on_raw_text(self, text: str) -> None:
        self._schedule_refresh()

    def _on_state_change(self, old: StreamState, new: StreamState) -> None:
        logger.debug("State %s -> %s", old.value, new.value)
        # State changes render immediately so Send/Stop never lag behind
        self._refresh_view()

    def _schedule_refresh(self) -> None:
        """Coalesce bursts of updates into one redraw per throttle window."""
        if self._refresh_timer is not None:
            return
        self._refresh_timer = self.set_timer(UPDATE_THROTTLE_SECONDS, self._flush_refresh)

    def _flush_refresh(self) -> None:
        self._refresh_timer = None
        self._refresh_view()

    def _refresh_view(self) -> None:
        if not self.is_running:
            return
        session = self._session
        self.query_one("#chat-history", ChatHistoryWidget).sync(
            session.messages,
            busy=session.status is StreamState.SUBMITTED,
            error=session.error,
        )
        self.query_one("#chat-input-bar", ChatInputBar).set_busy(session.busy)
        self.query_one("#status-line", StatusLine).update_status(
            state_label(session.status),
            session.model,
            session.last_metadata.get("usage"),
        )

        raw_panel = self.query_one("#raw-stream", RawStreamPanel)
        raw_panel.show_text(session.raw_buffer.read())
        raw_panel.set_class(session.status is StreamState.STREAMING, "streaming")

    # Input

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        self._submit(event.value)

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "model-select" and isinstance(event.value, str):
            self._session.model = event.value
            logger.info("Model set to %s", event.value)
            self._refresh_view()

    @work(group="chat")
    async def _submit(self, text: str) -> None:
        accepted = await self._session.submit(text)
        if not accepted:
            if self._session.busy:
                self.notify("A reply is still streaming", severity="warning", timeout=2)
            return
        self.query_one("#raw-stream", RawStreamPanel).display = True
        self._refresh_view()

    # Actions

    @work(group="chat")
    async def action_stop(self) -> None:
        """Stop the in-flight request."""
        if not self._session.busy:
            return
        await self._session.stop()
        self.notify("Stopped", severity="warning", timeout=2)

    def action_toggle_raw(self) -> None:
        raw_panel = self.query_one("#raw-stream", RawStreamPanel)
        is_visible = raw_panel.toggle()
        if is_visible:
            raw_panel.show_text(self._session.raw_buffer.read())

    def action_clear_raw(self) -> None:
        self._session.raw_buffer.clear()
        self.notify("Raw stream cleared", timeout=2)

    def action_clear_chat(self) -> None:
        """Clear the chat history."""
        if self._session.busy:
            self.notify("Stop the current reply first", severity="warning", timeout=2)
            return
        self._session.clear()
        self.notify("Chat cleared", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        if is_visible and self._log_handler is None:
            self._log_handler = PanelLogHandler(log_panel, self, level=log_panel.log_level)
            logging.getLogger("streamchat").addHandler(self._log_handler)
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_toggle_maximize_chat(self) -> None:
        """Toggle maximize for chat panel."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        right = self.query_one("#right-panel", Vertical)
        if chat.has_class("-maximized"):
            chat.remove_class("-maximized")
            right.display = True
        else:
            chat.add_class("-maximized")
            right.display = False

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")

    def action_settings(self) -> None:
        """Open the endpoint settings dialog."""
        current = self._settings_store.get_endpoint_url()
        self.push_screen(SettingsScreen(current), self._apply_settings)

    def _apply_settings(self, result: str | None) -> None:
        if result is None:
            return
        try:
            if result == "":
                settings = self._settings_store.reset()
                self.notify("Settings reset to default", timeout=2)
            else:
                settings = self._settings_store.set_endpoint_url(result)
                self.notify("Settings saved", timeout=2)
        except (OSError, ValueError) as e:
            logger.error("Failed to save settings: %s", e)
            self.notify(f"Could not save settings: {e}", severity="error", timeout=5)
            return
        self._session.endpoint_url = settings.endpoint_url
        self.sub_title = settings.endpoint_url


async def run_textual_tui(
    session: ChatSession,
    settings_store: SettingsStore | None = None,
    log_level: str | None = None,
    show_raw: bool = False,
) -> None:
    """Run the Textual TUI.

    Args:
        session: Chat session bound to a transport
        settings_store: Persistent client settings (endpoint URL)
        log_level: Log level for panel (debug/info/warning/error), None to hide
        show_raw: Show the raw stream panel from the start
    """
    app = StreamChatApp(
        session=session,
        settings_store=settings_store,
        log_level=log_level,
        show_raw=show_raw,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(Exception):
            await session.close()
