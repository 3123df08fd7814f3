"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history and busy-state handling
- Incremental chat message rendering
- Raw stream display
- Log rendering and level filtering
"""

from datetime import datetime

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, Collapsible, RichLog, Static, TextArea

from ..errors import StreamChatError
from ..messages.models import Message as ChatMessage
from ..messages.models import Role
from .config import (
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    RAW_PLACEHOLDER,
    REASONING_TITLE,
    THINKING_TEXT,
    LogLevel,
)
from .formatting import format_error, message_body, message_header, reasoning_body


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._busy = False

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def set_busy(self, busy: bool) -> None:
        """Disable sending while a request is in flight."""
        self._busy = busy
        button = self.query_one("#send-btn", Button)
        button.disabled = busy
        button.label = "Sending..." if busy else "Send"

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        last_row = len(lines) - 1
        last_col = len(lines[-1]) if lines else 0
        return text_area.cursor_location == (last_row, last_col)

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if self._busy:
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value:
            return
        if not self._history or self._history[-1] != value:
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class MessageView(Vertical):
    """One chat message, updated in place while it streams."""

    def __init__(self, message: ChatMessage, *args, **kwargs) -> None:
        role_class = "user-message" if message.role is Role.USER else "assistant-message"
        super().__init__(*args, classes=f"chat-message {role_class}", **kwargs)
        self.message_id = message.id
        self._message = message
        self._rendered_text: str | None = None
        self._rendered_reasoning: str | None = None
        self._parts_seen = -1

    def compose(self):
        yield Static(message_header(self._message), classes="message-header")
        reasoning = Static("", classes="reasoning-content")
        with Collapsible(title=REASONING_TITLE, collapsed=True, classes="reasoning"):
            yield reasoning
        yield Static("", classes="message-content")

    def on_mount(self) -> None:
        self.update_message(self._message)

    def update_message(self, message: ChatMessage) -> None:
        """Re-render only what changed since the last update."""
        self._message = message
        if not self.is_mounted:
            return
        text = message.text
        if text != self._rendered_text or len(message.parts) != self._parts_seen:
            self._rendered_text = text
            self._parts_seen = len(message.parts)
            self.query_one(".message-content", Static).update(message_body(message))

        reasoning = reasoning_body(message)
        if reasoning != self._rendered_reasoning:
            self._rendered_reasoning = reasoning
            self.query_one(".reasoning-content", Static).update(Text(reasoning))
        self.query_one(".reasoning", Collapsible).display = bool(reasoning)

    @property
    def content(self) -> str:
        return self._message.text

    def on_click(self, event: Click) -> None:
        """Copy message text to the clipboard when clicked."""
        event.stop()
        self.app.copy_to_clipboard(self._message.text)
        self.app.notify("Copied to clipboard", timeout=2)


class ChatHistoryWidget(VerticalScroll):
    """Scrollable transcript kept in sync with the session's messages."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: dict[str, MessageView] = {}

    def compose(self):
        yield Static(THINKING_TEXT, id="thinking-indicator", classes="chat-message assistant-message")
        yield Static("", id="chat-error", classes="chat-message error-message")

    def on_mount(self) -> None:
        self.query_one("#thinking-indicator").display = False
        self.query_one("#chat-error").display = False

    def sync(
        self,
        messages: list[ChatMessage],
        busy: bool = False,
        error: StreamChatError | None = None,
    ) -> None:
        """Bring the display in line with ``messages``.

        Existing views are updated in place, new messages are mounted in
        order, and views whose message disappeared are removed.
        """
        thinking = self.query_one("#thinking-indicator", Static)
        seen: set[str] = set()
        added = False
        for message in messages:
            seen.add(message.id)
            view = self._views.get(message.id)
            if view is None:
                view = MessageView(message)
                self._views[message.id] = view
                self.mount(view, before=thinking)
                added = True
            else:
                view.update_message(message)

        for message_id in list(self._views):
            if message_id not in seen:
                self._views.pop(message_id).remove()

        thinking.display = busy
        error_widget = self.query_one("#chat-error", Static)
        if error is not None:
            error_widget.update(format_error(error))
            error_widget.display = True
        else:
            error_widget.display = False

        self.border_subtitle = f"{len(messages)} messages" if messages else "Conversation history"
        if added or busy:
            self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for view in reversed(list(self._views.values())):
            if view._message.role is Role.ASSISTANT:
                return view.content
        return None


class RawStreamPanel(VerticalScroll):
    """Shows the raw decoded response text of the current request."""

    BORDER_TITLE = "Raw stream"
    BORDER_SUBTITLE = "Ctrl+R to hide"

    def compose(self):
        yield Static(RAW_PLACEHOLDER, id="raw-stream-text")

    def on_mount(self) -> None:
        self.display = False

    def show_text(self, text: str) -> None:
        self.query_one("#raw-stream-text", Static).update(Text(text) if text else RAW_PLACEHOLDER)
        self.border_subtitle = f"{len(text):,} chars" if text else "Ctrl+R to hide"
        if self.display:
            self.scroll_end(animate=False)

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        self.display = not self.display
        return self.display


class StatusLine(Static):
    """Request state and token usage of the last reply."""

    def update_status(self, state_markup: str, model: str, usage: dict | None = None) -> None:
        parts = [f"[bold cyan]Model:[/] {model}", f"[bold cyan]State:[/] {state_markup}"]
        if usage:
            parts.append(
                f"[bold magenta]Tokens:[/] {usage.get('total_tokens', 0):,} "
                f"[dim]({usage.get('prompt_tokens', 0):,}/{usage.get('completion_tokens', 0):,})[/]"
            )
        self.update("  ".join(parts))


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log records from all components.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        level_color = level_colors.get(level, "white")
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        line = Text.from_markup(f"[dim]{timestamp}[/] [{level_color}]{LogLevel.name(level):<7}[/] ")
        line.append(f"[{component}] ", style="magenta")
        line.append(message)
        self.write(line)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
