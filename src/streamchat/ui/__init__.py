"""Terminal UI module for streamchat.

Provides a Textual-based TUI for streaming chat.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (input history, message views, raw stream, logs)
- formatting.py: How messages, states and errors are displayed
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- screens.py: Modal dialogs (settings)
- log_handler.py: How log records reach the debug panel
- app.py: Application orchestration (user interaction flow)
"""

from .app import StreamChatApp, run_textual_tui
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, RawStreamPanel

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "LogLevel",
    "RawStreamPanel",
    "StreamChatApp",
    "run_textual_tui",
]
