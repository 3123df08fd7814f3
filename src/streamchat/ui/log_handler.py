"""Logging bridge into the TUI.

Hides how standard ``logging`` records reach the debug panel.
Uses thread-safe calls so records from worker threads are safe to emit.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any

from .config import LogLevel

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import DebugPanel


class PanelLogHandler(logging.Handler):
    """Forwards log records to a DebugPanel."""

    def __init__(self, panel: "DebugPanel", app: "App", level: int = logging.DEBUG) -> None:
        super().__init__(level)
        self.panel = panel
        self.app = app

    def _call_thread_safe(self, func: Any, *args: Any, **kwargs: Any) -> None:
        """Call a function in a thread-safe manner for UI updates."""
        if self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args, **kwargs)
        else:
            func(*args, **kwargs)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if record.exc_info and record.exc_info[1] is not None:
                message = f"{message}: {record.exc_info[1]!r}"
            component = record.name.rsplit(".", 1)[-1]
            self._call_thread_safe(
                self.panel.log_entry,
                component,
                message,
                LogLevel.normalize(record.levelno),
            )
        except Exception:
            self.handleError(record)
