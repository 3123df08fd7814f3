"""Raw stream debug buffer.

Purely additive store of decoded text for the "raw stream" view. It sits
outside the structured message path and never raises into its callers.
"""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

BufferListener = Callable[[str], None]


class DebugBufferSink:
    """Append-only text buffer, reset at the start of each request."""

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._length = 0
        self._listeners: list[BufferListener] = []

    def append(self, text: str) -> None:
        """Append decoded text. Non-string input is logged and ignored."""
        if not isinstance(text, str):
            logger.warning("Ignoring non-text raw chunk of type %s", type(text).__name__)
            return
        if not text:
            return
        self._chunks.append(text)
        self._length += len(text)
        self._notify(text)

    def clear(self) -> None:
        """Drop all buffered text."""
        self._chunks.clear()
        self._length = 0
        self._notify("")

    def read(self) -> str:
        """Return the buffered text."""
        if len(self._chunks) > 1:
            # Collapse so repeated reads while streaming stay cheap
            self._chunks = ["".join(self._chunks)]
        return self._chunks[0] if self._chunks else ""

    def __len__(self) -> int:
        return self._length

    def add_listener(self, listener: BufferListener) -> None:
        """Register a callback invoked with each appended text ("" on clear)."""
        self._listeners.append(listener)

    def remove_listener(self, listener: BufferListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, text: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(text)
            except Exception:
                logger.exception("Raw buffer listener failed")
