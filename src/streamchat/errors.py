"""Exception hierarchy for streamchat.

Only transport and timeout errors are meant to reach the user. Everything
else is caught and logged where it happens.
"""


class StreamChatError(Exception):
    """Base class for all streamchat errors."""


class TransportError(StreamChatError):
    """Network failure, non-2xx response, or an error reported in the stream."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code}: {self.message}"
        return self.message


class ChatTimeoutError(TransportError):
    """The request exceeded its maximum duration and was aborted."""


class TapError(StreamChatError):
    """The raw stream tap could not read the response body."""


class InvalidTransitionError(StreamChatError):
    """A request lifecycle transition was attempted from the wrong state."""
