"""Request lifecycle state machine.

Hides the rules for when a request may start, stop, or end, and derives the
``busy`` flag the UI uses to disable input and show progress.

    idle --submit--> submitted --first chunk--> streaming --end--> idle
    submitted|streaming --error--> idle (error recorded)
    submitted|streaming --stop--> stopped --reset--> idle
"""

import logging
from collections.abc import Callable
from enum import Enum

from ..errors import InvalidTransitionError, StreamChatError

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    """State of the single in-flight chat request."""

    IDLE = "idle"
    SUBMITTED = "submitted"
    STREAMING = "streaming"
    STOPPED = "stopped"


ACTIVE_STATES = frozenset({StreamState.SUBMITTED, StreamState.STREAMING})

StateListener = Callable[[StreamState, StreamState], None]


class RequestLifecycle:
    """Finite-state machine for one-request-at-a-time chat."""

    def __init__(self) -> None:
        self._state = StreamState.IDLE
        self._error: StreamChatError | None = None
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def busy(self) -> bool:
        """True while a request is submitted or streaming."""
        return self._state in ACTIVE_STATES

    @property
    def error(self) -> StreamChatError | None:
        """Error recorded by the last failed request, if any."""
        return self._error

    def add_listener(self, listener: StateListener) -> None:
        """Register ``listener(old, new)``, called after every transition."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def submit(self, text: str) -> bool:
        """Start a request. Returns False (no change) for blank input or when not idle."""
        if not text or not text.strip():
            return False
        if self._state is not StreamState.IDLE:
            logger.debug("Submit rejected in state %s", self._state.value)
            return False
        self._error = None
        self._transition(StreamState.SUBMITTED)
        return True

    def mark_streaming(self) -> None:
        """Record that the first chunk arrived."""
        if self._state is StreamState.STREAMING:
            return
        self._require(StreamState.SUBMITTED, action="mark_streaming")
        self._transition(StreamState.STREAMING)

    def finish(self) -> None:
        """The stream ended normally."""
        self._require(*ACTIVE_STATES, action="finish")
        self._transition(StreamState.IDLE)

    def fail(self, error: StreamChatError) -> None:
        """The request failed; keep the error for the caller."""
        self._require(*ACTIVE_STATES, action="fail")
        self._error = error
        self._transition(StreamState.IDLE)

    def stop(self) -> bool:
        """User-initiated stop. A no-op (returns False) when nothing is in flight."""
        if self._state not in ACTIVE_STATES:
            return False
        self._transition(StreamState.STOPPED)
        return True

    def reset(self) -> None:
        """Leave the stopped state."""
        if self._state is StreamState.IDLE:
            return
        self._require(StreamState.STOPPED, action="reset")
        self._transition(StreamState.IDLE)

    def _require(self, *allowed: StreamState, action: str) -> None:
        if self._state not in allowed:
            raise InvalidTransitionError(f"Cannot {action} from state {self._state.value}")

    def _transition(self, new_state: StreamState) -> None:
        old_state = self._state
        self._state = new_state
        logger.debug("Lifecycle %s -> %s", old_state.value, new_state.value)
        for listener in list(self._listeners):
            try:
                listener(old_state, new_state)
            except Exception:
                logger.exception("Lifecycle listener failed")
