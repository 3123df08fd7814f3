"""Chat client: request lifecycle, transport and session."""

from .base import ChatTransport
from .http import DEFAULT_RELAY_URL, HttpChatTransport
from .lifecycle import RequestLifecycle, StreamState
from .models import AVAILABLE_MODELS, DEFAULT_MODEL, ChatRequest
from .session import ChatSession

__all__ = [
    "AVAILABLE_MODELS",
    "DEFAULT_MODEL",
    "DEFAULT_RELAY_URL",
    "ChatRequest",
    "ChatSession",
    "ChatTransport",
    "HttpChatTransport",
    "RequestLifecycle",
    "StreamState",
]
