"""
StreamChat: a streaming chat client and relay for OpenAI-compatible providers.

Each subpackage hides one design decision:
- stream: byte decoding, body fan-out, the raw tap and the wire protocol
- messages: message/part models and incremental assembly
- client: request lifecycle, transport and the chat session
- relay: the HTTP relay in front of the provider
- llm: provider abstraction over the OpenAI SDK
- settings: persisted client settings
"""

__version__ = "0.1.0"

from .client import ChatRequest, ChatSession, HttpChatTransport, RequestLifecycle, StreamState
from .errors import ChatTimeoutError, StreamChatError, TransportError
from .messages import Message, MessagePartAssembler

__all__ = [
    "ChatRequest",
    "ChatSession",
    "ChatTimeoutError",
    "HttpChatTransport",
    "Message",
    "MessagePartAssembler",
    "RequestLifecycle",
    "StreamChatError",
    "StreamState",
    "TransportError",
]
