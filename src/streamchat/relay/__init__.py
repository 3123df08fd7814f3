"""Chat relay server.

Accepts chat requests from the client, forwards them to an OpenAI-compatible
provider and streams the reply back as a UI message stream.
"""

from .app import create_app, serve
from .config import RelayConfig
from .conversion import filter_messages, is_valid_message, to_provider_messages

__all__ = [
    "RelayConfig",
    "create_app",
    "filter_messages",
    "is_valid_message",
    "serve",
    "to_provider_messages",
]
