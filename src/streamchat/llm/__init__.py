from .base import LLMProvider
from .factory import create_llm_provider
from .models import ChatMessage, StreamDelta, StreamingResponse
from .providers import OpenAICompatibleProvider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "ChatMessage",
    "StreamDelta",
    "StreamingResponse",
    "OpenAICompatibleProvider",
]
