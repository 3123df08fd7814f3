"""Request models for the chat transport."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..messages.models import Message

DEFAULT_MODEL = "gemini-2.5-pro"

AVAILABLE_MODELS = (
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "claude-sonnet-4",
    "claude-sonnet-4.5",
)


class ChatRequest(BaseModel):
    """One outbound chat call."""

    model_config = ConfigDict(frozen=True)

    messages: list[Message] = Field(description="Conversation so far, oldest first")
    model: str = Field(default=DEFAULT_MODEL, description="Model identifier")
    system: str | None = Field(default=None, description="Optional system prompt")
    endpoint_url: str | None = Field(
        default=None,
        description="Provider base URL override, forwarded to the relay",
    )
    provider_options: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON body understood by the relay."""
        payload: dict[str, Any] = {
            "messages": [m.to_wire() for m in self.messages],
            "model": self.model,
            "stream": True,
        }
        if self.system is not None:
            payload["system"] = self.system
        if self.endpoint_url:
            payload["endpointUrl"] = self.endpoint_url
        if self.provider_options is not None:
            payload["providerOptions"] = self.provider_options
        return payload
