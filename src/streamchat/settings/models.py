"""Data models for persisted client settings."""

from datetime import datetime

from pydantic import BaseModel, Field

DEFAULT_ENDPOINT_URL = "https://api.hicap.ai/v2/openai/dev"


class ClientSettings(BaseModel):
    """Settings the client keeps between runs."""

    endpoint_url: str = Field(
        default=DEFAULT_ENDPOINT_URL,
        description="OpenAI-compatible endpoint the relay should use",
    )
    updated_at: datetime | None = Field(default=None)

    @property
    def is_default(self) -> bool:
        return self.endpoint_url == DEFAULT_ENDPOINT_URL
