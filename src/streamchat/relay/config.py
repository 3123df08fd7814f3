"""Relay configuration.

Centralizes the process-wide settings the relay reads from the environment.
"""

import os

from pydantic import BaseModel, Field

DEFAULT_PROVIDER_BASE_URL = "https://api.hicap.ai/v2/openai/dev"
DEFAULT_TIMEOUT_SECONDS = 60.0


class RelayConfig(BaseModel):
    """Settings for the chat relay server."""

    provider_api_key: str = Field(default="", description="Key sent to the provider")
    provider_base_url: str = Field(default=DEFAULT_PROVIDER_BASE_URL)
    provider_name: str = Field(default="hicap")
    default_model: str = Field(default="gemini-2.5-pro")
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0, description="Hard wall-clock limit per request")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535)

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """Build config from environment variables.

        Environment variables:
            PROVIDER_API_KEY: Provider API key (default: empty)
            PROVIDER_BASE_URL: OpenAI-compatible base URL
            PROVIDER_NAME: Label used in logs (default: hicap)
            RELAY_DEFAULT_MODEL: Model used when a request names none
            RELAY_TIMEOUT: Seconds before a request is aborted (default: 60)
            RELAY_HOST: Bind host (default: 127.0.0.1)
            RELAY_PORT: Bind port (default: 8000)
        """
        return cls(
            provider_api_key=os.getenv("PROVIDER_API_KEY", ""),
            provider_base_url=os.getenv("PROVIDER_BASE_URL", DEFAULT_PROVIDER_BASE_URL),
            provider_name=os.getenv("PROVIDER_NAME", "hicap"),
            default_model=os.getenv("RELAY_DEFAULT_MODEL", "gemini-2.5-pro"),
            timeout=float(os.getenv("RELAY_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))),
            host=os.getenv("RELAY_HOST", "127.0.0.1"),
            port=int(os.getenv("RELAY_PORT", "8000")),
        )
