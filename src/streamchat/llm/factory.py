from typing import Any

from .base import LLMProvider
from .providers import OpenAICompatibleProvider


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type ('openai-compatible', or its alias 'openai')
        **config: Provider-specific configuration
            For OpenAI-compatible:
                - api_key: str (required)
                - base_url: str (required)
                - model: str (default: 'gemini-2.5-pro')
                - name: str (default: 'openai-compatible')

    Returns:
        Initialized LLM provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider(
        ...     "openai-compatible",
        ...     api_key="...",
        ...     base_url="https://api.hicap.ai/v2/openai/dev",
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower in ("openai-compatible", "openai"):
        if "api_key" not in config:
            raise TypeError("OpenAI-compatible provider requires 'api_key' in config")
        if "base_url" not in config:
            raise TypeError("OpenAI-compatible provider requires 'base_url' in config")
        return OpenAICompatibleProvider(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'openai-compatible'"
    )
