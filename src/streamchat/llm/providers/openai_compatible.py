from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from ..base import LLMProvider
from ..models import ChatMessage, StreamDelta, StreamingResponse

# Delta attributes that OpenAI-compatible gateways use for thinking tokens
REASONING_FIELDS = ("reasoning_content", "reasoning")


def _reasoning_text(delta: Any) -> str | None:
    """Pull reasoning text out of a chunk delta, if the gateway sent any."""
    for name in REASONING_FIELDS:
        value = getattr(delta, name, None)
        if value is None and getattr(delta, "model_extra", None):
            value = delta.model_extra.get(name)
        if isinstance(value, str) and value:
            return value
    return None


class OpenAICompatibleProvider(LLMProvider):
    """Provider for any OpenAI-compatible chat completions endpoint.

    Hidden design decisions:
    - OpenAI SDK client initialization against a custom base URL
    - Sending the key both as bearer token and ``api-key`` header, since
      gateways differ in which one they read
    - Splitting reasoning deltas from answer deltas
    - Usage capture from the final stream chunk
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str = "gemini-2.5-pro",
        name: str = "openai-compatible",
        **client_kwargs: Any
    ):
        """Initialize the provider.

        Args:
            api_key: Provider API key
            base_url: OpenAI-compatible API base URL
            model: Default model to use
            name: Label used in logs
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._name = name
        self._base_url = base_url
        self._client = AsyncOpenAI(
            api_key=api_key or "missing-key",
            base_url=base_url,
            default_headers={"api-key": api_key},
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    @property
    def name(self) -> str:
        return self._name

    @property
    def base_url(self) -> str:
        return self._base_url

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        system: str | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Generate a streaming chat completion.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            system: Optional system prompt
            **kwargs: Additional request parameters (provider options)

        Returns:
            StreamingResponse that yields StreamDelta items and captures usage info
        """
        model_to_use = model or self._model
        openai_messages = [{"role": msg.role, "content": msg.content} for msg in messages]
        if system:
            openai_messages.insert(0, {"role": "system", "content": system})

        response = StreamingResponse(self._stream_generator(model_to_use, openai_messages, **kwargs))
        # Store reference so generator can set usage
        self._current_stream_response = response
        return response

    async def _stream_generator(
        self,
        model: str,
        messages: list[dict[str, str]],
        **kwargs: Any,
    ) -> AsyncIterator[StreamDelta]:
        """Internal generator that yields deltas and captures usage."""
        stream_response = self._current_stream_response
        request_params: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": True,
            "stream_options": {"include_usage": True},
            **kwargs,
        }

        stream = await self._client.chat.completions.create(**request_params)

        async for chunk in stream:
            # Check for usage in the final chunk
            if chunk.usage is not None:
                stream_response.set_usage({
                    "prompt_tokens": chunk.usage.prompt_tokens,
                    "completion_tokens": chunk.usage.completion_tokens,
                    "total_tokens": chunk.usage.total_tokens,
                })
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            reasoning = _reasoning_text(delta)
            if reasoning:
                yield StreamDelta(kind="reasoning", text=reasoning)
            if delta.content:
                yield StreamDelta(kind="text", text=delta.content)

    async def close(self) -> None:
        """Close the OpenAI client.

        Note: Uses the OpenAI SDK's async context manager for proper cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()
