"""Unit tests for the LLM provider layer."""
import json

import httpx
import pytest

from streamchat.llm import ChatMessage, OpenAICompatibleProvider, StreamDelta, create_llm_provider
from streamchat.llm.base import LLMProvider


def completion_chunk(delta: dict | None = None, usage: dict | None = None) -> str:
    chunk = {
        "id": "chatcmpl-1",
        "object": "chat.completion.chunk",
        "created": 0,
        "model": "gemini-2.5-pro",
        "choices": [] if delta is None else [{"index": 0, "delta": delta, "finish_reason": None}],
    }
    if usage is not None:
        chunk["usage"] = usage
    return f"data: {json.dumps(chunk)}\n\n"


class TestLLMProvider:
    """Tests for LLMProvider interface."""

    def test_provider_is_abstract(self):
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore


class TestCreateLLMProvider:
    """Tests for the provider factory."""

    def test_creates_openai_compatible_provider(self):
        provider = create_llm_provider(
            "openai-compatible",
            api_key="k",
            base_url="https://api.hicap.ai/v2/openai/dev",
            model="claude-sonnet-4",
        )

        assert isinstance(provider, OpenAICompatibleProvider)
        assert provider.model == "claude-sonnet-4"

    def test_missing_api_key_fails(self):
        with pytest.raises(TypeError):
            create_llm_provider("openai", base_url="https://x.test")

    def test_missing_base_url_fails(self):
        with pytest.raises(TypeError):
            create_llm_provider("openai", api_key="k")

    def test_unknown_provider_fails(self):
        with pytest.raises(ValueError):
            create_llm_provider("carrier-pigeon")


class TestOpenAICompatibleProvider:
    """Tests for OpenAICompatibleProvider against a mocked HTTP endpoint."""

    @pytest.mark.asyncio
    async def test_streams_reasoning_text_and_usage(self):
        seen: list[httpx.Request] = []
        body = "".join([
            completion_chunk({"role": "assistant", "reasoning_content": "thinking"}),
            completion_chunk({"content": "Hel"}),
            completion_chunk({"content": "lo"}),
            completion_chunk(usage={"prompt_tokens": 4, "completion_tokens": 2, "total_tokens": 6}),
            "data: [DONE]\n\n",
        ])

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=body.encode(), headers={"Content-Type": "text/event-stream"})

        provider = OpenAICompatibleProvider(
            api_key="secret",
            base_url="https://gateway.test/v1",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        stream = await provider.chat_completion_stream(
            [ChatMessage(role="user", content="Hi")],
            model="gemini-2.5-flash",
            system="Be brief",
        )
        deltas = [delta async for delta in stream]
        await provider.close()

        assert deltas == [
            StreamDelta(kind="reasoning", text="thinking"),
            StreamDelta(kind="text", text="Hel"),
            StreamDelta(kind="text", text="lo"),
        ]
        assert stream.usage == {"prompt_tokens": 4, "completion_tokens": 2, "total_tokens": 6}

        request = seen[0]
        assert request.headers["api-key"] == "secret"
        payload = json.loads(request.content)
        assert payload["model"] == "gemini-2.5-flash"
        assert payload["messages"][0] == {"role": "system", "content": "Be brief"}
        assert payload["stream"] is True
