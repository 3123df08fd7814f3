"""Pytest configuration and shared fixtures."""
import asyncio
from collections import deque
from collections.abc import AsyncIterator, Iterable
from typing import Any

import pytest

from streamchat.client.base import ChatTransport
from streamchat.client.models import ChatRequest
from streamchat.client.session import ChatSession
from streamchat.llm.base import LLMProvider
from streamchat.llm.models import ChatMessage, StreamDelta, StreamingResponse
from streamchat.stream.protocol import encode_chunk, encode_done
from streamchat.stream.response import ChatResponse


def sse(*chunks: dict[str, Any], done: bool = True) -> bytes:
    """Frame chunks as one SSE byte string."""
    text = "".join(encode_chunk(chunk) for chunk in chunks)
    if done:
        text += encode_done()
    return text.encode("utf-8")


def text_reply(*deltas: str, message_id: str = "srv-1") -> list[bytes]:
    """A complete reply, one network chunk per SSE event."""
    chunks = [
        sse({"type": "start", "messageId": message_id}, done=False),
        sse({"type": "text-start", "id": "0"}, done=False),
    ]
    chunks.extend(sse({"type": "text-delta", "id": "0", "delta": d}, done=False) for d in deltas)
    chunks.append(sse({"type": "text-end", "id": "0"}, {"type": "finish", "finishReason": "stop"}))
    return chunks


async def static_body(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


class ScriptedBody:
    """Response body fed by the test, one chunk at a time."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def push(self, data: bytes) -> None:
        self._queue.put_nowait(data)

    def end(self) -> None:
        self._queue.put_nowait(None)

    def fail(self, error: BaseException) -> None:
        self._queue.put_nowait(error)

    def __aiter__(self) -> "ScriptedBody":
        return self

    async def __anext__(self) -> bytes:
        item = await self._queue.get()
        if item is None:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True


class FakeTransport(ChatTransport):
    """Transport returning queued replies and recording requests."""

    def __init__(self) -> None:
        self.requests: list[ChatRequest] = []
        self.send_error: Exception | None = None
        self.closed = False
        self._replies: deque[tuple[int, Any]] = deque()

    def reply(self, chunks: Iterable[bytes] = (), status_code: int = 200) -> None:
        self._replies.append((status_code, static_body(list(chunks))))

    def reply_scripted(self, status_code: int = 200) -> ScriptedBody:
        body = ScriptedBody()
        self._replies.append((status_code, body))
        return body

    async def send(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        if self.send_error is not None:
            raise self.send_error
        status_code, body = self._replies.popleft()
        return ChatResponse(status_code, body)

    async def close(self) -> None:
        self.closed = True


class FakeProvider(LLMProvider):
    """LLM provider yielding canned deltas."""

    def __init__(
        self,
        deltas: Iterable[StreamDelta] = (),
        error: Exception | None = None,
        delay: float = 0.0,
        usage: dict[str, Any] | None = None,
    ) -> None:
        self.deltas = list(deltas)
        self.error = error
        self.delay = delay
        self.usage = usage
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        system: str | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        self.calls.append({"messages": messages, "model": model, "system": system, "kwargs": kwargs})
        response = StreamingResponse(self._generate())
        if self.usage:
            response.set_usage(self.usage)
        return response

    async def _generate(self) -> AsyncIterator[StreamDelta]:
        for delta in self.deltas:
            if self.delay:
                await asyncio.sleep(self.delay)
            yield delta
        if self.error is not None:
            raise self.error

    async def close(self) -> None:
        self.closed = True


async def wait_until(condition, timeout: float = 2.0) -> None:
    """Poll ``condition`` until true, yielding to the event loop."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def transport():
    """Return a fake transport with no queued replies."""
    return FakeTransport()


@pytest.fixture
def session(transport):
    """Return a chat session bound to the fake transport."""
    return ChatSession(transport)
