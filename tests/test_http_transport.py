"""Tests for the httpx transport, using httpx.MockTransport."""
import json

import httpx
import pytest

from streamchat.client.http import HttpChatTransport
from streamchat.client.models import ChatRequest
from streamchat.errors import ChatTimeoutError, TransportError
from streamchat.messages.models import Message


class FailingStream(httpx.AsyncByteStream):
    """Body that breaks after the first chunk."""

    async def __aiter__(self):
        yield b"data: first\n\n"
        raise httpx.ReadError("connection reset")


def make_transport(handler) -> HttpChatTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://relay.test")
    return HttpChatTransport(client=client)


@pytest.fixture
def request_model():
    return ChatRequest(
        messages=[Message.user("Hi", message_id="u1")],
        model="gemini-2.5-flash",
        endpoint_url="https://custom.test/v1",
    )


class TestHttpChatTransport:
    """Tests for HttpChatTransport."""

    @pytest.mark.asyncio
    async def test_posts_payload_and_streams_body(self, request_model):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"data: [DONE]\n\n", headers={"Content-Type": "text/event-stream"})

        transport = make_transport(handler)
        response = await transport.send(request_model)
        body = await response.aread()
        await response.aclose()

        assert response.ok
        assert body == b"data: [DONE]\n\n"
        assert response.headers["content-type"] == "text/event-stream"

        sent = seen[0]
        assert sent.method == "POST"
        assert sent.url.path == "/api/chat"
        assert sent.headers["accept"] == "text/event-stream"
        payload = json.loads(sent.content)
        assert payload["model"] == "gemini-2.5-flash"
        assert payload["stream"] is True
        assert payload["endpointUrl"] == "https://custom.test/v1"
        assert payload["messages"] == [{"id": "u1", "role": "user", "parts": [{"type": "text", "text": "Hi"}]}]

    @pytest.mark.asyncio
    async def test_non_2xx_is_returned_not_raised(self, request_model):
        transport = make_transport(lambda request: httpx.Response(400, json={"error": "Failed to process request"}))

        response = await transport.send(request_model)

        assert response.status_code == 400
        assert not response.ok
        assert b"Failed to process request" in await response.aread()

    @pytest.mark.asyncio
    async def test_connect_error_becomes_transport_error(self, request_model):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            await make_transport(handler).send(request_model)
        assert not isinstance(exc_info.value, ChatTimeoutError)

    @pytest.mark.asyncio
    async def test_timeout_becomes_chat_timeout_error(self, request_model):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(ChatTimeoutError):
            await make_transport(handler).send(request_model)

    @pytest.mark.asyncio
    async def test_failure_while_reading_body_is_translated(self, request_model):
        transport = make_transport(lambda request: httpx.Response(200, stream=FailingStream()))
        response = await transport.send(request_model)

        chunks = []
        with pytest.raises(TransportError):
            async for chunk in response.body:
                chunks.append(chunk)
        await response.aclose()

        assert chunks == [b"data: first\n\n"]

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        await HttpChatTransport(client=client).close()

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self):
        transport = HttpChatTransport("http://relay.test")
        await transport.close()

        assert transport._client.is_closed
