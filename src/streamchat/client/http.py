"""httpx-based transport to the chat relay."""

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from ..errors import ChatTimeoutError, TransportError
from ..stream.response import ChatResponse
from .base import ChatTransport
from .models import ChatRequest

logger = logging.getLogger(__name__)

DEFAULT_RELAY_URL = "http://127.0.0.1:8000"
CHAT_PATH = "/api/chat"


def _translate(error: httpx.HTTPError) -> TransportError:
    if isinstance(error, httpx.TimeoutException):
        return ChatTimeoutError(f"Request timed out: {error}")
    return TransportError(f"{type(error).__name__}: {error}")


async def _iter_body(response: httpx.Response) -> AsyncIterator[bytes]:
    """Yield raw body chunks, reporting httpx failures as TransportError."""
    try:
        async for chunk in response.aiter_bytes():
            if chunk:
                yield chunk
    except httpx.HTTPError as e:
        raise _translate(e) from e


class HttpChatTransport(ChatTransport):
    """Streams chat calls to the relay over HTTP.

    Hidden design decisions:
    - Client construction and connection pooling
    - Streaming request setup (headers returned before the body)
    - Mapping of httpx errors onto TransportError/ChatTimeoutError
    """

    def __init__(
        self,
        base_url: str = DEFAULT_RELAY_URL,
        path: str = CHAT_PATH,
        connect_timeout: float = 10.0,
        read_timeout: float | None = 120.0,
        client: httpx.AsyncClient | None = None,
        **client_kwargs: Any
    ):
        """Initialize the transport.

        Args:
            base_url: Relay base URL
            path: Chat route on the relay
            connect_timeout: Seconds allowed to establish a connection
            read_timeout: Max seconds between body chunks (None disables)
            client: Pre-built client, mainly for tests
            **client_kwargs: Additional kwargs for httpx.AsyncClient
        """
        self._path = path
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(read_timeout, connect=connect_timeout),
            **client_kwargs
        )

    async def send(self, request: ChatRequest) -> ChatResponse:
        """POST the request and return once headers arrive."""
        http_request = self._client.build_request(
            "POST",
            self._path,
            json=request.to_payload(),
            headers={"Accept": "text/event-stream"},
        )
        logger.info("POST %s model=%s messages=%d",
                    http_request.url, request.model, len(request.messages))
        try:
            response = await self._client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            raise _translate(e) from e

        logger.debug("Relay responded %s", response.status_code)
        return ChatResponse(
            status_code=response.status_code,
            source=_iter_body(response),
            headers=response.headers,
            on_close=response.aclose,
        )

    async def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()
