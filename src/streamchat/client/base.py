from abc import ABC, abstractmethod
from typing import Any

from ..stream.response import ChatResponse
from .models import ChatRequest


class ChatTransport(ABC):
    """Abstract transport that issues chat calls.

    This module hides the design decision of how requests reach the relay.
    Implementations must:
    - Return as soon as response headers are available, with a streaming body
    - Report network failures as TransportError, both when sending and
      while the body is being read
    - Release connections when the response is closed

    Supports async context manager protocol:
        async with HttpChatTransport(base_url) as transport:
            response = await transport.send(request)
    """

    @abstractmethod
    async def send(self, request: ChatRequest) -> ChatResponse:
        """Issue one chat call.

        Args:
            request: Messages and parameters for the call

        Returns:
            ChatResponse with status code and a cloneable streaming body

        Raises:
            TransportError: If the request could not be sent
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "ChatTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
