"""Streaming response handed from a transport to the chat session."""

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping

from .tee import BodyBranch, BodyTee


class ChatResponse:
    """A streaming HTTP-like response whose body can be cloned before reading.

    ``body`` is the primary branch, read by the chat session. ``clone()``
    returns an extra branch for secondary observers such as the raw tap.

    Usage:
        response = await transport.send(request)
        tap_branch = response.clone()
        async for chunk in response.body:
            ...
        await response.aclose()
    """

    def __init__(
        self,
        status_code: int,
        source: AsyncIterator[bytes] | None,
        headers: Mapping[str, str] | None = None,
        on_close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self.status_code = status_code
        self.headers = dict(headers or {})
        self._on_close = on_close
        self._closed = False
        self._tee = BodyTee(source) if source is not None else None
        self.body: BodyBranch | None = self._tee.branch() if self._tee else None

    @property
    def ok(self) -> bool:
        """True for 2xx status codes."""
        return 200 <= self.status_code < 300

    @property
    def closed(self) -> bool:
        return self._closed

    def clone(self) -> BodyBranch | None:
        """Return an independent branch of the body, or None without a body.

        Raises:
            RuntimeError: If the body has already been read from
        """
        if self._tee is None:
            return None
        return self._tee.branch()

    async def aread(self) -> bytes:
        """Read the remainder of the primary body."""
        if self.body is None:
            return b""
        return b"".join([chunk async for chunk in self.body])

    async def aclose(self) -> None:
        """Release the body and the underlying connection. Idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            if self._tee is not None:
                await self._tee.aclose()
        finally:
            if self._on_close is not None:
                await self._on_close()
