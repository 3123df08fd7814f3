"""Raw stream tap.

Attaches to an in-flight response through a cloned body branch and forwards
decoded text to listeners. The tap is a debugging aid: nothing that goes
wrong here is allowed to reach the primary message flow.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable

from ..errors import TapError
from .buffer import DebugBufferSink
from .decoder import ChunkDecoder
from .response import ChatResponse
from .tee import BodyBranch

logger = logging.getLogger(__name__)

TapListener = Callable[[str], None]


class StreamTap:
    """Single-consumer tap feeding decoded text to a DebugBufferSink.

    Only one tap read loop is active at a time; attaching to a new response
    tears the previous one down first.

    Usage:
        tap = StreamTap(sink)
        await tap.attach(response)
        ...
        await tap.detach()
    """

    def __init__(self, sink: DebugBufferSink, listeners: list[TapListener] | None = None) -> None:
        self._sink = sink
        self._listeners: list[TapListener] = [sink.append, *(listeners or [])]
        self._task: asyncio.Task | None = None
        self._branch: BodyBranch | None = None

    @property
    def sink(self) -> DebugBufferSink:
        return self._sink

    @property
    def active(self) -> bool:
        """Whether a read loop is currently running."""
        return self._task is not None and not self._task.done()

    def add_listener(self, listener: TapListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: TapListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def attach(self, response: ChatResponse) -> None:
        """Start tapping ``response``, replacing any previous tap."""
        await self.detach()
        self._sink.clear()

        if response.body is None:
            logger.debug("Response has no body; raw tap skipped")
            return

        try:
            branch = response.clone()
        except Exception as e:
            logger.error("%s", TapError(f"Failed to clone response body: {e}"))
            return
        if branch is None:
            return

        self._branch = branch
        self._task = asyncio.create_task(self._read(branch))

    async def detach(self) -> None:
        """Stop the active read loop, if any. Idempotent."""
        task, branch = self._task, self._branch
        self._task = None
        self._branch = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if branch is not None and not branch.closed:
            await branch.aclose()

    async def wait(self) -> None:
        """Wait for the active read loop to reach the end of the stream.

        Never raises on behalf of the read loop: its failures are logged in
        ``_read`` and a detached loop simply counts as finished. Cancelling
        the caller cancels only the wait, not the read loop.
        """
        if self._task is not None:
            await asyncio.wait({self._task})

    @contextlib.asynccontextmanager
    async def attached(self, response: ChatResponse) -> AsyncIterator["StreamTap"]:
        """Scope a tap to a block; it is detached on exit."""
        await self.attach(response)
        try:
            yield self
        finally:
            await self.detach()

    async def _read(self, branch: BodyBranch) -> None:
        decoder = ChunkDecoder()
        try:
            async for chunk in branch:
                self._emit(decoder.feed(chunk))
            self._emit(decoder.flush())
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("%s", TapError(f"Raw stream read failed: {e}"))
        finally:
            if not branch.closed:
                await branch.aclose()

    def _emit(self, text: str) -> None:
        if not text:
            return
        for listener in list(self._listeners):
            try:
                listener(text)
            except Exception:
                logger.exception("Raw stream listener failed")
