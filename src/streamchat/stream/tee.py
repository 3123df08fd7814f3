"""Non-destructive fan-out of a response body.

Hides the design decision of how one byte stream is read by several
independent consumers (the primary message reader and the raw tap).
"""

import asyncio
from collections import deque
from collections.abc import AsyncIterator


class BodyTee:
    """Split one async byte stream into independently readable branches.

    Each branch owns a queue. Whichever branch runs out of buffered data
    pulls the next chunk from the source (under a lock) and hands a copy to
    every other live branch, so a slow or stalled branch never starves a
    fast one. Branches must be created before the first read, the same
    clone-before-read rule HTTP response bodies follow.
    """

    def __init__(self, source: AsyncIterator[bytes]) -> None:
        self._source = source
        self._branches: list["BodyBranch"] = []
        self._lock = asyncio.Lock()
        self._started = False
        self._exhausted = False
        self._error: BaseException | None = None

    @property
    def started(self) -> bool:
        """Whether any branch has pulled from the source yet."""
        return self._started

    def branch(self) -> "BodyBranch":
        """Create a new branch.

        Raises:
            RuntimeError: If the body has already been read from
        """
        if self._started:
            raise RuntimeError("Cannot branch a body that has already been read")
        branch = BodyBranch(self)
        self._branches.append(branch)
        return branch

    async def _pull(self, branch: "BodyBranch") -> bytes | None:
        async with self._lock:
            if branch._queue:
                return branch._queue.popleft()
            if self._error is not None:
                raise self._error
            if self._exhausted:
                return None

            self._started = True
            try:
                chunk = await self._source.__anext__()
            except StopAsyncIteration:
                self._exhausted = True
                return None
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._exhausted = True
                self._error = e
                raise

            for other in self._branches:
                if other is not branch and not other._closed:
                    other._queue.append(chunk)
            return chunk

    def _release(self, branch: "BodyBranch") -> None:
        if branch in self._branches:
            self._branches.remove(branch)

    async def aclose(self) -> None:
        """Close the underlying source if it supports it."""
        self._exhausted = True
        for branch in self._branches:
            branch._closed = True
            branch._queue.clear()
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()


class BodyBranch:
    """One readable view of a BodyTee. Iterate it with ``async for``."""

    def __init__(self, tee: BodyTee) -> None:
        self._tee = tee
        self._queue: deque[bytes] = deque()
        self._closed = False

    def __aiter__(self) -> "BodyBranch":
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        chunk = await self._tee._pull(self)
        if chunk is None:
            raise StopAsyncIteration
        return chunk

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Stop receiving chunks. Other branches are unaffected."""
        self._closed = True
        self._queue.clear()
        self._tee._release(self)
