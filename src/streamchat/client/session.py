"""Chat session orchestration.

Wires the request lifecycle, the transport, the raw tap and the message
assembler together. This is what the UI talks to: it submits text, stops
requests, and reads ``messages``/``status``/``error``/``raw_buffer``.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable

from ..errors import ChatTimeoutError, StreamChatError, TransportError
from ..messages.assembler import MessagePartAssembler, PartEvent
from ..messages.models import Message, new_message_id
from ..stream.buffer import DebugBufferSink
from ..stream.decoder import ChunkDecoder
from ..stream.protocol import UIMessageStreamReader
from ..stream.response import ChatResponse
from ..stream.tap import StreamTap
from .base import ChatTransport
from .lifecycle import RequestLifecycle, StreamState
from .models import DEFAULT_MODEL, ChatRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0

UpdateListener = Callable[[], None]


class ChatSession:
    """One conversation against a chat transport.

    Only one request is in flight at a time. While it streams, ``messages``
    includes the partially assembled assistant message.

    Usage:
        session = ChatSession(HttpChatTransport("http://127.0.0.1:8000"))
        await session.submit("Hi", model="gemini-2.5-pro")
        await session.wait()
        print(session.messages[-1].text)
    """

    def __init__(
        self,
        transport: ChatTransport,
        model: str = DEFAULT_MODEL,
        system: str | None = None,
        endpoint_url: str | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
        raw_buffer: DebugBufferSink | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            transport: Transport used for every request
            model: Default model, overridable per submit
            system: Optional system prompt sent with each request
            endpoint_url: Default provider endpoint override
            timeout: Max seconds for a whole request (None disables)
            raw_buffer: Sink for the raw stream view (created if omitted)
        """
        self._transport = transport
        self.model = model
        self.system = system
        self.endpoint_url = endpoint_url
        self._timeout = timeout

        self.lifecycle = RequestLifecycle()
        self.assembler = MessagePartAssembler()
        self.raw_buffer = raw_buffer or DebugBufferSink()
        self.tap = StreamTap(self.raw_buffer)

        self._task: asyncio.Task | None = None
        self._current_message_id: str | None = None
        self._update_listeners: list[UpdateListener] = []
        self.last_metadata: dict = {}

    @property
    def messages(self) -> list[Message]:
        """Transcript plus the in-progress assistant message, if any."""
        return self.assembler.render()

    @property
    def status(self) -> StreamState:
        return self.lifecycle.state

    @property
    def busy(self) -> bool:
        return self.lifecycle.busy

    @property
    def error(self) -> StreamChatError | None:
        return self.lifecycle.error

    def add_update_listener(self, listener: UpdateListener) -> None:
        """Register a callback fired whenever ``messages`` may have changed."""
        self._update_listeners.append(listener)

    def remove_update_listener(self, listener: UpdateListener) -> None:
        if listener in self._update_listeners:
            self._update_listeners.remove(listener)

    async def submit(
        self,
        text: str,
        model: str | None = None,
        endpoint_url: str | None = None,
    ) -> bool:
        """Send a user message and start streaming the reply in the background.

        Returns:
            False when rejected: blank input or a request already in flight.
            Nothing is sent and the transcript is unchanged in that case.
        """
        trimmed = text.strip() if text else ""
        if not self.lifecycle.submit(trimmed):
            return False

        self.raw_buffer.clear()
        self.assembler.add_message(Message.user(trimmed))
        request = ChatRequest(
            messages=self.assembler.transcript,
            model=model or self.model,
            system=self.system,
            endpoint_url=endpoint_url or self.endpoint_url,
        )
        self._notify()
        self._task = asyncio.create_task(self._run(request))
        return True

    async def wait(self) -> None:
        """Wait for the in-flight request, if any, to settle."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def stop(self) -> None:
        """Abort the in-flight request, keeping whatever content arrived.

        No chunk is applied to the transcript or raw buffer after this
        returns. Stopping an idle session is a no-op.
        """
        if not self.lifecycle.stop():
            return
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.tap.detach()
        self.lifecycle.reset()
        self._notify()

    def clear(self) -> None:
        """Forget the conversation. Only allowed while idle."""
        if self.lifecycle.busy:
            raise RuntimeError("Cannot clear while a request is in flight")
        self.assembler.clear()
        self.raw_buffer.clear()
        self._notify()

    async def close(self) -> None:
        await self.stop()
        await self._transport.close()

    async def _run(self, request: ChatRequest) -> None:
        message_id = new_message_id()
        self._current_message_id = message_id
        reader = UIMessageStreamReader(message_id=message_id)
        response: ChatResponse | None = None

        try:
            async with asyncio.timeout(self._timeout):
                response = await self._transport.send(request)
                await self.tap.attach(response)

                if not response.ok:
                    detail = (await response.aread()).decode("utf-8", errors="replace")
                    await self.tap.wait()
                    raise TransportError(detail.strip() or "Request failed", response.status_code)

                await self._consume(response, reader)

            await self.tap.wait()
            self._finalize(reader)
            self.lifecycle.finish()

        except asyncio.CancelledError:
            # User stop: keep the partial message exactly as received
            self._finalize(reader)
            raise
        except TimeoutError:
            self._fail(reader, ChatTimeoutError(f"Request exceeded {self._timeout}s"))
        except TransportError as e:
            self._fail(reader, e)
        except Exception as e:
            logger.exception("Unexpected failure while streaming")
            self._fail(reader, TransportError(f"Unexpected error: {e}"))
        finally:
            if response is not None:
                await self.tap.detach()
                await response.aclose()
            self._current_message_id = None
            self._notify()

    async def _consume(self, response: ChatResponse, reader: UIMessageStreamReader) -> None:
        decoder = ChunkDecoder()
        if response.body is not None:
            async for chunk in response.body:
                if self.lifecycle.state is StreamState.SUBMITTED:
                    self.lifecycle.mark_streaming()
                self._apply(reader.feed(decoder.feed(chunk)))
                if reader.error_text is not None:
                    raise TransportError(reader.error_text)
        self._apply(reader.feed(decoder.flush()))
        self._apply(reader.flush())
        if reader.error_text is not None:
            raise TransportError(reader.error_text)

    def _apply(self, events: list[PartEvent]) -> None:
        if not events:
            return
        for event in events:
            try:
                self.assembler.apply_event(event)
            except Exception:
                logger.exception("Failed to apply %s event", event.part_type)
        self._notify()

    def _finalize(self, reader: UIMessageStreamReader) -> None:
        self.assembler.finalize(reader.message_id)
        self.last_metadata = dict(reader.metadata)

    def _fail(self, reader: UIMessageStreamReader, error: TransportError) -> None:
        logger.error("Chat request failed: %s", error)
        self.assembler.discard(reader.message_id)
        if self.lifecycle.busy:
            self.lifecycle.fail(error)

    def _notify(self) -> None:
        for listener in list(self._update_listeners):
            try:
                listener()
            except Exception:
                logger.exception("Update listener failed")
