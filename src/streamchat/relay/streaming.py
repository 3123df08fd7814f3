"""Provider stream to UI message stream translation."""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from ..llm.base import LLMProvider
from ..llm.models import ChatMessage, StreamingResponse
from ..messages.models import new_message_id
from ..stream.protocol import encode_chunk, encode_done

logger = logging.getLogger(__name__)


class _Deadline:
    """Wall-clock budget shared by every await of one request."""

    def __init__(self, seconds: float) -> None:
        self._loop = asyncio.get_running_loop()
        self._expires_at = self._loop.time() + seconds

    def remaining(self) -> float:
        left = self._expires_at - self._loop.time()
        if left <= 0:
            raise TimeoutError
        return left


async def stream_ui_messages(
    provider: LLMProvider,
    messages: list[ChatMessage],
    model: str,
    system: str | None = None,
    provider_options: dict[str, Any] | None = None,
    timeout: float = 60.0,
) -> AsyncIterator[str]:
    """Yield SSE-framed chunks for one assistant reply.

    Consecutive deltas of the same kind share one part; a change of kind
    (reasoning to text, say) closes the open part and opens a new one.
    Provider failures and the wall-clock timeout are reported as an
    ``error`` chunk rather than by dropping the connection.
    """
    yield encode_chunk({"type": "start", "messageId": new_message_id()})
    yield encode_chunk({"type": "start-step"})

    stream: StreamingResponse | None = None
    open_kind: str | None = None
    part_id = ""
    part_count = 0
    kwargs: dict[str, Any] = {}
    if provider_options:
        kwargs["extra_body"] = provider_options

    try:
        try:
            # The deadline is checked per await: an asyncio.timeout() block
            # cannot span the yields of an async generator.
            deadline = _Deadline(timeout)
            stream = await asyncio.wait_for(
                provider.chat_completion_stream(messages, model=model, system=system, **kwargs),
                deadline.remaining(),
            )
            deltas = aiter(stream)
            while True:
                try:
                    delta = await asyncio.wait_for(anext(deltas), deadline.remaining())
                except StopAsyncIteration:
                    break
                if delta.kind != open_kind:
                    if open_kind is not None:
                        yield encode_chunk({"type": f"{open_kind}-end", "id": part_id})
                    open_kind = delta.kind
                    part_id = str(part_count)
                    part_count += 1
                    yield encode_chunk({"type": f"{open_kind}-start", "id": part_id})
                yield encode_chunk({"type": f"{open_kind}-delta", "id": part_id, "delta": delta.text})

            if open_kind is not None:
                yield encode_chunk({"type": f"{open_kind}-end", "id": part_id})
            yield encode_chunk({"type": "finish-step"})
            finish: dict[str, Any] = {"type": "finish", "finishReason": "stop"}
            if stream.usage:
                finish["messageMetadata"] = {"usage": stream.usage}
            yield encode_chunk(finish)

        except TimeoutError:
            logger.error("Provider stream timed out after %ss (model=%s)", timeout, model)
            yield encode_chunk({"type": "error", "errorText": f"Request timeout ({timeout:g}s)"})
        except Exception as e:
            logger.error("Provider stream failed (model=%s): %s", model, e)
            yield encode_chunk({"type": "error", "errorText": str(e) or type(e).__name__})
    finally:
        if stream is not None:
            await stream.aclose()
        await provider.close()

    yield encode_done()
