"""UI message stream wire protocol.

The relay streams server-sent events, one JSON chunk per event:

    data: {"type":"start","messageId":"..."}

    data: {"type":"text-delta","id":"0","delta":"Hel"}

    data: [DONE]

This module hides the framing (SSE), the chunk vocabulary, and how chunks map
onto assembler PartEvents.
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..messages.assembler import PartEvent
from ..messages.models import ToolCallPart, ToolResultPart

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
    "X-UI-Message-Stream": "v1",
}

_DELTA_TYPES = {
    "text-delta": "text",
    "reasoning-delta": "reasoning",
}

_BOUNDARY_TYPES = {
    "text-start": "text",
    "text-end": "text",
    "reasoning-start": "reasoning",
    "reasoning-end": "reasoning",
}

_IGNORED_TYPES = {"start-step", "finish-step"}


class StreamChunk(BaseModel):
    """One decoded chunk of the UI message stream."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str
    id: str | None = None
    message_id: str | None = Field(default=None, alias="messageId")
    delta: str | None = None
    tool_call_id: str | None = Field(default=None, alias="toolCallId")
    tool_name: str | None = Field(default=None, alias="toolName")
    input: Any = None
    output: Any = None
    finish_reason: str | None = Field(default=None, alias="finishReason")
    error_text: str | None = Field(default=None, alias="errorText")
    message_metadata: dict[str, Any] | None = Field(default=None, alias="messageMetadata")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def encode_chunk(chunk: StreamChunk | dict[str, Any]) -> str:
    """Frame one chunk as an SSE event."""
    payload = chunk.to_wire() if isinstance(chunk, StreamChunk) else chunk
    return f"data: {json.dumps(payload, ensure_ascii=False, separators=(',', ':'))}\n\n"


def encode_done() -> str:
    """Frame the end-of-stream sentinel."""
    return f"data: {DONE_SENTINEL}\n\n"


class SSEDecoder:
    """Splits decoded text into SSE ``data`` payloads.

    Events may be split across chunks at any point, including inside the
    blank-line separator; incomplete events are held until completed.
    """

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, text: str) -> list[str]:
        """Add text and return the payloads of every completed event."""
        if not text:
            return []
        self._buffer = (self._buffer + text).replace("\r\n", "\n")
        # A trailing "\r" may be the first half of a CRLF split across chunks
        pending_cr = self._buffer.endswith("\r")
        if pending_cr:
            self._buffer = self._buffer[:-1]
        payloads: list[str] = []
        while "\n\n" in self._buffer:
            raw_event, self._buffer = self._buffer.split("\n\n", 1)
            payload = self._parse_event(raw_event)
            if payload is not None:
                payloads.append(payload)
        if pending_cr:
            self._buffer += "\r"
        return payloads

    def flush(self) -> list[str]:
        """Return the payload of a trailing event that never got its separator."""
        raw_event, self._buffer = self._buffer.rstrip("\r"), ""
        if not raw_event.strip():
            return []
        payload = self._parse_event(raw_event)
        return [payload] if payload is not None else []

    @staticmethod
    def _parse_event(raw_event: str) -> str | None:
        data_lines = []
        for line in raw_event.split("\n"):
            if line.startswith("data:"):
                value = line[5:]
                data_lines.append(value[1:] if value.startswith(" ") else value)
            # Comments (":") and other fields (event, id, retry) are ignored
        if not data_lines:
            return None
        return "\n".join(data_lines)


class UIMessageStreamReader:
    """Turns decoded response text into PartEvents for one assistant message.

    The message id starts as the client-generated one and is replaced by the
    server's when a ``start`` chunk announces one before any content.

    Usage:
        reader = UIMessageStreamReader(message_id="m1")
        for event in reader.feed(decoded_text):
            assembler.apply_event(event)
        if reader.error_text:
            ...
    """

    def __init__(self, message_id: str) -> None:
        self.message_id = message_id
        self.started = False
        self.finished = False
        self.done = False
        self.error_text: str | None = None
        self.finish_reason: str | None = None
        self.metadata: dict[str, Any] = {}
        self._sse = SSEDecoder()
        self._has_content = False

    def feed(self, text: str) -> list[PartEvent]:
        """Consume decoded text; return the events completed by it."""
        return self._handle_payloads(self._sse.feed(text))

    def flush(self) -> list[PartEvent]:
        """Consume any unterminated trailing event at end of stream."""
        return self._handle_payloads(self._sse.flush())

    def _handle_payloads(self, payloads: list[str]) -> list[PartEvent]:
        events: list[PartEvent] = []
        for payload in payloads:
            chunk = self._parse_payload(payload)
            if chunk is not None:
                events.extend(self._chunk_to_events(chunk))
        return events

    def _parse_payload(self, payload: str) -> StreamChunk | None:
        if payload.strip() == DONE_SENTINEL:
            self.done = True
            return None
        try:
            data = json.loads(payload)
            return StreamChunk.model_validate(data)
        except ValueError as e:
            logger.warning("Skipping malformed stream chunk: %s", e)
            return None

    def _chunk_to_events(self, chunk: StreamChunk) -> list[PartEvent]:
        if chunk.type == "start":
            self.started = True
            if chunk.message_id and not self._has_content:
                self.message_id = chunk.message_id
            if chunk.message_metadata:
                self.metadata.update(chunk.message_metadata)
            return []

        if chunk.type in _DELTA_TYPES:
            self._has_content = True
            return [PartEvent(self.message_id, _DELTA_TYPES[chunk.type], delta=chunk.delta or "")]

        if chunk.type == "tool-input-available":
            self._has_content = True
            part = ToolCallPart(
                tool_call_id=chunk.tool_call_id or "",
                tool_name=chunk.tool_name or "",
                input=chunk.input,
            )
            return [PartEvent(self.message_id, part.type, part=part)]

        if chunk.type == "tool-output-available":
            self._has_content = True
            part = ToolResultPart(tool_call_id=chunk.tool_call_id or "", output=chunk.output)
            return [PartEvent(self.message_id, part.type, part=part)]

        if chunk.type == "finish":
            self.finished = True
            self.finish_reason = chunk.finish_reason
            if chunk.message_metadata:
                self.metadata.update(chunk.message_metadata)
            return []

        if chunk.type == "error":
            self.error_text = chunk.error_text or "Unknown stream error"
            return []

        if chunk.type in _BOUNDARY_TYPES or chunk.type in _IGNORED_TYPES:
            return []

        if chunk.type == "message-metadata" and chunk.message_metadata:
            self.metadata.update(chunk.message_metadata)
            return []

        logger.debug("Ignoring unsupported chunk type %s", chunk.type)
        return []
