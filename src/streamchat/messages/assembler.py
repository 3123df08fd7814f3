"""Incremental assembly of streamed message parts.

This module hides how partial message updates are merged into the ordered
transcript. The assembler is the only writer of the in-progress assistant
message; callers read through ``render()``.
"""

import logging
from dataclasses import dataclass
from typing import Any

from .models import (
    TEXT_PART_TYPES,
    GenericPart,
    Message,
    Part,
    Role,
    make_part,
    parse_wire_message,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartEvent:
    """One structured update to a message.

    Exactly one of ``delta`` (text appended to a streaming part) or ``part``
    (a complete part appended as-is) is expected.
    """

    message_id: str
    part_type: str
    delta: str | None = None
    part: Part | None = None
    part_index: int | None = None
    role: Role = Role.ASSISTANT


class MessagePartAssembler:
    """Maintains the ordered message list from a stream of PartEvents.

    Finalized messages live in the transcript and are not mutated again,
    except by ``regenerate``. In-progress messages are rendered after the
    transcript in the order they were opened.

    Usage:
        assembler = MessagePartAssembler()
        assembler.apply_event(PartEvent("m1", "reasoning", delta="a"))
        assembler.apply_event(PartEvent("m1", "text", delta="b"))
        assembler.finalize("m1")
        assembler.render()  # [Message(id="m1", parts=[reasoning "a", text "b"])]
    """

    def __init__(self) -> None:
        self._transcript: list[Message] = []
        self._in_progress: dict[str, Message] = {}
        self._finalized_ids: set[str] = set()

    @property
    def transcript(self) -> list[Message]:
        """Finalized messages, oldest first."""
        return list(self._transcript)

    @property
    def in_progress(self) -> list[Message]:
        """Messages still receiving events."""
        return list(self._in_progress.values())

    def render(self) -> list[Message]:
        """Current view: finalized messages followed by in-progress ones."""
        if not self._in_progress:
            return list(self._transcript)
        return [*self._transcript, *self._in_progress.values()]

    def get(self, message_id: str) -> Message | None:
        """Look up a message by id, finalized or not."""
        if message_id in self._in_progress:
            return self._in_progress[message_id]
        for message in self._transcript:
            if message.id == message_id:
                return message
        return None

    def is_finalized(self, message_id: str) -> bool:
        return message_id in self._finalized_ids

    def start_message(self, message_id: str, role: Role = Role.ASSISTANT) -> Message:
        """Open an in-progress message, or return it if already open."""
        existing = self._in_progress.get(message_id)
        if existing is not None:
            return existing
        if message_id in self._finalized_ids:
            raise ValueError(f"Message {message_id} is already finalized")
        message = Message(id=message_id, role=role)
        self._in_progress[message_id] = message
        return message

    def add_message(self, message: Message) -> None:
        """Append a complete message straight to the transcript."""
        if message.id in self._finalized_ids or message.id in self._in_progress:
            raise ValueError(f"Duplicate message id: {message.id}")
        self._transcript.append(message)
        self._finalized_ids.add(message.id)

    def ingest(self, data: dict[str, Any]) -> Message:
        """Resolve a wire-shape message dict and append it finalized."""
        message = parse_wire_message(data).to_message()
        self.add_message(message)
        return message

    def apply_event(self, event: PartEvent) -> None:
        """Merge one update into its message."""
        if event.message_id in self._finalized_ids:
            logger.warning("Ignoring %s event for finalized message %s",
                           event.part_type, event.message_id)
            return

        message = self._in_progress.get(event.message_id)
        if message is None:
            message = self.start_message(event.message_id, role=event.role)

        if event.part is not None:
            message.parts.append(event.part)
            return

        if event.delta is None:
            # Boundary markers (text-start and friends) carry no payload.
            # Opening the part happens with its first delta.
            return

        target = self._find_part(message, event.part_type, event.part_index)
        if target is None:
            message.parts.append(make_part(event.part_type, event.delta))
            return
        self._append_delta(target, event.delta)

    def finalize(self, message_id: str) -> Message | None:
        """Move an in-progress message to the transcript. Unknown ids are a no-op."""
        message = self._in_progress.pop(message_id, None)
        if message is None:
            return None
        self._transcript.append(message)
        self._finalized_ids.add(message_id)
        logger.debug("Finalized message %s with %d part(s)", message_id, len(message.parts))
        return message

    def finalize_all(self) -> None:
        for message_id in list(self._in_progress):
            self.finalize(message_id)

    def discard(self, message_id: str) -> None:
        """Drop an in-progress message without adding it to the transcript."""
        if self._in_progress.pop(message_id, None) is not None:
            logger.debug("Discarded partial message %s", message_id)

    def regenerate(self, message_id: str, message: Message) -> None:
        """Replace a finalized message wholesale, keeping its position."""
        for index, existing in enumerate(self._transcript):
            if existing.id == message_id:
                self._finalized_ids.discard(message_id)
                self._finalized_ids.add(message.id)
                self._transcript[index] = message
                return
        raise KeyError(message_id)

    def clear(self) -> None:
        self._transcript.clear()
        self._in_progress.clear()
        self._finalized_ids.clear()

    @staticmethod
    def _find_part(message: Message, part_type: str, part_index: int | None) -> Part | None:
        if part_index is not None and 0 <= part_index < len(message.parts):
            candidate = message.parts[part_index]
            if candidate.type == part_type:
                return candidate
            logger.debug("Part %d is %s, not %s; falling back to tail merge",
                         part_index, candidate.type, part_type)
        if message.parts and message.parts[-1].type == part_type:
            return message.parts[-1]
        return None

    @staticmethod
    def _append_delta(part: Part, delta: str) -> None:
        if part.type in TEXT_PART_TYPES:
            part.text += delta
        elif isinstance(part, GenericPart):
            part.payload["text"] = part.payload.get("text", "") + delta
        else:
            logger.warning("Cannot append text delta to %s part", part.type)
