"""Data models for chat messages.

Hides the representation of messages and their typed parts, and the
resolution of the two wire shapes (structured parts vs flat content).
"""

import logging
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class TextPart(BaseModel):
    """Visible answer text."""

    type: Literal["text"] = "text"
    text: str = ""


class ReasoningPart(BaseModel):
    """Model "thinking" text, shown separately from the answer."""

    type: Literal["reasoning"] = "reasoning"
    text: str = ""


class ToolCallPart(BaseModel):
    """A tool invocation requested by the model."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["tool-call"] = "tool-call"
    tool_call_id: str = Field(alias="toolCallId")
    tool_name: str = Field(alias="toolName")
    input: Any = None


class ToolResultPart(BaseModel):
    """The output of a tool invocation."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["tool-result"] = "tool-result"
    tool_call_id: str = Field(alias="toolCallId")
    output: Any = None


class GenericPart(BaseModel):
    """Any part type this client does not model explicitly."""

    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


Part = TextPart | ReasoningPart | ToolCallPart | ToolResultPart | GenericPart

# Part types whose payload is text that streams in as deltas
TEXT_PART_TYPES = {"text", "reasoning"}

_PART_MODELS: dict[str, type[BaseModel]] = {
    "text": TextPart,
    "reasoning": ReasoningPart,
    "tool-call": ToolCallPart,
    "tool-result": ToolResultPart,
}


def new_message_id() -> str:
    """Generate a client-side message id."""
    return uuid4().hex


def make_part(part_type: str, text: str = "") -> Part:
    """Create an empty streaming part of the given type."""
    if part_type == "text":
        return TextPart(text=text)
    if part_type == "reasoning":
        return ReasoningPart(text=text)
    return GenericPart(type=part_type, payload={"text": text} if text else {})


def parse_part(data: dict[str, Any]) -> Part:
    """Build a Part from its wire dict. Unknown or invalid parts become GenericPart."""
    part_type = str(data.get("type", ""))
    model = _PART_MODELS.get(part_type)
    if model is not None:
        try:
            return model.model_validate(data)
        except ValueError as e:
            logger.debug("Keeping malformed %s part as generic: %s", part_type, e)
    payload = {k: v for k, v in data.items() if k != "type"}
    return GenericPart(type=part_type or "unknown", payload=payload)


class Message(BaseModel):
    """A chat message made of ordered typed parts."""

    id: str = Field(default_factory=new_message_id)
    role: Role
    parts: list[Part] = Field(default_factory=list)

    @classmethod
    def user(cls, text: str, message_id: str | None = None) -> "Message":
        """Create a user message with a single text part."""
        return cls(id=message_id or new_message_id(), role=Role.USER, parts=[TextPart(text=text)])

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))

    @property
    def reasoning(self) -> list[str]:
        """Text of each reasoning part, in order."""
        return [p.text for p in self.parts if isinstance(p, ReasoningPart)]

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the structured wire shape sent to the relay."""
        return {
            "id": self.id,
            "role": self.role.value,
            "parts": [self._part_to_wire(p) for p in self.parts],
        }

    @staticmethod
    def _part_to_wire(part: Part) -> dict[str, Any]:
        if isinstance(part, GenericPart):
            return {"type": part.type, **part.payload}
        return part.model_dump(by_alias=True)


class StructuredMessage(BaseModel):
    """Wire shape carrying an ordered ``parts`` list."""

    kind: Literal["structured"] = "structured"
    id: str | None = None
    role: Role
    parts: list[dict[str, Any]]

    def to_message(self) -> Message:
        return Message(
            id=self.id or new_message_id(),
            role=self.role,
            parts=[parse_part(p) for p in self.parts if isinstance(p, dict)],
        )


class FlatMessage(BaseModel):
    """Older wire shape with a single ``content`` string."""

    kind: Literal["flat"] = "flat"
    id: str | None = None
    role: Role
    content: str = ""

    def to_message(self) -> Message:
        parts: list[Part] = [TextPart(text=self.content)] if self.content else []
        return Message(id=self.id or new_message_id(), role=self.role, parts=parts)


WireMessage = StructuredMessage | FlatMessage


def parse_wire_message(data: dict[str, Any]) -> WireMessage:
    """Resolve a wire dict into one of the two shapes, once, at ingestion.

    A dict with a ``parts`` list is structured. Anything else is flat: its
    ``content`` is used when it is a string, joined when it is a list of
    text items, and empty otherwise. Unknown roles default to assistant.
    """
    role_value = data.get("role", Role.ASSISTANT.value)
    try:
        role = Role(role_value)
    except ValueError:
        logger.debug("Unknown role %r, treating as assistant", role_value)
        role = Role.ASSISTANT

    message_id = data.get("id")
    if message_id is not None:
        message_id = str(message_id)

    parts = data.get("parts")
    if isinstance(parts, list):
        return StructuredMessage(id=message_id, role=role, parts=parts)

    content = data.get("content")
    if isinstance(content, list):
        content = "".join(
            item if isinstance(item, str) else str(item.get("text", ""))
            for item in content
            if isinstance(item, str) or (isinstance(item, dict) and item.get("type", "text") == "text")
        )
    elif not isinstance(content, str):
        content = "" if content is None else str(content)
    return FlatMessage(id=message_id, role=role, content=content)
