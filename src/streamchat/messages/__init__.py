"""Chat message models and incremental assembly."""

from .assembler import MessagePartAssembler, PartEvent
from .models import (
    FlatMessage,
    GenericPart,
    Message,
    Part,
    ReasoningPart,
    Role,
    StructuredMessage,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    parse_part,
    parse_wire_message,
)

__all__ = [
    "FlatMessage",
    "GenericPart",
    "Message",
    "MessagePartAssembler",
    "Part",
    "PartEvent",
    "ReasoningPart",
    "Role",
    "StructuredMessage",
    "TextPart",
    "ToolCallPart",
    "ToolResultPart",
    "parse_part",
    "parse_wire_message",
]
