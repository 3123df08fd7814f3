"""Inbound message filtering and conversion to provider messages."""

import logging
from typing import Any

from ..llm.models import ChatMessage
from ..messages.models import Role, parse_wire_message

logger = logging.getLogger(__name__)

VALID_ROLES = {role.value for role in Role}


def is_valid_message(message: Any) -> bool:
    """A message needs a known role and either string/list content or a parts list."""
    return (
        isinstance(message, dict)
        and message.get("role") in VALID_ROLES
        and (
            isinstance(message.get("content"), (str, list))
            or isinstance(message.get("parts"), list)
        )
    )


def filter_messages(messages: Any) -> list[dict[str, Any]]:
    """Drop anything that is not a valid message. Non-lists yield []."""
    if not isinstance(messages, list):
        return []
    valid = [m for m in messages if is_valid_message(m)]
    dropped = len(messages) - len(valid)
    if dropped:
        logger.warning("Dropped %d malformed message(s)", dropped)
    return valid


def to_provider_messages(messages: list[dict[str, Any]]) -> list[ChatMessage]:
    """Convert wire messages to provider chat messages.

    Only text parts are forwarded; reasoning and tool parts stay client-side.
    Messages left with no text are skipped.
    """
    converted: list[ChatMessage] = []
    for data in messages:
        message = parse_wire_message(data).to_message()
        text = message.text
        if not text:
            continue
        converted.append(ChatMessage(role=message.role.value, content=text))
    return converted
