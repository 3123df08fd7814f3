"""Text formatting utilities for the TUI.

Hides how messages, states and errors are turned into display strings.
"""

import json

from rich.text import Text

from ..client.lifecycle import StreamState
from ..errors import StreamChatError
from ..messages.models import GenericPart, Message, Role, ToolCallPart, ToolResultPart

_ROLE_LABELS = {
    Role.USER: ("You", ">"),
    Role.ASSISTANT: ("Assistant", "<"),
    Role.SYSTEM: ("System", "#"),
}

_STATE_LABELS = {
    StreamState.IDLE: "[green]ready[/]",
    StreamState.SUBMITTED: "[yellow]submitted[/]",
    StreamState.STREAMING: "[bold yellow]streaming[/]",
    StreamState.STOPPED: "[red]stopped[/]",
}


def message_header(message: Message) -> str:
    label, icon = _ROLE_LABELS.get(message.role, (message.role.value, "*"))
    return f"{icon} {label}"


def message_body(message: Message) -> Text:
    """Visible body of a message: its text parts plus a line per tool part."""
    body = Text(message.text)
    for part in message.parts:
        if isinstance(part, ToolCallPart):
            body.append(f"\n[tool call] {part.tool_name}({_compact(part.input)})", style="dim")
        elif isinstance(part, ToolResultPart):
            body.append(f"\n[tool result] {_compact(part.output)}", style="dim")
        elif isinstance(part, GenericPart):
            body.append(f"\n[{part.type}]", style="dim")
    return body


def reasoning_body(message: Message) -> str:
    return "\n\n".join(text for text in message.reasoning if text)


def state_label(state: StreamState) -> str:
    return _STATE_LABELS.get(state, state.value)


def format_error(error: StreamChatError) -> Text:
    text = Text("error: ", style="bold red")
    text.append(str(error), style="red")
    return text


def _compact(value: object, limit: int = 200) -> str:
    try:
        rendered = json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        rendered = repr(value)
    return rendered if len(rendered) <= limit else rendered[:limit] + "..."
