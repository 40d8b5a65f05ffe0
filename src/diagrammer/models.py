"""Data types shared across the request/response pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

ChatRole = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """One turn of conversation history, sent in order."""

    role: ChatRole
    content: str

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class AssistantResult:
    """Final outcome of one chat call.

    ``text`` is always a string (possibly empty). ``diagram_definition`` is
    only set when some parsing stage found a diagram. ``raw`` keeps the last
    unparsed response for diagnostics.
    """

    text: str = ""
    diagram_definition: str | None = None
    raw: Any = None


@dataclass(frozen=True)
class ToolCallRecord:
    """A pending function call requested by the service."""

    id: str
    name: str
    arguments_json: str = ""


@dataclass(frozen=True)
class ToolOutputItem:
    """Result of a local tool run, returned to the service by call id."""

    call_id: str
    output: str

    def to_wire(self) -> dict[str, str]:
        return {
            "type": "function_call_output",
            "call_id": self.call_id,
            "output": self.output,
        }


@dataclass(frozen=True)
class DocReference:
    """A documentation page handed back to the service as tool output."""

    document: str
    source_locator: str
