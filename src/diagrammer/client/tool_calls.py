"""Detect pending function calls and the id needed to continue after them."""

from __future__ import annotations

import json
import logging
from typing import Any

from diagrammer.models import ToolCallRecord

logger = logging.getLogger(__name__)

# Content-entry types that carry a nested tool call inside a message item
_NESTED_CALL_TYPES = ("tool_call", "function_call")


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _arguments(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return json.dumps(value)
    return ""


def output_items(response: Any) -> list[dict]:
    """The ``output`` list of a response, keeping only dict entries."""
    if not isinstance(response, dict):
        return []
    output = response.get("output")
    if not isinstance(output, list):
        return []
    return [item for item in output if isinstance(item, dict)]


def _from_function_call_item(item: dict) -> ToolCallRecord:
    return ToolCallRecord(
        id=_str(item.get("call_id")) or _str(item.get("id")),
        name=_str(item.get("name")),
        arguments_json=_arguments(item.get("arguments")),
    )


def _from_content_entry(entry: dict) -> ToolCallRecord:
    fn = entry.get("function")
    if isinstance(fn, dict):
        name = _str(fn.get("name"))
        arguments = _arguments(fn.get("arguments"))
    else:
        name = _str(entry.get("name"))
        arguments = _arguments(entry.get("arguments"))
    return ToolCallRecord(
        id=_str(entry.get("call_id")) or _str(entry.get("id")),
        name=name,
        arguments_json=arguments,
    )


def detect_tool_calls(response: Any) -> list[ToolCallRecord]:
    """Return pending tool calls in discovery order. Never raises.

    Two layouts are recognized: top-level ``function_call`` output items, and
    ``tool_call`` entries nested in a message's content (with name/arguments
    either flat or under a ``function`` object). Records missing an id or a
    name are dropped.
    """
    found: list[ToolCallRecord] = []
    for item in output_items(response):
        if item.get("type") == "function_call":
            found.append(_from_function_call_item(item))
        elif item.get("type") == "message" and isinstance(item.get("content"), list):
            for entry in item["content"]:
                if isinstance(entry, dict) and entry.get("type") in _NESTED_CALL_TYPES:
                    found.append(_from_content_entry(entry))

    calls = [c for c in found if c.id and c.name]
    if len(calls) != len(found):
        logger.debug("Dropped %d incomplete tool call(s)", len(found) - len(calls))
    return calls


def find_session_anchor(response: Any) -> str | None:
    """The response id to continue from: ``id`` or ``response.id``."""
    if not isinstance(response, dict):
        return None
    anchor = _str(response.get("id"))
    if anchor:
        return anchor
    nested = response.get("response")
    if isinstance(nested, dict):
        return _str(nested.get("id")) or None
    return None


def parse_arguments(arguments_json: str) -> dict:
    """Decode a call's arguments; anything unparseable becomes ``{}``."""
    if not arguments_json:
        return {}
    try:
        args = json.loads(arguments_json)
    except ValueError:
        logger.debug("Malformed tool arguments, using {}: %r", arguments_json[:200])
        return {}
    return args if isinstance(args, dict) else {}
