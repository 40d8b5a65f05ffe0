"""Turn a Responses API reply into an ``AssistantResult``.

The reply shape is not fixed, so parsing is an ordered list of strategies.
Each strategy returns a result or None; the first result wins. New shapes
are supported by appending a strategy to ``PARSE_STRATEGIES``.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from diagrammer.client.tool_calls import output_items
from diagrammer.extract import extract_diagram
from diagrammer.models import AssistantResult

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)

# Synonyms accepted besides the configured field names
_TEXT_SYNONYMS = ("text",)
_DIAGRAM_SYNONYMS = ("diagramDefinition", "diagram_definition", "mermaid", "diagram", "code")
# Keys holding the diagram source when the diagram is itself an object
_NESTED_DIAGRAM_KEYS = ("code", "definition", "source", "mermaid", "text")


@dataclass(frozen=True)
class FieldNames:
    """Schema field names expected in structured replies."""

    text: str = "text"
    diagram: str = "diagramDefinition"


def _candidates(primary: str, synonyms: tuple[str, ...]) -> tuple[str, ...]:
    return (primary,) + tuple(s for s in synonyms if s != primary)


def _diagram_value(value: Any) -> str | None:
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, dict):
        for key in _NESTED_DIAGRAM_KEYS:
            inner = value.get(key)
            if isinstance(inner, str) and inner.strip():
                return inner
    return None


def coerce_structured(obj: Any, fields: FieldNames = FieldNames()) -> AssistantResult | None:
    """Map a decoded JSON object onto ``text`` / ``diagram_definition``.

    Returns None when the object has none of the recognized keys.
    """
    if not isinstance(obj, dict):
        return None
    text_keys = _candidates(fields.text, _TEXT_SYNONYMS)
    diagram_keys = _candidates(fields.diagram, _DIAGRAM_SYNONYMS)
    if not any(k in obj for k in text_keys + diagram_keys):
        return None

    text = next((obj[k] for k in text_keys if isinstance(obj.get(k), str)), "")
    diagram = None
    for key in diagram_keys:
        diagram = _diagram_value(obj.get(key))
        if diagram is not None:
            break
    return AssistantResult(text=text, diagram_definition=diagram)


def parse_structured_text(s: str, fields: FieldNames = FieldNames()) -> AssistantResult | None:
    """Decode text that is a JSON object, optionally inside a ``` fence."""
    if not s:
        return None
    candidate = s.strip()
    m = _JSON_FENCE.match(candidate)
    if m:
        candidate = m.group(1).strip()
    if not candidate.startswith("{"):
        return None
    try:
        obj = json.loads(candidate)
    except ValueError:
        return None
    return coerce_structured(obj, fields)


def _plain_or_structured(text: str, fields: FieldNames) -> AssistantResult:
    parsed = parse_structured_text(text, fields)
    if parsed is not None:
        return parsed
    return AssistantResult(text=text, diagram_definition=extract_diagram(text))


def _message_entries(response: Any):
    for item in output_items(response):
        if item.get("type") == "message" and isinstance(item.get("content"), list):
            for entry in item["content"]:
                if isinstance(entry, dict):
                    yield entry


# ── Strategies ──


def from_structured_items(response: Any, fields: FieldNames) -> AssistantResult | None:
    """Native ``output_json`` entries, or ``output_text`` entries holding JSON."""
    for entry in _message_entries(response):
        kind = entry.get("type")
        if kind == "output_json" and isinstance(entry.get("json"), dict):
            result = coerce_structured(entry["json"], fields)
            if result is not None and (result.text or result.diagram_definition):
                return result
        elif kind == "output_text" and isinstance(entry.get("text"), str):
            result = parse_structured_text(entry["text"], fields)
            if result is not None and (result.text or result.diagram_definition):
                return result
    return None


def from_output_text(response: Any, fields: FieldNames) -> AssistantResult | None:
    """The aggregated ``output_text`` convenience field."""
    if not isinstance(response, dict):
        return None
    text = response.get("output_text")
    if not isinstance(text, str) or not text:
        return None
    return _plain_or_structured(text, fields)


def from_stitched_chunks(response: Any, fields: FieldNames) -> AssistantResult | None:
    """All ``output_text`` chunks joined in encounter order."""
    combined = "".join(
        entry["text"]
        for entry in _message_entries(response)
        if entry.get("type") == "output_text" and isinstance(entry.get("text"), str)
    )
    if not combined:
        return None
    return _plain_or_structured(combined, fields)


ParseStrategy = Callable[[Any, FieldNames], "AssistantResult | None"]

PARSE_STRATEGIES: list[ParseStrategy] = [
    from_structured_items,
    from_output_text,
    from_stitched_chunks,
]


def parse_response(
    response: Any,
    fields: FieldNames = FieldNames(),
    strategies: list[ParseStrategy] | None = None,
) -> AssistantResult:
    """Run the strategies in order. Never raises; falls back to empty text."""
    for strategy in strategies or PARSE_STRATEGIES:
        result = strategy(response, fields)
        if result is not None:
            logger.debug("Parsed response via %s (text=%d chars, diagram=%s)",
                         strategy.__name__, len(result.text),
                         result.diagram_definition is not None)
            result.raw = response
            return result

    logger.warning("Unrecognized response shape; returning empty result")
    return AssistantResult(text="", diagram_definition=None, raw=response)
