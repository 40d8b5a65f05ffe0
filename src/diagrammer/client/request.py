"""Outbound request bodies for the Responses API. Pure construction."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from diagrammer.client.provider import ProviderConfig
from diagrammer.models import ChatMessage, ToolOutputItem

SCHEMA_NAME = "DiagramAssistantOutput"

DOCS_TOOL_NAME = "get_mermaid_docs"
DOCS_TOOL_ARGUMENT = "kind"

DOCS_TOOL_DESCRIPTION = (
    "Fetch the official Mermaid syntax documentation for one diagram kind. "
    "Call this before writing a diagram whose syntax you are unsure about.\n"
    "\n"
    "Examples of kinds: flowchart, sequenceDiagram, classDiagram, stateDiagram-v2, "
    "erDiagram, gantt, journey, gitGraph, pie, mindmap."
)


def output_schema(provider: ProviderConfig) -> dict[str, Any]:
    """The ``text.format`` declaration nudging the service toward structured JSON."""
    fields = [provider.text_field, provider.diagram_field]
    schema = {
        "type": "object",
        "additionalProperties": False,
        "properties": {name: {"type": "string"} for name in fields},
        # Strict flat schemas must list every property as required
        "required": fields if provider.schema_style == "flat" else [provider.text_field],
    }
    if provider.schema_style == "nested":
        return {
            "format": {
                "type": "json_schema",
                "json_schema": {"name": SCHEMA_NAME, "schema": schema, "strict": True},
            }
        }
    return {
        "format": {
            "type": "json_schema",
            "name": SCHEMA_NAME,
            "schema": schema,
            "strict": True,
        }
    }


def docs_tool_declaration() -> dict[str, Any]:
    return {
        "type": "function",
        "name": DOCS_TOOL_NAME,
        "description": DOCS_TOOL_DESCRIPTION,
        "parameters": {
            "type": "object",
            "properties": {
                DOCS_TOOL_ARGUMENT: {
                    "type": "string",
                    "description": "Mermaid diagram kind keyword, e.g. 'flowchart'.",
                },
            },
            "required": [DOCS_TOOL_ARGUMENT],
            "additionalProperties": False,
        },
        "strict": True,
    }


def _base_body(provider: ProviderConfig, with_tools: bool) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": provider.model,
        "temperature": provider.temperature,
        "text": output_schema(provider),
    }
    if with_tools and provider.attach_tools:
        body["tools"] = [docs_tool_declaration()]
        body["tool_choice"] = "auto"
    return body


def build_request(
    provider: ProviderConfig,
    messages: Sequence[ChatMessage],
    with_tools: bool = False,
) -> dict[str, Any]:
    """Initial request: the full conversation as role-tagged input."""
    body = _base_body(provider, with_tools)
    body["input"] = [m.to_wire() for m in messages]
    return body


def build_continuation(
    provider: ProviderConfig,
    previous_response_id: str,
    outputs: Sequence[ToolOutputItem],
    with_tools: bool = True,
) -> dict[str, Any]:
    """Follow-up request carrying only tool outputs, anchored to the prior response."""
    body = _base_body(provider, with_tools)
    body["previous_response_id"] = previous_response_id
    body["input"] = [o.to_wire() for o in outputs]
    return body
