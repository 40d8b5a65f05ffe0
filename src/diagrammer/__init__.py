"""Diagram assistant client for the Responses API."""

from diagrammer.client.engine import ResponsesClient
from diagrammer.errors import ContinuationAnchorMissing, DiagrammerError, TransportError
from diagrammer.extract import extract_diagram
from diagrammer.models import AssistantResult, ChatMessage, DocReference

__all__ = [
    "AssistantResult",
    "ChatMessage",
    "ContinuationAnchorMissing",
    "DiagrammerError",
    "DocReference",
    "ResponsesClient",
    "TransportError",
    "extract_diagram",
]
