"""Errors that escape the chat engine."""

from __future__ import annotations


class DiagrammerError(Exception):
    """Base class for errors raised by diagrammer."""


class TransportError(DiagrammerError):
    """The service rejected the request or could not be reached.

    ``status`` is the HTTP status code, or ``None`` when no response was
    received at all (connection failure, timeout).
    """

    def __init__(self, status: int | None, body: str) -> None:
        self.status = status
        self.body = body
        label = status if status is not None else "unreachable"
        super().__init__(f"Responses API {label}: {body}")


class ContinuationAnchorMissing(DiagrammerError):
    """Tool calls are pending but the response carries no id to continue from."""

    def __init__(self, pending: list[str] | None = None) -> None:
        self.pending = pending or []
        names = ", ".join(self.pending) or "unknown"
        super().__init__(
            f"Cannot continue tool-call round: response has no id (pending calls: {names})"
        )
