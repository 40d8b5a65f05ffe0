"""Chat engine: initial request, bounded tool-call rounds, final parse."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Union

import httpx

from diagrammer.client.parser import FieldNames, parse_response
from diagrammer.client.provider import ProviderConfig, provider_from_env
from diagrammer.client.request import DOCS_TOOL_ARGUMENT, build_continuation, build_request
from diagrammer.client.tool_calls import detect_tool_calls, find_session_anchor, parse_arguments
from diagrammer.client.transport import HttpTransport
from diagrammer.errors import ContinuationAnchorMissing
from diagrammer.models import AssistantResult, ChatMessage, DocReference, ToolCallRecord, ToolOutputItem

logger = logging.getLogger(__name__)

DocsProvider = Callable[[str], Union[DocReference, Awaitable[DocReference]]]


def _is_async(fn: Callable) -> bool:
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )


def encode_doc(doc: DocReference) -> str:
    """JSON payload returned to the service for one documentation lookup."""
    return json.dumps(
        {"document": doc.document, "sourceLocator": doc.source_locator},
        separators=(",", ":"),
    )


class ResponsesClient:
    """Conversational client for the Responses API with documentation lookups.

    One ``chat`` call yields exactly one ``AssistantResult``. When a
    ``docs`` provider is given, the service may request documentation via
    function calls; up to ``provider.max_tool_rounds`` continuation requests
    are made before the latest reply is taken as final.
    """

    def __init__(
        self,
        provider: ProviderConfig,
        http_client: httpx.AsyncClient | None = None,
        transport: HttpTransport | None = None,
    ) -> None:
        self._provider = provider
        self._transport = transport or HttpTransport(provider, client=http_client)
        self._fields = FieldNames(text=provider.text_field, diagram=provider.diagram_field)

    @property
    def provider(self) -> ProviderConfig:
        return self._provider

    async def __aenter__(self) -> ResponsesClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _run_lookup(self, docs: DocsProvider, call: ToolCallRecord) -> ToolOutputItem:
        args = parse_arguments(call.arguments_json)
        topic = args.get(DOCS_TOOL_ARGUMENT)
        if not isinstance(topic, str):
            topic = ""
        logger.debug("  tool exec: %s(%s=%r) [%s]", call.name, DOCS_TOOL_ARGUMENT, topic, call.id)
        t0 = time.perf_counter()
        try:
            if _is_async(docs):
                doc = await docs(topic)
            else:
                # Blocking lookups run in a worker thread so siblings overlap
                doc = await asyncio.to_thread(docs, topic)
                if inspect.isawaitable(doc):
                    doc = await doc
            output = encode_doc(doc)
        except Exception as e:
            logger.error("  tool error: %s(%r): %s", call.name, topic, e)
            output = json.dumps({"error": str(e)}, separators=(",", ":"))
        logger.debug("  tool done: %s -> %d chars (%.3fs)",
                     call.name, len(output), time.perf_counter() - t0)
        return ToolOutputItem(call_id=call.id, output=output)

    async def _dispatch(self, docs: DocsProvider, calls: list[ToolCallRecord]) -> list[ToolOutputItem]:
        """Run all lookups of one round concurrently; output order follows call order."""
        return list(await asyncio.gather(*(self._run_lookup(docs, c) for c in calls)))

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        docs: DocsProvider | None = None,
        on_progress: Callable[[dict], None] | None = None,
    ) -> AssistantResult:
        """Send the conversation and return the parsed assistant reply.

        Raises:
            TransportError: the service was unreachable or rejected a request.
            ContinuationAnchorMissing: tool calls were pending but the reply
                had no id to continue from.
        """
        def _emit(event: dict) -> None:
            if on_progress:
                on_progress(event)

        with_tools = docs is not None and self._provider.attach_tools
        logger.info("Chat started: %d message(s), tools=%s", len(messages), with_tools)
        run_t0 = time.perf_counter()

        _emit({"type": "request", "round": 0})
        response: Any = await self._transport.post(
            build_request(self._provider, messages, with_tools=with_tools)
        )

        rounds = 0
        while True:
            calls = detect_tool_calls(response)
            if not calls or not with_tools:
                break
            if rounds >= self._provider.max_tool_rounds:
                logger.warning(
                    "Tool round limit (%d) reached with %d call(s) pending; using last reply",
                    self._provider.max_tool_rounds, len(calls),
                )
                _emit({"type": "round_limit", "round": rounds})
                break

            anchor = find_session_anchor(response)
            if not anchor:
                raise ContinuationAnchorMissing([c.name for c in calls])

            rounds += 1
            logger.debug("Round %d: %d tool call(s): %s",
                         rounds, len(calls), ", ".join(c.name for c in calls))
            _emit({"type": "tool_calls", "round": rounds, "calls": [c.name for c in calls]})

            t0 = time.perf_counter()
            outputs = await self._dispatch(docs, calls)
            logger.debug("Round %d tools complete (%.2fs)", rounds, time.perf_counter() - t0)

            _emit({"type": "request", "round": rounds})
            response = await self._transport.post(
                build_continuation(self._provider, anchor, outputs, with_tools=True)
            )

        result = parse_response(response, self._fields)
        logger.info(
            "Chat complete: %d tool round(s), %d char text, diagram=%s, %.2fs",
            rounds, len(result.text), result.diagram_definition is not None,
            time.perf_counter() - run_t0,
        )
        _emit({"type": "done", "rounds": rounds})
        return result


def create_client(http_client: httpx.AsyncClient | None = None) -> ResponsesClient:
    """Build a ResponsesClient from environment configuration."""
    return ResponsesClient(provider_from_env(), http_client=http_client)
