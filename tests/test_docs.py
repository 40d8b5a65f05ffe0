"""Tests for the default Mermaid documentation lookup."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from diagrammer.docs import MIRROR_HOST, PRIMARY_HOST, DocsFetcher, doc_url_for


class TestDocUrlFor:
    def test_known_kinds(self):
        assert doc_url_for("flowchart") == "https://mermaid.js.org/syntax/flowchart.html"
        assert doc_url_for("graph") == "https://mermaid.js.org/syntax/flowchart.html"
        assert doc_url_for("erDiagram") == "https://mermaid.js.org/syntax/entityRelationshipDiagram.html"
        assert doc_url_for("journey") == "https://mermaid.js.org/syntax/userJourney.html"

    def test_case_insensitive(self):
        assert doc_url_for("StateDiagram-V2") == doc_url_for("stateDiagram")
        assert doc_url_for(" SEQUENCEDIAGRAM ") == "https://mermaid.js.org/syntax/sequenceDiagram.html"

    def test_unknown_kind(self):
        assert doc_url_for("quadrantChart") == "https://mermaid.js.org/intro/syntax-reference.html"
        assert doc_url_for("") == "https://mermaid.js.org/intro/syntax-reference.html"


class TestDocsFetcher:
    def test_primary(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, text="<main>flowchart docs</main>")

        fetcher = DocsFetcher(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        doc = asyncio.run(fetcher("flowchart"))
        assert doc.document == "<main>flowchart docs</main>"
        assert doc.source_locator == "https://mermaid.js.org/syntax/flowchart.html"
        assert seen == [doc.source_locator]

    def test_mirror_fallback(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url).startswith(PRIMARY_HOST):
                raise httpx.ConnectError("blocked", request=request)
            return httpx.Response(200, text="mirror docs")

        fetcher = DocsFetcher(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        doc = asyncio.run(fetcher("pie"))
        assert doc.document == "mirror docs"
        assert doc.source_locator == MIRROR_HOST + "/syntax/pie.html"

    def test_both_hosts_fail(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="missing")

        fetcher = DocsFetcher(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(fetcher("pie"))

    def test_truncation(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="x" * 50)

        fetcher = DocsFetcher(httpx.AsyncClient(transport=httpx.MockTransport(handler)), max_chars=10)
        doc = asyncio.run(fetcher("gantt"))
        assert doc.document == "x" * 10 + "\n... (truncated)"
