"""Default documentation lookup: Mermaid syntax pages by diagram kind."""

from __future__ import annotations

import logging
import time

import httpx

from diagrammer.models import DocReference

logger = logging.getLogger(__name__)

PRIMARY_HOST = "https://mermaid.js.org"
MIRROR_HOST = "https://docs.mermaidchart.com/mermaid-oss"
SYNTAX_REFERENCE = "/intro/syntax-reference.html"

# Lower-cased diagram kind -> syntax page path
_DOC_PATHS: dict[str, str] = {
    "flowchart": "/syntax/flowchart.html",
    "graph": "/syntax/flowchart.html",
    "sequencediagram": "/syntax/sequenceDiagram.html",
    "classdiagram": "/syntax/classDiagram.html",
    "statediagram": "/syntax/stateDiagram.html",
    "statediagram-v2": "/syntax/stateDiagram.html",
    "erdiagram": "/syntax/entityRelationshipDiagram.html",
    "gantt": "/syntax/gantt.html",
    "journey": "/syntax/userJourney.html",
    "gitgraph": "/syntax/gitgraph.html",
    "pie": "/syntax/pie.html",
    "mindmap": "/syntax/mindmap.html",
}

MAX_DOC_CHARS = 20000


def doc_url_for(kind: str) -> str:
    """Canonical syntax page for a diagram kind; unknown kinds get the reference index."""
    path = _DOC_PATHS.get(kind.strip().lower(), SYNTAX_REFERENCE)
    return PRIMARY_HOST + path


class DocsFetcher:
    """Async documentation provider for ``ResponsesClient.chat(docs=...)``.

    Fetches the syntax page for the requested kind, trying a mirror host
    when the primary cannot be reached. The page body is passed through
    unmodified apart from truncation.
    """

    def __init__(self, client: httpx.AsyncClient, max_chars: int = MAX_DOC_CHARS) -> None:
        self._client = client
        self._max_chars = max_chars

    async def _get(self, url: str) -> str:
        response = await self._client.get(url, follow_redirects=True)
        response.raise_for_status()
        return response.text

    async def __call__(self, kind: str) -> DocReference:
        url = doc_url_for(kind)
        t0 = time.perf_counter()
        try:
            body = await self._get(url)
        except httpx.HTTPError as e:
            mirror = url.replace(PRIMARY_HOST, MIRROR_HOST, 1)
            logger.debug("Docs fetch failed for %s (%s), trying mirror %s", url, e, mirror)
            body = await self._get(mirror)
            url = mirror

        if len(body) > self._max_chars:
            logger.debug("  truncating docs from %d to %d chars", len(body), self._max_chars)
            body = body[: self._max_chars] + "\n... (truncated)"
        logger.debug("Docs for %r: %d chars from %s (%.3fs)",
                     kind, len(body), url, time.perf_counter() - t0)
        return DocReference(document=body, source_locator=url)
