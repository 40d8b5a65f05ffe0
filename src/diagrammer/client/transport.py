"""Single-shot JSON POST to the Responses API."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from diagrammer import config
from diagrammer.client.provider import ProviderConfig
from diagrammer.errors import TransportError

logger = logging.getLogger(__name__)


class HttpTransport:
    """POSTs request bodies and returns the decoded JSON reply.

    No retries: a non-2xx status or a network failure surfaces as
    ``TransportError`` and the caller decides what to do.
    """

    def __init__(
        self,
        provider: ProviderConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._provider = provider
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_S)

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", **self._provider.auth_headers()}

    async def post(self, body: dict[str, Any]) -> Any:
        logger.debug("POST %s (model=%s, %d input item(s))",
                     self._provider.url, body.get("model"), len(body.get("input", [])))
        t0 = time.perf_counter()
        try:
            response = await self._client.post(
                self._provider.url,
                json=body,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.debug("POST failed after %.0fms: %s", (time.perf_counter() - t0) * 1000, e)
            raise TransportError(None, str(e)) from e

        elapsed_ms = (time.perf_counter() - t0) * 1000
        if not response.is_success:
            logger.debug("POST -> %d (%.0fms)", response.status_code, elapsed_ms)
            raise TransportError(response.status_code, response.text)

        logger.debug("POST -> %d, %d bytes (%.0fms)",
                     response.status_code, len(response.content), elapsed_ms)
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(response.status_code, response.text) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
