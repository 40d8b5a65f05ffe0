"""FastAPI server with POST /chat endpoint."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Literal

import httpx
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from diagrammer import config
from diagrammer.client.engine import ResponsesClient, create_client
from diagrammer.docs import DocsFetcher
from diagrammer.errors import ContinuationAnchorMissing, TransportError
from diagrammer.models import ChatMessage

# Configure logging on import: before anything else logs
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)

# Lazy-initialized on first request, closed on shutdown
_client: ResponsesClient | None = None
_docs: DocsFetcher | None = None
_docs_http: httpx.AsyncClient | None = None


async def _close_clients() -> None:
    global _client, _docs, _docs_http
    if _client is not None:
        await _client.aclose()
        _client = None
    if _docs_http is not None:
        await _docs_http.aclose()
        _docs_http = None
    _docs = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    logger.info("Shutting down: closing HTTP clients")
    await _close_clients()


app = FastAPI(title="Diagrammer", description="Mermaid diagram assistant", lifespan=lifespan)


def _get_client() -> ResponsesClient:
    global _client
    if _client is None:
        logger.info("Initializing responses client...")
        _client = create_client()
        logger.info("Responses client ready (%s)", _client.provider.url)
    return _client


def _get_docs() -> DocsFetcher:
    global _docs, _docs_http
    if _docs is None:
        _docs_http = httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_S)
        _docs = DocsFetcher(_docs_http)
    return _docs


class MessageModel(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: list[MessageModel]
    use_docs: bool = True


class ChatResponse(BaseModel):
    text: str
    diagram_definition: str | None = None


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest):
    if not req.messages:
        raise HTTPException(status_code=422, detail="messages must not be empty")
    logger.info("POST /chat messages=%d use_docs=%s", len(req.messages), req.use_docs)
    t0 = time.perf_counter()
    messages = [ChatMessage(role=m.role, content=m.content) for m in req.messages]
    try:
        result = await _get_client().chat(
            messages,
            docs=_get_docs() if req.use_docs else None,
        )
    except TransportError as e:
        logger.error("Transport error after %.2fs: %s", time.perf_counter() - t0, e)
        raise HTTPException(
            status_code=502,
            detail={"error": "transport", "status": e.status, "body": e.body},
        )
    except ContinuationAnchorMissing as e:
        logger.error("Continuation error after %.2fs: %s", time.perf_counter() - t0, e)
        raise HTTPException(
            status_code=502,
            detail={"error": "continuation", "message": str(e)},
        )
    logger.info("Chat complete: %d char text, diagram=%s, %.2fs",
                len(result.text), result.diagram_definition is not None,
                time.perf_counter() - t0)
    return ChatResponse(text=result.text, diagram_definition=result.diagram_definition)
