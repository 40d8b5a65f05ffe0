"""Tests for the FastAPI server."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from diagrammer.api import server
from diagrammer.api.server import app
from diagrammer.errors import ContinuationAnchorMissing, TransportError
from diagrammer.models import AssistantResult


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def fake_chat():
    engine = MagicMock()
    engine.chat = AsyncMock(
        return_value=AssistantResult(text="Done", diagram_definition="graph TD\nA-->B"),
    )
    with patch("diagrammer.api.server._get_client", return_value=engine), \
            patch("diagrammer.api.server._get_docs", return_value="docs-provider"):
        yield engine.chat


BODY = {"messages": [{"role": "user", "content": "draw it"}]}


class TestServer:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_chat(self, client, fake_chat):
        resp = client.post("/chat", json=BODY)
        assert resp.status_code == 200
        assert resp.json() == {"text": "Done", "diagram_definition": "graph TD\nA-->B"}
        messages = fake_chat.call_args.args[0]
        assert messages[0].role == "user"
        assert messages[0].content == "draw it"
        assert fake_chat.call_args.kwargs["docs"] == "docs-provider"

    def test_chat_without_docs(self, client, fake_chat):
        client.post("/chat", json={**BODY, "use_docs": False})
        assert fake_chat.call_args.kwargs["docs"] is None

    def test_empty_reply_is_not_an_error(self, client, fake_chat):
        fake_chat.return_value = AssistantResult()
        resp = client.post("/chat", json=BODY)
        assert resp.status_code == 200
        assert resp.json() == {"text": "", "diagram_definition": None}

    def test_transport_error(self, client, fake_chat):
        fake_chat.side_effect = TransportError(503, "overloaded")
        resp = client.post("/chat", json=BODY)
        assert resp.status_code == 502
        assert resp.json()["detail"] == {"error": "transport", "status": 503, "body": "overloaded"}

    def test_continuation_error(self, client, fake_chat):
        fake_chat.side_effect = ContinuationAnchorMissing(["get_mermaid_docs"])
        resp = client.post("/chat", json=BODY)
        assert resp.status_code == 502
        assert resp.json()["detail"]["error"] == "continuation"

    def test_invalid_role(self, client, fake_chat):
        resp = client.post("/chat", json={"messages": [{"role": "tool", "content": "x"}]})
        assert resp.status_code == 422

    def test_empty_messages(self, client, fake_chat):
        resp = client.post("/chat", json={"messages": []})
        assert resp.status_code == 422
        fake_chat.assert_not_called()


class TestShutdown:
    def test_clients_closed_on_shutdown(self, monkeypatch):
        engine = MagicMock()
        engine.aclose = AsyncMock()
        monkeypatch.setattr(server, "_client", engine)
        monkeypatch.setattr(server, "_docs", None)
        monkeypatch.setattr(server, "_docs_http", None)
        server._get_docs()
        docs_http = server._docs_http

        with TestClient(app) as c:
            assert c.get("/health").status_code == 200

        engine.aclose.assert_awaited_once()
        assert docs_http.is_closed
        assert server._client is None
        assert server._docs is None
        assert server._docs_http is None

    def test_shutdown_without_clients(self, monkeypatch):
        monkeypatch.setattr(server, "_client", None)
        monkeypatch.setattr(server, "_docs", None)
        monkeypatch.setattr(server, "_docs_http", None)
        with TestClient(app):
            pass
        assert server._client is None
