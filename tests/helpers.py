"""Shared test helpers: Responses API payload factories and a fake service."""

import json

import httpx


def _text_message(*chunks: str) -> dict:
    """A message output item with one output_text entry per chunk."""
    return {
        "type": "message",
        "role": "assistant",
        "content": [{"type": "output_text", "text": c} for c in chunks],
    }


def _json_message(payload: dict) -> dict:
    """A message output item with a native output_json entry."""
    return {
        "type": "message",
        "role": "assistant",
        "content": [{"type": "output_json", "json": payload}],
    }


def _fn_call_item(call_id: str, name: str, args: dict | str) -> dict:
    """A top-level function_call output item."""
    arguments = args if isinstance(args, str) else json.dumps(args)
    return {
        "type": "function_call",
        "id": f"fc_{call_id}",
        "call_id": call_id,
        "name": name,
        "arguments": arguments,
    }


def _make_response(*items: dict, response_id: str | None = "resp_1", **extra) -> dict:
    """A Responses API reply with the given output items."""
    body: dict = {"object": "response", "output": list(items), **extra}
    if response_id is not None:
        body["id"] = response_id
    return body


class FakeResponsesService:
    """Replays canned replies and records every request body it receives."""

    def __init__(self, *replies: dict | httpx.Response, repeat_last: bool = False) -> None:
        self._replies = list(replies)
        self._repeat_last = repeat_last
        self.requests: list[httpx.Request] = []
        self.bodies: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.bodies.append(json.loads(request.content))
        if len(self._replies) > 1 or not self._repeat_last:
            reply = self._replies.pop(0)
        else:
            reply = self._replies[0]
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
