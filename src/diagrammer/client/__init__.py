"""Responses API client: request building, transport, parsing and the tool loop."""
