"""Shared fixtures: provider profiles and a documentation stub."""

import pytest

from diagrammer.client.provider import azure_provider, openai_provider
from diagrammer.models import DocReference


@pytest.fixture
def provider():
    """OpenAI-style profile pointing at a fake host."""
    return openai_provider(api_key="sk-test", model="gpt-test", base_url="https://api.test/")


@pytest.fixture
def azure():
    """Azure-style profile pointing at a fake host."""
    return azure_provider(
        endpoint="https://aoai.test/",
        deployment="diagram-deploy",
        api_version="2024-10-21",
        api_key="azure-key",
    )


@pytest.fixture
def docs_calls():
    """List collecting every topic passed to the docs stub."""
    return []


@pytest.fixture
def docs(docs_calls):
    """Synchronous docs provider returning a fixed page."""

    def _lookup(kind: str) -> DocReference:
        docs_calls.append(kind)
        return DocReference(document="doc", source_locator="url")

    return _lookup
