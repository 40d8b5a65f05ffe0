"""Provider profiles for the Responses API.

One ``ProviderConfig`` describes everything that differs between endpoints:
where to POST, how to authenticate, and which structured-output schema
layout to send. The engine itself never branches on provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from urllib.parse import quote

from diagrammer import config

AuthScheme = Literal["bearer", "api-key"]
SchemaStyle = Literal["flat", "nested"]


@dataclass(frozen=True)
class ProviderConfig:
    """Read-only endpoint and request settings."""

    url: str
    model: str
    api_key: str
    auth_scheme: AuthScheme = "bearer"
    schema_style: SchemaStyle = "flat"
    text_field: str = "text"
    diagram_field: str = "diagramDefinition"
    attach_tools: bool = True
    temperature: float = 0.2
    max_tool_rounds: int = 3

    def auth_headers(self) -> dict[str, str]:
        if self.auth_scheme == "api-key":
            return {"api-key": self.api_key}
        return {"Authorization": f"Bearer {self.api_key}"}


def openai_provider(
    api_key: str,
    model: str,
    base_url: str = "https://api.openai.com",
    **overrides,
) -> ProviderConfig:
    """Profile for OpenAI's ``/v1/responses`` with bearer auth."""
    return ProviderConfig(
        url=f"{base_url.rstrip('/')}/v1/responses",
        model=model,
        api_key=api_key,
        auth_scheme="bearer",
        schema_style="flat",
        **overrides,
    )


def azure_provider(
    endpoint: str,
    deployment: str,
    api_version: str,
    api_key: str,
    **overrides,
) -> ProviderConfig:
    """Profile for Azure OpenAI: deployment name as model, ``api-key`` header."""
    url = (
        f"{endpoint.rstrip('/')}/openai/v1/responses"
        f"?api-version={quote(api_version, safe='')}"
    )
    return ProviderConfig(
        url=url,
        model=deployment,
        api_key=api_key,
        auth_scheme="api-key",
        schema_style="nested",
        **overrides,
    )


def provider_from_env() -> ProviderConfig:
    """Build the provider selected by ``DIAGRAMMER_PROVIDER``."""
    shared = {
        "temperature": config.TEMPERATURE,
        "max_tool_rounds": config.MAX_TOOL_ROUNDS,
    }
    if config.PROVIDER == "azure":
        return azure_provider(
            endpoint=config._require("AZURE_OPENAI_ENDPOINT"),
            deployment=config._require("AZURE_OPENAI_DEPLOYMENT"),
            api_version=config.AZURE_OPENAI_API_VERSION,
            api_key=config._require("AZURE_OPENAI_API_KEY"),
            **shared,
        )
    if config.PROVIDER != "openai":
        raise RuntimeError(
            f"Unknown DIAGRAMMER_PROVIDER {config.PROVIDER!r}. Available: azure, openai"
        )
    return openai_provider(
        api_key=config._require("OPENAI_API_KEY"),
        model=config.OPENAI_MODEL,
        base_url=config.OPENAI_BASE_URL,
        **shared,
    )
