#!/usr/bin/env python3
"""CLI: Ask the diagram assistant a question and print its reply."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import httpx

# Ensure the package is importable when running as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from diagrammer import config
from diagrammer.client.engine import create_client
from diagrammer.docs import DocsFetcher
from diagrammer.errors import ContinuationAnchorMissing, TransportError
from diagrammer.models import AssistantResult, ChatMessage

DEFAULT_SYSTEM = (
    "You are a Mermaid diagram assistant. Answer briefly in `text` and put the "
    "complete Mermaid definition, without code fences, in `diagramDefinition`."
)


def _print_progress(event: dict) -> None:
    if event["type"] == "tool_calls":
        print(f"  [round {event['round']}] docs: {', '.join(event['calls'])}", file=sys.stderr)
    elif event["type"] == "round_limit":
        print("  [tool round limit reached]", file=sys.stderr)


async def _run(args: argparse.Namespace) -> AssistantResult:
    messages = [
        ChatMessage(role="system", content=args.system),
        ChatMessage(role="user", content=args.prompt),
    ]
    async with httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_S) as http:
        async with create_client(http_client=http) as client:
            docs = None if args.no_docs else DocsFetcher(http)
            return await client.chat(messages, docs=docs, on_progress=_print_progress)


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a Mermaid diagram from a prompt")
    parser.add_argument("prompt", type=str, help="What to draw or ask")
    parser.add_argument(
        "--system",
        type=str,
        default=DEFAULT_SYSTEM,
        help="System instruction sent before the prompt",
    )
    parser.add_argument(
        "--no-docs",
        action="store_true",
        help="Do not offer the documentation lookup tool",
    )
    parser.add_argument(
        "--provider",
        choices=["openai", "azure"],
        default=None,
        help="Override DIAGRAMMER_PROVIDER",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print {text, diagram_definition} as JSON",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    if args.provider:
        config.PROVIDER = args.provider

    try:
        result = asyncio.run(_run(args))
    except TransportError as e:
        print(f"Error: request failed ({e.status or 'unreachable'}): {e.body}", file=sys.stderr)
        sys.exit(1)
    except ContinuationAnchorMissing as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps({"text": result.text, "diagram_definition": result.diagram_definition}, indent=2))
        return

    print(result.text or "(no text)")
    if result.diagram_definition:
        print()
        print(result.diagram_definition)
    else:
        print("\n(no diagram produced)", file=sys.stderr)


if __name__ == "__main__":
    main()
