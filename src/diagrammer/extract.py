"""Locate a Mermaid diagram definition embedded in free text."""

from __future__ import annotations

import re

_MERMAID_FENCE = re.compile(r"```mermaid(?![\w-])\s*([\s\S]*?)```", re.IGNORECASE)
_GENERIC_FENCE = re.compile(r"```([\s\S]*?)```")
_MERMAID_TAG = re.compile(r"<mermaid[^>]*>([\s\S]*?)</mermaid>", re.IGNORECASE)

# Leading keywords of the diagram kinds we recognize, compared lower-cased
DIAGRAM_KEYWORDS = frozenset({
    "graph",
    "flowchart",
    "sequencediagram",
    "classdiagram",
    "statediagram",
    "statediagram-v2",
    "erdiagram",
    "gantt",
    "journey",
    "gitgraph",
    "pie",
    "mindmap",
})


def looks_like_diagram(code: str) -> bool:
    """True if the first token of ``code`` names a known diagram kind."""
    parts = code.split(maxsplit=1)
    if not parts:
        return False
    return parts[0].lower() in DIAGRAM_KEYWORDS


def extract_diagram(text: str | None) -> str | None:
    """Return the first diagram definition found in ``text``, or None.

    Checked in order, first match wins:
      1. a ```mermaid fenced block
      2. any other fenced block whose first token is a diagram keyword
      3. a <mermaid>...</mermaid> tag

    None means no diagram was produced, not an error.
    """
    if not text:
        return None

    m = _MERMAID_FENCE.search(text)
    if m and m.group(1).strip():
        return m.group(1).strip()

    for m in _GENERIC_FENCE.finditer(text):
        code = m.group(1).strip()
        if looks_like_diagram(code):
            return code

    m = _MERMAID_TAG.search(text)
    if m and m.group(1).strip():
        return m.group(1).strip()

    return None
