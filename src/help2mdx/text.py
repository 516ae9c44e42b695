"""String helpers shared by the extractor, the renderer and the front matter writer."""

from __future__ import annotations

import re
from typing import Optional

WHITESPACE_RE = re.compile(r"\s+")
YAML_SPECIAL_RE = re.compile(r"[:\"'{}\[\],&*#?<>@`!\n]")

DESCRIPTION_MAX_LEN = 240
DESCRIPTION_SHORT_LEN = 200
SENTENCE_TERMINATORS = (".", "!", "?")
ELLIPSIS = "…"


def clean_text(value: Optional[str]) -> str:
    if not value:
        return ""
    return WHITESPACE_RE.sub(" ", value).strip()


def yaml_escape(value: Optional[str]) -> str:
    """Return *value* as a YAML scalar, double-quoted only when it has to be."""
    if value is None or value == "":
        return ""
    value = str(value)
    if not YAML_SPECIAL_RE.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def summarize_description(text: str) -> str:
    summary = clean_text(text)
    if len(summary) <= DESCRIPTION_SHORT_LEN:
        return summary
    if len(summary) <= DESCRIPTION_MAX_LEN and summary.endswith(SENTENCE_TERMINATORS):
        return summary
    return summary[: DESCRIPTION_MAX_LEN - 1].rstrip() + ELLIPSIS
