"""Markdown rendering and MDX-safe escaping.

The converted Markdown is consumed by an MDX processor, which reads ``<...>`` as
JSX tags and ``{...}`` as expressions. Every escaping pass is an independent
``str -> str`` rule; :func:`apply_escape_rules` feeds the rules the text
segments of each line and leaves fenced blocks and inline code spans alone.
"""

from __future__ import annotations

import re
from typing import Callable, List, Sequence, Tuple

from .normalize import normalize_dom

FENCE_MARKER = "```"

DATA_ATTR_RE = re.compile(r'\sdata-[a-z-]+="[^"]*"', re.IGNORECASE)
VOID_TAG_RE = re.compile(r"<(col|br|hr|img)\b([^>]*?)\s*/?>", re.IGNORECASE)
CONSTANT_PLACEHOLDER_RE = re.compile(r"<([A-Z_][A-Z0-9_]*(?:\\?_[A-Z0-9_]*)*)>")
TAG_LIKE_PLACEHOLDER_RE = re.compile(r"<([A-Za-z][A-Za-z0-9_\s]*[A-Za-z0-9])>")
UNESCAPED_BRACE_RE = re.compile(r"(?<!\\)([{}])")
BLANK_LINES_RE = re.compile(r"\n{3,}")

KNOWN_HTML_TAGS = frozenset(
    [
        "table", "thead", "tbody", "tr", "td", "th", "div", "span", "p", "a", "img", "br", "hr",
        "col", "colgroup", "ol", "ul", "li", "pre", "code", "strong", "em", "b", "i", "u",
        "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "figure", "figcaption",
    ]
)

MARKDOWNIFY_OPTIONS = {
    "heading_style": "ATX",
    "bullets": "-",
    "code_language": "",
    "escape_misc": False,
    "keep_inline_images_in": ["td", "th"],
}

EscapeRule = Callable[[str], str]


def close_void_elements(text: str) -> str:
    def repl(match: re.Match) -> str:
        return f"<{match.group(1)}{match.group(2)} />"

    return VOID_TAG_RE.sub(repl, text)


def escape_diamond(text: str) -> str:
    return text.replace("<>", "&lt;&gt;")


def escape_comparison_operators(text: str) -> str:
    return text.replace("<=", "&lt;=").replace(">=", "&gt;=")


def escape_constant_placeholders(text: str) -> str:
    return CONSTANT_PLACEHOLDER_RE.sub(r"&lt;\1&gt;", text)


def escape_tag_like_placeholders(text: str) -> str:
    def repl(match: re.Match) -> str:
        inner = match.group(1)
        if inner.split()[0].lower() in KNOWN_HTML_TAGS:
            return match.group(0)
        return f"&lt;{inner}&gt;"

    return TAG_LIKE_PLACEHOLDER_RE.sub(repl, text)


def escape_curly_braces(text: str) -> str:
    return UNESCAPED_BRACE_RE.sub(r"\\\1", text)


ESCAPE_RULES: Tuple[EscapeRule, ...] = (
    close_void_elements,
    escape_diamond,
    escape_comparison_operators,
    escape_constant_placeholders,
    escape_tag_like_placeholders,
    escape_curly_braces,
)


def split_inline_code(line: str) -> List[Tuple[str, bool]]:
    """Split *line* into ``(segment, is_code)`` pairs on unescaped backticks.

    Backticks belong to the code segment they delimit; an unclosed backtick
    turns the remainder of the line into code.
    """
    segments: List[Tuple[str, bool]] = []
    start = 0
    in_code = False
    for idx, char in enumerate(line):
        if char != "`" or (idx > 0 and line[idx - 1] == "\\"):
            continue
        if in_code:
            segments.append((line[start : idx + 1], True))
            start = idx + 1
        else:
            segments.append((line[start:idx], False))
            start = idx
        in_code = not in_code
    segments.append((line[start:], in_code))
    return [(segment, is_code) for segment, is_code in segments if segment]


def _apply_rules(text: str, rules: Sequence[EscapeRule]) -> str:
    for rule in rules:
        text = rule(text)
    return text


def apply_escape_rules(markdown: str, rules: Sequence[EscapeRule] = ESCAPE_RULES) -> str:
    output: List[str] = []
    in_fence = False
    for line in markdown.split("\n"):
        if line.strip().startswith(FENCE_MARKER):
            in_fence = not in_fence
            output.append(line)
            continue
        if in_fence:
            output.append(line)
            continue
        output.append(
            "".join(segment if is_code else _apply_rules(segment, rules) for segment, is_code in split_inline_code(line))
        )
    return "\n".join(output)


def tidy_markdown(markdown: str) -> str:
    text = markdown.replace("\u00a0", " ").replace("\r\n", "\n")
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    return BLANK_LINES_RE.sub("\n\n", text).strip()


def convert_markup(html: str) -> str:
    try:
        from markdownify import markdownify as md_convert  # type: ignore
    except Exception as exc:
        raise RuntimeError(f"markdownify not available: {exc}") from exc

    return md_convert(DATA_ATTR_RE.sub("", html), **MARKDOWNIFY_OPTIONS)


def html_to_markdown(content_root) -> str:
    """Normalize *content_root* in place and return its MDX-safe Markdown body."""
    normalize_dom(content_root)
    markdown = convert_markup(content_root.decode_contents())
    return tidy_markdown(apply_escape_rules(markdown))
