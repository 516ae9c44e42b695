"""In-place cleanup of a template's content subtree before Markdown conversion."""

from __future__ import annotations

from typing import List

from .text import clean_text

CONTENT_ROOT_SELECTOR = ".selectableSection"
NOISE_TAGS = ["style", "script", "link", "meta"]
VOID_TAGS = ["col", "br", "hr"]
SELF_CLOSE_ATTR = "data-self-close"
CODE_LINE_ATTR = "data-codeformat"
STRIPPED_ATTRS = (
    "style",
    "class",
    "doc-id",
    "node-id",
    "data-bookmark-id",
    "data-bookmark-name",
    "data-list",
    "purpose",
)
INLINE_IMAGE_PREFIX = "../../inline-images/"
INLINE_IMAGE_URL = "/img/inline-images/"
DEFAULT_IMAGE_ALT = "Illustration"


def find_content_root(soup):
    return soup.select_one(CONTENT_ROOT_SELECTOR) or soup.body or soup


def _owner_document(node):
    while node.parent is not None:
        node = node.parent
    return node


def remove_noise(root) -> None:
    for tag in root.find_all(NOISE_TAGS):
        if not tag.decomposed:
            tag.decompose()


def remove_first_heading(root) -> None:
    heading = root.find("h1")
    if heading is not None:
        heading.decompose()


def mark_void_elements(root) -> None:
    for tag in root.find_all(VOID_TAGS):
        tag[SELF_CLOSE_ATTR] = "true"


def merge_code_lines(root) -> None:
    """Replace each parent of ``data-codeformat`` lines with one ``<pre><code>`` block."""
    containers: List = []
    for line in root.find_all(attrs={CODE_LINE_ATTR: True}):
        parent = line.parent
        if parent is not None and not any(parent is seen for seen in containers):
            containers.append(parent)

    document = _owner_document(root)
    for container in containers:
        # Already detached together with an enclosing container.
        if container is not root and container.parent is None:
            continue
        lines = [
            line.get_text().replace("\u00a0", " ").rstrip()
            for line in container.find_all(attrs={CODE_LINE_ATTR: True})
        ]
        pre = document.new_tag("pre")
        code = document.new_tag("code")
        code.string = "\n".join(lines)
        pre.append(code)
        if container is root:
            root.clear()
            root.append(pre)
        else:
            container.replace_with(pre)


def wrap_table_rows(root) -> None:
    """Move rows sitting directly under ``<table>`` into a ``<tbody>``."""
    document = _owner_document(root)
    for table in root.find_all("table"):
        rows = table.find_all("tr", recursive=False)
        if not rows:
            continue
        body = document.new_tag("tbody")
        rows[0].insert_before(body)
        for row in rows:
            body.append(row.extract())


def unwrap_spans(root) -> None:
    for span in root.find_all("span"):
        if span.find("img") is None:
            span.unwrap()


def strip_attributes(root) -> None:
    for tag in [root, *root.find_all(True)]:
        for attr in STRIPPED_ATTRS:
            tag.attrs.pop(attr, None)


def rewrite_images(root) -> None:
    for img in root.find_all("img"):
        src = img.get("src") or ""
        if src.startswith(INLINE_IMAGE_PREFIX):
            img["src"] = INLINE_IMAGE_URL + src[len(INLINE_IMAGE_PREFIX) :]
        if not img.get("alt"):
            img["alt"] = DEFAULT_IMAGE_ALT


def prune_empty_paragraphs(root) -> None:
    for paragraph in root.find_all("p"):
        if paragraph.decomposed:
            continue
        if not clean_text(paragraph.get_text()) and paragraph.find("img") is None:
            paragraph.decompose()


def normalize_dom(root) -> None:
    remove_noise(root)
    remove_first_heading(root)
    mark_void_elements(root)
    merge_code_lines(root)
    wrap_table_rows(root)
    unwrap_spans(root)
    strip_attributes(root)
    rewrite_images(root)
    prune_empty_paragraphs(root)
