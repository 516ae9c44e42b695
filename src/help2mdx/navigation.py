"""Navigation index parsing for help-center exports."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import List, Optional

from .errors import ManifestStructureError, MissingSourceDocumentError
from .text import clean_text

LOG = logging.getLogger("help2mdx")

SECTION_SELECTOR = "#apendArticles > li"
CHAPTER_TITLE_SELECTOR = 'strong[purpose="chapter"]'
LINK_REFERENCE_ATTR = "onclick"
TEMPLATE_REFERENCE_RE = re.compile(r'"\./templates/([^"]+)"')


@dataclass
class DocRef:
    relative_path: str
    nav_label: str
    position: int

    @property
    def slug(self) -> str:
        return PurePosixPath(self.relative_path).stem

    @property
    def top_level_dir(self) -> str:
        parts = PurePosixPath(self.relative_path).parent.parts
        return parts[0] if parts else ""


@dataclass
class SectionNode:
    label: str
    position: int
    docs: List[DocRef] = field(default_factory=list)

    @property
    def dir_name(self) -> str:
        return self.docs[0].top_level_dir


def extract_template_reference(link) -> Optional[str]:
    script = link.get(LINK_REFERENCE_ATTR) or ""
    match = TEMPLATE_REFERENCE_RE.search(script)
    if not match:
        return None
    return match.group(1)


def _validate_section_dirs(section: SectionNode) -> None:
    dir_name = section.dir_name
    if not dir_name:
        raise ManifestStructureError(
            f'Document "{section.docs[0].relative_path}" in navigation section "{section.label}" '
            "is not inside a template directory."
        )
    for doc in section.docs[1:]:
        if doc.top_level_dir != dir_name:
            raise ManifestStructureError(
                f'Navigation section "{section.label}" mixes template directories: '
                f'"{dir_name}" and "{doc.top_level_dir}" ({doc.relative_path}).'
            )


def parse_navigation(soup) -> List[SectionNode]:
    section_nodes = soup.select(SECTION_SELECTOR)
    if not section_nodes:
        raise ManifestStructureError("Unable to locate navigation structure in source HTML.")

    sections: List[SectionNode] = []
    for index, section_node in enumerate(section_nodes, start=1):
        label_node = section_node.select_one(CHAPTER_TITLE_SELECTOR)
        label = clean_text(label_node.get_text()) if label_node is not None else ""
        section = SectionNode(label=label or f"Section {index}", position=index)

        for link in section_node.find_all("a"):
            relative_path = extract_template_reference(link)
            if relative_path is None:
                LOG.debug("Skipping non-navigational link in %s: %s", section.label, clean_text(link.get_text()))
                continue
            nav_label = clean_text(link.get_text()) or PurePosixPath(relative_path).stem
            section.docs.append(DocRef(relative_path=relative_path, nav_label=nav_label, position=len(section.docs) + 1))

        if not section.docs:
            raise ManifestStructureError(f'No documents found under navigation section "{section.label}".')
        _validate_section_dirs(section)
        sections.append(section)

    return sections


def extract_navigation(index_path: Path) -> List[SectionNode]:
    try:
        from bs4 import BeautifulSoup  # type: ignore
    except Exception as exc:
        raise RuntimeError(f"beautifulsoup4 not available: {exc}") from exc

    if not index_path.is_file():
        raise MissingSourceDocumentError(f"Missing navigation index: {index_path}")
    soup = BeautifulSoup(index_path.read_text(encoding="utf-8"), "html.parser")
    return parse_navigation(soup)
