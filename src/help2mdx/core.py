"""Conversion pipeline for help2mdx."""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import MissingSourceDocumentError
from .navigation import DocRef, SectionNode, extract_navigation
from .normalize import find_content_root
from .render import html_to_markdown
from .text import clean_text, summarize_description, yaml_escape

LOG = logging.getLogger("help2mdx")
LOG_FORMAT = "%(levelname)s: %(message)s"

EXIT_CONVERSION_FAILED = 1

INDEX_FILENAME = "index.html"
TEMPLATES_DIRNAME = "templates"
INLINE_IMAGES_DIRNAME = "inline-images"
CATEGORY_FILENAME = "_category_.json"
DOC_SUFFIX = ".mdx"
TITLE_TAGS = ["h1", "h2", "h3"]


@dataclass
class ConversionConfig:
    from_dir: Path
    site_dir: Path
    docs_dir: Optional[Path] = None
    static_img_dir: Optional[Path] = None
    verbose: bool = False
    debug: bool = False

    @property
    def index_path(self) -> Path:
        return self.from_dir / INDEX_FILENAME

    @property
    def templates_dir(self) -> Path:
        return self.from_dir / TEMPLATES_DIRNAME

    @property
    def inline_images_dir(self) -> Path:
        return self.from_dir / INLINE_IMAGES_DIRNAME

    @property
    def output_docs_dir(self) -> Path:
        return self.docs_dir or self.site_dir / "docs"

    @property
    def output_images_dir(self) -> Path:
        return (self.static_img_dir or self.site_dir / "static" / "img") / INLINE_IMAGES_DIRNAME


@dataclass
class RenderedDocument:
    title: str
    description: str
    markdown: str
    slug: str


def setup_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    LOG.setLevel(level)
    LOG.propagate = False
    if not LOG.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        LOG.addHandler(handler)
    for handler in LOG.handlers:
        handler.setLevel(level)


def _progress_bar_line(current: int, total: int, width: int = 24) -> str:
    filled = min(width, current * width // total)
    return "[" + "#" * filled + "." * (width - filled) + "]"


def _log_verbose_progress(prefix: str, current: int, total: int, detail: Optional[str] = None) -> None:
    bar = _progress_bar_line(current, total)
    msg = f"{prefix} {bar} [{current}/{total}] ({(current / total) * 100.0:.1f}%)"
    if detail:
        msg = f"{msg} | {detail}"
    LOG.info(msg)


def safe_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="\n")


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def reset_directory(path: Path) -> None:
    """Replace *path* (whatever it holds) with an empty directory.

    The old contents are renamed to a sibling first and deleted afterwards, so
    *path* itself is never left half-deleted.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    retired = path.with_name(f".{path.name}.retired")
    _remove_path(retired)
    if path.exists() or path.is_symlink():
        path.rename(retired)
    path.mkdir()
    _remove_path(retired)


def mirror_directory(source: Path, target: Path) -> bool:
    """Replace *target* with a copy of *source*.

    The copy lands in a sibling staging directory first, so a failed copy
    leaves the previous *target* intact. Returns False when *source* is absent,
    in which case *target* is removed.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    if not source.is_dir():
        _remove_path(target)
        return False

    staging = target.with_name(f".{target.name}.staging")
    _remove_path(staging)
    try:
        shutil.copytree(source, staging)
        _remove_path(target)
        staging.rename(target)
    finally:
        _remove_path(staging)
    return True


def extract_title(content_root, fallback: str) -> str:
    heading = content_root.find(TITLE_TAGS)
    if heading is None:
        return fallback
    return clean_text(heading.get_text()) or fallback


def extract_description(content_root) -> str:
    for paragraph in content_root.find_all("p"):
        text = clean_text(paragraph.get_text())
        if text:
            return summarize_description(text)
    return ""


def load_document(path: Path):
    try:
        from bs4 import BeautifulSoup  # type: ignore
    except Exception as exc:
        raise RuntimeError(f"beautifulsoup4 not available: {exc}") from exc

    if not path.is_file():
        raise MissingSourceDocumentError(f"Missing source document: {path}")
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


def render_document(soup, doc: DocRef) -> RenderedDocument:
    content_root = find_content_root(soup)
    title = extract_title(content_root, doc.nav_label)
    description = extract_description(content_root)
    markdown = html_to_markdown(content_root)
    return RenderedDocument(title=title, description=description, markdown=markdown, slug=doc.slug)


def build_front_matter(rendered: RenderedDocument, doc: DocRef) -> str:
    lines = ["---", f"title: {yaml_escape(rendered.title)}"]
    if doc.nav_label and doc.nav_label != rendered.title:
        lines.append(f"sidebar_label: {yaml_escape(doc.nav_label)}")
    lines.append(f"sidebar_position: {doc.position}")
    if rendered.description:
        lines.append(f"description: {yaml_escape(rendered.description)}")
    lines.extend(["---", "", ""])
    return "\n".join(lines)


def write_category_metadata(dir_path: Path, label: str, position: int) -> Path:
    meta: Dict[str, Any] = {"label": label, "position": position, "collapsed": True}
    category_path = dir_path / CATEGORY_FILENAME
    safe_write_text(category_path, json.dumps(meta, ensure_ascii=False, indent=2) + "\n")
    return category_path


def convert_documents(sections: List[SectionNode], config: ConversionConfig) -> List[Path]:
    docs_root = config.output_docs_dir
    reset_directory(docs_root)

    written: List[Path] = []
    total = sum(len(section.docs) for section in sections)
    current = 0
    for section in sections:
        section_dir = docs_root / section.dir_name
        write_category_metadata(section_dir, section.label, section.position)
        LOG.debug("Section %d: %s -> %s", section.position, section.label, section_dir)

        for doc in section.docs:
            soup = load_document(config.templates_dir / doc.relative_path)
            rendered = render_document(soup, doc)
            output_path = section_dir / f"{rendered.slug}{DOC_SUFFIX}"
            safe_write_text(output_path, f"{build_front_matter(rendered, doc)}{rendered.markdown}\n")
            written.append(output_path)

            current += 1
            if config.verbose:
                _log_verbose_progress("Converting", current, total, doc.relative_path)

    return written


def copy_assets(config: ConversionConfig) -> None:
    source = config.inline_images_dir
    target = config.output_images_dir
    if mirror_directory(source, target):
        LOG.info("Copied assets: %s -> %s", source, target)
    else:
        LOG.warning("Inline images directory not found: %s", source)


def run_conversion_pipeline(config: ConversionConfig) -> List[Path]:
    sections = extract_navigation(config.index_path)
    LOG.info("Found %d navigation section(s) in %s", len(sections), config.index_path)
    written = convert_documents(sections, config)
    copy_assets(config)
    LOG.info("Wrote %d document(s) to %s", len(written), config.output_docs_dir)
    return written
