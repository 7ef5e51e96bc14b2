"""
Scraper Utilities

Text normalization helpers shared by the listing and detail extractors.
"""

import re
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import NavigableString, Tag

_WHITESPACE_RE = re.compile(r"\s+")

BLOCK_TAGS = {
    "p", "div", "li", "ul", "ol", "section", "article", "header", "footer",
    "h1", "h2", "h3", "h4", "h5", "h6", "tr", "table", "dd", "dt",
}


def normalize_text(text: Optional[str]) -> str:
    """Collapse whitespace runs to a single space and trim."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def split_lines(text: Optional[str]) -> List[str]:
    """
    Split text into non-empty, trimmed lines.

    Args:
        text: Raw text, possibly None

    Returns:
        List[str]: Lines in order, blank lines dropped
    """
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def _walk_blocks(element: Tag, chunks: List[str]) -> None:
    for child in element.children:
        if isinstance(child, NavigableString):
            # Comments, doctype and CDATA are NavigableString subclasses
            if type(child) is NavigableString:
                chunks.append(str(child))
            continue
        if not isinstance(child, Tag):
            continue
        if child.name in ("script", "style", "template"):
            continue
        if child.name == "br":
            chunks.append("\n")
            continue
        is_block = child.name in BLOCK_TAGS
        if is_block:
            chunks.append("\n")
        _walk_blocks(child, chunks)
        if is_block:
            chunks.append("\n")


def block_lines(element: Optional[Tag]) -> List[str]:
    """
    Visible text of an element as lines, one per block-level element or <br>.

    Inline markup inside a block is joined into the same line; each line is
    whitespace-normalized and empty lines are dropped.
    """
    if element is None:
        return []

    chunks: List[str] = []
    _walk_blocks(element, chunks)

    lines = []
    for raw in "".join(chunks).split("\n"):
        line = normalize_text(raw)
        if line:
            lines.append(line)
    return lines


def block_text(element: Optional[Tag]) -> str:
    """Block-aware text of an element, lines joined with newlines."""
    return "\n".join(block_lines(element))


def resolve_url(href: Optional[str], root: str) -> str:
    """Resolve a site-relative href against the site root origin."""
    href = (href or "").strip()
    if not href:
        return ""
    if href.startswith("/"):
        return urljoin(root.rstrip("/") + "/", href)
    return href


def truncate(text: str, limit: int, marker: str = "...") -> str:
    """Cut text to ``limit`` characters, appending ``marker`` when cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + marker
