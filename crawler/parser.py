"""
Read-only DOM helpers shared by the analyzers and keyword discovery.
"""
from __future__ import annotations

import copy
import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

# Stripped before reading body copy
_NON_CONTENT_TAGS = ["script", "style", "noscript", "nav", "header", "footer", "aside"]

_WS_RE = re.compile(r"\s+")


def meta_content(
    soup: BeautifulSoup,
    name: Optional[str] = None,
    prop: Optional[str] = None,
    http_equiv: Optional[str] = None,
) -> str:
    """Content of the first <meta> whose name / property / http-equiv matches (case-insensitive)."""
    for attr, wanted in (("name", name), ("property", prop), ("http-equiv", http_equiv)):
        if wanted is None:
            continue
        for meta in soup.find_all("meta"):
            if (meta.get(attr) or "").strip().lower() == wanted:
                return (meta.get("content") or "").strip()
    return ""


def rel_of(tag: Tag) -> str:
    """Normalised rel attribute, e.g. "shortcut icon"."""
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return " ".join(r.lower() for r in rel)


def stylesheet_links(soup: BeautifulSoup) -> list[Tag]:
    return [link for link in soup.find_all("link") if rel_of(link) == "stylesheet"]


def text_of(tag: Tag) -> str:
    return _WS_RE.sub(" ", tag.get_text(" ")).strip()


def heading_texts(soup: BeautifulSoup, level: str) -> list[str]:
    """Non-empty text of every <h1>/<h2>/... in document order."""
    texts = []
    for tag in soup.find_all(level):
        text = text_of(tag)
        if text:
            texts.append(text)
    return texts


def title_text(soup: BeautifulSoup) -> str:
    tag = soup.find("title")
    return text_of(tag) if tag is not None else ""


def body_text(soup: BeautifulSoup) -> str:
    """Visible body copy with scripts, styles and page chrome removed. The input is not modified."""
    clone = copy.copy(soup)
    for tag in clone.find_all(_NON_CONTENT_TAGS):
        tag.extract()
    body = clone.find("body") or clone
    return text_of(body)
