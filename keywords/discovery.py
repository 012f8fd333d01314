"""
Keyword discovery: mines a page for candidate target phrases.

Phrases are collected from the title, headings, meta tags, body copy and URL
slug. Each source adds a fixed weight; a phrase seen in several places keeps
its first source and accumulates the sum of the weights. The top phrases are
returned by descending score, ties in first-seen order.
"""
from __future__ import annotations

import re
from collections import Counter
from typing import Optional
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup

from config import (
    H2_MAX_CHARS,
    H3_MAX_CHARS,
    KEYWORD_WEIGHTS,
    MAX_BODY_PHRASE_WEIGHT,
    MAX_DISCOVERED_KEYWORDS,
    MIN_SINGLE_WORD_SCORE,
)
from crawler.parser import body_text, heading_texts, meta_content, title_text
from keywords.text import clean, is_admissible, is_meaningful, ngrams, split_segments, words_of
from models import DiscoveredKeyword, FetchedPage, KeywordSource

_DIGITS_RE = re.compile(r"^\d+$")
_SLUG_SPLIT_RE = re.compile(r"[/\-_]")


class KeywordAccumulator:
    """Phrase -> (score, first source), in insertion order."""

    def __init__(self):
        self._scores: dict[str, int] = {}
        self._sources: dict[str, str] = {}

    def add(self, phrase: str, score: int, source: str) -> None:
        key = clean(phrase)
        if len(key) < 3 or _DIGITS_RE.match(key):
            return
        if not any(is_meaningful(w) for w in key.split()):
            return

        if key in self._scores:
            self._scores[key] += score
        else:
            self._scores[key] = score
            self._sources[key] = source

    def score_of(self, phrase: str) -> Optional[int]:
        return self._scores.get(clean(phrase))

    def __len__(self) -> int:
        return len(self._scores)

    def ranked(self, limit: int = MAX_DISCOVERED_KEYWORDS) -> list[DiscoveredKeyword]:
        candidates = [
            DiscoveredKeyword(phrase=p, score=s, source=self._sources[p])
            for p, s in self._scores.items()
            # single words only survive on a strong signal
            if " " in p or s >= MIN_SINGLE_WORD_SCORE
        ]
        # sorted() is stable, so equal scores keep first-seen order
        return sorted(candidates, key=lambda k: -k.score)[:limit]


def discover_keywords(soup: BeautifulSoup, url: str) -> list[DiscoveredKeyword]:
    acc = KeywordAccumulator()

    _add_title(acc, soup)
    _add_headings(acc, soup, "h1", KeywordSource.H1, max_n=4)
    _add_meta(acc, soup)
    _add_headings(acc, soup, "h2", KeywordSource.H2, max_n=3, max_chars=H2_MAX_CHARS)
    _add_headings(acc, soup, "h3", KeywordSource.H3, max_n=3, max_chars=H3_MAX_CHARS)
    _add_body(acc, soup)
    _add_slug(acc, url)

    return acc.ranked()


def discover_page_keywords(page: FetchedPage) -> list[DiscoveredKeyword]:
    return discover_keywords(page.soup, page.url)


# ── Sources ───────────────────────────────────────────────────────────────────

def _add_title(acc: KeywordAccumulator, soup: BeautifulSoup) -> None:
    whole, gram = KEYWORD_WEIGHTS["title"]
    for segment in split_segments(title_text(soup)):
        acc.add(segment, whole, KeywordSource.TITLE)
        for phrase in ngrams(words_of(segment), 2, 4):
            acc.add(phrase, gram, KeywordSource.TITLE)


def _add_headings(
    acc: KeywordAccumulator,
    soup: BeautifulSoup,
    level: str,
    source: str,
    max_n: int,
    max_chars: Optional[int] = None,
) -> None:
    whole, gram = KEYWORD_WEIGHTS[level]
    for text in heading_texts(soup, level):
        if max_chars is not None and len(text) > max_chars:
            continue
        acc.add(text, whole, source)
        for phrase in ngrams(words_of(text), 2, max_n):
            acc.add(phrase, gram, source)


def _add_meta(acc: KeywordAccumulator, soup: BeautifulSoup) -> None:
    keyword_weight, description_weight = KEYWORD_WEIGHTS["meta"]

    description = meta_content(soup, name="description")
    if description:
        for phrase in ngrams(words_of(description), 2, 4):
            acc.add(phrase, description_weight, KeywordSource.META)

    keywords = meta_content(soup, name="keywords")
    if keywords:
        for entry in keywords.split(","):
            acc.add(entry.strip(), keyword_weight, KeywordSource.META)


def _add_body(acc: KeywordAccumulator, soup: BeautifulSoup) -> None:
    words = words_of(body_text(soup))
    freq: Counter = Counter()
    for n in (2, 3):
        for i in range(len(words) - n + 1):
            gram = words[i:i + n]
            if is_admissible(gram):
                freq[" ".join(gram)] += 1

    # Counter keeps first-occurrence order
    for phrase, count in freq.items():
        if count >= 2:
            acc.add(phrase, min(count, MAX_BODY_PHRASE_WEIGHT), KeywordSource.BODY)


def _add_slug(acc: KeywordAccumulator, url: str) -> None:
    try:
        path = unquote(urlsplit(url or "").path)
    except ValueError:
        return

    slug_words = [w for w in _SLUG_SPLIT_RE.split(path.lower()) if is_meaningful(w)]
    if len(slug_words) >= 2:
        weight, _ = KEYWORD_WEIGHTS["slug"]
        acc.add(" ".join(slug_words), weight, KeywordSource.BODY)
