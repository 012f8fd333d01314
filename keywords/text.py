"""
Text utilities for keyword discovery: stop words, phrase normalisation and n-grams.
"""
from __future__ import annotations

import re

# Common English words plus web-page boilerplate ("click", "menu", "website").
STOP_WORDS = frozenset("""
    the be to of and a in that have i it for not on with he as you do at
    this but his by from they we her she or an will my one all would there their
    what so up out if about who get which go me when make can like time no just
    him know take people into year your some could them see other than then now look
    only come its over think also back after use two how our work first well way even
    new want because any these give day most us are is was were been being has had
    did does doing am may here more very much own such each while don should still said
    every where those must before many through too same right off big high need try
    last long find say ask help let put old tell great under end why call between home
    never start read learn service services page click menu site website web
""".split())

_PUNCT_RE = re.compile(r"[^\w\s'-]")
_WS_RE = re.compile(r"\s+")
_TITLE_DELIMITERS_RE = re.compile(r"[|–—\-·•»:,]")


def clean(text: str) -> str:
    """Lowercase, replace punctuation (except ' and -) with spaces, collapse whitespace."""
    text = _PUNCT_RE.sub(" ", (text or "").lower())
    return _WS_RE.sub(" ", text).strip()


def words_of(text: str) -> list[str]:
    return clean(text).split()


def is_meaningful(word: str) -> bool:
    return len(word) >= 3 and word not in STOP_WORDS


def is_admissible(gram: list[str]) -> bool:
    """At least half (rounded up) of an n-gram's words must be meaningful."""
    n = len(gram)
    meaningful = sum(1 for w in gram if is_meaningful(w))
    return meaningful >= (n + 1) // 2


def ngrams(words: list[str], min_n: int, max_n: int) -> list[str]:
    """
    Admissible n-grams of `words` for n in [min_n, max_n], shorter grams first,
    left to right within each length.
    """
    out: list[str] = []
    for n in range(min_n, max_n + 1):
        for i in range(len(words) - n + 1):
            gram = words[i:i + n]
            if is_admissible(gram):
                out.append(" ".join(gram))
    return out


def split_segments(text: str) -> list[str]:
    """Split a title on | – — - · • » : , and keep segments of 3+ characters."""
    parts = (p.strip() for p in _TITLE_DELIMITERS_RE.split(text or ""))
    return [p for p in parts if len(p) >= 3]
