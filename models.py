"""
Core data models for the page audit engine.
All modules import from here; nothing else is cross-imported at this level.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from bs4 import BeautifulSoup
from requests.structures import CaseInsensitiveDict


# ── Status / Severity ─────────────────────────────────────────────────────────
class Status:
    PASS    = "pass"
    FAIL    = "fail"
    WARNING = "warning"
    INFO    = "info"

    ALL = [PASS, FAIL, WARNING, INFO]

    # Display / sort order: problems first
    ORDER = {FAIL: 0, WARNING: 1, INFO: 2, PASS: 3}


class Severity:
    CRITICAL = "critical"
    MAJOR    = "major"
    MINOR    = "minor"
    INFO     = "info"

    ALL = [CRITICAL, MAJOR, MINOR, INFO]

    ORDER = {CRITICAL: 0, MAJOR: 1, MINOR: 2, INFO: 3}


class KeywordSource:
    TITLE = "title"
    META  = "meta"
    H1    = "h1"
    H2    = "h2"
    H3    = "h3"
    BODY  = "body"

    ALL = [TITLE, META, H1, H2, H3, BODY]


# ── Headers ───────────────────────────────────────────────────────────────────

def as_header_map(headers: Optional[Mapping]) -> CaseInsensitiveDict:
    if isinstance(headers, CaseInsensitiveDict):
        return headers
    return CaseInsensitiveDict(headers or {})


def get_header(headers: Optional[Mapping], name: str) -> str:
    """Case-insensitive header lookup; returns "" when the header is absent."""
    value = as_header_map(headers).get(name)
    return (value or "").strip() if isinstance(value, str) else ""


# ── Check ─────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Check:
    id: str
    title: str
    description: str
    status: str            # Status.*
    severity: str          # Severity.*
    value: Optional[Union[str, int, float]] = None
    expected: Optional[str] = None
    details: Optional[str] = None
    recommendation: Optional[str] = None
    code_snippet: Optional[str] = None
    learn_more_url: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == Status.PASS


# ── Category ──────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Category:
    name: str
    label: str
    checks: tuple[Check, ...] = ()
    score: int = 100

    @property
    def pass_count(self) -> int:
        return sum(1 for c in self.checks if c.status == Status.PASS)

    @property
    def fail_count(self) -> int:
        return sum(1 for c in self.checks if c.status == Status.FAIL)

    @property
    def warning_count(self) -> int:
        return sum(1 for c in self.checks if c.status == Status.WARNING)

    @property
    def info_count(self) -> int:
        return sum(1 for c in self.checks if c.status == Status.INFO)

    @property
    def is_info_only(self) -> bool:
        return all(c.status == Status.INFO for c in self.checks)


# ── Keywords ──────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class DiscoveredKeyword:
    phrase: str
    score: int
    source: str            # KeywordSource.*


# ── Auxiliary resources ───────────────────────────────────────────────────────
@dataclass
class RobotsData:
    url: str
    found: bool = False
    status_code: int = 0
    raw_text: str = ""
    sitemap_urls: list[str] = field(default_factory=list)
    disallow_rules: list[dict] = field(default_factory=list)  # [{agent, path}]
    error: Optional[str] = None


@dataclass
class SitemapData:
    url: str
    found: bool = False
    status_code: int = 0
    is_index: bool = False
    url_count: int = 0
    error: Optional[str] = None


# ── Fetched page (input bundle) ───────────────────────────────────────────────
@dataclass
class FetchedPage:
    url: str                                   # final resolved URL
    soup: BeautifulSoup
    status_code: int = 200
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    fetch_time_ms: float = 0.0

    def __post_init__(self):
        self.headers = as_header_map(self.headers)

    @classmethod
    def from_html(
        cls,
        html: str,
        url: str,
        status_code: int = 200,
        headers: Optional[Mapping] = None,
        fetch_time_ms: float = 0.0,
    ) -> "FetchedPage":
        return cls(
            url=url,
            soup=parse_html(html),
            status_code=status_code,
            headers=as_header_map(headers),
            fetch_time_ms=fetch_time_ms,
        )


def parse_html(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html or "", "lxml")
    except Exception:
        return BeautifulSoup(html or "", "html.parser")


# ── Top-level audit result ─────────────────────────────────────────────────────
@dataclass
class AuditReport:
    url: str
    categories: list[Category] = field(default_factory=list)
    overall_score: int = 0
    keywords: list[DiscoveredKeyword] = field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return 0.0

    @property
    def all_checks(self) -> list[Check]:
        return [check for cat in self.categories for check in cat.checks]

    def category(self, name: str) -> Optional[Category]:
        for cat in self.categories:
            if cat.name == name:
                return cat
        return None


# ── Errors ────────────────────────────────────────────────────────────────────
class AuditError(Exception):
    """Base class for errors raised outside the analyzer boundary."""


class PageFetchError(AuditError):
    pass


class ForbiddenTargetError(AuditError):
    pass


class RateLimitExceeded(AuditError):
    pass
