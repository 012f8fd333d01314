"""
Runs every analyzer family and keyword discovery over one fetched page and
assembles the scored AuditReport.

The analyzers share no state, so they are fanned out on a thread pool; the
audit takes as long as the slowest one (normally the Safe Browsing lookup).
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Optional

import requests

from analyzers.base import BaseAnalyzer
from analyzers.robots_sitemap import RobotsSitemapAnalyzer
from analyzers.safe_browsing import FROM_ENVIRONMENT, SafeBrowsingAnalyzer
from analyzers.security import SecurityHeadersAnalyzer
from analyzers.technical import TechnicalAnalyzer
from crawler.fetcher import fetch_page, make_session
from crawler.guard import RateLimiter
from keywords.discovery import discover_page_keywords
from models import AuditReport, Category, FetchedPage, RateLimitExceeded
from scoring.scorer import calculate_overall_score, score_category

logger = logging.getLogger(__name__)


def build_analyzers(
    session: Optional[requests.Session] = None,
    api_key=FROM_ENVIRONMENT,
) -> list[BaseAnalyzer]:
    return [
        TechnicalAnalyzer(),
        SecurityHeadersAnalyzer(),
        RobotsSitemapAnalyzer(session=session),
        SafeBrowsingAnalyzer(api_key=api_key, session=session),
    ]


def run_audit(
    page: FetchedPage,
    progress_callback: Optional[Callable[[dict], None]] = None,
    session: Optional[requests.Session] = None,
    api_key=FROM_ENVIRONMENT,
    analyzers: Optional[list[BaseAnalyzer]] = None,
) -> AuditReport:
    """
    Audit an already-fetched page. Never raises because of an analyzer: one
    that crashes is logged and reported as an empty category.
    """
    report = AuditReport(url=page.url, started_at=datetime.now())
    analyzers = analyzers if analyzers is not None else build_analyzers(session, api_key)

    _emit(progress_callback, f"Running {len(analyzers)} analyzers…", 0)

    with ThreadPoolExecutor(max_workers=len(analyzers) + 1) as pool:
        futures = [(a, pool.submit(a.analyze, page)) for a in analyzers]
        keyword_future = pool.submit(discover_page_keywords, page)

        categories: list[Category] = []
        for idx, (analyzer, future) in enumerate(futures, start=1):
            try:
                checks = future.result()
            except Exception:
                # Never let one analyzer crash the whole audit
                logger.exception("%s failed on %s", type(analyzer).__name__, page.url)
                checks = []
            categories.append(score_category(analyzer.category, analyzer.label, checks))
            _emit(progress_callback, f"{analyzer.label} done", int(idx / len(futures) * 90))

        try:
            report.keywords = keyword_future.result()
        except Exception:
            logger.exception("Keyword discovery failed on %s", page.url)
            report.keywords = []

    report.categories = categories
    report.overall_score = calculate_overall_score(categories)
    report.finished_at = datetime.now()

    _emit(progress_callback, "Audit complete.", 100)
    return report


def audit_url(
    url: str,
    progress_callback: Optional[Callable[[dict], None]] = None,
    session: Optional[requests.Session] = None,
    api_key=FROM_ENVIRONMENT,
    limiter: Optional[RateLimiter] = None,
    client_key: str = "anonymous",
) -> AuditReport:
    """
    Fetch `url` and audit it. Raises RateLimitExceeded, ForbiddenTargetError
    or PageFetchError before any analysis starts.
    """
    if limiter is not None and not limiter.allow(client_key):
        raise RateLimitExceeded(f"Too many requests from {client_key!r}; try again later")

    session = session or make_session()
    _emit(progress_callback, f"Fetching {url}…", 0)
    page = fetch_page(url, session)
    return run_audit(page, progress_callback, session=session, api_key=api_key)


def _emit(callback, message: str, pct: int) -> None:
    if callback:
        try:
            callback({"message": message, "pct": pct})
        except Exception:
            logger.debug("progress callback raised", exc_info=True)
