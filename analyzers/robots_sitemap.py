"""
Robots.txt & sitemap analyzer: fetches robots.txt and the sitemap it points to
(or /sitemap.xml), and checks that robots.txt references the sitemap.

Always returns 3 checks. Fetch failures and timeouts count as "not found".
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

import requests

from analyzers.base import BaseAnalyzer
from config import ROBOTS_FETCH_TIMEOUT, SITEMAP_FETCH_TIMEOUT
from crawler.fetcher import make_session
from crawler.robots import (
    fetch_robots,
    has_broad_disallow,
    origin_of,
    references_sitemap,
)
from crawler.sitemap import fetch_sitemap
from models import Check, FetchedPage, RobotsData, Severity, SitemapData, Status

logger = logging.getLogger(__name__)


class RobotsSitemapAnalyzer(BaseAnalyzer):
    category = "robots-sitemap"
    label = "Robots & Sitemap"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        robots_timeout: float = ROBOTS_FETCH_TIMEOUT,
        sitemap_timeout: float = SITEMAP_FETCH_TIMEOUT,
    ):
        self.session = session
        self.robots_timeout = robots_timeout
        self.sitemap_timeout = sitemap_timeout

    def analyze(self, page: FetchedPage) -> list[Check]:
        return self.run(page.url)

    def run(self, url: str) -> list[Check]:
        session = self.session or make_session()
        try:
            origin = origin_of(url)
        except ValueError:
            origin = ""

        if origin.startswith(("http://", "https://")):
            robots = fetch_robots(url, session, self.robots_timeout)
            sitemap_url = robots.sitemap_urls[0] if robots.sitemap_urls else f"{origin}/sitemap.xml"
            sitemap = fetch_sitemap(sitemap_url, session, self.sitemap_timeout)
        else:
            logger.debug("Skipping robots/sitemap fetch for non-http URL %r", url)
            robots = RobotsData(url="", error="URL has no http(s) origin")
            sitemap = SitemapData(url="", error="URL has no http(s) origin")

        return [
            self._check_robots(robots, origin),
            self._check_sitemap(sitemap, origin),
            self._check_sitemap_reference(robots, origin),
        ]

    def _check_robots(self, robots: RobotsData, origin: str) -> Check:
        title = "Robots.txt"
        description = "A valid robots.txt helps search engines crawl your site efficiently."
        learn_more = "https://developers.google.com/search/docs/crawling-indexing/robots/create-robots-txt"

        if not robots.found:
            return self.failed(
                "rs-robots", title, description, Severity.MAJOR,
                value="(not found or invalid)",
                details=robots.error,
                recommendation=(
                    "Create a robots.txt at your site root. It tells crawlers which pages to "
                    "skip and where your sitemap is."
                ),
                snippet=(
                    "# robots.txt (place at site root)\n"
                    "User-agent: *\nAllow: /\nDisallow: /admin/\nDisallow: /api/\n\n"
                    f"Sitemap: {origin}/sitemap.xml"
                ),
                learn_more=learn_more,
            )

        if has_broad_disallow(robots.raw_text):
            blocked = [r["path"] for r in robots.disallow_rules if r["path"]]
            return self.warning(
                "rs-robots", title, description, Severity.CRITICAL,
                value="Contains broad blocking rules",
                details="\n".join(f"Disallow: {p}" for p in blocked[:10]) or None,
                recommendation=(
                    "robots.txt contains broad Disallow rules that may hide important pages. "
                    "Review each rule and validate the file in Google Search Console."
                ),
                learn_more=learn_more,
            )

        return self.passed(
            "rs-robots", title, description, Severity.INFO,
            value="Valid",
            recommendation="robots.txt is valid and not blocking important content.",
            learn_more=learn_more,
        )

    def _check_sitemap(self, sitemap: SitemapData, origin: str) -> Check:
        title = "XML Sitemap"
        description = (
            "An XML sitemap helps search engines discover all your pages, "
            "especially new or deeply nested ones."
        )
        learn_more = "https://developers.google.com/search/docs/crawling-indexing/sitemaps/build-sitemap"

        if sitemap.found:
            kind = "sitemap index entries" if sitemap.is_index else "URLs"
            return self.passed(
                "rs-sitemap", title, description, Severity.MAJOR,
                value=sitemap.url,
                details=f"{sitemap.url_count} {kind} listed",
                recommendation=(
                    "XML sitemap found. Submit it to Google Search Console and keep it "
                    "up to date as pages are added."
                ),
                learn_more=learn_more,
            )

        today = date.today().isoformat()
        return self.failed(
            "rs-sitemap", title, description, Severity.MAJOR,
            value="(not found)",
            details=sitemap.error,
            recommendation=(
                "Create an XML sitemap listing all important pages and submit it to Google "
                "Search Console. Most CMS platforms can generate one automatically."
            ),
            snippet=(
                '<?xml version="1.0" encoding="UTF-8"?>\n'
                '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
                f"  <url>\n    <loc>{origin}/</loc>\n    <lastmod>{today}</lastmod>\n  </url>\n"
                "</urlset>"
            ),
            learn_more=learn_more,
        )

    def _check_sitemap_reference(self, robots: RobotsData, origin: str) -> Check:
        title = "Sitemap Reference in Robots.txt"
        description = "Referencing your sitemap in robots.txt helps search engines find it automatically."
        learn_more = (
            "https://developers.google.com/search/docs/crawling-indexing/sitemaps/build-sitemap#addsitemap"
        )

        if references_sitemap(robots.raw_text):
            return self.passed(
                "rs-sitemap-ref", title, description, Severity.MINOR,
                value="Referenced",
                recommendation="robots.txt references your sitemap location.",
                learn_more=learn_more,
            )

        if robots.found:
            return self.warning(
                "rs-sitemap-ref", title, description, Severity.MINOR,
                value="(not referenced)",
                recommendation="Add a Sitemap directive to robots.txt pointing to your XML sitemap.",
                snippet=f"# Add this line to your robots.txt:\nSitemap: {origin}/sitemap.xml",
                learn_more=learn_more,
            )

        return self.info(
            "rs-sitemap-ref", title, description, Severity.MINOR,
            value="(not referenced)",
            recommendation="Create a robots.txt first, then add a Sitemap reference.",
            learn_more=learn_more,
        )


def analyze_robots_sitemap(url: str, session: Optional[requests.Session] = None) -> list[Check]:
    return RobotsSitemapAnalyzer(session=session).run(url)
