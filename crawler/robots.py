"""
Fetches and parses robots.txt for the audited origin.
"""
from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

import requests

from config import ROBOTS_FETCH_TIMEOUT
from crawler.fetcher import read_bounded
from models import RobotsData

logger = logging.getLogger(__name__)

_SITEMAP_REF_RE = re.compile(r"Sitemap:", re.IGNORECASE)


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def fetch_robots(
    url: str,
    session: requests.Session,
    timeout: float = ROBOTS_FETCH_TIMEOUT,
) -> RobotsData:
    """
    Fetch {origin}/robots.txt once. Never raises: timeouts and transport errors
    leave `found` False and are recorded in `error`.
    """
    robots_url = f"{origin_of(url)}/robots.txt"
    data = RobotsData(url=robots_url)

    try:
        resp = read_bounded(session.get, robots_url, timeout, allow_redirects=True)
        data.status_code = resp.status_code
        if 200 <= resp.status_code < 300:
            data.raw_text = resp.text or ""
            # a 200 that is not a robots file (soft 404 page, etc.) does not count
            data.found = "user-agent" in data.raw_text.lower()
            if data.found:
                _parse_robots(data)
    except requests.RequestException as exc:
        data.error = f"Failed to fetch robots.txt: {exc}"
        logger.debug("robots.txt fetch failed for %s: %s", robots_url, exc)

    return data


def _parse_robots(data: RobotsData) -> None:
    """Collect Disallow rules and Sitemap directives."""
    current_agents: list[str] = []
    in_rules = False

    for raw_line in data.raw_text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue

        directive, _, value = line.partition(":")
        directive = directive.strip().lower()
        value = value.strip()

        if directive == "user-agent":
            if in_rules:
                current_agents = []
                in_rules = False
            current_agents.append(value)
        elif directive == "disallow":
            in_rules = True
            for agent in current_agents:
                data.disallow_rules.append({"agent": agent, "path": value})
        elif directive == "allow":
            in_rules = True
        elif directive == "sitemap" and value:
            data.sitemap_urls.append(value)


def has_broad_disallow(raw_text: str) -> bool:
    """
    True when the file contains a "Disallow: /" directive and no bare
    "Disallow: /" line terminated by a newline.
    """
    return "Disallow: /" in raw_text and "Disallow: /\n" not in raw_text


def references_sitemap(raw_text: str) -> bool:
    return bool(_SITEMAP_REF_RE.search(raw_text or ""))

