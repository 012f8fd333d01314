"""
Fetches an XML sitemap (urlset or sitemap index) and counts its entries.
"""
from __future__ import annotations

import gzip
import logging

import requests
from lxml import etree

from config import SITEMAP_FETCH_TIMEOUT
from crawler.fetcher import BoundedResponse, read_bounded
from models import SitemapData

logger = logging.getLogger(__name__)

_SM_NS = "{http://www.sitemaps.org/schemas/sitemap/0.9}"


def fetch_sitemap(
    url: str,
    session: requests.Session,
    timeout: float = SITEMAP_FETCH_TIMEOUT,
) -> SitemapData:
    """
    Fetch `url` once (child sitemaps of an index are not followed).
    Found requires a <urlset or <sitemapindex root in the body. Never raises.
    """
    data = SitemapData(url=url)

    try:
        resp = read_bounded(session.get, url, timeout, allow_redirects=True)
        data.status_code = resp.status_code
        if not 200 <= resp.status_code < 300:
            return data

        raw = _decompress_if_gzip(resp)
        data.found = "<urlset" in raw or "<sitemapindex" in raw
        data.is_index = "<sitemapindex" in raw
        if data.found:
            data.url_count = _count_locations(raw, data)
    except requests.RequestException as exc:
        data.error = f"Could not fetch sitemap {url!r}: {exc}"
        logger.debug("sitemap fetch failed for %s: %s", url, exc)

    return data


def _decompress_if_gzip(resp: BoundedResponse) -> str:
    """Return the response body as a string, decompressing gzip if needed."""
    content_type = resp.headers.get("content-type", "")

    if (resp.url or "").endswith(".gz") or "gzip" in content_type:
        try:
            return gzip.decompress(resp.content).decode("utf-8", errors="replace")
        except (OSError, EOFError):
            pass  # already transparently decoded by requests

    return resp.text or ""


def _count_locations(raw: str, data: SitemapData) -> int:
    try:
        root = etree.fromstring(raw.encode("utf-8"))
    except etree.XMLSyntaxError as exc:
        data.error = f"XML parse error: {exc}"
        return 0

    entry = "sitemap" if data.is_index else "url"
    count = 0
    for elem in root.iter(f"{_SM_NS}{entry}", entry):
        loc = elem.find(f"{_SM_NS}loc")
        if loc is None:
            loc = elem.find("loc")
        if loc is not None and (loc.text or "").strip():
            count += 1
    return count
