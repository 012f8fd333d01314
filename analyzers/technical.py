"""
Technical SEO analyzer: HTTPS, status code, TTFB, viewport, favicon, social tags,
language, meta robots, charset, resource count and render-blocking resources.

Always returns the same 12 checks, in the same order.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from bs4 import BeautifulSoup, Tag

from analyzers.base import BaseAnalyzer
from config import (
    RENDER_BLOCKING_FAIL,
    RENDER_BLOCKING_WARNING,
    RESOURCE_COUNT_FAIL,
    RESOURCE_COUNT_WARNING,
    TTFB_GOOD_MS,
    TTFB_SLOW_MS,
)
from crawler.parser import meta_content, rel_of, stylesheet_links
from models import Check, FetchedPage, Severity, Status


class TechnicalAnalyzer(BaseAnalyzer):
    category = "technical"
    label = "Technical SEO"

    def analyze(self, page: FetchedPage) -> list[Check]:
        return self.run(page.soup, page.url, page.status_code, page.headers, page.fetch_time_ms)

    def run(
        self,
        soup: BeautifulSoup,
        url: str,
        http_status: int,
        headers: Optional[Mapping],
        fetch_time_ms: float,
    ) -> list[Check]:
        return [
            self._check_https(url),
            self._check_http_status(http_status),
            self._check_ttfb(fetch_time_ms),
            self._check_viewport(soup),
            self._check_favicon(soup),
            self._check_open_graph(soup, url),
            self._check_twitter_card(soup),
            self._check_lang(soup),
            self._check_meta_robots(soup),
            self._check_charset(soup),
            self._check_resource_count(soup),
            self._check_render_blocking(soup),
        ]

    # ── Transport ─────────────────────────────────────────────────────────────

    def _check_https(self, url: str) -> Check:
        is_https = (url or "").lower().startswith("https")
        return self._check(
            "https", "HTTPS Encryption",
            "Sites should use HTTPS for security and SEO ranking benefit.",
            Status.PASS if is_https else Status.FAIL,
            Severity.CRITICAL,
            value="Secure (HTTPS)" if is_https else "Not secure (HTTP)",
            recommendation=(
                "Your site uses HTTPS encryption. Keep the certificate valid and auto-renewing."
                if is_https else
                "Migrate to HTTPS. Browsers mark HTTP sites as 'Not Secure' and Google uses HTTPS "
                "as a ranking signal. Install a certificate and 301-redirect all HTTP traffic to HTTPS."
            ),
            learn_more="https://developers.google.com/search/docs/crawling-indexing/https",
        )

    def _check_http_status(self, http_status: int) -> Check:
        ok = http_status == 200
        return self._check(
            "http-status", "HTTP Status Code",
            "Pages should return a 200 OK status code.",
            Status.PASS if ok else Status.FAIL,
            Severity.CRITICAL,
            value=str(http_status),
            expected="200",
            recommendation=(
                "Page returns 200 OK and can be indexed normally."
                if ok else
                f"Your page returned status {http_status}. A 200 status is required for indexing. "
                "Check server configuration, rewrite rules and redirect chains; a 301/302 may "
                "indicate an unintended redirect."
            ),
            learn_more="https://developers.google.com/search/docs/crawling-indexing/http-network-errors",
        )

    def _check_ttfb(self, fetch_time_ms: float) -> Check:
        ms = fetch_time_ms or 0
        if ms <= TTFB_GOOD_MS:
            status = Status.PASS
        elif ms <= TTFB_SLOW_MS:
            status = Status.WARNING
        else:
            status = Status.FAIL

        return self._check(
            "response-time", "Server Response Time (TTFB)",
            f"Time to first byte should be under {TTFB_GOOD_MS}ms for optimal performance.",
            status,
            Severity.MAJOR if ms > TTFB_SLOW_MS else Severity.MINOR,
            value=f"{round(ms)}ms",
            expected=f"< {TTFB_GOOD_MS}ms",
            recommendation=(
                f"Excellent server response time at {round(ms)}ms."
                if status == Status.PASS else
                f"Your server took {round(ms)}ms to respond. Serve from a CDN, enable server-side "
                "caching, optimise slow database queries, or upgrade hosting."
            ),
            learn_more="https://web.dev/articles/ttfb",
        )

    # ── Head tags ─────────────────────────────────────────────────────────────

    def _check_viewport(self, soup: BeautifulSoup) -> Check:
        viewport = meta_content(soup, name="viewport")
        return self._check(
            "viewport", "Viewport Meta Tag",
            "The viewport meta tag is required for mobile-responsive design.",
            Status.PASS if viewport else Status.FAIL,
            Severity.CRITICAL,
            value="Set" if viewport else "(missing)",
            recommendation=(
                "Viewport meta tag is set for mobile responsiveness."
                if viewport else
                "Add a viewport meta tag. Without it mobile browsers render the page at desktop "
                "width, hurting usability and mobile rankings."
            ),
            snippet=None if viewport else '<meta name="viewport" content="width=device-width, initial-scale=1" />',
            learn_more="https://web.dev/articles/responsive-web-design-basics",
        )

    def _check_favicon(self, soup: BeautifulSoup) -> Check:
        favicon = ""
        for link in soup.find_all("link", href=True):
            if rel_of(link) in ("icon", "shortcut icon"):
                favicon = link.get("href", "").strip()
                break

        return self._check(
            "favicon", "Favicon",
            "A favicon improves brand recognition in browser tabs and bookmarks.",
            Status.PASS if favicon else Status.WARNING,
            Severity.MINOR,
            value="Found" if favicon else "(missing)",
            recommendation=(
                "Favicon is set. Consider adding an apple-touch-icon as well."
                if favicon else
                "Add a 32x32 PNG or ICO favicon. Google also shows favicons in mobile results."
            ),
            snippet=None if favicon else (
                '<link rel="icon" type="image/png" href="/favicon.png" sizes="32x32" />\n'
                '<link rel="apple-touch-icon" href="/apple-touch-icon.png" />'
            ),
            learn_more="https://developers.google.com/search/docs/appearance/favicon-in-search",
        )

    def _check_open_graph(self, soup: BeautifulSoup, url: str) -> Check:
        og_title = meta_content(soup, prop="og:title")
        og_image = meta_content(soup, prop="og:image")

        if og_title and og_image:
            status = Status.PASS
        elif og_title or og_image:
            status = Status.WARNING
        else:
            status = Status.FAIL

        missing = [name for name, v in (("og:title", og_title), ("og:image", og_image)) if not v]
        return self._check(
            "open-graph", "Open Graph Tags",
            "Open Graph meta tags control how your page appears when shared on social media.",
            status,
            Severity.MAJOR,
            value=f"Title: {og_title[:50]}…" if og_title else "(missing)",
            recommendation=(
                "Open Graph tags are configured for social sharing."
                if not missing else
                f"Missing {' and '.join(missing)}. Shared links will not show a rich preview. "
                "Add at least og:title, og:description and og:image (1200x630px)."
            ),
            snippet=None if og_title else (
                '<meta property="og:title" content="Your Page Title" />\n'
                '<meta property="og:description" content="Your page description" />\n'
                '<meta property="og:image" content="https://yoursite.com/og-image.jpg" />\n'
                f'<meta property="og:url" content="{url}" />'
            ),
            learn_more="https://ogp.me/",
        )

    def _check_twitter_card(self, soup: BeautifulSoup) -> Check:
        card = meta_content(soup, name="twitter:card") or meta_content(soup, prop="twitter:card")
        return self._check(
            "twitter-card", "Twitter Card Tags",
            "Twitter card meta tags enable rich previews when your page is shared on X/Twitter.",
            Status.PASS if card else Status.WARNING,
            Severity.MINOR,
            value=card or "(missing)",
            recommendation=(
                f"Twitter card type '{card}' is set."
                if card else
                "Add Twitter card tags. X falls back to Open Graph tags, but dedicated tags "
                "give you control; 'summary_large_image' has the most visual impact."
            ),
            snippet=None if card else (
                '<meta name="twitter:card" content="summary_large_image" />\n'
                '<meta name="twitter:title" content="Your Title" />\n'
                '<meta name="twitter:image" content="https://yoursite.com/twitter-image.jpg" />'
            ),
            learn_more="https://developer.x.com/en/docs/twitter-for-websites/cards/overview/abouts-cards",
        )

    def _check_lang(self, soup: BeautifulSoup) -> Check:
        html = soup.find("html")
        lang = (html.get("lang") or "").strip() if isinstance(html, Tag) else ""
        return self._check(
            "html-lang", "HTML Language Attribute",
            "The lang attribute tells search engines and assistive technology the content language.",
            Status.PASS if lang else Status.FAIL,
            Severity.MAJOR,
            value=lang or "(missing)",
            recommendation=(
                f"Language set to '{lang}'. Multilingual sites should also use hreflang."
                if lang else
                "Add a lang attribute to the <html> tag so the page reaches the right audience."
            ),
            snippet=None if lang else '<html lang="en">',
            learn_more="https://developer.mozilla.org/en-US/docs/Web/HTML/Global_attributes/lang",
        )

    def _check_meta_robots(self, soup: BeautifulSoup) -> Check:
        robots = meta_content(soup, name="robots")
        lowered = robots.lower()
        noindex = "noindex" in lowered
        blocking = noindex or "nofollow" in lowered

        return self._check(
            "meta-robots", "Meta Robots Directive",
            "Ensure the meta robots tag isn't accidentally blocking search engines.",
            Status.WARNING if blocking else Status.PASS,
            Severity.CRITICAL if blocking else Severity.INFO,
            value=robots or "Not set (defaults to index, follow)",
            recommendation=(
                f"The meta robots tag contains '{robots}', which blocks search engines from "
                f"{'indexing' if noindex else 'following links on'} this page. Remove the "
                "directive unless this is intentional."
                if blocking else
                "No blocking robots directives found."
            ),
            learn_more="https://developers.google.com/search/docs/crawling-indexing/robots-meta-tag",
        )

    def _check_charset(self, soup: BeautifulSoup) -> Check:
        charset = ""
        meta = soup.find("meta", charset=True)
        if meta is not None:
            charset = (meta.get("charset") or "").strip()
        if not charset:
            charset = meta_content(soup, http_equiv="content-type")

        is_utf8 = "utf-8" in charset.lower()
        if is_utf8:
            status = Status.PASS
        elif charset:
            status = Status.WARNING
        else:
            status = Status.FAIL

        if not charset:
            recommendation = "Declare UTF-8 as the first element in <head>."
        elif not is_utf8:
            recommendation = f"The page declares '{charset}'. Switch to UTF-8."
        else:
            recommendation = "UTF-8 encoding is correctly declared."

        return self._check(
            "charset", "Character Encoding",
            "Pages should declare UTF-8 character encoding to prevent display issues.",
            status,
            Severity.MINOR,
            value=charset or "(missing)",
            expected="UTF-8",
            recommendation=recommendation,
            snippet=None if charset else '<meta charset="UTF-8" />',
            learn_more="https://developer.mozilla.org/en-US/docs/Web/HTML/Element/meta#charset",
        )

    # ── Resources ─────────────────────────────────────────────────────────────

    def _check_resource_count(self, soup: BeautifulSoup) -> Check:
        scripts = len(soup.find_all("script"))
        styles = len(stylesheet_links(soup)) + len(soup.find_all("style"))
        total = scripts + styles

        if total > RESOURCE_COUNT_FAIL:
            status = Status.FAIL
        elif total > RESOURCE_COUNT_WARNING:
            status = Status.WARNING
        else:
            status = Status.PASS

        return self._check(
            "resource-count", "Resource Count",
            f"Too many scripts and stylesheets slow page loading. Keep total under {RESOURCE_COUNT_WARNING}.",
            status,
            Severity.MAJOR if total > RESOURCE_COUNT_FAIL else Severity.MINOR,
            value=f"{scripts} scripts, {styles} styles ({total} total)",
            expected=f"< {RESOURCE_COUNT_WARNING} total resources",
            recommendation=(
                f"Resource count ({total}) is within acceptable limits."
                if status == Status.PASS else
                f"The page loads {total} resources. Bundle JS/CSS, drop unused plugins and "
                "lazy-load non-critical resources."
            ),
            learn_more="https://web.dev/articles/resource-loading-optimization",
        )

    def _check_render_blocking(self, soup: BeautifulSoup) -> Check:
        blocking = count_render_blocking(soup)

        if blocking > RENDER_BLOCKING_FAIL:
            status = Status.FAIL
        elif blocking > RENDER_BLOCKING_WARNING:
            status = Status.WARNING
        else:
            status = Status.PASS

        return self._check(
            "render-blocking", "Render-Blocking Resources",
            "Synchronous scripts and stylesheets block page rendering, causing slow visual load.",
            status,
            Severity.MAJOR if blocking > RENDER_BLOCKING_FAIL else Severity.MINOR,
            value=f"{blocking} render-blocking resource(s)",
            expected=f"≤ {RENDER_BLOCKING_WARNING}",
            recommendation=(
                "Render-blocking resources are minimal."
                if status == Status.PASS else
                f"{blocking} resources block rendering. Add async or defer to scripts, inline "
                "critical CSS and use media=\"print\" for print-only stylesheets."
            ),
            snippet=None if status == Status.PASS else (
                "<!-- Instead of: -->\n<script src=\"app.js\"></script>\n\n"
                "<!-- Use: -->\n<script src=\"app.js\" defer></script>"
            ),
            learn_more="https://web.dev/articles/render-blocking-resources",
        )


def analyze_technical(
    soup: BeautifulSoup,
    url: str,
    http_status: int,
    headers: Optional[Mapping],
    fetch_time_ms: float,
) -> list[Check]:
    return TechnicalAnalyzer().run(soup, url, http_status, headers, fetch_time_ms)


def count_render_blocking(soup: BeautifulSoup) -> int:
    """Synchronous external scripts plus non-print stylesheets."""
    count = 0
    for script in soup.find_all("script", src=True):
        if not script.has_attr("async") and not script.has_attr("defer"):
            count += 1
    for link in stylesheet_links(soup):
        if (link.get("media") or "").strip().lower() != "print":
            count += 1
    return count
