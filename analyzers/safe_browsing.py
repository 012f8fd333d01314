"""
Safe browsing analyzer.

Two modes, chosen once per call:

- API mode, when a Safe Browsing key is configured: the URL is looked up with the
  Google Safe Browsing v4 Lookup API. A transport error, timeout, non-2xx
  response or unreadable body is reported back as a NetworkFailure and the
  caller continues in heuristic mode.
- Heuristic mode: the URL string itself is scored for phishing-style patterns
  (bare IP host, deep subdomains, very long URL, credential keywords,
  non-http schemes). No network access.

The analyzer never raises and always returns at least one check.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import SplitResult, urlsplit

import requests

from analyzers.base import BaseAnalyzer
from config import (
    MAX_SUBDOMAINS,
    MAX_URL_LENGTH,
    SAFE_BROWSING_CLIENT_ID,
    SAFE_BROWSING_CLIENT_VERSION,
    SAFE_BROWSING_ENDPOINT,
    SAFE_BROWSING_TIMEOUT,
    SUSPICIOUS_URL_KEYWORDS,
    THREAT_LABELS,
    safe_browsing_api_key,
)
from crawler.fetcher import make_session, read_bounded
from models import Check, FetchedPage, Severity, Status

logger = logging.getLogger(__name__)

_IPV4_RE = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")

FROM_ENVIRONMENT = object()


@dataclass(frozen=True)
class NetworkFailure:
    reason: str


LookupResult = Union[list[Check], NetworkFailure]


class SafeBrowsingAnalyzer(BaseAnalyzer):
    category = "safe-browsing"
    label = "Safe Browsing"

    def __init__(
        self,
        api_key=FROM_ENVIRONMENT,
        session: Optional[requests.Session] = None,
        timeout: float = SAFE_BROWSING_TIMEOUT,
    ):
        self.api_key: Optional[str] = (
            safe_browsing_api_key() if api_key is FROM_ENVIRONMENT else api_key
        )
        self.session = session
        self.timeout = timeout

    def analyze(self, page: FetchedPage) -> list[Check]:
        return self.run(page.url)

    def run(self, url: str) -> list[Check]:
        if self.api_key:
            result = self.lookup(url)
            if not isinstance(result, NetworkFailure):
                return result
            logger.warning("Safe Browsing lookup unavailable (%s); using URL heuristics", result.reason)
        return self.heuristics(url)

    # ── API mode ──────────────────────────────────────────────────────────────

    def lookup(self, url: str) -> LookupResult:
        session = self.session or make_session()
        payload = {
            "client": {
                "clientId": SAFE_BROWSING_CLIENT_ID,
                "clientVersion": SAFE_BROWSING_CLIENT_VERSION,
            },
            "threatInfo": {
                "threatTypes": list(THREAT_LABELS),
                "platformTypes": ["ANY_PLATFORM"],
                "threatEntryTypes": ["URL"],
                "threatEntries": [{"url": url}],
            },
        }

        try:
            resp = read_bounded(
                session.post,
                SAFE_BROWSING_ENDPOINT,
                self.timeout,
                params={"key": self.api_key},
                json=payload,
            )
        except requests.RequestException as exc:
            return NetworkFailure(f"{type(exc).__name__}: {exc}")

        if not 200 <= resp.status_code < 300:
            return NetworkFailure(f"Safe Browsing API returned {resp.status_code}")

        try:
            body = resp.json()
        except ValueError:
            return NetworkFailure("Safe Browsing API returned a non-JSON body")
        if not isinstance(body, dict):
            return NetworkFailure("Safe Browsing API returned an unexpected body")

        matches = body.get("matches") or []
        if not isinstance(matches, list):
            return NetworkFailure("Safe Browsing API returned an unexpected body")

        threat_types: list[str] = []
        for match in matches:
            if not isinstance(match, dict):
                continue
            threat_type = match.get("threatType") or "UNKNOWN"
            if not isinstance(threat_type, str):
                continue
            if threat_type not in threat_types:
                threat_types.append(threat_type)

        # matches were reported but none could be read: not a clean result
        if matches and not threat_types:
            return NetworkFailure("Safe Browsing API returned unreadable matches")

        if not threat_types:
            return [self.passed(
                "sb-threat-free", "Safe Browsing Status",
                "Google Safe Browsing found no threats for this URL",
                Severity.CRITICAL,
                value="No threats detected",
                learn_more="https://transparencyreport.google.com/safe-browsing/search",
            )]

        return [self._threat_check(t) for t in threat_types]

    def _threat_check(self, threat_type: str) -> Check:
        label = THREAT_LABELS.get(threat_type, threat_type)
        return self.failed(
            f"sb-threat-{threat_type.lower()}",
            f"Threat Detected: {label}",
            f"Google Safe Browsing flagged this URL as containing {label.lower()}",
            Severity.MAJOR if threat_type == "UNWANTED_SOFTWARE" else Severity.CRITICAL,
            value=label,
            recommendation=(
                f"This site is flagged by Google Safe Browsing for {label.lower()}. Browsers will "
                "show interstitial warnings and rankings will suffer. Remove the threat, then "
                "request a review at https://search.google.com/search-console/security-issues"
            ),
            learn_more="https://support.google.com/webmasters/answer/9044175",
        )

    # ── Heuristic mode ────────────────────────────────────────────────────────

    def heuristics(self, url: str) -> list[Check]:
        parsed = _parse_url(url)
        if parsed is None:
            return [self.info(
                "sb-parse-error", "URL Safety Analysis",
                "Could not parse the URL for safety analysis",
                value="Unparseable URL",
            )]

        reasons = suspicious_indicators(url, parsed)
        suspicious = len(reasons)
        is_https = parsed.scheme == "https"

        if suspicious == 0:
            status = Status.PASS
        elif suspicious == 1:
            status = Status.WARNING
        else:
            status = Status.FAIL

        return [
            self._check(
                "sb-https", "HTTPS Protocol",
                "Whether the site uses a secure HTTPS connection",
                Status.PASS if is_https else Status.FAIL,
                Severity.CRITICAL,
                value="Secure" if is_https else "Not secure (HTTP)",
                recommendation=None if is_https else (
                    "HTTPS is essential for user safety, rankings and browser trust indicators. "
                    "Install a TLS certificate and redirect all HTTP traffic to HTTPS."
                ),
                learn_more="https://web.dev/why-https-matters/",
            ),
            self._check(
                "sb-url-safety", "URL Safety Analysis",
                "Heuristic analysis of URL patterns for suspicious indicators",
                status,
                Severity.CRITICAL if suspicious >= 2 else Severity.MINOR,
                value=(
                    "No suspicious patterns" if suspicious == 0
                    else f"{suspicious} indicator{'s' if suspicious > 1 else ''}"
                ),
                details="\n".join(reasons) or None,
                recommendation=None if suspicious == 0 else (
                    "Suspicious URL patterns can trigger browser warnings or search demotion. "
                    "Make sure the domain is legitimate and follows standard URL conventions."
                ),
            ),
            self._check(
                "sb-mixed-content", "Mixed Content Risk",
                "Checks for potential mixed content issues based on protocol",
                Status.PASS if is_https else Status.WARNING,
                Severity.MAJOR,
                value="Low risk" if is_https else "High risk (HTTP site)",
                recommendation=None if is_https else (
                    "Browsers flag HTTP pages as 'Not Secure'. Serve the page and every script, "
                    "image and stylesheet over HTTPS."
                ),
                learn_more="https://web.dev/what-is-mixed-content/",
            ),
        ]


def suspicious_indicators(url: str, parsed: SplitResult) -> list[str]:
    """Human-readable reason for each triggered heuristic, in a fixed order."""
    reasons: list[str] = []
    host = parsed.hostname or ""
    lowered = url.lower()

    if _IPV4_RE.match(host):
        reasons.append("IP address used instead of domain name")

    subdomains = len(host.split(".")) - 2
    if subdomains > MAX_SUBDOMAINS:
        reasons.append(f"{subdomains} subdomains detected (possible URL obfuscation)")

    if len(url) > MAX_URL_LENGTH:
        reasons.append("Unusually long URL (possible obfuscation)")

    keywords = [kw for kw in SUSPICIOUS_URL_KEYWORDS if kw in lowered]
    if len(keywords) >= 2:
        reasons.append(f"Multiple suspicious keywords: {', '.join(keywords)}")

    if lowered.startswith(("data:", "javascript:")):
        reasons.append("Non-HTTP protocol detected")

    return reasons


def _parse_url(url: str) -> Optional[SplitResult]:
    """Split `url`, or None when it is not an absolute URL."""
    if not isinstance(url, str) or not url.strip():
        return None
    try:
        parsed = urlsplit(url.strip())
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return None

    if not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*$", parsed.scheme or ""):
        return None
    if parsed.scheme.lower() in ("http", "https") and not parsed.hostname:
        return None
    return parsed


def analyze_safe_browsing(
    url: str,
    api_key=FROM_ENVIRONMENT,
    session: Optional[requests.Session] = None,
) -> list[Check]:
    return SafeBrowsingAnalyzer(api_key=api_key, session=session).run(url)
