"""
Global configuration constants for the page audit engine.
All tunable thresholds live here.
"""

import os
from typing import Optional

# ── Technical thresholds ──────────────────────────────────────────────────────
TTFB_GOOD_MS = 200
TTFB_SLOW_MS = 500
RESOURCE_COUNT_WARNING = 30
RESOURCE_COUNT_FAIL = 40
RENDER_BLOCKING_WARNING = 2
RENDER_BLOCKING_FAIL = 5

# ── Auxiliary fetches ─────────────────────────────────────────────────────────
ROBOTS_FETCH_TIMEOUT = 5            # seconds
SITEMAP_FETCH_TIMEOUT = 5           # seconds
SAFE_BROWSING_TIMEOUT = 8           # seconds
PAGE_FETCH_TIMEOUT = 10             # seconds

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# ── Safe Browsing ─────────────────────────────────────────────────────────────
SAFE_BROWSING_ENDPOINT = "https://safebrowsing.googleapis.com/v4/threatMatches:find"
SAFE_BROWSING_CLIENT_ID = "page-audit-engine"
SAFE_BROWSING_CLIENT_VERSION = "1.0.0"
SAFE_BROWSING_API_KEY_ENV = "SAFE_BROWSING_API_KEY"

THREAT_LABELS: dict[str, str] = {
    "MALWARE": "Malware",
    "SOCIAL_ENGINEERING": "Phishing / Social Engineering",
    "UNWANTED_SOFTWARE": "Unwanted Software",
    "POTENTIALLY_HARMFUL_APPLICATION": "Potentially Harmful App",
}

SUSPICIOUS_URL_KEYWORDS = [
    "login", "signin", "verify", "account", "update", "secure", "banking",
]
MAX_SUBDOMAINS = 3
MAX_URL_LENGTH = 500

# ── Keyword discovery ─────────────────────────────────────────────────────────
MAX_DISCOVERED_KEYWORDS = 20
MIN_SINGLE_WORD_SCORE = 8
MAX_BODY_PHRASE_WEIGHT = 5
H2_MAX_CHARS = 80
H3_MAX_CHARS = 60

# Source weights: (whole-text weight, n-gram weight)
KEYWORD_WEIGHTS: dict[str, tuple[int, int]] = {
    "title": (10, 8),
    "h1":    (9, 7),
    "meta":  (8, 6),   # meta keywords entry / meta description n-gram
    "h2":    (5, 4),
    "h3":    (3, 2),
    "slug":  (4, 4),
}

# ── Scoring ───────────────────────────────────────────────────────────────────
# Deduction for a failed check; warnings deduct half (rounded down).
SEVERITY_PENALTIES: dict[str, int] = {
    "critical": 15,
    "major":    10,
    "minor":     5,
    "info":      0,
}

CATEGORY_WEIGHTS: dict[str, float] = {
    "technical":      0.15,
    "security":       0.06,
    "robots-sitemap": 0.06,
    "safe-browsing":  0.05,
}

# ── Fetch guard ───────────────────────────────────────────────────────────────
FORBIDDEN_TARGET_PATTERNS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "192.168.",
    "10.",
    "172.16.",
    "metadata.google.internal",
]

RATE_LIMIT_MAX_REQUESTS = 10
RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_PURGE_THRESHOLD = 1000


def safe_browsing_api_key() -> Optional[str]:
    """Return the reputation-lookup key, or None to run heuristics only."""
    key = os.environ.get(SAFE_BROWSING_API_KEY_ENV, "").strip()
    return key or None
