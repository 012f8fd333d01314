"""
Security headers analyzer: presence checks over seven HTTP response headers.

Each rule is looked up independently; there is no cross-header logic.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable, Optional

from analyzers.base import BaseAnalyzer
from models import Check, FetchedPage, Severity, Status, as_header_map, get_header


@dataclass(frozen=True)
class _HeaderRule:
    check_id: str
    headers: tuple[str, ...]         # first non-empty wins
    title: str
    description: str
    severity: str
    missing_status: str
    missing_advice: str
    present_advice: Callable[[str], str]
    snippet: str
    learn_more: str
    show_length: bool = False        # long values are summarised as "Set (N chars)"


def _nginx_apache(header: str, value: str) -> str:
    return (
        f'# Nginx:\nadd_header {header} "{value}" always;\n\n'
        f'# Apache:\nHeader always set {header} "{value}"'
    )


_MDN = "https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/"

RULES: tuple[_HeaderRule, ...] = (
    _HeaderRule(
        check_id="sec-hsts",
        headers=("strict-transport-security",),
        title="HTTP Strict Transport Security (HSTS)",
        description="HSTS forces browsers to always use HTTPS, preventing downgrade attacks.",
        severity=Severity.CRITICAL,
        missing_status=Status.FAIL,
        missing_advice=(
            "Without HSTS, browsers can still reach your site over HTTP, which leaves room for "
            "man-in-the-middle attacks. Start with a short max-age and raise it once confirmed working."
        ),
        present_advice=lambda v: (
            "HSTS is configured with subdomain coverage."
            if "includesubdomains" in v.lower() else
            "HSTS is set; consider adding includeSubDomains to protect all subdomains."
        ),
        snippet=_nginx_apache("Strict-Transport-Security", "max-age=31536000; includeSubDomains; preload"),
        learn_more=_MDN + "Strict-Transport-Security",
    ),
    _HeaderRule(
        check_id="sec-csp",
        headers=("content-security-policy",),
        title="Content Security Policy (CSP)",
        description="CSP prevents XSS attacks by controlling which resources can be loaded.",
        severity=Severity.MAJOR,
        missing_status=Status.WARNING,
        missing_advice=(
            "CSP is the main defence against cross-site scripting. Start with a report-only "
            "policy, then enforce it; at minimum restrict default-src to 'self'."
        ),
        present_advice=lambda v: (
            "CSP is configured. Audit it regularly and avoid 'unsafe-inline' and 'unsafe-eval'."
        ),
        snippet=(
            "# Start with report-only to test:\n"
            "Content-Security-Policy-Report-Only: default-src 'self'; img-src 'self' data: https:;\n\n"
            + _nginx_apache("Content-Security-Policy", "default-src 'self'; script-src 'self';")
        ),
        learn_more="https://developer.mozilla.org/en-US/docs/Web/HTTP/CSP",
        show_length=True,
    ),
    _HeaderRule(
        check_id="sec-xframe",
        headers=("x-frame-options",),
        title="X-Frame-Options",
        description="Prevents your site from being embedded in iframes, protecting against clickjacking.",
        severity=Severity.MAJOR,
        missing_status=Status.WARNING,
        missing_advice=(
            "Without X-Frame-Options attackers can load your site in an invisible iframe and "
            "trick users into clicking it. Set DENY or SAMEORIGIN."
        ),
        present_advice=lambda v: f"Set to '{v}'. DENY is the most restrictive option.",
        snippet=_nginx_apache("X-Frame-Options", "SAMEORIGIN"),
        learn_more=_MDN + "X-Frame-Options",
    ),
    _HeaderRule(
        check_id="sec-xcto",
        headers=("x-content-type-options",),
        title="X-Content-Type-Options",
        description="Prevents MIME-type sniffing, where browsers guess file types and execute malicious content.",
        severity=Severity.MINOR,
        missing_status=Status.WARNING,
        missing_advice="Set 'nosniff' so browsers never reinterpret uploaded files as scripts.",
        present_advice=lambda v: "Set to prevent MIME-type sniffing.",
        snippet=_nginx_apache("X-Content-Type-Options", "nosniff"),
        learn_more=_MDN + "X-Content-Type-Options",
    ),
    _HeaderRule(
        check_id="sec-referrer",
        headers=("referrer-policy",),
        title="Referrer-Policy",
        description="Controls how much referrer information is sent with outgoing requests.",
        severity=Severity.MINOR,
        missing_status=Status.WARNING,
        missing_advice=(
            "Without a Referrer-Policy full URLs, query strings included, leak to external sites. "
            "'strict-origin-when-cross-origin' balances privacy and analytics."
        ),
        present_advice=lambda v: f"Set to '{v}'.",
        snippet=(
            _nginx_apache("Referrer-Policy", "strict-origin-when-cross-origin")
            + '\n\n# Or via HTML:\n<meta name="referrer" content="strict-origin-when-cross-origin" />'
        ),
        learn_more=_MDN + "Referrer-Policy",
    ),
    _HeaderRule(
        check_id="sec-permissions",
        headers=("permissions-policy", "feature-policy"),
        title="Permissions-Policy",
        description="Controls which browser features (camera, microphone, geolocation) your site can access.",
        severity=Severity.MINOR,
        missing_status=Status.WARNING,
        missing_advice=(
            "Without a Permissions-Policy, embedded iframes and third-party scripts can request "
            "camera, microphone and geolocation access. Disable features you don't use."
        ),
        present_advice=lambda v: "Permissions-Policy is configured.",
        snippet=_nginx_apache("Permissions-Policy", "camera=(), microphone=(), geolocation=(), payment=()"),
        learn_more=_MDN + "Permissions-Policy",
        show_length=True,
    ),
    _HeaderRule(
        check_id="sec-xxss",
        headers=("x-xss-protection",),
        title="X-XSS-Protection",
        description="Legacy XSS filter header. Modern browsers rely on CSP instead.",
        severity=Severity.INFO,
        missing_status=Status.INFO,
        missing_advice=(
            "Only older browsers honour X-XSS-Protection. '1; mode=block' keeps them covered, "
            "but prioritise a Content-Security-Policy."
        ),
        present_advice=lambda v: f"Set to '{v}'. Deprecated in modern browsers in favour of CSP.",
        snippet=_nginx_apache("X-XSS-Protection", "1; mode=block"),
        learn_more=_MDN + "X-XSS-Protection",
    ),
)


class SecurityHeadersAnalyzer(BaseAnalyzer):
    category = "security"
    label = "Security Headers"

    def analyze(self, page: FetchedPage) -> list[Check]:
        return self.run(page.headers)

    def run(self, headers: Optional[Mapping]) -> list[Check]:
        header_map = as_header_map(headers)
        return [self._evaluate(rule, header_map) for rule in RULES]

    def _evaluate(self, rule: _HeaderRule, headers) -> Check:
        value = ""
        for name in rule.headers:
            value = get_header(headers, name)
            if value:
                break

        if not value:
            return self._check(
                rule.check_id, rule.title, rule.description,
                rule.missing_status, rule.severity,
                value="(not set)",
                recommendation=rule.missing_advice,
                snippet=rule.snippet,
                learn_more=rule.learn_more,
            )

        return self.passed(
            rule.check_id, rule.title, rule.description, rule.severity,
            value=f"Set ({len(value)} chars)" if rule.show_length else value,
            recommendation=rule.present_advice(value),
            learn_more=rule.learn_more,
        )


def analyze_security_headers(headers: Optional[Mapping]) -> list[Check]:
    return SecurityHeadersAnalyzer().run(headers)
