"""Tests for the security headers analyzer."""

from requests.structures import CaseInsensitiveDict

from analyzers.security import SecurityHeadersAnalyzer, analyze_security_headers
from models import Severity, Status

ALL_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": "default-src 'self'",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=()",
    "X-XSS-Protection": "1; mode=block",
}

IDS = ["sec-hsts", "sec-csp", "sec-xframe", "sec-xcto", "sec-referrer", "sec-permissions", "sec-xxss"]


def _by_id(checks):
    return {c.id: c for c in checks}


class TestSecurityHeaders:
    """Test cases for analyze_security_headers."""

    def test_all_headers_present(self):
        checks = analyze_security_headers(ALL_HEADERS)

        assert [c.id for c in checks] == IDS
        assert all(c.status == Status.PASS for c in checks)

    def test_no_headers(self):
        checks = _by_id(analyze_security_headers({}))

        assert len(checks) == 7
        assert checks["sec-hsts"].status == Status.FAIL
        assert checks["sec-hsts"].severity == Severity.CRITICAL
        assert checks["sec-csp"].status == Status.WARNING
        assert checks["sec-csp"].severity == Severity.MAJOR
        assert checks["sec-xframe"].status == Status.WARNING
        assert checks["sec-xcto"].status == Status.WARNING
        assert checks["sec-xcto"].severity == Severity.MINOR
        assert checks["sec-referrer"].status == Status.WARNING
        assert checks["sec-permissions"].status == Status.WARNING
        assert checks["sec-xxss"].status == Status.INFO
        assert all(c.code_snippet for c in checks.values())

    def test_none_headers(self):
        assert len(analyze_security_headers(None)) == 7

    def test_lookup_is_case_insensitive(self):
        headers = {"STRICT-TRANSPORT-SECURITY": "max-age=600", "x-frame-options": "SAMEORIGIN"}
        checks = _by_id(analyze_security_headers(headers))

        assert checks["sec-hsts"].status == Status.PASS
        assert checks["sec-xframe"].status == Status.PASS
        assert checks["sec-xframe"].value == "SAMEORIGIN"

    def test_accepts_case_insensitive_dict(self):
        headers = CaseInsensitiveDict({"Content-Security-Policy": "default-src 'self'"})
        check = _by_id(analyze_security_headers(headers))["sec-csp"]

        assert check.status == Status.PASS
        assert check.value == "Set (18 chars)"

    def test_feature_policy_fallback(self):
        checks = _by_id(analyze_security_headers({"Feature-Policy": "geolocation 'none'"}))
        assert checks["sec-permissions"].status == Status.PASS

    def test_hsts_without_subdomains_suggests_them(self):
        check = _by_id(analyze_security_headers({"Strict-Transport-Security": "max-age=600"}))["sec-hsts"]
        assert check.status == Status.PASS
        assert "includeSubDomains" in check.recommendation

    def test_blank_header_counts_as_missing(self):
        check = _by_id(analyze_security_headers({"X-Frame-Options": "   "}))["sec-xframe"]
        assert check.status == Status.WARNING

    def test_analyze_reads_page_headers(self, page_factory):
        page = page_factory(headers=ALL_HEADERS)
        checks = SecurityHeadersAnalyzer().analyze(page)
        assert all(c.passed for c in checks)
