"""
Base class for all check analyzers.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Union

from models import Check, FetchedPage, Severity, Status


class BaseAnalyzer(ABC):
    """All analyzers inherit from this class."""

    category: str = "uncategorized"
    label: str = "Uncategorized"

    @abstractmethod
    def analyze(self, page: FetchedPage) -> list[Check]:
        """Analyze a fetched page and return its checks."""
        ...

    # ── Convenience factory ───────────────────────────────────────────────────

    def _check(
        self,
        check_id: str,
        title: str,
        description: str,
        status: str,
        severity: str,
        value: Optional[Union[str, int, float]] = None,
        expected: Optional[str] = None,
        details: Optional[str] = None,
        recommendation: Optional[str] = None,
        snippet: Optional[str] = None,
        learn_more: Optional[str] = None,
    ) -> Check:
        return Check(
            id=check_id,
            title=title,
            description=description,
            status=status,
            severity=severity,
            value=value,
            expected=expected,
            details=details,
            recommendation=recommendation,
            code_snippet=snippet,
            learn_more_url=learn_more,
        )

    def passed(self, check_id, title, description, severity=Severity.INFO, **kw) -> Check:
        return self._check(check_id, title, description, Status.PASS, severity, **kw)

    def failed(self, check_id, title, description, severity, **kw) -> Check:
        return self._check(check_id, title, description, Status.FAIL, severity, **kw)

    def warning(self, check_id, title, description, severity, **kw) -> Check:
        return self._check(check_id, title, description, Status.WARNING, severity, **kw)

    def info(self, check_id, title, description, severity=Severity.INFO, **kw) -> Check:
        return self._check(check_id, title, description, Status.INFO, severity, **kw)
