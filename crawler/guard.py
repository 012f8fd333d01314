"""
Request guards for the fetch step: internal-target filtering and per-client rate limiting.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlsplit

from config import (
    FORBIDDEN_TARGET_PATTERNS,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_PURGE_THRESHOLD,
    RATE_LIMIT_WINDOW_SECONDS,
)
from models import ForbiddenTargetError


def check_target(url: str) -> None:
    """Raise ForbiddenTargetError unless `url` is an http(s) URL on a public host."""
    try:
        parts = urlsplit(url)
        host = (parts.hostname or "").lower()
    except ValueError as exc:
        raise ForbiddenTargetError(f"Invalid URL: {url!r}") from exc

    if parts.scheme not in ("http", "https") or not host:
        raise ForbiddenTargetError(f"Only http(s) URLs can be audited: {url!r}")

    for pattern in FORBIDDEN_TARGET_PATTERNS:
        # "192.168." style patterns are prefixes; names match exactly or as a parent domain
        if pattern.endswith("."):
            hit = host.startswith(pattern)
        else:
            hit = host == pattern or host.endswith("." + pattern)
        if hit:
            raise ForbiddenTargetError(f"Restricted URL: {url!r}")


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """
    Fixed-window request counter keyed by client (e.g. IP address).

    The clock is injected so callers and tests control time explicitly.
    """

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        with self._lock:
            now = self._clock()

            if len(self._windows) > RATE_LIMIT_PURGE_THRESHOLD:
                self._purge(now)

            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return True

            if window.count >= self.max_requests:
                return False

            window.count += 1
            return True

    def _purge(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now > w.reset_at]
        for k in expired:
            del self._windows[k]

    def __len__(self) -> int:
        return len(self._windows)
