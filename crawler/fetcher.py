"""
Low-level HTTP fetcher. Retrieves the audited page and turns it into a FetchedPage.

Every request made by the engine goes through `read_bounded`, which caps the
whole exchange (headers and body) at a wall-clock deadline. requests' own
`timeout=` only bounds each socket read, so a server trickling bytes would
otherwise hold the caller indefinitely.
"""
from __future__ import annotations

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from requests.structures import CaseInsensitiveDict

from config import DEFAULT_USER_AGENT, PAGE_FETCH_TIMEOUT
from crawler.guard import check_target
from models import FetchedPage, PageFetchError, as_header_map, parse_html

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 16 * 1024


@dataclass
class BoundedResponse:
    """A fully-read response: the parts of requests.Response the engine uses."""
    url: str
    status_code: int
    headers: CaseInsensitiveDict
    content: bytes
    encoding: Optional[str] = None

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8", errors="replace")

    def json(self):
        # json.JSONDecodeError is a ValueError, like requests' own
        return json.loads(self.text)


def make_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def read_bounded(
    send: Callable[..., requests.Response],
    url: str,
    timeout: float,
    **kwargs,
) -> BoundedResponse:
    """
    Call `send(url, ...)` (a session's get or post) and read the full body,
    giving up once `timeout` seconds of wall-clock time have passed.

    Raises requests.exceptions.Timeout on the deadline; any other
    requests.RequestException from the transfer propagates unchanged.
    """
    deadline = time.monotonic() + timeout
    opened: list = []
    pool = ThreadPoolExecutor(max_workers=1)
    future = pool.submit(_download, send, url, timeout, deadline, opened, kwargs)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout as exc:
        # unblocks the worker's pending read
        for resp in opened:
            resp.close()
        raise requests.exceptions.Timeout(
            f"No complete response from {url} within {timeout}s"
        ) from exc
    finally:
        pool.shutdown(wait=False)


def _download(send, url, timeout, deadline, opened, kwargs) -> BoundedResponse:
    resp = send(url, timeout=timeout, stream=True, **kwargs)
    opened.append(resp)
    try:
        body = bytearray()
        for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
            if time.monotonic() > deadline:
                raise requests.exceptions.Timeout(f"Body of {url} not received within {timeout}s")
            body.extend(chunk)
        return BoundedResponse(
            url=resp.url or url,
            status_code=resp.status_code,
            headers=as_header_map(resp.headers),
            content=bytes(body),
            encoding=resp.encoding,
        )
    finally:
        resp.close()


def fetch_page(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = PAGE_FETCH_TIMEOUT,
) -> FetchedPage:
    """
    GET `url` (following redirects) and return a FetchedPage with the parsed
    document, final URL, status, headers and elapsed milliseconds.

    Raises ForbiddenTargetError for internal targets and PageFetchError when
    the request itself fails. Non-200 responses are returned, not raised:
    the status code is audited like any other fact about the page.
    """
    check_target(url)
    session = session or make_session()

    try:
        t0 = time.perf_counter()
        resp = read_bounded(session.get, url, timeout, allow_redirects=True)
        elapsed_ms = (time.perf_counter() - t0) * 1000
    except requests.exceptions.SSLError as exc:
        raise PageFetchError(f"SSL Error: {exc}") from exc
    except requests.exceptions.Timeout as exc:
        raise PageFetchError(f"Request timed out after {timeout}s") from exc
    except requests.exceptions.TooManyRedirects as exc:
        raise PageFetchError("Too many redirects") from exc
    except requests.RequestException as exc:
        raise PageFetchError(f"Connection Error: {exc}") from exc

    logger.debug("Fetched %s -> %s (%d) in %.0fms", url, resp.url, resp.status_code, elapsed_ms)

    content_type = resp.headers.get("content-type", "").lower()
    html = resp.text if "html" in content_type or not content_type else ""

    return FetchedPage(
        url=resp.url or url,
        soup=parse_html(html),
        status_code=resp.status_code,
        headers=resp.headers,
        fetch_time_ms=round(elapsed_ms),
    )
