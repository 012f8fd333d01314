"""
Shared fixtures and factories for the audit engine tests.
"""
import json
from typing import Optional
from unittest.mock import Mock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from models import FetchedPage


def make_response(
    status_code: int = 200,
    text: str = "",
    url: str = "",
    headers: Optional[dict] = None,
    json_data=None,
) -> Mock:
    """
    Minimal stand-in for requests.Response. When `json_data` is given the
    body is its JSON encoding, so it survives a streamed read.
    """
    if json_data is not None:
        text = json.dumps(json_data)

    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    resp.content = text.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = url
    resp.headers = CaseInsensitiveDict(headers or {})
    resp.iter_content.side_effect = lambda chunk_size=1, **kw: iter([resp.content] if resp.content else [])
    if json_data is None:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = json_data
    return resp


def route_session(routes: dict) -> Mock:
    """
    A session whose .get() answers from `routes`: url -> response or exception.
    Unknown URLs answer 404.
    """
    session = Mock(spec=requests.Session)

    def _get(url, **kwargs):
        answer = routes.get(url)
        if answer is None:
            return make_response(404, "Not Found", url=url)
        if isinstance(answer, Exception):
            raise answer
        return answer

    session.get.side_effect = _get
    return session


@pytest.fixture
def page_factory():
    def _make(
        html: str = "<html><head></head><body></body></html>",
        url: str = "https://example.com/",
        status_code: int = 200,
        headers: Optional[dict] = None,
        fetch_time_ms: float = 120,
    ) -> FetchedPage:
        return FetchedPage.from_html(html, url, status_code, headers, fetch_time_ms)

    return _make


@pytest.fixture
def offline_session():
    """Every request fails as if the network were down."""
    session = Mock(spec=requests.Session)
    session.get.side_effect = requests.exceptions.ConnectionError("network unreachable")
    session.post.side_effect = requests.exceptions.ConnectionError("network unreachable")
    return session


@pytest.fixture(autouse=True)
def no_safe_browsing_key(monkeypatch):
    """Tests run in heuristic mode unless they set a key explicitly."""
    monkeypatch.delenv("SAFE_BROWSING_API_KEY", raising=False)
