"""Tests for the page fetcher."""

from unittest.mock import Mock

import pytest
import requests

from config import DEFAULT_USER_AGENT, PAGE_FETCH_TIMEOUT
from conftest import make_response, route_session
from crawler.fetcher import fetch_page, make_session
from models import ForbiddenTargetError, PageFetchError

URL = "http://example.com/start"
FINAL = "https://example.com/start"


class TestFetchPage:
    """Test cases for fetch_page."""

    def test_returns_fetched_page(self):
        session = route_session({
            URL: make_response(
                200, "<html><head><title>Hi</title></head></html>", url=FINAL,
                headers={"Content-Type": "text/html", "X-Frame-Options": "DENY"},
            ),
        })
        page = fetch_page(URL, session)

        assert page.url == FINAL
        assert page.status_code == 200
        assert page.soup.title.string == "Hi"
        assert page.headers["x-frame-options"] == "DENY"
        assert isinstance(page.fetch_time_ms, int)
        session.get.assert_called_once_with(URL, timeout=PAGE_FETCH_TIMEOUT, stream=True, allow_redirects=True)

    def test_non_200_is_returned(self):
        session = route_session({URL: make_response(404, "<html><body>Gone</body></html>", url=URL)})
        page = fetch_page(URL, session)

        assert page.status_code == 404
        assert page.soup.find("body") is not None

    def test_non_html_body_is_not_parsed(self):
        session = route_session({
            URL: make_response(200, "%PDF-1.4 <title>nope</title>", url=URL,
                               headers={"Content-Type": "application/pdf"}),
        })
        assert fetch_page(URL, session).soup.find("title") is None

    @pytest.mark.parametrize("error,message", [
        (requests.exceptions.SSLError("bad cert"), "SSL Error"),
        (requests.exceptions.Timeout("slow"), "timed out after 5s"),
        (requests.exceptions.TooManyRedirects("loop"), "Too many redirects"),
        (requests.exceptions.ConnectionError("refused"), "Connection Error"),
    ])
    def test_transport_errors(self, error, message):
        session = route_session({URL: error})
        with pytest.raises(PageFetchError, match=message):
            fetch_page(URL, session, timeout=5)

    def test_forbidden_target_is_not_requested(self):
        session = Mock(spec=requests.Session)
        with pytest.raises(ForbiddenTargetError):
            fetch_page("http://127.0.0.1/admin", session)
        session.get.assert_not_called()


def test_make_session_sets_user_agent():
    assert make_session().headers["User-Agent"] == DEFAULT_USER_AGENT
    assert make_session("custom/1.0").headers["User-Agent"] == "custom/1.0"
