"""Tests for keyword discovery and its text helpers."""

import pytest

from keywords.discovery import KeywordAccumulator, discover_keywords, discover_page_keywords
from keywords.text import clean, is_admissible, is_meaningful, ngrams, split_segments, words_of
from models import KeywordSource, parse_html


def _discover(head="", body="", url="https://example.com/"):
    html = f"<html><head>{head}</head><body>{body}</body></html>"
    return discover_keywords(parse_html(html), url)


def _scores(keywords):
    return {kw.phrase: kw.score for kw in keywords}


class TestWeighting:
    """Per-source weights and accumulation."""

    def test_title_phrase_scores_segment_plus_ngram(self):
        keywords = _discover(head="<title>Keyword Research</title>")
        assert _scores(keywords)["keyword research"] == 18
        assert keywords[0].source == KeywordSource.TITLE

    def test_matching_h2_accumulates_and_keeps_first_source(self):
        keywords = _discover(head="<title>Keyword Research</title>", body="<h2>Keyword Research</h2>")
        top = keywords[0]

        assert top.phrase == "keyword research"
        assert top.score == 27
        assert top.source == KeywordSource.TITLE

    def test_h1_weights(self):
        scores = _scores(_discover(body="<h1>Organic Dog Food</h1>"))

        assert scores["organic dog food"] == 9 + 7
        assert scores["organic dog"] == 7
        assert scores["dog food"] == 7

    def test_meta_keywords_and_description(self):
        head = (
            '<meta name="keywords" content="garden tools, , lawn care">'
            '<meta name="description" content="Quality garden tools delivered">'
        )
        keywords = _discover(head=head)
        scores = _scores(keywords)

        assert scores["garden tools"] == 8 + 6
        assert scores["lawn care"] == 8
        assert scores["quality garden tools delivered"] == 6
        assert all(kw.source == KeywordSource.META for kw in keywords)

    def test_h3_weights(self):
        scores = _scores(_discover(body="<h3>Shipping Options Explained</h3>"))
        assert scores["shipping options explained"] == 3 + 2
        assert scores["shipping options"] == 2


class TestAdmission:
    """Which candidates survive into the ranking."""

    def test_single_body_word_excluded_title_phrase_included(self):
        keywords = _discover(
            head="<title>SEO Audit Tool</title>",
            body="<p>Our product helps with seo in many ways.</p>",
        )
        phrases = [kw.phrase for kw in keywords]

        assert "seo audit tool" in phrases
        assert "seo" not in phrases

    def test_single_word_title_segment_included(self):
        phrases = [kw.phrase for kw in _discover(head="<title>Acme | Garden Furniture</title>")]
        assert "acme" in phrases
        assert "garden furniture" in phrases

    def test_single_word_h2_excluded(self):
        phrases = [kw.phrase for kw in _discover(body="<h2>Pricing</h2>")]
        assert "pricing" not in phrases

    def test_single_word_h1_included(self):
        assert _scores(_discover(body="<h1>Pricing</h1>")) == {"pricing": 9}

    @pytest.mark.parametrize("meta", ["the and", "2024", "of it", "ab"])
    def test_rejected_candidates(self, meta):
        head = f'<meta name="keywords" content="{meta}">'
        assert _discover(head=head) == []

    def test_over_long_headings_are_skipped(self):
        long_h2 = (
            "An Extraordinarily Comprehensive Introduction To Sustainable "
            "Backyard Vegetable Gardening Techniques"
        )
        long_h3 = "Practical Seasonal Pruning Advice For Overgrown Fruit Trees Today"

        assert len(long_h2) > 80
        assert len(long_h3) > 60
        assert _discover(body=f"<h2>{long_h2}</h2><h3>{long_h3}</h3>") == []

    def test_empty_page(self):
        assert _discover() == []


class TestBody:
    """Body n-gram frequency."""

    def test_repeated_phrase_weighted_by_frequency(self):
        keywords = _discover(body="<p>alpha beta. gamma delta. alpha beta.</p>")

        assert _scores(keywords) == {"alpha beta": 2}
        assert keywords[0].source == KeywordSource.BODY

    def test_frequency_weight_is_capped(self):
        body = "<p>" + " ".join(["orange widget"] * 7) + "</p>"
        assert _scores(_discover(body=body))["orange widget"] == 5

    def test_page_chrome_is_ignored(self):
        body = (
            "<nav>summer sale summer sale</nav>"
            "<header>summer sale</header>"
            "<footer>summer sale</footer>"
            "<script>var summer_sale = 'summer sale summer sale';</script>"
            "<p>Fresh produce daily.</p>"
        )
        assert _discover(body=body) == []

    def test_source_document_is_not_modified(self):
        soup = parse_html("<html><body><nav>menu</nav><p>text</p></body></html>")
        discover_keywords(soup, "https://example.com/")
        assert soup.find("nav") is not None


class TestSlug:
    """URL path contributes one phrase."""

    def test_slug_phrase(self):
        keywords = _discover(url="https://example.com/blog/best-running_shoes")

        assert _scores(keywords) == {"blog best running shoes": 4}
        assert keywords[0].source == KeywordSource.BODY

    def test_percent_encoded_slug(self):
        phrases = [kw.phrase for kw in _discover(url="https://example.com/caf%C3%A9-recipes")]
        assert phrases == ["café recipes"]

    def test_single_word_slug_ignored(self):
        assert _discover(url="https://example.com/about") == []


class TestRanking:
    """Ordering and truncation."""

    def test_ties_keep_first_seen_order(self):
        keywords = _discover(head="<title>Alpha Bravo | Charlie Delta</title>")
        assert [kw.phrase for kw in keywords[:2]] == ["alpha bravo", "charlie delta"]
        assert keywords[0].score == keywords[1].score == 18

    def test_top_twenty(self):
        entries = ", ".join(f"product{i} range" for i in range(25))
        keywords = _discover(head=f'<meta name="keywords" content="{entries}">')

        assert len(keywords) == 20
        assert keywords[0].phrase == "product0 range"
        assert keywords[-1].phrase == "product19 range"

    def test_scores_descending(self):
        keywords = _discover(
            head="<title>Garden Tools</title>",
            body="<h1>Garden Tools Guide</h1><h2>Choosing Garden Tools</h2>",
        )
        scores = [kw.score for kw in keywords]
        assert scores == sorted(scores, reverse=True)

    def test_deterministic(self, page_factory):
        page = page_factory(
            "<html><head><title>Garden Tools | Acme</title></head>"
            "<body><h1>Garden Tools</h1><p>garden tools and garden tools</p></body></html>",
            url="https://example.com/garden-tools",
        )
        assert discover_page_keywords(page) == discover_page_keywords(page)


class TestAccumulator:
    """Test cases for KeywordAccumulator."""

    def test_normalises_phrases(self):
        acc = KeywordAccumulator()
        acc.add("Garden Tools!", 5, KeywordSource.H2)
        acc.add("garden   tools", 3, KeywordSource.BODY)

        assert len(acc) == 1
        assert acc.score_of("GARDEN TOOLS") == 8
        assert acc.ranked()[0].source == KeywordSource.H2

    def test_unknown_phrase(self):
        assert KeywordAccumulator().score_of("missing phrase") is None


class TestTextHelpers:
    """Test cases for keywords.text."""

    def test_clean(self):
        assert clean("Hello, World! It's re-used.") == "hello world it's re-used"
        assert clean(None) == ""

    def test_words_of(self):
        assert words_of("  Best   SEO  tools ") == ["best", "seo", "tools"]

    def test_is_meaningful(self):
        assert is_meaningful("seo")
        assert not is_meaningful("go")
        assert not is_meaningful("website")

    def test_is_admissible(self):
        assert is_admissible(["the", "best"])
        assert not is_admissible(["of", "the", "best"])
        assert is_admissible(["best", "of", "seo"])

    def test_ngrams_order(self):
        words = ["the", "best", "seo", "tool"]
        assert ngrams(words, 2, 3) == [
            "the best", "best seo", "seo tool",
            "the best seo", "best seo tool",
        ]

    def test_split_segments(self):
        assert split_segments("Home | Acme - Blog: A") == ["Home", "Acme", "Blog"]
        assert split_segments("") == []
