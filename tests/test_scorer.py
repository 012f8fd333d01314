"""Tests for category and overall scoring."""

import pytest

from models import Category, Check, Severity, Status
from scoring.scorer import calculate_overall_score, score_category, score_checks, score_label


def _check(status, severity, check_id="c"):
    return Check(id=check_id, title="t", description="d", status=status, severity=severity)


def _category(name, score, checks=None):
    checks = checks if checks is not None else (_check(Status.PASS, Severity.MAJOR),)
    return Category(name=name, label=name, checks=tuple(checks), score=score)


class TestScoreChecks:
    """Test cases for score_checks."""

    def test_all_pass(self):
        assert score_checks([_check(Status.PASS, Severity.CRITICAL)] * 5) == 100

    def test_empty(self):
        assert score_checks([]) == 100

    @pytest.mark.parametrize("severity,fail,warning", [
        (Severity.CRITICAL, 85, 93),
        (Severity.MAJOR, 90, 95),
        (Severity.MINOR, 95, 98),
        (Severity.INFO, 100, 100),
    ])
    def test_penalties(self, severity, fail, warning):
        assert score_checks([_check(Status.FAIL, severity)]) == fail
        assert score_checks([_check(Status.WARNING, severity)]) == warning

    def test_info_status_is_free(self):
        assert score_checks([_check(Status.INFO, Severity.CRITICAL)]) == 100

    def test_clamped_at_zero(self):
        assert score_checks([_check(Status.FAIL, Severity.CRITICAL)] * 10) == 0

    def test_mixed(self):
        checks = [
            _check(Status.FAIL, Severity.CRITICAL),
            _check(Status.WARNING, Severity.MAJOR),
            _check(Status.WARNING, Severity.MINOR),
            _check(Status.PASS, Severity.MAJOR),
        ]
        assert score_checks(checks) == 100 - 15 - 5 - 2


class TestScoreCategory:
    """Test cases for score_category."""

    def test_counts_add_up(self):
        checks = [
            _check(Status.PASS, Severity.MINOR, "a"),
            _check(Status.FAIL, Severity.MAJOR, "b"),
            _check(Status.WARNING, Severity.MINOR, "c"),
            _check(Status.INFO, Severity.INFO, "d"),
        ]
        cat = score_category("security", "Security Headers", checks)

        assert cat.score == 88
        assert (cat.pass_count, cat.fail_count, cat.warning_count, cat.info_count) == (1, 1, 1, 1)
        assert cat.pass_count + cat.fail_count + cat.warning_count + cat.info_count == len(cat.checks)
        assert [c.id for c in cat.checks] == ["a", "b", "c", "d"]
        assert not cat.is_info_only

    def test_accepts_generator(self):
        cat = score_category("x", "X", (_check(Status.PASS, Severity.MINOR) for _ in range(3)))
        assert len(cat.checks) == 3


class TestOverallScore:
    """Test cases for calculate_overall_score."""

    def test_weighted_mean(self):
        categories = [
            _category("technical", 80),
            _category("security", 60),
            _category("robots-sitemap", 100),
            _category("safe-browsing", 100),
        ]
        expected = (80 * 0.15 + 60 * 0.06 + 100 * 0.06 + 100 * 0.05) / 0.32
        assert calculate_overall_score(categories) == round(expected)

    def test_info_only_category_is_skipped(self):
        categories = [
            _category("technical", 70),
            _category("safe-browsing", 100, [_check(Status.INFO, Severity.INFO)]),
        ]
        assert calculate_overall_score(categories) == 70

    def test_unknown_category_has_no_weight(self):
        assert calculate_overall_score([_category("technical", 50), _category("other", 0)]) == 50

    def test_no_weight(self):
        assert calculate_overall_score([]) == 0

    def test_result_is_integer(self):
        categories = [_category("technical", 91), _category("security", 40)]
        score = calculate_overall_score(categories)

        assert isinstance(score, int)
        assert score == round((91 * 0.15 + 40 * 0.06) / 0.21)


class TestScoreLabel:

    @pytest.mark.parametrize("score,label", [
        (100, "Excellent"), (90, "Excellent"), (89, "Good"), (75, "Good"),
        (74, "Needs Work"), (50, "Needs Work"), (49, "Poor"), (0, "Poor"),
    ])
    def test_bands(self, score, label):
        assert score_label(score) == label
