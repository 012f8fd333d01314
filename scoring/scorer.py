"""
Category and overall score calculator.

Scoring model:
- A category starts at 100. Each failed check deducts its severity penalty;
  each warning deducts half of it (rounded down). Passing and info checks
  deduct nothing. The result is clamped to 0–100.
- The overall score is the weighted mean of category scores. Categories made
  up entirely of info checks (e.g. a lookup that had nothing to report) are
  left out so they neither help nor hurt.
"""
from __future__ import annotations

import math
from collections.abc import Iterable

from config import CATEGORY_WEIGHTS, SEVERITY_PENALTIES
from models import Category, Check, Status


def score_checks(checks: Iterable[Check]) -> int:
    score = 100
    for check in checks:
        penalty = SEVERITY_PENALTIES.get(check.severity, 0)
        if check.status == Status.FAIL:
            score -= penalty
        elif check.status == Status.WARNING:
            score -= penalty // 2
    return max(0, min(100, score))


def score_category(name: str, label: str, checks: Iterable[Check]) -> Category:
    checks = tuple(checks)
    return Category(name=name, label=label, checks=checks, score=score_checks(checks))


def calculate_overall_score(categories: Iterable[Category]) -> int:
    total_weight = 0.0
    weighted_sum = 0.0

    for cat in categories:
        if cat.is_info_only:
            continue
        weight = CATEGORY_WEIGHTS.get(cat.name, 0.0)
        total_weight += weight
        weighted_sum += cat.score * weight

    if total_weight == 0:
        return 0
    return math.floor(weighted_sum / total_weight + 0.5)


def score_label(score: float) -> str:
    if score >= 90:
        return "Excellent"
    elif score >= 75:
        return "Good"
    elif score >= 50:
        return "Needs Work"
    else:
        return "Poor"
