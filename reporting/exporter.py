"""
Converts AuditReport data to Pandas DataFrames and CSV bytes for export.
"""
from __future__ import annotations

import io

import pandas as pd

from models import AuditReport, DiscoveredKeyword, Severity, Status
from scoring.scorer import score_label

_CHECK_COLUMNS = [
    "Category", "Check", "ID", "Status", "Severity", "Value", "Expected",
    "Details", "Recommendation", "Learn More",
]


# ── Checks DataFrame ──────────────────────────────────────────────────────────

def checks_to_df(report: AuditReport) -> pd.DataFrame:
    rows = []
    for cat in report.categories:
        for check in cat.checks:
            rows.append({
                "Category":       cat.label,
                "Check":          check.title,
                "ID":             check.id,
                "Status":         check.status.upper(),
                "Severity":       check.severity.capitalize(),
                "Value":          "" if check.value is None else str(check.value),
                "Expected":       check.expected or "",
                "Details":        check.details or "",
                "Recommendation": check.recommendation or "",
                "Learn More":     check.learn_more_url or "",
            })

    if not rows:
        return pd.DataFrame(columns=_CHECK_COLUMNS)

    df = pd.DataFrame(rows, columns=_CHECK_COLUMNS)

    # Problems first, most severe first; report order otherwise
    df["_status_order"] = df["Status"].str.lower().map(Status.ORDER)
    df["_sev_order"] = df["Severity"].str.lower().map(Severity.ORDER)
    df = df.sort_values(["_status_order", "_sev_order"], kind="stable")
    df = df.drop(columns=["_status_order", "_sev_order"]).reset_index(drop=True)
    return df


# ── Summary table ─────────────────────────────────────────────────────────────

def categories_summary_df(report: AuditReport) -> pd.DataFrame:
    """One row per category with its score and status tallies."""
    data = [
        {
            "Category": cat.label,
            "Score":    cat.score,
            "Rating":   score_label(cat.score),
            "Passed":   cat.pass_count,
            "Warnings": cat.warning_count,
            "Failed":   cat.fail_count,
            "Info":     cat.info_count,
        }
        for cat in report.categories
    ]
    return pd.DataFrame(data, columns=["Category", "Score", "Rating", "Passed", "Warnings", "Failed", "Info"])


def keywords_to_df(keywords: list[DiscoveredKeyword]) -> pd.DataFrame:
    data = [
        {"Rank": rank, "Phrase": kw.phrase, "Score": kw.score, "Source": kw.source}
        for rank, kw in enumerate(keywords, start=1)
    ]
    return pd.DataFrame(data, columns=["Rank", "Phrase", "Score", "Source"])


# ── CSV export ────────────────────────────────────────────────────────────────

def to_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")
