# src/resalloc/report/aggregator.py
from __future__ import annotations

from collections.abc import Sequence

from resalloc.schemas.models import (
    IssueStat,
    Report,
    ReportSummary,
    Severity,
    ValidationResult,
)

MAX_TOP_ISSUES = 10
LOW_SCORE_THRESHOLD = 70.0
_MAX_ISSUE_RECOMMENDATIONS = 3


def summarize(
    results: Sequence[ValidationResult],
    *,
    max_top_issues: int = MAX_TOP_ISSUES,
    low_score_threshold: float = LOW_SCORE_THRESHOLD,
) -> Report:
    """
    @brief
    Aggregate validation results into a Report.

    @details
    (1) counts and average score (0.0 for an empty input);
    (2) top issues: errors and warnings grouped by exact message, sorted by
        count descending, ties kept in first-encounter order, truncated;
    (3) deterministic recommendations derived from (1) and (2).

    @params
        results : Sequence[ValidationResult]
            Results to aggregate, usually one batch.
        max_top_issues : int
            Length cap of Report.top_issues.
        low_score_threshold : float
            Average score below which completeness advice is added.

    @returns
        Report with summary, top_issues and a non-empty recommendations list.
    """
    # (1) Summary counts
    total = len(results)
    summary = ReportSummary(
        total_records=total,
        valid_records=sum(1 for r in results if r.is_valid),
        error_count=sum(len(r.errors) for r in results),
        warning_count=sum(len(r.warnings) for r in results),
        average_score=(sum(r.score for r in results) / total) if total else 0.0,
    )

    # (2) Group issues by message; dicts keep first-encounter order
    counts: dict[str, int] = {}
    severities: dict[str, Severity] = {}
    for result in results:
        for finding in (*result.errors, *result.warnings):
            counts[finding.message] = counts.get(finding.message, 0) + 1
            severities.setdefault(finding.message, Severity(finding.severity))

    ranked = sorted(counts.items(), key=lambda item: -item[1])  # stable
    top_issues = [
        IssueStat(message=message, count=count, severity=severities[message])
        for message, count in ranked[:max_top_issues]
    ]

    # (3) Recommendations
    recommendations = _recommendations(summary, top_issues, low_score_threshold)
    return Report(summary=summary, top_issues=top_issues, recommendations=recommendations)


def _recommendations(
    summary: ReportSummary, top_issues: list[IssueStat], low_score_threshold: float
) -> list[str]:
    if summary.total_records == 0:
        return ["No records were validated; upload clients, workers and tasks data first."]

    out: list[str] = []
    invalid = summary.total_records - summary.valid_records

    if summary.error_count:
        out.append(
            f"Fix {summary.error_count} error(s) across {invalid} invalid record(s) "
            "before running allocation."
        )
        error_issues = [i for i in top_issues if i.severity == Severity.ERROR]
        for issue in error_issues[:_MAX_ISSUE_RECOMMENDATIONS]:
            out.append(f'Resolve "{issue.message}" ({issue.count} occurrence(s)).')

    if any(i.message.startswith("Duplicate ") for i in top_issues):
        out.append("Deduplicate records that share IDs, names or emails.")

    if summary.warning_count:
        out.append(
            f"Review {summary.warning_count} warning(s); they may affect allocation quality."
        )

    if summary.average_score < low_score_threshold:
        out.append(
            f"Average quality score is {summary.average_score:.1f} "
            f"(below {low_score_threshold:g}); complete missing fields and standardize formats."
        )

    if not out:
        out.append("All records passed validation; no action required.")
    return out


__all__ = ["summarize", "MAX_TOP_ISSUES", "LOW_SCORE_THRESHOLD"]
