from resalloc.report.aggregator import summarize
from resalloc.schemas.models import Finding, Severity, ValidationResult


def _result(rid: str, *findings: Finding, score: int = 100) -> ValidationResult:
    result = ValidationResult(record_id=rid, record_type="clients", score=score)
    for finding in findings:
        result.add(finding)
    return result


def _err(message: str) -> Finding:
    return Finding("f", message, Severity.ERROR)


def _warn(message: str) -> Finding:
    return Finding("f", message, Severity.WARNING)


def test_summarize_empty_input():
    """
    @brief
    No results is not an error: zero counts and a single hint.
    """
    # --- Act ---
    report = summarize([])

    # --- Assert ---
    assert report.summary.total_records == 0
    assert report.summary.average_score == 0.0
    assert report.top_issues == []
    assert report.recommendations == [
        "No records were validated; upload clients, workers and tasks data first."
    ]


def test_summarize_clean_batch():
    report = summarize([_result("a"), _result("b", score=90)])

    assert report.summary.valid_records == 2
    assert report.summary.average_score == 95.0
    assert report.top_issues == []
    assert report.recommendations == ["All records passed validation; no action required."]


def test_top_issues_ranked_with_stable_ties_and_cap():
    """
    @brief
    Issues sorted by count desc; equal counts keep first-encounter order.

    @details
    A and B both occur twice, A seen first; C occurs three times.
    Suggestions (info) never count as issues.
    """
    # --- Arrange ---
    results = [
        _result("1", _err("A"), _err("B"), Finding("f", "hint", Severity.INFO)),
        _result("2", _warn("C"), _err("B")),
        _result("3", _warn("C"), _err("A")),
        _result("4", _warn("C")),
    ]

    # --- Act ---
    full = summarize(results)
    capped = summarize(results, max_top_issues=2)

    # --- Assert ---
    assert [(i.message, i.count) for i in full.top_issues] == [("C", 3), ("A", 2), ("B", 2)]
    assert [i.message for i in capped.top_issues] == ["C", "A"]
    assert full.top_issues[0].severity is Severity.WARNING
    assert full.summary.error_count == 4
    assert full.summary.warning_count == 3
    assert full.summary.valid_records == 1


def test_recommendations_are_deterministic():
    # --- Arrange ---
    results = [
        _result("1", _err("Client name is required"), score=40),
        _result("2", _warn('Duplicate ClientID: "c1" found in multiple records'), score=80),
    ]

    # --- Act ---
    first = summarize(results).recommendations
    second = summarize(results).recommendations

    # --- Assert ---
    assert first == second
    assert first == [
        "Fix 1 error(s) across 1 invalid record(s) before running allocation.",
        'Resolve "Client name is required" (1 occurrence(s)).',
        "Deduplicate records that share IDs, names or emails.",
        "Review 1 warning(s); they may affect allocation quality.",
        "Average quality score is 60.0 (below 70); complete missing fields and standardize formats.",
    ]
