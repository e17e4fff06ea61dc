import json
from pathlib import Path

import pandas as pd
import pytest

from resalloc.errors import ReportError
from resalloc.report.aggregator import summarize
from resalloc.report.report_store import (
    FINDING_COLUMNS,
    findings_frame,
    save_report,
    write_findings_csv,
)
from resalloc.schemas.models import Finding, Severity, ValidationResult


@pytest.fixture()
def results() -> list[ValidationResult]:
    bad = ValidationResult(record_id="W1", record_type="workers")
    bad.add(Finding("email", "Please provide a valid email address", Severity.ERROR, ("a", "b")))
    bad.add(Finding("hourlyRate", "Hourly rate should be between $15 and $500", Severity.WARNING))
    return [bad, ValidationResult(record_id="W2", record_type="workers")]


def test_save_report_writes_report_and_results(tmp_path: Path, results):
    """
    @brief
    JSON artifact carries the report and every per-record result.
    """
    # --- Act ---
    path = save_report(summarize(results), results, tmp_path / "out")

    # --- Assert ---
    assert path == tmp_path / "out" / "validation_report.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["report"]["summary"]["total_records"] == 2
    assert [r["record_id"] for r in payload["results"]] == ["W1", "W2"]
    assert payload["results"][0]["errors"][0]["suggestions"] == ["a", "b"]
    assert list(tmp_path.joinpath("out").iterdir()) == [path]


def test_save_report_into_file_path_raises(tmp_path: Path, results):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(ReportError):
        save_report(summarize(results), results, blocker)


def test_findings_frame_one_row_per_finding(results):
    # --- Act ---
    frame = findings_frame(results)

    # --- Assert ---
    assert list(frame.columns) == list(FINDING_COLUMNS)
    assert len(frame) == 2
    assert frame.iloc[0]["suggestions"] == "a; b"
    assert frame.iloc[1]["severity"] == "warning"


def test_findings_frame_empty_keeps_columns():
    assert list(findings_frame([]).columns) == list(FINDING_COLUMNS)


def test_write_findings_csv(tmp_path: Path, results):
    path = write_findings_csv(results, tmp_path / "findings.csv")

    frame = pd.read_csv(path)
    assert list(frame.columns) == list(FINDING_COLUMNS)
    assert frame["record_id"].tolist() == ["W1", "W1"]
