# src/resalloc/report/report_store.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from resalloc.errors import ReportError
from resalloc.schemas.models import Report, ValidationResult

logger = logging.getLogger(__name__)

FINDING_COLUMNS = ("record_id", "record_type", "severity", "field", "message", "suggestions")


def save_report(
    report: Report,
    results: Sequence[ValidationResult],
    out_dir: Path,
    filename: str = "validation_report.json",
) -> Path:
    """
    @brief
    Write a validation report and its per-record results as JSON.

    @details
    Payload is {"report": ..., "results": [...]}, UTF-8, indented. The file
    is written to a temporary sibling and swapped in with os.replace, so a
    crash never leaves a half-written report behind.

    @params
        report : Report
            Aggregated report (see report.aggregator.summarize).
        results : Sequence[ValidationResult]
            Per-record results the report was built from.
        out_dir : Path
            Target directory, created if missing.
        filename : str
            Target filename.

    @returns
        Path to the written JSON file.

    @raises
        ReportError
            On serialization or I/O failure.
    """
    payload = {
        "report": report.model_dump(mode="json"),
        "results": [r.to_dict() for r in results],
    }
    try:
        text = json.dumps(payload, ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as e:
        raise ReportError(
            f"Validation report is not JSON-serializable: {e}",
            source="report_store.save_report",
            suggested_action="Ensure record ids and finding fields are primitive values.",
        ) from e

    target = Path(out_dir) / filename
    _atomic_write_text(target, text)
    logger.info("Validation report saved: %s", target)
    return target


def findings_frame(results: Sequence[ValidationResult]) -> pd.DataFrame:
    """
    @brief
    Flatten every finding of every result into one row.

    @details
    Columns follow FINDING_COLUMNS; suggestions are joined with "; ".
    An empty input yields an empty frame that still carries the columns.
    """
    rows = []
    for result in results:
        for finding in (*result.errors, *result.warnings, *result.suggestions):
            rows.append(
                {
                    "record_id": result.record_id,
                    "record_type": result.record_type,
                    "severity": finding.to_dict()["severity"],
                    "field": finding.field,
                    "message": finding.message,
                    "suggestions": "; ".join(finding.suggestions or ()),
                }
            )
    return pd.DataFrame(rows, columns=list(FINDING_COLUMNS))


def write_findings_csv(results: Sequence[ValidationResult], out_path: Path) -> Path:
    """
    @brief
    Export all findings as a flat CSV table (UTF-8, header always present).

    @raises
        ReportError
            If the file cannot be written.
    """
    out_path = Path(out_path)
    frame = findings_frame(results)
    _atomic_write_text(out_path, frame.to_csv(index=False))
    logger.info("Findings CSV saved: %s (%d row(s))", out_path, len(frame))
    return out_path


def _atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """
    @brief
    Performs atomic text file writing using a temporary file swap.

    @details
    Writes text to a temporary file within the same directory, then replaces
    the destination in a single filesystem operation.

    @raises
        ReportError
            On write or rename failure.
    """
    path = Path(path)
    tmp_path: str | None = None
    try:
        # (1) Create temporary file near the target for atomicity
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(path.parent))
        with open(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        # (2) Clean up temp file on error
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise ReportError(
            f"atomic write failed for {path}: {e}",
            source="report_store._atomic_write_text",
            suggested_action="Check output directory permissions and disk space.",
        ) from e


__all__ = ["save_report", "findings_frame", "write_findings_csv", "FINDING_COLUMNS"]
