# src/resalloc/dataloader/records_loader.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from resalloc.dataloader.types import LoadResult
from resalloc.errors import DataError
from resalloc.schemas.models import EntityKind

logger = logging.getLogger(__name__)


class RecordsLoader:
    """
    JSON file → LoadResult for one entity kind.

    The file holds spreadsheet rows that were already decoded upstream:
    a JSON array of objects, one object per row.

    Rules:
      - Blank rows (objects whose values are all empty) are skipped silently.
      - Rows that are not objects become issues; loading continues.
      - Each kept row gets `_rowIndex` (1-based position) unless it has one.
      - If any issue was found: success=False, records=[], errors=[...].

    Fatal errors (raise DataError immediately):
      - path is not a Path, file missing or unreadable
      - invalid JSON
      - JSON root is not an array
    """

    def load(self, path: Path, kind: EntityKind | str) -> LoadResult:
        key = EntityKind(kind)
        rows = self._read_json(path)
        result = self._rows_to_result(rows, key)
        self._report_summary(path, result)
        return result

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_json(self, path: Path) -> list[Any]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="RecordsLoader._read_json",
                suggested_action="Pass a pathlib.Path pointing to the records file.",
            )
        if not path.exists():
            raise DataError(
                message=f"Records file not found: {path}",
                source="RecordsLoader._read_json",
                suggested_action="Verify the file path.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataError(
                message=f"Invalid JSON in {path.name}: {e}",
                source="RecordsLoader._read_json",
                suggested_action="Export the sheet again as a JSON array of row objects.",
            ) from e
        except OSError as e:
            raise DataError(
                message=f"Unable to read records file: {e}",
                source="RecordsLoader._read_json",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e

        if not isinstance(data, list):
            raise DataError(
                message=f"Records file root must be a JSON array, got {type(data).__name__}",
                source="RecordsLoader._read_json",
                suggested_action="Wrap the row objects in [ ... ].",
            )
        return data

    def _rows_to_result(self, rows: list[Any], kind: EntityKind) -> LoadResult:
        issues: list[dict[str, Any]] = []
        records: list[dict[str, Any]] = []

        for row_no, row in enumerate(rows, start=1):
            if not isinstance(row, dict):
                issues.append(
                    {
                        "kind": "not_an_object",
                        "row_no": row_no,
                        "message": f"Row must be an object, got {type(row).__name__}",
                    }
                )
                continue

            if all(v is None or v == "" for v in row.values()):
                continue

            record = dict(row)
            record.setdefault("_rowIndex", row_no)
            records.append(record)

        if issues:
            return LoadResult(
                success=False,
                kind=kind,
                records=[],
                errors=issues,
                total_rows=len(rows),
                kept_rows=0,
            )

        return LoadResult(
            success=True,
            kind=kind,
            records=records,
            errors=[],
            total_rows=len(rows),
            kept_rows=len(records),
        )

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "RecordsLoader OK: %s kept=%d/%d from %s",
                result.kind.value,
                result.kept_rows,
                result.total_rows,
                path,
            )
        else:
            logger.error(
                "RecordsLoader failed: %d issue(s) across %d row(s) in %s",
                len(result.errors),
                result.total_rows,
                path,
            )


__all__ = ["RecordsLoader"]
