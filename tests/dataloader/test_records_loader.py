import json
from pathlib import Path

import pytest

from resalloc.dataloader.records_loader import RecordsLoader
from resalloc.errors import DataError
from resalloc.schemas.models import EntityKind


def _write(tmp_path: Path, payload, name: str = "rows.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_keeps_rows_and_assigns_row_index(tmp_path: Path):
    """
    @brief
    Rows become records; blank rows are skipped but still counted.

    @details
    `_rowIndex` is the 1-based position in the file and is not overwritten
    when the row already carries one.
    """
    # --- Arrange ---
    path = _write(
        tmp_path,
        [
            {"ClientID": "C1"},
            {"ClientID": "", "ClientName": None},
            {"ClientID": "C3", "_rowIndex": 99},
        ],
    )

    # --- Act ---
    result = RecordsLoader().load(path, "clients")

    # --- Assert ---
    assert result.success is True
    assert result.kind is EntityKind.CLIENTS
    assert result.total_rows == 3
    assert result.kept_rows == 2
    assert [r["_rowIndex"] for r in result.records] == [1, 99]


def test_non_object_rows_fail_the_load(tmp_path: Path):
    path = _write(tmp_path, [{"TaskID": "T1"}, "oops", 3])

    result = RecordsLoader().load(path, EntityKind.TASKS)

    assert result.success is False
    assert result.records == []
    assert [e["row_no"] for e in result.errors] == [2, 3]
    assert {e["kind"] for e in result.errors} == {"not_an_object"}


def test_empty_array_is_a_successful_empty_load(tmp_path: Path):
    result = RecordsLoader().load(_write(tmp_path, []), "workers")

    assert result.success is True
    assert result.records == []


def test_fatal_file_errors(tmp_path: Path):
    """
    @brief
    Unreadable input raises DataError instead of returning a LoadResult.
    """
    # --- Arrange ---
    loader = RecordsLoader()
    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(DataError, match="not found"):
        loader.load(tmp_path / "missing.json", "tasks")
    with pytest.raises(DataError, match="Invalid JSON"):
        loader.load(broken, "tasks")
    with pytest.raises(DataError, match="must be a JSON array"):
        loader.load(_write(tmp_path, {"rows": []}), "tasks")
    with pytest.raises(DataError, match="Invalid path type"):
        loader.load(str(broken), "tasks")
