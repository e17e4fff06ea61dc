import json
from pathlib import Path

import pytest

from resalloc.errors import DataError
from scripts.run import main, run_pipeline

ROOT = Path(__file__).resolve().parents[1]


def _write(path: Path, rows) -> str:
    path.write_text(json.dumps(rows), encoding="utf-8")
    return str(path)


@pytest.fixture()
def inputs(tmp_path: Path, valid_client, valid_worker, valid_task) -> dict[str, str]:
    return {
        "clients": _write(tmp_path / "clients.json", [{**valid_client, "RequestedTaskIDs": "T1"}]),
        "workers": _write(tmp_path / "workers.json", [valid_worker]),
        "tasks": _write(
            tmp_path / "tasks.json", [{**valid_task, "clientId": "C1", "RequiredSkills": "python"}]
        ),
    }


def test_pipeline_end_to_end_clean(tmp_path: Path, inputs):
    """
    @brief
    Clean data validates and every artifact is written.

    @details
    Loads all three kinds, validates each against the full registry and
    writes per-kind reports, the overall report and the findings CSV.
    """
    # --- Act ---
    out = run_pipeline(None, tmp_path / "out", inputs=inputs)

    # --- Assert ---
    assert out["valid"] is True
    assert set(out["kinds"]) == {"clients", "workers", "tasks"}
    assert out["summary"]["total_records"] == 3
    for name in ("clients", "workers", "tasks"):
        assert (tmp_path / "out" / f"validation_report_{name}.json").exists()
    assert out["artifacts"]["validation_report"].exists()
    assert out["artifacts"]["findings_csv"].exists()


def test_pipeline_detects_cross_dataset_errors(tmp_path: Path, inputs, valid_client):
    _write(Path(inputs["clients"]), [{**valid_client, "RequestedTaskIDs": "T1,T404"}])

    out = run_pipeline(None, tmp_path / "out", inputs=inputs)

    assert out["valid"] is False
    assert out["kinds"]["clients"]["error_count"] == 1


def test_pipeline_without_inputs_raises(tmp_path: Path):
    with pytest.raises(DataError):
        run_pipeline(None, tmp_path)


def test_pipeline_failed_load_raises_and_reports(tmp_path: Path, inputs):
    _write(Path(inputs["workers"]), [{"WorkerID": "W1"}, "not a row"])

    with pytest.raises(DataError, match="workers load failed"):
        run_pipeline(None, tmp_path / "out", inputs=inputs)
    assert (tmp_path / "out" / "load_errors_workers.json").exists()


def test_main_exit_codes(tmp_path: Path, inputs):
    """
    @brief
    0 for valid data, 1 for invalid data or controlled failures.
    """
    out = str(tmp_path / "out")

    argv = [f"--{name}={path}" for name, path in inputs.items()]

    assert main([*argv, "--output", out]) == 0
    assert main(["--output", out]) == 1
    assert main(["--config", str(tmp_path / "missing.yaml"), "--output", out]) == 1


def test_main_with_repository_config(tmp_path: Path):
    """
    @brief
    Shipped config and sample data run end to end without crashing.
    """
    code = main(["--config", str(ROOT / "config" / "config.yaml"), "--output", str(tmp_path)])

    assert code in (0, 1)
    assert (tmp_path / "validation_report.json").exists()
