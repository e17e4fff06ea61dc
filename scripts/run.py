# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from resalloc.dataloader.config_loader import ConfigLoader
from resalloc.dataloader.postload_handler import LoadResultHandler
from resalloc.dataloader.records_loader import RecordsLoader
from resalloc.errors import DataError, ResallocError
from resalloc.registry.registry import EntityRegistry
from resalloc.report.report_store import save_report, write_findings_csv
from resalloc.schemas.models import EntityKind, ValidationResult
from resalloc.validator.validator import ValidationEngine

# Clients reference tasks and tasks reference workers/clients, so every
# collection is loaded before any batch is validated.
_KIND_ORDER = (EntityKind.CLIENTS, EntityKind.WORKERS, EntityKind.TASKS)


def _setup_logging(level: str = "INFO") -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    Uses a simple console format; unknown level names fall back to INFO.
    """
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="[%(levelname)s] %(message)s",
        force=True,
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the validation pipeline.

    @details
    Entity file flags override the `inputs` block of the config file.
    """
    parser = argparse.ArgumentParser(
        prog="resalloc-validate",
        description="Validate clients/workers/tasks data: load → validate → report",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config YAML (optional)")
    parser.add_argument("--clients", type=str, default=None, help="Clients JSON file")
    parser.add_argument("--workers", type=str, default=None, help="Workers JSON file")
    parser.add_argument("--tasks", type=str, default=None, help="Tasks JSON file")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for reports (default: config output_dir or data/output)",
    )
    return parser.parse_args(argv)


def run_pipeline(
    config_path: Path | None,
    output_dir: Path | None = None,
    inputs: dict[str, str | None] | None = None,
) -> dict[str, Any]:
    """
    @brief
    Executes the full validation pipeline.

    @details
    Performs sequential steps:
    (1) Load configuration.
    (2) Load every configured entity file and publish it to the registry.
    (3) Validate each loaded kind against the populated registry.
    (4) Summarize per kind and overall; persist reports.

    @params
        config_path : Path | None
            YAML configuration file; None uses defaults.
        output_dir : Path | None
            Directory for artifacts; defaults to config.output_dir.
        inputs : dict[str, str | None] | None
            Per-kind file paths overriding config.inputs.

    @returns
        Dictionary with the overall validity flag, per-kind summaries and
        artifact paths.

    @raises
        ResallocError
            On configuration or data loading failures.
    """
    # (1) Configuration and output directory
    t0 = time.perf_counter()
    cfg = ConfigLoader().load(config_path)
    out_dir = Path(output_dir or cfg.output_dir or "data/output")
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = {kind: getattr(cfg.inputs, kind.value) for kind in _KIND_ORDER}
    for name, value in (inputs or {}).items():
        if value:
            paths[EntityKind(name)] = value

    if not any(paths.values()):
        raise DataError(
            message="No input files configured",
            source="scripts.run",
            suggested_action="Pass --clients/--workers/--tasks or set inputs in config.yaml.",
        )

    # (2) Load and publish every collection before validating any of them
    registry = EntityRegistry()
    handler = LoadResultHandler(output_dir=out_dir, registry=registry)
    loader = RecordsLoader()
    loaded: list[EntityKind] = []
    for kind in _KIND_ORDER:
        if not paths[kind]:
            continue
        logging.info("Loading %s: %s", kind.value, paths[kind])
        if handler.handle(loader.load(Path(paths[kind]), kind)) is None:
            raise DataError(
                message=f"{kind.value} load failed, see load_errors_{kind.value}.json",
                source="scripts.run",
                suggested_action="Fix the reported rows and rerun the pipeline.",
            )
        loaded.append(kind)

    # (3) Validate each kind against the complete registry
    engine = ValidationEngine(registry=registry, config=cfg)
    all_results: list[ValidationResult] = []
    kinds: dict[str, Any] = {}
    artifacts: dict[str, Path | None] = {}
    for kind in loaded:
        results = engine.validate_batch(registry.get_collection(kind), kind)
        report = engine.summarize(results)
        all_results.extend(results)
        kinds[kind.value] = report.summary.model_dump()

        if cfg.report.write_report:
            artifacts[f"{kind.value}_report"] = save_report(
                report, results, out_dir, filename=f"validation_report_{kind.value}.json"
            )

    # (4) Overall report and findings table
    overall = engine.summarize(all_results)
    if cfg.report.write_report:
        artifacts["validation_report"] = save_report(overall, all_results, out_dir)
    if cfg.report.write_findings_csv:
        artifacts["findings_csv"] = write_findings_csv(all_results, out_dir / "findings.csv")

    for line in overall.recommendations:
        logging.info("Recommendation: %s", line)
    logging.info("Pipeline finished in %.2f s", time.perf_counter() - t0)

    return {
        "valid": overall.summary.valid_records == overall.summary.total_records,
        "kinds": kinds,
        "summary": overall.summary.model_dump(),
        "artifacts": artifacts,
    }


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes:
      0 – every record valid
      1 – invalid records, or controlled failure (config/data)
      2 – unexpected crash
    """
    args = _parse_args(argv)
    _setup_logging()

    try:
        if args.config:
            _setup_logging(ConfigLoader().load(Path(args.config)).log_level)
        result = run_pipeline(
            Path(args.config) if args.config else None,
            Path(args.output) if args.output else None,
            inputs={"clients": args.clients, "workers": args.workers, "tasks": args.tasks},
        )
        return 0 if result["valid"] else 1

    except ResallocError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
