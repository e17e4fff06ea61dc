# src/resalloc/validator/validator.py
from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from resalloc.parsing.fields import resolve_record_id
from resalloc.registry.registry import EntityRegistry
from resalloc.report.aggregator import summarize
from resalloc.rules.catalog import RuleCatalog
from resalloc.schemas.models import Config, EntityKind, Report, ValidationResult
from resalloc.validator.cross_validator import CrossRecordValidator
from resalloc.validator.record_validator import RecordValidator

logger = logging.getLogger(__name__)


# ---------------------------
# ENGINE CLASS (instance core)
# ----------------------------
class ValidationEngine:
    """
    @brief
    Entry point used by data grids and dashboards.

    @details
    Wires together the rule catalog, the per-record validator, the
    cross-record validator and the report aggregator.

    Validation never raises on bad data: every input record yields exactly
    one ValidationResult, in input order. Only programming errors (unknown
    entity kind) raise.
    """

    def __init__(
        self,
        catalog: RuleCatalog | None = None,
        registry: EntityRegistry | None = None,
        config: Config | None = None,
    ) -> None:
        """
        @brief
        Initialize the engine.

        @details
        Missing collaborators are created with defaults. When only a config
        is given, the catalog is built from it (disabled and custom rules).

        @params
            catalog : RuleCatalog | None
                Rule set to validate against.
            registry : EntityRegistry | None
                Store consulted by cross-dataset checks.
            config : Config | None
                Runtime configuration (validation and report blocks).
        """
        self.config = config or Config()
        self.catalog = catalog or RuleCatalog.from_config(self.config)
        self.registry = registry or EntityRegistry()
        self.record_validator = RecordValidator(self.catalog)

    def validate_record(
        self, record: Any, kind: EntityKind | str, record_id: str | None = None
    ) -> ValidationResult:
        key = EntityKind(kind)
        if record_id is None:
            record_id = resolve_record_id(record, key)
        return self.record_validator.validate(record, key, record_id=record_id)

    def validate_batch(
        self, records: Sequence[Any], kind: EntityKind | str
    ) -> list[ValidationResult]:
        """
        @brief
        Validate a batch of records of one entity kind.

        @details
        (1) per-record rules for every record (optionally on a thread pool,
            order preserved);
        (2) batch-level checks against one registry snapshot;
        (3) positional merge; is_valid becomes per-record AND cross-record.

        @params
            records : Sequence[Any]
                Batch to validate.
            kind : EntityKind | str
                Entity kind of the batch.

        @returns
            One ValidationResult per input record, index-aligned.
        """
        key = EntityKind(kind)
        records = list(records)
        if not records:
            return []

        # (1) Per-record fan-out
        results = self._validate_each(records, key)

        # (2) Batch-level checks after all per-record results exist
        cross = CrossRecordValidator(self.registry.snapshot(), self.config.validation)
        cross_results = cross.validate(records, key)

        # (3) Merge positionally
        for result, extra in zip(results, cross_results):
            result.merge(extra)

        logger.info(
            "Validated %d %s record(s): %d valid",
            len(results),
            key.value,
            sum(1 for r in results if r.is_valid),
        )
        return results

    def summarize(self, results: Sequence[ValidationResult]) -> Report:
        return summarize(
            results,
            max_top_issues=self.config.report.max_top_issues,
            low_score_threshold=self.config.report.low_score_threshold,
        )

    def _validate_each(self, records: list[Any], kind: EntityKind) -> list[ValidationResult]:
        ids = [resolve_record_id(r, kind, i) for i, r in enumerate(records)]
        workers = self.config.validation.parallel_workers
        if workers <= 1 or len(records) < 2:
            return [
                self.record_validator.validate(r, kind, record_id=rid)
                for r, rid in zip(records, ids)
            ]

        # Records are independent and the catalog is only read here
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(
                pool.map(
                    lambda pair: self.record_validator.validate(pair[0], kind, record_id=pair[1]),
                    zip(records, ids),
                )
            )


# ----------------------------
# THIN FACADE (static script call)
# ----------------------------
def validate_batch(
    records: Sequence[Any],
    kind: EntityKind | str,
    *,
    registry: EntityRegistry | None = None,
    catalog: RuleCatalog | None = None,
    config: Config | None = None,
) -> list[ValidationResult]:
    """
    @brief
    High-level convenience wrapper around ValidationEngine.validate_batch.

    @details
    Builds a throwaway engine from the given collaborators. Without a
    registry, cross-dataset checks see empty collections and are skipped.
    """
    engine = ValidationEngine(catalog=catalog, registry=registry, config=config)
    return engine.validate_batch(records, kind)


__all__ = ["ValidationEngine", "validate_batch"]
