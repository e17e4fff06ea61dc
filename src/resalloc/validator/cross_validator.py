# src/resalloc/validator/cross_validator.py
"""
@brief
Batch-level and cross-dataset consistency checks.

@details
Runs after every record of a batch has been validated on its own and
produces one partial ValidationResult per record (index-aligned) that the
engine merges into the per-record results.

Checks, in order:
    - duplicate key values inside the batch (all kinds);
    - structural checks: task Duration / PreferredPhases, worker AvailableSlots;
    - tasks vs registry workers: skill coverage, concurrency feasibility,
      phase-slot saturation;
    - tasks vs registry clients: client reference validity;
    - clients vs registry tasks: RequestedTaskIDs reference integrity.

Cross-dataset checks read the other collections from a DataContext snapshot
and are skipped when the collection they need is empty. A failing registry
lookup is logged and treated as an empty collection (fail-open): stale or
partial supporting data must never block validation.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Mapping, Sequence
from typing import Any

from resalloc.parsing.fields import (
    FIELD_ALIASES,
    first_non_blank,
    first_present,
    get_field_value,
    normalize_record,
    resolve_record_id,
)
from resalloc.parsing.lists import format_number, parse_number_list, parse_string_list, to_number
from resalloc.registry.registry import DataContext
from resalloc.schemas.models import (
    EntityKind,
    Finding,
    Severity,
    ValidationConfig,
    ValidationResult,
)

logger = logging.getLogger(__name__)

_TASK_ID_FIELDS = ("TaskID", "id", "title")
_CLIENT_ID_FIELDS = ("id", "ClientID", "clientId")
_CLIENT_REF_FIELDS = FIELD_ALIASES[EntityKind.TASKS]["ClientID"]


class CrossRecordValidator:
    """
    @brief
    Duplicate detection and relational/capacity invariants over a batch.

    @details
    Reads the registry only through the DataContext given at construction;
    never writes it. Holds no state between validate() calls.
    """

    def __init__(self, context: DataContext, config: ValidationConfig | None = None) -> None:
        self.context = context
        self.config = config or ValidationConfig()

    # ---------- Public API ----------
    def validate(self, records: Sequence[Any], kind: EntityKind | str) -> list[ValidationResult]:
        """
        @brief
        Run every batch-level check applicable to `kind`.

        @params
            records : Sequence[Any]
                The batch, in caller order.
            kind : EntityKind | str
                Entity kind of the batch.

        @returns
            One partial ValidationResult per record, index-aligned.
        """
        key = EntityKind(kind)
        results = [
            ValidationResult(record_id=resolve_record_id(r, key, i), record_type=key.value)
            for i, r in enumerate(records)
        ]
        if not records:
            return results

        views = [normalize_record(r, key) for r in records]

        # (1) Duplicates on raw key fields
        self._check_duplicates(records, key, results)

        # (2) Kind-specific structure and cross-dataset checks
        if key is EntityKind.TASKS:
            self._check_task_duration(views, results)
            self._check_preferred_phases(views, results)

            workers = [
                normalize_record(w, EntityKind.WORKERS)
                for w in self._collection(EntityKind.WORKERS)
            ]
            if workers:
                self._check_skill_coverage(views, workers, results)
                self._check_concurrency(views, workers, results)
                self._check_phase_saturation(views, workers, results)

            self._check_client_references(views, results)

        elif key is EntityKind.WORKERS:
            self._check_available_slots(views, results)

        elif key is EntityKind.CLIENTS:
            self._check_requested_tasks(views, results)

        return results

    # ---------- Registry access ----------
    def _collection(self, kind: EntityKind) -> Sequence[Any]:
        try:
            return self.context.get(kind)
        except Exception as e:
            logger.warning("Registry lookup for %s failed, check skipped: %s", kind.value, e)
            return ()

    # ---------- Checks ----------
    def _check_duplicates(
        self, records: Sequence[Any], kind: EntityKind, results: list[ValidationResult]
    ) -> None:
        """
        @brief
        Flag records sharing a key value (case-insensitive, trimmed).

        @details
        Every key field of the kind is checked independently, so one record
        can collect several duplicate warnings. Every member of a duplicate
        group receives the warning.
        """
        for field in self.config.key_fields.for_kind(kind):
            groups: dict[str, list[int]] = defaultdict(list)
            for index, record in enumerate(records):
                value = get_field_value(record, field)
                if not value:
                    continue
                normalized = str(value).strip().lower()
                if normalized:
                    groups[normalized].append(index)

            for value, indices in groups.items():
                if len(indices) < 2:
                    continue
                for index in indices:
                    results[index].add(
                        Finding(
                            field=field,
                            message=f'Duplicate {field}: "{value}" found in multiple records',
                            severity=Severity.WARNING,
                            suggestions=("Review for potential duplicate entries",),
                        )
                    )

    def _check_task_duration(
        self, views: list[dict[str, Any]], results: list[ValidationResult]
    ) -> None:
        for view, result in zip(views, results):
            duration = to_number(view.get("Duration"))
            if not math.isfinite(duration) or duration < 1:
                result.add(
                    Finding(
                        field="Duration",
                        message="Duration must be a positive number (>= 1)",
                        severity=Severity.ERROR,
                        suggestions=("Set Duration to an integer >= 1",),
                    )
                )

    def _check_preferred_phases(
        self, views: list[dict[str, Any]], results: list[ValidationResult]
    ) -> None:
        for view, result in zip(views, results):
            raw = view.get("PreferredPhases")
            if raw is None:
                continue
            if not parse_number_list(raw):
                result.add(
                    Finding(
                        field="PreferredPhases",
                        message="PreferredPhases must be a list/range like '1-3' or [2,4,5]",
                        severity=Severity.ERROR,
                    )
                )

    def _check_available_slots(
        self, views: list[dict[str, Any]], results: list[ValidationResult]
    ) -> None:
        for view, result in zip(views, results):
            raw = view.get("AvailableSlots")
            if raw is None:
                continue
            if not parse_number_list(raw):
                result.add(
                    Finding(
                        field="AvailableSlots",
                        message="AvailableSlots must be an array of numbers (e.g., [1,3,5])",
                        severity=Severity.ERROR,
                    )
                )

    def _check_skill_coverage(
        self,
        views: list[dict[str, Any]],
        workers: list[dict[str, Any]],
        results: list[ValidationResult],
    ) -> None:
        """Every skill a task requires must be held by at least one worker."""
        available = {s.lower() for w in workers for s in parse_string_list(w.get("Skills"))}

        for view, result in zip(views, results):
            required = parse_string_list(view.get("RequiredSkills"))
            missing = [s for s in required if s.lower() not in available]
            if missing:
                result.add(
                    Finding(
                        field="RequiredSkills",
                        message=f"Missing worker coverage for skills: {', '.join(missing)}",
                        severity=Severity.ERROR,
                        suggestions=("Add workers with these skills or adjust task requirements",),
                    )
                )

    def _check_concurrency(
        self,
        views: list[dict[str, Any]],
        workers: list[dict[str, Any]],
        results: list[ValidationResult],
    ) -> None:
        """MaxConcurrent must not exceed the number of fully qualified workers."""
        worker_skills = [{s.lower() for s in parse_string_list(w.get("Skills"))} for w in workers]

        for view, result in zip(views, results):
            required = {s.lower() for s in parse_string_list(view.get("RequiredSkills"))}
            raw = view.get("MaxConcurrent")
            max_concurrent = (
                to_number(raw) if raw is not None else float(self.config.default_max_concurrent)
            )
            if not math.isfinite(max_concurrent):
                continue

            qualified = sum(1 for skills in worker_skills if required <= skills)
            if max_concurrent > qualified:
                result.add(
                    Finding(
                        field="MaxConcurrent",
                        message=(
                            f"MaxConcurrent ({format_number(max_concurrent)}) exceeds number of "
                            f"qualified workers ({qualified})"
                        ),
                        severity=Severity.ERROR,
                        suggestions=("Lower MaxConcurrent or add more qualified workers",),
                    )
                )

    def _check_phase_saturation(
        self,
        views: list[dict[str, Any]],
        workers: list[dict[str, Any]],
        results: list[ValidationResult],
    ) -> None:
        """
        @brief
        Soft check of task duration against aggregate per-phase capacity.

        @details
        Capacity of phase p is the sum of MaxLoadPerPhase over workers whose
        AvailableSlots contain p. One warning per preferred phase whose
        capacity is below the task's duration.
        """
        default_load = float(self.config.default_max_load_per_phase)

        # (1) Build per-phase capacity
        capacity: dict[float, float] = defaultdict(float)
        for worker in workers:
            raw_load = worker.get("MaxLoadPerPhase")
            load = to_number(raw_load) if raw_load is not None else default_load
            if not math.isfinite(load):
                load = default_load
            for phase in parse_number_list(worker.get("AvailableSlots")):
                capacity[phase] += load

        # (2) Compare demand per preferred phase
        for view, result in zip(views, results):
            raw = view.get("Duration")
            duration = to_number(raw) if raw is not None else 1.0
            phases = parse_number_list(view.get("PreferredPhases"))
            if math.isnan(duration) or duration == 0 or not phases:
                continue
            for phase in phases:
                cap = capacity.get(phase, 0.0)
                if duration > cap:
                    result.add(
                        Finding(
                            field="PreferredPhases",
                            message=(
                                f"Phase {format_number(float(phase))} demand "
                                f"({format_number(duration)}) may exceed worker capacity "
                                f"({format_number(float(cap))})"
                            ),
                            severity=Severity.WARNING,
                            suggestions=("Adjust phases, increase capacity or reduce duration",),
                        )
                    )

    def _check_client_references(
        self, views: list[dict[str, Any]], results: list[ValidationResult]
    ) -> None:
        """A task's client reference must name a known client."""
        try:
            known = _identifiers(self._collection(EntityKind.CLIENTS), _CLIENT_ID_FIELDS)
        except Exception as e:
            logger.warning("Client lookup failed, references assumed valid: %s", e)
            return
        if not known:
            return

        for view, result in zip(views, results):
            # First non-blank alias wins, so an empty ClientID column does not hide clientId
            ref = first_non_blank(view, _CLIENT_REF_FIELDS)
            if ref is None:
                continue
            if ref.lower() not in known:
                result.add(
                    Finding(
                        field="ClientID",
                        message="Referenced client does not exist",
                        severity=Severity.ERROR,
                        suggestions=("Verify client ID exists in clients data",),
                    )
                )

    def _check_requested_tasks(
        self, views: list[dict[str, Any]], results: list[ValidationResult]
    ) -> None:
        """Every id in a client's RequestedTaskIDs must name a known task."""
        tasks = self._collection(EntityKind.TASKS)
        if not tasks:
            return
        known: set[str] = set()
        for task in tasks:
            if not isinstance(task, Mapping):
                continue
            value = first_present(task, _TASK_ID_FIELDS)
            if value is not None and str(value).strip():
                known.add(str(value).strip().lower())

        for view, result in zip(views, results):
            requested = parse_string_list(view.get("RequestedTaskIDs"))
            unknown = [task_id for task_id in requested if task_id.lower() not in known]
            if unknown:
                result.add(
                    Finding(
                        field="RequestedTaskIDs",
                        message=f"Unknown TaskIDs: {', '.join(unknown)}",
                        severity=Severity.ERROR,
                        suggestions=("Correct TaskIDs or add missing tasks",),
                    )
                )


def _identifiers(records: Sequence[Any], fields: tuple[str, ...]) -> set[str]:
    """Lower-cased identifiers found under any of `fields` across `records`."""
    ids: set[str] = set()
    for record in records:
        if not isinstance(record, Mapping):
            continue
        for name in fields:
            value = record.get(name)
            if value is not None and str(value).strip():
                ids.add(str(value).strip().lower())
    return ids


__all__ = ["CrossRecordValidator"]
