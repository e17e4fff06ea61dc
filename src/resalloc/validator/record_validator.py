# src/resalloc/validator/record_validator.py
from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from resalloc.parsing.fields import get_field_value
from resalloc.rules.catalog import RuleCatalog
from resalloc.rules.predicates import evaluate_predicate
from resalloc.schemas.models import EntityKind, Finding, ValidationResult

logger = logging.getLogger(__name__)

ERROR_PENALTY = 20
WARNING_PENALTY = 10
SUGGESTION_PENALTY = 5
COMPLETENESS_BONUS = 10


def quality_score(
    record: Any,
    errors: Sequence[Finding],
    warnings: Sequence[Finding],
    suggestions: Sequence[Finding],
) -> int:
    """
    @brief
    Compute the 0..100 data quality score of one record.

    @details
    score = clamp(0, 100, round(100 - 20·E - 10·W - 5·S + 10·(filled/fields)))
    where a field is filled unless it is None or "". Rounding is half-up
    (x.5 rounds toward +inf) rather than Python's banker's rounding.
    A record without fields earns no completeness bonus.

    @params
        record : Any
            Raw record (non-mappings have no fields).
        errors, warnings, suggestions : Sequence[Finding]
            Findings of the per-record pass.

    @returns
        Integer score in [0, 100].
    """
    score = 100.0
    score -= ERROR_PENALTY * len(errors)
    score -= WARNING_PENALTY * len(warnings)
    score -= SUGGESTION_PENALTY * len(suggestions)

    values = list(record.values()) if isinstance(record, Mapping) else []
    if values:
        filled = sum(1 for v in values if v is not None and v != "")
        score += COMPLETENESS_BONUS * filled / len(values)

    return max(0, min(100, math.floor(score + 0.5)))


class RecordValidator:
    """
    @brief
    Evaluates the catalog's rules against a single record.

    @details
    Pure with respect to (record, current catalog state): no registry access
    and no shared mutable state, so records of a batch may be validated
    concurrently. Predicate faults are fail-open (see evaluate_predicate).
    """

    def __init__(self, catalog: RuleCatalog) -> None:
        self.catalog = catalog

    def validate(
        self, record: Any, kind: EntityKind | str, record_id: str | None = None
    ) -> ValidationResult:
        """
        @brief
        Validate one record against every rule registered for its kind.

        @details
        (1) extract each rule's field (dotted path), (2) evaluate the rule's
        predicate, (3) route failures by severity, (4) score the record.

        @params
            record : Any
                Record to validate; read, never mutated.
            kind : EntityKind | str
                Entity kind selecting the rule group.
            record_id : str | None
                Identifier stored in the result.

        @returns
            ValidationResult with is_valid == (no errors).
        """
        key = EntityKind(kind)
        result = ValidationResult(record_id=record_id, record_type=key.value)
        subject = record if isinstance(record, Mapping) else {}

        # (1) + (2) Evaluate every rule, fail-open on faults
        for rule in self.catalog.get_rules(key):
            try:
                value = get_field_value(subject, rule.field)
            except Exception as e:
                logger.warning("Rule %s field lookup faulted, treated as passed: %s", rule.id, e)
                continue
            outcome = evaluate_predicate(rule.predicate, value, subject, rule_id=rule.id)
            if outcome.passed:
                continue

            # (3) Route failure into errors / warnings / suggestions
            result.add(
                Finding(
                    field=rule.field,
                    message=rule.message,
                    severity=rule.severity,
                    suggestions=(rule.fix_suggestion,) if rule.fix_suggestion else None,
                )
            )

        # (4) Score from the per-record findings only
        result.score = quality_score(record, result.errors, result.warnings, result.suggestions)
        return result


__all__ = ["RecordValidator", "quality_score"]
