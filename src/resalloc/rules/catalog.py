# src/resalloc/rules/catalog.py
from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from resalloc.errors import RuleError
from resalloc.rules.predicates import (
    CustomFn,
    EnumMember,
    Pattern,
    Predicate,
    Range,
    Required,
)
from resalloc.schemas.models import Config, EntityKind, RuleKind, RuleSpec, Severity

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


@dataclass
class ValidationRule:
    """
    @brief
    One field-level validation rule.

    @details
    Rules are data: the record validator is generic over whatever rules the
    catalog holds. `kind` is descriptive (required/format/range/custom);
    behaviour comes entirely from `predicate`.
    """

    id: str
    name: str
    field: str
    kind: RuleKind
    predicate: Predicate
    message: str
    severity: Severity = Severity.ERROR
    auto_fixable: bool = False
    fix_suggestion: str | None = None


# ----------------------------
# Custom predicates used by the defaults
# ----------------------------
def _non_empty_list(value: Any, record: Mapping[str, Any]) -> bool:
    return isinstance(value, (list, tuple)) and len(value) > 0


def _deadline_in_future(value: Any, record: Mapping[str, Any]) -> bool:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError:
            return False
    else:
        return False
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment > datetime.now(timezone.utc)


def default_rules() -> dict[EntityKind, list[ValidationRule]]:
    """
    @brief
    Build the canonical default rule set.

    @details
    Returns fresh rule objects on every call, so catalogs never share
    mutable state.
    """
    return {
        EntityKind.CLIENTS: [
            ValidationRule(
                id="client-name-required",
                name="Client Name Required",
                field="ClientName",
                kind=RuleKind.REQUIRED,
                predicate=Required(),
                message="Client name is required",
            ),
            ValidationRule(
                id="client-id-required",
                name="Client ID Required",
                field="ClientID",
                kind=RuleKind.REQUIRED,
                predicate=Required(),
                message="Client ID is required",
            ),
            ValidationRule(
                id="client-priority-level-range",
                name="Priority Level Range",
                field="PriorityLevel",
                kind=RuleKind.RANGE,
                predicate=Range(1, 5),
                message="Priority level must be between 1 and 5",
            ),
            ValidationRule(
                id="client-budget-range",
                name="Budget Range Check",
                field="budget",
                kind=RuleKind.RANGE,
                predicate=Range(1_000, 1_000_000, allow_missing=True),
                message="Budget should be between $1,000 and $1,000,000",
                severity=Severity.WARNING,
            ),
        ],
        EntityKind.WORKERS: [
            ValidationRule(
                id="worker-name-required",
                name="Worker Name Required",
                field="name",
                kind=RuleKind.REQUIRED,
                predicate=Required(),
                message="Worker name is required",
            ),
            ValidationRule(
                id="worker-email-format",
                name="Valid Email Format",
                field="email",
                kind=RuleKind.FORMAT,
                predicate=Pattern(EMAIL_PATTERN),
                message="Please provide a valid email address",
                auto_fixable=True,
                fix_suggestion="Check email format (example@domain.com)",
            ),
            ValidationRule(
                id="worker-rate-range",
                name="Hourly Rate Range",
                field="hourlyRate",
                kind=RuleKind.RANGE,
                predicate=Range(15, 500),
                message="Hourly rate should be between $15 and $500",
                severity=Severity.WARNING,
            ),
            ValidationRule(
                id="worker-skills-required",
                name="Skills Required",
                field="skills",
                kind=RuleKind.CUSTOM,
                predicate=CustomFn(_non_empty_list, "non-empty skill list"),
                message="At least one skill is required",
            ),
            ValidationRule(
                id="worker-availability-valid",
                name="Valid Availability Status",
                field="availability",
                kind=RuleKind.CUSTOM,
                predicate=EnumMember(("available", "busy", "unavailable")),
                message="Availability must be available, busy, or unavailable",
                auto_fixable=True,
                fix_suggestion="Use: available, busy, or unavailable",
            ),
        ],
        EntityKind.TASKS: [
            ValidationRule(
                id="task-title-required",
                name="Task Title Required",
                field="title",
                kind=RuleKind.REQUIRED,
                predicate=Required(),
                message="Task title is required",
            ),
            ValidationRule(
                id="task-deadline-future",
                name="Future Deadline",
                field="deadline",
                kind=RuleKind.CUSTOM,
                predicate=CustomFn(_deadline_in_future, "deadline later than now"),
                message="Deadline should be in the future",
                severity=Severity.WARNING,
            ),
            ValidationRule(
                id="task-hours-range",
                name="Estimated Hours Range",
                field="estimatedHours",
                kind=RuleKind.RANGE,
                predicate=Range(1, 1000),
                message="Estimated hours should be between 1 and 1000",
                severity=Severity.WARNING,
            ),
            ValidationRule(
                id="task-priority-valid",
                name="Valid Priority Level",
                field="priority",
                kind=RuleKind.CUSTOM,
                predicate=EnumMember(("urgent", "high", "medium", "low")),
                message="Priority must be urgent, high, medium, or low",
                auto_fixable=True,
                fix_suggestion="Use: urgent, high, medium, or low",
            ),
            ValidationRule(
                id="task-status-valid",
                name="Valid Task Status",
                field="status",
                kind=RuleKind.CUSTOM,
                predicate=EnumMember(
                    ("pending", "in-progress", "completed", "cancelled"), allow_missing=True
                ),
                message="Status must be pending, in-progress, completed, or cancelled",
                severity=Severity.WARNING,
                auto_fixable=True,
                fix_suggestion="Use: pending, in-progress, completed, or cancelled",
            ),
        ],
    }


def compile_rule_spec(spec: RuleSpec) -> ValidationRule:
    """
    @brief
    Turn a declarative RuleSpec from config.yaml into a ValidationRule.

    @details
    Maps spec.type onto the matching predicate variant and checks that the
    parameters that variant needs are present.

    @raises
        RuleError
            Missing bounds/pattern/values or an invalid regular expression.
    """
    source = "catalog.compile_rule_spec"
    predicate: Predicate
    if spec.type == "required":
        predicate, kind = Required(), RuleKind.REQUIRED
    elif spec.type == "range":
        if spec.min is None or spec.max is None or spec.min > spec.max:
            raise RuleError(
                f"Range rule {spec.id!r} needs min <= max",
                source=source,
                suggested_action="Set both 'min' and 'max' with min <= max.",
            )
        predicate, kind = Range(spec.min, spec.max, spec.allow_missing), RuleKind.RANGE
    elif spec.type == "pattern":
        if not spec.pattern:
            raise RuleError(
                f"Pattern rule {spec.id!r} has no pattern",
                source=source,
                suggested_action="Set 'pattern' to a regular expression.",
            )
        try:
            predicate, kind = Pattern(spec.pattern), RuleKind.FORMAT
        except re.error as e:
            raise RuleError(
                f"Pattern rule {spec.id!r} has an invalid regex: {e}",
                source=source,
                suggested_action="Fix the regular expression syntax.",
            ) from e
    else:
        if not spec.values:
            raise RuleError(
                f"Enum rule {spec.id!r} has no values",
                source=source,
                suggested_action="List the allowed values under 'values'.",
            )
        predicate, kind = EnumMember(tuple(spec.values), spec.allow_missing), RuleKind.CUSTOM

    return ValidationRule(
        id=spec.id,
        name=spec.name or spec.id,
        field=spec.field,
        kind=kind,
        predicate=predicate,
        message=spec.message,
        severity=Severity(spec.severity),
        auto_fixable=spec.auto_fixable,
        fix_suggestion=spec.fix_suggestion,
    )


def _checked(rule: ValidationRule, *, source: str) -> ValidationRule:
    """
    @brief
    Reject rules the record validator could not evaluate.

    @details
    Coerces severity and kind to their enums; id and field must be non-empty
    strings and the predicate must expose evaluate().

    @raises
        RuleError
            On any malformed attribute.
    """
    problems = [
        name
        for name in ("id", "field")
        if not isinstance(getattr(rule, name), str) or not getattr(rule, name).strip()
    ]
    if not callable(getattr(rule.predicate, "evaluate", None)):
        problems.append("predicate")
    try:
        severity, kind = Severity(rule.severity), RuleKind(rule.kind)
    except ValueError as e:
        raise RuleError(
            f"Invalid rule {rule.id!r}: {e}",
            source=source,
            suggested_action=(
                "Use severity error/warning/info and kind required/format/range/custom."
            ),
        ) from e
    if problems:
        raise RuleError(
            f"Invalid rule {rule.id!r}: bad {', '.join(problems)}",
            source=source,
            suggested_action="Give the rule a non-empty id and field and a typed predicate.",
        )
    return dataclasses.replace(rule, severity=severity, kind=kind)


class RuleCatalog:
    """
    @brief
    Entity kind → ordered list of validation rules.

    @details
    Seeded with default_rules() and mutable at runtime. Mutations apply to
    every subsequent validation; there is no versioning or rollback.
    Rule ids are unique within one entity kind.
    """

    def __init__(self, seed_defaults: bool = True) -> None:
        self._rules: dict[EntityKind, list[ValidationRule]] = {kind: [] for kind in EntityKind}
        if seed_defaults:
            for kind, rules in default_rules().items():
                for rule in rules:
                    self.add_rule(kind, rule)

    @classmethod
    def from_config(cls, cfg: Config) -> RuleCatalog:
        """
        @brief
        Build a catalog customized by the `validation` block of config.yaml.

        @details
        (1) seed defaults, (2) drop `disabled_rules`, (3) add compiled
        `custom_rules` in file order.
        """
        catalog = cls(seed_defaults=True)
        for kind, rule_ids in cfg.validation.disabled_rules.items():
            for rule_id in rule_ids:
                if not catalog.remove_rule(kind, rule_id):
                    logger.warning(
                        "Disabled rule %s not found for %s", rule_id, EntityKind(kind).value
                    )
        for spec in cfg.validation.custom_rules:
            catalog.add_rule(spec.entity, compile_rule_spec(spec))
        return catalog

    def add_rule(self, kind: EntityKind | str, rule: ValidationRule) -> None:
        key = EntityKind(kind)
        if any(r.id == rule.id for r in self._rules[key]):
            raise RuleError(
                f"Duplicate rule id {rule.id!r} for {key.value}",
                source="RuleCatalog.add_rule",
                suggested_action="Use a unique id or update the existing rule instead.",
            )
        self._rules[key].append(_checked(rule, source="RuleCatalog.add_rule"))

    def remove_rule(self, kind: EntityKind | str, rule_id: str) -> bool:
        rules = self._rules[EntityKind(kind)]
        for i, rule in enumerate(rules):
            if rule.id == rule_id:
                del rules[i]
                return True
        return False

    def update_rule(
        self, kind: EntityKind | str, rule_id: str, **patch: Any
    ) -> ValidationRule | None:
        """
        @brief
        Apply a partial update to an existing rule.

        @returns
            The updated rule, or None if no rule has that id.

        @raises
            RuleError
                Unknown attribute in `patch`, or a renamed id that collides.
        """
        key = EntityKind(kind)
        rules = self._rules[key]
        known = {f.name for f in dataclasses.fields(ValidationRule)}
        unknown = sorted(set(patch) - known)
        if unknown:
            raise RuleError(
                f"Unknown rule attribute(s): {', '.join(unknown)}",
                source="RuleCatalog.update_rule",
                suggested_action=f"Patch only: {', '.join(sorted(known))}",
            )

        for i, rule in enumerate(rules):
            if rule.id != rule_id:
                continue
            new_id = patch.get("id", rule_id)
            if new_id != rule_id and any(r.id == new_id for r in rules):
                raise RuleError(
                    f"Duplicate rule id {new_id!r} for {key.value}",
                    source="RuleCatalog.update_rule",
                    suggested_action="Choose an id not used by another rule.",
                )
            rules[i] = _checked(
                dataclasses.replace(rule, **patch), source="RuleCatalog.update_rule"
            )
            return rules[i]
        return None

    def get_rules(self, kind: EntityKind | str) -> list[ValidationRule]:
        return list(self._rules[EntityKind(kind)])

    def rule_ids(self, kind: EntityKind | str) -> list[str]:
        return [rule.id for rule in self._rules[EntityKind(kind)]]


__all__ = ["ValidationRule", "RuleCatalog", "default_rules", "compile_rule_spec", "EMAIL_PATTERN"]
