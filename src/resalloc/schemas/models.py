# src/resalloc/schemas/models.py
"""
@brief
Data contracts for the resalloc validation engine.

@details
Defines three groups of types:
    - enumerations shared by every component (EntityKind, Severity, RuleKind);
    - validation outcomes (Finding, ValidationResult) produced per record;
    - pydantic models for derived reports (Report and friends) and for the
      runtime configuration loaded from config.yaml (Config and its blocks).

Validation outcomes are plain dataclasses: they are created and merged in hot
loops and must compare equal across repeated runs, so `validated_at` is kept
out of equality. Reports and configuration are pydantic models to get schema
validation and `.model_dump()` serialization for free.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class EntityKind(str, Enum):
    """Fixed enumeration of entity collections held by the registry."""

    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RuleKind(str, Enum):
    REQUIRED = "required"
    FORMAT = "format"
    RANGE = "range"
    CUSTOM = "custom"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ------------------------------------------------------------
# Validation outcomes
# ------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Finding:
    """
    @brief
    A single validation issue attached to one record.

    @details
    Produced by both per-record rules and batch-level checks.
    Carries no identity beyond its content.
    """

    field: str
    message: str
    severity: Severity
    suggestions: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "field": self.field,
            "message": self.message,
            "severity": Severity(self.severity).value,
        }
        if self.suggestions:
            payload["suggestions"] = list(self.suggestions)
        return payload


@dataclass(slots=True)
class ValidationResult:
    """
    @brief
    Outcome of validating one record.

    @details
    Findings are routed into errors / warnings / suggestions by severity.
    `is_valid` always equals "no errors" after `add` and `merge`.
    `validated_at` does not take part in equality, so validating the same
    record twice against the same state yields equal results.

    Fields:
        record_id: Stable identifier of the record (may be None for a
                   single record without any id field).
        record_type: Entity kind value ("clients" | "workers" | "tasks").
        is_valid: True if no error-severity finding is attached.
        errors / warnings / suggestions: Findings split by severity.
        score: 0..100 data quality score of the per-record pass.
        validated_at: UTC timestamp of the validation.
    """

    record_id: str | None
    record_type: str
    is_valid: bool = True
    errors: list[Finding] = field(default_factory=list)
    warnings: list[Finding] = field(default_factory=list)
    suggestions: list[Finding] = field(default_factory=list)
    score: int = 100
    validated_at: datetime = field(default_factory=_utc_now, compare=False)

    def add(self, finding: Finding) -> None:
        severity = Severity(finding.severity)
        if severity is Severity.ERROR:
            self.errors.append(finding)
        elif severity is Severity.WARNING:
            self.warnings.append(finding)
        else:
            self.suggestions.append(finding)
        self.is_valid = self.is_valid and not self.errors

    def merge(self, other: ValidationResult) -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.suggestions.extend(other.suggestions)
        self.is_valid = self.is_valid and other.is_valid and not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record_id,
            "record_type": self.record_type,
            "is_valid": self.is_valid,
            "errors": [f.to_dict() for f in self.errors],
            "warnings": [f.to_dict() for f in self.warnings],
            "suggestions": [f.to_dict() for f in self.suggestions],
            "score": self.score,
            "validated_at": self.validated_at.isoformat(timespec="seconds"),
        }


# ------------------------------------------------------------
# Derived report
# ------------------------------------------------------------
class ReportSummary(BaseModel):
    total_records: int = 0
    valid_records: int = 0
    error_count: int = 0
    warning_count: int = 0
    average_score: float = 0.0


class IssueStat(BaseModel):
    message: str
    count: int
    severity: Severity


class Report(BaseModel):
    """
    @brief
    Aggregated view over a set of validation results.

    @details
    Derived, never persisted by the engine itself; see report.report_store
    for the optional JSON export.
    """

    summary: ReportSummary = Field(default_factory=ReportSummary)
    top_issues: list[IssueStat] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utc_now)


# ------------------------------------------------------------
# Runtime configuration (config.yaml)
# ------------------------------------------------------------
class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration contracts.

    @details
    Forbids unknown fields so typos in config.yaml fail loudly.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,
    }


class RuleSpec(_StrictBaseModel):
    """
    @brief
    Declarative validation rule as written in config.yaml.

    @details
    Compiled into a ValidationRule by rules.catalog.compile_rule_spec.
    Only data-driven predicate types are expressible here; custom Python
    predicates are registered through RuleCatalog.add_rule.
    """

    id: str = Field(..., min_length=1, description="Rule id, unique within its entity")
    name: str | None = None
    entity: EntityKind = Field(..., description="clients | workers | tasks")
    field: str = Field(..., min_length=1, description="Record field (dotted path allowed)")
    type: Literal["required", "range", "pattern", "enum"]
    min: float | None = None
    max: float | None = None
    pattern: str | None = None
    values: list[str] | None = None
    allow_missing: bool = False
    message: str = Field(..., min_length=1)
    severity: Severity = Severity.ERROR
    auto_fixable: bool = False
    fix_suggestion: str | None = None


class KeyFieldsConfig(_StrictBaseModel):
    """Duplicate-detection key fields per entity kind, in priority order."""

    clients: list[str] = Field(
        default_factory=lambda: ["id", "ClientID", "email", "name", "ClientName"]
    )
    workers: list[str] = Field(
        default_factory=lambda: ["id", "WorkerID", "email", "name", "WorkerName"]
    )
    tasks: list[str] = Field(default_factory=lambda: ["id", "TaskID", "TaskName"])

    def for_kind(self, kind: EntityKind | str) -> list[str]:
        return list(getattr(self, EntityKind(kind).value))


class ValidationConfig(_StrictBaseModel):
    """
    @brief
    Controls behaviour of the validation engine.

    @details
    Batch fan-out, duplicate keys, capacity defaults and catalog customization.
    """

    parallel_workers: int = Field(
        1, ge=1, description="Threads for per-record validation (1 = sequential)"
    )
    key_fields: KeyFieldsConfig = Field(default_factory=KeyFieldsConfig)
    default_max_concurrent: float = Field(
        1.0, description="MaxConcurrent assumed when a task does not declare one"
    )
    default_max_load_per_phase: float = Field(
        1.0, description="MaxLoadPerPhase assumed when a worker does not declare one"
    )
    disabled_rules: dict[EntityKind, list[str]] = Field(
        default_factory=dict, description="Default rule ids to drop, per entity"
    )
    custom_rules: list[RuleSpec] = Field(default_factory=list)


class ReportConfig(_StrictBaseModel):
    max_top_issues: int = Field(10, ge=1, description="Length cap of Report.top_issues")
    low_score_threshold: float = Field(
        70.0, ge=0.0, le=100.0, description="Average score below which completeness advice is given"
    )
    write_report: bool = True
    write_findings_csv: bool = True


class InputsConfig(_StrictBaseModel):
    """JSON record files per entity kind (already decoded spreadsheet rows)."""

    clients: str | None = None
    workers: str | None = None
    tasks: str | None = None


class Config(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.

    @details
    Every block is defaulted, so `Config()` is a complete working configuration.
    """

    log_level: str = Field("INFO", description="Root logging level for the CLI")
    output_dir: str | None = "data/output"
    inputs: InputsConfig = Field(default_factory=InputsConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)


__all__ = [
    "EntityKind",
    "Severity",
    "RuleKind",
    "Finding",
    "ValidationResult",
    "ReportSummary",
    "IssueStat",
    "Report",
    "RuleSpec",
    "KeyFieldsConfig",
    "ValidationConfig",
    "ReportConfig",
    "InputsConfig",
    "Config",
]
