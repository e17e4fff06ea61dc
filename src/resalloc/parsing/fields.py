# src/resalloc/parsing/fields.py
"""
@brief
Field lookup, alias resolution and record identity helpers.

@details
Uploaded spreadsheets name the same column in several ways (ClientID,
clientId, client_id, ...). FIELD_ALIASES maps every canonical field to its
accepted spellings, canonical name first where it is itself accepted.
normalize_record() resolves the aliases once so that batch-level checks
only ever read canonical names.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from resalloc.schemas.models import EntityKind

FIELD_ALIASES: dict[EntityKind, dict[str, tuple[str, ...]]] = {
    EntityKind.CLIENTS: {
        "ClientID": ("ClientID", "clientId", "client_id", "id"),
        "RequestedTaskIDs": ("RequestedTaskIDs", "requestedTasks", "tasks"),
    },
    EntityKind.WORKERS: {
        "WorkerID": ("WorkerID", "workerId", "worker_id", "id"),
        "Skills": ("Skills", "skills"),
        "AvailableSlots": ("AvailableSlots", "availableSlots"),
        "MaxLoadPerPhase": ("MaxLoadPerPhase", "maxLoadPerPhase"),
    },
    EntityKind.TASKS: {
        "TaskID": ("TaskID", "id", "title"),
        "ClientID": ("clientId", "ClientID", "client_id"),
        "Duration": ("Duration", "duration", "estimatedHours", "estimated_hours"),
        "PreferredPhases": ("PreferredPhases", "preferredPhases"),
        "RequiredSkills": ("RequiredSkills", "requiredSkills"),
        "MaxConcurrent": ("MaxConcurrent", "maxConcurrent"),
    },
}

ID_FIELDS: dict[EntityKind, str] = {
    EntityKind.CLIENTS: "ClientID",
    EntityKind.WORKERS: "WorkerID",
    EntityKind.TASKS: "TaskID",
}


def get_field_value(record: Any, path: str) -> Any:
    """
    @brief
    Resolve a dotted path ("address.city") against nested mappings.

    @returns
        The value, or None as soon as a segment is missing or not a mapping.
    """
    current = record
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def first_present(record: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    """Return the first non-null value among `names`, else None."""
    for name in names:
        value = record.get(name)
        if value is not None:
            return value
    return None


def first_non_blank(record: Mapping[str, Any], names: tuple[str, ...]) -> str | None:
    """Return the first value among `names` that is not None or blank, trimmed."""
    for name in names:
        value = record.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def normalize_record(record: Any, kind: EntityKind | str) -> dict[str, Any]:
    """
    @brief
    Build a canonical view of a record for batch-level checks.

    @details
    Returns a shallow copy in which every canonical field that is missing or
    null is filled from the first non-null alias. Original keys are kept.
    Non-mapping records normalize to an empty dict.

    @params
        record : Any
            Raw record as uploaded.
        kind : EntityKind | str
            Entity kind selecting the alias table.

    @returns
        New dict; the input record is never mutated.
    """
    if not isinstance(record, Mapping):
        return {}
    view = dict(record)
    for canonical, aliases in FIELD_ALIASES[EntityKind(kind)].items():
        if view.get(canonical) is None:
            value = first_present(record, aliases)
            if value is not None:
                view[canonical] = value
    return view


def resolve_record_id(record: Any, kind: EntityKind | str, index: int | None = None) -> str | None:
    """
    @brief
    Determine the stable identifier of a record.

    @details
    Tries `id`, then the kind-specific ID field, then an ingestion-assigned
    `_rowIndex`, and finally the positional index in the batch.
    """
    if isinstance(record, Mapping):
        for name in ("id", ID_FIELDS[EntityKind(kind)], "_rowIndex"):
            value = record.get(name)
            if value is not None and str(value).strip():
                return str(value).strip()
    return str(index) if index is not None else None


__all__ = [
    "FIELD_ALIASES",
    "ID_FIELDS",
    "get_field_value",
    "first_present",
    "first_non_blank",
    "normalize_record",
    "resolve_record_id",
]
