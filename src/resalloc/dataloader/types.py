# src/resalloc/dataloader/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from resalloc.schemas.models import EntityKind


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of a record loading step.

    Fields:
        success: True if no row-level issues were found, False otherwise.
        kind: Entity kind the rows were loaded as.
        records: Row objects ready for the registry (empty if success=False).
        errors: List of issue dicts with per-row context (used for reporting).
                Each item contains at least: kind, row_no, message.
        total_rows: Total number of rows observed in the file.
        kept_rows: Number of accepted records (len(records)).
    """

    success: bool
    kind: EntityKind
    records: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    kept_rows: int = 0
