# src/resalloc/registry/registry.py
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from resalloc.schemas.models import EntityKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DataContext:
    """
    @brief
    Immutable snapshot of the three entity collections.

    @details
    Taken once per batch validation and passed explicitly into every
    cross-dataset check, so a concurrent re-upload cannot change the data
    a running batch sees.
    """

    clients: tuple[Any, ...] = field(default_factory=tuple)
    workers: tuple[Any, ...] = field(default_factory=tuple)
    tasks: tuple[Any, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> DataContext:
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Sequence[Any]]) -> DataContext:
        return cls(
            **{kind.value: tuple(data.get(kind.value) or ()) for kind in EntityKind}
        )

    def get(self, kind: EntityKind | str) -> tuple[Any, ...]:
        return getattr(self, EntityKind(kind).value)


class EntityRegistry:
    """
    @brief
    Session-scoped in-memory store of clients, workers and tasks.

    @details
    Each collection is replaced wholesale on write (latest upload wins);
    there is no merge, no validation and no persistence. Absent data reads
    as an empty list.

    Not thread-safe: overlapping set_collection() calls race with
    last-write-wins semantics. Validators read through snapshot() so a batch
    always sees one consistent version.
    """

    def __init__(self) -> None:
        self._collections: dict[EntityKind, list[Any]] = {kind: [] for kind in EntityKind}

    def set_collection(self, kind: EntityKind | str, records: Any) -> None:
        """
        @brief
        Replace the named collection.

        @details
        Anything that is not a list or tuple is stored as an empty collection.
        Records themselves are accepted as-is.
        """
        key = EntityKind(kind)
        self._collections[key] = list(records) if isinstance(records, (list, tuple)) else []
        logger.info("Registry: %s replaced (%d record(s))", key.value, len(self._collections[key]))

    def get_collection(self, kind: EntityKind | str) -> list[Any]:
        return self._collections[EntityKind(kind)]

    def get_all(self) -> dict[str, list[Any]]:
        return {kind.value: list(records) for kind, records in self._collections.items()}

    def clear(self) -> None:
        for kind in EntityKind:
            self._collections[kind] = []

    def snapshot(self) -> DataContext:
        return DataContext(
            **{kind.value: tuple(records) for kind, records in self._collections.items()}
        )


__all__ = ["DataContext", "EntityRegistry"]
