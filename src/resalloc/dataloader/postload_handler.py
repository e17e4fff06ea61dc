# src/resalloc/dataloader/postload_handler.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from resalloc.dataloader.types import LoadResult
from resalloc.registry.registry import EntityRegistry

logger = logging.getLogger(__name__)


class LoadResultHandler:
    """
    @brief
    Ingestion boundary: moves loaded records into the registry.

    @details
    A successful LoadResult replaces the registry collection of its kind
    (latest upload wins). A failed one leaves the registry untouched and
    writes `load_errors_<kind>.json` so the user can fix the file.
    """

    def __init__(self, output_dir: Path, registry: EntityRegistry) -> None:
        self.output_dir = output_dir
        self.registry = registry

    def handle(self, result: LoadResult) -> list[dict[str, Any]] | None:
        """
        @brief
        Publish records on success, write an error report on failure.

        @returns
            The published records, or None when loading failed.
        """
        # (1) Success path: replace the registry collection
        if result.success:
            self.registry.set_collection(result.kind, result.records)
            return result.records

        # (2) Failure path: persist row issues for the user
        out_path = self.output_dir / f"load_errors_{result.kind.value}.json"
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with out_path.open("w", encoding="utf-8") as f:
                json.dump(result.errors, f, ensure_ascii=False, indent=2)
            logger.error(
                "PostLoad: %s rejected with %d issue(s). See %s",
                result.kind.value,
                len(result.errors),
                out_path,
            )
        except OSError as e:
            logger.error("PostLoad: failed to write error report: %s", e)

        return None


__all__ = ["LoadResultHandler"]
