# src/resalloc/errors.py
from __future__ import annotations

from datetime import datetime, timezone


class ResallocError(Exception):
    """Base class for all structured resalloc exceptions."""

    def __init__(
        self, message: str, source: str | None = None, suggested_action: str | None = None
    ):
        super().__init__(message)
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_type = self.__class__.__name__
        self.source = source or "unknown"
        self.suggested_action = suggested_action

    def __str__(self) -> str:
        base = f"[{self.error_type}] {self.args[0]}"
        if self.source:
            base += f" (source={self.source})"
        if self.suggested_action:
            base += f" | action: {self.suggested_action}"
        return base


class ConfigError(ResallocError):
    """Invalid or missing configuration (config.yaml)"""


class DataError(ResallocError):
    """Malformed input file or unserializable artifact"""


class RuleError(ResallocError):
    """Rule catalog misuse (duplicate ids, uncompilable rule specs)"""


class ReportError(ResallocError):
    """Validation report could not be persisted"""
