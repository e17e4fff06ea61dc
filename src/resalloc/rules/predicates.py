# src/resalloc/rules/predicates.py
"""
@brief
Closed set of typed rule predicates.

@details
Every validation rule carries one predicate. Each predicate is a small frozen
dataclass exposing `evaluate(value, record) -> bool`:
    - Required     value present and non-blank
    - Range        numeric value within [min, max]
    - Pattern      str(value) matches a regular expression
    - EnumMember   value is one of a fixed set
    - CustomFn     arbitrary callable (value, record) -> bool

Predicates see only the field value and the record they belong to.
Cross-record logic lives in validator.cross_validator, never here.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from resalloc.parsing.lists import to_number

logger = logging.getLogger(__name__)


class Predicate(Protocol):
    def evaluate(self, value: Any, record: Mapping[str, Any]) -> bool: ...


@dataclass(frozen=True)
class Required:
    def evaluate(self, value: Any, record: Mapping[str, Any]) -> bool:
        if value is None:
            return False
        if isinstance(value, str):
            return bool(value.strip())
        if isinstance(value, (list, tuple)):
            return len(value) > 0
        return True


@dataclass(frozen=True)
class Range:
    min: float
    max: float
    allow_missing: bool = False

    def evaluate(self, value: Any, record: Mapping[str, Any]) -> bool:
        if value is None:
            return self.allow_missing
        number = to_number(value)
        return not math.isnan(number) and self.min <= number <= self.max


@dataclass(frozen=True)
class Pattern:
    regex: str
    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.regex))

    def evaluate(self, value: Any, record: Mapping[str, Any]) -> bool:
        if value is None:
            return False
        return self._compiled.search(str(value)) is not None


@dataclass(frozen=True)
class EnumMember:
    values: tuple[Any, ...]
    allow_missing: bool = False

    def evaluate(self, value: Any, record: Mapping[str, Any]) -> bool:
        if value is None:
            return self.allow_missing
        return value in self.values


@dataclass(frozen=True)
class CustomFn:
    fn: Callable[[Any, Mapping[str, Any]], bool]
    description: str = ""

    def evaluate(self, value: Any, record: Mapping[str, Any]) -> bool:
        return bool(self.fn(value, record))


@dataclass(frozen=True)
class RuleOutcome:
    """
    @brief
    Result of evaluating one rule against one record.

    @details
    `fault` is set when the predicate raised; such outcomes always count as
    passed so one broken rule cannot poison the rest of a batch.
    """

    passed: bool
    fault: str | None = None


def evaluate_predicate(
    predicate: Predicate, value: Any, record: Mapping[str, Any], *, rule_id: str = "?"
) -> RuleOutcome:
    """
    @brief
    Evaluate a predicate with fail-open fault handling.

    @details
    Any exception raised by the predicate is logged at WARNING level and
    converted into RuleOutcome(passed=True, fault=...).

    @params
        predicate : Predicate
            Predicate to run.
        value : Any
            Extracted field value.
        record : Mapping[str, Any]
            Full record the value was extracted from.
        rule_id : str
            Rule identifier for the diagnostic log line.

    @returns
        RuleOutcome describing pass/fail and an optional fault reason.
    """
    try:
        return RuleOutcome(passed=bool(predicate.evaluate(value, record)))
    except Exception as e:
        reason = f"{type(e).__name__}: {e}"
        logger.warning("Rule %s faulted, treated as passed: %s", rule_id, reason)
        return RuleOutcome(passed=True, fault=reason)


__all__ = [
    "Predicate",
    "Required",
    "Range",
    "Pattern",
    "EnumMember",
    "CustomFn",
    "RuleOutcome",
    "evaluate_predicate",
]
