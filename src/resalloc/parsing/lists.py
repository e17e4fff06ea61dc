# src/resalloc/parsing/lists.py
"""
@brief
Tolerant parsers for number-lists and string-lists found in spreadsheet cells.

@details
Upstream data is free text of unknown quality, so every function here is total:
unparseable input yields NaN or an empty list, never an exception.

Accepted number-list shapes:
    - native list/tuple of numeric-coercible values ([1, "2", 3.5]);
    - JSON array string ("[1,2,3]");
    - inclusive integer range string ("1-3" → [1, 2, 3], only if a <= b);
    - comma separated string with optional brackets/quotes ("2, 4", "['2','4']").
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_RANGE_RE = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_COMMA_RE = re.compile(r"\s*,\s*")
_QUOTES = "\"'"


def to_number(value: Any) -> float:
    """
    @brief
    Coerce a cell value into a float the way spreadsheet formulas do.

    @details
    None, non-numeric strings, containers and other objects become NaN.
    A blank string becomes 0.0 and booleans become 1.0 / 0.0.

    @params
        value : Any
            Raw cell value.

    @returns
        Float value, NaN when not coercible.
    """
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _NUMERIC_RE.match(text):
            return float(text)
    return math.nan


def format_number(value: float) -> str:
    """Render integral floats without a trailing '.0' (2.0 → '2')."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_int_if_integral(value: float) -> float:
    return int(value) if value.is_integer() else value


def _coerce_item(item: Any) -> float:
    # Inside a list, blanks and nulls are gaps rather than zeros
    if item is None or isinstance(item, bool):
        return math.nan
    if isinstance(item, str):
        item = item.strip().strip(_QUOTES).strip()
        if not item:
            return math.nan
    return to_number(item)


def parse_number_list(value: Any) -> list[float]:
    """
    @brief
    Normalize a heterogeneous number-list representation into a list.

    @details
    Non-finite and non-numeric items are dropped. Integral values are
    returned as ints so that parse_number_list("1-3") == [1, 2, 3].

    @params
        value : Any
            Native sequence or textual representation.

    @returns
        List of finite numbers, empty when nothing parses.
    """
    # (1) Native sequences: coerce every element, keep finite ones
    if isinstance(value, (list, tuple)):
        numbers = (_coerce_item(item) for item in value)
        return [_as_int_if_integral(n) for n in numbers if math.isfinite(n)]

    if not isinstance(value, str):
        return []

    text = value.strip()

    # (2) JSON array
    if text.startswith("[") and text.endswith("]"):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return parse_number_list(parsed)

    # (3) Inclusive integer range "a-b"
    match = _RANGE_RE.match(text)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        if start <= end:
            return list(range(start, end + 1))

    # (4) Comma separated with optional brackets and quotes
    tokens = _COMMA_RE.split(text.replace("[", "").replace("]", ""))
    numbers = (_coerce_item(token) for token in tokens if token)
    return [_as_int_if_integral(n) for n in numbers if math.isfinite(n)]


def parse_string_list(value: Any) -> list[str]:
    """
    @brief
    Normalize a string-list representation into a list of trimmed strings.

    @details
    Accepts a native list/tuple (each element stringified and trimmed), a JSON
    array string, or a comma separated string whose tokens may be quoted.
    Empty tokens are dropped.
    """
    if isinstance(value, (list, tuple)):
        items = (str(item).strip() for item in value if item is not None)
        return [item for item in items if item]

    if not isinstance(value, str):
        return []

    text = value.strip()
    if text.startswith("[") and text.endswith("]"):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return parse_string_list(parsed)

    tokens = (token.strip(_QUOTES).strip() for token in _COMMA_RE.split(text))
    return [token for token in tokens if token]


__all__ = ["to_number", "format_number", "parse_number_list", "parse_string_list"]
