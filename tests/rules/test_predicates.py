import logging

import pytest

from resalloc.rules.predicates import (
    CustomFn,
    EnumMember,
    Pattern,
    Range,
    Required,
    evaluate_predicate,
)


@pytest.mark.parametrize(
    "value, expected",
    [("Acme", True), ("   ", False), ("", False), (None, False), ([], False), (0, True)],
)
def test_required(value, expected):
    assert Required().evaluate(value, {}) is expected


def test_range_bounds_are_inclusive_and_coerce_strings():
    """
    @brief
    Range accepts numeric strings and rejects non-numeric values.
    """
    # --- Arrange ---
    rng = Range(1, 5)

    # --- Act / Assert ---
    assert rng.evaluate(1, {}) is True
    assert rng.evaluate("5", {}) is True
    assert rng.evaluate(6, {}) is False
    assert rng.evaluate("high", {}) is False
    assert rng.evaluate(None, {}) is False
    assert Range(1, 5, allow_missing=True).evaluate(None, {}) is True


def test_pattern_matches_stringified_value():
    pattern = Pattern(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

    assert pattern.evaluate("ada@example.com", {}) is True
    assert pattern.evaluate("ada@example", {}) is False
    assert pattern.evaluate(None, {}) is False


def test_enum_member():
    enum = EnumMember(("low", "high"))

    assert enum.evaluate("low", {}) is True
    assert enum.evaluate("LOW", {}) is False
    assert enum.evaluate(None, {}) is False
    assert EnumMember(("low",), allow_missing=True).evaluate(None, {}) is True


def test_custom_fn_sees_the_whole_record():
    same_as_name = CustomFn(lambda value, record: value == record.get("name"))

    assert same_as_name.evaluate("x", {"name": "x"}) is True
    assert same_as_name.evaluate("x", {"name": "y"}) is False


def test_evaluate_predicate_reports_failures():
    outcome = evaluate_predicate(Required(), None, {}, rule_id="r1")

    assert outcome.passed is False
    assert outcome.fault is None


def test_evaluate_predicate_is_fail_open_and_logs(caplog):
    """
    @brief
    A raising predicate counts as passed and is logged at WARNING.

    @details
    The fault reason is kept on the outcome so callers can surface it.
    """

    # --- Arrange ---
    def boom(value, record):
        raise RuntimeError("broken rule")

    # --- Act ---
    with caplog.at_level(logging.WARNING):
        outcome = evaluate_predicate(CustomFn(boom), "x", {}, rule_id="r-broken")

    # --- Assert ---
    assert outcome.passed is True
    assert "RuntimeError" in outcome.fault
    assert "r-broken" in caplog.text
