import pytest

from resalloc.errors import RuleError
from resalloc.rules.catalog import RuleCatalog, ValidationRule, compile_rule_spec
from resalloc.rules.predicates import Required
from resalloc.schemas.models import Config, EntityKind, RuleKind, RuleSpec, Severity


def _rule(rule_id: str, field: str = "notes") -> ValidationRule:
    return ValidationRule(
        id=rule_id,
        name=rule_id,
        field=field,
        kind=RuleKind.REQUIRED,
        predicate=Required(),
        message=f"{field} is required",
    )


def test_default_catalog_contents():
    """
    @brief
    The catalog is seeded with the default rule set per kind.
    """
    # --- Act ---
    catalog = RuleCatalog()

    # --- Assert ---
    assert catalog.rule_ids("clients") == [
        "client-name-required",
        "client-id-required",
        "client-priority-level-range",
        "client-budget-range",
    ]
    assert "worker-email-format" in catalog.rule_ids("workers")
    assert "task-priority-valid" in catalog.rule_ids("tasks")
    assert RuleCatalog(seed_defaults=False).get_rules("tasks") == []


def test_catalogs_do_not_share_rules():
    first, second = RuleCatalog(), RuleCatalog()

    first.remove_rule("clients", "client-id-required")

    assert "client-id-required" in second.rule_ids("clients")


def test_add_rule_appends_and_rejects_duplicate_ids():
    # --- Arrange ---
    catalog = RuleCatalog()

    # --- Act ---
    catalog.add_rule("clients", _rule("client-notes"))

    # --- Assert ---
    assert catalog.rule_ids("clients")[-1] == "client-notes"
    with pytest.raises(RuleError):
        catalog.add_rule(EntityKind.CLIENTS, _rule("client-notes"))


def test_same_id_allowed_across_kinds():
    catalog = RuleCatalog(seed_defaults=False)

    catalog.add_rule("clients", _rule("notes"))
    catalog.add_rule("tasks", _rule("notes"))

    assert catalog.rule_ids("tasks") == ["notes"]


def test_remove_rule_reports_whether_it_existed():
    catalog = RuleCatalog()

    assert catalog.remove_rule("tasks", "task-title-required") is True
    assert catalog.remove_rule("tasks", "task-title-required") is False


def test_get_rules_returns_a_copy():
    catalog = RuleCatalog()

    catalog.get_rules("workers").clear()

    assert len(catalog.get_rules("workers")) == 5


def test_update_rule_patches_in_place():
    """
    @brief
    Partial updates keep position and untouched attributes.
    """
    # --- Arrange ---
    catalog = RuleCatalog()

    # --- Act ---
    updated = catalog.update_rule("workers", "worker-rate-range", severity=Severity.ERROR)

    # --- Assert ---
    assert updated.severity is Severity.ERROR
    assert updated.message == "Hourly rate should be between $15 and $500"
    assert catalog.rule_ids("workers")[2] == "worker-rate-range"


def test_update_rule_unknown_id_and_bad_patch():
    catalog = RuleCatalog()

    assert catalog.update_rule("workers", "nope", message="x") is None
    with pytest.raises(RuleError):
        catalog.update_rule("workers", "worker-rate-range", colour="red")
    with pytest.raises(RuleError):
        catalog.update_rule("workers", "worker-rate-range", id="worker-name-required")


@pytest.mark.parametrize(
    "params",
    [
        {"type": "range", "min": 5},
        {"type": "range", "min": 5, "max": 1},
        {"type": "pattern"},
        {"type": "pattern", "pattern": "(unclosed"},
        {"type": "enum", "values": []},
    ],
)
def test_compile_rule_spec_rejects_incomplete_specs(params):
    """
    @brief
    Declarative rules without the parameters their type needs are rejected.
    """
    spec = RuleSpec(id="bad", entity="tasks", field="x", message="m", **params)

    with pytest.raises(RuleError):
        compile_rule_spec(spec)


def test_compile_rule_spec_enum():
    spec = RuleSpec(
        id="worker-group",
        entity="workers",
        field="WorkerGroup",
        type="enum",
        values=["A", "B"],
        message="Unknown group",
        severity="warning",
    )

    rule = compile_rule_spec(spec)

    assert rule.name == "worker-group"
    assert rule.severity is Severity.WARNING
    assert rule.predicate.evaluate("A", {}) is True
    assert rule.predicate.evaluate("C", {}) is False


def test_from_config_disables_and_adds_rules():
    """
    @brief
    Config customizes the default catalog: disabled ids go, custom rules come.
    """
    # --- Arrange ---
    cfg = Config.model_validate(
        {
            "validation": {
                "disabled_rules": {"tasks": ["task-deadline-future", "not-a-rule"]},
                "custom_rules": [
                    {
                        "id": "task-code-format",
                        "entity": "tasks",
                        "field": "code",
                        "type": "pattern",
                        "pattern": "^T-[0-9]+$",
                        "message": "Task code must look like T-123",
                    }
                ],
            }
        }
    )

    # --- Act ---
    catalog = RuleCatalog.from_config(cfg)

    # --- Assert ---
    ids = catalog.rule_ids("tasks")
    assert "task-deadline-future" not in ids
    assert ids[-1] == "task-code-format"


@pytest.mark.parametrize(
    "patch",
    [
        {"severity": "fatal"},
        {"kind": "magic"},
        {"field": None},
        {"field": "  "},
        {"id": ""},
        {"predicate": "value > 3"},
    ],
)
def test_update_rule_rejects_malformed_attributes(patch):
    """
    @brief
    A bad patch is refused and the stored rule is left unchanged.
    """
    # --- Arrange ---
    catalog = RuleCatalog()
    before = catalog.get_rules("workers")

    # --- Act / Assert ---
    with pytest.raises(RuleError):
        catalog.update_rule("workers", "worker-rate-range", **patch)
    assert catalog.get_rules("workers") == before


def test_add_rule_rejects_malformed_rule_and_coerces_enums():
    # --- Arrange ---
    catalog = RuleCatalog(seed_defaults=False)
    bad = ValidationRule(
        id="bad", name="bad", field="x", kind="required", predicate=Required(),
        message="m", severity="fatal",
    )
    good = ValidationRule(
        id="good", name="good", field="x", kind="required", predicate=Required(),
        message="m", severity="warning",
    )

    # --- Act ---
    with pytest.raises(RuleError):
        catalog.add_rule("tasks", bad)
    catalog.add_rule("tasks", good)

    # --- Assert ---
    stored = catalog.get_rules("tasks")
    assert [r.id for r in stored] == ["good"]
    assert stored[0].severity is Severity.WARNING
    assert stored[0].kind is RuleKind.REQUIRED


def test_string_severity_patch_is_coerced():
    catalog = RuleCatalog()

    updated = catalog.update_rule("workers", "worker-rate-range", severity="error")

    assert updated.severity is Severity.ERROR
