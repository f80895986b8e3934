"""Tests for the check registry: order, lookup and name resolution."""

import pytest

from ledger_consistency.validation.models import ValidationResult
from ledger_consistency.validation.registry import CheckRegistry, CheckSpec, build_registry

EXPECTED_KEYS = [
    "account_types",
    "product_categories",
    "stock_consistency",
    "journal_entry_balance",
    "expense_journal_integration",
    "purchase_order_receipts",
    "orphaned_records",
]


def _spec(name):
    return CheckSpec(
        key=name.lower().replace(" ", "_"),
        display_name=name,
        run=lambda t, c, a: ValidationResult(),
    )


def test_build_registry_order():
    registry = build_registry()

    assert len(registry) == 7
    assert registry.keys() == EXPECTED_KEYS
    assert registry[0].display_name == "Account Types"
    assert registry[6].display_name == "Orphaned Records"


def test_keys_are_normalized_display_names():
    for spec in build_registry():
        assert spec.key == spec.display_name.lower().replace(" ", "_")


@pytest.mark.parametrize(
    "name", ["Journal Entry Balance", "journal_entry_balance", "  JOURNAL   entry balance "]
)
def test_get_by_display_name_or_key(name):
    spec = build_registry().get(name)

    assert spec is not None
    assert spec.key == "journal_entry_balance"


def test_get_unknown_returns_none():
    assert build_registry().get("unknown_check") is None


def test_resolve_returns_registry_order_and_dedupes():
    registry = build_registry()

    positions, unknown = registry.resolve(
        ["Orphaned Records", "account_types", "nope", "Account Types", "nope"]
    )

    assert positions == [0, 6]
    assert unknown == ["nope"]


def test_resolve_empty():
    assert build_registry().resolve([]) == ([], [])


def test_duplicate_keys_rejected():
    with pytest.raises(ValueError, match="Duplicate check key: alpha"):
        CheckRegistry([_spec("Alpha"), _spec("alpha")])
