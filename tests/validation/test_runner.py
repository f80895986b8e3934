"""Tests for CheckRunner: ordering, fault isolation, name handling and timeouts."""

import threading
from concurrent.futures import TimeoutError as FuturesTimeoutError, wait

import pytest

from ledger_consistency.core.enums import EntityKind, IssueKind
from ledger_consistency.core.errors import DataAccessError, UnknownCheckError
from ledger_consistency.validation.models import ValidationResult
from ledger_consistency.validation.registry import CheckRegistry, CheckSpec, build_registry
from ledger_consistency.validation import runner as runner_module
from ledger_consistency.validation.runner import CheckRunner

from conftest import COMPANY, TENANT


def _spec(key, run):
    return CheckSpec(key=key, display_name=key.replace("_", " ").title(), run=run)


def _ok(tenant_id, company_id, adapter):  # pylint: disable=unused-argument
    return ValidationResult()


@pytest.mark.parametrize("workers", [1, 2, 4, 16])
def test_run_all_registry_order(adapter, workers):
    overall = CheckRunner(adapter, max_workers=workers).run_all(TENANT, COMPANY)

    assert [c.key for c in overall.checks] == build_registry().keys()
    assert overall.is_valid is True
    assert overall.status == "HEALTHY"
    assert overall.tenant_id == TENANT
    assert overall.company_id == COMPANY


def test_run_named_uses_registry_order_not_request_order(adapter):
    runner = CheckRunner(adapter)

    overall = runner.run_named(
        TENANT, COMPANY, ["Orphaned Records", "stock_consistency", "Account Types"]
    )

    assert [c.key for c in overall.checks] == [
        "account_types",
        "stock_consistency",
        "orphaned_records",
    ]
    assert [c.name for c in overall.checks] == [
        "Account Types",
        "Stock Consistency",
        "Orphaned Records",
    ]


def test_unknown_check_name_is_dropped(adapter):
    overall = CheckRunner(adapter).run_named(TENANT, COMPANY, ["unknown_check"])

    assert overall.checks == []
    assert overall.is_valid is True
    assert overall.unknown_checks == ["unknown_check"]


def test_unknown_names_mixed_with_known(adapter):
    overall = CheckRunner(adapter).run_named(TENANT, COMPANY, ["nope", "account_types"])

    assert [c.key for c in overall.checks] == ["account_types"]
    assert overall.unknown_checks == ["nope"]


def test_strict_names_raise(adapter):
    runner = CheckRunner(adapter, strict_names=True)

    with pytest.raises(UnknownCheckError, match="Unknown check name\\(s\\): nope") as exc_info:
        runner.run_named(TENANT, COMPANY, ["account_types", "nope"])
    assert exc_info.value.names == ["nope"]


def test_data_access_failure_is_isolated(adapter):
    adapter.fail_on("iter_account_types")

    overall = CheckRunner(adapter, max_workers=3).run_all(TENANT, COMPANY)

    assert len(overall.checks) == 7
    failed = overall.get_failed_checks()
    assert [c.key for c in failed] == ["account_types"]
    issue = failed[0].result.errors[0]
    assert issue.kind == IssueKind.DATA_ACCESS_FAILURE
    assert issue.entity_ids == ("account_types",)
    assert issue.message.startswith("Check 'Account Types' failed:")
    assert all(c.is_valid for c in overall.checks[1:])
    assert overall.is_valid is False


def test_shared_aggregate_failure_fails_every_dependent_check(adapter):
    adapter.fail_on("journal_entry_totals", DataAccessError("timeout", "journal_entry_totals"))

    overall = CheckRunner(adapter).run_all(TENANT, COMPANY)

    assert [c.key for c in overall.get_failed_checks()] == [
        "journal_entry_balance",
        "expense_journal_integration",
    ]


def test_unexpected_exception_becomes_internal_failure(adapter):
    def boom(tenant_id, company_id, adapter):  # pylint: disable=unused-argument
        raise RuntimeError("boom")

    registry = CheckRegistry([_spec("first", _ok), _spec("broken", boom), _spec("last", _ok)])

    overall = CheckRunner(adapter, registry, max_workers=2).run_all(TENANT, COMPANY)

    assert [c.key for c in overall.checks] == ["first", "broken", "last"]
    assert [c.is_valid for c in overall.checks] == [True, False, True]
    issue = overall.checks[1].result.errors[0]
    assert issue.kind == IssueKind.INTERNAL_CHECK_FAILURE
    assert "RuntimeError: boom" in issue.message


def test_timeout_abandons_unfinished_checks(adapter):
    release = threading.Event()

    def slow(tenant_id, company_id, adapter):  # pylint: disable=unused-argument
        release.wait(5)
        return ValidationResult()

    registry = CheckRegistry([_spec("fast", _ok), _spec("slow", slow)])
    runner = CheckRunner(adapter, registry, max_workers=2, timeout=0.2)
    try:
        overall = runner.run_all(TENANT, COMPANY)
    finally:
        release.set()

    assert overall.checks[0].is_valid is True
    slow_outcome = overall.checks[1]
    assert slow_outcome.is_valid is False
    assert slow_outcome.result.errors[0].kind == IssueKind.INTERNAL_CHECK_FAILURE
    assert "timed out" in slow_outcome.result.errors[0].message


def test_check_finishing_at_the_deadline_keeps_its_result(adapter, monkeypatch):
    def deadline_passes(futures, timeout=None):  # pylint: disable=unused-argument
        # Every check finishes, but the deadline is reported before any is collected
        wait(futures)
        raise FuturesTimeoutError()
        yield  # pragma: no cover

    monkeypatch.setattr(runner_module, "as_completed", deadline_passes)
    registry = CheckRegistry([_spec("first", _ok), _spec("second", _ok)])

    overall = CheckRunner(adapter, registry, max_workers=2, timeout=0.2).run_all(TENANT, COMPANY)

    assert [c.key for c in overall.checks] == ["first", "second"]
    assert all(c.is_valid for c in overall.checks)


def test_checks_do_not_write(adapter):
    before = {kind: adapter.rows(TENANT, kind) for kind in EntityKind}

    CheckRunner(adapter).run_all(TENANT, COMPANY)

    assert {kind: adapter.rows(TENANT, kind) for kind in before} == before


def test_invalid_worker_count(adapter):
    with pytest.raises(ValueError, match="max_workers must be >= 1"):
        CheckRunner(adapter, max_workers=0)
