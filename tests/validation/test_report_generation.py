"""Tests for result models, aggregation and report rendering."""

import json
from decimal import Decimal

import pytest

from ledger_consistency.core.entities import JournalEntry, JournalLine
from ledger_consistency.core.enums import IssueKind
from ledger_consistency.validation.aggregator import RunSummary, is_healthy, summarize
from ledger_consistency.validation.models import (
    CheckOutcome,
    FixResult,
    OverallResult,
    ValidationIssue,
    ValidationResult,
)
from ledger_consistency.validation.registry import print_report
from ledger_consistency.validation.runner import CheckRunner

from conftest import COMPANY, TENANT


def _outcome(name, errors=0, warnings=0, suggestions=0):
    result = ValidationResult()
    for n in range(errors):
        result.add("error", ValidationIssue(IssueKind.ORPHANED_RECORD, f"{name} error {n}"))
    for n in range(warnings):
        result.add("warning", ValidationIssue(IssueKind.UNUSED_ACCOUNT_TYPE, f"{name} warning {n}"))
    for n in range(suggestions):
        result.suggest(f"{name} suggestion {n}")
    return CheckOutcome(name=name, key=name.lower(), result=result)


@pytest.fixture
def unbalanced(adapter):
    adapter.add(
        TENANT,
        JournalEntry("je-9", COMPANY, reference="JE-9"),
        JournalLine("jl-90", "je-9", "acc-1000", COMPANY, debit=Decimal("100")),
        JournalLine("jl-91", "je-9", "acc-4000", COMPANY, credit=Decimal("90")),
    )
    return CheckRunner(adapter).run_all(TENANT, COMPANY)


def test_validity_tracks_errors_only():
    result = ValidationResult()
    result.add("warning", ValidationIssue(IssueKind.EMPTY_JOURNAL_ENTRY, "w"))
    result.suggest("s")
    assert result.is_valid is True

    result.add("error", ValidationIssue(IssueKind.UNBALANCED_ENTRY, "e"))
    assert result.is_valid is False


def test_add_rejects_unknown_severity():
    with pytest.raises(ValueError, match="Invalid severity: fatal"):
        ValidationResult().add("fatal", ValidationIssue(IssueKind.ORPHANED_RECORD, "x"))


def test_summarize_counts():
    outcomes = [_outcome("A"), _outcome("B", errors=2, warnings=1), _outcome("C", suggestions=3)]

    assert summarize(outcomes) == RunSummary(
        total_checks=3,
        passed_checks=2,
        failed_checks=1,
        total_errors=2,
        total_warnings=1,
        total_suggestions=3,
    )
    assert is_healthy(outcomes) is False


def test_empty_run_is_healthy():
    assert is_healthy([]) is True
    assert summarize([]) == RunSummary()
    assert OverallResult(checks=[]).status == "HEALTHY"


def test_summary_text(unbalanced):  # pylint: disable=redefined-outer-name
    assert unbalanced.summary() == (
        "Validation Summary:\n"
        "  Scope: tenant-1 / company-1\n"
        "  Checks: 7 executed (6 passed, 1 failed)\n"
        "  Issues: 1 errors, 0 warnings, 1 suggestions"
    )
    assert unbalanced.status == "ISSUES_FOUND"


def test_to_dict_uses_camel_case(unbalanced):  # pylint: disable=redefined-outer-name
    data = unbalanced.to_dict()

    assert data["isValid"] is False
    assert data["summary"] == {
        "totalChecks": 7,
        "passedChecks": 6,
        "failedChecks": 1,
        "totalErrors": 1,
        "totalWarnings": 0,
        "totalSuggestions": 1,
    }
    balance = data["checks"][3]
    assert balance["name"] == "Journal Entry Balance"
    assert balance["isValid"] is False
    assert balance["errors"][0] == {
        "kind": "UNBALANCED_ENTRY",
        "message": "Journal entry JE-9: debits 100 != credits 90 (imbalance 10)",
        "entityIds": ["je-9"],
        "expected": "0",
        "actual": "10",
    }


def test_to_json_is_parseable(unbalanced):  # pylint: disable=redefined-outer-name
    data = json.loads(unbalanced.to_json())

    assert data["status"] == "ISSUES_FOUND"
    assert "generatedAt" in data


def test_to_markdown(unbalanced):  # pylint: disable=redefined-outer-name
    markdown = unbalanced.to_markdown()

    assert markdown.startswith("# Ledger Consistency Report: tenant-1 / company-1")
    assert "**Status:** ISSUES_FOUND" in markdown
    assert "### ❌ Journal Entry Balance" in markdown
    assert "- **Error:** Journal entry JE-9: debits 100 != credits 90 (imbalance 10)" in markdown
    assert "- **Account Types**" in markdown


def test_print_report_lists_failed_checks(unbalanced, capsys):  # pylint: disable=redefined-outer-name
    print_report(unbalanced)

    out = capsys.readouterr().out
    assert "Failed Checks:" in out
    assert "❌ Journal Entry Balance: 1 errors" in out


def test_print_report_all_passed(adapter, capsys):
    print_report(CheckRunner(adapter).run_all(TENANT, COMPANY))

    assert "All validation checks passed!" in capsys.readouterr().out


def test_fix_result_to_dict():
    result = FixResult(check_name="account_types", scanned=2)
    result.record_fixed("acc-1", "relink")
    result.record_failed("acc-2", "relink", "locked")

    assert result.to_dict() == {
        "checkName": "account_types",
        "scanned": 2,
        "fixed": 1,
        "failed": 1,
        "details": [
            {"entityId": "acc-1", "action": "relink"},
            {"entityId": "acc-2", "action": "relink", "error": "locked"},
        ],
    }
