"""Tests for AccountTypesCheck."""

from ledger_consistency.core.entities import Account, AccountType
from ledger_consistency.core.enums import IssueKind
from ledger_consistency.validation.checks.account_types import AccountTypesCheck

from conftest import COMPANY, TENANT


def test_account_types_pass(adapter):
    result = AccountTypesCheck().validate(TENANT, COMPANY, adapter)

    assert result.is_valid is True
    assert result.errors == []
    assert result.warnings == []
    assert result.suggestions == []


def test_orphaned_account_type(adapter):
    """An account pointing at a type that does not exist is an error naming the account."""
    adapter.add(TENANT, Account("acc-5100", "5000", "TYPE_X", COMPANY, name="Rent"))

    result = AccountTypesCheck().validate(TENANT, COMPANY, adapter)

    assert result.is_valid is False
    assert len(result.errors) == 1
    issue = result.errors[0]
    assert issue.kind == IssueKind.ORPHANED_ACCOUNT_TYPE
    assert issue.entity_ids == ("acc-5100",)
    assert issue.actual == "TYPE_X"
    assert "Account 5000" in issue.message
    assert "TYPE_X" in issue.message


def test_account_without_type(adapter):
    adapter.add(TENANT, Account("acc-9", "9000", None, COMPANY))

    result = AccountTypesCheck().validate(TENANT, COMPANY, adapter)

    assert [i.message for i in result.errors] == ["Account 9000 has no account type"]


def test_type_from_another_company_does_not_resolve(adapter):
    adapter.add(
        TENANT,
        AccountType("type-other", "OTHER", "Other", "company-2"),
        Account("acc-9", "9000", "type-other", COMPANY),
    )

    result = AccountTypesCheck().validate(TENANT, COMPANY, adapter)

    assert len(result.errors) == 1
    assert "does not exist in company company-1" in result.errors[0].message


def test_unused_account_type_is_warning(adapter):
    adapter.add(TENANT, AccountType("type-equity", "EQUITY", "Equity", COMPANY))

    result = AccountTypesCheck().validate(TENANT, COMPANY, adapter)

    assert result.is_valid is True
    assert len(result.warnings) == 1
    assert result.warnings[0].kind == IssueKind.UNUSED_ACCOUNT_TYPE
    assert result.warnings[0].entity_ids == ("type-equity",)
    assert len(result.suggestions) == 1
    assert result.suggestions[0].kind == IssueKind.SUGGESTION


def test_other_tenant_is_not_visible(adapter):
    adapter.add("tenant-2", Account("acc-x", "7000", "TYPE_X", COMPANY))

    result = AccountTypesCheck().validate(TENANT, COMPANY, adapter)

    assert result.is_valid is True


def test_all_companies_scope(adapter):
    adapter.add(TENANT, Account("acc-x", "7000", "TYPE_X", "company-2"))

    assert AccountTypesCheck().validate(TENANT, COMPANY, adapter).is_valid is True
    assert AccountTypesCheck().validate(TENANT, None, adapter).is_valid is False
