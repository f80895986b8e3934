"""Shared pytest fixtures building in-memory accounting datasets."""

from decimal import Decimal

import pytest

from ledger_consistency.adapters import InMemoryAdapter, InMemoryAuditLog
from ledger_consistency.core.entities import (
    Account,
    AccountType,
    Expense,
    InventoryMovement,
    JournalEntry,
    JournalLine,
    Product,
    ProductCategory,
    PurchaseOrder,
    Receipt,
)
from ledger_consistency.service import DataConsistencyService

TENANT = "tenant-1"
COMPANY = "company-1"


def seed_company(adapter: InMemoryAdapter, tenant: str, company: str, prefix: str = "") -> None:
    """Add a small, fully consistent ledger for one company.

    Ids are prefixed with ``prefix`` so several companies can share a tenant.
    """
    p = prefix
    adapter.add(
        tenant,
        AccountType(f"{p}type-asset", "ASSET", "Asset", company),
        AccountType(f"{p}type-revenue", "REVENUE", "Revenue", company),
        AccountType(f"{p}type-expense", "EXPENSE", "Expense", company),
        Account(f"{p}acc-1000", "1000", f"{p}type-asset", company, name="Cash"),
        Account(f"{p}acc-4000", "4000", f"{p}type-revenue", company, name="Sales"),
        Account(f"{p}acc-5000", "5000", f"{p}type-expense", company, name="Supplies"),
        ProductCategory(f"{p}cat-1", company, name="Hardware"),
        Product(
            f"{p}prod-1",
            company,
            sku="SKU-1",
            name="Hammer",
            category_id=f"{p}cat-1",
            stock_quantity=Decimal("7"),
        ),
        InventoryMovement(f"{p}mv-1", f"{p}prod-1", Decimal("10"), "IN", company),
        InventoryMovement(f"{p}mv-2", f"{p}prod-1", Decimal("-3"), "OUT", company),
        JournalEntry(f"{p}je-1", company, reference="JE-1", status="POSTED"),
        JournalLine(f"{p}jl-1", f"{p}je-1", f"{p}acc-1000", company, debit=Decimal("100")),
        JournalLine(f"{p}jl-2", f"{p}je-1", f"{p}acc-4000", company, credit=Decimal("100")),
        JournalEntry(f"{p}je-2", company, reference="JE-2", status="POSTED"),
        JournalLine(f"{p}jl-3", f"{p}je-2", f"{p}acc-5000", company, debit=Decimal("40")),
        JournalLine(f"{p}jl-4", f"{p}je-2", f"{p}acc-1000", company, credit=Decimal("40")),
        Expense(
            f"{p}exp-1",
            company,
            Decimal("40"),
            status="approved",
            description="Office supplies",
            linked_journal_entry_id=f"{p}je-2",
        ),
        Expense(f"{p}exp-2", company, Decimal("15"), status="draft", description="Taxi"),
        PurchaseOrder(f"{p}po-1", company, po_number="PO-1", status="delivered"),
        PurchaseOrder(f"{p}po-2", company, po_number="PO-2", status="ordered"),
        Receipt(f"{p}rc-1", f"{p}po-1", company),
    )


@pytest.fixture
def adapter():
    """Adapter holding one consistent company, served in pages of two rows."""
    store = InMemoryAdapter(page_size=2)
    seed_company(store, TENANT, COMPANY)
    return store


@pytest.fixture
def empty_adapter():
    return InMemoryAdapter(page_size=2)


@pytest.fixture
def audit_log():
    return InMemoryAuditLog()


@pytest.fixture
def service(adapter, audit_log):  # pylint: disable=redefined-outer-name
    return DataConsistencyService(adapter, audit_log=audit_log)
