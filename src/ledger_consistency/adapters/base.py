"""Data access adapter interface.

This module defines the protocol the consistency engine uses to reach the
accounting store. The engine depends only on this interface; SQL execution,
pooling and tenant resolution live behind it.

Conventions every implementation must follow:

1. Every call takes an explicit ``tenant_id``; nothing is ever returned from
   another tenant.
2. ``company_id=None`` means every company of the tenant; otherwise only rows of
   that company are returned.
3. ``iter_*`` methods return lazy, finite, restartable sequences read page by
   page. Calling the method again starts a fresh scan.
4. Infrastructure failures raise ``DataAccessError``. Data anomalies are
   returned as data.
5. ``apply_fix`` commits a single patch on its own and reports failure through
   its return value instead of raising.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional, Protocol, Tuple

from ledger_consistency.core.entities import (
    Account,
    AccountType,
    EntryTotals,
    Expense,
    InventoryMovement,
    JournalEntry,
    JournalLine,
    MovementTotals,
    Product,
    ProductCategory,
    PurchaseOrder,
    Receipt,
)
from ledger_consistency.core.enums import EntityKind

FixOutcome = Tuple[bool, Optional[str]]


class DataAccessAdapter(Protocol):
    """Tenant/company-scoped read access plus narrow fix writes."""

    def iter_account_types(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[AccountType]:
        ...

    def iter_accounts(self, tenant_id: str, company_id: Optional[str] = None) -> Iterator[Account]:
        ...

    def iter_product_categories(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[ProductCategory]:
        ...

    def iter_products(self, tenant_id: str, company_id: Optional[str] = None) -> Iterator[Product]:
        ...

    def iter_journal_entries(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[JournalEntry]:
        ...

    def iter_journal_lines(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[JournalLine]:
        ...

    def iter_inventory_movements(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[InventoryMovement]:
        ...

    def iter_expenses(self, tenant_id: str, company_id: Optional[str] = None) -> Iterator[Expense]:
        ...

    def iter_purchase_orders(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[PurchaseOrder]:
        ...

    def iter_receipts(self, tenant_id: str, company_id: Optional[str] = None) -> Iterator[Receipt]:
        ...

    def journal_entry_totals(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[EntryTotals]:
        """Grouped debit/credit sums of journal lines, one row per entry id with lines."""
        ...

    def movement_totals(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[MovementTotals]:
        """Grouped movement quantity sums, one row per product id with movements."""
        ...

    def find_account_type_by_code(
        self, tenant_id: str, company_id: str, code: str
    ) -> Optional[AccountType]:
        ...

    def create_account_type(
        self, tenant_id: str, company_id: str, code: str, name: str
    ) -> AccountType:
        """Insert an account type and return it.

        Raises:
            DataAccessError: If the row could not be written.
        """
        ...

    def delete_account_type(self, tenant_id: str, company_id: str, type_id: str) -> FixOutcome:
        """Remove an account type no account references, in its own transaction.

        Returns:
            ``(True, None)`` when removed, ``(False, reason)`` otherwise.
        """
        ...

    def apply_fix(
        self,
        tenant_id: str,
        company_id: str,
        kind: EntityKind,
        entity_id: str,
        patch: Mapping[str, Any],
    ) -> FixOutcome:
        """Apply ``patch`` to one entity in its own transaction.

        Returns:
            ``(True, None)`` when committed, ``(False, reason)`` otherwise.
        """
        ...


__all__ = ["DataAccessAdapter", "FixOutcome"]
