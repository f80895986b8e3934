"""Domain entities as read from the accounting store.

The store owns these rows. The package only reads them, except through the
adapter's explicit fix writes. Amounts and quantities are ``Decimal`` so that
balance comparisons are exact.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class AccountType:
    id: str
    code: str
    name: str
    company_id: str


@dataclass(frozen=True)
class Account:
    id: str
    code: str
    type_id: Optional[str]
    company_id: str
    name: str = ""
    parent_id: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class ProductCategory:
    id: str
    company_id: str
    name: str = ""


@dataclass(frozen=True)
class Product:
    id: str
    company_id: str
    sku: str = ""
    name: str = ""
    category_id: Optional[str] = None
    stock_quantity: Decimal = Decimal("0")


@dataclass(frozen=True)
class JournalEntry:
    id: str
    company_id: str
    reference: str = ""
    status: str = "DRAFT"


@dataclass(frozen=True)
class JournalLine:
    """A journal line. ``company_id`` is the owning entry's company."""

    id: str
    entry_id: str
    account_id: str
    company_id: str
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")


@dataclass(frozen=True)
class InventoryMovement:
    id: str
    product_id: str
    quantity: Decimal
    movement_type: str
    company_id: str


@dataclass(frozen=True)
class Expense:
    id: str
    company_id: str
    amount: Decimal
    status: str = "draft"
    description: str = ""
    linked_journal_entry_id: Optional[str] = None


@dataclass(frozen=True)
class PurchaseOrder:
    id: str
    company_id: str
    po_number: str = ""
    status: str = "draft"


@dataclass(frozen=True)
class Receipt:
    id: str
    purchase_order_id: str
    company_id: str


@dataclass(frozen=True)
class EntryTotals:
    """Grouped debit/credit sums for one journal entry."""

    entry_id: str
    company_id: str
    debit_total: Decimal
    credit_total: Decimal
    line_count: int

    @property
    def imbalance(self) -> Decimal:
        return self.debit_total - self.credit_total


@dataclass(frozen=True)
class MovementTotals:
    """Grouped quantity sum of inventory movements for one product."""

    product_id: str
    company_id: str
    quantity_total: Decimal
    movement_count: int
