"""In-memory implementation of the data access adapter.

Backs tests and the CLI's fixture files. Rows are kept per tenant and per
table in insertion order; scans are served page by page and aggregate queries
are computed with pandas group-bys over Decimal columns.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import uuid
from collections import defaultdict
from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

import pandas as pd

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
from ledger_consistency.core.errors import DataAccessError
from ledger_consistency.validation.config import DEFAULT_PAGE_SIZE
from .base import FixOutcome

logger = logging.getLogger(__name__)

ENTITY_TYPES: Dict[EntityKind, type] = {
    EntityKind.ACCOUNT_TYPE: AccountType,
    EntityKind.ACCOUNT: Account,
    EntityKind.PRODUCT_CATEGORY: ProductCategory,
    EntityKind.PRODUCT: Product,
    EntityKind.JOURNAL_ENTRY: JournalEntry,
    EntityKind.JOURNAL_LINE: JournalLine,
    EntityKind.INVENTORY_MOVEMENT: InventoryMovement,
    EntityKind.EXPENSE: Expense,
    EntityKind.PURCHASE_ORDER: PurchaseOrder,
    EntityKind.RECEIPT: Receipt,
}

_KIND_BY_TYPE = {cls: kind for kind, cls in ENTITY_TYPES.items()}


def _decimal_sum(values: pd.Series) -> Decimal:
    return sum(values, Decimal("0"))


class InMemoryAdapter:
    """Tenant-partitioned, in-memory accounting store.

    Args:
        page_size: Number of rows served per page by ``iter_*`` scans.

    Examples:
        >>> adapter = InMemoryAdapter()
        >>> adapter.add("tenant-1", AccountType("t1", "ASSET", "Asset", "c1"))
        >>> [t.code for t in adapter.iter_account_types("tenant-1", "c1")]
        ['ASSET']
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        self.page_size = page_size
        self._tables: Dict[str, Dict[EntityKind, Dict[str, Any]]] = defaultdict(
            lambda: defaultdict(dict)
        )
        self._lock = threading.RLock()
        self._failures: Dict[str, Exception] = {}
        self._fix_failures: Dict[str, str] = {}
        self.pages_served = 0

    # ------------------------------------------------------------------
    # Loading and test hooks
    # ------------------------------------------------------------------

    def add(self, tenant_id: str, *entities: Any) -> None:
        """Insert or replace rows for a tenant, registering the tenant if new.

        Raises:
            TypeError: If an entity is not one of the known domain types.
        """
        with self._lock:
            tables = self._tables[tenant_id]
            for entity in entities:
                kind = _KIND_BY_TYPE.get(type(entity))
                if kind is None:
                    raise TypeError(f"Unsupported entity type: {type(entity).__name__}")
                tables[kind][entity.id] = entity

    def remove(self, tenant_id: str, kind: EntityKind, entity_id: str) -> None:
        """Delete a row without touching rows that reference it."""
        with self._lock:
            self._tables.get(tenant_id, {}).get(kind, {}).pop(entity_id, None)

    def get(self, tenant_id: str, kind: EntityKind, entity_id: str) -> Optional[Any]:
        with self._lock:
            return self._tables.get(tenant_id, {}).get(kind, {}).get(entity_id)

    def tenants(self) -> List[str]:
        with self._lock:
            return list(self._tables)

    def rows(self, tenant_id: str, kind: EntityKind) -> List[Any]:
        """Snapshot of every row of one table for a tenant."""
        with self._lock:
            return list(self._tables.get(tenant_id, {}).get(kind, {}).values())

    def fail_on(self, operation: str, error: Optional[Exception] = None) -> None:
        """Make every call to ``operation`` (a method name) raise ``error``."""
        self._failures[operation] = error or DataAccessError(
            f"{operation}: store unavailable", operation=operation
        )

    def fail_fix(self, entity_id: str, reason: str) -> None:
        """Make ``apply_fix`` reject patches for one entity."""
        self._fix_failures[entity_id] = reason

    def clear_failures(self) -> None:
        self._failures.clear()
        self._fix_failures.clear()

    def _maybe_fail(self, operation: str) -> None:
        error = self._failures.get(operation)
        if error is not None:
            raise error

    # ------------------------------------------------------------------
    # Paged scans
    # ------------------------------------------------------------------

    def _scan(
        self, operation: str, tenant_id: str, company_id: Optional[str], kind: EntityKind
    ) -> Iterator[Any]:
        self._maybe_fail(operation)
        with self._lock:
            table = self._tables.get(tenant_id, {}).get(kind, {})
            ids = [
                row_id
                for row_id, row in table.items()
                if company_id is None or row.company_id == company_id
            ]
        for offset in range(0, len(ids), self.page_size):
            page = self._fetch_page(tenant_id, kind, ids[offset : offset + self.page_size])
            if not page:
                continue
            self.pages_served += 1
            logger.debug(
                "%s: page of %d rows at offset %d (tenant=%s company=%s)",
                operation,
                len(page),
                offset,
                tenant_id,
                company_id,
            )
            yield from page

    def _fetch_page(self, tenant_id: str, kind: EntityKind, ids: List[str]) -> List[Any]:
        # Rows deleted since the scan started are skipped
        with self._lock:
            table = self._tables.get(tenant_id, {}).get(kind, {})
            return [table[row_id] for row_id in ids if row_id in table]

    def iter_account_types(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[AccountType]:
        return self._scan("iter_account_types", tenant_id, company_id, EntityKind.ACCOUNT_TYPE)

    def iter_accounts(self, tenant_id: str, company_id: Optional[str] = None) -> Iterator[Account]:
        return self._scan("iter_accounts", tenant_id, company_id, EntityKind.ACCOUNT)

    def iter_product_categories(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[ProductCategory]:
        return self._scan(
            "iter_product_categories", tenant_id, company_id, EntityKind.PRODUCT_CATEGORY
        )

    def iter_products(self, tenant_id: str, company_id: Optional[str] = None) -> Iterator[Product]:
        return self._scan("iter_products", tenant_id, company_id, EntityKind.PRODUCT)

    def iter_journal_entries(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[JournalEntry]:
        return self._scan("iter_journal_entries", tenant_id, company_id, EntityKind.JOURNAL_ENTRY)

    def iter_journal_lines(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[JournalLine]:
        return self._scan("iter_journal_lines", tenant_id, company_id, EntityKind.JOURNAL_LINE)

    def iter_inventory_movements(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[InventoryMovement]:
        return self._scan(
            "iter_inventory_movements", tenant_id, company_id, EntityKind.INVENTORY_MOVEMENT
        )

    def iter_expenses(self, tenant_id: str, company_id: Optional[str] = None) -> Iterator[Expense]:
        return self._scan("iter_expenses", tenant_id, company_id, EntityKind.EXPENSE)

    def iter_purchase_orders(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[PurchaseOrder]:
        return self._scan("iter_purchase_orders", tenant_id, company_id, EntityKind.PURCHASE_ORDER)

    def iter_receipts(self, tenant_id: str, company_id: Optional[str] = None) -> Iterator[Receipt]:
        return self._scan("iter_receipts", tenant_id, company_id, EntityKind.RECEIPT)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def _grouped_sums(
        self,
        rows: Iterator[Any],
        key: str,
        columns: Mapping[str, Callable[[Any], Decimal]],
    ) -> pd.DataFrame:
        records = [
            {
                key: getattr(row, key),
                "company_id": row.company_id,
                **{c: f(row) for c, f in columns.items()},
            }
            for row in rows
        ]
        if not records:
            return pd.DataFrame()
        df = pd.DataFrame(records)
        named = {f"{c}_total": (c, _decimal_sum) for c in columns}
        named["row_count"] = (next(iter(columns)), "count")
        return df.groupby([key, "company_id"], sort=False).agg(**named).reset_index()

    def journal_entry_totals(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[EntryTotals]:
        self._maybe_fail("journal_entry_totals")
        grouped = self._grouped_sums(
            self._scan("iter_journal_lines", tenant_id, company_id, EntityKind.JOURNAL_LINE),
            "entry_id",
            {"debit": lambda line: line.debit, "credit": lambda line: line.credit},
        )
        for row in grouped.itertuples(index=False):
            yield EntryTotals(
                entry_id=row.entry_id,
                company_id=row.company_id,
                debit_total=row.debit_total,
                credit_total=row.credit_total,
                line_count=int(row.row_count),
            )

    def movement_totals(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> Iterator[MovementTotals]:
        self._maybe_fail("movement_totals")
        grouped = self._grouped_sums(
            self._scan(
                "iter_inventory_movements", tenant_id, company_id, EntityKind.INVENTORY_MOVEMENT
            ),
            "product_id",
            {"quantity": lambda movement: movement.quantity},
        )
        for row in grouped.itertuples(index=False):
            yield MovementTotals(
                product_id=row.product_id,
                company_id=row.company_id,
                quantity_total=row.quantity_total,
                movement_count=int(row.row_count),
            )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def find_account_type_by_code(
        self, tenant_id: str, company_id: str, code: str
    ) -> Optional[AccountType]:
        for account_type in self.iter_account_types(tenant_id, company_id):
            if account_type.code == code:
                return account_type
        return None

    def create_account_type(
        self, tenant_id: str, company_id: str, code: str, name: str
    ) -> AccountType:
        self._maybe_fail("create_account_type")
        with self._lock:
            existing = self.find_account_type_by_code(tenant_id, company_id, code)
            if existing is not None:
                return existing
            account_type = AccountType(
                id=f"type_{uuid.uuid4().hex[:12]}", code=code, name=name, company_id=company_id
            )
            self._tables[tenant_id][EntityKind.ACCOUNT_TYPE][account_type.id] = account_type
        logger.info(
            "Created account type %s (%s) for tenant=%s company=%s",
            account_type.id,
            code,
            tenant_id,
            company_id,
        )
        return account_type

    def delete_account_type(self, tenant_id: str, company_id: str, type_id: str) -> FixOutcome:
        self._maybe_fail("delete_account_type")
        with self._lock:
            types = self._tables.get(tenant_id, {}).get(EntityKind.ACCOUNT_TYPE, {})
            current = types.get(type_id)
            if current is None or current.company_id != company_id:
                return False, f"account_type {type_id} not found"
            accounts = self._tables[tenant_id].get(EntityKind.ACCOUNT, {})
            if any(
                a.type_id == type_id and a.company_id == company_id for a in accounts.values()
            ):
                return False, f"account_type {type_id} is still referenced"
            del types[type_id]
        logger.info(
            "Deleted account type %s for tenant=%s company=%s", type_id, tenant_id, company_id
        )
        return True, None

    def apply_fix(
        self,
        tenant_id: str,
        company_id: str,
        kind: EntityKind,
        entity_id: str,
        patch: Mapping[str, Any],
    ) -> FixOutcome:
        self._maybe_fail("apply_fix")
        reason = self._fix_failures.get(entity_id)
        if reason is not None:
            return False, reason
        with self._lock:
            table = self._tables.get(tenant_id, {}).get(kind, {})
            current = table.get(entity_id)
            if current is None:
                return False, f"{kind.value} {entity_id} not found"
            if current.company_id != company_id:
                return False, f"{kind.value} {entity_id} belongs to another company"
            allowed = {f.name for f in dataclasses.fields(current)} - {"id", "company_id"}
            bad = sorted(set(patch) - allowed)
            if bad:
                return False, f"cannot patch field(s) {', '.join(bad)} on {kind.value}"
            table[entity_id] = dataclasses.replace(current, **dict(patch))
        return True, None
