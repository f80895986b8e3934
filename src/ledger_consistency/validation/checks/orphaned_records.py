"""Dangling foreign key check.

Looks for rows whose parent row does not exist in the same company:

- account -> parent account
- journal line -> journal entry
- journal line -> account
- inventory movement -> product
- receipt -> purchase order
"""

from __future__ import annotations

from typing import Optional, Set, Tuple

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.enums import IssueKind
from ..models import ValidationResult
from . import report


def _ids(rows) -> Set[Tuple[str, str]]:
    return {(row.company_id, row.id) for row in rows}


class OrphanedRecordsCheck:
    """Validate that no row references a nonexistent parent row."""

    display_name = "Orphaned Records"

    def validate(
        self,
        tenant_id: str,
        company_id: Optional[str],
        adapter: DataAccessAdapter,
    ) -> ValidationResult:
        result = ValidationResult()
        found = {}

        accounts = _ids(adapter.iter_accounts(tenant_id, company_id))
        count = 0
        for account in adapter.iter_accounts(tenant_id, company_id):
            if account.parent_id and (account.company_id, account.parent_id) not in accounts:
                count += 1
                report(
                    result,
                    IssueKind.ORPHANED_RECORD,
                    f"Account {account.code} references missing parent account {account.parent_id}",
                    account.id,
                    actual=account.parent_id,
                )
        found["accounts with a missing parent"] = count

        entries = _ids(adapter.iter_journal_entries(tenant_id, company_id))
        missing_entry = missing_account = 0
        for line in adapter.iter_journal_lines(tenant_id, company_id):
            if (line.company_id, line.entry_id) not in entries:
                missing_entry += 1
                report(
                    result,
                    IssueKind.ORPHANED_RECORD,
                    f"Journal line {line.id} references missing journal entry {line.entry_id}",
                    line.id,
                    actual=line.entry_id,
                )
            if (line.company_id, line.account_id) not in accounts:
                missing_account += 1
                report(
                    result,
                    IssueKind.ORPHANED_RECORD,
                    f"Journal line {line.id} references missing account {line.account_id}",
                    line.id,
                    actual=line.account_id,
                )
        found["journal lines with a missing entry"] = missing_entry
        found["journal lines with a missing account"] = missing_account

        products = _ids(adapter.iter_products(tenant_id, company_id))
        count = 0
        for movement in adapter.iter_inventory_movements(tenant_id, company_id):
            if (movement.company_id, movement.product_id) not in products:
                count += 1
                report(
                    result,
                    IssueKind.ORPHANED_RECORD,
                    f"Inventory movement {movement.id} references missing product "
                    f"{movement.product_id}",
                    movement.id,
                    actual=movement.product_id,
                )
        found["inventory movements with a missing product"] = count

        orders = _ids(adapter.iter_purchase_orders(tenant_id, company_id))
        count = 0
        for receipt in adapter.iter_receipts(tenant_id, company_id):
            if (receipt.company_id, receipt.purchase_order_id) not in orders:
                count += 1
                report(
                    result,
                    IssueKind.ORPHANED_RECORD,
                    f"Receipt {receipt.id} references missing purchase order "
                    f"{receipt.purchase_order_id}",
                    receipt.id,
                    actual=receipt.purchase_order_id,
                )
        found["receipts with a missing purchase order"] = count

        for label, n in found.items():
            if n:
                result.suggest(f"Review or remove {n} {label}")
        return result
