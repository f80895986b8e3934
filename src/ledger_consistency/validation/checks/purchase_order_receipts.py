"""Delivered purchase orders must have at least one receipt."""

from __future__ import annotations

from collections import Counter
from typing import FrozenSet, Optional

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.enums import IssueKind
from ..config import RECEIPT_REQUIRED_PO_STATUSES
from ..models import ValidationResult
from . import report


class PurchaseOrderReceiptsCheck:
    display_name = "Purchase Order Receipts"

    def __init__(
        self, required_statuses: FrozenSet[str] = RECEIPT_REQUIRED_PO_STATUSES
    ) -> None:
        self.required_statuses = frozenset(s.lower() for s in required_statuses)

    def validate(
        self,
        tenant_id: str,
        company_id: Optional[str],
        adapter: DataAccessAdapter,
    ) -> ValidationResult:
        result = ValidationResult()
        receipts: Counter = Counter(
            (r.company_id, r.purchase_order_id) for r in adapter.iter_receipts(tenant_id, company_id)
        )

        missing = 0
        for po in adapter.iter_purchase_orders(tenant_id, company_id):
            if po.status.lower() not in self.required_statuses:
                continue
            if receipts[(po.company_id, po.id)]:
                continue
            missing += 1
            report(
                result,
                IssueKind.MISSING_RECEIPT,
                f"Purchase order {po.po_number or po.id} is marked as {po.status} "
                "but has no receipts",
                po.id,
            )

        if missing:
            result.suggest(f"Create receipts for {missing} delivered purchase orders")
        return result
