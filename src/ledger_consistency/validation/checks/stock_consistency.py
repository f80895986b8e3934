"""Stock level vs. inventory movement history check.

The recorded stock of a product must equal the signed sum of its inventory
movements in the same company. Products without movements must hold zero.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Optional, Tuple

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.enums import IssueKind
from ledger_consistency.core.utils import format_amount
from ..models import ValidationResult
from . import report


def movement_balances(
    adapter: DataAccessAdapter, tenant_id: str, company_id: Optional[str]
) -> Dict[Tuple[str, str], Decimal]:
    """Running stock per (company, product) computed from movement totals."""
    return {
        (t.company_id, t.product_id): t.quantity_total
        for t in adapter.movement_totals(tenant_id, company_id)
    }


class StockConsistencyCheck:
    """Validate recorded stock against movement history."""

    display_name = "Stock Consistency"

    def validate(
        self,
        tenant_id: str,
        company_id: Optional[str],
        adapter: DataAccessAdapter,
    ) -> ValidationResult:
        result = ValidationResult()
        balances = movement_balances(adapter, tenant_id, company_id)

        mismatches = 0
        for product in adapter.iter_products(tenant_id, company_id):
            computed = balances.get((product.company_id, product.id), Decimal("0"))
            if computed == product.stock_quantity:
                continue
            mismatches += 1
            report(
                result,
                IssueKind.STOCK_MISMATCH,
                f"Product {product.sku or product.id} ({product.name}): stock shows "
                f"{format_amount(product.stock_quantity)} but movements total "
                f"{format_amount(computed)}",
                product.id,
                expected=computed,
                actual=product.stock_quantity,
            )

        if mismatches:
            result.suggest(
                f"{mismatches} products have stock inconsistencies: run stock reconciliation"
            )
        return result
