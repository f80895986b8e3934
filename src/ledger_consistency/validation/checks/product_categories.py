"""Product category reference check.

A product may be uncategorized, but a category it names must exist in the
product's company.
"""

from __future__ import annotations

from typing import Dict, Optional, Set, Tuple

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.entities import ProductCategory
from ledger_consistency.core.enums import IssueKind
from ..models import ValidationResult
from . import report


class ProductCategoriesCheck:
    """Validate that every set product category resolves within its company."""

    display_name = "Product Categories"

    def validate(
        self,
        tenant_id: str,
        company_id: Optional[str],
        adapter: DataAccessAdapter,
    ) -> ValidationResult:
        result = ValidationResult()
        categories: Dict[Tuple[str, str], ProductCategory] = {
            (c.company_id, c.id): c for c in adapter.iter_product_categories(tenant_id, company_id)
        }
        used: Set[Tuple[str, str]] = set()

        for product in adapter.iter_products(tenant_id, company_id):
            if not product.category_id:
                continue
            key = (product.company_id, product.category_id)
            if key in categories:
                used.add(key)
                continue
            report(
                result,
                IssueKind.ORPHANED_PRODUCT_CATEGORY,
                f"Product {product.sku or product.id} ({product.name}) references category "
                f"{product.category_id} which does not exist in company {product.company_id}",
                product.id,
                actual=product.category_id,
            )

        unused = [c for key, c in categories.items() if key not in used]
        for category in unused:
            report(
                result,
                IssueKind.UNUSED_PRODUCT_CATEGORY,
                f"Category {category.name or category.id} has no associated products",
                category.id,
            )
        if unused:
            result.suggest(
                f"{len(unused)} categories have no products: consider removing them "
                "or assigning products to them"
            )
        return result
