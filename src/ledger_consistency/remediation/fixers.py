"""Safe automatic fixes.

Each fixer is tied to one check and corrects only issues with exactly one
mechanically correct answer. The set is explicit: ``FIXABLE_CHECKS`` lists
every check that can be auto-fixed, and nothing else is ever patched.

A fixer works in two phases:

1. ``scan()`` collects the affected entities (read-only).
2. ``plan()`` turns one scanned entity into a ``PlannedFix``; the engine
   applies it through the adapter and audits it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.entities import Account, AccountType, Product
from ledger_consistency.core.enums import EntityKind
from ledger_consistency.validation.checks.stock_consistency import movement_balances
from ledger_consistency.validation.config import (
    DEFAULT_ACCOUNT_TYPE_CODE,
    DEFAULT_ACCOUNT_TYPE_NAME,
)


@dataclass(frozen=True)
class PlannedFix:
    """A single-field change to one entity."""

    kind: EntityKind
    entity_id: str
    company_id: str
    field_name: str
    old_value: Any
    new_value: Any
    action: str

    @property
    def patch(self) -> Dict[str, Any]:
        return {self.field_name: self.new_value}


class DefaultTypeProvider(Protocol):
    def __call__(self, company_id: str, code: str, name: str) -> AccountType:
        ...


class Fixer(Protocol):
    check_name: str

    def scan(
        self, tenant_id: str, company_id: Optional[str], adapter: DataAccessAdapter
    ) -> List[Any]:
        ...

    def entity_id(self, entity: Any) -> str:
        ...

    def plan(self, entity: Any, context: "FixContext") -> PlannedFix:
        ...


@dataclass
class FixContext:
    """Per-run state handed to ``Fixer.plan``.

    ``default_type`` resolves (creating and auditing if needed) the fallback
    account type of a company.
    """

    tenant_id: str
    default_type: DefaultTypeProvider


class AccountTypeFixer:
    """Relink accounts whose type does not resolve to the company's default type."""

    check_name = "account_types"

    def __init__(
        self,
        default_code: str = DEFAULT_ACCOUNT_TYPE_CODE,
        default_name: str = DEFAULT_ACCOUNT_TYPE_NAME,
    ) -> None:
        self.default_code = default_code
        self.default_name = default_name

    def scan(
        self, tenant_id: str, company_id: Optional[str], adapter: DataAccessAdapter
    ) -> List[Account]:
        types = {(t.company_id, t.id) for t in adapter.iter_account_types(tenant_id, company_id)}
        return [
            account
            for account in adapter.iter_accounts(tenant_id, company_id)
            if not account.type_id or (account.company_id, account.type_id) not in types
        ]

    def entity_id(self, entity: Account) -> str:
        return entity.id

    def plan(self, entity: Account, context: FixContext) -> PlannedFix:
        default = context.default_type(entity.company_id, self.default_code, self.default_name)
        return PlannedFix(
            kind=EntityKind.ACCOUNT,
            entity_id=entity.id,
            company_id=entity.company_id,
            field_name="type_id",
            old_value=entity.type_id,
            new_value=default.id,
            action=f"relink type {entity.type_id} -> {default.code} ({default.id})",
        )


class StockLevelFixer:
    """Reset recorded stock to the running balance of inventory movements."""

    check_name = "stock_consistency"

    def scan(
        self, tenant_id: str, company_id: Optional[str], adapter: DataAccessAdapter
    ) -> List[Tuple[Product, Decimal]]:
        balances = movement_balances(adapter, tenant_id, company_id)
        affected = []
        for product in adapter.iter_products(tenant_id, company_id):
            computed = balances.get((product.company_id, product.id), Decimal("0"))
            if computed != product.stock_quantity:
                affected.append((product, computed))
        return affected

    def entity_id(self, entity: Tuple[Product, Decimal]) -> str:
        return entity[0].id

    def plan(self, entity: Tuple[Product, Decimal], context: FixContext) -> PlannedFix:
        product, computed = entity
        return PlannedFix(
            kind=EntityKind.PRODUCT,
            entity_id=product.id,
            company_id=product.company_id,
            field_name="stock_quantity",
            old_value=product.stock_quantity,
            new_value=computed,
            action=f"set stock {product.stock_quantity} -> {computed}",
        )


def build_fixers(
    default_code: str = DEFAULT_ACCOUNT_TYPE_CODE,
    default_name: str = DEFAULT_ACCOUNT_TYPE_NAME,
) -> List[Fixer]:
    """Fixers in registry order of the checks they remediate."""
    return [AccountTypeFixer(default_code, default_name), StockLevelFixer()]


FIXABLE_CHECKS: Tuple[str, ...] = (AccountTypeFixer.check_name, StockLevelFixer.check_name)
