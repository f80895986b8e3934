"""Validation check registry.

This module holds the canonical, ordered list of consistency checks:
- CheckSpec: key, display name and run function of one check
- CheckRegistry: ordered specs with a precomputed key -> position map
- build_registry(): Builds the default registry from settings
- print_report(): Displays validation results to console
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.utils import normalize_check_key
from .checks import ValidationCheck
from .checks.account_types import AccountTypesCheck
from .checks.expense_journal_integration import ExpenseJournalIntegrationCheck
from .checks.journal_entry_balance import JournalEntryBalanceCheck
from .checks.orphaned_records import OrphanedRecordsCheck
from .checks.product_categories import ProductCategoriesCheck
from .checks.purchase_order_receipts import PurchaseOrderReceiptsCheck
from .checks.stock_consistency import StockConsistencyCheck
from .config import Settings
from .models import OverallResult, ValidationResult

RunFn = Callable[[str, Optional[str], DataAccessAdapter], ValidationResult]


@dataclass(frozen=True)
class CheckSpec:
    """One registered check.

    Attributes:
        key: Normalized lookup key (e.g. "account_types").
        display_name: Human-readable name (e.g. "Account Types").
        run: Callable ``(tenant_id, company_id, adapter) -> ValidationResult``.
    """

    key: str
    display_name: str
    run: RunFn

    @classmethod
    def from_check(cls, check: ValidationCheck) -> "CheckSpec":
        return cls(
            key=normalize_check_key(check.display_name),
            display_name=check.display_name,
            run=check.validate,
        )


class CheckRegistry:
    """Ordered, immutable collection of checks.

    Position in the registry is the canonical output order of every run.

    Raises:
        ValueError: If two specs share a key.

    Examples:
        >>> registry = build_registry()
        >>> registry.keys()[:2]
        ['account_types', 'product_categories']
        >>> registry.resolve(["Stock Consistency", "account_types", "nope"])
        ([0, 2], ['nope'])
    """

    def __init__(self, specs: Iterable[CheckSpec]) -> None:
        self._specs: Tuple[CheckSpec, ...] = tuple(specs)
        self._index: Dict[str, int] = {}
        for position, spec in enumerate(self._specs):
            if spec.key in self._index:
                raise ValueError(f"Duplicate check key: {spec.key}")
            self._index[spec.key] = position

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[CheckSpec]:
        return iter(self._specs)

    def __getitem__(self, position: int) -> CheckSpec:
        return self._specs[position]

    def keys(self) -> List[str]:
        return [spec.key for spec in self._specs]

    def get(self, name: str) -> Optional[CheckSpec]:
        """Look up a check by display name or key."""
        position = self._index.get(normalize_check_key(name))
        return None if position is None else self._specs[position]

    def resolve(self, names: Sequence[str]) -> Tuple[List[int], List[str]]:
        """Map requested names to registry positions.

        Args:
            names: Display names or keys, in any order and possibly repeated.

        Returns:
            Tuple of (sorted unique positions, unknown names in request order).
        """
        positions = set()
        unknown: List[str] = []
        for name in names:
            position = self._index.get(normalize_check_key(name))
            if position is None:
                if name not in unknown:
                    unknown.append(name)
            else:
                positions.add(position)
        return sorted(positions), unknown


def build_registry(settings: Optional[Settings] = None) -> CheckRegistry:
    """Build the default registry of consistency checks.

    Order matches the order checks appear in reports.
    """
    settings = settings or Settings()
    checks: List[ValidationCheck] = [
        AccountTypesCheck(),
        ProductCategoriesCheck(),
        StockConsistencyCheck(),
        JournalEntryBalanceCheck(),
        ExpenseJournalIntegrationCheck(settings.unposted_expense_statuses),
        PurchaseOrderReceiptsCheck(settings.receipt_required_po_statuses),
        OrphanedRecordsCheck(),
    ]
    return CheckRegistry(CheckSpec.from_check(check) for check in checks)


def print_report(overall: OverallResult, max_examples: int = 5) -> None:
    """Print validation results to console.

    Displays a summary followed by details of all failed checks.

    Args:
        overall: Result of a run.
        max_examples: Number of issues printed per check and severity.

    Examples:
        >>> print_report(overall)
        Validation Summary:
          Scope: tenant-1 / company-1
          Checks: 7 executed (6 passed, 1 failed)
          Issues: 1 errors, 0 warnings, 1 suggestions

        Failed Checks:
        ❌ Journal Entry Balance: 1 errors
           - Journal entry JE-2: debits 100 != credits 90 (imbalance 10)
    """
    print(overall.summary())
    print()

    if overall.unknown_checks:
        print(f"⚠️ Unknown check names ignored: {', '.join(overall.unknown_checks)}")
        print()

    failed = overall.get_failed_checks()
    if not failed:
        print("✅ All validation checks passed!")
        return

    print("Failed Checks:")
    for outcome in failed:
        result = outcome.result
        print(f"❌ {outcome.name}: {len(result.errors)} errors")
        for issue in result.errors[:max_examples]:
            print(f"   - {issue.message}")
        if len(result.errors) > max_examples:
            print(f"   ... {len(result.errors) - max_examples} more")
        for issue in result.warnings[:max_examples]:
            print(f"   ⚠️ {issue.message}")
