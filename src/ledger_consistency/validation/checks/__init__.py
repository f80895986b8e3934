"""Validation checks base interface.

This module defines the protocol (interface) that all validation checks must implement.
Each check verifies one invariant of the accounting data (e.g., balanced journal
entries, resolvable account types, stock matching movement history).

Rules every check follows:

- Read-only: a check never writes through the adapter.
- Deterministic: the same data yields the same issues in the same order.
- Data anomalies become ``ValidationIssue``s; only ``DataAccessError`` from the
  adapter may escape ``validate()``.
- Scoped: every adapter call passes the tenant and company it was given, and
  references only resolve within the referencing row's company.

To implement a new validation check:

1. Create a new file in this directory (e.g., `my_check.py`)
2. Define a class that implements the ValidationCheck protocol
3. Add the check to ``build_registry()`` in registry.py

Example:
    ```python
    # checks/my_check.py
    from ledger_consistency.core.enums import IssueKind
    from ..models import ValidationResult
    from . import report

    class MyCheck:
        display_name = "My Check"

        def validate(self, tenant_id, company_id, adapter) -> ValidationResult:
            result = ValidationResult()
            for account in adapter.iter_accounts(tenant_id, company_id):
                ...
                report(result, IssueKind.ORPHANED_RECORD, "...", account.id)
            return result
    ```
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.enums import IssueKind
from ..config import get_severity
from ..models import ValidationIssue, ValidationResult


class ValidationCheck(Protocol):
    """Protocol defining the interface for validation checks.

    Use duck typing (Protocol) for flexibility - no need to inherit from a base class.

    Attributes:
        display_name: Human-readable name; its normalized form is the check key.
    """

    display_name: str

    def validate(
        self,
        tenant_id: str,
        company_id: Optional[str],
        adapter: DataAccessAdapter,
    ) -> ValidationResult:
        """Run the validation check.

        Args:
            tenant_id: Tenant whose data is checked.
            company_id: Company to restrict to, or None for every company of the tenant.
            adapter: Read access to the accounting store.

        Returns:
            ValidationResult with errors, warnings and suggestions.

        Raises:
            DataAccessError: If the adapter fails.
        """
        ...


def report(
    result: ValidationResult,
    kind: IssueKind,
    message: str,
    *entity_ids: str,
    expected: Any = None,
    actual: Any = None,
) -> None:
    """Add an issue to ``result`` under the severity configured for ``kind``."""
    result.add(
        get_severity(kind),
        ValidationIssue(
            kind=kind,
            message=message,
            entity_ids=tuple(entity_ids),
            expected=expected,
            actual=actual,
        ),
    )


__all__ = ["ValidationCheck", "report"]
