"""Expense to journal entry integration check.

Once an expense leaves draft it must link to a journal entry of the same
company whose debit total equals the expense amount.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, FrozenSet, Optional, Set, Tuple

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.enums import IssueKind
from ledger_consistency.core.utils import format_amount
from ..config import UNPOSTED_EXPENSE_STATUSES
from ..models import ValidationResult
from . import report


class ExpenseJournalIntegrationCheck:
    """Validate that posted expenses are reflected in the journal."""

    display_name = "Expense Journal Integration"

    def __init__(self, unposted_statuses: FrozenSet[str] = UNPOSTED_EXPENSE_STATUSES) -> None:
        self.unposted_statuses = frozenset(s.lower() for s in unposted_statuses)

    def validate(
        self,
        tenant_id: str,
        company_id: Optional[str],
        adapter: DataAccessAdapter,
    ) -> ValidationResult:
        result = ValidationResult()
        entries: Set[Tuple[str, str]] = {
            (e.company_id, e.id) for e in adapter.iter_journal_entries(tenant_id, company_id)
        }
        debit_totals: Dict[Tuple[str, str], Decimal] = {
            (t.company_id, t.entry_id): t.debit_total
            for t in adapter.journal_entry_totals(tenant_id, company_id)
        }

        broken = 0
        for expense in adapter.iter_expenses(tenant_id, company_id):
            if expense.status.lower() in self.unposted_statuses:
                continue
            label = f"Expense {expense.description or expense.id} ({expense.status})"
            link = expense.linked_journal_entry_id
            if not link:
                broken += 1
                report(
                    result,
                    IssueKind.MISSING_JOURNAL_LINK,
                    f"{label} has no journal entry",
                    expense.id,
                )
                continue
            key = (expense.company_id, link)
            if key not in entries:
                broken += 1
                report(
                    result,
                    IssueKind.DANGLING_JOURNAL_LINK,
                    f"{label} links to journal entry {link} which does not exist "
                    f"in company {expense.company_id}",
                    expense.id,
                    link,
                    actual=link,
                )
                continue
            posted = debit_totals.get(key, Decimal("0"))
            if posted != expense.amount:
                broken += 1
                report(
                    result,
                    IssueKind.EXPENSE_AMOUNT_MISMATCH,
                    f"{label} amount {format_amount(expense.amount)} does not match "
                    f"journal entry {link} debits {format_amount(posted)}",
                    expense.id,
                    link,
                    expected=expense.amount,
                    actual=posted,
                )

        if broken:
            result.suggest(f"Generate or correct journal entries for {broken} expenses")
        return result
