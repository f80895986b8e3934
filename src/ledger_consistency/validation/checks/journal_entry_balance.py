"""Double-entry balance check.

For every journal entry the debit total must equal the credit total exactly.
Sums come from the adapter's grouped totals and are compared as Decimals with
no tolerance.
"""

from __future__ import annotations

from collections import Counter
from decimal import Decimal
from typing import Dict, Optional, Tuple

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.entities import EntryTotals
from ledger_consistency.core.enums import IssueKind
from ledger_consistency.core.utils import format_amount
from ..models import ValidationResult
from . import report


class JournalEntryBalanceCheck:
    """Validate that journal entries balance and post to active accounts."""

    display_name = "Journal Entry Balance"

    def validate(
        self,
        tenant_id: str,
        company_id: Optional[str],
        adapter: DataAccessAdapter,
    ) -> ValidationResult:
        result = ValidationResult()
        totals: Dict[Tuple[str, str], EntryTotals] = {
            (t.company_id, t.entry_id): t for t in adapter.journal_entry_totals(tenant_id, company_id)
        }

        unbalanced = 0
        for entry in adapter.iter_journal_entries(tenant_id, company_id):
            label = entry.reference or entry.id
            entry_totals = totals.get((entry.company_id, entry.id))
            if entry_totals is None:
                report(
                    result,
                    IssueKind.EMPTY_JOURNAL_ENTRY,
                    f"Journal entry {label} has no lines",
                    entry.id,
                )
                continue
            imbalance = entry_totals.imbalance
            if imbalance == Decimal("0"):
                continue
            unbalanced += 1
            report(
                result,
                IssueKind.UNBALANCED_ENTRY,
                f"Journal entry {label}: debits {format_amount(entry_totals.debit_total)} != "
                f"credits {format_amount(entry_totals.credit_total)} "
                f"(imbalance {format_amount(abs(imbalance))})",
                entry.id,
                expected=Decimal("0"),
                actual=imbalance,
            )

        self._check_inactive_postings(result, tenant_id, company_id, adapter)

        if unbalanced:
            result.suggest(f"Review and correct {unbalanced} unbalanced journal entries")
        return result

    @staticmethod
    def _check_inactive_postings(
        result: ValidationResult,
        tenant_id: str,
        company_id: Optional[str],
        adapter: DataAccessAdapter,
    ) -> None:
        inactive: Dict[Tuple[str, str], str] = {
            (a.company_id, a.id): a.code
            for a in adapter.iter_accounts(tenant_id, company_id)
            if not a.is_active
        }
        if not inactive:
            return
        postings: Counter = Counter()
        for line in adapter.iter_journal_lines(tenant_id, company_id):
            key = (line.company_id, line.account_id)
            if key in inactive:
                postings[key] += 1
        for key, code in inactive.items():
            if not postings[key]:
                continue
            report(
                result,
                IssueKind.INACTIVE_ACCOUNT_POSTING,
                f"Inactive account {code} has {postings[key]} posted journal lines",
                key[1],
                actual=postings[key],
            )
