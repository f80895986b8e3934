"""Account type reference check.

Every account must point at an account type defined in the same company. An
account whose type is missing, empty, or defined only in another company is
an error; account types nobody uses are worth a review but are harmless.
"""

from __future__ import annotations

from typing import Dict, Optional, Set, Tuple

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.entities import AccountType
from ledger_consistency.core.enums import IssueKind
from ..models import ValidationResult
from . import report


class AccountTypesCheck:
    """Validate that every account's type resolves within its company."""

    display_name = "Account Types"

    def validate(
        self,
        tenant_id: str,
        company_id: Optional[str],
        adapter: DataAccessAdapter,
    ) -> ValidationResult:
        result = ValidationResult()
        types: Dict[Tuple[str, str], AccountType] = {
            (t.company_id, t.id): t for t in adapter.iter_account_types(tenant_id, company_id)
        }
        used: Set[Tuple[str, str]] = set()

        for account in adapter.iter_accounts(tenant_id, company_id):
            key = (account.company_id, account.type_id or "")
            if account.type_id and key in types:
                used.add(key)
                continue
            label = f"Account {account.code}" + (f" ({account.name})" if account.name else "")
            if not account.type_id:
                message = f"{label} has no account type"
            else:
                message = (
                    f"{label} references account type {account.type_id} "
                    f"which does not exist in company {account.company_id}"
                )
            report(
                result,
                IssueKind.ORPHANED_ACCOUNT_TYPE,
                message,
                account.id,
                actual=account.type_id,
            )

        unused = [t for key, t in types.items() if key not in used]
        for account_type in unused:
            report(
                result,
                IssueKind.UNUSED_ACCOUNT_TYPE,
                f"Account type {account_type.code} ({account_type.name}) has no associated accounts",
                account_type.id,
            )
        if unused:
            result.suggest(
                f"{len(unused)} account types have no accounts: consider removing them "
                "or creating accounts for them"
            )
        return result
