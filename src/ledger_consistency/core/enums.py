"""Core enumerations used across the package."""

from __future__ import annotations

from enum import Enum


class IssueKind(str, Enum):
    """Closed set of issue kinds a check (or the runner) can report.

    Values are strings to ease serialization and CLI interchange.
    """

    # Runner-level failures
    DATA_ACCESS_FAILURE = "DATA_ACCESS_FAILURE"
    INTERNAL_CHECK_FAILURE = "INTERNAL_CHECK_FAILURE"

    # Chart of accounts
    ORPHANED_ACCOUNT_TYPE = "ORPHANED_ACCOUNT_TYPE"
    UNUSED_ACCOUNT_TYPE = "UNUSED_ACCOUNT_TYPE"

    # Products
    ORPHANED_PRODUCT_CATEGORY = "ORPHANED_PRODUCT_CATEGORY"
    UNUSED_PRODUCT_CATEGORY = "UNUSED_PRODUCT_CATEGORY"
    STOCK_MISMATCH = "STOCK_MISMATCH"

    # Journal
    UNBALANCED_ENTRY = "UNBALANCED_ENTRY"
    EMPTY_JOURNAL_ENTRY = "EMPTY_JOURNAL_ENTRY"
    INACTIVE_ACCOUNT_POSTING = "INACTIVE_ACCOUNT_POSTING"

    # Expenses
    MISSING_JOURNAL_LINK = "MISSING_JOURNAL_LINK"
    DANGLING_JOURNAL_LINK = "DANGLING_JOURNAL_LINK"
    EXPENSE_AMOUNT_MISMATCH = "EXPENSE_AMOUNT_MISMATCH"

    # Purchasing
    MISSING_RECEIPT = "MISSING_RECEIPT"

    # Referential integrity
    ORPHANED_RECORD = "ORPHANED_RECORD"

    # Advisory text attached to a result
    SUGGESTION = "SUGGESTION"


class EntityKind(str, Enum):
    """Tables the data access adapter can read from or patch."""

    ACCOUNT_TYPE = "account_type"
    ACCOUNT = "account"
    PRODUCT = "product"
    PRODUCT_CATEGORY = "product_category"
    JOURNAL_ENTRY = "journal_entry"
    JOURNAL_LINE = "journal_line"
    INVENTORY_MOVEMENT = "inventory_movement"
    EXPENSE = "expense"
    PURCHASE_ORDER = "purchase_order"
    RECEIPT = "receipt"


__all__ = ["IssueKind", "EntityKind"]
