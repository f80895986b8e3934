"""Validation configuration constants.

This module centralizes severity rules, runner sizing and remediation defaults.
Adjust these constants to tune validation behavior; deployments can override
the tunable ones with a YAML settings file (see ``load_settings``).

Severity Levels:
    - "error": Hard invariant violations that must block trusting financial reports
    - "warning": Soft inconsistencies that do not break integrity
    - "suggestion": Advisory, non-blocking
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, FrozenSet, Optional

import yaml

from ledger_consistency.core.enums import IssueKind

# ============================================================================
# RUNNER AND ADAPTER DEFAULTS
# ============================================================================

DEFAULT_MAX_WORKERS = 4
DEFAULT_PAGE_SIZE = 500

# ============================================================================
# REMEDIATION DEFAULTS
# ============================================================================

DEFAULT_ACCOUNT_TYPE_CODE = "UNCATEGORIZED"
DEFAULT_ACCOUNT_TYPE_NAME = "Uncategorized"

# Expense statuses that are not yet expected to carry a journal entry
UNPOSTED_EXPENSE_STATUSES = frozenset({"draft"})

# Purchase order statuses that require at least one receipt
RECEIPT_REQUIRED_PO_STATUSES = frozenset({"delivered"})


# ============================================================================
# SEVERITY RULES
# ============================================================================
# Format: {issue_kind: severity}

SEVERITY_RULES: Dict[IssueKind, str] = {
    IssueKind.DATA_ACCESS_FAILURE: "error",
    IssueKind.INTERNAL_CHECK_FAILURE: "error",
    # Dangling references break report integrity
    IssueKind.ORPHANED_ACCOUNT_TYPE: "error",
    IssueKind.ORPHANED_PRODUCT_CATEGORY: "error",
    IssueKind.ORPHANED_RECORD: "error",
    IssueKind.UNBALANCED_ENTRY: "error",
    IssueKind.STOCK_MISMATCH: "error",
    IssueKind.MISSING_JOURNAL_LINK: "error",
    IssueKind.DANGLING_JOURNAL_LINK: "error",
    IssueKind.EXPENSE_AMOUNT_MISMATCH: "error",
    IssueKind.MISSING_RECEIPT: "error",
    # Unused reference rows and odd postings are review items
    IssueKind.UNUSED_ACCOUNT_TYPE: "warning",
    IssueKind.UNUSED_PRODUCT_CATEGORY: "warning",
    IssueKind.EMPTY_JOURNAL_ENTRY: "warning",
    IssueKind.INACTIVE_ACCOUNT_POSTING: "warning",
    IssueKind.SUGGESTION: "suggestion",
}


def get_severity(kind: IssueKind) -> str:
    """Get the severity level for an issue kind.

    Args:
        kind: Issue kind reported by a check.

    Returns:
        Severity level: "error", "warning" or "suggestion".

    Raises:
        ValueError: If the kind has no configured severity.

    Examples:
        >>> get_severity(IssueKind.UNBALANCED_ENTRY)
        'error'
        >>> get_severity(IssueKind.UNUSED_ACCOUNT_TYPE)
        'warning'
    """
    try:
        return SEVERITY_RULES[kind]
    except KeyError:
        raise ValueError(f"Unknown issue kind: {kind}") from None


# ============================================================================
# SETTINGS
# ============================================================================


@dataclass(frozen=True)
class Settings:
    """Tunable settings for a service instance.

    Attributes:
        max_workers: Size of the check worker pool (1 runs checks inline).
        page_size: Rows per page requested from the adapter.
        check_timeout: Seconds to wait for a whole run before abandoning checks (None waits).
        strict_check_names: Raise on unknown requested check names instead of dropping them.
        default_account_type_code: Code of the type orphaned accounts are relinked to.
        default_account_type_name: Name used when that type has to be created.
        unposted_expense_statuses: Expense statuses exempt from journal integration checks.
        receipt_required_po_statuses: Purchase order statuses that require receipts.
    """

    max_workers: int = DEFAULT_MAX_WORKERS
    page_size: int = DEFAULT_PAGE_SIZE
    check_timeout: Optional[float] = None
    strict_check_names: bool = False
    default_account_type_code: str = DEFAULT_ACCOUNT_TYPE_CODE
    default_account_type_name: str = DEFAULT_ACCOUNT_TYPE_NAME
    unposted_expense_statuses: FrozenSet[str] = field(default=UNPOSTED_EXPENSE_STATUSES)
    receipt_required_po_statuses: FrozenSet[str] = field(default=RECEIPT_REQUIRED_PO_STATUSES)

    def __post_init__(self) -> None:
        """Validate field constraints."""
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")
        if self.check_timeout is not None and self.check_timeout <= 0:
            raise ValueError(f"check_timeout must be positive, got {self.check_timeout}")
        if not self.default_account_type_code.strip():
            raise ValueError("default_account_type_code must not be empty")


_SET_FIELDS = {"unposted_expense_statuses", "receipt_required_po_statuses"}


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a YAML file, falling back to defaults.

    The file holds a mapping whose keys are ``Settings`` field names, either at
    the top level or under a ``validation:`` section.

    Args:
        path: YAML file to read. None returns the defaults.

    Returns:
        Settings instance.

    Raises:
        FileNotFoundError: If path is given but does not exist.
        ValueError: If the YAML is malformed or holds unknown keys or bad values.

    Examples:
        >>> load_settings(Path("config/consistency.yaml")).max_workers
        8
    """
    if path is None:
        return Settings()
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    data = data.get("validation", data) or {}

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings in {path}: {', '.join(unknown)}")

    kwargs = {}
    for key, value in data.items():
        if key in _SET_FIELDS:
            value = frozenset(str(v) for v in (value or []))
        kwargs[key] = value
    try:
        return Settings(**kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid settings in {path}: {e}") from e
