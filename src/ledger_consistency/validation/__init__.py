"""Validation system for Ledger Consistency Tools.

This module provides the consistency-check framework for accounting data:

- **Models**: ValidationIssue, ValidationResult, CheckOutcome, OverallResult, FixResult
- **Checks**: Individual check implementations (see validation/checks/)
- **Config**: Severity rules and tunable settings (import from .config)
- **Registry**: Ordered check specs and key lookup
- **Runner**: CheckRunner - fault-isolated, ordered execution on a worker pool
- **Aggregator**: summarize(), is_healthy() - pure counts over outcomes

Public API:
    CheckRunner: Runs all or named checks for a tenant/company
    build_registry: Builds the canonical ordered registry
    print_report: Display validation results to console

Usage:
    >>> from ledger_consistency.adapters import InMemoryAdapter
    >>> from ledger_consistency.validation import CheckRunner, print_report
    >>> runner = CheckRunner(InMemoryAdapter())
    >>> overall = runner.run_all("tenant-1", "company-1")
    >>> print_report(overall)

For implementation details:
    - See validation/checks/__init__.py for check interface conventions
    - See validation/config.py for severity and settings configuration
    - See validation/runner.py for check orchestration
"""

from __future__ import annotations

from .aggregator import RunSummary, is_healthy, summarize
from .models import (
    CheckOutcome,
    FixDetail,
    FixResult,
    OverallResult,
    ValidationIssue,
    ValidationResult,
)
from .registry import CheckRegistry, CheckSpec, build_registry, print_report
from .runner import CheckRunner

__all__ = [
    # Data models
    "CheckOutcome",
    "FixDetail",
    "FixResult",
    "OverallResult",
    "RunSummary",
    "ValidationIssue",
    "ValidationResult",
    # Orchestration
    "CheckRegistry",
    "CheckRunner",
    "CheckSpec",
    "build_registry",
    "is_healthy",
    "print_report",
    "summarize",
]
