"""Pure aggregation over check outcomes.

Nothing here performs I/O; every function is linear in the number of issues.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .models import CheckOutcome


@dataclass(frozen=True)
class RunSummary:
    """Counts derived from one run's outcomes."""

    total_checks: int = 0
    passed_checks: int = 0
    failed_checks: int = 0
    total_errors: int = 0
    total_warnings: int = 0
    total_suggestions: int = 0


def is_healthy(outcomes: Iterable["CheckOutcome"]) -> bool:
    """Logical AND of every outcome's validity (True for no outcomes)."""
    return all(o.result.is_valid for o in outcomes)


def summarize(outcomes: Iterable["CheckOutcome"]) -> RunSummary:
    """Count checks passed/failed and issues per severity.

    Examples:
        >>> summarize(overall.checks).failed_checks
        1
    """
    total = passed = errors = warnings = suggestions = 0
    for outcome in outcomes:
        result = outcome.result
        total += 1
        if result.is_valid:
            passed += 1
        errors += len(result.errors)
        warnings += len(result.warnings)
        suggestions += len(result.suggestions)
    return RunSummary(
        total_checks=total,
        passed_checks=passed,
        failed_checks=total - passed,
        total_errors=errors,
        total_warnings=warnings,
        total_suggestions=suggestions,
    )
