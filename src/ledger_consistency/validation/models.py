"""Validation data models.

This module defines core data structures for validation and remediation results:
- ValidationIssue: One finding reported by a check
- ValidationResult: Outcome of a single validation check
- CheckOutcome: A check's name paired with its result
- OverallResult: Aggregated results from all executed checks
- FixDetail / FixResult: Outcome of one remediation pass for a check
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from ledger_consistency.core.enums import IssueKind
from .aggregator import RunSummary, is_healthy, summarize


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding reported by a check.

    Attributes:
        kind: Machine-readable issue kind.
        message: Human-readable description naming the affected entities.
        entity_ids: Identifiers of the rows involved (may be empty for summaries).
        expected: Value the invariant requires, when it can be stated.
        actual: Value found in the data.

    Examples:
        >>> ValidationIssue(
        ...     kind=IssueKind.UNBALANCED_ENTRY,
        ...     message="Journal entry JE-1: debits 100 != credits 90 (imbalance 10)",
        ...     entity_ids=("je-1",),
        ...     expected=Decimal("0"),
        ...     actual=Decimal("10"),
        ... )
    """

    kind: IssueKind
    message: str
    entity_ids: Tuple[str, ...] = ()
    expected: Any = None
    actual: Any = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
            "entityIds": list(self.entity_ids),
        }
        if self.expected is not None:
            data["expected"] = _jsonable(self.expected)
        if self.actual is not None:
            data["actual"] = _jsonable(self.actual)
        return data


@dataclass
class ValidationResult:
    """Result of a single validation check.

    ``is_valid`` is derived: it is True exactly when ``errors`` is empty.
    Warnings and suggestions never affect validity.
    """

    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    suggestions: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, severity: str, issue: ValidationIssue) -> None:
        """Append an issue to the list matching ``severity``.

        Raises:
            ValueError: If severity is not "error", "warning" or "suggestion".
        """
        if severity == "error":
            self.errors.append(issue)
        elif severity == "warning":
            self.warnings.append(issue)
        elif severity == "suggestion":
            self.suggestions.append(issue)
        else:
            raise ValueError(
                f"Invalid severity: {severity}. Must be 'error', 'warning' or 'suggestion'."
            )

    def suggest(self, message: str) -> None:
        self.suggestions.append(ValidationIssue(kind=IssueKind.SUGGESTION, message=message))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
            "suggestions": [i.to_dict() for i in self.suggestions],
        }


@dataclass(frozen=True)
class CheckOutcome:
    """A named check result, ordered by registry position within a run."""

    name: str
    key: str
    result: ValidationResult

    @property
    def is_valid(self) -> bool:
        return self.result.is_valid

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "key": self.key, **self.result.to_dict()}


@dataclass
class OverallResult:
    """Aggregated validation results for one tenant/company run.

    Attributes:
        checks: One outcome per executed check, in registry order.
        tenant_id: Tenant the run was scoped to.
        company_id: Company the run was scoped to (None for every company of the tenant).
        unknown_checks: Requested names that matched no registered check.

    Examples:
        >>> overall = runner.run_all("tenant-1", "company-1")
        >>> overall.is_valid
        False
        >>> print(overall.summary())
    """

    checks: List[CheckOutcome]
    tenant_id: str = ""
    company_id: Optional[str] = None
    unknown_checks: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return is_healthy(self.checks)

    @property
    def status(self) -> str:
        return "HEALTHY" if self.is_valid else "ISSUES_FOUND"

    def counts(self) -> RunSummary:
        return summarize(self.checks)

    def get_failed_checks(self) -> List[CheckOutcome]:
        return [c for c in self.checks if not c.is_valid]

    def summary(self) -> str:
        """Generate a concise text summary of validation results.

        Examples:
            >>> print(overall.summary())
            Validation Summary:
              Scope: tenant-1 / company-1
              Checks: 7 executed (6 passed, 1 failed)
              Issues: 2 errors, 1 warnings, 1 suggestions
        """
        s = self.counts()
        return (
            f"Validation Summary:\n"
            f"  Scope: {self._scope_label()}\n"
            f"  Checks: {s.total_checks} executed ({s.passed_checks} passed, "
            f"{s.failed_checks} failed)\n"
            f"  Issues: {s.total_errors} errors, {s.total_warnings} warnings, "
            f"{s.total_suggestions} suggestions"
        )

    def _scope_label(self) -> str:
        return f"{self.tenant_id} / {self.company_id or 'all companies'}"

    def to_dict(self) -> Dict[str, Any]:
        s = self.counts()
        return {
            "isValid": self.is_valid,
            "status": self.status,
            "tenantId": self.tenant_id,
            "companyId": self.company_id,
            "checks": [c.to_dict() for c in self.checks],
            "unknownChecks": list(self.unknown_checks),
            "summary": {
                "totalChecks": s.total_checks,
                "passedChecks": s.passed_checks,
                "failedChecks": s.failed_checks,
                "totalErrors": s.total_errors,
                "totalWarnings": s.total_warnings,
                "totalSuggestions": s.total_suggestions,
            },
        }

    def to_json(self) -> str:
        """Generate detailed JSON validation report."""
        data = self.to_dict()
        data["generatedAt"] = datetime.now().isoformat()
        return json.dumps(data, indent=2, ensure_ascii=False)

    def to_markdown(self) -> str:
        """Generate detailed Markdown validation report.

        Returns:
            Formatted Markdown string with a summary section, the passed checks
            and every failed or noisy check with its issues.
        """
        s = self.counts()
        lines = [
            f"# Ledger Consistency Report: {self._scope_label()}",
            "",
            f"**Status:** {self.status}",
            f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "",
            "## Summary",
            "",
            f"- **Total Checks:** {s.total_checks}",
            f"- **Passed:** {s.passed_checks} ✅",
            f"- **Failed:** {s.failed_checks} ❌",
            f"- **Errors:** {s.total_errors}",
            f"- **Warnings:** {s.total_warnings}",
            f"- **Suggestions:** {s.total_suggestions}",
            "",
        ]

        if self.unknown_checks:
            lines.append("## ⚠️ Unknown Check Names")
            lines.append("")
            for name in self.unknown_checks:
                lines.append(f"- `{name}`")
            lines.append("")

        passed = [c for c in self.checks if c.is_valid]
        if passed:
            lines.append("## ✅ Passed Checks")
            lines.append("")
            for outcome in passed:
                lines.append(f"- **{outcome.name}**")
            lines.append("")

        for outcome in self.checks:
            result = outcome.result
            if not (result.errors or result.warnings or result.suggestions):
                continue
            icon = "✅" if outcome.is_valid else "❌"
            lines.append(f"### {icon} {outcome.name}")
            lines.append("")
            for label, issues in (
                ("Error", result.errors),
                ("Warning", result.warnings),
                ("Suggestion", result.suggestions),
            ):
                for issue in issues:
                    lines.append(f"- **{label}:** {issue.message}")
            lines.append("")

        return "\n".join(lines)

    def to_console_summary(self) -> str:
        """Generate a concise summary for console output."""
        lines = [self.summary(), ""]

        failed = self.get_failed_checks()
        if not failed:
            lines.append("✅ All validation checks passed!")
        else:
            lines.append("Check Details:")
            for outcome in failed:
                lines.append(f"❌ {outcome.name}: {len(outcome.result.errors)} errors")
                lines.append(f"   - {outcome.result.errors[0].message}")

        return "\n".join(lines)


@dataclass(frozen=True)
class FixDetail:
    """What happened to one entity during remediation."""

    entity_id: str
    action: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"entityId": self.entity_id, "action": self.action}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class FixResult:
    """Outcome of one fixer run.

    Attributes:
        check_name: Key of the check whose issues were remediated.
        scanned: Number of affected entities found by the scan.
        fixed: Number of entities corrected and audited.
        failed: Number of entities whose fix or audit write failed.
        details: Per-entity record of actions taken.
    """

    check_name: str
    scanned: int = 0
    fixed: int = 0
    failed: int = 0
    details: List[FixDetail] = field(default_factory=list)

    def record_fixed(self, entity_id: str, action: str) -> None:
        self.fixed += 1
        self.details.append(FixDetail(entity_id=entity_id, action=action))

    def record_failed(self, entity_id: str, action: str, error: str) -> None:
        self.failed += 1
        self.details.append(FixDetail(entity_id=entity_id, action=action, error=error))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "checkName": self.check_name,
            "scanned": self.scanned,
            "fixed": self.fixed,
            "failed": self.failed,
            "details": [d.to_dict() for d in self.details],
        }
