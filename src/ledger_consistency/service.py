"""Public entry points of the consistency engine.

``DataConsistencyService`` wires the registry, runner and remediation engine
around one data access adapter. It holds no per-tenant state: every method
takes the tenant (and optionally the company) it operates on.

Usage:
    >>> from ledger_consistency.adapters import load_dataset
    >>> from ledger_consistency.service import DataConsistencyService
    >>> service = DataConsistencyService(load_dataset(Path("data/ledger.yaml")))
    >>> overall = service.run_all_checks("tenant-1", "company-1")
    >>> overall.is_valid
    True
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ledger_consistency.adapters.audit import AuditLog, InMemoryAuditLog
from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.remediation.engine import RemediationEngine
from ledger_consistency.remediation.fixers import build_fixers
from ledger_consistency.validation.config import Settings
from ledger_consistency.validation.models import FixResult, OverallResult, ValidationResult
from ledger_consistency.validation.registry import CheckRegistry, build_registry
from ledger_consistency.validation.runner import CheckRunner


class DataConsistencyService:
    """Run consistency checks and safe fixes for one data store.

    Args:
        adapter: Data access adapter for the accounting store.
        audit_log: Receives one record per remediation write. Defaults to in-memory.
        settings: Runner and remediation settings. Defaults to ``Settings()``.
        registry: Checks to expose. Defaults to ``build_registry(settings)``.
    """

    def __init__(
        self,
        adapter: DataAccessAdapter,
        audit_log: Optional[AuditLog] = None,
        settings: Optional[Settings] = None,
        registry: Optional[CheckRegistry] = None,
    ) -> None:
        self.adapter = adapter
        self.settings = settings or Settings()
        self.audit_log = audit_log if audit_log is not None else InMemoryAuditLog()
        self.registry = registry if registry is not None else build_registry(self.settings)
        self.runner = CheckRunner(
            adapter,
            self.registry,
            max_workers=self.settings.max_workers,
            timeout=self.settings.check_timeout,
            strict_names=self.settings.strict_check_names,
        )
        self.remediation = RemediationEngine(
            adapter,
            self.audit_log,
            build_fixers(
                self.settings.default_account_type_code,
                self.settings.default_account_type_name,
            ),
        )

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def run_all_checks(self, tenant_id: str, company_id: Optional[str] = None) -> OverallResult:
        return self.runner.run_all(tenant_id, company_id)

    def run_checks(
        self,
        tenant_id: str,
        company_id: Optional[str] = None,
        names: Sequence[str] = (),
    ) -> OverallResult:
        """Run the named checks, or every check when no names are given.

        Raises:
            UnknownCheckError: If strict check names are configured and a name is unknown.
        """
        if not names:
            return self.runner.run_all(tenant_id, company_id)
        return self.runner.run_named(tenant_id, company_id, names)

    def fix_common_issues(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> List[FixResult]:
        return self.remediation.fix_common(tenant_id, company_id)

    def status(self, tenant_id: str, company_id: Optional[str] = None) -> Dict[str, Any]:
        """Compact health view: overall status plus PASS/FAIL per check."""
        overall = self.run_all_checks(tenant_id, company_id)
        data = overall.to_dict()
        return {
            "overall": overall.status,
            "checks": [
                {
                    "name": c.name,
                    "status": "PASS" if c.is_valid else "FAIL",
                    "errorCount": len(c.result.errors),
                    "warningCount": len(c.result.warnings),
                }
                for c in overall.checks
            ],
            "summary": data["summary"],
        }

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    def _run_single(self, key: str, tenant_id: str, company_id: Optional[str]) -> ValidationResult:
        spec = self.registry.get(key)
        if spec is None:
            raise KeyError(f"Check not registered: {key}")
        return spec.run(tenant_id, company_id, self.adapter)

    def validate_account_types(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> ValidationResult:
        return self._run_single("account_types", tenant_id, company_id)

    def validate_product_categories(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> ValidationResult:
        return self._run_single("product_categories", tenant_id, company_id)

    def validate_stock_consistency(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> ValidationResult:
        return self._run_single("stock_consistency", tenant_id, company_id)

    def validate_journal_entry_balance(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> ValidationResult:
        return self._run_single("journal_entry_balance", tenant_id, company_id)

    def validate_expense_journal_integration(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> ValidationResult:
        return self._run_single("expense_journal_integration", tenant_id, company_id)

    def validate_purchase_order_receipts(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> ValidationResult:
        return self._run_single("purchase_order_receipts", tenant_id, company_id)

    def validate_orphaned_records(
        self, tenant_id: str, company_id: Optional[str] = None
    ) -> ValidationResult:
        return self._run_single("orphaned_records", tenant_id, company_id)
