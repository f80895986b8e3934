"""Remediation engine.

Runs the explicit set of fixers for one tenant/company and reports one
``FixResult`` per fixer. Guarantees:

- Idempotent: fixers only touch entities their scan reports as broken, and a
  committed fix removes the entity from the next scan.
- Per-item commits: each entity is patched in its own adapter call; a failure
  is recorded in the fixer's details and the next entity is processed.
- Audited: a fix counts as fixed only once its audit record was written. A
  change whose audit write fails is rolled back (patch reverted, created
  default type removed) and reported as failed.
- Sequential: fixes of one fixer are applied in scan order, fixers run one
  after another, so the audit log is causally ordered.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ledger_consistency.adapters.audit import AuditLog, AuditRecord, InMemoryAuditLog
from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.entities import AccountType
from ledger_consistency.core.enums import EntityKind
from ledger_consistency.core.errors import DataAccessError, RemediationError
from ledger_consistency.validation.models import FixResult
from .fixers import FixContext, Fixer, PlannedFix, build_fixers

logger = logging.getLogger(__name__)


class RemediationEngine:
    """Apply safe, audited fixes through a data access adapter.

    Args:
        adapter: Tenant-scoped data access with fix writes.
        audit_log: Collaborator receiving one record per mutation.
            Defaults to an in-memory log.
        fixers: Fixers to run, in order. Defaults to ``build_fixers()``.

    Examples:
        >>> engine = RemediationEngine(adapter, audit_log)
        >>> [(r.check_name, r.fixed) for r in engine.fix_common("tenant-1", "company-1")]
        [('account_types', 1), ('stock_consistency', 0)]
    """

    def __init__(
        self,
        adapter: DataAccessAdapter,
        audit_log: Optional[AuditLog] = None,
        fixers: Optional[Sequence[Fixer]] = None,
    ) -> None:
        self.adapter = adapter
        self.audit_log = audit_log if audit_log is not None else InMemoryAuditLog()
        self.fixers: List[Fixer] = list(fixers) if fixers is not None else build_fixers()

    def fix_common(self, tenant_id: str, company_id: Optional[str] = None) -> List[FixResult]:
        """Run every fixer once and return their results in fixer order."""
        results = [self._run_fixer(fixer, tenant_id, company_id) for fixer in self.fixers]
        logger.info(
            "Remediation for tenant=%s company=%s: %d fixed, %d failed",
            tenant_id,
            company_id,
            sum(r.fixed for r in results),
            sum(r.failed for r in results),
        )
        return results

    def _run_fixer(
        self, fixer: Fixer, tenant_id: str, company_id: Optional[str]
    ) -> FixResult:
        result = FixResult(check_name=fixer.check_name)
        try:
            affected = fixer.scan(tenant_id, company_id, self.adapter)
        except DataAccessError as e:
            logger.error("Scan for %s failed: %s", fixer.check_name, e)
            result.record_failed("*", "scan", str(e))
            return result
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("Scan for %s raised an unexpected error", fixer.check_name)
            result.record_failed("*", "scan", f"{type(e).__name__}: {e}")
            return result
        result.scanned = len(affected)

        default_types: Dict[tuple, AccountType] = {}

        def default_type(entity_company_id: str, code: str, name: str) -> AccountType:
            return self._default_type(
                tenant_id, entity_company_id, code, name, fixer.check_name, default_types
            )

        context = FixContext(tenant_id=tenant_id, default_type=default_type)
        for entity in affected:
            entity_id = fixer.entity_id(entity)
            try:
                planned = fixer.plan(entity, context)
            except (DataAccessError, RemediationError) as e:
                logger.warning("Could not plan %s fix for %s: %s", fixer.check_name, entity_id, e)
                result.record_failed(entity_id, "plan", str(e))
                continue
            except Exception as e:  # pylint: disable=broad-except
                logger.exception("Planning %s fix for %s raised", fixer.check_name, entity_id)
                result.record_failed(entity_id, "plan", f"{type(e).__name__}: {e}")
                continue
            self._apply(planned, tenant_id, fixer.check_name, result)
        return result

    def _write(self, tenant_id: str, planned: PlannedFix, patch) -> Tuple[bool, Optional[str]]:
        try:
            return self.adapter.apply_fix(
                tenant_id, planned.company_id, planned.kind, planned.entity_id, patch
            )
        except DataAccessError as e:
            return False, str(e)
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("apply_fix on %s %s raised", planned.kind.value, planned.entity_id)
            return False, f"{type(e).__name__}: {e}"

    def _apply(
        self, planned: PlannedFix, tenant_id: str, check_name: str, result: FixResult
    ) -> None:
        ok, error = self._write(tenant_id, planned, planned.patch)
        if not ok:
            logger.warning(
                "Fix %s on %s %s failed: %s",
                check_name,
                planned.kind.value,
                planned.entity_id,
                error,
            )
            result.record_failed(planned.entity_id, planned.action, error or "fix rejected")
            return

        try:
            self._audit(
                tenant_id,
                planned.company_id,
                check_name,
                planned.kind,
                planned.entity_id,
                planned.field_name,
                planned.old_value,
                planned.new_value,
            )
        except RemediationError as e:
            # An unaudited change must not stay committed
            reverted, revert_error = self._write(
                tenant_id, planned, {planned.field_name: planned.old_value}
            )
            if reverted:
                logger.warning("Reverted %s %s", planned.kind.value, planned.entity_id)
                outcome = "change reverted"
            else:
                logger.error(
                    "Could not revert unaudited fix on %s %s: %s",
                    planned.kind.value,
                    planned.entity_id,
                    revert_error,
                )
                outcome = f"revert failed: {revert_error}"
            result.record_failed(planned.entity_id, planned.action, f"{e}; {outcome}")
            return

        logger.info("Fixed %s %s: %s", planned.kind.value, planned.entity_id, planned.action)
        result.record_fixed(planned.entity_id, planned.action)

    def _default_type(
        self,
        tenant_id: str,
        company_id: str,
        code: str,
        name: str,
        check_name: str,
        cache: Dict[tuple, AccountType],
    ) -> AccountType:
        key = (company_id, code)
        if key in cache:
            return cache[key]
        account_type = self.adapter.find_account_type_by_code(tenant_id, company_id, code)
        if account_type is None:
            account_type = self.adapter.create_account_type(tenant_id, company_id, code, name)
            try:
                self._audit(
                    tenant_id,
                    company_id,
                    check_name,
                    EntityKind.ACCOUNT_TYPE,
                    account_type.id,
                    "code",
                    None,
                    code,
                )
            except RemediationError:
                self._drop_unaudited_type(tenant_id, company_id, account_type)
                raise
        cache[key] = account_type
        return account_type

    def _drop_unaudited_type(
        self, tenant_id: str, company_id: str, account_type: AccountType
    ) -> None:
        try:
            ok, error = self.adapter.delete_account_type(tenant_id, company_id, account_type.id)
        except Exception as e:  # pylint: disable=broad-except
            ok, error = False, f"{type(e).__name__}: {e}"
        if ok:
            logger.warning("Removed unaudited account type %s", account_type.id)
        else:
            logger.error(
                "Could not remove unaudited account type %s: %s", account_type.id, error
            )

    def _audit(
        self,
        tenant_id: str,
        company_id: str,
        check_name: str,
        kind: EntityKind,
        entity_id: str,
        field_name: str,
        old_value,
        new_value,
    ) -> None:
        record = AuditRecord(
            tenant_id=tenant_id,
            company_id=company_id,
            check_name=check_name,
            entity_kind=kind,
            entity_id=entity_id,
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
        )
        try:
            self.audit_log.record(record)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Audit write for %s %s failed: %s", kind.value, entity_id, e)
            raise RemediationError(f"applied but audit write failed: {e}") from e
