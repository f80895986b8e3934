"""Check runner.

Executes all registered checks, or a named subset, for one tenant/company:

- Checks run on a bounded thread pool; they are read-only and share nothing.
- Each outcome is written into a pre-sized list at its registry position, so
  output order never depends on completion order or request order.
- A check that raises is turned into a failed outcome carrying one error
  (``DATA_ACCESS_FAILURE`` for adapter failures, ``INTERNAL_CHECK_FAILURE``
  otherwise). The remaining checks still run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError, as_completed
from typing import Dict, List, Optional, Sequence

from ledger_consistency.adapters.base import DataAccessAdapter
from ledger_consistency.core.enums import IssueKind
from ledger_consistency.core.errors import DataAccessError, UnknownCheckError
from .config import DEFAULT_MAX_WORKERS
from .models import CheckOutcome, OverallResult, ValidationIssue, ValidationResult
from .registry import CheckRegistry, CheckSpec, build_registry

logger = logging.getLogger(__name__)


def failure_outcome(spec: CheckSpec, kind: IssueKind, detail: str) -> CheckOutcome:
    """Synthetic outcome for a check that could not complete."""
    issue = ValidationIssue(
        kind=kind,
        message=f"Check '{spec.display_name}' failed: {detail}",
        entity_ids=(spec.key,),
    )
    return CheckOutcome(name=spec.display_name, key=spec.key, result=ValidationResult(errors=[issue]))


class CheckRunner:
    """Run registered checks against a data access adapter.

    Args:
        adapter: Tenant-scoped data access.
        registry: Checks to run. Defaults to ``build_registry()``.
        max_workers: Worker pool size K. With K=1 and no timeout checks run inline.
        timeout: Seconds to wait for a run; unfinished checks are abandoned.
        strict_names: Raise ``UnknownCheckError`` for unknown requested names.

    Examples:
        >>> runner = CheckRunner(adapter, max_workers=4)
        >>> overall = runner.run_named("tenant-1", "company-1", ["journal_entry_balance"])
        >>> [c.key for c in overall.checks]
        ['journal_entry_balance']
    """

    def __init__(
        self,
        adapter: DataAccessAdapter,
        registry: Optional[CheckRegistry] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        timeout: Optional[float] = None,
        strict_names: bool = False,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.adapter = adapter
        self.registry = registry if registry is not None else build_registry()
        self.max_workers = max_workers
        self.timeout = timeout
        self.strict_names = strict_names

    def run_all(self, tenant_id: str, company_id: Optional[str] = None) -> OverallResult:
        """Execute every registered check."""
        positions = list(range(len(self.registry)))
        return OverallResult(
            checks=self._execute(tenant_id, company_id, positions),
            tenant_id=tenant_id,
            company_id=company_id,
        )

    def run_named(
        self, tenant_id: str, company_id: Optional[str], names: Sequence[str]
    ) -> OverallResult:
        """Execute only the checks whose key matches a requested name.

        Unknown names are dropped and listed in ``OverallResult.unknown_checks``
        unless the runner is strict, in which case nothing runs.

        Raises:
            UnknownCheckError: In strict mode, if any name is unknown.
        """
        positions, unknown = self.registry.resolve(names)
        if unknown:
            if self.strict_names:
                raise UnknownCheckError(unknown)
            logger.warning(
                "Ignoring unknown check name(s): %s (known: %s)",
                ", ".join(unknown),
                ", ".join(self.registry.keys()),
            )
        return OverallResult(
            checks=self._execute(tenant_id, company_id, positions),
            tenant_id=tenant_id,
            company_id=company_id,
            unknown_checks=unknown,
        )

    def _execute(
        self, tenant_id: str, company_id: Optional[str], positions: List[int]
    ) -> List[CheckOutcome]:
        specs = [self.registry[p] for p in positions]
        slots: List[Optional[CheckOutcome]] = [None] * len(specs)
        if not specs:
            return []

        if self.max_workers == 1 and self.timeout is None:
            for slot, spec in enumerate(specs):
                slots[slot] = self._run_one(spec, tenant_id, company_id)
        else:
            self._run_pooled(specs, slots, tenant_id, company_id)

        outcomes: List[CheckOutcome] = []
        for slot, outcome in enumerate(slots):
            if outcome is None:
                raise RuntimeError(f"No outcome recorded for check {specs[slot].key}")
            outcomes.append(outcome)
        return outcomes

    def _run_pooled(
        self,
        specs: List[CheckSpec],
        slots: List[Optional[CheckOutcome]],
        tenant_id: str,
        company_id: Optional[str],
    ) -> None:
        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(specs)),
            thread_name_prefix="consistency-check",
        )
        try:
            futures: Dict = {
                executor.submit(self._run_one, spec, tenant_id, company_id): slot
                for slot, spec in enumerate(specs)
            }
            try:
                for future in as_completed(futures, timeout=self.timeout):
                    slots[futures[future]] = future.result()
            except FuturesTimeoutError:
                for future, slot in futures.items():
                    if slots[slot] is not None:
                        continue
                    if future.done() and not future.cancelled():
                        slots[slot] = future.result()
                    else:
                        future.cancel()
                        logger.error(
                            "Check %s did not finish within %ss; abandoning it",
                            specs[slot].key,
                            self.timeout,
                        )
                        slots[slot] = failure_outcome(
                            specs[slot],
                            IssueKind.INTERNAL_CHECK_FAILURE,
                            f"timed out after {self.timeout}s",
                        )
        finally:
            # Abandoned checks keep their thread until they return; do not wait for them
            executor.shutdown(wait=False, cancel_futures=True)

    def _run_one(
        self, spec: CheckSpec, tenant_id: str, company_id: Optional[str]
    ) -> CheckOutcome:
        logger.debug("Running check %s (tenant=%s company=%s)", spec.key, tenant_id, company_id)
        try:
            result = spec.run(tenant_id, company_id, self.adapter)
        except DataAccessError as e:
            logger.error("Check %s could not read data: %s", spec.key, e)
            return failure_outcome(spec, IssueKind.DATA_ACCESS_FAILURE, str(e))
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("Check %s raised an unexpected error", spec.key)
            return failure_outcome(
                spec, IssueKind.INTERNAL_CHECK_FAILURE, f"{type(e).__name__}: {e}"
            )
        logger.debug(
            "Check %s finished: %d errors, %d warnings",
            spec.key,
            len(result.errors),
            len(result.warnings),
        )
        return CheckOutcome(name=spec.display_name, key=spec.key, result=result)
