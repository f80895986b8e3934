import argparse
import dataclasses
import json
import logging
from pathlib import Path
from typing import List, Optional

import colorlog

from ledger_consistency.adapters.audit import AuditLog, InMemoryAuditLog, JsonLinesAuditLog
from ledger_consistency.adapters.fixtures import load_dataset, save_dataset
from ledger_consistency.adapters.memory import InMemoryAdapter
from ledger_consistency.core.errors import UnknownCheckError
from ledger_consistency.validation.config import load_settings

try:
    from ledger_consistency import __version__ as _PACKAGE_VERSION
except ImportError:  # pragma: no cover
    _PACKAGE_VERSION = "unknown"  # type: ignore[assignment]


def setup_logging(
    verbose: bool = False, warnings_only: bool = False, errors_only: bool = False
) -> None:
    logger = logging.getLogger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
    log_format = "%(asctime)s:%(levelname)s:%(name)s:%(lineno)d: %(message)s"
    log_colors = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold_red",
    }
    stream_handler = colorlog.StreamHandler()
    formatter = colorlog.ColoredFormatter(f"%(log_color)s{log_format}", log_colors=log_colors)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    if errors_only:
        logger.setLevel(logging.ERROR)
    elif warnings_only:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _parse_checks_arg(checks_arg: Optional[str]) -> List[str]:
    """Split a comma-separated --checks value, dropping blanks."""
    if not checks_arg:
        return []
    return [part.strip() for part in checks_arg.split(",") if part.strip()]


def _load_inputs(args: argparse.Namespace):
    """Load settings and the dataset named on the command line.

    Returns:
        (settings, adapter) or None after logging the reason.
    """
    try:
        settings = load_settings(Path(args.config) if getattr(args, "config", None) else None)
        workers = getattr(args, "workers", None)
        if workers is not None or getattr(args, "strict_names", False):
            settings = dataclasses.replace(
                settings,
                max_workers=workers if workers is not None else settings.max_workers,
                strict_check_names=settings.strict_check_names
                or bool(getattr(args, "strict_names", False)),
            )
    except (FileNotFoundError, ValueError) as e:
        logging.error("Invalid configuration: %s", e)
        return None

    data_path = Path(args.data).resolve()
    try:
        adapter = load_dataset(data_path, InMemoryAdapter(page_size=settings.page_size))
    except (FileNotFoundError, ValueError) as e:
        logging.error("Could not load dataset: %s", e)
        return None
    if args.tenant not in adapter.tenants():
        logging.error(
            "Tenant '%s' not found in %s. Known tenants: %s",
            args.tenant,
            data_path,
            ", ".join(adapter.tenants()) or "(none)",
        )
        return None
    return settings, adapter


def _report_path(target, data_path: Path, tenant: str, company: Optional[str], suffix: str) -> Path:
    # --report without a value writes next to the dataset file
    report_dir = data_path.parent if target is True else Path(target)
    scope = f"{tenant}_{company}" if company else tenant
    return report_dir / f"{scope}_consistency.{suffix}"


def cmd_check(args: argparse.Namespace) -> int:
    """Run consistency checks for one tenant (optionally one company).

    Returns:
        0 if every executed check passed
        1 if no check was executed
        2 if errors were found or the input was invalid
    """
    from ledger_consistency.service import DataConsistencyService
    from ledger_consistency.validation.registry import print_report

    loaded = _load_inputs(args)
    if loaded is None:
        return 2
    settings, adapter = loaded
    service = DataConsistencyService(adapter, settings=settings)

    names = _parse_checks_arg(args.checks)
    try:
        overall = service.run_checks(args.tenant, args.company, names)
    except UnknownCheckError as e:
        logging.error("%s. Known checks: %s", e, ", ".join(service.registry.keys()))
        return 2

    print_report(overall)

    data_path = Path(args.data).resolve()
    if args.report:
        report_path = _report_path(args.report, data_path, args.tenant, args.company, "md")
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, "w", encoding="utf-8") as f:
            f.write(overall.to_markdown())
        logging.info("Markdown report saved: %s", report_path)
    if args.report_json:
        report_path = _report_path(args.report_json, data_path, args.tenant, args.company, "json")
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, "w", encoding="utf-8") as f:
            f.write(overall.to_json())
        logging.info("JSON report saved: %s", report_path)

    if not overall.checks:
        logging.error("No checks were executed.")
        return 1
    counts = overall.counts()
    if counts.total_errors > 0:
        logging.error(
            "Consistency checks found %d errors in %d check(s).",
            counts.total_errors,
            counts.failed_checks,
        )
        return 2
    logging.info("All %d checks passed", counts.total_checks)
    return 0


def cmd_fix(args: argparse.Namespace) -> int:
    """Apply safe automatic fixes and optionally write the dataset back.

    Returns:
        0 if every attempted fix succeeded
        2 if any fix failed or the input was invalid
    """
    from ledger_consistency.service import DataConsistencyService

    loaded = _load_inputs(args)
    if loaded is None:
        return 2
    settings, adapter = loaded
    audit_log: AuditLog = (
        JsonLinesAuditLog(Path(args.audit_json).resolve()) if args.audit_json else InMemoryAuditLog()
    )
    service = DataConsistencyService(adapter, audit_log=audit_log, settings=settings)
    results = service.fix_common_issues(args.tenant, args.company)

    for result in results:
        print(
            f"{result.check_name}: {result.scanned} scanned, "
            f"{result.fixed} fixed, {result.failed} failed"
        )
        for detail in result.details:
            marker = "❌" if detail.error else "✅"
            suffix = f" ({detail.error})" if detail.error else ""
            print(f"   {marker} {detail.entity_id}: {detail.action}{suffix}")
    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))

    fixed = sum(r.fixed for r in results)
    if args.write_back and fixed:
        data_path = Path(args.data).resolve()
        save_dataset(adapter, data_path)
        logging.info("Wrote %d fix(es) back to %s", fixed, data_path)

    failed = sum(r.failed for r in results)
    if failed:
        logging.error("%d fix(es) failed", failed)
        return 2
    return 0


def cmd_list_checks(args: argparse.Namespace) -> int:  # pylint: disable=unused-argument
    from ledger_consistency.remediation.fixers import FIXABLE_CHECKS
    from ledger_consistency.validation.registry import build_registry

    for spec in build_registry():
        fixable = " (auto-fix)" if spec.key in FIXABLE_CHECKS else ""
        print(f"{spec.key:<30} {spec.display_name}{fixable}")
    return 0


def _add_scope_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--data", required=True, help="YAML dataset file to load")
    parser.add_argument("--tenant", required=True, help="Tenant to operate on")
    parser.add_argument(
        "--company",
        default=None,
        help="Restrict to one company of the tenant (defaults to all companies)",
    )
    parser.add_argument("--config", default=None, help="YAML settings file")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ledger-consistency",
        description=f"Ledger Consistency Tools (v{_PACKAGE_VERSION})",
    )
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    p.add_argument(
        "--warnings-only",
        action="store_true",
        help="Show only warnings and errors (overrides --verbose)",
    )
    p.add_argument(
        "--errors-only",
        action="store_true",
        help="Show only errors (overrides --warnings-only and --verbose)",
    )

    sub = p.add_subparsers(dest="command", required=True)

    p_check = sub.add_parser("check", help="Run consistency checks")
    _add_scope_arguments(p_check)
    p_check.add_argument(
        "--checks",
        default=None,
        help="Comma-separated check names or keys (e.g. account_types,'Stock Consistency'). "
        "Defaults to all checks.",
    )
    p_check.add_argument(
        "--strict-names",
        action="store_true",
        help="Fail instead of ignoring unknown check names",
    )
    p_check.add_argument("--workers", type=int, default=None, help="Check worker pool size")
    p_check.add_argument(
        "--report",
        nargs="?",
        const=True,
        default=False,
        help="Generate Markdown report. Optionally specify custom directory path.",
    )
    p_check.add_argument(
        "--report-json",
        nargs="?",
        const=True,
        default=False,
        help="Generate JSON report. Optionally specify custom directory path.",
    )
    p_check.set_defaults(func=cmd_check)

    p_fix = sub.add_parser("fix", help="Apply safe automatic fixes")
    _add_scope_arguments(p_fix)
    p_fix.add_argument(
        "--write-back",
        action="store_true",
        help="Save the fixed dataset over the --data file",
    )
    p_fix.add_argument(
        "--audit-json",
        default=None,
        help="Append audit records as JSON lines to this file",
    )
    p_fix.add_argument("--json", action="store_true", help="Also print fix results as JSON")
    p_fix.set_defaults(func=cmd_fix)

    p_list = sub.add_parser("list-checks", help="List available checks in report order")
    p_list.set_defaults(func=cmd_list_checks)

    return p


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=bool(args.verbose),
        warnings_only=bool(getattr(args, "warnings_only", False)),
        errors_only=bool(getattr(args, "errors_only", False)),
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
