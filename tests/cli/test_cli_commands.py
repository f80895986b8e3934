"""Tests for the ledger-consistency command line interface."""

from __future__ import annotations

import json
import logging

import pytest
import yaml

from ledger_consistency.adapters import load_dataset
from ledger_consistency.adapters.audit import load_audit_lines
from ledger_consistency.core.enums import EntityKind
from ledger_consistency.interfaces.cli.main import build_parser, main

HEALTHY = {
    "tenants": {
        "tenant-1": {
            "account_types": [
                {"id": "type-asset", "code": "ASSET", "name": "Asset", "company_id": "company-1"},
                {"id": "type-rev", "code": "REVENUE", "name": "Revenue", "company_id": "company-1"},
            ],
            "accounts": [
                {"id": "acc-1000", "code": "1000", "type_id": "type-asset", "company_id": "company-1"},
                {"id": "acc-4000", "code": "4000", "type_id": "type-rev", "company_id": "company-1"},
            ],
            "journal_entries": [
                {"id": "je-1", "reference": "JE-1", "status": "POSTED", "company_id": "company-1"}
            ],
            "journal_lines": [
                {
                    "id": "jl-1",
                    "entry_id": "je-1",
                    "account_id": "acc-1000",
                    "company_id": "company-1",
                    "debit": "100",
                },
                {
                    "id": "jl-2",
                    "entry_id": "je-1",
                    "account_id": "acc-4000",
                    "company_id": "company-1",
                    "credit": "100",
                },
            ],
        }
    }
}


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() replaces the root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _write_dataset(path, data=None):
    path.write_text(yaml.safe_dump(data or HEALTHY, sort_keys=False), encoding="utf-8")
    return path


def _broken_dataset():
    data = json.loads(json.dumps(HEALTHY))
    tables = data["tenants"]["tenant-1"]
    tables["accounts"].append(
        {"id": "acc-5000", "code": "5000", "type_id": "TYPE_X", "company_id": "company-1"}
    )
    tables["products"] = [{"id": "prod-1", "company_id": "company-1", "stock_quantity": "3"}]
    return data


class TestCheckCommand:
    """Tests for the check subcommand."""

    def test_healthy_dataset(self, tmp_path, capsys):
        data = _write_dataset(tmp_path / "ledger.yaml")

        assert main(["check", "--data", str(data), "--tenant", "tenant-1"]) == 0
        assert "All validation checks passed!" in capsys.readouterr().out

    def test_errors_found(self, tmp_path, capsys):
        data = _write_dataset(tmp_path / "ledger.yaml", _broken_dataset())

        assert main(["check", "--data", str(data), "--tenant", "tenant-1"]) == 2
        out = capsys.readouterr().out
        assert "❌ Account Types: 1 errors" in out
        assert "❌ Stock Consistency: 1 errors" in out

    def test_selected_checks(self, tmp_path, capsys):
        data = _write_dataset(tmp_path / "ledger.yaml", _broken_dataset())

        code = main(
            [
                "check",
                "--data",
                str(data),
                "--tenant",
                "tenant-1",
                "--checks",
                "Journal Entry Balance, orphaned_records",
                "--workers",
                "1",
            ]
        )

        assert code == 0
        assert "Checks: 2 executed (2 passed, 0 failed)" in capsys.readouterr().out

    def test_only_unknown_checks_runs_nothing(self, tmp_path):
        data = _write_dataset(tmp_path / "ledger.yaml")

        code = main(
            ["check", "--data", str(data), "--tenant", "tenant-1", "--checks", "unknown_check"]
        )

        assert code == 1

    def test_strict_names(self, tmp_path):
        data = _write_dataset(tmp_path / "ledger.yaml")

        code = main(
            [
                "check",
                "--data",
                str(data),
                "--tenant",
                "tenant-1",
                "--checks",
                "unknown_check",
                "--strict-names",
            ]
        )

        assert code == 2

    @pytest.mark.parametrize(
        "extra",
        [["--tenant", "tenant-9"], ["--tenant", "tenant-1", "--workers", "0"]],
        ids=["unknown_tenant", "bad_workers"],
    )
    def test_bad_input(self, tmp_path, extra):
        data = _write_dataset(tmp_path / "ledger.yaml")

        assert main(["check", "--data", str(data), *extra]) == 2

    def test_missing_dataset(self, tmp_path):
        assert main(["check", "--data", str(tmp_path / "none.yaml"), "--tenant", "t"]) == 2

    def test_reports_written(self, tmp_path):
        data = _write_dataset(tmp_path / "ledger.yaml", _broken_dataset())
        reports = tmp_path / "reports"

        main(
            [
                "check",
                "--data",
                str(data),
                "--tenant",
                "tenant-1",
                "--company",
                "company-1",
                "--report",
                str(reports),
                "--report-json",
                str(reports),
            ]
        )

        markdown = (reports / "tenant-1_company-1_consistency.md").read_text(encoding="utf-8")
        assert "**Status:** ISSUES_FOUND" in markdown
        report = json.loads(
            (reports / "tenant-1_company-1_consistency.json").read_text(encoding="utf-8")
        )
        assert report["isValid"] is False
        assert report["summary"]["failedChecks"] == 2

    def test_default_report_location(self, tmp_path):
        data = _write_dataset(tmp_path / "ledger.yaml")

        main(["check", "--data", str(data), "--tenant", "tenant-1", "--report"])

        assert (tmp_path / "tenant-1_consistency.md").exists()

    def test_config_file(self, tmp_path):
        data = _write_dataset(tmp_path / "ledger.yaml")
        config = tmp_path / "consistency.yaml"
        config.write_text("validation:\n  max_workers: 0\n", encoding="utf-8")

        assert main(
            ["check", "--data", str(data), "--tenant", "tenant-1", "--config", str(config)]
        ) == 2


class TestFixCommand:
    """Tests for the fix subcommand."""

    def test_fix_without_write_back_leaves_file(self, tmp_path, capsys):
        data = _write_dataset(tmp_path / "ledger.yaml", _broken_dataset())
        before = data.read_text(encoding="utf-8")

        assert main(["fix", "--data", str(data), "--tenant", "tenant-1"]) == 0
        out = capsys.readouterr().out
        assert "account_types: 1 scanned, 1 fixed, 0 failed" in out
        assert "stock_consistency: 1 scanned, 1 fixed, 0 failed" in out
        assert data.read_text(encoding="utf-8") == before

    def test_fix_write_back_then_check(self, tmp_path):
        data = _write_dataset(tmp_path / "ledger.yaml", _broken_dataset())
        audit = tmp_path / "audit.jsonl"

        code = main(
            [
                "fix",
                "--data",
                str(data),
                "--tenant",
                "tenant-1",
                "--write-back",
                "--audit-json",
                str(audit),
            ]
        )

        assert code == 0
        fixed = load_dataset(data)
        assert fixed.get("tenant-1", EntityKind.ACCOUNT, "acc-5000").type_id != "TYPE_X"
        assert [line["entity_kind"] for line in load_audit_lines(audit)] == [
            "account_type",
            "account",
            "product",
        ]
        assert main(["check", "--data", str(data), "--tenant", "tenant-1"]) == 0

    def test_fix_json_output(self, tmp_path, capsys):
        data = _write_dataset(tmp_path / "ledger.yaml")

        assert main(["fix", "--data", str(data), "--tenant", "tenant-1", "--json"]) == 0
        out = capsys.readouterr().out
        payload = json.loads(out[out.index("[") :])
        assert [r["checkName"] for r in payload] == ["account_types", "stock_consistency"]


def test_list_checks(capsys):
    assert main(["list-checks"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 7
    assert lines[0].startswith("account_types")
    assert lines[0].endswith("(auto-fix)")
    assert "Journal Entry Balance" in lines[3]


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
