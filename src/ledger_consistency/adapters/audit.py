"""Audit-log collaborator used by remediation.

Every mutation the remediation engine makes is recorded here before it counts
as committed. Implementations must raise on failure so that the engine can
report the item as failed.
"""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Protocol

from ledger_consistency.core.enums import EntityKind


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuditRecord:
    """One audited change: which field of which row moved from old to new."""

    tenant_id: str
    company_id: str
    check_name: str
    entity_kind: EntityKind
    entity_id: str
    field_name: str
    old_value: Any
    new_value: Any
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["entity_kind"] = self.entity_kind.value
        data["timestamp"] = self.timestamp.isoformat()
        for key in ("old_value", "new_value"):
            if data[key] is not None:
                data[key] = str(data[key])
        return data


class AuditLog(Protocol):
    def record(self, entry: AuditRecord) -> None:
        ...


class InMemoryAuditLog:
    """Append-only list of audit records, safe to share between threads."""

    def __init__(self) -> None:
        self._records: List[AuditRecord] = []
        self._lock = threading.Lock()

    def record(self, entry: AuditRecord) -> None:
        with self._lock:
            self._records.append(entry)

    @property
    def records(self) -> List[AuditRecord]:
        with self._lock:
            return list(self._records)

    def for_entity(self, entity_id: str) -> List[AuditRecord]:
        return [r for r in self.records if r.entity_id == entity_id]


class JsonLinesAuditLog:
    """Audit log appending one JSON object per line to a file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    def record(self, entry: AuditRecord) -> None:
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")


def load_audit_lines(path: Path) -> List[Dict[str, Any]]:
    """Read back records written by ``JsonLinesAuditLog``."""
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


__all__ = [
    "AuditRecord",
    "AuditLog",
    "InMemoryAuditLog",
    "JsonLinesAuditLog",
    "load_audit_lines",
]