"""Data access adapters.

- **base**: ``DataAccessAdapter`` protocol the engine depends on
- **memory**: ``InMemoryAdapter``, a tenant-partitioned fake with failure injection
- **audit**: audit-log collaborator contract and implementations
- **fixtures**: YAML dataset files for the in-memory adapter
"""

from __future__ import annotations

from .audit import AuditLog, AuditRecord, InMemoryAuditLog, JsonLinesAuditLog
from .base import DataAccessAdapter, FixOutcome
from .fixtures import dump_dataset, load_dataset, save_dataset
from .memory import InMemoryAdapter

__all__ = [
    "AuditLog",
    "AuditRecord",
    "DataAccessAdapter",
    "FixOutcome",
    "InMemoryAdapter",
    "InMemoryAuditLog",
    "JsonLinesAuditLog",
    "dump_dataset",
    "load_dataset",
    "save_dataset",
]
