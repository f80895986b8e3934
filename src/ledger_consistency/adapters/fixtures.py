"""Load and save YAML dataset files for the in-memory adapter.

Dataset layout::

    tenants:
      tenant-1:
        account_types:
          - {id: type-asset, code: ASSET, name: Asset, company_id: company-1}
        accounts:
          - {id: acc-1000, code: "1000", type_id: type-asset, company_id: company-1}
        journal_entries:
          - {id: je-1, reference: JE-1, status: POSTED, company_id: company-1}
        journal_lines:
          - {id: jl-1, entry_id: je-1, account_id: acc-1000, company_id: company-1, debit: "100"}

Table names are the plural ``EntityKind`` values. Amounts may be given as
strings or numbers and are read as ``Decimal``.
"""

from __future__ import annotations

import dataclasses
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ledger_consistency.core.enums import EntityKind
from ledger_consistency.core.utils import to_decimal
from .memory import ENTITY_TYPES, InMemoryAdapter

TABLE_NAMES: Dict[str, EntityKind] = {
    "account_types": EntityKind.ACCOUNT_TYPE,
    "accounts": EntityKind.ACCOUNT,
    "product_categories": EntityKind.PRODUCT_CATEGORY,
    "products": EntityKind.PRODUCT,
    "journal_entries": EntityKind.JOURNAL_ENTRY,
    "journal_lines": EntityKind.JOURNAL_LINE,
    "inventory_movements": EntityKind.INVENTORY_MOVEMENT,
    "expenses": EntityKind.EXPENSE,
    "purchase_orders": EntityKind.PURCHASE_ORDER,
    "receipts": EntityKind.RECEIPT,
}

_DECIMAL_FIELDS = {"debit", "credit", "quantity", "amount", "stock_quantity"}


def _build_entity(kind: EntityKind, item: Dict[str, Any]) -> Any:
    cls = ENTITY_TYPES[kind]
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(item) - known)
    if unknown:
        raise ValueError(f"Unknown field(s) for {kind.value}: {', '.join(unknown)}")
    kwargs = {}
    for key, value in item.items():
        if key in _DECIMAL_FIELDS:
            value = to_decimal(value)
        elif key == "is_active":
            if not isinstance(value, bool):
                raise ValueError(
                    f"Invalid {kind.value} row {item!r}: is_active must be true or false"
                )
        elif value is not None:
            value = str(value)
        kwargs[key] = value
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid {kind.value} row {item!r}: {e}") from e


def load_dataset(path: Path, adapter: Optional[InMemoryAdapter] = None) -> InMemoryAdapter:
    """Populate an in-memory adapter from a YAML dataset file.

    Args:
        path: Dataset file.
        adapter: Adapter to fill. A new one is created when omitted.

    Returns:
        The populated adapter.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the YAML is malformed or holds unknown tables or fields.
    """
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse dataset file {path}: {e}") from e

    adapter = adapter if adapter is not None else InMemoryAdapter()
    tenants = data.get("tenants", {}) or {}
    if not isinstance(tenants, dict):
        raise ValueError(f"'tenants' in {path} must be a mapping of tenant id to tables")
    for tenant_id, tables in tenants.items():
        adapter.add(str(tenant_id))
        for table_name, rows in (tables or {}).items():
            kind = TABLE_NAMES.get(table_name)
            if kind is None:
                raise ValueError(f"Unknown table '{table_name}' for tenant {tenant_id} in {path}")
            adapter.add(str(tenant_id), *(_build_entity(kind, row) for row in rows or []))
    return adapter


def _dump_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value


def dump_dataset(adapter: InMemoryAdapter) -> Dict[str, Any]:
    """Serialize every tenant of an adapter back into the dataset layout."""
    tenants: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}
    for tenant_id in adapter.tenants():
        tables: Dict[str, List[Dict[str, Any]]] = {}
        for table_name, kind in TABLE_NAMES.items():
            rows = adapter.rows(tenant_id, kind)
            if rows:
                tables[table_name] = [
                    {k: _dump_value(v) for k, v in dataclasses.asdict(row).items()}
                    for row in rows
                ]
        tenants[tenant_id] = tables
    return {"tenants": tenants}


def save_dataset(adapter: InMemoryAdapter, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(dump_dataset(adapter), f, sort_keys=False, allow_unicode=True)
