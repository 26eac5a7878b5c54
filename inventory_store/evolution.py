"""
Dynamic column evolution.

Adding a column changes what every later scan and insert sees, but existing
rows are never backfilled. Schema changes commit on their own, before any data
that uses them is written; if the data write never happens the column is
simply registered and unused, and a retry is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from inventory_store.domain.columns import normalize_column_name, required_column_for
from inventory_store.domain.errors import InvalidColumnName
from inventory_store.domain.models import RejectedColumn
from inventory_store.registry import SchemaRegistry
from inventory_store.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class ColumnReconciliation:
    """Result of reconciling a set of header names against the registry."""

    added: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    required: List[str] = field(default_factory=list)
    rejected: List[RejectedColumn] = field(default_factory=list)


def add_dynamic_column(registry: SchemaRegistry, raw_name: str) -> bool:
    """
    Trim `raw_name` and register it as a dynamic column.

    Returns True if the column is new, False if it already existed.
    Raises `InvalidColumnName` for names the registry refuses.
    """
    return registry.add_column(normalize_column_name(raw_name))


def ensure_columns(registry: SchemaRegistry, names: Iterable[str]) -> ColumnReconciliation:
    """
    Make sure every name in `names` is known to the registry.

    Required columns (and their aliases) are left alone. Names the registry
    rejects are collected instead of raised, so one bad header cell does not
    stop an import.
    """
    result = ColumnReconciliation()
    known = set(registry.list_dynamic_columns())
    for raw in names:
        name = normalize_column_name(raw)
        if required_column_for(name) is not None:
            result.required.append(name)
            continue
        if name in known:
            result.existing.append(name)
            continue
        try:
            if registry.add_column(name):
                result.added.append(name)
            else:
                result.existing.append(name)
            known.add(name)
        except InvalidColumnName as exc:
            log.warning(
                f"[COLUMN REJECTED] {name!r}: {exc.reason}",
                extra={"column": name, "reason": exc.reason},
            )
            result.rejected.append(RejectedColumn(name=name, reason=exc.reason))
    return result


__all__ = ["ColumnReconciliation", "add_dynamic_column", "ensure_columns"]
