"""
Schema registry for inventory records.

Required columns are fixed in code; dynamic columns are an append-only log in
the `inventory_columns` table. The log order is the canonical column order for
projections, listings and headers, and each entry records when the column was
added, which is what lets older rows simply have no value for it.
"""

from __future__ import annotations

from typing import Any, List

from inventory_store.backends.abstract import AbstractStorageBackend
from inventory_store.domain.columns import (
    REQUIRED_COLUMNS,
    normalize_column_name,
    required_column_for,
    validate_dynamic_column_name,
)
from inventory_store.domain.models import ColumnDefinition
from inventory_store.utils.logging import get_logger

log = get_logger(__name__)


class SchemaRegistry:
    """
    Tracks which columns exist on the inventory record type.

    Parameters
    ----------
    backend : AbstractStorageBackend
        Backend holding the column log. Every call acquires its own session.
    """

    required_columns = REQUIRED_COLUMNS

    def __init__(self, backend: AbstractStorageBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> AbstractStorageBackend:
        return self._backend

    def column_log(self) -> List[ColumnDefinition]:
        """Full column log in acceptance order."""
        with self._backend.session() as conn:
            return self._column_log(conn)

    def list_dynamic_columns(self) -> List[str]:
        """Snapshot of dynamic column names in the order they were added."""
        with self._backend.session() as conn:
            return self._dynamic_columns(conn)

    def column_exists(self, name: str) -> bool:
        """True if `name` is a required column (or one of its aliases) or a registered dynamic column."""
        if required_column_for(name) is not None:
            return True
        return normalize_column_name(name) in self.list_dynamic_columns()

    def add_column(self, name: str) -> bool:
        """
        Register a dynamic column.

        Returns
        -------
        bool
            True if the column was added, False if it already existed.

        Raises
        ------
        InvalidColumnName
            If the name is empty, unsafe or collides with a required column.
            Nothing is written in that case.
        """
        column = validate_dynamic_column_name(name)
        with self._backend.session() as conn:
            added = self._backend.insert_column(conn, column)
        if added:
            log.info(f"[COLUMN ADDED] {column}", extra={"column": column})
        else:
            log.debug(f"[COLUMN EXISTS] {column}", extra={"column": column})
        return added

    def _column_log(self, conn: Any) -> List[ColumnDefinition]:
        return [
            ColumnDefinition(
                position=position,
                name=name,
                added_at=self._backend.decode_timestamp(added_at),
            )
            for position, name, added_at in self._backend.fetch_column_log(conn)
        ]

    def _dynamic_columns(self, conn: Any) -> List[str]:
        return [name for _, name, _ in self._backend.fetch_column_log(conn)]


__all__ = ["SchemaRegistry"]
