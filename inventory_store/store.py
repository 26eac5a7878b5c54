"""
Record store for inventory items.

Owns the persisted items and the schema registry. Inserts are validated before
the backend is touched (so a rejected insert never consumes an id), and the
registry check plus the write run in a single session. Scans are lazy and
restartable: every iteration re-reads the current column log and rows.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional

from inventory_store.backends.abstract import AbstractStorageBackend, ItemRow
from inventory_store.config import Settings, get_settings
from inventory_store.domain.columns import MAX_QUANTITY
from inventory_store.domain.errors import InvalidRecord, SchemaMismatch
from inventory_store.domain.models import InventoryRecord
from inventory_store.registry import SchemaRegistry
from inventory_store.utils.logging import get_logger

log = get_logger(__name__)


def _validate_required(name: Any, part_number: Any, quantity: Any) -> None:
    if not isinstance(name, str):
        raise InvalidRecord(f"name must be text, got {type(name).__name__}")
    if not isinstance(part_number, str):
        raise InvalidRecord(f"part_number must be text, got {type(part_number).__name__}")
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidRecord(f"quantity must be an integer, got {quantity!r}")
    if quantity < 0:
        raise InvalidRecord(f"quantity must be >= 0, got {quantity}")
    if quantity > MAX_QUANTITY:
        raise InvalidRecord(f"quantity must be <= {MAX_QUANTITY}, got {quantity}")


class RecordScan:
    """
    Lazy, restartable view over every stored record.

    Iterating opens a session, streams rows in batches and releases the
    session when iteration ends or the iterator is discarded.
    """

    def __init__(self, store: "RecordStore") -> None:
        self._store = store

    def __iter__(self) -> Iterator[InventoryRecord]:
        return self._store._iter_records()


class RecordStore:
    """
    Persistence of inventory records.

    Parameters
    ----------
    backend : AbstractStorageBackend
        Backend holding the items table and the column log.
    registry : SchemaRegistry, optional
        Registry over the same backend; created if omitted.
    settings : Settings, optional
        Used for the scan batch size.
    """

    def __init__(
        self,
        backend: AbstractStorageBackend,
        registry: Optional[SchemaRegistry] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._backend = backend
        self._registry = registry or SchemaRegistry(backend)
        self.batch_size = (settings or get_settings()).scan_batch_size

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    @property
    def backend(self) -> AbstractStorageBackend:
        return self._backend

    def insert(
        self,
        name: str,
        part_number: str,
        quantity: int,
        dynamic_values: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """
        Insert one record and return its new id.

        Raises
        ------
        InvalidRecord
            If a required field is missing or quantity is out of range.
        SchemaMismatch
            If `dynamic_values` references a column that is not registered.
        StoreIoError
            If the backend fails.
        """
        _validate_required(name, part_number, quantity)
        attributes: Dict[str, str] = {
            str(key): str(value)
            for key, value in (dynamic_values or {}).items()
            if value is not None
        }

        with self._backend.session() as conn:
            registered = set(self._registry._dynamic_columns(conn))
            unknown = set(attributes) - registered
            if unknown:
                raise SchemaMismatch(unknown)
            record_id = self._backend.insert_item(conn, name, part_number, quantity, attributes)

        log.debug(
            f"[ITEM INSERTED] id={record_id}",
            extra={"id": record_id, "part_number": part_number, "columns": sorted(attributes)},
        )
        return record_id

    def scan_all(self) -> RecordScan:
        """Every stored record in id order; iterate again to re-read."""
        return RecordScan(self)

    def count(self) -> int:
        with self._backend.session() as conn:
            return self._backend.count_items(conn)

    def _iter_records(self) -> Iterator[InventoryRecord]:
        with self._backend.session() as conn:
            columns = self._registry._dynamic_columns(conn)
            for row in self._backend.iter_item_rows(conn, self.batch_size):
                record = self._to_record(row, columns)
                if record is not None:
                    yield record

    def _to_record(self, row: ItemRow, columns: list[str]) -> Optional[InventoryRecord]:
        record_id, name, part_number, quantity, raw_attributes = row
        if name is None or part_number is None or quantity is None:
            log.warning(
                f"[ROW SKIPPED] id={record_id}: missing required column",
                extra={"id": record_id},
            )
            return None
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            log.warning(
                f"[ROW SKIPPED] id={record_id}: invalid quantity {quantity!r}",
                extra={"id": record_id},
            )
            return None
        try:
            attributes = self._backend.decode_attributes(raw_attributes)
        except ValueError as exc:
            log.warning(
                f"[ROW SKIPPED] id={record_id}: unreadable dynamic values ({exc})",
                extra={"id": record_id},
            )
            return None

        dynamic_values = {
            column: str(attributes[column])
            for column in columns
            if attributes.get(column) is not None
        }
        return InventoryRecord(
            id=int(record_id),
            name=str(name),
            part_number=str(part_number),
            quantity=quantity,
            dynamic_values=dynamic_values,
        )


__all__ = ["RecordScan", "RecordStore"]
