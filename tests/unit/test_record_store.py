from __future__ import annotations

import logging

import pytest

from inventory_store.backends import SqliteBackend
from inventory_store.domain.columns import MAX_QUANTITY
from inventory_store.domain.errors import InvalidRecord, SchemaMismatch, StoreIoError
from inventory_store.domain.models import InventoryRecord
from inventory_store.registry import SchemaRegistry
from inventory_store.store import RecordStore


def _raw_insert(backend: SqliteBackend, sql: str) -> None:
    with backend.session() as conn:
        conn.execute(sql)


def test_insert_then_scan_round_trips_values(store: RecordStore, registry: SchemaRegistry) -> None:
    registry.add_column("Bin")
    record_id = store.insert("Hex Bolt", "HB-100", 50, {"Bin": "A1"})

    records = list(store.scan_all())

    assert records == [
        InventoryRecord(
            id=record_id, name="Hex Bolt", part_number="HB-100", quantity=50, dynamic_values={"Bin": "A1"}
        )
    ]


def test_ids_are_unique_and_increasing(store: RecordStore) -> None:
    ids = [store.insert(f"Item {i}", f"P-{i}", i) for i in range(5)]

    assert ids == sorted(ids)
    assert len(set(ids)) == 5
    assert [record.id for record in store.scan_all()] == ids


def test_new_column_is_not_backfilled(store: RecordStore, registry: SchemaRegistry) -> None:
    old_id = store.insert("Bolt", "B-100", 50)
    registry.add_column("Bin")
    new_id = store.insert("Nut", "N-1", 5, {"Bin": "A1"})

    records = {record.id: record for record in store.scan_all()}

    assert "Bin" not in records[old_id].dynamic_values
    assert records[new_id].dynamic_values == {"Bin": "A1"}


def test_negative_quantity_is_rejected_without_side_effects(store: RecordStore) -> None:
    first = store.insert("Bolt", "B-100", 50)

    with pytest.raises(InvalidRecord):
        store.insert("Nut", "N-1", -1)

    assert store.count() == 1
    second = store.insert("Washer", "W-1", 0)
    assert second == first + 1


@pytest.mark.parametrize(
    ("name", "part_number", "quantity"),
    [
        (None, "P-1", 1),
        ("Bolt", None, 1),
        ("Bolt", "P-1", None),
        ("Bolt", "P-1", "5"),
        ("Bolt", "P-1", True),
    ],
)
def test_missing_or_mistyped_required_fields_are_rejected(
    store: RecordStore, name, part_number, quantity
) -> None:
    with pytest.raises(InvalidRecord):
        store.insert(name, part_number, quantity)
    assert store.count() == 0


def test_unregistered_dynamic_column_raises_schema_mismatch(
    store: RecordStore, registry: SchemaRegistry
) -> None:
    registry.add_column("Bin")

    with pytest.raises(SchemaMismatch) as excinfo:
        store.insert("Bolt", "B-100", 1, {"Bin": "A1", "Color": "Red", "Finish": "Zinc"})

    assert excinfo.value.columns == ["Color", "Finish"]
    assert store.count() == 0


def test_none_dynamic_values_are_dropped(store: RecordStore, registry: SchemaRegistry) -> None:
    registry.add_column("Bin")
    registry.add_column("Color")

    store.insert("Bolt", "B-100", 1, {"Bin": None, "Color": 7})

    (record,) = list(store.scan_all())
    assert record.dynamic_values == {"Color": "7"}


def test_scan_is_restartable_and_sees_later_inserts(store: RecordStore) -> None:
    scan = store.scan_all()
    store.insert("Bolt", "B-100", 1)
    assert [record.name for record in scan] == ["Bolt"]

    store.insert("Nut", "N-1", 2)
    store.insert("Gear", "G-1", 3)

    # Batch size is 2 in the test settings, so this spans several fetches.
    assert [record.name for record in scan] == ["Bolt", "Nut", "Gear"]
    assert [record.name for record in scan] == ["Bolt", "Nut", "Gear"]


def test_scan_of_empty_store_is_empty(store: RecordStore) -> None:
    assert list(store.scan_all()) == []
    assert store.count() == 0


def test_corrupt_rows_are_skipped_and_logged(
    store: RecordStore, sqlite_backend: SqliteBackend, caplog: pytest.LogCaptureFixture
) -> None:
    store.insert("Bolt", "B-100", 1)
    _raw_insert(
        sqlite_backend,
        "INSERT INTO inventory_items (name, part_number, quantity) VALUES (NULL, 'X-1', 3)",
    )
    _raw_insert(
        sqlite_backend,
        "INSERT INTO inventory_items (name, part_number, quantity, attributes) "
        "VALUES ('Broken', 'X-2', 3, 'not json')",
    )
    _raw_insert(
        sqlite_backend,
        "INSERT INTO inventory_items (name, part_number, quantity) VALUES ('Odd', 'X-3', -4)",
    )
    store.insert("Nut", "N-1", 2)

    with caplog.at_level(logging.WARNING, logger="inventory_store.store"):
        names = [record.name for record in store.scan_all()]

    assert names == ["Bolt", "Nut"]
    skipped = [r for r in caplog.records if "[ROW SKIPPED]" in r.getMessage()]
    assert len(skipped) == 3


def test_values_of_unregistered_columns_are_not_exposed(
    store: RecordStore, sqlite_backend: SqliteBackend
) -> None:
    _raw_insert(
        sqlite_backend,
        "INSERT INTO inventory_items (name, part_number, quantity, attributes) "
        "VALUES ('Bolt', 'B-1', 1, '{\"Ghost\": \"x\"}')",
    )

    (record,) = list(store.scan_all())
    assert record.dynamic_values == {}


def test_unreachable_store_raises_store_io_error(tmp_path, test_settings) -> None:
    # A directory cannot be opened as a database file.
    backend = SqliteBackend(tmp_path, settings=test_settings.model_copy(update={"sqlite_timeout_seconds": 0.1}))
    store = RecordStore(backend, settings=test_settings)

    with pytest.raises(StoreIoError):
        store.count()


def test_quantity_above_integer_column_range_is_rejected(store: RecordStore) -> None:
    with pytest.raises(InvalidRecord):
        store.insert("Huge", "H-1", MAX_QUANTITY + 1)
    with pytest.raises(InvalidRecord):
        store.insert("Huger", "H-2", 2**64)

    record_id = store.insert("Max", "M-1", MAX_QUANTITY)

    assert [(r.id, r.quantity) for r in store.scan_all()] == [(record_id, MAX_QUANTITY)]
