from __future__ import annotations

import pytest

from inventory_store.domain.models import InventoryRecord
from inventory_store.filters import filter_records, parse_criteria
from inventory_store.registry import SchemaRegistry
from inventory_store.store import RecordStore


def _record(record_id: int, **values: str) -> InventoryRecord:
    return InventoryRecord(
        id=record_id, name=f"Item {record_id}", part_number=f"P-{record_id}", quantity=1, dynamic_values=values
    )


RECORDS = [
    _record(1, Color="Red", Bin="A1"),
    _record(2, Color="red", Bin="B2"),
    _record(3, Color="Blue", Bin="A1"),
    _record(4, Bin="A1"),
]


def test_match_is_case_insensitive_on_values() -> None:
    result = filter_records(RECORDS, {"Color": "RED"})
    assert [record.id for record in result] == [1, 2]


def test_criteria_are_anded() -> None:
    result = filter_records(RECORDS, {"Color": "red", "Bin": "a1"})
    assert [record.id for record in result] == [1]


def test_record_without_value_never_matches() -> None:
    result = filter_records(RECORDS, {"Color": ""})
    assert [record.id for record in result] == []


def test_match_is_exact_not_substring() -> None:
    assert filter_records(RECORDS, {"Bin": "A"}) == []


def test_empty_criteria_returns_everything_in_order() -> None:
    assert filter_records(iter(RECORDS), {}) == RECORDS


def test_filter_over_store_scan(store: RecordStore, registry: SchemaRegistry) -> None:
    registry.add_column("Color")
    store.insert("A", "A-1", 1, {"Color": "Red"})
    store.insert("B", "B-1", 1, {"Color": "Blue"})
    store.insert("C", "C-1", 1)

    matched = filter_records(store.scan_all(), {"Color": "red"})

    assert [record.name for record in matched] == ["A"]


def test_parse_criteria() -> None:
    assert parse_criteria(["Color=Red", " Bin = A1 ", "Note=a=b"]) == {
        "Color": "Red",
        "Bin": "A1",
        "Note": "a=b",
    }
    assert parse_criteria([]) == {}


@pytest.mark.parametrize("expression", ["Color", "=Red", "  =x"])
def test_parse_criteria_rejects_malformed_expressions(expression: str) -> None:
    with pytest.raises(ValueError):
        parse_criteria([expression])
