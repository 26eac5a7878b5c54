from __future__ import annotations

import io
from pathlib import Path

import pytest

from inventory_store.domain.columns import MAX_QUANTITY
from inventory_store.domain.errors import CsvIoError, EmptyInput, MalformedRow, StoreIoError
from inventory_store.pipelines import import_csv
from inventory_store.pipelines.csv_import import parse_row
from inventory_store.registry import SchemaRegistry
from inventory_store.store import RecordStore

HEADER = ["Name", "Part Number", "Quantity"]


def _names(store: RecordStore) -> list[str]:
    return [record.name for record in store.scan_all()]


def test_bad_row_is_skipped_and_the_rest_imported(store: RecordStore, registry: SchemaRegistry) -> None:
    source = io.StringIO("Name,Part Number,Quantity\nWidget,W-1,10\nBad,Row\nGear,G-2,5\n")

    report = import_csv(store, source)

    assert report.success
    assert report.partial
    assert report.inserted == 2
    assert report.skipped == 1
    assert report.row_errors[0].line_number == 3
    assert report.row_errors[0].raw == "Bad,Row"
    assert "expected 3 values" in report.row_errors[0].reason
    assert _names(store) == ["Widget", "Gear"]
    assert registry.list_dynamic_columns() == []
    assert report.summary() == "2 of 3 rows imported"


def test_unknown_header_columns_are_registered(store: RecordStore, registry: SchemaRegistry) -> None:
    registry.add_column("Bin")
    source = io.StringIO("Name,Part Number,Quantity,Bin,Color\nBolt,B-1,4,A1,Red\nNut,N-1,2,,Blue\n")

    report = import_csv(store, source)

    assert report.columns_added == ["Color"]
    assert registry.list_dynamic_columns() == ["Bin", "Color"]
    records = list(store.scan_all())
    assert records[0].dynamic_values == {"Bin": "A1", "Color": "Red"}
    assert records[1].dynamic_values == {"Bin": "", "Color": "Blue"}


def test_header_labels_map_onto_required_columns(store: RecordStore) -> None:
    source = io.StringIO("item_name,partNumber,QUANTITY\nBolt,B-1,4\n")

    report = import_csv(store, source)

    assert report.inserted == 1
    (record,) = list(store.scan_all())
    assert (record.name, record.part_number, record.quantity) == ("Bolt", "B-1", 4)


def test_id_column_is_ignored(store: RecordStore, registry: SchemaRegistry) -> None:
    store.insert("Existing", "E-1", 1)
    source = io.StringIO("_id,Name,Part Number,Quantity\n1,Bolt,B-1,4\n")

    report = import_csv(store, source)

    assert report.inserted == 1
    assert [record.id for record in store.scan_all()] == [1, 2]
    assert registry.list_dynamic_columns() == []


def test_rejected_header_column_is_reported_and_its_values_dropped(
    store: RecordStore, registry: SchemaRegistry
) -> None:
    source = io.StringIO("Name,Part Number,Quantity,Price ($)\nBolt,B-1,4,1.50\n")

    report = import_csv(store, source)

    assert [rejected.name for rejected in report.rejected_columns] == ["Price ($)"]
    assert report.inserted == 1
    assert registry.list_dynamic_columns() == []
    (record,) = list(store.scan_all())
    assert record.dynamic_values == {}


def test_invalid_quantities_are_row_errors(store: RecordStore) -> None:
    source = io.StringIO(
        "Name,Part Number,Quantity\n"
        "A,A-1,ten\n"
        "B,B-1,-3\n"
        "C,C-1,7\n"
        "D,D-1,1_000\n"
        "E,E-1,+5\n"
        "F,F-1,١٢\n"
        "G,G-1,2.0\n"
    )

    report = import_csv(store, source)

    assert report.inserted == 1
    assert [error.line_number for error in report.row_errors] == [2, 3, 5, 6, 7, 8]
    assert _names(store) == ["C"]


def test_out_of_range_quantity_skips_only_that_row(store: RecordStore) -> None:
    source = io.StringIO(
        f"Name,Part Number,Quantity\nA,A-1,1\nHuge,H-1,99999999999999999999\n"
        f"Max,M-1,{MAX_QUANTITY}\nTooBig,T-1,{MAX_QUANTITY + 1}\nC,C-1,3\n"
    )

    report = import_csv(store, source)

    assert report.success
    assert report.inserted == 3
    assert [error.line_number for error in report.row_errors] == [3, 5]
    assert _names(store) == ["A", "Max", "C"]


def test_repeated_header_columns_keep_first_and_are_reported(
    store: RecordStore, registry: SchemaRegistry
) -> None:
    source = io.StringIO("Name,Part Number,Quantity,Color,Color,item_name\nBolt,B-1,4,Red,Blue,Other\n")

    report = import_csv(store, source)

    assert report.inserted == 1
    assert [(r.name, r.reason) for r in report.rejected_columns] == [
        ("Color", "duplicate of column 4"),
        ("item_name", "duplicate of column 1"),
    ]
    assert registry.list_dynamic_columns() == ["Color"]
    (record,) = list(store.scan_all())
    assert record.name == "Bolt"
    assert record.dynamic_values == {"Color": "Red"}


def test_missing_required_column_skips_every_row(store: RecordStore) -> None:
    source = io.StringIO("Name,Quantity\nBolt,4\nNut,2\n")

    report = import_csv(store, source)

    assert report.success
    assert report.inserted == 0
    assert report.skipped == 2
    assert "part_number" in report.row_errors[0].reason


def test_blank_lines_are_ignored_but_counted(store: RecordStore) -> None:
    source = io.StringIO("Name,Part Number,Quantity\n\nBolt,B-1,4\r\n\nNut,N-1,oops\n")

    report = import_csv(store, source)

    assert report.inserted == 1
    assert report.row_errors[0].line_number == 5


@pytest.mark.parametrize("content", ["", "\n", "   \n"])
def test_empty_input_raises(store: RecordStore, content: str) -> None:
    with pytest.raises(EmptyInput):
        import_csv(store, io.StringIO(content))
    assert store.count() == 0


def test_import_from_path_strips_byte_order_mark(store: RecordStore, tmp_path: Path) -> None:
    path = tmp_path / "items.csv"
    path.write_bytes("Name,Part Number,Quantity\nBolt,B-1,4\n".encode("utf-8-sig"))

    report = import_csv(store, path)

    assert report.source == str(path)
    assert report.inserted == 1
    assert _names(store) == ["Bolt"]


def test_import_from_binary_stream_leaves_it_open(store: RecordStore) -> None:
    source = io.BytesIO("Name,Part Number,Quantity\nZahnrad,Z-1,3\n".encode("utf-8"))

    report = import_csv(store, source)

    assert report.inserted == 1
    assert not source.closed
    assert _names(store) == ["Zahnrad"]


def test_missing_file_raises_csv_io_error(store: RecordStore, tmp_path: Path) -> None:
    with pytest.raises(CsvIoError) as excinfo:
        import_csv(store, tmp_path / "missing.csv")
    assert excinfo.value.target == str(tmp_path / "missing.csv")


def test_undecodable_stream_raises_csv_io_error(store: RecordStore) -> None:
    source = io.BytesIO(b"Name,Part Number,Quantity\nW\xff\xfe,1,2\n")

    with pytest.raises(CsvIoError):
        import_csv(store, source, encoding="utf-8")


def test_store_failure_aborts_import_and_keeps_earlier_rows(
    store: RecordStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    original_insert = store.insert
    calls = {"n": 0}

    def flaky_insert(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 2:
            raise StoreIoError("disk full")
        return original_insert(*args, **kwargs)

    monkeypatch.setattr(store, "insert", flaky_insert)
    source = io.StringIO("Name,Part Number,Quantity\nA,A-1,1\nB,B-1,2\nC,C-1,3\n")

    with pytest.raises(StoreIoError):
        import_csv(store, source)

    assert _names(store) == ["A"]


def test_parse_row_maps_tokens() -> None:
    name, part_number, quantity, dynamic = parse_row(
        HEADER + ["Bin"], set(), " Bolt , B-1 , 4 , A1 \n", 2
    )
    assert (name, part_number, quantity, dynamic) == ("Bolt", "B-1", 4, {"Bin": "A1"})


def test_parse_row_rejects_column_count_mismatch() -> None:
    with pytest.raises(MalformedRow) as excinfo:
        parse_row(HEADER, set(), "Bolt,B-1,4,extra", 7)
    assert excinfo.value.line_number == 7
    assert excinfo.value.reason == "expected 3 values, found 4"
