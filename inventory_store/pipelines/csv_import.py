"""
CSV import pipeline.

Input format: the first line names the columns, every other line holds values
in the same positions. Lines are split on ',' with no quoting support, so a
value can never contain a comma.

The header is reconciled against the schema registry first (unknown columns
are registered, required columns are recognised by name or label), then each
row is inserted on its own. A bad row is logged, recorded in the report and
skipped; rows inserted before it stay. Only an unreadable stream or a store
failure ends the run early.
"""

from __future__ import annotations

import io
import os
import re
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Dict, Iterator, List, Set, Tuple, Union

from inventory_store.domain.columns import (
    COL_ID,
    COL_NAME,
    COL_PART_NUMBER,
    COL_QUANTITY,
    required_column_for,
)
from inventory_store.domain.errors import (
    CsvIoError,
    EmptyInput,
    InvalidRecord,
    MalformedRow,
    SchemaMismatch,
)
from inventory_store.domain.models import ImportReport, RejectedColumn, RowError
from inventory_store.evolution import ensure_columns
from inventory_store.store import RecordStore
from inventory_store.utils.logging import get_logger

log = get_logger(__name__)

DELIMITER = ","

_INTEGER = re.compile(r"-?[0-9]+")

ImportSource = Union[str, "os.PathLike[str]", IO[bytes], IO[str]]

ParsedRow = Tuple[str, str, int, Dict[str, str]]


def describe_source(source: ImportSource) -> str:
    if isinstance(source, (str, os.PathLike)):
        return str(source)
    return str(getattr(source, "name", "<stream>"))


@contextmanager
def _open_text(source: ImportSource, encoding: str) -> Iterator[IO[str]]:
    """Yield a text stream over `source`; streams passed in are left open."""
    if isinstance(source, (str, os.PathLike)):
        try:
            handle = open(Path(source), "r", encoding=encoding, newline="")
        except OSError as exc:
            raise CsvIoError(f"Cannot open {source}: {exc}", target=str(source)) from exc
        with handle:
            yield handle
    elif isinstance(source, io.TextIOBase):
        yield source  # type: ignore[misc]
    else:
        wrapper = io.TextIOWrapper(source, encoding=encoding, newline="")  # type: ignore[arg-type]
        try:
            yield wrapper
        finally:
            wrapper.detach()


def _read_line(stream: IO[str], label: str) -> str:
    try:
        return stream.readline()
    except (OSError, UnicodeDecodeError) as exc:
        raise CsvIoError(f"Cannot read {label}: {exc}", target=label) from exc


def _split(line: str) -> List[str]:
    return [token.strip() for token in line.rstrip("\r\n").split(DELIMITER)]


def _duplicate_positions(header: List[str]) -> Dict[int, str]:
    """
    Positions of header cells that repeat an earlier column.

    Dynamic names compare exactly; required columns compare by the column
    their label refers to, so `Name,item_name` is a repeat. The first
    occurrence wins.
    """
    seen: Dict[str, int] = {}
    duplicates: Dict[int, str] = {}
    for position, column in enumerate(header):
        key = required_column_for(column) or f"dynamic:{column}"
        if key in seen:
            duplicates[position] = f"duplicate of column {seen[key] + 1}"
        else:
            seen[key] = position
    return duplicates


def parse_row(
    header: List[str], skip_positions: Set[int], line: str, line_number: int
) -> ParsedRow:
    """
    Map one data line onto (name, part_number, quantity, dynamic_values).

    Raises
    ------
    MalformedRow
        On a column-count mismatch, a missing required value or a
        non-integer quantity.
    """
    tokens = _split(line)
    if len(tokens) != len(header):
        raise MalformedRow(line_number, f"expected {len(header)} values, found {len(tokens)}")

    required: Dict[str, str] = {}
    dynamic: Dict[str, str] = {}
    for position, (column, value) in enumerate(zip(header, tokens)):
        if position in skip_positions:
            continue
        target = required_column_for(column)
        if target is None:
            dynamic[column] = value
        elif target != COL_ID:
            required[target] = value

    missing = [c for c in (COL_NAME, COL_PART_NUMBER, COL_QUANTITY) if c not in required]
    if missing:
        raise MalformedRow(line_number, f"missing required column(s): {', '.join(missing)}")

    raw_quantity = required[COL_QUANTITY]
    if not _INTEGER.fullmatch(raw_quantity):
        raise MalformedRow(line_number, f"quantity {raw_quantity!r} is not an integer")
    quantity = int(raw_quantity)

    return required[COL_NAME], required[COL_PART_NUMBER], quantity, dynamic


def import_csv(
    store: RecordStore, source: ImportSource, encoding: str = "utf-8-sig"
) -> ImportReport:
    """
    Import a CSV file or stream into `store`.

    Parameters
    ----------
    store : RecordStore
        Destination store; its registry may grow even if rows later fail.
    source : path or stream
        File path, binary stream or text stream positioned at the header.
    encoding : str
        Text encoding for paths and binary streams. The default also strips a
        leading byte-order mark.

    Returns
    -------
    ImportReport
        `success` is True once the whole stream was read, even if rows were
        skipped; `row_errors` lists every skipped line.

    Raises
    ------
    EmptyInput
        If the source has no header line.
    CsvIoError
        If the source cannot be opened or read.
    StoreIoError
        If the store fails; rows inserted before the failure are kept.
    """
    label = describe_source(source)
    report = ImportReport(source=label)
    log.info(f"[IMPORT START] {label}", extra={"source": label})

    with _open_text(source, encoding) as stream:
        header_line = _read_line(stream, label)
        if not header_line.strip():
            raise EmptyInput(f"{label} has no header line")
        header = _split(header_line)

        duplicates = _duplicate_positions(header)
        for position, reason in duplicates.items():
            log.warning(
                f"[COLUMN REJECTED] {header[position]!r}: {reason}",
                extra={"source": label, "column": header[position]},
            )

        reconciliation = ensure_columns(
            store.registry, [c for i, c in enumerate(header) if i not in duplicates]
        )
        report.columns_added = list(reconciliation.added)
        report.rejected_columns = list(reconciliation.rejected) + [
            RejectedColumn(name=header[position], reason=reason)
            for position, reason in duplicates.items()
        ]
        rejected_names = {rejected.name for rejected in reconciliation.rejected}
        skip_positions = set(duplicates) | {
            i for i, column in enumerate(header) if column in rejected_names
        }
        if COL_ID in {required_column_for(c) for c in header}:
            log.debug("[IMPORT] ignoring id column; ids are assigned by the store")

        line_number = 1
        while True:
            line = _read_line(stream, label)
            if not line:
                break
            line_number += 1
            if not line.strip():
                continue
            try:
                name, part_number, quantity, dynamic = parse_row(
                    header, skip_positions, line, line_number
                )
                record_id = store.insert(name, part_number, quantity, dynamic)
            except (MalformedRow, InvalidRecord, SchemaMismatch) as exc:
                reason = exc.reason if isinstance(exc, MalformedRow) else str(exc)
                log.warning(
                    f"[ROW SKIPPED] line {line_number}: {reason}",
                    extra={"source": label, "line": line_number},
                )
                report.row_errors.append(
                    RowError(line_number=line_number, reason=reason, raw=line.rstrip("\r\n"))
                )
                continue
            report.inserted_ids.append(record_id)

    report.success = True
    log.info(
        f"[IMPORT COMPLETE] {report.summary()}",
        extra={
            "source": label,
            "inserted": report.inserted,
            "skipped": report.skipped,
            "columns_added": report.columns_added,
        },
    )
    return report


__all__ = ["ImportSource", "describe_source", "import_csv", "parse_row"]
