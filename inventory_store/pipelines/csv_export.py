"""
CSV export pipeline.

Writes the fixed header `Name,Part Number,Quantity` and one line per record.
Only the required columns are exported; dynamic columns are left out.

When exporting to a path the data goes to a temporary file next to the target
and is renamed into place only after the last row is written, so a failed
export never leaves a truncated file under the requested name.
"""

from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path
from typing import IO, Callable, Union

from inventory_store.domain.columns import EXPORT_HEADER
from inventory_store.domain.errors import CsvIoError
from inventory_store.domain.models import ExportResult, InventoryRecord
from inventory_store.store import RecordStore
from inventory_store.utils.logging import get_logger

log = get_logger(__name__)

ExportDestination = Union[str, "os.PathLike[str]", IO[bytes], IO[str]]


def format_row(record: InventoryRecord) -> str:
    return f"{record.name},{record.part_number},{record.quantity}\n"


def _write_rows(store: RecordStore, write: Callable[[str], object]) -> int:
    write(",".join(EXPORT_HEADER) + "\n")
    rows = 0
    for record in store.scan_all():
        write(format_row(record))
        rows += 1
    return rows


def _export_to_path(store: RecordStore, target: Path, encoding: str) -> int:
    try:
        handle = tempfile.NamedTemporaryFile(
            mode="w",
            encoding=encoding,
            newline="",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        )
    except OSError as exc:
        raise CsvIoError(f"Cannot write {target}: {exc}", target=str(target)) from exc

    tmp_path = Path(handle.name)
    try:
        with handle:
            rows = _write_rows(store, handle.write)
        os.replace(tmp_path, target)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise CsvIoError(f"Cannot write {target}: {exc}", target=str(target)) from exc
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return rows


def _export_to_stream(store: RecordStore, stream: IO, encoding: str) -> int:
    def write(text: str) -> object:
        if isinstance(stream, io.TextIOBase):
            return stream.write(text)
        return stream.write(text.encode(encoding))

    label = str(getattr(stream, "name", "<stream>"))
    try:
        rows = _write_rows(store, write)
        stream.flush()
    except OSError as exc:
        raise CsvIoError(f"Cannot write {label}: {exc}", target=label) from exc
    return rows


def export_csv(
    store: RecordStore, destination: ExportDestination, encoding: str = "utf-8"
) -> ExportResult:
    """
    Export the required-column projection of every record.

    Parameters
    ----------
    store : RecordStore
        Source store.
    destination : path or stream
        File path (written atomically) or an open binary/text stream. Streams
        are flushed but not closed.
    encoding : str
        Output encoding.

    Raises
    ------
    CsvIoError
        If the destination cannot be written.
    StoreIoError
        If the store cannot be read.
    """
    if isinstance(destination, (str, os.PathLike)):
        label = str(destination)
        log.info(f"[EXPORT START] {label}", extra={"destination": label})
        rows = _export_to_path(store, Path(destination), encoding)
    else:
        label = str(getattr(destination, "name", "<stream>"))
        log.info(f"[EXPORT START] {label}", extra={"destination": label})
        rows = _export_to_stream(store, destination, encoding)

    log.info(f"[EXPORT COMPLETE] {rows} rows", extra={"destination": label, "rows": rows})
    return ExportResult(destination=label, rows=rows)


__all__ = ["ExportDestination", "export_csv", "format_row"]
