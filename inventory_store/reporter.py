from __future__ import annotations

from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from inventory_store.domain.models import ColumnDefinition, ImportReport, InventoryRecord


def build_records_table(
    records: Sequence[InventoryRecord],
    dynamic_columns: Sequence[str],
    title: str = "Inventory",
) -> Table:
    """
    Build a table with the required columns followed by the dynamic ones.

    A blank cell means the record has no value for that column (typically it
    was stored before the column was added).
    """
    table = Table(title=title, box=box.ROUNDED, caption=f"{len(records)} item(s)")
    table.add_column("ID", justify="right", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Part Number", style="magenta", no_wrap=True)
    table.add_column("Quantity", justify="right", style="bold green")
    for column in dynamic_columns:
        table.add_column(column, style="yellow")

    for record in records:
        table.add_row(
            str(record.id),
            record.name,
            record.part_number,
            f"{record.quantity:,}",
            *(record.dynamic_values.get(column, "") for column in dynamic_columns),
        )
    return table


def print_records(
    records: Sequence[InventoryRecord],
    dynamic_columns: Sequence[str],
    console: Optional[Console] = None,
) -> None:
    console = console or Console()
    if not records:
        console.print("[yellow]No items to display.[/yellow]")
        return
    console.print(build_records_table(records, dynamic_columns))


def print_columns(columns: List[ColumnDefinition], console: Optional[Console] = None) -> None:
    console = console or Console()
    if not columns:
        console.print("[yellow]No dynamic columns registered.[/yellow]")
        return
    table = Table(title="Dynamic Columns", box=box.ROUNDED)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Column", style="cyan")
    table.add_column("Added", style="green")
    for column in columns:
        added = column.added_at.strftime("%Y-%m-%d %H:%M:%S") if column.added_at else "-"
        table.add_row(str(column.position), column.name, added)
    console.print(table)


def print_import_report(report: ImportReport, console: Optional[Console] = None) -> None:
    """Summary line, new/rejected columns and one row per skipped line."""
    console = console or Console()
    style = "green" if report.success and not report.partial else "yellow"
    if not report.success:
        style = "red"
    console.print(f"[{style}]{report.summary()}[/{style}]")

    if report.columns_added:
        console.print("New columns: " + ", ".join(report.columns_added))
    for rejected in report.rejected_columns:
        console.print(f"[red]Rejected column {rejected.name!r}: {rejected.reason}[/red]")

    if report.row_errors:
        table = Table(title="Skipped Rows", box=box.SIMPLE)
        table.add_column("Line", justify="right", style="dim")
        table.add_column("Reason", style="red")
        table.add_column("Content")
        for error in report.row_errors:
            table.add_row(str(error.line_number), error.reason, error.raw)
        console.print(table)
