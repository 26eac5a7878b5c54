from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from inventory_store.backends import available_backends
from inventory_store.bootstrap import Inventory, open_inventory
from inventory_store.config import get_settings
from inventory_store.domain.errors import InventoryError
from inventory_store.domain.models import ExportResult, ImportReport
from inventory_store.evolution import add_dynamic_column
from inventory_store.filters import filter_records, parse_criteria
from inventory_store.jobs import JobOutcome, JobRunner
from inventory_store.notifications import LogNotifier, send_low_stock_alert
from inventory_store.pipelines import export_csv, import_csv
from inventory_store.reporter import print_columns, print_import_report, print_records
from inventory_store.utils.logging import configure_logging

app = typer.Typer(help="Dynamic-schema inventory store CLI.")
console = Console()


def _open() -> Inventory:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return open_inventory(settings)


def _fail(exc: Exception) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    target = (
        settings.sqlite_path
        if settings.store_backend == "sqlite"
        else f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )
    typer.echo(
        f"backend={settings.store_backend} ({target}) | "
        f"available={', '.join(available_backends())} | "
        f"workers={settings.job_workers} scan_batch={settings.scan_batch_size}"
    )


@app.command()
def init() -> None:
    """
    Create the store tables if they do not exist.
    """
    try:
        with _open() as inventory:
            typer.echo(f"Store ready: {inventory.backend.target}")
    except InventoryError as exc:
        raise _fail(exc)


@app.command()
def columns() -> None:
    """
    List dynamic columns in the order they were added.
    """
    try:
        with _open() as inventory:
            print_columns(inventory.registry.column_log(), console=console)
    except InventoryError as exc:
        raise _fail(exc)


@app.command("add-column")
def add_column(name: str = typer.Argument(..., help="Name of the new column.")) -> None:
    """
    Register a new dynamic column (no-op if it already exists).
    """
    try:
        with _open() as inventory:
            added = add_dynamic_column(inventory.registry, name)
    except InventoryError as exc:
        raise _fail(exc)
    typer.echo(f"Column '{name.strip()}' " + ("added." if added else "already exists."))


@app.command("add-item")
def add_item(
    name: str = typer.Option(..., "--name", "-n", help="Item name."),
    part_number: str = typer.Option(..., "--part-number", "-p", help="Part number."),
    quantity: int = typer.Option(..., "--quantity", "-q", help="Quantity on hand."),
    fields: Optional[List[str]] = typer.Option(
        None, "--field", "-f", help="Dynamic value as column=value (repeatable)."
    ),
) -> None:
    """
    Add one item. Dynamic columns must be registered first (see add-column).
    """
    try:
        values = parse_criteria(fields or [])
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--field")
    try:
        with _open() as inventory:
            record_id = inventory.store.insert(name.strip(), part_number.strip(), quantity, values)
    except InventoryError as exc:
        raise _fail(exc)
    typer.echo(f"Added item id={record_id}.")


@app.command("list")
def list_items(
    where: Optional[List[str]] = typer.Option(
        None, "--where", "-w", help="Filter as column=value (repeatable, case-insensitive)."
    ),
) -> None:
    """
    Show items, optionally filtered on dynamic column values.
    """
    try:
        criteria = parse_criteria(where or [])
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--where")
    try:
        with _open() as inventory:
            dynamic_columns = inventory.registry.list_dynamic_columns()
            records = filter_records(inventory.store.scan_all(), criteria)
    except InventoryError as exc:
        raise _fail(exc)
    print_records(records, dynamic_columns, console=console)


def _run_in_background(name: str, fn, *args, on_complete) -> JobOutcome:
    with JobRunner() as runner:
        future = runner.submit(name, fn, *args, on_complete=on_complete)
        return future.result()


@app.command("import")
def import_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV file to import."),
) -> None:
    """
    Import a CSV file; unknown header columns are added to the schema.
    """

    def _done(outcome: JobOutcome[ImportReport]) -> None:
        if outcome.success and outcome.result is not None:
            print_import_report(outcome.result, console=console)
        else:
            console.print(f"[red]Import failed: {outcome.error}[/red]")

    try:
        with _open() as inventory:
            outcome = _run_in_background(
                f"import:{path.name}", import_csv, inventory.store, path, on_complete=_done
            )
    except InventoryError as exc:
        raise _fail(exc)
    if not outcome.success:
        raise typer.Exit(code=1)


@app.command("export")
def export_command(
    path: Path = typer.Argument(..., dir_okay=False, help="Destination CSV file."),
) -> None:
    """
    Export name, part number and quantity of every item to CSV.
    """

    def _done(outcome: JobOutcome[ExportResult]) -> None:
        if outcome.success and outcome.result is not None:
            console.print(
                f"[green]Exported {outcome.result.rows} item(s) to {outcome.result.destination}[/green]"
            )
        else:
            console.print(f"[red]Export failed: {outcome.error}[/red]")

    try:
        with _open() as inventory:
            outcome = _run_in_background(
                f"export:{path.name}", export_csv, inventory.store, path, on_complete=_done
            )
    except InventoryError as exc:
        raise _fail(exc)
    if not outcome.success:
        raise typer.Exit(code=1)


@app.command()
def notify(
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Alert text."),
    recipient: Optional[str] = typer.Option(None, "--recipient", "-r", help="Alert recipient."),
) -> None:
    """
    Send the low-stock alert (defaults from ALERT_MESSAGE / ALERT_RECIPIENT).
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        send_low_stock_alert(LogNotifier(), message=message, recipient=recipient, settings=settings)
    except InventoryError as exc:
        raise _fail(exc)
    typer.echo("Alert sent.")


@app.command("user-create")
def user_create(
    username: str = typer.Argument(..., help="New username."),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password."
    ),
) -> None:
    """
    Create a user account (password stored as a bcrypt hash).
    """
    try:
        with _open() as inventory:
            inventory.credentials.register(username, password)
    except InventoryError as exc:
        raise _fail(exc)
    typer.echo(f"User '{username}' created.")


@app.command()
def login(
    username: str = typer.Argument(..., help="Username."),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Password."),
) -> None:
    """
    Check a username/password pair.
    """
    try:
        with _open() as inventory:
            ok = inventory.credentials.verify(username, password)
    except InventoryError as exc:
        raise _fail(exc)
    if not ok:
        typer.echo("Incorrect username or password.", err=True)
        raise typer.Exit(code=1)
    typer.echo("Login successful.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
