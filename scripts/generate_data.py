"""
Sample data generation for the inventory store.

Implements deterministic pseudo-random item generation, emits an import-ready
CSV (required columns plus a few dynamic ones) and can load it through the
import pipeline.
"""

from __future__ import annotations

import random
import sys
import time
from pathlib import Path

import typer

from inventory_store.bootstrap import open_inventory
from inventory_store.pipelines import import_csv
from inventory_store.utils.logging import configure_logging

app = typer.Typer(help="Generate a sample inventory CSV and optionally import it.")

HEADER = ["Name", "Part Number", "Quantity", "Bin", "Color", "Supplier"]

_NOUNS = ["Bolt", "Nut", "Washer", "Gear", "Bearing", "Spring", "Bracket", "Hinge", "Valve"]
_ADJECTIVES = ["Hex", "Lock", "Flat", "Spur", "Ball", "Coil", "Angle", "Steel", "Brass"]
_COLORS = ["Red", "Blue", "Black", "Silver", "Green"]
_SUPPLIERS = ["Acme", "Globex", "Initech", "Umbrella"]


def _generate_rows_csv(csv_path: Path, rows: int, batch_size: int, seed: int) -> None:
    rng = random.Random(seed)

    # Plain comma joins: the importer does not understand quoting.
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        f.write(",".join(HEADER) + "\n")

        buffer: list[str] = []
        for i in range(rows):
            noun = rng.choice(_NOUNS)
            name = f"{rng.choice(_ADJECTIVES)} {noun}"
            part_number = f"{noun[:2].upper()}-{i + 1:05d}"
            quantity = rng.randint(0, 500)
            bin_code = f"{rng.choice('ABCDEF')}{rng.randint(1, 12)}"
            buffer.append(
                ",".join(
                    [
                        name,
                        part_number,
                        str(quantity),
                        bin_code,
                        rng.choice(_COLORS),
                        rng.choice(_SUPPLIERS),
                    ]
                )
                + "\n"
            )
            if len(buffer) >= batch_size:
                f.writelines(buffer)
                buffer.clear()
        if buffer:
            f.writelines(buffer)


@app.command()
def main(
    rows: int = typer.Option(100, "--rows", "-r", help="Number of items to generate."),
    batch_size: int = typer.Option(1_000, "--batch-size", "-b", help="Rows per write batch."),
    seed: int = typer.Option(42, "--seed", help="Random seed for reproducible data."),
    output: Path = typer.Option(Path("sample_inventory.csv"), "--output", "-o", help="CSV path."),
    load: bool = typer.Option(False, "--load", help="Import the CSV into the configured store."),
) -> None:
    """
    Generate a deterministic sample inventory CSV.
    """
    start = time.perf_counter()
    _generate_rows_csv(output, rows=rows, batch_size=batch_size, seed=seed)
    typer.echo(f"Wrote {rows} rows to {output} in {time.perf_counter() - start:.2f}s")

    if load:
        configure_logging(level="INFO")
        with open_inventory() as inventory:
            report = import_csv(inventory.store, output)
        typer.echo(report.summary())
        if not report.success:
            sys.exit(1)


if __name__ == "__main__":
    app()
