"""
Domain models for the inventory store.

Defines the inventory record read back from the store, the column-definition
log entries of the schema registry, and the reports produced by the import and
export pipelines. These models are used for validation, serialization and type
hints across the store, the pipelines and the CLI.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class InventoryRecord(BaseModel):
    """
    Representation of a single row in the `inventory_items` table.
    """

    id: int = Field(..., description="Store-assigned identifier, never reused.")
    name: str = Field(..., description="Item name.")
    part_number: str = Field(..., description="Part number.")
    quantity: int = Field(..., ge=0, description="Quantity on hand.")
    dynamic_values: Dict[str, str] = Field(
        default_factory=dict,
        description="Values for registered dynamic columns; absent key means no value.",
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }


class ColumnDefinition(BaseModel):
    """
    One entry of the append-only dynamic column log.
    """

    position: int = Field(..., description="Monotonic position in the log.")
    name: str = Field(..., description="Dynamic column name.")
    added_at: Optional[datetime] = Field(None, description="When the column was registered.")

    model_config = {"frozen": True}


class RowError(BaseModel):
    """A single skipped import row."""

    line_number: int
    reason: str
    raw: str = ""

    model_config = {"frozen": True}


class RejectedColumn(BaseModel):
    """A header token that could not be registered as a dynamic column."""

    name: str
    reason: str

    model_config = {"frozen": True}


class ImportReport(BaseModel):
    """
    Outcome of one CSV import run.

    `success` is True whenever the stream was read to the end, even if rows
    were skipped; `partial` tells the two cases apart.
    """

    source: str = ""
    success: bool = False
    inserted_ids: List[int] = Field(default_factory=list)
    row_errors: List[RowError] = Field(default_factory=list)
    columns_added: List[str] = Field(default_factory=list)
    rejected_columns: List[RejectedColumn] = Field(default_factory=list)

    @property
    def inserted(self) -> int:
        return len(self.inserted_ids)

    @property
    def skipped(self) -> int:
        return len(self.row_errors)

    @property
    def total_rows(self) -> int:
        return self.inserted + self.skipped

    @property
    def partial(self) -> bool:
        return self.success and self.skipped > 0

    def summary(self) -> str:
        """Human readable one-liner, e.g. '12 of 15 rows imported'."""
        if not self.success:
            return f"Import failed after {self.inserted} of {self.total_rows} rows"
        return f"{self.inserted} of {self.total_rows} rows imported"


class ExportResult(BaseModel):
    """Outcome of one CSV export run."""

    destination: str
    rows: int = 0


__all__ = [
    "InventoryRecord",
    "ColumnDefinition",
    "RowError",
    "RejectedColumn",
    "ImportReport",
    "ExportResult",
]
