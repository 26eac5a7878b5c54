"""
Domain package for the inventory store.

Exports the record and report models, the column naming rules and the error
taxonomy used across the store, the pipelines and the CLI. Keep this package
focused on data definitions and validation concerns.
"""

from inventory_store.domain.columns import (
    EXPORT_HEADER,
    REQUIRED_COLUMNS,
    required_column_for,
    validate_dynamic_column_name,
)
from inventory_store.domain.errors import (
    CredentialError,
    CsvIoError,
    EmptyInput,
    InvalidColumnName,
    InvalidRecord,
    InventoryError,
    MalformedRow,
    NotificationError,
    SchemaMismatch,
    StoreIoError,
)
from inventory_store.domain.models import (
    ColumnDefinition,
    ExportResult,
    ImportReport,
    InventoryRecord,
    RejectedColumn,
    RowError,
)

__all__ = [
    "EXPORT_HEADER",
    "REQUIRED_COLUMNS",
    "required_column_for",
    "validate_dynamic_column_name",
    "CredentialError",
    "CsvIoError",
    "EmptyInput",
    "InvalidColumnName",
    "InvalidRecord",
    "InventoryError",
    "MalformedRow",
    "NotificationError",
    "SchemaMismatch",
    "StoreIoError",
    "ColumnDefinition",
    "ExportResult",
    "ImportReport",
    "InventoryRecord",
    "RejectedColumn",
    "RowError",
]
