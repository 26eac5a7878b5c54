"""
Inventory Store - a dynamic-schema inventory record store.

Inventory items always carry a name, a part number and a quantity; users can
add further text columns at any time. The package provides:

- A schema registry with an append-only log of dynamic columns
- A record store with validated inserts and lazy, restartable scans
- CSV import that registers unknown header columns and skips bad rows
- CSV export of the required columns
- A case-insensitive, conjunctive filter over dynamic values
- SQLite and PostgreSQL backends, background jobs, bcrypt credentials and
  manually triggered low-stock alerts
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from inventory_store.backends import available_backends, create_backend
from inventory_store.bootstrap import Inventory, open_inventory
from inventory_store.config import Settings, get_settings
from inventory_store.domain import (
    ImportReport,
    InventoryError,
    InventoryRecord,
)
from inventory_store.evolution import add_dynamic_column
from inventory_store.filters import filter_records
from inventory_store.jobs import JobOutcome, JobRunner
from inventory_store.pipelines import export_csv, import_csv
from inventory_store.registry import SchemaRegistry
from inventory_store.store import RecordStore
from inventory_store.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Backends / wiring
    "available_backends",
    "create_backend",
    "Inventory",
    "open_inventory",
    # Core
    "SchemaRegistry",
    "RecordStore",
    "add_dynamic_column",
    "filter_records",
    "import_csv",
    "export_csv",
    "InventoryRecord",
    "ImportReport",
    "InventoryError",
    # Jobs
    "JobOutcome",
    "JobRunner",
    # Logging
    "configure_logging",
    "get_logger",
]
