"""
Tabular import/export pipelines for the inventory store.
"""

from inventory_store.pipelines.csv_export import export_csv
from inventory_store.pipelines.csv_import import import_csv

__all__ = ["export_csv", "import_csv"]
