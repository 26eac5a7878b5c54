"""
Utilities package for the inventory store.

Exports shared helpers for logging and profiling. Keep this package lightweight
and free of domain-specific logic.
"""

from inventory_store.utils.logging import configure_logging, get_logger
from inventory_store.utils.profiler import OperationStats, measure_block

__all__ = [
    "configure_logging",
    "get_logger",
    "OperationStats",
    "measure_block",
]
