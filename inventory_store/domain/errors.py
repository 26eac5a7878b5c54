"""
Error taxonomy for the inventory store.

Every failure the store, the pipelines or the sibling components raise derives
from `InventoryError`, so callers (CLI, background jobs) can catch one base
class while tests still assert on the precise type.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class InventoryError(Exception):
    """Base class for all inventory store errors."""


class InvalidColumnName(InventoryError, ValueError):
    """A dynamic column name is empty, unsafe or collides with a required column."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid column name {name!r}: {reason}")


class SchemaMismatch(InventoryError):
    """A write referenced dynamic columns that are not registered."""

    def __init__(self, columns: Iterable[str]) -> None:
        self.columns: List[str] = sorted(columns)
        super().__init__(
            "Unregistered dynamic column(s): " + ", ".join(repr(c) for c in self.columns)
        )


class InvalidRecord(InventoryError, ValueError):
    """Required fields are missing or out of range (e.g. negative quantity)."""


class StoreIoError(InventoryError):
    """The persistence layer could not be opened, read or written."""


class MalformedRow(InventoryError, ValueError):
    """An import row could not be parsed."""

    def __init__(self, line_number: int, reason: str) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Line {line_number}: {reason}")


class EmptyInput(InventoryError):
    """The import stream has no header line."""


class CsvIoError(InventoryError):
    """A tabular source could not be read or a destination could not be written."""

    def __init__(self, message: str, target: Optional[str] = None) -> None:
        self.target = target
        super().__init__(message)


class CredentialError(InventoryError):
    """A user account could not be created."""


class NotificationError(InventoryError):
    """A notification could not be delivered."""


__all__ = [
    "InventoryError",
    "InvalidColumnName",
    "SchemaMismatch",
    "InvalidRecord",
    "StoreIoError",
    "MalformedRow",
    "EmptyInput",
    "CsvIoError",
    "CredentialError",
    "NotificationError",
]
