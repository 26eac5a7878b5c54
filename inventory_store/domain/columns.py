"""
Column naming rules shared by the schema registry and the import pipeline.

Required columns have fixed storage names. Import headers and user input may
refer to them through display labels ("Part Number") or legacy names
("item_name", "_id"), so every lookup goes through `required_column_for`.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from inventory_store.domain.errors import InvalidColumnName

COL_ID = "id"
COL_NAME = "name"
COL_PART_NUMBER = "part_number"
COL_QUANTITY = "quantity"

REQUIRED_COLUMNS: Tuple[str, ...] = (COL_NAME, COL_PART_NUMBER, COL_QUANTITY, COL_ID)

EXPORT_HEADER: Tuple[str, ...] = ("Name", "Part Number", "Quantity")

MAX_COLUMN_NAME_LENGTH = 63

# Upper bound of the PostgreSQL INTEGER column; SQLite accepts it as well.
MAX_QUANTITY = 2**31 - 1

_REQUIRED_ALIASES = {
    "id": COL_ID,
    "_id": COL_ID,
    "name": COL_NAME,
    "item_name": COL_NAME,
    "part_number": COL_PART_NUMBER,
    "partnumber": COL_PART_NUMBER,
    "quantity": COL_QUANTITY,
}

_SAFE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_ \-]*$")
_SEPARATORS = re.compile(r"[\s\-]+")


def normalize_column_name(raw: str) -> str:
    """Trim surrounding whitespace from a candidate column name."""
    return (raw or "").strip()


def required_column_for(label: str) -> Optional[str]:
    """
    Return the storage name of the required column `label` refers to, if any.

    Matching ignores case and treats runs of spaces/hyphens as underscores, so
    "Part Number", "part-number" and "PART_NUMBER" all map to "part_number".
    """
    key = _SEPARATORS.sub("_", normalize_column_name(label).lower())
    return _REQUIRED_ALIASES.get(key)


def validate_dynamic_column_name(raw: str) -> str:
    """
    Normalize and validate a dynamic column name.

    Returns
    -------
    str
        The trimmed name.

    Raises
    ------
    InvalidColumnName
        If the name is empty, too long, contains unsafe characters or collides
        with a required column.
    """
    name = normalize_column_name(raw)
    if not name:
        raise InvalidColumnName(raw, "name is empty")
    if len(name) > MAX_COLUMN_NAME_LENGTH:
        raise InvalidColumnName(name, f"longer than {MAX_COLUMN_NAME_LENGTH} characters")
    if not _SAFE_NAME.match(name):
        raise InvalidColumnName(
            name,
            "must start with a letter or underscore and contain only letters, "
            "digits, spaces, underscores or hyphens",
        )
    required = required_column_for(name)
    if required is not None:
        raise InvalidColumnName(name, f"collides with required column {required!r}")
    return name


__all__ = [
    "COL_ID",
    "COL_NAME",
    "COL_PART_NUMBER",
    "COL_QUANTITY",
    "REQUIRED_COLUMNS",
    "EXPORT_HEADER",
    "MAX_COLUMN_NAME_LENGTH",
    "MAX_QUANTITY",
    "normalize_column_name",
    "required_column_for",
    "validate_dynamic_column_name",
]
