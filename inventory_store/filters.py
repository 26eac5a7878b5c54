"""
Filter engine over dynamic column values.

Criteria are ANDed; each one is an exact, case-insensitive match. A record
without a value for a filtered column never matches.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

from inventory_store.domain.models import InventoryRecord


def _matches(record: InventoryRecord, criteria: Mapping[str, str]) -> bool:
    for column, expected in criteria.items():
        actual = record.dynamic_values.get(column)
        if actual is None or actual.casefold() != str(expected).casefold():
            return False
    return True


def filter_records(
    records: Iterable[InventoryRecord], criteria: Mapping[str, str]
) -> List[InventoryRecord]:
    """
    Keep the records whose dynamic values match every criterion.

    With empty criteria all records are returned in their original order.
    """
    if not criteria:
        return list(records)
    return [record for record in records if _matches(record, criteria)]


def parse_criteria(expressions: Iterable[str]) -> Dict[str, str]:
    """
    Parse `column=value` expressions (as typed on the command line).

    Raises
    ------
    ValueError
        If an expression has no '=' or an empty column name.
    """
    criteria: Dict[str, str] = {}
    for expression in expressions:
        column, sep, value = expression.partition("=")
        column = column.strip()
        if not sep or not column:
            raise ValueError(f"Expected column=value, got {expression!r}")
        criteria[column] = value.strip()
    return criteria


__all__ = ["filter_records", "parse_criteria"]
