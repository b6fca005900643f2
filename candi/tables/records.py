"""Helpers for reshaping lists of records.

None of these modify their inputs; each returns new dicts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any, Union

from candi.data_types import Record


def rearrange_record(record: Record, keys: Iterable[str]) -> Record:
    """Keep only ``keys`` of a record, in that order (missing → None)."""
    return {key: record.get(key) for key in keys}


def rearrange_records(
    records: Iterable[Record], keys: Sequence[str]
) -> list[Record]:
    """Apply ``rearrange_record`` to every record."""
    return [rearrange_record(record, keys) for record in records]


def add_field_to_records(
    records: Iterable[Record],
    name: str,
    value: Any | Callable[[Record], Any],
) -> list[Record]:
    """Return copies of ``records`` with one field added or replaced.

    Args:
        records: The records.
        name: Field to set.
        value: The value, or a callable computing it from each record.

    Returns:
        New records with ``name`` set.
    """
    if callable(value):
        return [{**record, name: value(record)} for record in records]
    return [{**record, name: value} for record in records]


def grid_to_records(
    grid: Iterable[Sequence[Any]],
    headers: Sequence[Union[str, Sequence[str]]],
) -> list[dict[str, Any]]:
    """Turn positional rows into dicts.

    A list header paired with a list cell spreads the cell's items over the
    sub-headers; in every other case the cell is stored under the header
    as-is.

    Example::

        >>> grid_to_records([["a", ["1", "2"]]], ["x", ["y", "z"]])
        [{'x': 'a', 'y': '1', 'z': '2'}]
    """
    records: list[dict[str, Any]] = []

    for row in grid:
        record: dict[str, Any] = {}
        for header, cell in zip(headers, row):
            if isinstance(cell, list) and isinstance(header, (list, tuple)):
                record.update(zip(header, cell))
            else:
                record[header] = cell  # type: ignore[index]
        records.append(record)

    return records
