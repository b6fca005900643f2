"""Row assembly: apply compiled headers to one row of cells.

Failure policy differs per kind, on purpose:

- Transform: a cell that does not match raises FatalValidationError and
  the whole batch stops.
- Multi: a cell that does not match sets every name to None.
- Split with a map rule: if any fragment does not match the map rule the
  field falls back to the plain list of fragments.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from typing_extensions import assert_never

from candi.common.exceptions import FatalValidationError
from candi.common.tracer import traced
from candi.data_types import (
    Cell,
    HeaderSpec,
    MultiHeader,
    NormHeader,
    Record,
    SplitHeader,
    TransformHeader,
    Value,
)

logger = logging.getLogger(__name__)


def _group(match: re.Match[str], index: int) -> str | None:
    """Capture group ``index``, or None when the pattern has fewer groups."""
    if index > (match.re.groups or 0):
        return None
    return match.group(index)


def _transform(cell: Cell, header: TransformHeader, column: int) -> Value:
    match = (
        header.pattern.search(cell) if isinstance(cell, str) else None
    )
    if match is None:
        raise FatalValidationError(cell, header, column)
    return _group(match, 1)


def _multi(cell: Cell, header: MultiHeader) -> dict[str, Value]:
    match = (
        header.pattern.search(cell) if isinstance(cell, str) else None
    )
    if match is None:
        logger.debug(
            "Multi pattern %r did not match %r; filling %s with None",
            header.pattern.pattern,
            cell,
            list(header.names),
        )
        return {name: None for name in header.names}

    return {
        name: _group(match, index)
        for index, name in enumerate(header.names, start=1)
    }


def _split(cell: Cell, header: SplitHeader) -> Value:
    if isinstance(cell, list):
        parts = list(cell)
    else:
        parts = header.delimiter.split(cell)

    if header.map_pattern is None:
        return parts

    mapping: dict[str, str] = {}
    for part in parts:
        match = header.map_pattern.search(part)
        if match is None:
            logger.debug(
                "Fragment %r does not match map pattern %r; keeping list",
                part,
                header.map_pattern.pattern,
            )
            return parts
        mapping[_group(match, 1)] = _group(match, 2)  # type: ignore[index]
    return mapping


@traced
def assemble_record(
    cells: Sequence[Cell],
    headers: Sequence[HeaderSpec | None],
) -> Record:
    """Build a record from one row of cells.

    Cells and headers are paired by position. When the lengths differ the
    extra positions of the longer sequence are ignored.

    Args:
        cells: The row's cell values (strings or pre-split lists).
        headers: Compiled headers from ``compile_headers``.

    Returns:
        A new dict mapping field names to values, in header order.

    Raises:
        FatalValidationError: If a Transform cell does not match.
    """
    if len(cells) != len(headers):
        logger.debug(
            "Row has %d cells for %d headers", len(cells), len(headers)
        )

    record: Record = {}

    for column, (cell, header) in enumerate(zip(cells, headers)):
        match header:
            case None:
                continue
            case NormHeader():
                record[header.name] = cell
            case TransformHeader():
                record[header.name] = _transform(cell, header, column)
            case MultiHeader():
                record.update(_multi(cell, header))
            case SplitHeader():
                record[header.name] = _split(cell, header)
            case _:
                assert_never(header)

    return record
