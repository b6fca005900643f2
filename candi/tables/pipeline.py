"""Table pipeline: HTML table rows to records.

The pipeline compiles the header templates once, selects the rows of a
table with a CSS selector, turns each row into a list of cell texts and
assembles a record per row. Row order is preserved and no row is dropped;
selection is entirely up to ``row_selector``.

lxml does not insert the ``<tbody>`` an HTML5 parser implies, so without an
explicit ``row_selector`` the body rows are those inside a ``tbody`` plus,
for tables written without one, the ``tr`` children of the table that hold
a ``td`` (a row of ``th`` cells only is the header row).

A cell processor can replace the text taken from a cell. It is called as
``processor(column_number, raw_markup, text)`` with ``column_number``
starting at 1. Whenever its return value differs from ``raw_markup`` it
replaces the text, so returning ``raw_markup`` unchanged means "keep the
text"::

    def links_as_urls(column, markup, text):
        if column == 3:
            return parse_html(markup).get("href")
        return markup

    records = table_to_records(page, ["name", "date", "url"], links_as_urls)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Union

from lxml.html import HtmlElement

from candi.common.checked_html import CheckedHtmlElement, parse_html
from candi.common.exceptions import FatalValidationError
from candi.common.text import sanitise
from candi.common.tracer import traced
from candi.data_types import Cell, HeaderSpec, Record
from candi.tables.assemble import assemble_record
from candi.tables.headers import compile_headers

logger = logging.getLogger(__name__)

CellProcessor = Callable[[int, str, str], Any]
ElementLike = Union[CheckedHtmlElement, HtmlElement]

BODY_ROWS_XPATH = (
    "descendant-or-self::tbody//tr"
    " | descendant-or-self::table[not(tbody)]/tr[td or not(th)]"
)


def _checked(element: ElementLike | str) -> CheckedHtmlElement:
    if isinstance(element, CheckedHtmlElement):
        return element
    if isinstance(element, str):
        return parse_html(element)
    return CheckedHtmlElement(element)


def row_to_cells(
    row: ElementLike,
    cell_processor: CellProcessor | None = None,
) -> list[Cell]:
    """Extract the sanitised text of each child of a row element.

    Args:
        row: A ``<tr>`` (or any element whose children are the cells).
        cell_processor: Optional text override, see the module docstring.

    Returns:
        One value per child element, in source order.
    """
    cells: list[Cell] = []

    for number, cell in enumerate(_checked(row).children(), start=1):
        text = sanitise(cell.text_content())

        if cell_processor is not None:
            markup = cell.inner_html()
            processed = cell_processor(number, markup, text)
            if processed != markup:
                text = processed

        cells.append(text)

    return cells


def row_to_record(
    row: ElementLike,
    headers: Sequence[HeaderSpec | None],
    cell_processor: CellProcessor | None = None,
) -> Record:
    """Convert one row element into a record using compiled headers."""
    return assemble_record(row_to_cells(row, cell_processor), headers)


@traced
def rows_to_records(
    rows: Iterable[ElementLike],
    headers: Sequence[HeaderSpec | None],
    cell_processor: CellProcessor | None = None,
) -> list[Record]:
    """Convert row elements into records using compiled headers.

    Args:
        rows: Row elements, in the order the records should come out.
        headers: Compiled headers from ``compile_headers``.
        cell_processor: Optional text override, see the module docstring.

    Returns:
        One record per row.

    Raises:
        FatalValidationError: If a Transform cell does not match. The
            error carries the index of the offending row and no records
            are returned for the batch.
    """
    records: list[Record] = []

    for index, row in enumerate(rows):
        try:
            records.append(row_to_record(row, headers, cell_processor))
        except FatalValidationError as e:
            logger.error(
                "Transform mismatch in row %d, column %d: %r",
                index,
                e.column,
                e.cell,
            )
            raise e.with_row(index) from e

    return records


@traced
def table_to_records(
    table: ElementLike | str,
    raw_headers: Iterable[str | None],
    cell_processor: CellProcessor | None = None,
    row_selector: str | None = None,
) -> list[Record]:
    """Convert an HTML table into a list of records.

    Args:
        table: The table element, or HTML text containing it.
        raw_headers: Header templates, one per column (None skips one).
        cell_processor: Optional text override, see the module docstring.
        row_selector: CSS selector for the data rows, relative to
            ``table``. None selects the body rows, ``tbody`` implied.

    Returns:
        One record per selected row, in document order.

    Raises:
        PatternError: If a header template holds an invalid regex.
        FatalValidationError: If a Transform cell does not match.
    """
    headers = compile_headers(raw_headers)
    element = _checked(table)
    if row_selector is None:
        rows = element.checked_xpath(
            BODY_ROWS_XPATH, "table body rows", min_count=0
        )
    else:
        rows = element.checked_css(row_selector, "table rows", min_count=0)
    logger.debug(
        "Selected %d rows with %r", len(rows), row_selector or "body rows"
    )
    return rows_to_records(rows, headers, cell_processor)


def get_data_from_table(
    table: ElementLike | str,
    processor: Callable[[CheckedHtmlElement, int], Any] | None = None,
) -> list[list[Any]]:
    """Collect the ``td`` cells of every ``tr`` of a table as a grid.

    Args:
        table: The table element, or HTML text containing it.
        processor: Optional ``processor(cell, column_number)`` whose result
            is stored instead of the cell element. Falsy results leave the
            slot as None.

    Returns:
        One list per row; rows without ``td`` cells are empty lists.
    """
    grid: list[list[Any]] = []

    for row in _checked(table).checked_css("tr", "table rows", min_count=0):
        cells = row.checked_xpath("./td", "row cells", min_count=0)
        values: list[Any] = [None] * len(cells)

        for column, cell in enumerate(cells):
            if processor is None:
                values[column] = cell
                continue

            value = processor(cell, column + 1)
            if value:
                values[column] = value

        grid.append(values)

    return grid


def get_table_headers(table: ElementLike | str) -> list[str]:
    """Sanitised text of every ``th`` cell of a table, in document order."""
    return [
        sanitise(cell.text_content())
        for cell in _checked(table).checked_css(
            "th", "header cells", min_count=0
        )
    ]
