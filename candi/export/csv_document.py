"""CSV emission for records whose fields may hold several values.

A CsvEntry is one logical record aligned with the document headers. Any of
its cells may be a list; the entry then expands into as many output rows as
its longest list. Scalars are written in the first row only, and each list
fills its own column from the top down::

    headers  a    b
    entry    "x"  ["1", "2", "3"]

    rows     "x"  "1"
             ""   "2"
             ""   "3"

Columns are filled independently, so two list columns of one entry are not
paired up by position beyond sharing row numbers.

A slot counts as free while its value is falsy. An earlier list element that
is ``""`` or ``0`` is therefore overwritten by the next element of the same
list; this quirk of the placement is kept.

CsvDocument collects entries and serialises them. Fields are wrapped in the
qualifier and joined with the delimiter; qualifier or delimiter characters
inside values are not escaped.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from candi.common.exceptions import (
    CardinalityError,
    ConfigurationError,
    UnknownFieldError,
)
from candi.common.files import write_file
from candi.common.tracer import traced
from candi.config import CsvOptions

logger = logging.getLogger(__name__)


def _is_multi(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def expand_entry(
    headers: Sequence[str], cells: Sequence[Any]
) -> list[list[Any]]:
    """Expand one entry into aligned output rows.

    Args:
        headers: The document headers.
        cells: One cell per header; list cells hold several values.

    Returns:
        ``max(1, longest list)`` rows, each with one slot per header.
        Unfilled slots hold ``""``.

    Raises:
        CardinalityError: If ``cells`` and ``headers`` differ in length.
    """
    if len(cells) != len(headers):
        raise CardinalityError(len(headers), len(cells), "Entry")

    height = max([1, *(len(cell) for cell in cells if _is_multi(cell))])
    rows: list[list[Any]] = [["" for _ in headers] for _ in range(height)]

    for column, cell in enumerate(cells):
        if not _is_multi(cell):
            rows[0][column] = cell
            continue

        for value in cell:
            index = 0
            while rows[index][column]:
                index += 1
            rows[index][column] = value

    return rows


class CsvEntry:
    """One record of a CSV document, possibly spanning several rows.

    Attributes:
        headers: The document headers this entry is aligned with.
    """

    def __init__(
        self,
        headers: Sequence[str],
        data: Sequence[Any] | None = None,
    ) -> None:
        """Create an entry, optionally from a complete list of cells.

        Args:
            headers: The document headers.
            data: One cell per header, or None to start empty and fill the
                entry with ``add()``.

        Raises:
            TypeError: If ``data`` is not a sequence.
            CardinalityError: If ``data`` has the wrong length.
        """
        self.headers = list(headers)

        if data is None:
            self._data: list[Any] = [None] * len(self.headers)
            return

        if isinstance(data, (str, bytes)) or not isinstance(data, Sequence):
            raise TypeError(
                f"Expected a sequence of cells, got {type(data).__name__}"
            )

        if len(data) != len(self.headers):
            raise CardinalityError(len(self.headers), len(data), "Line")

        self._data = list(data)

    @property
    def data(self) -> list[Any]:
        """A copy of the entry's cells, in header order."""
        return list(self._data)

    def index_of(self, header: str) -> int:
        """Position of ``header``.

        Raises:
            UnknownFieldError: If ``header`` is not one of the headers.
        """
        try:
            return self.headers.index(header)
        except ValueError:
            raise UnknownFieldError(header, self.headers) from None

    def get(self, header: str) -> Any:
        """The cell stored under ``header``."""
        return self._data[self.index_of(header)]

    def add(self, header: str, value: Any) -> None:
        """Add a value under ``header``.

        The first value is stored as-is. Adding to a cell that already holds
        a truthy value turns it into a list, so the entry grows by one
        output row per extra value.

        Raises:
            TypeError: If ``value`` is a mapping.
            UnknownFieldError: If ``header`` is not one of the headers.
        """
        if isinstance(value, Mapping):
            raise TypeError("Cannot add a mapping to a cell")

        index = self.index_of(header)
        old = self._data[index]

        if not old:
            self._data[index] = value
        elif isinstance(old, list):
            self._data[index] = [*old, value]
        else:
            self._data[index] = [old, value]

    @traced
    def output_rows(self) -> list[list[Any]]:
        """The rows this entry occupies in the output (see expand_entry)."""
        return expand_entry(self.headers, self._data)

    def __repr__(self) -> str:
        return f"CsvEntry({dict(zip(self.headers, self._data))!r})"


def _parse_options(options: Mapping[str, Any] | None) -> CsvOptions:
    if not options:
        return CsvOptions()

    values: dict[str, Any] = {}
    for name, value in options.items():
        key = name.lower()
        if key not in CsvOptions.model_fields:
            raise ConfigurationError(name)
        values[key] = value

    try:
        return CsvOptions(**values)
    except ValidationError as e:
        error = e.errors()[0]
        raise ConfigurationError(
            str(error["loc"][0]), f"Invalid option ({error['msg']})"
        ) from e


def _cell_from_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return [f"{key}: {item}" for key, item in value.items()]
    return value


def format_field(value: Any) -> str:
    """Render one value: None and falsy values are empty, except 0."""
    if value is True:
        return "true"
    if value is False or value is None:
        return ""
    if isinstance(value, numbers.Number) and value == 0:
        return "0"
    if not value:
        return ""
    return str(value)


class CsvDocument:
    """A CSV file under construction.

    Example::

        doc = CsvDocument(["name", "aliases"], {"qualifier": ""})
        doc.add_object({"name": "Bug", "aliases": ["Beetle", "Ant"]})
        doc.write_file("bugs.csv")

    Attributes:
        headers: Column names, in output order.
        options: Qualifier and delimiter.
        entries: Entries in the order they were added.
    """

    def __init__(
        self,
        headers: Mapping[str, Any] | Sequence[str],
        options: Mapping[str, Any] | None = None,
    ) -> None:
        """Create an empty document.

        Args:
            headers: Ordered header names, or a mapping whose keys (in
                iteration order) become the headers.
            options: Case-insensitive ``qualifier`` and ``delimiter``.

        Raises:
            ConfigurationError: For an unknown or invalid option.
        """
        if isinstance(headers, Mapping):
            self.headers: list[str] = list(headers.keys())
        else:
            self.headers = list(headers)

        self.options = _parse_options(options)
        self.entries: list[CsvEntry] = []

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        options: Mapping[str, Any] | None = None,
    ) -> CsvDocument:
        """Build a document from assembled records.

        Headers are every key seen, in first-seen order; records missing a
        key get an empty cell. Mapping values (split+map fields) become a
        list of ``"key: value"`` strings, one output row each.
        """
        records = list(records)
        headers: dict[str, None] = {}
        for record in records:
            headers.update(dict.fromkeys(record))

        doc = cls(list(headers), options)
        for record in records:
            doc.add_object(
                {
                    header: _cell_from_value(record.get(header))
                    for header in headers
                }
            )
        return doc

    @property
    def qualifier(self) -> str:
        return self.options.qualifier

    @property
    def delimiter(self) -> str:
        return self.options.delimiter

    def add_line(self, line: Sequence[Any]) -> CsvEntry:
        """Add an entry from cells in header order.

        Raises:
            CardinalityError: If ``line`` does not have one cell per header.
        """
        entry = CsvEntry(self.headers, line)
        self.entries.append(entry)
        return entry

    def add_object(self, obj: Mapping[str, Any]) -> CsvEntry:
        """Add an entry from a mapping of header to value.

        Raises:
            TypeError: If ``obj`` is not a mapping.
            CardinalityError: If ``obj`` does not have one key per header.
            UnknownFieldError: If a key is not one of the headers.
        """
        if not isinstance(obj, Mapping):
            raise TypeError(f"Expected a mapping, got {type(obj).__name__}")

        if len(obj) != len(self.headers):
            raise CardinalityError(len(self.headers), len(obj), "Object")

        entry = CsvEntry(self.headers)
        for key, value in obj.items():
            if key not in self.headers:
                raise UnknownFieldError(key, self.headers)
            entry.add(key, value)

        self.entries.append(entry)
        return entry

    def add_objects(self, objs: Iterable[Mapping[str, Any]]) -> None:
        for obj in objs:
            self.add_object(obj)

    def rows(self) -> list[list[Any]]:
        """Header row followed by every entry's expanded rows."""
        rows: list[list[Any]] = [list(self.headers)]
        for entry in self.entries:
            rows.extend(entry.output_rows())
        return rows

    @traced
    def to_text(self) -> str:
        """Serialise the document; there is no trailing newline."""
        qualifier = self.options.qualifier
        return "\n".join(
            self.options.delimiter.join(
                f"{qualifier}{format_field(value)}{qualifier}"
                for value in row
            )
            for row in self.rows()
        )

    def __str__(self) -> str:
        return self.to_text()

    def __len__(self) -> int:
        return len(self.entries)

    def write_file(self, path: str | Path) -> None:
        """Write the document to ``path`` in a single write.

        Raises:
            FileWriteError: If the file cannot be written.
        """
        write_file(path, self.to_text())
        logger.info(
            "Wrote %d entries (%d columns) to %s",
            len(self.entries),
            len(self.headers),
            path,
        )


def generate_csv(
    records: Iterable[Mapping[str, Any]],
    value_processor: Callable[[str, Any], str] | None = None,
    qualifier: str = '"',
) -> str:
    """Quick CSV text for flat records, one line per record.

    Headers come from the first record's keys. Qualifier characters are
    removed from values, and every line, the last included, ends with a
    newline. Lists and mappings are rendered by ``value_processor(header,
    value)``.

    Raises:
        CardinalityError: If a record has a different number of keys from
            the first one.
        TypeError: If a record holds a list or mapping and no
            ``value_processor`` was given.
    """
    records = list(records)
    if not records:
        return ""

    headers = list(records[0].keys())

    def qualify(text: str) -> str:
        if qualifier:
            text = text.replace(qualifier, "")
        return f"{qualifier}{text}{qualifier}"

    separator = f"{qualifier},{qualifier}"
    lines = [f"{qualifier}{separator.join(headers)}{qualifier}"]

    for record in records:
        if len(record) != len(headers):
            raise CardinalityError(len(headers), len(record), "Record")

        row = []
        for header in headers:
            value = record.get(header)
            if isinstance(value, (Mapping, list, tuple)):
                if value_processor is None:
                    raise TypeError(
                        f"Field {header!r} holds a {type(value).__name__}; "
                        "pass a value_processor to render it"
                    )
                value = value_processor(header, value)
            row.append(qualify("" if value is None else str(value)))

        lines.append(",".join(row))

    return "".join(f"{line}\n" for line in lines)
