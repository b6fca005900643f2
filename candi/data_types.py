"""Data types for header templates, rows and records.

A header template is a string that names an output field and may embed an
extraction rule. Compiling a template produces exactly one HeaderSpec
variant:

1. NormHeader - the cell is copied to the field as-is
2. TransformHeader - ``name//pattern\\\\``, the field is capture group 1
3. MultiHeader - ``a,,b,,c[[pattern]]``, one capture group per name
4. SplitHeader - ``name{{delimiter}}``, the cell is split into a list

A ``<<pattern>>`` map rule may appear in any template. It is recorded on
every variant but only SplitHeader acts on it, turning the split fragments
into a key/value mapping.

The variants are frozen so a compiled header list can be shared by any
number of row batches.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Union


class HeaderKind(Enum):
    """Extraction modes, in resolution priority order."""

    TRANSFORM = "transform"
    MULTI = "multi"
    SPLIT = "split"
    NORM = "norm"


@dataclass(frozen=True)
class NormHeader:
    """Direct 1:1 mapping of a cell to a field.

    Attributes:
        name: The output field name (the whole template).
        map_pattern: Map rule found in the template; inert for this kind.
    """

    name: str
    map_pattern: re.Pattern[str] | None = None

    @property
    def kind(self) -> HeaderKind:
        return HeaderKind.NORM

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name,)


@dataclass(frozen=True)
class TransformHeader:
    """Field is capture group 1 of ``pattern``; a mismatch is fatal.

    Attributes:
        name: The output field name.
        pattern: Regex with (at least) one capture group.
        map_pattern: Map rule found in the template; inert for this kind.
    """

    name: str
    pattern: re.Pattern[str]
    map_pattern: re.Pattern[str] | None = None

    @property
    def kind(self) -> HeaderKind:
        return HeaderKind.TRANSFORM

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name,)


@dataclass(frozen=True)
class MultiHeader:
    """One cell populating several fields from one pattern's groups.

    Attributes:
        names: Output field names, group N+1 feeding ``names[N]``.
        pattern: Regex with one capture group per name.
        map_pattern: Map rule found in the template; inert for this kind.
    """

    names: tuple[str, ...]
    pattern: re.Pattern[str]
    map_pattern: re.Pattern[str] | None = None

    @property
    def kind(self) -> HeaderKind:
        return HeaderKind.MULTI


@dataclass(frozen=True)
class SplitHeader:
    """Cell split by a delimiter regex, optionally mapped to key/values.

    Attributes:
        name: The output field name.
        delimiter: Regex used to split the cell.
        map_pattern: Regex with two capture groups (key, value) applied to
            every fragment, or None to keep the fragments as a list.
    """

    name: str
    delimiter: re.Pattern[str]
    map_pattern: re.Pattern[str] | None = None

    @property
    def kind(self) -> HeaderKind:
        return HeaderKind.SPLIT

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name,)


HeaderSpec = Union[NormHeader, TransformHeader, MultiHeader, SplitHeader]

# A cell is the text of one column, or a pre-split list of strings
Cell = Union[str, list[str]]
Row = Sequence[Cell]

# Split+map yields a mapping, Split yields a list, Multi may yield None
Value = Union[str, list[str], dict[str, str], None]
Record = dict[str, Value]
