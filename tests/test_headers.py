"""Tests for the header template compiler.

Tests cover:
- Each template kind and the fields it extracts
- Resolution priority when several markers appear in one template
- Map rules attached to any kind
- Skipped columns
- Invalid regex text
"""

from __future__ import annotations

import dataclasses

import pytest

from candi.common.exceptions import PatternError
from candi.data_types import (
    HeaderKind,
    MultiHeader,
    NormHeader,
    SplitHeader,
    TransformHeader,
)
from candi.tables.headers import compile_header, compile_headers


class TestTemplateKinds:
    """Each template syntax compiles to its own variant."""

    def test_plain_name_is_norm(self) -> None:
        """A template without markers is a Norm header named after itself."""
        header = compile_header("Case Number")

        assert header == NormHeader(name="Case Number")
        assert header.kind is HeaderKind.NORM
        assert header.names == ("Case Number",)
        assert header.map_pattern is None

    def test_transform(self) -> None:
        """name//regex\\\\ compiles to a Transform header."""
        header = compile_header(r"year//Filed (\d{4})\\")

        assert isinstance(header, TransformHeader)
        assert header.name == "year"
        assert header.pattern.pattern == r"Filed (\d{4})"
        assert header.kind is HeaderKind.TRANSFORM

    def test_multi(self) -> None:
        """Names before [[regex]] are split on ',,'."""
        header = compile_header(r"first,,middle,,last[[(\w+) (\w+) (\w+)]]")

        assert isinstance(header, MultiHeader)
        assert header.names == ("first", "middle", "last")
        assert header.pattern.pattern == r"(\w+) (\w+) (\w+)"
        assert header.kind is HeaderKind.MULTI

    def test_multi_with_single_name(self) -> None:
        """A Multi template without ',,' has one name."""
        header = compile_header(r"docket[[No\. (\d+)]]")

        assert isinstance(header, MultiHeader)
        assert header.names == ("docket",)

    def test_split(self) -> None:
        """name{{regex}} compiles to a Split header without a map rule."""
        header = compile_header(r"tags{{,\s*}}")

        assert isinstance(header, SplitHeader)
        assert header.name == "tags"
        assert header.delimiter.pattern == r",\s*"
        assert header.map_pattern is None

    def test_split_with_map(self) -> None:
        """A <<regex>> rule after a Split becomes its map pattern."""
        header = compile_header(r"attrs{{;}}<<(\w+)=(\w+)>>")

        assert isinstance(header, SplitHeader)
        assert header.name == "attrs"
        assert header.delimiter.pattern == ";"
        assert header.map_pattern.pattern == r"(\w+)=(\w+)"


class TestPriority:
    """Transform beats Multi, which beats Split."""

    def test_transform_beats_multi(self) -> None:
        """A template with Transform and Multi markers is a Transform."""
        header = compile_header(r"a,,b[[(x)(y)]]//(z)\\")

        assert isinstance(header, TransformHeader)
        assert header.name == "a,,b[[(x)(y)]]"
        assert header.pattern.pattern == "(z)"

    def test_multi_beats_split(self) -> None:
        """A template with Multi and Split markers is a Multi."""
        header = compile_header(r"a,,b{{;}}[[(\w)(\w)]]")

        assert isinstance(header, MultiHeader)
        assert header.names == ("a", "b{{;}}")

    def test_map_on_norm_is_recorded_but_name_is_whole_template(self) -> None:
        """A map rule alone leaves a Norm header carrying the pattern."""
        header = compile_header(r"plain<<(\w+)=(\w+)>>")

        assert isinstance(header, NormHeader)
        assert header.name == r"plain<<(\w+)=(\w+)>>"
        assert header.map_pattern.pattern == r"(\w+)=(\w+)"

    def test_map_on_transform_is_recorded(self) -> None:
        """The map rule is attached to a Transform too."""
        header = compile_header(r"n//(\d+)\\<<(a)(b)>>")

        assert isinstance(header, TransformHeader)
        assert header.map_pattern is not None


class TestCompileHeaders:
    """Compiling a list of templates."""

    def test_order_and_skips_preserved(self) -> None:
        """None templates compile to None at the same position."""
        specs = compile_headers(["a", None, r"b{{,}}"])

        assert len(specs) == 3
        assert specs[0] == NormHeader(name="a")
        assert specs[1] is None
        assert isinstance(specs[2], SplitHeader)

    def test_compile_header_none(self) -> None:
        """compile_header(None) is None."""
        assert compile_header(None) is None

    def test_specs_are_immutable(self) -> None:
        """Compiled specs cannot be modified."""
        header = compile_header("a")

        with pytest.raises(dataclasses.FrozenInstanceError):
            header.name = "b"  # type: ignore[misc]


class TestInvalidPatterns:
    """Regex text that does not compile raises PatternError."""

    def test_invalid_split_delimiter(self) -> None:
        """The error names the template and the offending regex."""
        with pytest.raises(PatternError) as exc_info:
            compile_header("bad{{(}}")

        assert exc_info.value.template == "bad{{(}}"
        assert exc_info.value.pattern == "("
        assert "bad{{(}}" in str(exc_info.value)

    def test_invalid_map_pattern(self) -> None:
        """An invalid map rule fails even when the header is a Norm."""
        with pytest.raises(PatternError):
            compile_header("name<<[a->>")

    def test_pattern_error_is_value_error(self) -> None:
        """PatternError can be caught as ValueError."""
        with pytest.raises(ValueError):
            compile_headers(["ok", r"broken//(\d\\"])
