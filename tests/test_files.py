"""Tests for the file helpers."""

from __future__ import annotations

import pytest

from candi.common.exceptions import FileWriteError
from candi.common.files import (
    exists,
    get_file,
    get_obj_from_file,
    mk_dir,
    write_file,
    write_json,
)


class TestFiles:
    """Reading and writing text and JSON."""

    def test_write_then_read(self, tmp_path) -> None:
        """Text is written as UTF-8 and replaces previous content."""
        path = tmp_path / "out.txt"

        write_file(path, "first")
        write_file(path, "Käfer")

        assert get_file(path) == "Käfer"

    def test_write_json_pretty(self, tmp_path) -> None:
        """Pretty JSON is tab-indented and keeps non-ASCII text."""
        path = tmp_path / "out.json"

        write_json(path, {"name": "Käfer"})

        assert get_file(path) == '{\n\t"name": "Käfer"\n}'
        assert get_obj_from_file(path) == {"name": "Käfer"}

    def test_write_json_compact(self, tmp_path) -> None:
        """Compact JSON is a single line."""
        path = tmp_path / "out.json"

        write_json(path, [1, 2], pretty=False)

        assert get_file(path) == "[1, 2]"

    def test_write_failure(self, tmp_path) -> None:
        """A missing directory raises FileWriteError naming the path."""
        path = tmp_path / "missing" / "out.txt"

        with pytest.raises(FileWriteError) as exc_info:
            write_file(path, "x")

        assert exc_info.value.path == str(path)
        assert str(path) in str(exc_info.value)

    def test_mk_dir_and_exists(self, tmp_path) -> None:
        """Directories are created with their parents, repeatedly."""
        path = tmp_path / "a" / "b"

        assert not exists(path)
        mk_dir(path)
        mk_dir(path)
        assert exists(path)
