"""Tests for the candi command line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from candi.cli import cli, describe_header
from candi.common.tracer import get_active_tracer, trace_logger


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def cases_file(tmp_path, cases_html):
    path = tmp_path / "cases.html"
    path.write_text(cases_html, encoding="utf-8")
    return path


class TestTableCommand:
    """candi table."""

    def test_csv_to_stdout(self, runner, cases_file) -> None:
        """Records are printed as CSV, lists spread over rows."""
        result = runner.invoke(
            cli,
            [
                "table",
                str(cases_file),
                "-H",
                "case",
                "-H",
                "",
                "-H",
                r"year//(\d{4})\\",
                "-H",
                r"tags{{;\s*}}",
                "--qualifier",
                "",
            ],
        )

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "case,year,tags",
            "BCC-2020-001,2020,contract",
            ",,appeal",
            "BCC-2021-017,2021,tort",
            "BCC-2022-042,2022,",
        ]

    def test_json_to_file(self, runner, cases_file, tmp_path) -> None:
        """JSON output keeps mappings and None values."""
        out = tmp_path / "out.json"

        result = runner.invoke(
            cli,
            [
                "table",
                str(cases_file),
                "-H",
                "case",
                "-H",
                r"plaintiff,,defendant[[(\w+) v\. (\w+)]]",
                "--format",
                "json",
                "-o",
                str(out),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Wrote 3 records" in result.output
        records = json.loads(out.read_text(encoding="utf-8"))
        assert records[0] == {
            "case": "BCC-2020-001",
            "plaintiff": "Ant",
            "defendant": "Beetle",
        }
        assert records[2]["plaintiff"] is None

    def test_table_without_tbody(self, runner, tmp_path) -> None:
        """Pages whose tables omit <tbody> still give their rows."""
        path = tmp_path / "plain.html"
        path.write_text(
            "<html><body><table>"
            "<tr><th>Name</th></tr>"
            "<tr><td>Ant</td></tr><tr><td>Bee</td></tr>"
            "</table></body></html>",
            encoding="utf-8",
        )

        result = runner.invoke(
            cli, ["table", str(path), "-H", "name", "--qualifier", ""]
        )

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["name", "Ant", "Bee"]

    def test_transform_failure_is_reported(self, runner, cases_file) -> None:
        """Candi errors become a clean CLI error."""
        result = runner.invoke(
            cli, ["table", str(cases_file), "-H", r"n//^(\d+)$\\"]
        )

        assert result.exit_code == 1
        assert "Data does not match transform pattern" in result.output

    def test_missing_table(self, runner, cases_file) -> None:
        """A table selector matching nothing is an error."""
        result = runner.invoke(
            cli,
            ["table", str(cases_file), "-H", "a", "--table-selector", "dl"],
        )

        assert result.exit_code == 1
        assert "HTML structure mismatch" in result.output

    def test_missing_file(self, runner, tmp_path) -> None:
        """An unreadable source is an error, not a traceback."""
        result = runner.invoke(
            cli, ["table", str(tmp_path / "nope.html"), "-H", "a"]
        )

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_browser_only_for_urls(self, runner, cases_file) -> None:
        """--browser is rejected for local files."""
        result = runner.invoke(
            cli, ["table", str(cases_file), "-H", "a", "--browser"]
        )

        assert result.exit_code == 2


class TestOtherCommands:
    """candi headers and candi analyze."""

    def test_headers(self, runner) -> None:
        """Each template is described on its own line."""
        result = runner.invoke(
            cli,
            ["headers", "name", r"a,,b[[(\w)(\w)]]", r"t{{;}}<<(\w)=(\w)>>"],
        )

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "'name': norm -> name"
        assert lines[1].startswith("'a,,b[[(\\\\w)(\\\\w)]]': multi -> a, b")
        assert "delimiter=';'" in lines[2]
        assert "map=" in lines[2]

    def test_headers_invalid(self, runner) -> None:
        """Invalid regex text is reported."""
        result = runner.invoke(cli, ["headers", "bad{{(}}"])

        assert result.exit_code == 1
        assert "Invalid pattern" in result.output

    def test_describe_header_transform(self) -> None:
        """Transform headers show their pattern."""
        line = describe_header(r"y//(\d+)\\")

        assert line.endswith(r"transform -> y pattern='(\\d+)'")

    def test_analyze(self, runner, cases_file) -> None:
        """Counts are printed per selector level."""
        result = runner.invoke(
            cli, ["analyze", str(cases_file), "table > tbody > tr"]
        )

        assert result.exit_code == 0, result.output
        assert "table > tbody > tr: 3" in result.output


class TestTracing:
    """--trace-file."""

    def test_trace_file(self, runner, cases_file, tmp_path) -> None:
        """Traced calls are written to the file and tracing stops after."""
        trace = tmp_path / "trace.log"

        result = runner.invoke(
            cli,
            [
                "--trace-file",
                str(trace),
                "table",
                str(cases_file),
                "-H",
                "case",
            ],
        )

        assert result.exit_code == 0, result.output
        lines = trace.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("Begin table_to_records(")
        assert any(line.startswith("End CsvDocument.to_text") for line in lines)
        assert get_active_tracer() is None
        assert trace_logger.handlers == []
        assert trace_logger.propagate
