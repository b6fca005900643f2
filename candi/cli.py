"""candi CLI — pull tables out of HTML pages into CSV or JSON.

Usage:
    candi table page.html -H name -H "date//(\\d{4})\\\\"   # Local file
    candi table https://example.com/list -H name -o out.csv
    candi table https://example.com/list -H name --browser  # Render first
    candi fetch https://example.com/list -o list.html
    candi headers "a,,b[[(\\w+) (\\w+)]]" "tags{{;}}"        # Show compiled
    candi analyze page.html "table > tbody > tr > td"
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click

from candi.common.checked_html import CheckedHtmlElement, parse_html
from candi.common.exceptions import CandiException
from candi.common.fetch import CachingFetcher
from candi.common.files import get_file, write_json
from candi.common.tracer import TRACE, LoggingTracer, trace_logger
from candi.config import FetchConfig
from candi.data_types import (
    MultiHeader,
    SplitHeader,
    TransformHeader,
)
from candi.debug import analyze_selector
from candi.export.csv_document import CsvDocument
from candi.tables.headers import compile_header
from candi.tables.pipeline import table_to_records


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _fetch_config(no_cache: bool, cache_dir: str) -> FetchConfig:
    return FetchConfig(cache_dir=Path(cache_dir), use_cache=not no_cache)


def _render_with_browser(url: str) -> CheckedHtmlElement:
    try:
        from candi.browser.session import BrowserSession
    except ImportError as e:
        raise click.ClickException(
            f"Missing dependency: {e}. "
            "Install the 'browser' extra: pip install candi[browser]"
        ) from e

    async def _go() -> CheckedHtmlElement:
        async with BrowserSession.open() as session:
            await session.fetch_page(url)
            return await session.snapshot()

    return asyncio.run(_go())


def load_source(
    source: str,
    browser: bool = False,
    no_cache: bool = False,
    cache_dir: str = "cache",
) -> CheckedHtmlElement:
    """Parse SOURCE, which is either a URL or a local HTML file."""
    if not _is_url(source):
        if browser:
            raise click.BadParameter(
                "--browser only applies to URLs", param_hint="SOURCE"
            )
        return parse_html(get_file(source))

    if browser:
        return _render_with_browser(source)

    with CachingFetcher(_fetch_config(no_cache, cache_dir)) as fetcher:
        return fetcher.fetch_document(source)


def describe_header(template: str) -> str:
    """One line describing how a template compiles."""
    header = compile_header(template)
    if header is None:
        return f"{template!r}: skipped"

    line = f"{template!r}: {header.kind.value} -> {', '.join(header.names)}"
    match header:
        case TransformHeader(pattern=pattern) | MultiHeader(pattern=pattern):
            line += f" pattern={pattern.pattern!r}"
        case SplitHeader(delimiter=delimiter):
            line += f" delimiter={delimiter.pattern!r}"
    if header.map_pattern is not None:
        line += f" map={header.map_pattern.pattern!r}"
    return line


@click.group()
@click.version_option(package_name="candi")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
@click.option(
    "--trace-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a call trace of the table and CSV functions to this file.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, trace_file: str | None) -> None:
    """candi — irregular HTML tables to CSV."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if trace_file:
        handler = logging.FileHandler(trace_file, mode="w", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
        trace_logger.addHandler(handler)
        trace_logger.setLevel(TRACE)
        trace_logger.propagate = False

        def stop_tracing() -> None:
            trace_logger.removeHandler(handler)
            trace_logger.propagate = True
            handler.close()

        ctx.call_on_close(stop_tracing)
        ctx.with_resource(LoggingTracer())


@cli.command()
@click.argument("source")
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    required=True,
    help="Header template, one per column. An empty string skips a column.",
)
@click.option(
    "--table-selector",
    default="table",
    show_default=True,
    help="CSS selector for the table; exactly one must match.",
)
@click.option(
    "--rows",
    "row_selector",
    default=None,
    help=(
        "CSS selector for the data rows, relative to the table. "
        "Defaults to the body rows, with or without <tbody>."
    ),
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write to this file instead of standard output.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["csv", "json"]),
    default="csv",
    show_default=True,
)
@click.option("--qualifier", default='"', show_default=True)
@click.option("--delimiter", default=",", show_default=True)
@click.option(
    "--browser",
    is_flag=True,
    help="Render the page in a headless browser before reading it.",
)
@click.option("--no-cache", is_flag=True, help="Always fetch from the web.")
@click.option("--cache-dir", default="cache", show_default=True)
def table(
    source: str,
    headers: tuple[str, ...],
    table_selector: str,
    row_selector: str | None,
    output: str | None,
    output_format: str,
    qualifier: str,
    delimiter: str,
    browser: bool,
    no_cache: bool,
    cache_dir: str,
) -> None:
    """Convert the table in SOURCE (a URL or an HTML file) to records.

    \b
    Examples:
        candi table cases.html -H name -H "" -H "year//(\\d{4})\\\\"
        candi table cases.html -H name -H "tags{{,\\s*}}" --format json
    """
    try:
        page = load_source(source, browser, no_cache, cache_dir)
        element = page.checked_css(
            table_selector, "table", min_count=1, max_count=1
        )[0]
        records = table_to_records(
            element,
            [header or None for header in headers],
            row_selector=row_selector,
        )

        if output_format == "json":
            if output:
                write_json(output, records)
            else:
                click.echo(json.dumps(records, indent=2, ensure_ascii=False))
        else:
            doc = CsvDocument.from_records(
                records, {"qualifier": qualifier, "delimiter": delimiter}
            )
            if output:
                doc.write_file(output)
            else:
                click.echo(doc.to_text())

    except (CandiException, OSError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if output:
        click.echo(f"Wrote {len(records)} records to {output}")


@cli.command()
@click.argument("url")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Save the page to this file instead of printing it.",
)
@click.option("--no-cache", is_flag=True, help="Always fetch from the web.")
@click.option("--cache-dir", default="cache", show_default=True)
def fetch(url: str, output: str | None, no_cache: bool, cache_dir: str) -> None:
    """Fetch URL through the page cache."""
    try:
        with CachingFetcher(_fetch_config(no_cache, cache_dir)) as fetcher:
            if output:
                fetcher.fetch_as_file(url, output)
                click.echo(f"Saved {url} to {output}")
            else:
                click.echo(fetcher.fetch_as_text(url))
    except (CandiException, ValueError) as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("templates", nargs=-1, required=True)
def headers(templates: tuple[str, ...]) -> None:
    """Show how each header TEMPLATE compiles."""
    try:
        for template in templates:
            click.echo(describe_header(template))
    except CandiException as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("source")
@click.argument("selector")
@click.option("--separator", default=">", show_default=True)
@click.option("--no-cache", is_flag=True, help="Always fetch from the web.")
@click.option("--cache-dir", default="cache", show_default=True)
def analyze(
    source: str,
    selector: str,
    separator: str,
    no_cache: bool,
    cache_dir: str,
) -> None:
    """Show how many elements each step of SELECTOR matches in SOURCE."""
    try:
        page = load_source(source, no_cache=no_cache, cache_dir=cache_dir)
        analyze_selector(page, selector, separator)
    except (CandiException, OSError, ValueError) as e:
        raise click.ClickException(str(e)) from e


def main() -> None:
    """Entry point for the ``candi`` console script."""
    cli()

