"""Console helpers for poking at values and selectors while writing a scraper.

Colour names follow the chalk convention (``red``, ``bgBlue``,
``greenBright``, ``bold``...) and are translated to ``click.style``.
"""

from __future__ import annotations

import json
import pprint
from collections.abc import Iterable, Sequence
from typing import Any

import click

from candi.common.checked_html import CheckedHtmlElement
from candi.common.text import strip_ansi

COLORS = {
    "black",
    "red",
    "green",
    "yellow",
    "blue",
    "magenta",
    "cyan",
    "white",
}
COLOR_ALIASES = {"gray": "bright_black", "grey": "bright_black"}
STYLES = {
    "bold": "bold",
    "dim": "dim",
    "italic": "italic",
    "underline": "underline",
    "overline": "overline",
    "inverse": "reverse",
    "strikethrough": "strikethrough",
    "blink": "blink",
}

UL, UR, LL, LR = "╔", "╗", "╚", "╝"
HORIZONTAL, VERTICAL = "═", "║"


def _style_kwargs(tag: str) -> dict[str, Any]:
    name = "".join(tag.split()).lower()

    bright = "bright" in name
    name = name.replace("bright", "")

    background = name.startswith(("bg", "background"))
    name = name.removeprefix("background").removeprefix("bg")

    if not background and not bright and name in STYLES:
        return {STYLES[name]: True}

    if name in COLOR_ALIASES:
        value = COLOR_ALIASES[name]
    elif name in COLORS:
        value = f"bright_{name}" if bright else name
    else:
        raise ValueError(f"Invalid color tag: {tag}")

    return {"bg": value} if background else {"fg": value}


def color(text: Any, *tags: str) -> str:
    """Style ``text`` with chalk-style tags, applied left to right.

    Raises:
        ValueError: If a tag is not a known colour or style.
    """
    out = str(text)
    for tag in tags:
        out = click.style(out, **_style_kwargs(tag))
    return out


def pretty_array(
    items: Iterable[Any],
    separator: str = " ",
    element_color: str | None = None,
    separator_color: str | None = None,
) -> str:
    """Join ``items`` with ``separator``, colouring each part."""
    element_tags = (element_color,) if element_color else ()
    separator_tags = (separator_color,) if separator_color else ()
    return color(separator, *separator_tags).join(
        color(item, *element_tags) for item in items
    )


def debug(name: str, obj: Any, verbose: bool = False, depth: int = 1) -> None:
    """Print the type, value and (when verbose) structure of ``obj``."""
    click.echo(color(name, "blue"))
    click.echo(f"\t{color('Type', 'red')}: {type(obj).__name__}")

    if obj is None or isinstance(obj, (str, int, float, bool)):
        click.echo(f"\t{color('Value', 'red')}: {obj!r}")
        return

    try:
        rendered = json.dumps(obj, default=str)
    except (TypeError, ValueError):
        rendered = "Unavailable"
    click.echo(f"\t{color('JSON', 'red')}: {rendered}")

    if verbose:
        banner = color("----------==========", "yellow")
        click.echo(f"\t\t{banner} <{name}> {banner}")
        structure = pprint.pformat(obj, depth=depth, compact=True)
        for line in structure.splitlines():
            click.echo(f"\t\t\t{line}")
        click.echo(f"\t\t{banner} </{name}> {banner}")


def box(lines: str | Sequence[str]) -> str:
    """Draw a double-line box around ``lines``; returns what was printed.

    Width is measured without ANSI escapes, so styled text lines up.
    """
    if isinstance(lines, str):
        lines = lines.split("\n")

    lines = [line.strip() for line in lines]
    width = max((len(strip_ansi(line)) for line in lines), default=0)

    out = [UL + HORIZONTAL * width + UR]
    for line in lines:
        padding = " " * (width - len(strip_ansi(line)))
        out.append(VERTICAL + line + padding + VERTICAL)
    out.append(LL + HORIZONTAL * width + LR)

    text = "\n".join(out)
    click.echo(text)
    return text


def analyze_selector(
    root: CheckedHtmlElement, selector: str, separator: str = ">"
) -> list[int]:
    """Count matches for each prefix of a chained CSS selector.

    Prints one line per level, green while something matches and red once
    nothing does, which shows where a long selector stops matching.

    Returns:
        The match count at each level.
    """
    parts = [part.strip() for part in selector.split(separator)]
    counts: list[int] = []
    previous = 0

    for level in range(len(parts)):
        chain = parts[: level + 1]
        count = len(
            root.checked_css(
                f" {separator} ".join(chain), "selector prefix", min_count=0
            )
        )

        if count == 0 and previous >= 1:
            click.echo("-" * 53)

        colour = "green" if count else "red"
        line = pretty_array(chain, f" {separator} ", colour, "blue")
        if count:
            line += ": " + color(count, "yellow")
        click.echo(line)

        counts.append(count)
        previous = count

    return counts
