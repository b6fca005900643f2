"""String clean-up helpers shared by the table pipeline and the CLI."""

from __future__ import annotations

import re
from typing import Any

# Glyphs some sources use as bullet/checkbox decoration
DISALLOWED = ("▣",)

_EDGE_WHITESPACE = re.compile(r"^\s+|\s+$")
_WHITESPACE_RUN = re.compile(r"\s\s+")
_EMPTY = re.compile(r"^\s*$")
_ANSI_ESCAPE = re.compile(
    r"[\u001b\u009b][\[()#;?]*(?:[0-9]{1,4}(?:;[0-9]{0,4})*)?"
    r"[0-9A-ORZcf-nqry=><]"
)
_NONWORD = re.compile(r"\W")


def sanitise(text: str) -> str:
    """Normalise scraped cell text.

    Removes disallowed glyphs, trims leading/trailing whitespace and
    collapses every run of two or more whitespace characters into a
    single space.

    Args:
        text: Raw text content.

    Returns:
        The cleaned text.

    Example::

        >>> sanitise("  Bug\\n\\t  Court \\u25a3 ")
        'Bug Court'
    """
    for glyph in DISALLOWED:
        text = text.replace(glyph, "")

    text = _EDGE_WHITESPACE.sub("", text)
    return _WHITESPACE_RUN.sub(" ", text)


def strip_ansi(text: str) -> str:
    """Remove ANSI colour/control sequences and trim the result."""
    return _ANSI_ESCAPE.sub("", text).strip()


def is_empty_string(value: Any) -> bool:
    """True for None, non-strings, and strings holding only whitespace."""
    if not value or not isinstance(value, str):
        return True
    return _EMPTY.match(value) is not None


def array_to_string(value: Any, separator: str = ", ") -> Any:
    """Join a list into one string; anything else is returned unchanged."""
    if not value or not isinstance(value, list):
        return value
    return separator.join(str(item) for item in value)


def remove_nonword_characters(text: str) -> str:
    """Drop every character that is not a letter, digit or underscore."""
    return _NONWORD.sub("", text)
