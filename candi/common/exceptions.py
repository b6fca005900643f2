"""Exception types for table extraction and CSV emission.

Every error raised by candi derives from CandiException, which carries a
human-readable message plus a dict of context that is rendered into the
exception text. Column-level problems that are expected to happen on real
pages (a Multi pattern that does not match, a Split fragment that does not
fit its map pattern) are not errors and never reach this module.
"""

from __future__ import annotations

from typing import Any


class CandiException(Exception):
    """Base class for all candi errors.

    ``str()`` gives the message followed by one ``key: value`` line per
    context entry.

    Attributes:
        message: Human-readable description of the problem.
        context: Values that identify where it happened (template, cell,
            counts...).
    """

    def __init__(
        self, message: str, context: dict[str, Any] | None = None
    ) -> None:
        self.message = message
        self.context = dict(context or {})
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [self.message]
        if self.context:
            lines.append("Context:")
            lines.extend(
                f"  {key}: {value}" for key, value in self.context.items()
            )
        return "\n".join(lines)


class PatternError(CandiException, ValueError):
    """Raised when a header template holds a regex that does not compile.

    Attributes:
        template: The full header template.
        pattern: The regex text taken from between the brackets.
    """

    def __init__(self, template: str, pattern: str, error: str) -> None:
        self.template = template
        self.pattern = pattern
        super().__init__(
            f"Invalid pattern in header template: {error}",
            {"template": template, "pattern": pattern},
        )


class FatalValidationError(CandiException):
    """Raised when a Transform cell does not match its pattern.

    A Transform mismatch means the source format drifted, so the whole
    batch is abandoned instead of skipping the row.

    Attributes:
        cell: The cell value that failed to match.
        header: The compiled TransformHeader.
        column: Zero-based column index inside the row.
        row: Zero-based row index inside the batch, once known.
    """

    def __init__(
        self,
        cell: Any,
        header: Any,
        column: int,
        row: int | None = None,
    ) -> None:
        self.cell = cell
        self.header = header
        self.column = column
        self.row = row
        context: dict[str, Any] = {
            "field": getattr(header, "name", None),
            "pattern": getattr(
                getattr(header, "pattern", None), "pattern", None
            ),
            "cell": cell,
            "column": column,
        }
        if row is not None:
            context["row"] = row
        super().__init__("Data does not match transform pattern", context)

    def with_row(self, row: int) -> FatalValidationError:
        """Return a copy of this error annotated with the batch row index."""
        return FatalValidationError(self.cell, self.header, self.column, row)


class CardinalityError(CandiException, ValueError):
    """Raised when a row or object has the wrong number of fields.

    Attributes:
        expected: Number of headers.
        actual: Number of values supplied.
    """

    def __init__(self, expected: int, actual: int, what: str = "Input") -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{what} has {actual} values but expected {expected}",
            {"expected": expected, "actual": actual},
        )


class UnknownFieldError(CandiException, KeyError):
    """Raised when a key is not one of the configured headers.

    Attributes:
        field: The unrecognised key.
        headers: The configured headers.
    """

    def __init__(self, field: str, headers: list[str]) -> None:
        self.field = field
        self.headers = headers
        super().__init__(
            f"Could not find header {field!r}",
            {"field": field, "headers": headers},
        )

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise
        return self._format_message()


class ConfigurationError(CandiException, ValueError):
    """Raised for an unrecognised or invalid formatting option."""

    def __init__(self, option: str, reason: str = "Unrecognised option") -> None:
        self.option = option
        super().__init__(f"{reason}: {option}", {"option": option})


class FileWriteError(CandiException):
    """Raised when writing an output file fails.

    Attributes:
        path: The file that could not be written.
    """

    def __init__(self, path: str, error: OSError) -> None:
        self.path = path
        super().__init__(
            f"Could not write {path}: {error}",
            {"path": path, "errno": error.errno},
        )


class FetchError(CandiException):
    """Raised when fetching a URL fails or returns an error status.

    Attributes:
        url: The URL that was fetched.
        status_code: HTTP status, or None for transport failures.
    """

    def __init__(
        self, url: str, status_code: int | None = None, reason: str = ""
    ) -> None:
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            message = f"HTTP {status_code} from {url}"
        else:
            message = f"Request to {url} failed: {reason}"
        super().__init__(message, {"url": url, "status_code": status_code})


class BrowserSessionError(CandiException):
    """Raised for misuse of the browser session (no page, no selector)."""


class ElementNotFoundError(BrowserSessionError):
    """Raised when a selector finds no element in the current page."""

    def __init__(self, selector: str) -> None:
        self.selector = selector
        super().__init__(
            f"Could not find element: {selector}", {"selector": selector}
        )


class HTMLStructuralAssumptionException(CandiException):
    """A selector matched more or fewer elements than the page should have.

    Usually the site changed its markup. The attributes repeat what was
    asked for so a caller can decide whether to retry with another selector.

    Attributes:
        selector: The CSS selector or XPath.
        selector_type: "css" or "xpath".
        description: What the selector was meant to find.
        expected_min: Fewest matches accepted.
        expected_max: Most matches accepted (None = no limit).
        actual_count: Matches found; 0 when the selector did not parse.
        request_url: Page URL, when known.
    """

    def __init__(
        self,
        selector: str,
        selector_type: str,
        description: str,
        expected_min: int,
        expected_max: int | None,
        actual_count: int,
        request_url: str = "",
    ) -> None:
        self.selector = selector
        self.selector_type = selector_type
        self.description = description
        self.expected_min = expected_min
        self.expected_max = expected_max
        self.actual_count = actual_count
        self.request_url = request_url

        if expected_max is None:
            wanted = f"at least {expected_min}"
        elif expected_max == expected_min:
            wanted = f"exactly {expected_min}"
        else:
            wanted = f"{expected_min} to {expected_max}"

        context: dict[str, Any] = {selector_type: selector}
        if request_url:
            context["url"] = request_url

        super().__init__(
            f"HTML structure mismatch: {description!r} should match "
            f"{wanted} elements but matched {actual_count}",
            context,
        )
