"""lxml elements whose selector lookups state how many matches they expect.

A table that moved or vanished shows up as a wrong match count at the
lookup that depends on it, instead of as an empty record list several steps
later::

    page = parse_html(text, url)
    table = page.checked_css("table.cases", "case table", max_count=1)[0]
    rows = table.checked_css("tbody tr", "case rows", min_count=0)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from xml.sax.saxutils import escape

from lxml import html
from lxml.html import HtmlElement

from candi.common.exceptions import HTMLStructuralAssumptionException


def parse_html(content: str | bytes, url: str = "") -> CheckedHtmlElement:
    """Parse a document or a single-element fragment.

    Args:
        content: HTML text.
        url: Where the text came from; only used in error messages.
    """
    return CheckedHtmlElement(html.fromstring(content), url)


class CheckedHtmlElement:
    """An HtmlElement plus count-checked ``checked_css``/``checked_xpath``.

    Anything not defined here (``text_content()``, ``get()``, ``tag``...) is
    looked up on the wrapped element.
    """

    def __init__(self, element: HtmlElement, request_url: str = "") -> None:
        self._element = element
        self._request_url = request_url

    @property
    def element(self) -> HtmlElement:
        """The wrapped lxml element."""
        return self._element

    def _wrap(self, element: HtmlElement) -> CheckedHtmlElement:
        return CheckedHtmlElement(element, self._request_url)

    def _structure_error(
        self,
        selector: str,
        selector_type: str,
        description: str,
        bounds: tuple[int, int | None],
        actual_count: int,
    ) -> HTMLStructuralAssumptionException:
        return HTMLStructuralAssumptionException(
            selector=selector,
            selector_type=selector_type,
            description=description,
            expected_min=bounds[0],
            expected_max=bounds[1],
            actual_count=actual_count,
            request_url=self._request_url,
        )

    def _select(
        self,
        run: Callable[[], list[Any]],
        selector: str,
        selector_type: str,
        description: str,
        bounds: tuple[int, int | None],
    ) -> list[Any]:
        try:
            results = run()
        except Exception as e:
            # lxml/cssselect raise several unrelated types for bad selectors
            raise self._structure_error(
                selector, selector_type, description, bounds, 0
            ) from e

        low, high = bounds
        if len(results) < low or (high is not None and len(results) > high):
            raise self._structure_error(
                selector, selector_type, description, bounds, len(results)
            )
        return results

    def checked_css(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[CheckedHtmlElement]:
        """Elements matching a CSS selector, in document order.

        Args:
            selector: CSS selector, relative to this element.
            description: What is being selected, for the error message.
            min_count: Fewest matches accepted.
            max_count: Most matches accepted, or None for no limit.

        Raises:
            HTMLStructuralAssumptionException: If the match count is out of
                bounds or the selector cannot be parsed.
        """
        results = self._select(
            lambda: self._element.cssselect(selector),
            selector,
            "css",
            description,
            (min_count, max_count),
        )
        return [self._wrap(result) for result in results]

    def checked_xpath(
        self,
        xpath: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[CheckedHtmlElement]:
        """Elements matching an XPath expression (see checked_css).

        Non-element results (text, attributes) are not counted.
        """
        results = self._select(
            lambda: [
                r for r in self._element.xpath(xpath)
                if isinstance(r, HtmlElement)
            ],
            xpath,
            "xpath",
            description,
            (min_count, max_count),
        )
        return [self._wrap(result) for result in results]

    def checked_xpath_text(
        self,
        xpath: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[str]:
        """String results (text nodes, attribute values) of an XPath."""
        return self._select(
            lambda: [
                str(r) for r in self._element.xpath(xpath)
                if isinstance(r, str)
            ],
            xpath,
            "xpath",
            description,
            (min_count, max_count),
        )

    def children(self) -> list[CheckedHtmlElement]:
        """Direct child elements in source order (comments excluded)."""
        return [
            self._wrap(child)
            for child in self._element
            if isinstance(child, HtmlElement)
        ]

    def inner_html(self) -> str:
        """Markup between the element's opening and closing tags."""
        parts = [escape(self._element.text)] if self._element.text else []
        parts.extend(
            html.tostring(child, encoding="unicode")
            for child in self._element
        )
        return "".join(parts)

    def outer_html(self) -> str:
        """Markup of the element itself, without its tail text."""
        return html.tostring(
            self._element, encoding="unicode", with_tail=False
        )

    def __getattr__(self, name: str) -> Any:
        return getattr(self._element, name)
