"""Tests for CheckedHtmlElement.

Tests cover:
- Count checks for XPath and CSS selectors
- String results from XPath
- Invalid CSS selectors
- Children, inner and outer HTML
- Attribute delegation to the wrapped element
"""

from __future__ import annotations

import pytest

from candi.common.checked_html import CheckedHtmlElement, parse_html
from candi.common.exceptions import HTMLStructuralAssumptionException

SAMPLE_HTML = """
<html>
<body>
    <div id="content">
        <ul>
            <li class="bug">Ant</li>
            <li class="bug">Beetle</li>
            <li class="bug"><a href="/c">Cricket</a> &amp; co</li>
        </ul>
    </div>
</body>
</html>
"""


@pytest.fixture
def tree() -> CheckedHtmlElement:
    return parse_html(SAMPLE_HTML, "http://example.com/bugs")


class TestCheckedSelectors:
    """Selector results are checked against expected counts."""

    def test_css_within_bounds(self, tree) -> None:
        """Results are wrapped elements in document order."""
        items = tree.checked_css("li.bug", "bugs", min_count=3, max_count=3)

        assert [item.text_content() for item in items][:2] == ["Ant", "Beetle"]
        assert all(isinstance(item, CheckedHtmlElement) for item in items)

    def test_css_too_few(self, tree) -> None:
        """Too few results raise with the selector and counts."""
        with pytest.raises(HTMLStructuralAssumptionException) as exc_info:
            tree.checked_css("table", "case table")

        error = exc_info.value
        assert error.selector == "table"
        assert error.selector_type == "css"
        assert error.actual_count == 0
        assert error.request_url == "http://example.com/bugs"
        assert "at least 1" in str(error)

    def test_css_too_many(self, tree) -> None:
        """Too many results raise as well."""
        with pytest.raises(HTMLStructuralAssumptionException) as exc_info:
            tree.checked_css("li", "one bug", max_count=1)

        assert "between 1 and 1" not in str(exc_info.value)
        assert "exactly 1" in str(exc_info.value)

    def test_invalid_css(self, tree) -> None:
        """A selector that cannot be parsed is a structural error."""
        with pytest.raises(HTMLStructuralAssumptionException):
            tree.checked_css("li[", "broken")

    def test_xpath_elements(self, tree) -> None:
        """XPath results keep only elements by default."""
        items = tree.checked_xpath("//li", "bugs", min_count=3)

        assert len(items) == 3

    def test_xpath_strings(self, tree) -> None:
        """Text and attribute results come back as strings."""
        hrefs = tree.checked_xpath_text("//a/@href", "links")

        assert hrefs == ["/c"]

    def test_xpath_zero_allowed(self, tree) -> None:
        """min_count=0 accepts no results."""
        assert tree.checked_xpath("//table", "tables", min_count=0) == []


class TestMarkup:
    """Children and markup of an element."""

    def test_children(self, tree) -> None:
        """Only element children are returned."""
        ul = tree.checked_css("ul", "list")[0]

        assert [child.tag for child in ul.children()] == ["li", "li", "li"]

    def test_inner_html(self, tree) -> None:
        """Inner HTML keeps child markup and escapes text."""
        third = tree.checked_css("li", "bugs")[2]

        assert third.inner_html() == '<a href="/c">Cricket</a> &amp; co'

    def test_inner_html_of_text_only_element(self, tree) -> None:
        """Text-only elements give their (escaped) text."""
        first = tree.checked_css("li", "bugs")[0]

        assert first.inner_html() == "Ant"

    def test_outer_html(self, tree) -> None:
        """Outer HTML is the element without its tail."""
        first = tree.checked_css("li", "bugs")[0]

        assert first.outer_html() == '<li class="bug">Ant</li>'

    def test_delegation(self, tree) -> None:
        """Unknown attributes go to the lxml element."""
        link = tree.checked_css("a", "link")[0]

        assert link.get("href") == "/c"
        assert link.tag == "a"
        assert link.element is link._element
