"""Playwright browser session for pages that need JavaScript.

The session owns one browser and one browser context. Pages opened with
``fetch_page()`` become the *current page*, which element lookups use when
no ancestor is passed. ``snapshot()`` serialises the rendered DOM and parses
it with lxml, so the table pipeline never touches live browser handles.

Example::

    async with BrowserSession.open(BrowserConfig(headless=True)) as session:
        await session.fetch_page("https://example.com/cases")
        title = await session.get_text("h1")
        page = await session.snapshot()

    records = table_to_records(page, headers)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Union

from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    async_playwright,
)

from candi.common.checked_html import CheckedHtmlElement, parse_html
from candi.common.exceptions import (
    BrowserSessionError,
    ElementNotFoundError,
)
from candi.config import BrowserConfig

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

SearchRoot = Union[Page, ElementHandle]


class BrowserSession:
    """A browser, its context and the page lookups default to.

    Use ``BrowserSession.open()`` rather than the constructor so that
    Playwright is started and stopped properly.

    Attributes:
        browser: The launched browser.
        context: Browser context new pages are opened in.
        headless: Whether the browser has no visible window.
        current_page: Page used when no ancestor is given, if any.
    """

    def __init__(
        self,
        browser: Browser,
        context: BrowserContext,
        headless: bool = True,
    ) -> None:
        self.browser = browser
        self.context = context
        self.headless = headless
        self.current_page: Page | None = None
        self.closed = False

    @classmethod
    @asynccontextmanager
    async def open(
        cls, config: BrowserConfig | None = None
    ) -> AsyncIterator[BrowserSession]:
        """Launch a browser and yield a session bound to it.

        Args:
            config: Browser settings (defaults apply when None).

        Yields:
            The session. The browser is closed when the block exits.
        """
        config = config or BrowserConfig()

        playwright = await async_playwright().start()
        try:
            launcher = getattr(playwright, config.browser_type)
            browser: Browser = await launcher.launch(headless=config.headless)

            try:
                context_kwargs: dict[str, Any] = {"locale": config.locale}
                if config.viewport:
                    context_kwargs["viewport"] = config.viewport
                if config.user_agent:
                    context_kwargs["user_agent"] = config.user_agent

                context = await browser.new_context(**context_kwargs)
                session = cls(browser, context, headless=config.headless)
                logger.debug(
                    "Started %s (headless=%s)",
                    config.browser_type,
                    config.headless,
                )

                yield session

            finally:
                await browser.close()

        finally:
            await playwright.stop()

    async def fetch_page(self, url: str, set_current: bool = True) -> Page:
        """Open ``url`` in a new page.

        Args:
            url: Absolute URL.
            set_current: Make the new page the current page.

        Returns:
            The loaded page.
        """
        page = await self.context.new_page()
        await page.goto(url)
        logger.debug("Loaded %s", url)

        if set_current:
            self.current_page = page

        return page

    def with_page(self, page: Page) -> None:
        """Make ``page`` the current page."""
        self.current_page = page

    def _search_root(self, ancestor: SearchRoot | None) -> SearchRoot:
        if ancestor is not None:
            return ancestor
        if self.current_page is not None:
            return self.current_page
        raise BrowserSessionError("No ancestor given and no current page set")

    async def get_element(
        self, selector: str, ancestor: SearchRoot | None = None
    ) -> ElementHandle | None:
        """First element matching ``selector``, or None.

        Args:
            selector: CSS (or Playwright) selector.
            ancestor: Page or element to search in; defaults to the
                current page.

        Raises:
            BrowserSessionError: If ``selector`` is empty or there is no
                page to search.
        """
        if not selector:
            raise BrowserSessionError("No selector given")
        return await self._search_root(ancestor).query_selector(selector)

    async def get_elements(
        self, selector: str, ancestor: SearchRoot | None = None
    ) -> list[ElementHandle]:
        """Every element matching ``selector`` (see get_element)."""
        if not selector:
            raise BrowserSessionError("No selector given")
        return await self._search_root(ancestor).query_selector_all(selector)

    async def find_element(
        self, element: ElementHandle | str | None
    ) -> ElementHandle:
        """Resolve a selector to an element; elements pass through.

        Raises:
            BrowserSessionError: If nothing was given.
            ElementNotFoundError: If the selector matches nothing.
        """
        if not element:
            raise BrowserSessionError("No element given")

        if not isinstance(element, str):
            return element

        found = await self.get_element(element)
        if found is None:
            raise ElementNotFoundError(element)
        return found

    async def get_attribute(
        self, element: ElementHandle | str, name: str
    ) -> Any:
        """JSON value of a DOM property of an element or selector."""
        handle = await self.find_element(element)
        prop = await handle.get_property(name)
        if prop is None:
            return None
        return await prop.json_value()

    async def get_text(self, element: ElementHandle | str) -> Any:
        """``textContent`` of an element or selector."""
        return await self.get_attribute(element, "textContent")

    async def snapshot(self, page: Page | None = None) -> CheckedHtmlElement:
        """Parse the rendered DOM of ``page`` (default: current page).

        Raises:
            BrowserSessionError: If no page is given and none is current.
        """
        page = page or self.current_page
        if page is None:
            raise BrowserSessionError("No page given and no current page set")

        content = await page.content()
        return parse_html(content, page.url)

    async def done(self) -> None:
        """Close the browser, unless it is showing a window.

        A visible browser is left open so the page can still be inspected;
        it is closed when the ``open()`` block exits.
        """
        if self.headless and not self.closed:
            await self.browser.close()
            self.closed = True
