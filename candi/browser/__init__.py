"""Playwright-based browser session.

Pages rendered in the browser are handed to the rest of candi as parsed
lxml snapshots, never as live handles.
"""

from candi.browser.session import BrowserSession

__all__ = ["BrowserSession"]
