"""Configuration models.

These Pydantic models hold the settings of the I/O collaborators (fetch
cache, browser) and the CSV formatting options. Unknown fields are rejected
so that a misspelt option fails loudly instead of being ignored.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator


class CsvOptions(BaseModel):
    """Formatting options for CsvDocument.

    Attributes:
        qualifier: String wrapped around every field; any falsy value
            (None included) for none.
        delimiter: String placed between fields.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    qualifier: str = '"'
    delimiter: str = ","

    @field_validator("qualifier", mode="before")
    @classmethod
    def _no_qualifier(cls, value: object) -> object:
        return value or ""

    @field_validator("delimiter")
    @classmethod
    def _delimiter_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("delimiter must not be empty")
        return value


class FetchConfig(BaseModel):
    """Settings for CachingFetcher.

    Attributes:
        cache_dir: Directory holding cached page bodies.
        ttl: How long a cached page stays fresh.
        timeout: HTTP timeout in seconds; None disables it.
        use_cache: Default for ``fetch_as_text(use_cache=None)``.
    """

    model_config = ConfigDict(extra="forbid")

    cache_dir: Path = Path("cache")
    ttl: timedelta = timedelta(weeks=1)
    timeout: float | None = 30.0
    use_cache: bool = True


class BrowserConfig(BaseModel):
    """Settings for BrowserSession.

    Attributes:
        browser_type: "chromium", "firefox" or "webkit".
        headless: Run without a visible window.
        viewport: Viewport size, e.g. {"width": 1280, "height": 720}.
        user_agent: Custom user agent (None = browser default).
        locale: Browser locale.
    """

    model_config = ConfigDict(extra="forbid")

    browser_type: str = "chromium"
    headless: bool = True
    viewport: dict[str, int] | None = None
    user_agent: str | None = None
    locale: str = "en-US"

    @field_validator("browser_type")
    @classmethod
    def _known_browser(cls, value: str) -> str:
        if value not in {"chromium", "firefox", "webkit"}:
            raise ValueError(f"unknown browser type {value!r}")
        return value
