"""HTTP fetching with a simple on-disk cache.

Pages are cached under ``FetchConfig.cache_dir`` using the last path
segment of the URL as the file name (``.html`` is appended when that segment
has no extension). A cached page older than ``FetchConfig.ttl`` is deleted
and fetched again.

Example::

    with CachingFetcher(FetchConfig(cache_dir=Path("cache"))) as fetcher:
        page = fetcher.fetch_document("https://example.com/cases")
        records = table_to_records(page, headers)
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Any

import httpx

from candi.common.checked_html import CheckedHtmlElement, parse_html
from candi.common.exceptions import FetchError
from candi.common.files import get_file, mk_dir, write_file
from candi.config import FetchConfig

logger = logging.getLogger(__name__)

_PATH_SEGMENT = re.compile(r"/[^/]+")
_EXTENSION = re.compile(r"\.\w+")


class CachingFetcher:
    """Fetches URLs as text through an httpx.Client, caching the bodies.

    Example::

        fetcher = CachingFetcher()
        html = fetcher.fetch_as_text("https://example.com/list")
        fetcher.close()
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Cache and timeout settings (defaults apply when None).
            transport: Optional httpx transport, e.g. httpx.MockTransport.
        """
        self.config = config or FetchConfig()
        self._client = httpx.Client(
            timeout=self.config.timeout,
            transport=transport,
            follow_redirects=True,
        )

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> CachingFetcher:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def cache_path(self, url: str) -> Path:
        """The cache file used for ``url``.

        Raises:
            ValueError: If the URL has no path segment to name the file.
        """
        segments = _PATH_SEGMENT.findall(url)
        if not segments:
            raise ValueError(f"Cannot derive a cache file name from {url!r}")

        name = segments[-1][1:]
        if not _EXTENSION.search(name):
            name += ".html"

        return self.config.cache_dir / name

    def is_expired(self, path: Path) -> bool:
        """True once ``path`` is at least ``ttl`` old."""
        modified = path.stat().st_mtime
        return modified + self.config.ttl.total_seconds() <= time.time()

    def fetch_as_text(self, url: str, use_cache: bool | None = None) -> str:
        """Fetch ``url`` and return the body as text.

        Args:
            url: Absolute URL.
            use_cache: Override ``FetchConfig.use_cache`` for this call.

        Returns:
            The response body.

        Raises:
            FetchError: On transport errors and 4xx/5xx responses.
        """
        if use_cache is None:
            use_cache = self.config.use_cache

        cache = self.cache_path(url) if use_cache else None

        if cache is not None and cache.exists():
            if self.is_expired(cache):
                logger.info("Cache expiring for %s", url)
                cache.unlink()
            else:
                logger.debug("Cache hit for %s (%s)", url, cache)
                return get_file(cache)

        logger.debug("Fetching %s", url)
        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(url, reason=str(e)) from e

        if response.status_code >= 400:
            raise FetchError(url, response.status_code)

        text = response.text

        if cache is not None:
            mk_dir(cache.parent)
            write_file(cache, text)

        return text

    def fetch_as_file(self, url: str, path: str | Path) -> None:
        """Fetch ``url`` (through the cache) and save the body to ``path``."""
        write_file(path, self.fetch_as_text(url))

    def fetch_document(self, url: str) -> CheckedHtmlElement:
        """Fetch ``url`` and parse it into a CheckedHtmlElement."""
        return parse_html(self.fetch_as_text(url), url)
