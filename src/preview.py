"""Link preview client: find a URL, fetch it, extract metadata, cache the result."""

from typing import Optional

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from cache import Cache, DisabledCache
from fetch import fetch_html, make_client
from models import CrawlOptions, Response
from parsers import build_response, extract_url


class PreviewError(Exception):
    """Raised when no preview can be produced for the given text."""


class LinkPreview:
    """
    Builds previews for links found in text.

    Successful previews are stored in `cache`; the default DisabledCache
    makes every call go to the network.
    """

    def __init__(self, cache: Cache = DisabledCache.instance, client: Optional[httpx.AsyncClient] = None):
        self.cache = cache
        self._owns_client = client is None
        self._client = client or make_client()

    def _require_url(self, text: str) -> str:
        url = extract_url(text)
        if url is None:
            raise PreviewError(f"No URL found in '{text}'")
        return url

    async def preview(self, text: str, options: CrawlOptions = CrawlOptions.DEFAULT) -> Response:
        """Return the preview for the first URL in `text`, using the cache if possible."""
        url = self._require_url(text)

        cached = self.cache.get(url, options)
        if cached is not None:
            logger.debug(f"Cache hit for {url}")
            return cached

        result = await fetch_html(url, self._client)
        soup = BeautifulSoup(result.html, "html.parser")
        response = build_response(url, result.final_url, soup, options)

        self.cache.put(url, options, response)
        return response

    def invalidate(self, text: str, options: CrawlOptions = CrawlOptions.DEFAULT) -> None:
        """Drop any cached preview for the first URL in `text`."""
        self.cache.put(self._require_url(text), options, None)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
