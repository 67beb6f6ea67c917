"""
Tests for the link preview client against a mocked HTTP transport.

Run with: pytest tests/test_preview.py -v
"""

import asyncio
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cache import DisabledCache, InMemoryCache
from config import Settings, build_cache
from fetch import FetchError, fetch_html, make_client
from models import CrawlOptions
from preview import LinkPreview, PreviewError

PAGE = """
<html><head>
  <title>Example article</title>
  <meta name="description" content="An article about caching.">
  <meta property="og:image" content="/cover.png">
</head><body></body></html>
"""

# --- Fixtures ---


class Site:
    """Fake website that counts requests."""

    def __init__(self):
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        path = request.url.path
        if path == "/old":
            return httpx.Response(301, headers={"Location": "https://example.com/article"})
        if path == "/article":
            return httpx.Response(200, text=PAGE, headers={"Content-Type": "text/html; charset=utf-8"})
        if path == "/data.json":
            return httpx.Response(200, json={"a": 1})
        return httpx.Response(404, text="not found")


@pytest.fixture
def site():
    return Site()


@pytest.fixture
def cache():
    c = InMemoryCache(invalidation_timeout=60, cleanup_interval=3600)
    yield c
    c.close()


def make_preview(site: Site, cache=DisabledCache.instance) -> LinkPreview:
    return LinkPreview(cache=cache, client=make_client(transport=httpx.MockTransport(site)))


# --- Fetching ---


class TestFetch:

    def test_follows_redirects(self, site):
        async def run():
            async with make_client(transport=httpx.MockTransport(site)) as client:
                return await fetch_html("https://example.com/old", client)

        result = asyncio.run(run())
        assert result.final_url == "https://example.com/article"
        assert "Example article" in result.html

    @pytest.mark.parametrize(
        "url,message",
        [
            ("https://example.com/missing", "HTTP error 404"),
            ("https://example.com/data.json", "Unsupported content type"),
        ],
    )
    def test_errors(self, site, url, message):
        async def run():
            async with make_client(transport=httpx.MockTransport(site)) as client:
                await fetch_html(url, client)

        with pytest.raises(FetchError, match=message):
            asyncio.run(run())

    def test_invalid_url(self, site):
        async def run():
            async with make_client(transport=httpx.MockTransport(site)) as client:
                await fetch_html("https://example.com:bad/", client)

        with pytest.raises(FetchError, match="Error fetching"):
            asyncio.run(run())
        assert site.requests == []

    def test_timeout(self):
        def slow(request):
            raise httpx.ReadTimeout("too slow", request=request)

        async def run():
            async with make_client(transport=httpx.MockTransport(slow)) as client:
                await fetch_html("https://example.com/", client)

        with pytest.raises(FetchError, match="Timeout fetching"):
            asyncio.run(run())


# --- Preview client ---


class TestLinkPreview:

    def test_preview_from_text(self, site):
        preview = make_preview(site)
        response = asyncio.run(preview.preview("read this: https://example.com/old !"))

        assert response.url == "https://example.com/old"
        assert response.final_url == "https://example.com/article"
        assert response.title == "Example article"
        assert response.description == "An article about caching."
        assert response.image == "https://example.com/cover.png"

    def test_cache_hit_skips_network(self, site, cache):
        preview = make_preview(site, cache)

        async def run():
            first = await preview.preview("https://example.com/article")
            second = await preview.preview("https://example.com/article")
            return first, second

        first, second = asyncio.run(run())
        assert second is first
        assert len(site.requests) == 1

    def test_options_are_part_of_the_key(self, site, cache):
        preview = make_preview(site, cache)

        async def run():
            await preview.preview("https://example.com/article", CrawlOptions.TITLE)
            await preview.preview("https://example.com/article", CrawlOptions.ALL)

        asyncio.run(run())
        assert len(site.requests) == 2
        assert len(cache) == 2

    def test_disabled_cache_always_fetches(self, site):
        preview = make_preview(site)

        async def run():
            await preview.preview("https://example.com/article")
            await preview.preview("https://example.com/article")

        asyncio.run(run())
        assert len(site.requests) == 2

    def test_invalidate(self, site, cache):
        preview = make_preview(site, cache)

        async def run():
            await preview.preview("https://example.com/article")
            preview.invalidate("https://example.com/article")
            await preview.preview("https://example.com/article")

        asyncio.run(run())
        assert len(site.requests) == 2

    def test_failures_are_not_cached(self, site, cache):
        preview = make_preview(site, cache)

        with pytest.raises(FetchError):
            asyncio.run(preview.preview("https://example.com/missing"))
        assert len(cache) == 0

    def test_no_url(self, site):
        preview = make_preview(site)
        with pytest.raises(PreviewError, match="No URL found"):
            asyncio.run(preview.preview("hello there"))
        assert site.requests == []


# --- Configuration ---


class TestBuildCache:

    def test_disabled(self):
        assert build_cache(Settings(CACHE_ENABLED=False)) is DisabledCache.instance

    def test_in_memory(self):
        cache = build_cache(Settings(CACHE_TTL=42, CACHE_CLEANUP_INTERVAL=5))
        try:
            assert isinstance(cache, InMemoryCache)
            assert cache.invalidation_timeout == 42
            assert cache.cleanup_interval == 5
        finally:
            cache.close()

    def test_env(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL", "12.5")
        assert Settings().cache_ttl == 12.5
