"""HTTP client and fetch utilities."""

from typing import NamedTuple, Optional

import httpx
from loguru import logger

from config import settings

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


class FetchError(Exception):
    """Raised when a page cannot be fetched."""


class FetchResult(NamedTuple):
    final_url: str
    html: str


def make_client(**kwargs) -> httpx.AsyncClient:
    """Create an async HTTP client with the configured timeout and User-Agent."""
    kwargs.setdefault("timeout", settings.http_timeout)
    kwargs.setdefault("follow_redirects", True)
    kwargs.setdefault("headers", {"User-Agent": settings.user_agent})
    return httpx.AsyncClient(**kwargs)


async def fetch_html(url: str, client: Optional[httpx.AsyncClient] = None) -> FetchResult:
    """Fetch HTML content from a URL, following redirects."""
    owned = client is None
    if owned:
        client = make_client()
    try:
        logger.info(f"Fetching {url}")
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(f"HTTP error {e.response.status_code} fetching {url}") from e
    except httpx.TimeoutException as e:
        raise FetchError(f"Timeout fetching {url}") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(f"Error fetching {url}: {str(e)}") from e
    finally:
        if owned:
            await client.aclose()

    content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type and content_type not in HTML_CONTENT_TYPES:
        raise FetchError(f"Unsupported content type '{content_type}' at {url}")

    return FetchResult(final_url=str(response.url), html=response.text)
