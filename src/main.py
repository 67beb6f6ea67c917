#!/usr/bin/env python3
"""
lp-mcp: The Link Preview MCP Server

Builds link previews (title, description, images, icon, video) for URLs
found in text. Previews are cached in memory for a bounded time.

Environment variables:
    CACHE_ENABLED: Set to false to disable caching (default: true)
    CACHE_TTL: Cache TTL in seconds (default: 300)
    CACHE_CLEANUP_INTERVAL: Background cleanup period in seconds (default: 10)
"""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.shared.exceptions import McpError
from mcp.types import ErrorData

from config import build_cache, settings
from fetch import FetchError
from log import setup_logging
from models import CrawlOptions, Response
from preview import LinkPreview, PreviewError

mcp = FastMCP(
    "lp-mcp",
    instructions="""Link Preview MCP Server - Summarize the page behind a link.

Tools:
- preview_link(text, options?) → Preview of the first URL in text
- invalidate_link(text, options?) → Forget the cached preview for that URL

Options: title, description, images, icon, video, canonical_url, default, all""",
)

client = LinkPreview(cache=build_cache(settings))


# --- Helper Functions ---


def _parse_options(options: Optional[list[str]]) -> CrawlOptions:
    """Convert option names to CrawlOptions, raising McpError for unknown names."""
    try:
        return CrawlOptions.from_names(options)
    except ValueError as e:
        raise McpError(ErrorData(code=-32602, message=str(e)))


def _format_response(response: Response) -> str:
    """Render a preview as markdown."""
    lines = [f"# {response.title or response.final_url}", ""]
    if response.description:
        lines.append(response.description)
        lines.append("")

    lines.append(f"- URL: {response.final_url}")
    if response.canonical_url and response.canonical_url != response.final_url:
        lines.append(f"- Canonical: {response.canonical_url}")
    if response.image:
        lines.append(f"- Image: {response.image}")
    if len(response.images) > 1:
        lines.append(f"- Other images: {', '.join(response.images[1:])}")
    if response.icon:
        lines.append(f"- Icon: {response.icon}")
    if response.video:
        lines.append(f"- Video: {response.video}")

    return "\n".join(lines)


# --- Tools ---


@mcp.tool()
async def preview_link(text: str, options: Optional[list[str]] = None) -> str:
    """
    Get a preview of the first link found in some text.

    Args:
        text: A URL, or text containing one (e.g. a chat message)
        options: Parts to extract (title, description, images, icon, video,
                 canonical_url, all). Default: title, description, images

    Returns:
        Markdown formatted preview.
    """
    crawl_options = _parse_options(options)

    try:
        response = await client.preview(text, crawl_options)
    except PreviewError as e:
        raise McpError(ErrorData(code=-32602, message=str(e)))
    except FetchError as e:
        raise McpError(ErrorData(code=-32603, message=f"Failed to fetch page: {str(e)}"))

    return _format_response(response)


@mcp.tool()
async def invalidate_link(text: str, options: Optional[list[str]] = None) -> str:
    """
    Forget the cached preview of the first link found in some text.

    Args:
        text: A URL, or text containing one
        options: The same options that were passed to preview_link

    Returns:
        Confirmation message.
    """
    crawl_options = _parse_options(options)

    try:
        client.invalidate(text, crawl_options)
    except PreviewError as e:
        raise McpError(ErrorData(code=-32602, message=str(e)))

    return "Cached preview removed."


if __name__ == "__main__":
    setup_logging(settings.log_level)
    mcp.run()
