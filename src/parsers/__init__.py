"""Parsers for URLs in free text and preview metadata in HTML."""

from parsers.metadata import (
    build_response,
    extract_canonical_url,
    extract_description,
    extract_icon,
    extract_images,
    extract_title,
    extract_video,
)
from parsers.url import extract_url, resolve_url

__all__ = [
    # URL handling
    "extract_url",
    "resolve_url",
    # Metadata extraction
    "extract_title",
    "extract_description",
    "extract_images",
    "extract_icon",
    "extract_video",
    "extract_canonical_url",
    "build_response",
]
