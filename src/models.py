"""
Data models for the Link Preview MCP server.
"""

from enum import IntFlag
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class CrawlOptions(IntFlag):
    """Parts of a page the preview client should extract."""

    NONE = 0
    TITLE = 1
    DESCRIPTION = 2
    IMAGES = 4
    ICON = 8
    VIDEO = 16
    CANONICAL_URL = 32

    DEFAULT = TITLE | DESCRIPTION | IMAGES
    ALL = TITLE | DESCRIPTION | IMAGES | ICON | VIDEO | CANONICAL_URL

    @classmethod
    def from_names(cls, names: Optional[Iterable[str]]) -> "CrawlOptions":
        """
        Combine flag names (case-insensitive) into a single value.

        Returns DEFAULT when no names are given. Raises ValueError for unknown names.
        """
        if not names:
            return cls.DEFAULT
        result = cls.NONE
        for name in names:
            key = name.strip().upper()
            if key not in cls.__members__:
                available = ", ".join(m.lower() for m in cls.__members__)
                raise ValueError(f"Unknown option '{name}'. Available: {available}")
            result |= cls[key]
        return result


class Response(BaseModel):
    """A computed link preview. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="URL as requested")
    final_url: str = Field(description="URL after following redirects")
    canonical_url: Optional[str] = Field(default=None, description="<link rel=canonical> or og:url")
    title: Optional[str] = Field(default=None, description="Page title")
    description: Optional[str] = Field(default=None, description="Page description")
    image: Optional[str] = Field(default=None, description="Main preview image URL")
    images: tuple[str, ...] = Field(default=(), description="All candidate image URLs")
    icon: Optional[str] = Field(default=None, description="Favicon URL")
    video: Optional[str] = Field(default=None, description="Embedded video URL")
