"""
Configuration for the Link Preview MCP server.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cache import Cache, DisabledCache, InMemoryCache


class Settings(BaseSettings):
    """
    MCP server configuration loaded from environment variables.

    Environment variables:
        CACHE_ENABLED: Set to false to disable response caching. Default: true
        CACHE_TTL: Seconds a cached preview stays valid. Default: 300
        CACHE_CLEANUP_INTERVAL: Seconds between background evictions. Default: 10
        HTTP_TIMEOUT: Timeout for fetching pages, in seconds. Default: 30
        USER_AGENT: User-Agent header sent when fetching pages
        LOG_LEVEL: Loguru level for the stderr sink. Default: INFO
    """

    model_config = SettingsConfigDict(populate_by_name=True)

    cache_enabled: bool = Field(
        default=True,
        alias="CACHE_ENABLED",
        description="Whether previews are cached in memory"
    )

    cache_ttl: float = Field(
        default=300.0,  # 5 minutes
        gt=0,
        alias="CACHE_TTL",
        description="Cache TTL in seconds"
    )

    cache_cleanup_interval: float = Field(
        default=10.0,
        gt=0,
        alias="CACHE_CLEANUP_INTERVAL",
        description="Interval between background cache cleanups in seconds"
    )

    http_timeout: float = Field(
        default=30.0,
        gt=0,
        alias="HTTP_TIMEOUT",
        description="HTTP timeout in seconds"
    )

    user_agent: str = Field(
        default="lp-mcp/1.0 (Link Preview MCP Server)",
        alias="USER_AGENT",
        description="User-Agent header for outgoing requests"
    )

    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Minimum log level"
    )


# Global settings instance
settings = Settings()


def build_cache(config: Settings = settings) -> Cache:
    """Create the response cache described by the settings."""
    if not config.cache_enabled:
        return DisabledCache.instance
    return InMemoryCache(
        invalidation_timeout=config.cache_ttl,
        cleanup_interval=config.cache_cleanup_interval,
    )
