"""Pydantic models for bookmarkd configuration."""

from __future__ import annotations

from pydantic import BaseModel


class SyncConfig(BaseModel):
    """Sync orchestrator configuration."""

    cooldown_minutes: float = 60
    item_delay_seconds: float = 0.15
    ping_interval_seconds: float = 10
    max_pages: int = 10
    full_page_size: int = 100
    incremental_page_size: int = 50


class EnrichmentConfig(BaseModel):
    """Enrichment source configuration."""

    base_url: str = "https://api.fxtwitter.com"
    user_agent: str = "bookmarkd/1.0"
    timeout_seconds: float = 5.0
    retry_attempts: int = 2
    retry_delay_seconds: float = 0.2


class SourceConfig(BaseModel):
    """Bookmark source (X API) configuration."""

    api_base: str = "https://api.twitter.com/2"
    timeout_seconds: float = 30.0
    access_token_env: str = "BOOKMARKD_ACCESS_TOKEN"
    default_owner_env: str = "BOOKMARKD_OWNER_ID"


class FeedConfig(BaseModel):
    """Feed paging configuration."""

    default_limit: int = 50
    max_limit: int = 100


class PathsConfig(BaseModel):
    """Paths configuration."""

    data_dir: str | None = None


class BookmarkdConfig(BaseModel):
    """Top-level bookmarkd configuration."""

    sync: SyncConfig = SyncConfig()
    enrichment: EnrichmentConfig = EnrichmentConfig()
    source: SourceConfig = SourceConfig()
    feed: FeedConfig = FeedConfig()
    paths: PathsConfig = PathsConfig()
