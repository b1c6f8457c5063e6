"""Pydantic models for the bookmarkd application."""

from __future__ import annotations

from .api import (
    AddPostRequest,
    CooldownResponse,
    StatsResponse,
    TagCount,
    TagRequest,
)
from .config import (
    BookmarkdConfig,
    EnrichmentConfig,
    FeedConfig,
    PathsConfig,
    SourceConfig,
    SyncConfig,
)
from .snapshot import (
    ArticleSnapshot,
    LinkSummary,
    MediaSummary,
    NoSnapshot,
    QuoteSnapshot,
    RetweetSnapshot,
    Snapshot,
)

__all__ = [
    "AddPostRequest",
    "ArticleSnapshot",
    "BookmarkdConfig",
    "CooldownResponse",
    "EnrichmentConfig",
    "FeedConfig",
    "LinkSummary",
    "MediaSummary",
    "NoSnapshot",
    "PathsConfig",
    "QuoteSnapshot",
    "RetweetSnapshot",
    "Snapshot",
    "SourceConfig",
    "StatsResponse",
    "SyncConfig",
    "TagCount",
    "TagRequest",
]
