"""Pydantic models for FastAPI request and response schemas."""

from __future__ import annotations

from pydantic import BaseModel


class CooldownResponse(BaseModel):
    """Whether an owner may start a sync now."""

    canSync: bool
    cooldownRemaining: int
    lastSyncAt: str | None = None


class TagCount(BaseModel):
    """A tag with the number of posts carrying it."""

    tag: str
    count: int


class StatsResponse(BaseModel):
    """Per-owner collection statistics."""

    total: int
    unread: int
    read: int
    categories: dict[str, int] = {}
    withMedia: int = 0


class TagRequest(BaseModel):
    """Request body naming a single tag."""

    tag: str | None = None


class AddPostRequest(BaseModel):
    """Request body for adding a post by URL."""

    url: str | None = None
    source: str = "manual"
