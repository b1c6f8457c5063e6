"""X API v2 bookmarks client."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..config import load_settings
from .errors import SourceAuthError, SourceError
from .extractors import SourcePost

log = logging.getLogger(__name__)

MAX_RESULTS_LIMIT = 100

TWEET_FIELDS = (
    "created_at",
    "author_id",
    "entities",
    "referenced_tweets",
    "attachments",
    "public_metrics",
    "note_tweet",
)
USER_FIELDS = ("username", "name", "profile_image_url")
EXPANSIONS = ("author_id", "referenced_tweets.id", "attachments.media_keys")
MEDIA_FIELDS = ("url", "preview_image_url", "type", "width", "height", "duration_ms", "alt_text")


@dataclass
class BookmarkPage:
    posts: list[SourcePost] = field(default_factory=list)
    next_token: str | None = None
    result_count: int = 0


def build_bookmarks_params(max_results: int, pagination_token: str | None = None) -> dict[str, Any]:
    """Query parameters for one bookmarks page request."""
    params: dict[str, Any] = {
        "max_results": max(1, min(max_results, MAX_RESULTS_LIMIT)),
        "tweet.fields": ",".join(TWEET_FIELDS),
        "user.fields": ",".join(USER_FIELDS),
        "expansions": ",".join(EXPANSIONS),
        "media.fields": ",".join(MEDIA_FIELDS),
    }
    if pagination_token:
        params["pagination_token"] = pagination_token
    return params


def parse_bookmarks_response(payload: dict[str, Any]) -> BookmarkPage:
    """Resolve expansions and build a :class:`BookmarkPage`."""
    includes = payload.get("includes") or {}
    users = {str(u.get("id")): u for u in includes.get("users") or []}
    media = {str(m.get("media_key")): m for m in includes.get("media") or []}

    posts = [SourcePost.from_api_json(tweet, users, media) for tweet in payload.get("data") or []]

    meta = payload.get("meta") or {}
    return BookmarkPage(
        posts=posts,
        next_token=meta.get("next_token") or None,
        result_count=meta.get("result_count") or 0,
    )


class BookmarkSource:
    """Fetch an owner's bookmarks one page at a time."""

    def __init__(
        self,
        api_base: str = "https://api.twitter.com/2",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> BookmarkSource:
        settings = load_settings(config).source
        return cls(api_base=settings.api_base, timeout=settings.timeout_seconds)

    async def fetch(
        self,
        owner_id: str,
        access_token: str,
        max_results: int = MAX_RESULTS_LIMIT,
        pagination_token: str | None = None,
    ) -> BookmarkPage:
        url = f"{self.api_base}/users/{owner_id}/bookmarks"
        params = build_bookmarks_params(max_results, pagination_token)
        headers = {"Authorization": f"Bearer {access_token}"}

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise SourceError(f"Bookmark request failed: {e}") from e

        if response.status_code in (401, 403):
            raise SourceAuthError(f"Bookmark source rejected credentials (HTTP {response.status_code})")
        if response.status_code >= 400:
            raise SourceError(f"Bookmark source returned HTTP {response.status_code}: {response.text[:200]}")

        try:
            payload = response.json()
        except ValueError as e:
            raise SourceError("Bookmark source returned invalid JSON") from e

        page = parse_bookmarks_response(payload)
        log.debug("Fetched %d bookmarks for %s (next=%s)", len(page.posts), owner_id, page.next_token)
        return page
