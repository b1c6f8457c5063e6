"""Assemble one page of an owner's feed from batched, owner-scoped reads."""

from __future__ import annotations

import asyncio
import math
import sqlite3
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from ..article_text import parse_article_content
from ..db import (
    FEED_FILTERS,
    count_posts,
    count_read,
    decode_snapshot,
    get_connection,
    get_feed_posts,
    get_last_sync_started_at,
    get_links_for_posts,
    get_media_for_posts,
    get_posts_by_ids,
    get_posts_quoting,
    get_read_ids,
    get_tags_for_posts,
)
from ..link_utils import expand_urls
from ..media import build_media_items
from ..models.snapshot import ArticleSnapshot
from .helpers import (
    build_article_preview,
    build_fallback_article_preview,
    has_x_article_link,
    select_article_link,
    serialize_link,
)

T = TypeVar("T")

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


@dataclass
class FeedQuery:
    page: int = 1
    limit: int = DEFAULT_LIMIT
    filter_type: str = "all"
    unread_only: bool = True
    search: str | None = None
    tags: list[str] = field(default_factory=list)

    def normalized(self, max_limit: int = MAX_LIMIT) -> FeedQuery:
        return FeedQuery(
            page=max(1, self.page),
            limit=max(1, min(self.limit, max_limit)),
            filter_type=self.filter_type if self.filter_type in FEED_FILTERS else "all",
            unread_only=self.unread_only,
            search=(self.search or "").strip() or None,
            tags=[t for t in (tag.strip().lower() for tag in self.tags) if t],
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class FeedPage:
    items: list[dict[str, Any]]
    page: int
    limit: int
    total: int
    total_posts: int
    unread_posts: int
    last_sync_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": self.items,
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "totalPages": math.ceil(self.total / self.limit) if self.limit else 0,
            },
            "stats": {"total": self.total_posts, "unread": self.unread_posts},
            "lastSyncAt": self.last_sync_at,
        }


@dataclass
class _Related:
    media: dict[str, list[sqlite3.Row]] = field(default_factory=dict)
    links: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    tags: dict[str, list[str]] = field(default_factory=dict)
    read_ids: set[str] = field(default_factory=set)


def _read(db_path: Path, fn: Callable[[sqlite3.Connection], T]) -> T:
    with get_connection(db_path, readonly=True) as conn:
        return fn(conn)


async def _read_async(db_path: Path, fn: Callable[[sqlite3.Connection], T]) -> T:
    return await asyncio.to_thread(_read, db_path, fn)


async def _load_related(db_path: Path, owner_id: str, post_ids: Iterable[str]) -> _Related:
    """Media, links, tags and read status for exactly *post_ids*, loaded concurrently."""
    ids = list(dict.fromkeys(post_ids))
    if not ids:
        return _Related()

    media, links, tags, read_ids = await asyncio.gather(
        _read_async(db_path, lambda conn: get_media_for_posts(conn, owner_id, ids)),
        _read_async(db_path, lambda conn: get_links_for_posts(conn, owner_id, ids)),
        _read_async(db_path, lambda conn: get_tags_for_posts(conn, owner_id, ids)),
        _read_async(db_path, lambda conn: get_read_ids(conn, owner_id, ids)),
    )
    return _Related(
        media=media,
        links={post_id: [dict(row) for row in rows] for post_id, rows in links.items()},
        tags=tags,
        read_ids=read_ids,
    )


def build_feed_item(row: sqlite3.Row, related: _Related) -> dict[str, Any]:
    """Shape one stored post for the feed (without quoted/parent embeds)."""
    post_id = row["id"]
    author = row["author"]
    links = related.links.get(post_id, [])
    is_x_article = has_x_article_link(links)

    snapshot = decode_snapshot(row["snapshot_kind"], row["snapshot_json"])
    quote_context = None
    retweet_context = None
    if snapshot.kind == "quote":
        quote_context = snapshot.model_dump(by_alias=True, exclude={"kind"})
    elif snapshot.kind == "retweet":
        retweet_context = snapshot.model_dump(by_alias=True, exclude={"kind"})

    article_preview = None
    article_content = None
    article_link = select_article_link(links)
    if article_link is not None:
        article_preview = build_article_preview(article_link, is_x_article)
        article_content = parse_article_content(article_link.get("content_json"))
    elif isinstance(snapshot, ArticleSnapshot) and snapshot.url:
        article_preview = {
            "title": snapshot.title,
            "description": snapshot.description,
            "imageUrl": snapshot.image_url,
            "url": snapshot.url,
            "domain": "x.com",
            "isXArticle": True,
        }
    elif is_x_article:
        article_preview = build_fallback_article_preview(author, post_id)

    media = build_media_items(author, post_id, related.media.get(post_id, []))

    return {
        "id": post_id,
        "author": author,
        "authorName": row["author_name"],
        "authorProfileImageUrl": row["author_avatar_url"],
        "text": expand_urls(row["text"] or "", links),
        "tweetUrl": row["post_url"],
        "createdAt": row["created_at"],
        "processedAt": row["processed_at"],
        "category": "article" if is_x_article else row["category"],
        "source": row["source"],
        "isRead": post_id in related.read_ids,
        "isQuote": bool(row["is_quote"]),
        "quoteContext": quote_context,
        "quotedTweetId": row["quoted_post_id"],
        "quotedTweet": None,
        "isRetweet": bool(row["is_retweet"]),
        "retweetContext": retweet_context,
        "media": media or None,
        "links": [serialize_link(link) for link in links] or None,
        "articlePreview": article_preview,
        "articleContent": article_content,
        "isXArticle": is_x_article,
        "tags": related.tags.get(post_id, []),
        "parentTweets": None,
    }


def _merge(*parts: _Related) -> _Related:
    merged = _Related()
    for part in parts:
        merged.media.update(part.media)
        merged.links.update(part.links)
        merged.tags.update(part.tags)
        merged.read_ids |= part.read_ids
    return merged


async def assemble_feed(db_path: Path, owner_id: str, query: FeedQuery) -> FeedPage:
    """Build one feed page with quoted posts and quoting (parent) posts attached.

    Every read is scoped to the owner and bounded by the page's ids.
    """
    query = query.normalized()

    def _page(conn: sqlite3.Connection):
        return get_feed_posts(
            conn,
            owner_id,
            filter_type=query.filter_type,
            unread_only=query.unread_only,
            search=query.search,
            tags=query.tags,
            limit=query.limit,
            offset=query.offset,
        )

    def _stats(conn: sqlite3.Connection):
        return count_posts(conn, owner_id), count_read(conn, owner_id), get_last_sync_started_at(conn, owner_id)

    (rows, total), (total_posts, read_posts, last_sync_at) = await asyncio.gather(
        _read_async(db_path, _page),
        _read_async(db_path, _stats),
    )

    page_ids = [row["id"] for row in rows]
    quoted_ids = [row["quoted_post_id"] for row in rows if row["quoted_post_id"]]

    page_related, quoted_rows, parent_rows = await asyncio.gather(
        _load_related(db_path, owner_id, page_ids),
        _read_async(db_path, lambda conn: get_posts_by_ids(conn, owner_id, quoted_ids)),
        _read_async(db_path, lambda conn: get_posts_quoting(conn, owner_id, page_ids)),
    )

    loaded = set(page_ids)
    nested_ids = [i for i in (*quoted_rows.keys(), *(row["id"] for row in parent_rows)) if i not in loaded]
    nested_related = await _load_related(db_path, owner_id, nested_ids)
    related = _merge(nested_related, page_related)

    quoted_items = {post_id: build_feed_item(row, related) for post_id, row in quoted_rows.items()}

    parents_by_quoted: dict[str, list[dict[str, Any]]] = {}
    for parent in parent_rows:
        parents_by_quoted.setdefault(parent["quoted_post_id"], []).append(build_feed_item(parent, related))

    items = []
    for row in rows:
        item = build_feed_item(row, related)
        quoted_id = row["quoted_post_id"]
        if quoted_id and quoted_id in quoted_items:
            item["quotedTweet"] = quoted_items[quoted_id]
        if row["id"] in parents_by_quoted:
            item["parentTweets"] = parents_by_quoted[row["id"]]
        items.append(item)

    return FeedPage(
        items=items,
        page=query.page,
        limit=query.limit,
        total=total,
        total_posts=total_posts,
        unread_posts=max(0, total_posts - read_posts),
        last_sync_at=last_sync_at,
    )
