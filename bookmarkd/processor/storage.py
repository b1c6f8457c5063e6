"""Persist one new bookmark with enrichment, references, links and media."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any

from ..article_text import serialize_article_content
from ..db import (
    get_links_for_post,
    get_media_for_post,
    insert_link,
    insert_media,
    insert_post,
    update_link_preview,
    utc_now_iso,
)
from ..fetcher import SourcePost
from ..link_utils import build_post_url, categorize_by_urls, determine_link_type, extract_domain, is_status_link
from ..media import build_media_items
from ..models.snapshot import ArticleSnapshot, Snapshot
from .context import RunContext
from .dependencies import resolve_quote, resolve_retweet
from .enrichment import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY, Enricher, enrich_with_retry, enrichment_category

log = logging.getLogger(__name__)


@dataclass
class StoredPost:
    """Summary of a stored bookmark, streamed with its processing event."""

    id: str
    author: str
    author_name: str | None
    author_avatar_url: str | None
    text: str
    post_url: str
    category: str
    created_at: str | None
    processed_at: str
    inserted: bool = True
    is_quote: bool = False
    is_retweet: bool = False
    quoted_post_id: str | None = None
    media: list[dict[str, Any]] = field(default_factory=list)
    article_preview: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author,
            "authorName": self.author_name,
            "authorProfileImageUrl": self.author_avatar_url,
            "text": self.text,
            "tweetUrl": self.post_url,
            "createdAt": self.created_at,
            "processedAt": self.processed_at,
            "category": self.category,
            "isRead": False,
            "isQuote": self.is_quote,
            "isRetweet": self.is_retweet,
            "quotedTweetId": self.quoted_post_id,
            "media": self.media or None,
            "articlePreview": self.article_preview,
            "tags": [],
        }


def _store_source_links(conn: sqlite3.Connection, owner_id: str, post: SourcePost) -> None:
    for url in post.urls:
        if not url.expanded_url or is_status_link(url.expanded_url):
            continue
        insert_link(
            conn,
            owner_id,
            post.id,
            url.expanded_url,
            original_url=url.url,
            domain=extract_domain(url.expanded_url),
            link_type=determine_link_type(url.expanded_url),
        )


def _store_source_media(conn: sqlite3.Connection, owner_id: str, post: SourcePost) -> None:
    for media in post.media:
        insert_media(
            conn,
            owner_id,
            f"{post.id}_{media.media_key}",
            post.id,
            media.media_type,
            media.url or media.preview_url or "",
            preview_url=media.preview_url,
            width=media.width,
            height=media.height,
            duration_ms=media.duration_ms,
            alt_text=media.alt_text,
        )


async def save_post(
    conn: sqlite3.Connection,
    ctx: RunContext,
    post: SourcePost,
    enrichment: Enricher,
    *,
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> StoredPost:
    """Store a bookmark the owner does not have yet.

    Enrichment, quote and retweet failures degrade the stored data but never
    fail the item; database errors propagate.
    """
    now = utc_now_iso()
    author = post.author
    post_url = build_post_url(post.author_username, post.id)

    category = categorize_by_urls(post.expanded_urls)
    author_name = post.author_name
    author_avatar_url = post.author_avatar_url

    enriched = await enrich_with_retry(enrichment, author, post.id, attempts=retry_attempts, delay=retry_delay)
    if enriched is not None:
        author_name = author_name or enriched.author_name
        author_avatar_url = author_avatar_url or enriched.author_avatar_url
        category = enrichment_category(enriched, category)

    snapshot: Snapshot | None = None
    quoted_post_id = None

    retweet_id = post.reference("retweeted")
    if retweet_id:
        snapshot = await resolve_retweet(enrichment, retweet_id)

    quote_id = post.reference("quoted")
    if quote_id:
        resolution = await resolve_quote(conn, ctx, enrichment, quote_id, processed_at=now)
        if resolution is not None:
            quoted_post_id = resolution.quoted_post_id
            snapshot = resolution.snapshot

    if snapshot is None and enriched is not None and enriched.article:
        snapshot = ArticleSnapshot(
            url=enriched.article.url,
            title=enriched.article.title,
            description=enriched.article.description,
            image_url=enriched.article.image_url,
        )

    inserted = insert_post(
        conn,
        ctx.owner_id,
        post.id,
        author,
        post.text,
        post_url,
        author_name=author_name,
        author_avatar_url=author_avatar_url,
        created_at=post.created_at,
        processed_at=now,
        category=category,
        source="sync",
        is_reply=post.is_reply,
        is_quote=post.is_quote,
        quoted_post_id=quoted_post_id,
        is_retweet=post.is_retweet,
        snapshot=snapshot,
        raw=post.to_raw(),
    )
    ctx.mark_inserted(post.id)

    if inserted:
        _store_source_links(conn, ctx.owner_id, post)
        _store_source_media(conn, ctx.owner_id, post)

        if enriched is not None and enriched.article:
            article = enriched.article
            insert_link(
                conn,
                ctx.owner_id,
                post.id,
                article.url,
                domain="x.com",
                link_type="article",
                preview_title=article.title,
                preview_description=article.description,
                preview_image_url=article.image_url,
                content_json=serialize_article_content(article.content),
            )

        if enriched is not None and enriched.external:
            external = enriched.external
            existing = next(
                (link for link in get_links_for_post(conn, ctx.owner_id, post.id) if link["expanded_url"] == external.url),
                None,
            )
            if existing is None:
                insert_link(
                    conn,
                    ctx.owner_id,
                    post.id,
                    external.url,
                    domain=extract_domain(external.url),
                    link_type="article",
                    preview_title=external.title,
                    preview_description=external.description,
                    preview_image_url=external.image_url,
                )
            else:
                update_link_preview(
                    conn,
                    existing["id"],
                    preview_title=external.title,
                    preview_description=external.description,
                    preview_image_url=external.image_url,
                )
    else:
        log.debug("Post %s already stored for %s", post.id, ctx.owner_id)

    conn.commit()

    article_preview = None
    if enriched is not None and enriched.article:
        article_preview = {"title": enriched.article.title, "imageUrl": enriched.article.image_url}

    return StoredPost(
        id=post.id,
        author=author,
        author_name=author_name,
        author_avatar_url=author_avatar_url,
        text=post.text,
        post_url=post_url,
        category=category,
        created_at=post.created_at,
        processed_at=now,
        inserted=inserted,
        is_quote=post.is_quote,
        is_retweet=post.is_retweet,
        quoted_post_id=quoted_post_id,
        media=build_media_items(author, post.id, get_media_for_post(conn, ctx.owner_id, post.id)),
        article_preview=article_preview,
    )
