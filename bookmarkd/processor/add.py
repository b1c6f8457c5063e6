"""Add a single post to an owner's collection by URL."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

from ..article_text import serialize_article_content
from ..db import get_post, insert_link, insert_media, insert_post, post_exists, utc_now_iso
from ..link_utils import build_post_url, determine_link_type, extract_domain, is_status_link, parse_post_url
from ..models.snapshot import ArticleSnapshot
from .dependencies import build_quote_snapshot, store_referenced_post
from .enrichment import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY, Enricher, determine_category, enrich_with_retry

log = logging.getLogger(__name__)


class InvalidPostUrl(ValueError):
    """The URL is not a recognised post (status) URL."""


class EnrichmentUnavailable(RuntimeError):
    """The enrichment source returned no data for the post."""


@dataclass
class AddResult:
    post_id: str
    is_duplicate: bool
    post: sqlite3.Row | None = None
    category: str | None = None
    quoted_post_id: str | None = None


async def add_post_by_url(
    conn: sqlite3.Connection,
    owner_id: str,
    url: str | None,
    enrichment: Enricher,
    *,
    source: str = "manual",
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> AddResult:
    parsed = parse_post_url(url)
    if parsed is None:
        raise InvalidPostUrl(
            "Invalid post URL. Supported formats: twitter.com/user/status/123, x.com/user/status/123"
        )

    if post_exists(conn, owner_id, parsed.post_id):
        return AddResult(post_id=parsed.post_id, is_duplicate=True, post=get_post(conn, owner_id, parsed.post_id))

    enriched = await enrich_with_retry(
        enrichment, parsed.author, parsed.post_id, attempts=retry_attempts, delay=retry_delay
    )
    if enriched is None:
        raise EnrichmentUnavailable(f"Failed to fetch post {parsed.post_id}")

    now = utc_now_iso()
    author = enriched.author if enriched.author != "unknown" else parsed.author
    category = determine_category(enriched)

    snapshot = None
    quoted_post_id = None
    if enriched.quote is not None:
        quoted_post_id = enriched.quote.id
        snapshot = build_quote_snapshot(enriched.quote)
        if not post_exists(conn, owner_id, quoted_post_id):
            store_referenced_post(
                conn,
                owner_id,
                enriched.quote,
                source="quoted",
                default_category="text",
                processed_at=now,
            )
    elif enriched.article:
        snapshot = ArticleSnapshot(
            url=enriched.article.url,
            title=enriched.article.title,
            description=enriched.article.description,
            image_url=enriched.article.image_url,
        )

    inserted = insert_post(
        conn,
        owner_id,
        parsed.post_id,
        author,
        enriched.text,
        build_post_url(author, parsed.post_id),
        author_name=enriched.author_name,
        author_avatar_url=enriched.author_avatar_url,
        created_at=enriched.created_at or now,
        processed_at=now,
        category=category,
        source=source,
        is_quote=quoted_post_id is not None,
        quoted_post_id=quoted_post_id,
        snapshot=snapshot,
        raw=enriched.raw,
    )
    if not inserted:
        # Stored concurrently between the duplicate check and the insert
        conn.commit()
        return AddResult(post_id=parsed.post_id, is_duplicate=True, post=get_post(conn, owner_id, parsed.post_id))

    if enriched.media_all:
        for index, item in enumerate(enriched.media_all):
            insert_media(
                conn,
                owner_id,
                f"{parsed.post_id}_{index}",
                parsed.post_id,
                item.get("type") or "photo",
                item.get("url") or "",
                preview_url=item.get("thumbnail_url") or item.get("url"),
                width=item.get("width"),
                height=item.get("height"),
                duration_ms=int(item["duration"] * 1000) if item.get("duration") else None,
            )
    else:
        for index, photo in enumerate(enriched.photos):
            insert_media(
                conn,
                owner_id,
                f"{parsed.post_id}_photo_{index}",
                parsed.post_id,
                "photo",
                photo.get("url") or "",
                width=photo.get("width"),
                height=photo.get("height"),
            )
        for index, video in enumerate(enriched.videos):
            insert_media(
                conn,
                owner_id,
                f"{parsed.post_id}_video_{index}",
                parsed.post_id,
                "video",
                video.get("url") or "",
                preview_url=video.get("thumbnail_url"),
                width=video.get("width"),
                height=video.get("height"),
            )

    if enriched.article:
        insert_link(
            conn,
            owner_id,
            parsed.post_id,
            enriched.article.url,
            domain="x.com",
            link_type="article",
            preview_title=enriched.article.title,
            preview_description=enriched.article.description,
            preview_image_url=enriched.article.image_url,
            content_json=serialize_article_content(enriched.article.content),
        )

    for link in enriched.urls:
        expanded = link.get("expanded_url") or link.get("url")
        if not expanded or is_status_link(expanded):
            continue
        insert_link(
            conn,
            owner_id,
            parsed.post_id,
            expanded,
            original_url=link.get("url"),
            domain=link.get("domain") or extract_domain(expanded),
            link_type=determine_link_type(expanded),
        )

    conn.commit()
    log.info("Added post %s for %s (%s)", parsed.post_id, owner_id, category)

    return AddResult(
        post_id=parsed.post_id,
        is_duplicate=False,
        post=get_post(conn, owner_id, parsed.post_id),
        category=category,
        quoted_post_id=quoted_post_id,
    )
