"""Quote and retweet resolution (one hop)."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

from ..article_text import serialize_article_content
from ..db import insert_link, insert_media, insert_post
from ..fetcher import EnrichedPost
from ..link_utils import build_post_url
from ..models.snapshot import LinkSummary, MediaSummary, QuoteSnapshot, RetweetSnapshot
from .context import RunContext
from .enrichment import Enricher, enrichment_category

log = logging.getLogger(__name__)

# Placeholder author accepted by the enrichment source when the real one is unknown
UNKNOWN_AUTHOR = "i"


@dataclass
class QuoteResolution:
    quoted_post_id: str
    snapshot: QuoteSnapshot
    stored: bool = False


def _media_summary(enriched: EnrichedPost) -> MediaSummary | None:
    summary = enriched.media_summary()
    if summary is None:
        return None
    return MediaSummary(**summary)


def build_retweet_snapshot(enriched: EnrichedPost, post_id: str | None = None) -> RetweetSnapshot:
    return RetweetSnapshot(
        tweet_id=post_id or enriched.id,
        author=enriched.author,
        author_name=enriched.author_name,
        author_profile_image_url=enriched.author_avatar_url,
        text=enriched.text,
        media=_media_summary(enriched),
    )


def build_quote_snapshot(enriched: EnrichedPost, post_id: str | None = None) -> QuoteSnapshot:
    article = None
    if enriched.article:
        article = LinkSummary(
            url=enriched.article.url,
            title=enriched.article.title,
            description=enriched.article.description,
            image_url=enriched.article.image_url,
        )
    external = None
    if enriched.external:
        external = LinkSummary(
            url=enriched.external.url,
            title=enriched.external.title,
            description=enriched.external.description,
            image_url=enriched.external.image_url,
        )
    return QuoteSnapshot(
        tweet_id=post_id or enriched.id,
        author=enriched.author,
        author_name=enriched.author_name,
        author_profile_image_url=enriched.author_avatar_url,
        text=enriched.text,
        media=_media_summary(enriched),
        article=article,
        external=external,
    )


def store_referenced_post(
    conn: sqlite3.Connection,
    owner_id: str,
    enriched: EnrichedPost,
    *,
    post_id: str | None = None,
    source: str = "quoted",
    default_category: str = "tweet",
    processed_at: str | None = None,
) -> bool:
    """Persist a quoted post with its media and article link.

    Returns False (and writes nothing else) when the owner already has it.
    """
    post_id = post_id or enriched.id
    inserted = insert_post(
        conn,
        owner_id,
        post_id,
        enriched.author,
        enriched.text,
        build_post_url(enriched.author, post_id),
        author_name=enriched.author_name,
        author_avatar_url=enriched.author_avatar_url,
        created_at=enriched.created_at,
        processed_at=processed_at,
        category=enrichment_category(enriched, default_category),
        source=source,
    )
    if not inserted:
        return False

    for index, photo in enumerate(enriched.photos):
        insert_media(
            conn,
            owner_id,
            f"{post_id}_photo_{index}",
            post_id,
            "photo",
            photo.get("url") or "",
            width=photo.get("width"),
            height=photo.get("height"),
        )

    for index, video in enumerate(enriched.videos):
        duration = video.get("duration")
        insert_media(
            conn,
            owner_id,
            f"{post_id}_video_{index}",
            post_id,
            "video",
            video.get("url") or "",
            preview_url=video.get("thumbnail_url"),
            width=video.get("width"),
            height=video.get("height"),
            duration_ms=int(duration * 1000) if duration else None,
        )

    if enriched.article:
        insert_link(
            conn,
            owner_id,
            post_id,
            enriched.article.url,
            domain="x.com",
            link_type="article",
            preview_title=enriched.article.title,
            preview_description=enriched.article.description,
            preview_image_url=enriched.article.image_url,
            content_json=serialize_article_content(enriched.article.content),
        )

    return True


async def resolve_quote(
    conn: sqlite3.Connection,
    ctx: RunContext,
    enrichment: Enricher,
    quoted_id: str,
    *,
    processed_at: str | None = None,
) -> QuoteResolution | None:
    """Fetch a quoted post, store it once per owner and return its snapshot.

    The quoted post's own quote reference is never followed. Fetch failures
    are logged and yield None so the referencing post is stored without quote
    data.
    """
    try:
        enriched = await enrichment.fetch(UNKNOWN_AUTHOR, quoted_id)
    except Exception as e:
        log.warning("Failed to fetch quoted post %s: %s", quoted_id, e)
        return None
    if enriched is None:
        log.warning("Quoted post %s unavailable from enrichment source", quoted_id)
        return None

    resolution = QuoteResolution(quoted_post_id=quoted_id, snapshot=build_quote_snapshot(enriched, quoted_id))

    if not ctx.is_known(conn, quoted_id):
        resolution.stored = store_referenced_post(
            conn,
            ctx.owner_id,
            enriched,
            post_id=quoted_id,
            source="quoted",
            processed_at=processed_at,
        )
        ctx.mark_inserted(quoted_id)
        if resolution.stored:
            log.debug("Stored quoted post %s for %s", quoted_id, ctx.owner_id)

    return resolution


async def resolve_retweet(enrichment: Enricher, retweet_id: str) -> RetweetSnapshot | None:
    """Fetch the original of a retweet; only a snapshot is kept."""
    try:
        enriched = await enrichment.fetch(UNKNOWN_AUTHOR, retweet_id)
    except Exception as e:
        log.warning("Failed to fetch retweeted post %s: %s", retweet_id, e)
        return None
    if enriched is None:
        return None
    return build_retweet_snapshot(enriched, retweet_id)
