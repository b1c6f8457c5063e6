"""Enrichment with retry, and category rules derived from enriched posts."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ..fetcher import EnrichedPost
from ..link_utils import is_article_url

log = logging.getLogger(__name__)

DEFAULT_RETRY_ATTEMPTS = 2
DEFAULT_RETRY_DELAY = 0.2


class Enricher(Protocol):
    async def fetch(self, author: str, post_id: str) -> EnrichedPost | None: ...


async def enrich_with_retry(
    source: Enricher,
    author: str,
    post_id: str,
    *,
    attempts: int = DEFAULT_RETRY_ATTEMPTS,
    delay: float = DEFAULT_RETRY_DELAY,
) -> EnrichedPost | None:
    """Fetch enrichment data, retrying after a fixed delay.

    An attempt that raises or returns nothing counts as a failure. When every
    attempt fails a warning is logged and None is returned.
    """
    attempts = max(1, attempts)
    last_error: Exception | None = None

    for attempt in range(1, attempts + 1):
        try:
            enriched = await source.fetch(author, post_id)
        except Exception as e:
            last_error = e
            log.debug("Enrichment attempt %d/%d for %s failed: %s", attempt, attempts, post_id, e)
        else:
            if enriched is not None:
                return enriched
            last_error = None
            log.debug("Enrichment attempt %d/%d for %s returned nothing", attempt, attempts, post_id)

        if attempt < attempts:
            await asyncio.sleep(delay)

    if last_error is not None:
        log.warning("Enrichment for %s failed after %d attempts: %s", post_id, attempts, last_error)
    else:
        log.warning("Enrichment for %s returned no data after %d attempts", post_id, attempts)
    return None


def enrichment_category(enriched: EnrichedPost | None, default: str) -> str:
    """Category override from enrichment: article, then video, then photo."""
    if enriched is None:
        return default
    if enriched.article:
        return "article"
    if enriched.has_videos:
        return "video"
    if enriched.has_photos:
        return "photo"
    return default


def determine_category(enriched: EnrichedPost | None) -> str:
    """Category for a post added by URL."""
    if enriched is None:
        return "text"
    category = enrichment_category(enriched, "")
    if category:
        return category
    if enriched.external and is_article_url(enriched.external.url):
        return "article"
    return "text"
