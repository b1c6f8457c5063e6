"""FxTwitter enrichment client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import load_settings
from .errors import EnrichmentError
from .extractors import EnrichedPost

log = logging.getLogger(__name__)


class EnrichmentSource:
    """Fetch secondary post metadata (author avatar, media, articles, link cards)."""

    def __init__(
        self,
        base_url: str = "https://api.fxtwitter.com",
        user_agent: str = "bookmarkd/1.0",
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> EnrichmentSource:
        settings = load_settings(config).enrichment
        return cls(
            base_url=settings.base_url,
            user_agent=settings.user_agent,
            timeout=settings.timeout_seconds,
        )

    async def fetch(self, author: str, post_id: str) -> EnrichedPost | None:
        """Fetch one post; None for non-2xx responses or payloads without a post."""
        url = f"{self.base_url}/{author}/status/{post_id}"
        headers = {"User-Agent": self.user_agent}

        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise EnrichmentError(f"Enrichment request timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise EnrichmentError(f"Enrichment request failed: {e}") from e

        if not response.is_success:
            log.debug("Enrichment source returned HTTP %d for %s", response.status_code, post_id)
            return None

        try:
            payload = response.json()
        except ValueError:
            log.debug("Enrichment source returned invalid JSON for %s", post_id)
            return None

        return EnrichedPost.from_fxtwitter_json(payload)
