"""Sync orchestration: cooldown gating, pagination and per-item processing."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from ..config import get_sync_cooldown_ms, load_settings
from ..db import (
    complete_sync_run,
    create_sync_run,
    fail_sync_run,
    get_connection,
    get_last_completed_run,
    get_post_ids,
)
from ..fetcher import BookmarkPage, BookmarkSource, EnrichmentSource
from .context import RunContext, SyncState
from .enrichment import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY, Enricher
from .events import (
    CompleteEvent,
    DuplicateEvent,
    ErrorEvent,
    PageEvent,
    ProcessingEvent,
    StartEvent,
    SyncEvent,
)
from .storage import save_post

log = logging.getLogger(__name__)


class PostSource(Protocol):
    async def fetch(
        self,
        owner_id: str,
        access_token: str,
        max_results: int = ...,
        pagination_token: str | None = None,
    ) -> BookmarkPage: ...


@dataclass
class CooldownStatus:
    can_sync: bool
    remaining_ms: int
    last_sync_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"canSync": self.can_sync, "cooldownRemaining": self.remaining_ms, "lastSyncAt": self.last_sync_at}


def _parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def check_cooldown(
    conn: sqlite3.Connection,
    owner_id: str,
    cooldown_ms: int,
    *,
    now: datetime | None = None,
) -> CooldownStatus:
    """Gate a new sync on the owner's most recent completed run."""
    last_run = get_last_completed_run(conn, owner_id)
    if last_run is None:
        return CooldownStatus(can_sync=True, remaining_ms=0)

    completed_at = last_run["completed_at"]
    completed = _parse_timestamp(completed_at)
    if completed is None:
        return CooldownStatus(can_sync=True, remaining_ms=0, last_sync_at=completed_at)

    now = now or datetime.now(timezone.utc)
    elapsed_ms = int((now - completed).total_seconds() * 1000)
    remaining = max(0, cooldown_ms - elapsed_ms)
    return CooldownStatus(can_sync=remaining == 0, remaining_ms=remaining, last_sync_at=completed_at)


class SyncOrchestrator:
    """Run one owner's sync and report progress as a stream of events."""

    def __init__(
        self,
        db_path: Path,
        source: PostSource,
        enrichment: Enricher,
        access_token: str,
        *,
        full_page_size: int = 100,
        incremental_page_size: int = 50,
        item_delay: float = 0.15,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        self.db_path = db_path
        self.source = source
        self.enrichment = enrichment
        self.access_token = access_token
        self.full_page_size = full_page_size
        self.incremental_page_size = incremental_page_size
        self.item_delay = item_delay
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        db_path: Path,
        access_token: str,
        *,
        source: PostSource | None = None,
        enrichment: Enricher | None = None,
    ) -> SyncOrchestrator:
        settings = load_settings(config)
        return cls(
            db_path,
            source or BookmarkSource.from_config(config),
            enrichment or EnrichmentSource.from_config(config),
            access_token,
            full_page_size=settings.sync.full_page_size,
            incremental_page_size=settings.sync.incremental_page_size,
            item_delay=settings.sync.item_delay_seconds,
            retry_attempts=settings.enrichment.retry_attempts,
            retry_delay=settings.enrichment.retry_delay_seconds,
        )

    async def _fetch_pages(
        self, ctx: RunContext, *, full: bool, max_pages: int
    ) -> AsyncIterator[tuple[PageEvent, BookmarkPage]]:
        if not full:
            page = await self.source.fetch(ctx.owner_id, self.access_token, self.incremental_page_size, None)
            ctx.page_number = 1
            yield PageEvent(page_number=1, items_found=len(page.posts), cursor=None), page
            return

        cursor: str | None = None
        while ctx.page_number < max_pages:
            page = await self.source.fetch(ctx.owner_id, self.access_token, self.full_page_size, cursor)
            ctx.page_number += 1
            yield PageEvent(page_number=ctx.page_number, items_found=len(page.posts), cursor=page.next_token), page
            cursor = page.next_token
            if not cursor:
                break

    async def run(
        self,
        owner_id: str,
        *,
        full: bool = False,
        max_pages: int = 10,
        trigger_type: str = "manual",
    ) -> AsyncIterator[SyncEvent]:
        """Execute a sync, yielding events until a complete or error event."""
        ctx = RunContext(owner_id=owner_id)

        with get_connection(self.db_path) as conn:
            ctx.transition(SyncState.CONNECTING)
            ctx.sync_id = create_sync_run(conn, owner_id, trigger_type)
            log.info("Sync %s started for %s (%s)", ctx.sync_id, owner_id, "full" if full else "incremental")
            yield StartEvent(sync_id=ctx.sync_id)

            try:
                ctx.existing_ids = get_post_ids(conn, owner_id)

                ctx.transition(SyncState.FETCHING)
                posts = []
                async for page_event, page in self._fetch_pages(ctx, full=full, max_pages=max(1, max_pages)):
                    posts.extend(page.posts)
                    yield page_event
                ctx.counters.pages = ctx.page_number
                ctx.counters.total = len(posts)

                ctx.transition(SyncState.PROCESSING)
                total = len(posts)
                for index, post in enumerate(posts):
                    ctx.current = index + 1
                    if ctx.is_known(conn, post.id):
                        ctx.counters.duplicates += 1
                        yield DuplicateEvent(post_id=post.id)
                        continue

                    stored = await save_post(
                        conn,
                        ctx,
                        post,
                        self.enrichment,
                        retry_attempts=self.retry_attempts,
                        retry_delay=self.retry_delay,
                    )
                    if not stored.inserted:
                        # Another run stored it after the known-id check
                        ctx.counters.duplicates += 1
                        yield DuplicateEvent(post_id=post.id)
                        continue

                    ctx.counters.new += 1
                    yield ProcessingEvent(
                        current=ctx.current,
                        total=total,
                        post_id=post.id,
                        author=post.author,
                        text=post.text,
                        bookmark=stored.to_dict(),
                    )

                    if index < total - 1 and self.item_delay > 0:
                        await asyncio.sleep(self.item_delay)

                complete_sync_run(
                    conn,
                    ctx.sync_id,
                    total_fetched=ctx.counters.total,
                    new_count=ctx.counters.new,
                    duplicates_skipped=ctx.counters.duplicates,
                )
                ctx.transition(SyncState.COMPLETE)
                log.info(
                    "Sync %s completed: %d fetched, %d new, %d duplicates",
                    ctx.sync_id,
                    ctx.counters.total,
                    ctx.counters.new,
                    ctx.counters.duplicates,
                )
                yield CompleteEvent(total=ctx.counters.total, new=ctx.counters.new, duplicates=ctx.counters.duplicates)
            except Exception as e:
                message = str(e) or e.__class__.__name__
                log.error("Sync %s failed: %s", ctx.sync_id, message)
                if conn.in_transaction:
                    conn.rollback()
                fail_sync_run(
                    conn,
                    ctx.sync_id,
                    message,
                    total_fetched=ctx.counters.total,
                    new_count=ctx.counters.new,
                    duplicates_skipped=ctx.counters.duplicates,
                )
                ctx.transition(SyncState.FAILED)
                yield ErrorEvent(message=message)


def start_sync(
    orchestrator: SyncOrchestrator,
    owner_id: str,
    *,
    cooldown_ms: int | None = None,
    full: bool = False,
    max_pages: int = 10,
    trigger_type: str = "manual",
) -> tuple[CooldownStatus, AsyncIterator[SyncEvent] | None]:
    """Check the cooldown and, if allowed, return the run's event stream.

    A rejected start writes no sync run.
    """
    if cooldown_ms is None:
        cooldown_ms = get_sync_cooldown_ms()
    with get_connection(orchestrator.db_path) as conn:
        status = check_cooldown(conn, owner_id, cooldown_ms)
    if not status.can_sync:
        log.info("Sync for %s rejected: %d ms of cooldown remaining", owner_id, status.remaining_ms)
        return status, None
    return status, orchestrator.run(owner_id, full=full, max_pages=max_pages, trigger_type=trigger_type)


async def pump_events(events: AsyncIterator[SyncEvent], queue: asyncio.Queue) -> None:
    """Drain a run into *queue*, ending with a ``None`` sentinel.

    Runs as a background task so the sync finishes even if nobody is reading.
    """
    try:
        async for event in events:
            await queue.put(event)
    except Exception:
        log.exception("Sync run aborted unexpectedly")
    finally:
        await queue.put(None)
