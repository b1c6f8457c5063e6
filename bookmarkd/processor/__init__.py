"""Sync pipeline: run context, events, enrichment, storage and orchestration."""

from .add import AddResult, EnrichmentUnavailable, InvalidPostUrl, add_post_by_url
from .context import RunContext, RunCounters, SyncState
from .dependencies import (
    QuoteResolution,
    build_quote_snapshot,
    build_retweet_snapshot,
    resolve_quote,
    resolve_retweet,
    store_referenced_post,
)
from .enrichment import determine_category, enrich_with_retry, enrichment_category
from .events import (
    CompleteEvent,
    DuplicateEvent,
    ErrorEvent,
    PageEvent,
    PingEvent,
    ProcessingEvent,
    StartEvent,
    SyncEvent,
    format_sse,
)
from .pipeline import CooldownStatus, SyncOrchestrator, check_cooldown, pump_events, start_sync
from .storage import StoredPost, save_post

__all__ = [
    "AddResult",
    "CompleteEvent",
    "CooldownStatus",
    "DuplicateEvent",
    "EnrichmentUnavailable",
    "ErrorEvent",
    "InvalidPostUrl",
    "PageEvent",
    "PingEvent",
    "ProcessingEvent",
    "QuoteResolution",
    "RunContext",
    "RunCounters",
    "StartEvent",
    "StoredPost",
    "SyncEvent",
    "SyncOrchestrator",
    "SyncState",
    "add_post_by_url",
    "build_quote_snapshot",
    "build_retweet_snapshot",
    "check_cooldown",
    "determine_category",
    "enrich_with_retry",
    "enrichment_category",
    "format_sse",
    "pump_events",
    "resolve_quote",
    "resolve_retweet",
    "save_post",
    "start_sync",
    "store_referenced_post",
]
