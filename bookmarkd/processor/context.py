"""Per-run sync state threaded through the pipeline."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from enum import Enum

from ..db import post_exists


class SyncState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    FETCHING = "fetching"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class RunCounters:
    total: int = 0
    new: int = 0
    duplicates: int = 0
    pages: int = 0


@dataclass
class RunContext:
    """Everything one sync run knows about the owner's collection.

    ``existing_ids`` is loaded once when the run connects; ``inserted_ids``
    collects every id created during the run, including quoted posts stored
    on behalf of another bookmark.
    """

    owner_id: str
    sync_id: str | None = None
    existing_ids: set[str] = field(default_factory=set)
    inserted_ids: set[str] = field(default_factory=set)
    state: SyncState = SyncState.IDLE
    page_number: int = 0
    current: int = 0
    counters: RunCounters = field(default_factory=RunCounters)

    def is_known(self, conn: sqlite3.Connection, post_id: str) -> bool:
        """True if the owner already has *post_id*, checking run-local sets before the store."""
        if post_id in self.inserted_ids or post_id in self.existing_ids:
            return True
        return post_exists(conn, self.owner_id, post_id)

    def mark_inserted(self, post_id: str) -> None:
        self.inserted_ids.add(post_id)

    def transition(self, state: SyncState) -> None:
        self.state = state
