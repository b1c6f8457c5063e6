"""Sync run records."""

import sqlite3
import uuid
from datetime import datetime, timezone


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_sync_run(conn: sqlite3.Connection, owner_id: str, trigger_type: str = "manual") -> str:
    """Insert a running sync record and return its id."""
    sync_id = uuid.uuid4().hex
    conn.execute(
        """
        INSERT INTO sync_runs (id, owner_id, started_at, status, trigger_type)
        VALUES (?, ?, ?, 'running', ?)
        """,
        (sync_id, owner_id, _now(), trigger_type),
    )
    conn.commit()
    return sync_id


def complete_sync_run(
    conn: sqlite3.Connection,
    sync_id: str,
    *,
    total_fetched: int,
    new_count: int,
    duplicates_skipped: int,
) -> None:
    conn.execute(
        """
        UPDATE sync_runs
        SET completed_at = ?, status = 'completed',
            total_fetched = ?, new_count = ?, duplicates_skipped = ?
        WHERE id = ?
        """,
        (_now(), total_fetched, new_count, duplicates_skipped, sync_id),
    )
    conn.commit()


def fail_sync_run(
    conn: sqlite3.Connection,
    sync_id: str,
    error_message: str,
    *,
    total_fetched: int = 0,
    new_count: int = 0,
    duplicates_skipped: int = 0,
) -> None:
    conn.execute(
        """
        UPDATE sync_runs
        SET completed_at = ?, status = 'failed', error_message = ?,
            total_fetched = ?, new_count = ?, duplicates_skipped = ?
        WHERE id = ?
        """,
        (_now(), error_message, total_fetched, new_count, duplicates_skipped, sync_id),
    )
    conn.commit()


def get_sync_run(conn: sqlite3.Connection, sync_id: str) -> sqlite3.Row | None:
    cursor = conn.execute("SELECT * FROM sync_runs WHERE id = ?", (sync_id,))
    return cursor.fetchone()


def get_last_completed_run(conn: sqlite3.Connection, owner_id: str) -> sqlite3.Row | None:
    """Most recent completed run for the owner, by completion time."""
    cursor = conn.execute(
        """
        SELECT * FROM sync_runs
        WHERE owner_id = ? AND status = 'completed' AND completed_at IS NOT NULL
        ORDER BY completed_at DESC
        LIMIT 1
        """,
        (owner_id,),
    )
    return cursor.fetchone()


def get_last_sync_started_at(conn: sqlite3.Connection, owner_id: str) -> str | None:
    cursor = conn.execute(
        """
        SELECT started_at FROM sync_runs
        WHERE owner_id = ? AND status = 'completed'
        ORDER BY started_at DESC
        LIMIT 1
        """,
        (owner_id,),
    )
    row = cursor.fetchone()
    return row[0] if row else None


def get_sync_runs(conn: sqlite3.Connection, owner_id: str, limit: int = 20, offset: int = 0) -> list[sqlite3.Row]:
    cursor = conn.execute(
        """
        SELECT * FROM sync_runs
        WHERE owner_id = ?
        ORDER BY started_at DESC
        LIMIT ? OFFSET ?
        """,
        (owner_id, limit, offset),
    )
    return cursor.fetchall()


def count_sync_runs(conn: sqlite3.Connection, owner_id: str) -> int:
    cursor = conn.execute("SELECT COUNT(*) FROM sync_runs WHERE owner_id = ?", (owner_id,))
    return cursor.fetchone()[0]


def count_running_runs(conn: sqlite3.Connection, owner_id: str) -> int:
    cursor = conn.execute(
        "SELECT COUNT(*) FROM sync_runs WHERE owner_id = ? AND status = 'running'",
        (owner_id,),
    )
    return cursor.fetchone()[0]
