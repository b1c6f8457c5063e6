"""Read-status operations. A row means the post has been read."""

import sqlite3
from collections.abc import Iterable
from datetime import datetime, timezone

from .connection import placeholders


def mark_read(conn: sqlite3.Connection, owner_id: str, post_id: str) -> str:
    """Mark a post read, returning the (possibly pre-existing) read timestamp."""
    read_at = datetime.now(timezone.utc).isoformat()
    conn.execute(
        """
        INSERT INTO read_status (owner_id, post_id, read_at) VALUES (?, ?, ?)
        ON CONFLICT(owner_id, post_id) DO NOTHING
        """,
        (owner_id, post_id, read_at),
    )
    cursor = conn.execute(
        "SELECT read_at FROM read_status WHERE owner_id = ? AND post_id = ?",
        (owner_id, post_id),
    )
    return cursor.fetchone()[0]


def mark_unread(conn: sqlite3.Connection, owner_id: str, post_id: str) -> bool:
    cursor = conn.execute(
        "DELETE FROM read_status WHERE owner_id = ? AND post_id = ?",
        (owner_id, post_id),
    )
    return cursor.rowcount > 0


def get_read_ids(conn: sqlite3.Connection, owner_id: str, post_ids: Iterable[str]) -> set[str]:
    """Return which of *post_ids* the owner has read."""
    ids = list(dict.fromkeys(post_ids))
    if not ids:
        return set()
    cursor = conn.execute(
        f"SELECT post_id FROM read_status WHERE owner_id = ? AND post_id IN ({placeholders(ids)})",
        [owner_id, *ids],
    )
    return {row[0] for row in cursor.fetchall()}


def count_read(conn: sqlite3.Connection, owner_id: str) -> int:
    cursor = conn.execute("SELECT COUNT(*) FROM read_status WHERE owner_id = ?", (owner_id,))
    return cursor.fetchone()[0]
