"""Media CRUD operations."""

import sqlite3
from collections.abc import Iterable

from .connection import placeholders


def insert_media(
    conn: sqlite3.Connection,
    owner_id: str,
    media_id: str,
    post_id: str,
    media_type: str,
    original_url: str,
    *,
    preview_url: str | None = None,
    width: int | None = None,
    height: int | None = None,
    duration_ms: int | None = None,
    alt_text: str | None = None,
) -> bool:
    """Insert a media row, returning True if new, False if ``(owner, id)`` already existed."""
    cursor = conn.execute(
        """
        INSERT INTO media (
            owner_id, id, post_id, media_type, original_url, preview_url,
            width, height, duration_ms, alt_text
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(owner_id, id) DO NOTHING
        """,
        (owner_id, media_id, post_id, media_type, original_url, preview_url, width, height, duration_ms, alt_text),
    )
    return cursor.rowcount == 1


def get_media_for_post(conn: sqlite3.Connection, owner_id: str, post_id: str) -> list[sqlite3.Row]:
    cursor = conn.execute(
        "SELECT * FROM media WHERE owner_id = ? AND post_id = ? ORDER BY rowid",
        (owner_id, post_id),
    )
    return cursor.fetchall()


def get_media_for_posts(
    conn: sqlite3.Connection, owner_id: str, post_ids: Iterable[str]
) -> dict[str, list[sqlite3.Row]]:
    """Batch-load media for the given posts, grouped by post id."""
    ids = list(dict.fromkeys(post_ids))
    grouped: dict[str, list[sqlite3.Row]] = {}
    if not ids:
        return grouped
    cursor = conn.execute(
        f"SELECT * FROM media WHERE owner_id = ? AND post_id IN ({placeholders(ids)}) ORDER BY rowid",
        [owner_id, *ids],
    )
    for row in cursor.fetchall():
        grouped.setdefault(row["post_id"], []).append(row)
    return grouped


def count_posts_with_media(conn: sqlite3.Connection, owner_id: str) -> int:
    cursor = conn.execute("SELECT COUNT(DISTINCT post_id) FROM media WHERE owner_id = ?", (owner_id,))
    return cursor.fetchone()[0]
