"""Bulk owner-level maintenance: delete-by-owner and statistics."""

import sqlite3
from typing import Any

from .media import count_posts_with_media
from .posts import count_posts, get_category_counts
from .read_status import count_read
from .schema import OWNER_TABLES


def delete_owner_data(conn: sqlite3.Connection, owner_id: str) -> dict[str, int]:
    """Delete every row belonging to *owner_id* in a single transaction.

    Returns the number of rows removed per table. Other owners are untouched.
    """
    deleted: dict[str, int] = {}
    with conn:
        for table in OWNER_TABLES:
            cursor = conn.execute(f"DELETE FROM {table} WHERE owner_id = ?", (owner_id,))
            deleted[table] = cursor.rowcount
    return deleted


def get_owner_stats(conn: sqlite3.Connection, owner_id: str) -> dict[str, Any]:
    total = count_posts(conn, owner_id)
    read = count_read(conn, owner_id)
    return {
        "total": total,
        "unread": max(0, total - read),
        "read": read,
        "categories": get_category_counts(conn, owner_id),
        "withMedia": count_posts_with_media(conn, owner_id),
    }
