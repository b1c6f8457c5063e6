"""Link CRUD operations."""

import sqlite3
from collections.abc import Iterable

from .connection import placeholders


def insert_link(
    conn: sqlite3.Connection,
    owner_id: str,
    post_id: str,
    expanded_url: str,
    *,
    original_url: str | None = None,
    domain: str | None = None,
    link_type: str | None = None,
    preview_title: str | None = None,
    preview_description: str | None = None,
    preview_image_url: str | None = None,
    content_json: str | None = None,
) -> int:
    """Insert a link row and return its id."""
    cursor = conn.execute(
        """
        INSERT INTO links (
            owner_id, post_id, original_url, expanded_url, domain, link_type,
            preview_title, preview_description, preview_image_url, content_json
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            owner_id,
            post_id,
            original_url,
            expanded_url,
            domain,
            link_type,
            preview_title,
            preview_description,
            preview_image_url,
            content_json,
        ),
    )
    return cursor.lastrowid


def update_link_preview(
    conn: sqlite3.Connection,
    link_id: int,
    *,
    preview_title: str | None,
    preview_description: str | None,
    preview_image_url: str | None,
) -> None:
    conn.execute(
        """
        UPDATE links
        SET preview_title = ?, preview_description = ?, preview_image_url = ?
        WHERE id = ?
        """,
        (preview_title, preview_description, preview_image_url, link_id),
    )


def get_links_for_post(conn: sqlite3.Connection, owner_id: str, post_id: str) -> list[sqlite3.Row]:
    cursor = conn.execute(
        "SELECT * FROM links WHERE owner_id = ? AND post_id = ? ORDER BY id",
        (owner_id, post_id),
    )
    return cursor.fetchall()


def get_links_for_posts(
    conn: sqlite3.Connection, owner_id: str, post_ids: Iterable[str]
) -> dict[str, list[sqlite3.Row]]:
    """Batch-load links for the given posts, grouped by post id."""
    ids = list(dict.fromkeys(post_ids))
    grouped: dict[str, list[sqlite3.Row]] = {}
    if not ids:
        return grouped
    cursor = conn.execute(
        f"SELECT * FROM links WHERE owner_id = ? AND post_id IN ({placeholders(ids)}) ORDER BY id",
        [owner_id, *ids],
    )
    for row in cursor.fetchall():
        grouped.setdefault(row["post_id"], []).append(row)
    return grouped
