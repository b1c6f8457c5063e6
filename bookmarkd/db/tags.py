"""Tag CRUD operations."""

import re
import sqlite3
from collections.abc import Iterable

from .connection import placeholders

MAX_TAG_LENGTH = 10

_INVALID_TAG_CHARS_RE = re.compile(r"[^a-z0-9_-]")
_HYPHEN_RUN_RE = re.compile(r"-+")


def sanitize_tag(value: str) -> str:
    """Slugify free text into a tag: lowercase, ``[a-z0-9_-]``, at most 10 chars."""
    tag = _INVALID_TAG_CHARS_RE.sub("-", value.lower().strip())
    tag = _HYPHEN_RUN_RE.sub("-", tag).strip("-")
    return tag[:MAX_TAG_LENGTH].rstrip("-")


def add_tag(conn: sqlite3.Connection, owner_id: str, post_id: str, tag: str) -> bool:
    """Attach a tag, returning True if new, False if it was already present."""
    cursor = conn.execute(
        """
        INSERT INTO tags (owner_id, post_id, tag) VALUES (?, ?, ?)
        ON CONFLICT(owner_id, post_id, tag) DO NOTHING
        """,
        (owner_id, post_id, tag),
    )
    return cursor.rowcount == 1


def remove_tag(conn: sqlite3.Connection, owner_id: str, post_id: str, tag: str) -> bool:
    cursor = conn.execute(
        "DELETE FROM tags WHERE owner_id = ? AND post_id = ? AND tag = ?",
        (owner_id, post_id, tag),
    )
    return cursor.rowcount > 0


def delete_tag(conn: sqlite3.Connection, owner_id: str, tag: str) -> int:
    """Remove a tag from every post of the owner. Returns rows deleted."""
    cursor = conn.execute("DELETE FROM tags WHERE owner_id = ? AND tag = ?", (owner_id, tag))
    return cursor.rowcount


def get_tags_for_post(conn: sqlite3.Connection, owner_id: str, post_id: str) -> list[str]:
    cursor = conn.execute(
        "SELECT tag FROM tags WHERE owner_id = ? AND post_id = ? ORDER BY created_at, tag",
        (owner_id, post_id),
    )
    return [row[0] for row in cursor.fetchall()]


def get_tags_for_posts(conn: sqlite3.Connection, owner_id: str, post_ids: Iterable[str]) -> dict[str, list[str]]:
    """Batch-load tags for the given posts, grouped by post id."""
    ids = list(dict.fromkeys(post_ids))
    grouped: dict[str, list[str]] = {}
    if not ids:
        return grouped
    cursor = conn.execute(
        f"""
        SELECT post_id, tag FROM tags
        WHERE owner_id = ? AND post_id IN ({placeholders(ids)})
        ORDER BY created_at, tag
        """,
        [owner_id, *ids],
    )
    for row in cursor.fetchall():
        grouped.setdefault(row["post_id"], []).append(row["tag"])
    return grouped


def get_tag_counts(conn: sqlite3.Connection, owner_id: str) -> list[sqlite3.Row]:
    cursor = conn.execute(
        """
        SELECT tag, COUNT(*) AS count FROM tags
        WHERE owner_id = ?
        GROUP BY tag
        ORDER BY count DESC, tag
        """,
        (owner_id,),
    )
    return cursor.fetchall()
