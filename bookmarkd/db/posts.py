"""Post CRUD operations (insert-or-skip, owner-scoped reads)."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..models.snapshot import NoSnapshot, Snapshot
from .connection import placeholders

_SNAPSHOT_ADAPTER = TypeAdapter(Snapshot)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def encode_snapshot(snapshot: Snapshot | None) -> tuple[str, str | None]:
    """Return ``(kind, json)`` columns for a snapshot."""
    if snapshot is None or snapshot.kind == "none":
        return "none", None
    return snapshot.kind, snapshot.model_dump_json(by_alias=True, exclude={"kind"})


def decode_snapshot(kind: str | None, raw: str | None) -> Snapshot:
    """Decode stored snapshot columns; malformed data decodes to ``NoSnapshot``."""
    if not kind or kind == "none" or not raw:
        return NoSnapshot()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return NoSnapshot()
    if not isinstance(data, dict):
        return NoSnapshot()
    data["kind"] = kind
    try:
        return _SNAPSHOT_ADAPTER.validate_python(data)
    except ValidationError:
        return NoSnapshot()


def insert_post(
    conn: sqlite3.Connection,
    owner_id: str,
    post_id: str,
    author: str,
    text: str,
    post_url: str,
    *,
    author_name: str | None = None,
    author_avatar_url: str | None = None,
    created_at: str | None = None,
    processed_at: str | None = None,
    category: str = "tweet",
    source: str = "sync",
    is_reply: bool = False,
    is_quote: bool = False,
    quoted_post_id: str | None = None,
    is_retweet: bool = False,
    snapshot: Snapshot | None = None,
    raw: dict[str, Any] | None = None,
) -> bool:
    """Insert a post, returning True if new, False if ``(owner, id)`` already existed."""
    snapshot_kind, snapshot_json = encode_snapshot(snapshot)
    cursor = conn.execute(
        """
        INSERT INTO posts (
            owner_id, id, author, author_name, author_avatar_url, text, post_url,
            created_at, processed_at, category, source,
            is_reply, is_quote, quoted_post_id, is_retweet,
            snapshot_kind, snapshot_json, raw_json
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(owner_id, id) DO NOTHING
        """,
        (
            owner_id,
            post_id,
            author,
            author_name,
            author_avatar_url,
            text,
            post_url,
            created_at,
            processed_at or utc_now_iso(),
            category,
            source,
            int(is_reply),
            int(is_quote),
            quoted_post_id,
            int(is_retweet),
            snapshot_kind,
            snapshot_json,
            json.dumps(raw) if raw is not None else None,
        ),
    )
    return cursor.rowcount == 1


def post_exists(conn: sqlite3.Connection, owner_id: str, post_id: str) -> bool:
    cursor = conn.execute(
        "SELECT 1 FROM posts WHERE owner_id = ? AND id = ? LIMIT 1",
        (owner_id, post_id),
    )
    return cursor.fetchone() is not None


def get_post_ids(conn: sqlite3.Connection, owner_id: str) -> set[str]:
    """Return every post id the owner already has."""
    cursor = conn.execute("SELECT id FROM posts WHERE owner_id = ?", (owner_id,))
    return {row[0] for row in cursor.fetchall()}


def get_post(conn: sqlite3.Connection, owner_id: str, post_id: str) -> sqlite3.Row | None:
    cursor = conn.execute("SELECT * FROM posts WHERE owner_id = ? AND id = ?", (owner_id, post_id))
    return cursor.fetchone()


def get_posts_by_ids(conn: sqlite3.Connection, owner_id: str, post_ids: Iterable[str]) -> dict[str, sqlite3.Row]:
    """Fetch posts by id for one owner, keyed by id."""
    ids = list(dict.fromkeys(post_ids))
    if not ids:
        return {}
    cursor = conn.execute(
        f"SELECT * FROM posts WHERE owner_id = ? AND id IN ({placeholders(ids)})",
        [owner_id, *ids],
    )
    return {row["id"]: row for row in cursor.fetchall()}


def get_posts_quoting(conn: sqlite3.Connection, owner_id: str, post_ids: Iterable[str]) -> list[sqlite3.Row]:
    """Reverse lookup: the owner's posts whose quoted post is in *post_ids*."""
    ids = list(dict.fromkeys(post_ids))
    if not ids:
        return []
    cursor = conn.execute(
        f"""
        SELECT * FROM posts
        WHERE owner_id = ? AND quoted_post_id IN ({placeholders(ids)})
        ORDER BY processed_at DESC
        """,
        [owner_id, *ids],
    )
    return cursor.fetchall()


def count_posts(conn: sqlite3.Connection, owner_id: str) -> int:
    cursor = conn.execute("SELECT COUNT(*) FROM posts WHERE owner_id = ?", (owner_id,))
    return cursor.fetchone()[0]


def get_category_counts(conn: sqlite3.Connection, owner_id: str) -> dict[str, int]:
    cursor = conn.execute(
        "SELECT category, COUNT(*) AS count FROM posts WHERE owner_id = ? GROUP BY category",
        (owner_id,),
    )
    return {(row["category"] or "tweet"): row["count"] for row in cursor.fetchall()}
