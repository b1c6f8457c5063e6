"""Owner-scoped feed queries with content filters."""

import sqlite3
from typing import Any

from .connection import placeholders

FEED_FILTERS = ("all", "photos", "videos", "text", "articles", "quoted", "manual")

_HAS_X_ARTICLE_LINK = """EXISTS (
    SELECT 1 FROM links l
    WHERE l.owner_id = p.owner_id AND l.post_id = p.id AND instr(l.expanded_url, '/article/') > 0
)"""

_FILTER_CONDITIONS = {
    "photos": """EXISTS (
        SELECT 1 FROM media m
        WHERE m.owner_id = p.owner_id AND m.post_id = p.id AND m.media_type = 'photo'
    )""",
    "videos": """EXISTS (
        SELECT 1 FROM media m
        WHERE m.owner_id = p.owner_id AND m.post_id = p.id AND m.media_type IN ('video', 'animated_gif')
    )""",
    "text": f"""NOT EXISTS (
        SELECT 1 FROM media m WHERE m.owner_id = p.owner_id AND m.post_id = p.id
    ) AND NOT {_HAS_X_ARTICLE_LINK}
    AND (p.category IS NULL OR p.category != 'article')""",
    "articles": f"(p.category = 'article' OR {_HAS_X_ARTICLE_LINK})",
    "quoted": """EXISTS (
        SELECT 1 FROM posts q WHERE q.owner_id = p.owner_id AND q.quoted_post_id = p.id
    )""",
    "manual": "p.source IN ('manual', 'url_prefix')",
}


def get_feed_posts(
    conn: sqlite3.Connection,
    owner_id: str,
    *,
    filter_type: str = "all",
    unread_only: bool = True,
    search: str | None = None,
    tags: list[str] | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[sqlite3.Row], int]:
    """Get one page of the owner's posts, newest first, plus the filtered total."""
    conditions = ["p.owner_id = ?"]
    params: list[Any] = [owner_id]

    if search:
        pattern = f"%{search}%"
        conditions.append(
            """(
                p.text LIKE ? OR p.author LIKE ? OR p.author_name LIKE ?
                OR EXISTS (
                    SELECT 1 FROM links l
                    WHERE l.owner_id = p.owner_id AND l.post_id = p.id
                      AND (l.preview_title LIKE ? OR l.preview_description LIKE ?)
                )
            )"""
        )
        params.extend([pattern] * 5)

    if tags:
        normalized = list(dict.fromkeys(t.strip().lower() for t in tags if t.strip()))
        if normalized:
            # AND semantics: the post must carry every requested tag
            conditions.append(
                f"""p.id IN (
                    SELECT post_id FROM tags
                    WHERE owner_id = ? AND tag IN ({placeholders(normalized)})
                    GROUP BY post_id
                    HAVING COUNT(DISTINCT tag) = ?
                )"""
            )
            params.extend([owner_id, *normalized, len(normalized)])

    condition = _FILTER_CONDITIONS.get(filter_type)
    if condition:
        conditions.append(condition)

    if unread_only:
        conditions.append(
            "NOT EXISTS (SELECT 1 FROM read_status r WHERE r.owner_id = p.owner_id AND r.post_id = p.id)"
        )

    where_clause = " AND ".join(conditions)

    cursor = conn.execute(f"SELECT COUNT(*) FROM posts p WHERE {where_clause}", params)
    total = cursor.fetchone()[0]

    cursor = conn.execute(
        f"""
        SELECT p.* FROM posts p
        WHERE {where_clause}
        ORDER BY p.processed_at DESC, p.rowid DESC
        LIMIT ? OFFSET ?
        """,
        [*params, limit, offset],
    )
    return cursor.fetchall(), total
