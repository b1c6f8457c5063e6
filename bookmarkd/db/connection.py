"""Database connection management and initialization."""

import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..config import get_database_path
from .schema import SCHEMA


def init_db(db_path: Path | None = None) -> None:
    """Initialize the database with schema."""
    if db_path is None:
        db_path = get_database_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    max_attempts = 3
    for attempt in range(max_attempts):
        try:
            with get_connection(db_path) as conn:
                conn.executescript(SCHEMA)
                _run_migrations(conn)
                conn.commit()
            return
        except sqlite3.OperationalError as e:
            if "database is locked" in str(e) and attempt < max_attempts - 1:
                time.sleep(1)
                continue
            raise


def _run_migrations(conn: sqlite3.Connection) -> None:
    """Run schema migrations for existing databases."""
    cursor = conn.execute("PRAGMA table_info(posts)")
    post_columns = {row[1] for row in cursor.fetchall()}

    if "source" not in post_columns:
        conn.execute("ALTER TABLE posts ADD COLUMN source TEXT DEFAULT 'sync'")

    if "snapshot_kind" not in post_columns:
        conn.execute("ALTER TABLE posts ADD COLUMN snapshot_kind TEXT DEFAULT 'none'")
        conn.execute("ALTER TABLE posts ADD COLUMN snapshot_json TEXT")

    cursor = conn.execute("PRAGMA table_info(media)")
    media_columns = {row[1] for row in cursor.fetchall()}

    if "alt_text" not in media_columns:
        conn.execute("ALTER TABLE media ADD COLUMN alt_text TEXT")


@contextmanager
def get_connection(db_path: Path | None = None, readonly: bool = False) -> Iterator[sqlite3.Connection]:
    """Get a database connection with row factory.

    Args:
        db_path: Path to database file. If None, uses default from config.
        readonly: If True, open in readonly mode to avoid write locks.
    """
    if db_path is None:
        db_path = get_database_path()

    if readonly:
        uri = f"file:{db_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, timeout=30)
    else:
        conn = sqlite3.connect(db_path, timeout=30)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=30000")

    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def placeholders(values) -> str:
    """Return a ``?, ?, ...`` placeholder list for an IN clause."""
    return ", ".join("?" for _ in values)
