"""Database schema definitions for bookmarkd."""

SCHEMA = """
-- Posts: one row per (owner, id), never updated after insert
CREATE TABLE IF NOT EXISTS posts (
    owner_id TEXT NOT NULL,
    id TEXT NOT NULL,
    author TEXT NOT NULL,
    author_name TEXT,
    author_avatar_url TEXT,
    text TEXT NOT NULL,
    post_url TEXT NOT NULL,
    created_at TIMESTAMP,
    processed_at TIMESTAMP NOT NULL,
    category TEXT DEFAULT 'tweet',
    source TEXT DEFAULT 'sync',

    is_reply INTEGER DEFAULT 0,
    is_quote INTEGER DEFAULT 0,
    quoted_post_id TEXT,
    is_retweet INTEGER DEFAULT 0,

    -- Denormalized quote/retweet/article snapshot
    snapshot_kind TEXT DEFAULT 'none',
    snapshot_json TEXT,

    raw_json TEXT,
    PRIMARY KEY (owner_id, id)
);

-- Media attached to posts
CREATE TABLE IF NOT EXISTS media (
    owner_id TEXT NOT NULL,
    id TEXT NOT NULL,
    post_id TEXT NOT NULL,
    media_type TEXT NOT NULL,
    original_url TEXT NOT NULL,
    preview_url TEXT,
    width INTEGER,
    height INTEGER,
    duration_ms INTEGER,
    alt_text TEXT,
    PRIMARY KEY (owner_id, id)
);

-- Links found in posts or supplied by enrichment
CREATE TABLE IF NOT EXISTS links (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    post_id TEXT NOT NULL,
    original_url TEXT,
    expanded_url TEXT NOT NULL,
    domain TEXT,
    link_type TEXT,
    preview_title TEXT,
    preview_description TEXT,
    preview_image_url TEXT,
    content_json TEXT
);

-- Free-form tags
CREATE TABLE IF NOT EXISTS tags (
    owner_id TEXT NOT NULL,
    post_id TEXT NOT NULL,
    tag TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (owner_id, post_id, tag)
);

-- Presence means read
CREATE TABLE IF NOT EXISTS read_status (
    owner_id TEXT NOT NULL,
    post_id TEXT NOT NULL,
    read_at TIMESTAMP NOT NULL,
    PRIMARY KEY (owner_id, post_id)
);

-- Sync run records
CREATE TABLE IF NOT EXISTS sync_runs (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    started_at TIMESTAMP NOT NULL,
    completed_at TIMESTAMP,
    status TEXT NOT NULL,  -- running, completed, failed
    total_fetched INTEGER DEFAULT 0,
    new_count INTEGER DEFAULT 0,
    duplicates_skipped INTEGER DEFAULT 0,
    error_message TEXT,
    trigger_type TEXT DEFAULT 'manual'
);

CREATE INDEX IF NOT EXISTS idx_posts_owner_processed ON posts(owner_id, processed_at);
CREATE INDEX IF NOT EXISTS idx_posts_owner_category ON posts(owner_id, category);
CREATE INDEX IF NOT EXISTS idx_posts_owner_quoted ON posts(owner_id, quoted_post_id);
CREATE INDEX IF NOT EXISTS idx_media_owner_post ON media(owner_id, post_id);
CREATE INDEX IF NOT EXISTS idx_links_owner_post ON links(owner_id, post_id);
CREATE INDEX IF NOT EXISTS idx_tags_owner_tag ON tags(owner_id, tag);
CREATE INDEX IF NOT EXISTS idx_sync_runs_owner_status ON sync_runs(owner_id, status, completed_at DESC);
"""

# Per-owner tables in dependency-safe deletion order
OWNER_TABLES = ("media", "tags", "links", "read_status", "posts", "sync_runs")
