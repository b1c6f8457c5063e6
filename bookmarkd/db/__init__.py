"""SQLite persistence layer for bookmarkd."""

from .connection import get_connection, init_db, placeholders
from .links import get_links_for_post, get_links_for_posts, insert_link, update_link_preview
from .maintenance import delete_owner_data, get_owner_stats
from .media import count_posts_with_media, get_media_for_post, get_media_for_posts, insert_media
from .posts import (
    count_posts,
    decode_snapshot,
    encode_snapshot,
    get_category_counts,
    get_post,
    get_post_ids,
    get_posts_by_ids,
    get_posts_quoting,
    insert_post,
    post_exists,
    utc_now_iso,
)
from .read_status import count_read, get_read_ids, mark_read, mark_unread
from .search import FEED_FILTERS, get_feed_posts
from .sync_runs import (
    complete_sync_run,
    count_running_runs,
    count_sync_runs,
    create_sync_run,
    fail_sync_run,
    get_last_completed_run,
    get_last_sync_started_at,
    get_sync_run,
    get_sync_runs,
)
from .tags import (
    MAX_TAG_LENGTH,
    add_tag,
    delete_tag,
    get_tag_counts,
    get_tags_for_post,
    get_tags_for_posts,
    remove_tag,
    sanitize_tag,
)

__all__ = [
    "FEED_FILTERS",
    "MAX_TAG_LENGTH",
    "add_tag",
    "complete_sync_run",
    "count_posts",
    "count_posts_with_media",
    "count_read",
    "count_running_runs",
    "count_sync_runs",
    "create_sync_run",
    "decode_snapshot",
    "delete_owner_data",
    "delete_tag",
    "encode_snapshot",
    "fail_sync_run",
    "get_category_counts",
    "get_connection",
    "get_feed_posts",
    "get_last_completed_run",
    "get_last_sync_started_at",
    "get_links_for_post",
    "get_links_for_posts",
    "get_media_for_post",
    "get_media_for_posts",
    "get_owner_stats",
    "get_post",
    "get_post_ids",
    "get_posts_by_ids",
    "get_posts_quoting",
    "get_read_ids",
    "get_sync_run",
    "get_sync_runs",
    "get_tag_counts",
    "get_tags_for_post",
    "get_tags_for_posts",
    "init_db",
    "insert_link",
    "insert_media",
    "insert_post",
    "mark_read",
    "mark_unread",
    "placeholders",
    "post_exists",
    "remove_tag",
    "sanitize_tag",
    "update_link_preview",
    "utc_now_iso",
]
