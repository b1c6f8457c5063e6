"""Route modules for the bookmarkd web API."""

from . import account, bookmarks, feed, posts, stats, sync, tags

__all__ = ["account", "bookmarks", "feed", "posts", "stats", "sync", "tags"]
