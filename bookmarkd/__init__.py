"""Bookmark hoarder - sync, enrich and browse bookmarked posts from X."""

try:
    from importlib.metadata import version

    __version__ = version("bookmarkd")
except Exception:
    __version__ = "0.0.0-dev"
