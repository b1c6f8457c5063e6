"""Feed assembly for the web API."""

from .assembler import FeedPage, FeedQuery, assemble_feed, build_feed_item
from .helpers import (
    build_article_preview,
    build_fallback_article_preview,
    has_x_article_link,
    select_article_link,
)

__all__ = [
    "FeedPage",
    "FeedQuery",
    "assemble_feed",
    "build_article_preview",
    "build_fallback_article_preview",
    "build_feed_item",
    "has_x_article_link",
    "select_article_link",
]
