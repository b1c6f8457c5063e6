"""Clients for the external bookmark source and the enrichment source."""

from .bookmarks import BookmarkPage, BookmarkSource, parse_bookmarks_response
from .errors import EnrichmentError, SourceAuthError, SourceError
from .extractors import (
    ArticleData,
    EnrichedPost,
    ExternalLink,
    ReferencedPost,
    SourceMedia,
    SourcePost,
    SourceUrl,
)
from .fxtwitter import EnrichmentSource

__all__ = [
    "ArticleData",
    "BookmarkPage",
    "BookmarkSource",
    "EnrichedPost",
    "EnrichmentError",
    "EnrichmentSource",
    "ExternalLink",
    "ReferencedPost",
    "SourceAuthError",
    "SourceError",
    "SourceMedia",
    "SourcePost",
    "SourceUrl",
    "parse_bookmarks_response",
]
