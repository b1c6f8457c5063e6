"""Exceptions raised by the external post and enrichment sources."""


class SourceError(RuntimeError):
    """The bookmark source failed; fatal to a sync run."""


class SourceAuthError(SourceError):
    """The bookmark source rejected the owner's credentials (HTTP 401/403)."""


class EnrichmentError(RuntimeError):
    """The enrichment source could not be reached."""
