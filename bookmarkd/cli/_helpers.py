"""Shared CLI utilities."""

import rich_click as click

from ..auth import get_default_owner


def resolve_owner(owner: str | None) -> str:
    """Return *owner* or the configured default owner, failing when neither is set."""
    value = (owner or get_default_owner() or "").strip()
    if not value:
        raise click.UsageError("No owner given. Pass --owner or set BOOKMARKD_OWNER_ID.")
    return value


def format_remaining(ms: int) -> str:
    """Render a millisecond duration as ``Xm Ys``."""
    seconds = max(0, ms) // 1000
    minutes, seconds = divmod(seconds, 60)
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
