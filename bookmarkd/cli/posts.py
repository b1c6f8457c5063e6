"""Manual add and tag commands."""

import asyncio

import rich_click as click

from ..config import get_database_path, load_config, load_settings
from ..db import add_tag, get_connection, init_db, post_exists, remove_tag, sanitize_tag
from ..fetcher import EnrichmentSource
from ..processor import EnrichmentUnavailable, InvalidPostUrl, add_post_by_url
from ._console import console
from ._helpers import resolve_owner


@click.command()
@click.argument("url")
@click.option("--owner", "-o", help="Owner id (default: BOOKMARKD_OWNER_ID)")
def add(url: str, owner: str | None):
    """Add a single post by its status URL."""
    owner_id = resolve_owner(owner)
    config = load_config()
    db_path = get_database_path()
    init_db(db_path)
    enrich_cfg = load_settings(config).enrichment

    async def _add():
        with get_connection(db_path) as conn:
            return await add_post_by_url(
                conn,
                owner_id,
                url,
                EnrichmentSource.from_config(config),
                retry_attempts=enrich_cfg.retry_attempts,
                retry_delay=enrich_cfg.retry_delay_seconds,
            )

    try:
        result = asyncio.run(_add())
    except (InvalidPostUrl, EnrichmentUnavailable) as e:
        raise click.ClickException(str(e)) from e

    if result.is_duplicate:
        console.print(f"[yellow]Post {result.post_id} is already in your bookmarks[/yellow]")
        return
    console.print(f"Added post {result.post_id} ({result.category})")
    if result.quoted_post_id:
        console.print(f"  quotes {result.quoted_post_id}")


@click.command()
@click.argument("post_id")
@click.argument("tags", nargs=-1, required=True)
@click.option("--remove", "-r", is_flag=True, help="Remove the tags instead of adding them")
@click.option("--owner", "-o", help="Owner id (default: BOOKMARKD_OWNER_ID)")
def tag(post_id: str, tags: tuple[str, ...], remove: bool, owner: str | None):
    """Add or remove tags on a stored post."""
    owner_id = resolve_owner(owner)
    init_db()
    with get_connection() as conn:
        if not post_exists(conn, owner_id, post_id):
            raise click.ClickException(f"Post {post_id} not found")
        for raw in tags:
            clean = sanitize_tag(raw)
            if not clean:
                console.print(f"[yellow]Skipping empty tag {raw!r}[/yellow]")
                continue
            if remove:
                changed = remove_tag(conn, owner_id, post_id, clean)
            else:
                changed = add_tag(conn, owner_id, post_id, clean)
            verb = "Removed" if remove else "Added"
            console.print(f"{verb} {clean}" if changed else f"{clean} unchanged")
        conn.commit()
