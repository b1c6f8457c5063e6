"""Sync, cooldown and sync log commands."""

import asyncio
import sys

import rich_click as click
from rich.table import Table

from ..auth import get_access_token
from ..config import get_database_path, get_sync_cooldown_ms, load_config, load_settings
from ..db import get_connection, get_sync_runs, init_db
from ..processor import CompleteEvent, ErrorEvent, SyncOrchestrator, check_cooldown, start_sync
from ._console import console
from ._helpers import format_remaining, resolve_owner
from ._progress import SyncProgressReporter, create_progress


async def _drive(events, reporter: SyncProgressReporter):
    """Consume a run's events, returning the terminal one."""
    terminal = None
    async for event in events:
        reporter.handle(event)
        if event.is_terminal:
            terminal = event
    return terminal


@click.command()
@click.option("--all", "full", is_flag=True, help="Walk every page instead of the newest items only")
@click.option("--max-pages", type=int, default=None, help="Page cap for --all (default: sync.max_pages)")
@click.option("--owner", "-o", help="Owner id (default: BOOKMARKD_OWNER_ID)")
def sync(full: bool, max_pages: int | None, owner: str | None):
    """Pull new bookmarks from X, enrich and store them."""
    owner_id = resolve_owner(owner)
    config = load_config()
    db_path = get_database_path()
    init_db(db_path)

    try:
        access_token = get_access_token(owner_id)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if max_pages is None:
        max_pages = load_settings(config).sync.max_pages
    if max_pages < 1:
        raise click.UsageError("--max-pages must be at least 1")

    orchestrator = SyncOrchestrator.from_config(config, db_path, access_token)
    status, events = start_sync(
        orchestrator,
        owner_id,
        cooldown_ms=get_sync_cooldown_ms(config),
        full=full,
        max_pages=max_pages,
        trigger_type="cli",
    )
    if events is None:
        console.print(f"[yellow]Please wait before syncing again ({format_remaining(status.remaining_ms)} left)[/yellow]")
        sys.exit(2)

    console.print(f"Syncing bookmarks for {owner_id} ({'full' if full else 'incremental'})...")
    with create_progress() as progress:
        task_id = progress.add_task("Connecting", total=None)
        reporter = SyncProgressReporter(progress, task_id)
        terminal = asyncio.run(_drive(events, reporter))

    if isinstance(terminal, CompleteEvent):
        console.print(f"Fetched {terminal.total}, {terminal.new} new, {terminal.duplicates} duplicates skipped")
        return
    message = terminal.message if isinstance(terminal, ErrorEvent) else "sync ended without a result"
    console.print(f"[red]Sync failed: {message}[/red]")
    sys.exit(1)


@click.command()
@click.option("--owner", "-o", help="Owner id (default: BOOKMARKD_OWNER_ID)")
def cooldown(owner: str | None):
    """Show whether a sync may start now."""
    owner_id = resolve_owner(owner)
    init_db()
    with get_connection() as conn:
        status = check_cooldown(conn, owner_id, get_sync_cooldown_ms())

    last = status.last_sync_at or "never"
    if status.can_sync:
        console.print(f"[green]Ready to sync[/green] (last sync: {last})")
    else:
        console.print(f"[yellow]Cooldown: {format_remaining(status.remaining_ms)} left[/yellow] (last sync: {last})")


@click.command()
@click.option("--owner", "-o", help="Owner id (default: BOOKMARKD_OWNER_ID)")
@click.option("--limit", "-n", default=10, help="Number of runs to show")
def logs(owner: str | None, limit: int):
    """List recent sync runs."""
    owner_id = resolve_owner(owner)
    init_db()
    with get_connection(readonly=True) as conn:
        runs = get_sync_runs(conn, owner_id, limit=limit)

    if not runs:
        console.print("No sync runs yet.")
        return

    table = Table(show_header=True)
    table.add_column("Started", style="cyan")
    table.add_column("Status")
    table.add_column("Trigger")
    table.add_column("Fetched", justify="right")
    table.add_column("New", justify="right")
    table.add_column("Dupes", justify="right")
    table.add_column("Error")

    for run in runs:
        status_style = {"completed": "green", "failed": "red"}.get(run["status"], "yellow")
        table.add_row(
            run["started_at"][:19],
            f"[{status_style}]{run['status']}[/{status_style}]",
            run["trigger_type"] or "-",
            str(run["total_fetched"] or 0),
            str(run["new_count"] or 0),
            str(run["duplicates_skipped"] or 0),
            run["error_message"] or "",
        )

    console.print(table)
