"""Stats command."""

import rich_click as click
from rich.table import Table

from ..db import get_connection, get_owner_stats, get_tag_counts, init_db
from ._console import console
from ._helpers import resolve_owner


@click.command()
@click.option("--owner", "-o", help="Owner id (default: BOOKMARKD_OWNER_ID)")
def stats(owner: str | None):
    """Show collection statistics."""
    owner_id = resolve_owner(owner)
    init_db()
    with get_connection(readonly=True) as conn:
        s = get_owner_stats(conn, owner_id)
        tag_rows = get_tag_counts(conn, owner_id)

    if s["total"] == 0:
        console.print("No bookmarks found.")
        return

    table = Table(title=f"Bookmarks for {owner_id}", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Total", str(s["total"]))
    table.add_row("Unread", str(s["unread"]))
    table.add_row("Read", str(s["read"]))
    table.add_row("With media", str(s["withMedia"]))
    for category, count in sorted(s["categories"].items()):
        table.add_row(f"  {category}", str(count))

    console.print(table)

    if tag_rows:
        console.print("")
        tag_table = Table(title="Tags", show_header=False)
        tag_table.add_column("Tag", style="cyan")
        tag_table.add_column("Posts", justify="right")
        for row in tag_rows:
            tag_table.add_row(row["tag"], str(row["count"]))
        console.print(tag_table)
