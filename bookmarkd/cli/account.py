"""Account data command."""

import rich_click as click

from ..db import delete_owner_data, get_connection, init_db
from ._console import console
from ._helpers import resolve_owner


@click.command()
@click.option("--owner", "-o", help="Owner id (default: BOOKMARKD_OWNER_ID)")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
def clear(owner: str | None, yes: bool):
    """Delete every stored post, tag, read mark and sync run for an owner."""
    owner_id = resolve_owner(owner)
    if not yes:
        click.confirm(f"Delete all data for {owner_id}?", abort=True)

    init_db()
    with get_connection() as conn:
        deleted = delete_owner_data(conn, owner_id)

    total = sum(deleted.values())
    console.print(f"Deleted {total} rows for {owner_id}")
    for table, count in deleted.items():
        if count:
            console.print(f"  {table}: {count}")
