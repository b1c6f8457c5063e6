"""Init command."""

import rich_click as click

from ..auth import get_access_token, get_default_owner
from ..config import get_config_path, get_data_dir, get_database_path, load_config, save_config
from ..db import get_connection, init_db
from ._console import console, status_icon


@click.command()
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def init(force: bool):
    """Initialize bookmarkd data directory, configuration and database.

    Creates:
    - Data directory (~/.local/share/bookmarkd/ or BOOKMARKD_DATA_DIR)
    - Config file (~/.config/bookmarkd/config.json)
    - Database (bookmarkd.db)
    """
    data_dir = get_data_dir()
    config_path = get_config_path()
    db_path = get_database_path()

    console.print("Initializing bookmarkd...")
    console.print(f"  Data directory: {data_dir}")
    console.print(f"  Config file: {config_path}")

    data_dir.mkdir(parents=True, exist_ok=True)

    if config_path.exists() and not force:
        console.print("  Config exists (use --force to overwrite)")
    else:
        save_config(load_config())
        console.print("  Created config file")

    init_db(db_path)
    with get_connection(db_path, readonly=True) as conn:
        conn.execute("SELECT 1 FROM posts LIMIT 1")
    console.print(f"  {status_icon(True)} Database ready: {db_path}")

    owner = get_default_owner()
    if not owner:
        console.print(f"  {status_icon(False)} No default owner (set BOOKMARKD_OWNER_ID)")
        return
    try:
        get_access_token(owner)
    except ValueError as e:
        console.print(f"  {status_icon(False)} {e}")
    else:
        console.print(f"  {status_icon(True)} Access token found for {owner}")
