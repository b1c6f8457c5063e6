"""CLI entry point for bookmarkd."""

import logging

import rich_click as click
from rich.logging import RichHandler

from .. import __version__

# Import command modules; keep module names free so `bookmarkd.cli.<module>` resolves.
from . import account as _account_mod
from . import init_cmd as _init_mod
from . import posts as _posts_mod
from . import stats as _stats_mod
from . import sync_cmd as _sync_mod
from . import web as _web_mod
from ._console import console


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Sync, enrich and browse your bookmarked posts."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


# Register commands
cli.add_command(_init_mod.init)
cli.add_command(_sync_mod.sync)
cli.add_command(_sync_mod.cooldown)
cli.add_command(_sync_mod.logs)
cli.add_command(_stats_mod.stats)
cli.add_command(_posts_mod.add)
cli.add_command(_posts_mod.tag)
cli.add_command(_account_mod.clear)
cli.add_command(_web_mod.web)


if __name__ == "__main__":
    cli()
