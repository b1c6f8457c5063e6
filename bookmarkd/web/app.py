"""FastAPI application for the bookmarkd API."""

from fastapi import FastAPI

from .. import __version__
from ..config import get_database_path, load_config
from ..db import init_db
from ..fetcher import BookmarkSource, EnrichmentSource
from .routes import account, bookmarks, feed, posts, stats, sync, tags


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="bookmarkd",
        description="Bookmark sync and feed API",
        version=__version__,
    )

    config = load_config()
    app.state.config = config
    app.state.db_path = get_database_path()

    # Collaborators; tests replace these on app.state
    app.state.post_source = BookmarkSource.from_config(config)
    app.state.enrichment_source = EnrichmentSource.from_config(config)

    # Strong references to in-flight background sync tasks
    app.state.sync_tasks = set()

    init_db(app.state.db_path)

    app.include_router(sync.router, prefix="/api")
    app.include_router(feed.router, prefix="/api")
    app.include_router(bookmarks.router, prefix="/api")
    app.include_router(tags.router, prefix="/api")
    app.include_router(posts.router, prefix="/api")
    app.include_router(stats.router, prefix="/api")
    app.include_router(account.router, prefix="/api")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
