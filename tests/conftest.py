"""Shared pytest fixtures for bookmarkd tests."""

import sys
from pathlib import Path

import pytest

# Add the package to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bookmarkd.db import init_db  # noqa: E402
from bookmarkd.fetcher import BookmarkPage, EnrichedPost, ReferencedPost, SourcePost, SourceUrl  # noqa: E402


class FakePostSource:
    """Serves canned bookmark pages and records every request."""

    def __init__(self, pages=None, error: Exception | None = None):
        self.pages = list(pages or [])
        self.error = error
        self.calls: list[dict] = []

    async def fetch(self, owner_id, access_token, max_results=100, pagination_token=None):
        self.calls.append(
            {
                "owner_id": owner_id,
                "access_token": access_token,
                "max_results": max_results,
                "pagination_token": pagination_token,
            }
        )
        if self.error is not None:
            raise self.error
        index = len(self.calls) - 1
        if index < len(self.pages):
            return self.pages[index]
        return BookmarkPage()


class FakeEnrichment:
    """Returns canned enriched posts by id; ids in ``failing`` raise."""

    def __init__(self, posts=None, failing=()):
        self.posts = dict(posts or {})
        self.failing = set(failing)
        self.calls: list[tuple[str, str]] = []

    async def fetch(self, author, post_id):
        self.calls.append((author, post_id))
        if post_id in self.failing:
            raise RuntimeError(f"enrichment down for {post_id}")
        return self.posts.get(post_id)


def make_post(post_id: str, author: str = "alice", text: str | None = None, *, quoted=None, retweeted=None, urls=()):
    referenced = []
    if quoted:
        referenced.append(ReferencedPost(type="quoted", id=quoted))
    if retweeted:
        referenced.append(ReferencedPost(type="retweeted", id=retweeted))
    return SourcePost(
        id=post_id,
        text=text if text is not None else f"post {post_id}",
        author_id=f"{author}-id",
        author_username=author,
        author_name=author.title(),
        created_at="2024-05-01T12:00:00.000Z",
        urls=[SourceUrl(url=f"https://t.co/{i}", expanded_url=u) for i, u in enumerate(urls)],
        referenced=referenced,
    )


def make_enriched(post_id: str, author: str = "bob", text: str = "", **kwargs) -> EnrichedPost:
    return EnrichedPost(id=post_id, author=author, author_name=author.title(), text=text or f"enriched {post_id}", **kwargs)


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "bookmarkd.db"
    init_db(path)
    return path


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests away from the user's config, data dir and tokens."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("BOOKMARKD_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("BOOKMARKD_SYNC_COOLDOWN_MINUTES", raising=False)
    monkeypatch.delenv("BOOKMARKD_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("BOOKMARKD_OWNER_ID", raising=False)
