"""Tests for the sync orchestrator: pagination, dedup, quotes, failure and cooldown."""

from datetime import datetime, timedelta, timezone

import asyncio

import pytest
from conftest import FakeEnrichment, FakePostSource, make_enriched, make_post

from bookmarkd.db import (
    count_running_runs,
    count_sync_runs,
    decode_snapshot,
    get_connection,
    get_links_for_post,
    get_post,
    get_post_ids,
    get_sync_run,
    insert_post,
)
from bookmarkd.fetcher import ArticleData, BookmarkPage, EnrichedPost, ExternalLink, SourceError
from bookmarkd.processor import (
    CompleteEvent,
    DuplicateEvent,
    ErrorEvent,
    PageEvent,
    ProcessingEvent,
    StartEvent,
    SyncOrchestrator,
    check_cooldown,
    start_sync,
)


def _orchestrator(db_path, source, enrichment=None, **kwargs):
    kwargs.setdefault("item_delay", 0)
    kwargs.setdefault("retry_attempts", 1)
    kwargs.setdefault("retry_delay", 0)
    return SyncOrchestrator(db_path, source, enrichment or FakeEnrichment(), "token", **kwargs)


async def _collect(orchestrator, owner_id, **kwargs):
    return [event async for event in orchestrator.run(owner_id, **kwargs)]


@pytest.mark.asyncio
async def test_incremental_sync_fetches_one_page_and_stores_new_posts(db_path):
    source = FakePostSource([BookmarkPage(posts=[make_post("1"), make_post("2")], next_token="next")])
    events = await _collect(_orchestrator(db_path, source), "owner-a")

    assert source.calls == [
        {"owner_id": "owner-a", "access_token": "token", "max_results": 50, "pagination_token": None}
    ]
    assert [event.type for event in events] == ["start", "page", "processing", "processing", "complete"]
    assert events[1] == PageEvent(page_number=1, items_found=2, cursor=None)
    assert events[-1] == CompleteEvent(total=2, new=2, duplicates=0)

    processing = events[2]
    assert isinstance(processing, ProcessingEvent)
    assert processing.to_dict()["item"] == {"id": "1", "author": "alice", "text": "post 1"}
    assert processing.to_dict()["bookmark"]["tweetUrl"] == "https://x.com/alice/status/1"

    with get_connection(db_path) as conn:
        assert get_post_ids(conn, "owner-a") == {"1", "2"}
        run = get_sync_run(conn, events[0].sync_id)
        assert run["status"] == "completed"
        assert run["new_count"] == 2
        assert run["trigger_type"] == "manual"


@pytest.mark.asyncio
async def test_full_sync_follows_cursors_up_to_max_pages(db_path):
    source = FakePostSource(
        [
            BookmarkPage(posts=[make_post("1")], next_token="c1"),
            BookmarkPage(posts=[make_post("2")], next_token="c2"),
            BookmarkPage(posts=[make_post("3")], next_token="c3"),
        ]
    )
    events = await _collect(_orchestrator(db_path, source), "owner-a", full=True, max_pages=2)

    assert [call["pagination_token"] for call in source.calls] == [None, "c1"]
    assert all(call["max_results"] == 100 for call in source.calls)
    pages = [event for event in events if isinstance(event, PageEvent)]
    assert [(page.page_number, page.cursor) for page in pages] == [(1, "c1"), (2, "c2")]
    assert events[-1] == CompleteEvent(total=2, new=2, duplicates=0)


@pytest.mark.asyncio
async def test_full_sync_stops_when_cursor_runs_out(db_path):
    source = FakePostSource([BookmarkPage(posts=[make_post("1")], next_token=None)])
    await _collect(_orchestrator(db_path, source), "owner-a", full=True, max_pages=10)
    assert len(source.calls) == 1


@pytest.mark.asyncio
async def test_known_posts_are_reported_as_duplicates(db_path):
    page = BookmarkPage(posts=[make_post("1"), make_post("2")])
    await _collect(_orchestrator(db_path, FakePostSource([page])), "owner-a")

    page = BookmarkPage(posts=[make_post("3"), make_post("1"), make_post("2")])
    events = await _collect(_orchestrator(db_path, FakePostSource([page])), "owner-a")

    assert [event.type for event in events[2:]] == ["processing", "duplicate", "duplicate", "complete"]
    assert events[3] == DuplicateEvent(post_id="1")
    assert events[-1] == CompleteEvent(total=3, new=1, duplicates=2)


@pytest.mark.asyncio
async def test_quoted_post_is_stored_once_per_owner(db_path):
    enrichment = FakeEnrichment({"9": make_enriched("9", author="bob", text="the quoted post")})
    page = BookmarkPage(
        posts=[make_post("1", quoted="9"), make_post("2", quoted="9"), make_post("9", author="bob")]
    )

    events = await _collect(_orchestrator(db_path, FakePostSource([page]), enrichment), "owner-a")
    await _collect(_orchestrator(db_path, FakePostSource([page]), enrichment), "owner-b")

    assert [event.type for event in events[2:]] == ["processing", "processing", "duplicate", "complete"]
    assert events[-1] == CompleteEvent(total=3, new=2, duplicates=1)

    with get_connection(db_path) as conn:
        for owner in ("owner-a", "owner-b"):
            assert get_post_ids(conn, owner) == {"1", "2", "9"}
            quoted = get_post(conn, owner, "9")
            assert quoted["source"] == "quoted"
            assert quoted["author"] == "bob"

            parent = get_post(conn, owner, "1")
            assert parent["is_quote"] == 1
            assert parent["quoted_post_id"] == "9"
            snapshot = decode_snapshot(parent["snapshot_kind"], parent["snapshot_json"])
            assert snapshot.kind == "quote"
            assert snapshot.text == "the quoted post"


@pytest.mark.asyncio
async def test_quote_fetch_failure_keeps_the_bookmark(db_path):
    enrichment = FakeEnrichment(failing={"9"})
    page = BookmarkPage(posts=[make_post("1", quoted="9")])

    events = await _collect(_orchestrator(db_path, FakePostSource([page]), enrichment), "owner-a")

    assert events[-1] == CompleteEvent(total=1, new=1, duplicates=0)
    with get_connection(db_path) as conn:
        assert get_post_ids(conn, "owner-a") == {"1"}
        row = get_post(conn, "owner-a", "1")
        assert row["is_quote"] == 1
        assert row["quoted_post_id"] is None
        assert row["snapshot_kind"] == "none"


@pytest.mark.asyncio
async def test_retweet_keeps_only_a_snapshot(db_path):
    enrichment = FakeEnrichment({"7": make_enriched("7", author="carol", text="original")})
    page = BookmarkPage(posts=[make_post("1", retweeted="7")])

    await _collect(_orchestrator(db_path, FakePostSource([page]), enrichment), "owner-a")

    with get_connection(db_path) as conn:
        assert get_post_ids(conn, "owner-a") == {"1"}
        row = get_post(conn, "owner-a", "1")
        assert row["is_retweet"] == 1
        snapshot = decode_snapshot(row["snapshot_kind"], row["snapshot_json"])
        assert snapshot.kind == "retweet"
        assert snapshot.author == "carol"


@pytest.mark.asyncio
async def test_enrichment_sets_category_article_link_and_external_preview(db_path):
    enriched = make_enriched(
        "1",
        author="alice",
        article=ArticleData(url="https://x.com/alice/article/1", title="Deep dive", image_url="https://img/c.jpg"),
        external=ExternalLink(url="https://example.com/post", title="Example post"),
    )
    enrichment = FakeEnrichment({"1": enriched})
    page = BookmarkPage(posts=[make_post("1", urls=["https://example.com/post", "https://x.com/bob/status/5"])])

    await _collect(_orchestrator(db_path, FakePostSource([page]), enrichment), "owner-a")

    with get_connection(db_path) as conn:
        row = get_post(conn, "owner-a", "1")
        assert row["category"] == "article"
        assert row["author_name"] == "Alice"
        assert row["snapshot_kind"] == "article"

        links = {link["expanded_url"]: link for link in get_links_for_post(conn, "owner-a", "1")}
        assert set(links) == {"https://example.com/post", "https://x.com/alice/article/1"}
        assert links["https://x.com/alice/article/1"]["link_type"] == "article"
        assert links["https://example.com/post"]["preview_title"] == "Example post"


@pytest.mark.asyncio
async def test_enrichment_is_retried_before_giving_up(db_path):
    enrichment = FakeEnrichment(failing={"1"})
    page = BookmarkPage(posts=[make_post("1")])

    events = await _collect(
        _orchestrator(db_path, FakePostSource([page]), enrichment, retry_attempts=3), "owner-a"
    )

    assert enrichment.calls == [("alice", "1")] * 3
    assert events[-1] == CompleteEvent(total=1, new=1, duplicates=0)


@pytest.mark.asyncio
async def test_source_error_fails_the_run(db_path):
    source = FakePostSource(error=SourceError("Bookmark source returned HTTP 500: boom"))
    events = await _collect(_orchestrator(db_path, source), "owner-a")

    assert [type(event) for event in events] == [StartEvent, ErrorEvent]
    assert events[-1].message == "Bookmark source returned HTTP 500: boom"

    with get_connection(db_path) as conn:
        run = get_sync_run(conn, events[0].sync_id)
        assert run["status"] == "failed"
        assert run["error_message"] == "Bookmark source returned HTTP 500: boom"
        assert count_running_runs(conn, "owner-a") == 0


@pytest.mark.asyncio
async def test_failure_mid_run_keeps_items_already_stored(db_path, monkeypatch):
    from bookmarkd.processor import pipeline

    real_save_post = pipeline.save_post
    calls = []

    async def flaky_save_post(conn, ctx, post, enrichment, **kwargs):
        calls.append(post.id)
        if len(calls) == 2:
            raise RuntimeError("disk full")
        return await real_save_post(conn, ctx, post, enrichment, **kwargs)

    monkeypatch.setattr(pipeline, "save_post", flaky_save_post)
    page = BookmarkPage(posts=[make_post("1"), make_post("2"), make_post("3")])

    events = await _collect(_orchestrator(db_path, FakePostSource([page])), "owner-a")

    assert [event.type for event in events] == ["start", "page", "processing", "error"]
    assert events[-1].message == "disk full"
    with get_connection(db_path) as conn:
        assert get_post_ids(conn, "owner-a") == {"1"}
        run = get_sync_run(conn, events[0].sync_id)
        assert run["status"] == "failed"
        assert run["new_count"] == 1


@pytest.mark.asyncio
async def test_post_stored_by_another_run_mid_item_counts_as_duplicate(db_path):
    class RacingEnrichment(FakeEnrichment):
        async def fetch(self, author, post_id):
            with get_connection(db_path) as other:
                url = f"https://x.com/{author}/status/{post_id}"
                insert_post(other, "owner-a", post_id, author, "stored elsewhere", url)
                other.commit()
            return await super().fetch(author, post_id)

    page = BookmarkPage(posts=[make_post("1")])
    events = await _collect(_orchestrator(db_path, FakePostSource([page]), RacingEnrichment()), "owner-a")

    assert [event.type for event in events] == ["start", "page", "duplicate", "complete"]
    assert events[2] == DuplicateEvent(post_id="1")
    assert events[-1] == CompleteEvent(total=1, new=0, duplicates=1)
    with get_connection(db_path) as conn:
        assert get_post(conn, "owner-a", "1")["text"] == "stored elsewhere"
        run = get_sync_run(conn, events[0].sync_id)
        assert run["new_count"] == 0
        assert run["duplicates_skipped"] == 1


@pytest.mark.asyncio
async def test_concurrent_runs_store_each_post_once(db_path):
    class SlowEnrichment(FakeEnrichment):
        async def fetch(self, author, post_id):
            await asyncio.sleep(0.01)
            return await super().fetch(author, post_id)

    ids = ["1", "2", "3", "4"]
    page = BookmarkPage(posts=[make_post(post_id) for post_id in ids])
    first = _orchestrator(db_path, FakePostSource([page]), SlowEnrichment())
    second = _orchestrator(db_path, FakePostSource([page]), SlowEnrichment())

    runs = await asyncio.gather(_collect(first, "owner-a"), _collect(second, "owner-a"))

    completes = [events[-1] for events in runs]
    assert all(isinstance(complete, CompleteEvent) for complete in completes)
    assert all(complete.new + complete.duplicates == len(ids) for complete in completes)
    assert sum(complete.new for complete in completes) == len(ids)

    with get_connection(db_path) as conn:
        rows = conn.execute(
            "SELECT id, COUNT(*) FROM posts WHERE owner_id = ? GROUP BY id", ("owner-a",)
        ).fetchall()
        assert sorted(row[0] for row in rows) == ids
        assert all(row[1] == 1 for row in rows)


@pytest.mark.asyncio
async def test_source_author_details_win_over_enrichment(db_path):
    enriched = EnrichedPost(
        id="1",
        author="alice",
        author_name="Someone Else",
        author_avatar_url="https://pbs.twimg.com/profile_images/alice.jpg",
    )
    page = BookmarkPage(posts=[make_post("1")])

    await _collect(_orchestrator(db_path, FakePostSource([page]), FakeEnrichment({"1": enriched})), "owner-a")

    with get_connection(db_path) as conn:
        row = get_post(conn, "owner-a", "1")
        assert row["author_name"] == "Alice"
        assert row["author_avatar_url"] == "https://pbs.twimg.com/profile_images/alice.jpg"

def test_check_cooldown_reports_remaining_time(db_path):
    with get_connection(db_path) as conn:
        assert check_cooldown(conn, "owner-a", 60_000).can_sync is True

        completed_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        conn.execute(
            """
            INSERT INTO sync_runs (id, owner_id, started_at, completed_at, status, trigger_type)
            VALUES ('r1', 'owner-a', ?, ?, 'completed', 'manual')
            """,
            (completed_at.isoformat(), completed_at.isoformat()),
        )
        conn.commit()

        status = check_cooldown(conn, "owner-a", 60_000, now=completed_at + timedelta(seconds=20))
        assert status.can_sync is False
        assert status.remaining_ms == 40_000
        assert status.to_dict()["lastSyncAt"] == completed_at.isoformat()

        later = check_cooldown(conn, "owner-a", 60_000, now=completed_at + timedelta(minutes=5))
        assert later.can_sync is True
        assert later.remaining_ms == 0

        assert check_cooldown(conn, "owner-b", 60_000).can_sync is True


@pytest.mark.asyncio
async def test_second_sync_within_cooldown_is_rejected_without_a_run(db_path):
    orchestrator = _orchestrator(db_path, FakePostSource([BookmarkPage(posts=[make_post("1")])]))

    status, events = start_sync(orchestrator, "owner-a", cooldown_ms=60 * 60 * 1000)
    assert status.can_sync is True
    assert [event async for event in events][-1].type == "complete"

    status, events = start_sync(orchestrator, "owner-a", cooldown_ms=60 * 60 * 1000)
    assert events is None
    assert status.can_sync is False
    assert status.remaining_ms > 0

    with get_connection(db_path) as conn:
        assert count_sync_runs(conn, "owner-a") == 1
        assert count_running_runs(conn, "owner-a") == 0
