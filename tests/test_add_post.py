"""Tests for adding a single post by URL."""

import pytest
from conftest import FakeEnrichment, make_enriched

from bookmarkd.db import decode_snapshot, get_connection, get_links_for_post, get_media_for_post, get_post
from bookmarkd.fetcher import ArticleData
from bookmarkd.processor import EnrichmentUnavailable, InvalidPostUrl, add_post_by_url, determine_category


@pytest.mark.asyncio
async def test_add_post_stores_quote_media_and_links(db_path):
    quoted = make_enriched("9", author="bob", text="quoted text", photos=[{"url": "https://pbs/q.jpg"}])
    enriched = make_enriched(
        "55",
        author="dave",
        text="look at this",
        media_all=[
            {"type": "photo", "url": "https://pbs/a.jpg", "width": 10, "height": 10},
            {"type": "video", "url": "https://video/b.mp4", "thumbnail_url": "https://pbs/b.jpg", "duration": 1.5},
        ],
        urls=[
            {"url": "https://t.co/a", "expanded_url": "https://github.com/dave/repo"},
            {"url": "https://t.co/b", "expanded_url": "https://x.com/bob/status/9"},
        ],
        quote=quoted,
    )
    enrichment = FakeEnrichment({"55": enriched})

    with get_connection(db_path) as conn:
        result = await add_post_by_url(conn, "owner-a", "https://x.com/dave/status/55?s=20", enrichment)

        assert result.is_duplicate is False
        assert result.category == "video"
        assert result.quoted_post_id == "9"

        row = get_post(conn, "owner-a", "55")
        assert row["source"] == "manual"
        assert row["post_url"] == "https://x.com/dave/status/55"
        snapshot = decode_snapshot(row["snapshot_kind"], row["snapshot_json"])
        assert snapshot.kind == "quote"
        assert snapshot.author == "bob"

        media = get_media_for_post(conn, "owner-a", "55")
        assert [m["id"] for m in media] == ["55_0", "55_1"]
        assert media[1]["duration_ms"] == 1500
        assert media[1]["preview_url"] == "https://pbs/b.jpg"

        links = [link["expanded_url"] for link in get_links_for_post(conn, "owner-a", "55")]
        assert links == ["https://github.com/dave/repo"]

        quoted_row = get_post(conn, "owner-a", "9")
        assert quoted_row["source"] == "quoted"
        assert quoted_row["category"] == "photo"
        assert [m["id"] for m in get_media_for_post(conn, "owner-a", "9")] == ["9_photo_0"]


@pytest.mark.asyncio
async def test_add_post_duplicate_skips_enrichment(db_path):
    enrichment = FakeEnrichment({"55": make_enriched("55", author="dave")})

    with get_connection(db_path) as conn:
        await add_post_by_url(conn, "owner-a", "https://x.com/dave/status/55", enrichment)
        result = await add_post_by_url(conn, "owner-a", "https://x.com/dave/status/55", enrichment)

    assert result.is_duplicate is True
    assert result.post["id"] == "55"
    assert enrichment.calls == [("dave", "55")]


@pytest.mark.asyncio
async def test_add_post_rejects_bad_url_and_missing_enrichment(db_path):
    with get_connection(db_path) as conn:
        with pytest.raises(InvalidPostUrl):
            await add_post_by_url(conn, "owner-a", "https://example.com/x", FakeEnrichment())
        with pytest.raises(EnrichmentUnavailable):
            await add_post_by_url(
                conn, "owner-a", "https://x.com/dave/status/1", FakeEnrichment(), retry_attempts=2, retry_delay=0
            )


def test_determine_category_precedence():
    article = ArticleData(url="https://x.com/a/article/1")
    assert determine_category(None) == "text"
    assert determine_category(make_enriched("1", article=article, videos=[{"url": "v"}])) == "article"
    assert determine_category(make_enriched("1", videos=[{"url": "v"}], photos=[{"url": "p"}])) == "video"
    assert determine_category(make_enriched("1", photos=[{"url": "p"}])) == "photo"
    assert determine_category(make_enriched("1")) == "text"
