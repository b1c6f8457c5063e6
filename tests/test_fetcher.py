"""Tests for the bookmark source and enrichment clients."""

import httpx
import pytest

from bookmarkd.fetcher import (
    BookmarkSource,
    EnrichedPost,
    EnrichmentError,
    EnrichmentSource,
    SourceAuthError,
    SourceError,
    parse_bookmarks_response,
)
from bookmarkd.fetcher.bookmarks import build_bookmarks_params

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def bookmarks_payload():
    return {
        "data": [
            {
                "id": "100",
                "text": "short text https://t.co/abc",
                "note_tweet": {"text": "the full long text https://t.co/abc"},
                "author_id": "u1",
                "created_at": "2024-05-01T12:00:00.000Z",
                "entities": {
                    "urls": [
                        {
                            "url": "https://t.co/abc",
                            "expanded_url": "https://example.com/post",
                            "display_url": "example.com/post",
                        }
                    ]
                },
                "referenced_tweets": [{"type": "quoted", "id": "90"}],
                "attachments": {"media_keys": ["3_1", "missing"]},
            },
            {"id": "101", "text": "no author", "author_id": "u404"},
        ],
        "includes": {
            "users": [
                {"id": "u1", "username": "alice", "name": "Alice", "profile_image_url": "https://pbs/a.jpg"}
            ],
            "media": [
                {
                    "media_key": "3_1",
                    "type": "video",
                    "preview_image_url": "https://pbs/thumb.jpg",
                    "width": 640,
                    "height": 360,
                    "duration_ms": 12000,
                }
            ],
        },
        "meta": {"result_count": 2, "next_token": "next-1"},
    }


@pytest.fixture
def fxtwitter_payload():
    return {
        "code": 200,
        "tweet": {
            "id": "200",
            "text": "enriched text",
            "created_at": "Wed May 01 12:00:00 +0000 2024",
            "author": {"screen_name": "bob", "name": "Bob", "avatar_url": "https://pbs/b.jpg"},
            "media": {
                "photos": [{"url": "https://pbs/p.jpg", "width": 100, "height": 50}],
                "all": [{"type": "photo", "url": "https://pbs/p.jpg"}],
            },
            "article": {
                "title": "Long read",
                "preview_text": "Preview",
                "cover_media": {"media_info": {"original_img_url": "https://pbs/cover.jpg"}},
                "content": {"blocks": [{"type": "unstyled", "text": "Body"}], "entityMap": []},
            },
            "external": {"expanded_url": "https://example.com/card", "title": "Card"},
            "quote": {
                "id": "201",
                "text": "quoted",
                "author": {"screen_name": "carol"},
                "quote": {"id": "202", "text": "two hops away", "author": {"screen_name": "dan"}},
            },
        },
    }


# ============================================================================
# Bookmark source
# ============================================================================


def test_parse_bookmarks_response_resolves_expansions(bookmarks_payload):
    page = parse_bookmarks_response(bookmarks_payload)

    assert page.next_token == "next-1"
    assert page.result_count == 2
    first, second = page.posts

    assert first.text == "the full long text https://t.co/abc"
    assert first.author == "alice"
    assert first.author_avatar_url == "https://pbs/a.jpg"
    assert first.expanded_urls == ["https://example.com/post"]
    assert first.is_quote and not first.is_retweet and not first.is_reply
    assert first.reference("quoted") == "90"
    assert len(first.media) == 1
    assert first.media[0].url == "https://pbs/thumb.jpg"
    assert first.media[0].duration_ms == 12000

    assert second.author == "unknown"
    assert second.to_raw()["text"] == "no author"
    assert first.to_raw()["author"]["username"] == "alice"


def test_build_bookmarks_params_clamps_page_size():
    assert build_bookmarks_params(500)["max_results"] == 100
    assert build_bookmarks_params(0)["max_results"] == 1
    assert "pagination_token" not in build_bookmarks_params(10)
    assert build_bookmarks_params(10, "tok")["pagination_token"] == "tok"


@pytest.mark.asyncio
async def test_bookmark_source_sends_bearer_token_and_cursor(bookmarks_payload):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json=bookmarks_payload)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        source = BookmarkSource(api_base="https://api.test/2/", client=client)
        page = await source.fetch("owner-1", "secret", max_results=50, pagination_token="cur")

    assert seen["auth"] == "Bearer secret"
    assert seen["url"].startswith("https://api.test/2/users/owner-1/bookmarks?")
    assert "max_results=50" in seen["url"]
    assert "pagination_token=cur" in seen["url"]
    assert [post.id for post in page.posts] == ["100", "101"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,error",
    [(401, SourceAuthError), (403, SourceAuthError), (429, SourceError), (500, SourceError)],
)
async def test_bookmark_source_maps_http_errors(status, error):
    transport = httpx.MockTransport(lambda request: httpx.Response(status, text="nope"))
    async with httpx.AsyncClient(transport=transport) as client:
        source = BookmarkSource(client=client)
        with pytest.raises(error):
            await source.fetch("owner-1", "secret")


@pytest.mark.asyncio
async def test_bookmark_source_wraps_transport_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SourceError, match="connection refused"):
            await BookmarkSource(client=client).fetch("owner-1", "secret")


# ============================================================================
# Enrichment source
# ============================================================================


def test_enriched_post_parses_article_external_and_one_quote_hop(fxtwitter_payload):
    post = EnrichedPost.from_fxtwitter_json(fxtwitter_payload)

    assert post is not None
    assert post.author == "bob"
    assert post.has_photos and not post.has_videos
    assert post.article.url == "https://x.com/bob/article/200"
    assert post.article.title == "Long read"
    assert post.article.description == "Preview"
    assert post.article.image_url == "https://pbs/cover.jpg"
    assert post.article.content["blocks"][0]["text"] == "Body"
    assert post.external.url == "https://example.com/card"

    assert post.quote.id == "201"
    assert post.quote.author == "carol"
    assert post.quote.quote is None


def test_enriched_post_without_tweet_is_none():
    assert EnrichedPost.from_fxtwitter_json({"code": 404, "message": "NOT_FOUND"}) is None
    assert EnrichedPost.from_fxtwitter_json(None) is None


@pytest.mark.asyncio
async def test_enrichment_source_fetches_status(fxtwitter_payload):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["ua"] = request.headers["User-Agent"]
        return httpx.Response(200, json=fxtwitter_payload)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        source = EnrichmentSource(base_url="https://fx.test", user_agent="tests/1.0", client=client)
        post = await source.fetch("bob", "200")

    assert seen == {"path": "/bob/status/200", "ua": "tests/1.0"}
    assert post.id == "200"


@pytest.mark.asyncio
async def test_enrichment_source_returns_none_for_missing_posts():
    transport = httpx.MockTransport(lambda request: httpx.Response(404, json={"code": 404}))
    async with httpx.AsyncClient(transport=transport) as client:
        assert await EnrichmentSource(client=client).fetch("i", "1") is None

    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    async with httpx.AsyncClient(transport=transport) as client:
        assert await EnrichmentSource(client=client).fetch("i", "1") is None


@pytest.mark.asyncio
async def test_enrichment_source_raises_on_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(EnrichmentError, match="timed out"):
            await EnrichmentSource(timeout=0.5, client=client).fetch("i", "1")
