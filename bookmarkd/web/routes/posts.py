"""Manual post add route."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from ...config import load_settings
from ...db import get_connection
from ...models import AddPostRequest
from ...processor import EnrichmentUnavailable, InvalidPostUrl, add_post_by_url
from ..deps import get_owner_id

router = APIRouter(tags=["posts"])


def _serialize_post(row) -> dict[str, Any] | None:
    if row is None:
        return None
    return {
        "id": row["id"],
        "author": row["author"],
        "authorName": row["author_name"],
        "authorProfileImageUrl": row["author_avatar_url"],
        "text": row["text"],
        "tweetUrl": row["post_url"],
        "createdAt": row["created_at"],
        "processedAt": row["processed_at"],
        "category": row["category"],
        "source": row["source"],
        "isQuote": bool(row["is_quote"]),
        "quotedTweetId": row["quoted_post_id"],
    }


@router.post("/tweets/add")
async def add_post(request: Request, body: AddPostRequest, owner_id: str = Depends(get_owner_id)) -> dict[str, Any]:
    """Add a post to the owner's collection by its status URL."""
    if not body.url:
        raise HTTPException(status_code=400, detail="URL is required")

    enrich_cfg = load_settings(request.app.state.config).enrichment
    with get_connection(request.app.state.db_path) as conn:
        try:
            result = await add_post_by_url(
                conn,
                owner_id,
                body.url,
                request.app.state.enrichment_source,
                source=body.source,
                retry_attempts=enrich_cfg.retry_attempts,
                retry_delay=enrich_cfg.retry_delay_seconds,
            )
        except InvalidPostUrl as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except EnrichmentUnavailable as e:
            raise HTTPException(status_code=502, detail=str(e)) from e

    if result.is_duplicate:
        return {
            "success": False,
            "isDuplicate": True,
            "message": "This post is already in your bookmarks",
            "bookmark": _serialize_post(result.post),
        }
    return {
        "success": True,
        "isDuplicate": False,
        "message": "Post added successfully!",
        "bookmark": _serialize_post(result.post),
    }
