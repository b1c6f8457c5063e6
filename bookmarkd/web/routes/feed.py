"""Feed API route."""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from ...config import load_settings
from ...feed import FeedQuery, assemble_feed
from ..deps import get_owner_id

router = APIRouter(tags=["feed"])


@router.get("/feed")
async def get_feed(
    request: Request,
    page: int = 1,
    limit: int | None = None,
    filter: str = "all",
    unread_only: bool = Query(True, alias="unreadOnly"),
    search: str | None = None,
    tags: list[str] | None = Query(None, alias="tag"),
    owner_id: str = Depends(get_owner_id),
) -> dict[str, Any]:
    """
    Get one page of the owner's feed, newest first.

    Filters:
    - filter: all, photos, videos, text, articles, quoted, manual
    - unreadOnly: hide read posts (default true)
    - search: match text, author or link preview title/description
    - tag: repeatable; posts must carry every tag
    """
    feed_cfg = load_settings(request.app.state.config).feed
    query = FeedQuery(
        page=page,
        limit=limit if limit is not None else feed_cfg.default_limit,
        filter_type=filter,
        unread_only=unread_only,
        search=search,
        tags=tags or [],
    ).normalized(max_limit=feed_cfg.max_limit)

    result = await assemble_feed(request.app.state.db_path, owner_id, query)
    return result.to_dict()
