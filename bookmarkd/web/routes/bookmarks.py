"""Per-bookmark routes: read status and tags."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from ...db import (
    MAX_TAG_LENGTH,
    add_tag,
    get_connection,
    get_tags_for_post,
    mark_read,
    mark_unread,
    post_exists,
    remove_tag,
)
from ...models import TagRequest
from ..deps import get_owner_id

router = APIRouter(tags=["bookmarks"])


def _require_post(conn, owner_id: str, post_id: str) -> None:
    if not post_exists(conn, owner_id, post_id):
        raise HTTPException(status_code=404, detail="Bookmark not found")


def _clean_tag(tag: str | None) -> str:
    if not tag or not isinstance(tag, str):
        raise HTTPException(status_code=400, detail="Tag is required")
    clean = tag.strip().lower()
    if not clean:
        raise HTTPException(status_code=400, detail="Tag cannot be empty")
    if len(clean) > MAX_TAG_LENGTH:
        raise HTTPException(status_code=400, detail=f"Tag must be {MAX_TAG_LENGTH} characters or less")
    return clean


@router.post("/bookmarks/{post_id}/read")
async def mark_bookmark_read(request: Request, post_id: str, owner_id: str = Depends(get_owner_id)) -> dict[str, Any]:
    with get_connection(request.app.state.db_path) as conn:
        _require_post(conn, owner_id, post_id)
        read_at = mark_read(conn, owner_id, post_id)
        conn.commit()
    return {"success": True, "isRead": True, "readAt": read_at}


@router.delete("/bookmarks/{post_id}/read")
async def mark_bookmark_unread(
    request: Request, post_id: str, owner_id: str = Depends(get_owner_id)
) -> dict[str, Any]:
    with get_connection(request.app.state.db_path) as conn:
        _require_post(conn, owner_id, post_id)
        mark_unread(conn, owner_id, post_id)
        conn.commit()
    return {"success": True, "isRead": False, "readAt": None}


@router.get("/bookmarks/{post_id}/tags")
async def list_bookmark_tags(request: Request, post_id: str, owner_id: str = Depends(get_owner_id)) -> dict[str, Any]:
    with get_connection(request.app.state.db_path, readonly=True) as conn:
        _require_post(conn, owner_id, post_id)
        tags = get_tags_for_post(conn, owner_id, post_id)
    return {"tags": tags}


@router.post("/bookmarks/{post_id}/tags")
async def add_bookmark_tag(
    request: Request, post_id: str, body: TagRequest, owner_id: str = Depends(get_owner_id)
) -> dict[str, Any]:
    """Attach a tag; adding a tag the post already has is a success."""
    tag = _clean_tag(body.tag)
    with get_connection(request.app.state.db_path) as conn:
        _require_post(conn, owner_id, post_id)
        add_tag(conn, owner_id, post_id, tag)
        conn.commit()
    return {"success": True, "tag": tag}


@router.delete("/bookmarks/{post_id}/tags")
async def remove_bookmark_tag(
    request: Request, post_id: str, body: TagRequest, owner_id: str = Depends(get_owner_id)
) -> dict[str, Any]:
    if not body.tag:
        raise HTTPException(status_code=400, detail="Tag is required")
    with get_connection(request.app.state.db_path) as conn:
        _require_post(conn, owner_id, post_id)
        remove_tag(conn, owner_id, post_id, body.tag.strip().lower())
        conn.commit()
    return {"success": True}
