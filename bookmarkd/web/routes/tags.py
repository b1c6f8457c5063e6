"""Owner-wide tag routes."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from ...db import delete_tag, get_connection, get_tag_counts
from ...models import TagCount, TagRequest
from ..deps import get_owner_id

router = APIRouter(tags=["tags"])


@router.get("/tags")
async def list_tags(request: Request, owner_id: str = Depends(get_owner_id)) -> dict[str, Any]:
    """All of the owner's tags with post counts, most used first."""
    with get_connection(request.app.state.db_path, readonly=True) as conn:
        rows = get_tag_counts(conn, owner_id)
    return {"tags": [TagCount(tag=row["tag"], count=row["count"]).model_dump() for row in rows]}


@router.delete("/tags")
async def remove_tag_everywhere(
    request: Request, body: TagRequest, owner_id: str = Depends(get_owner_id)
) -> dict[str, Any]:
    if not body.tag:
        raise HTTPException(status_code=400, detail="Tag is required")
    with get_connection(request.app.state.db_path) as conn:
        removed = delete_tag(conn, owner_id, body.tag.strip().lower())
        conn.commit()
    return {"success": True, "removed": removed}
