"""Collection statistics route."""

from typing import Any

from fastapi import APIRouter, Depends, Request

from ...db import get_connection, get_owner_stats
from ...models import StatsResponse
from ..deps import get_owner_id

router = APIRouter(tags=["stats"])


@router.get("/stats")
async def get_stats(request: Request, owner_id: str = Depends(get_owner_id)) -> dict[str, Any]:
    with get_connection(request.app.state.db_path, readonly=True) as conn:
        stats = get_owner_stats(conn, owner_id)
    return StatsResponse(**stats).model_dump()
