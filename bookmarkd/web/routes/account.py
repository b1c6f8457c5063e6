"""Account data routes."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from ...db import delete_owner_data, get_connection
from ..deps import get_owner_id

log = logging.getLogger(__name__)

router = APIRouter(tags=["account"])


@router.post("/account/clear")
async def clear_account(request: Request, owner_id: str = Depends(get_owner_id)) -> dict[str, Any]:
    """Delete every stored row belonging to the owner."""
    with get_connection(request.app.state.db_path) as conn:
        deleted = delete_owner_data(conn, owner_id)
    log.info("Cleared data for %s: %s", owner_id, deleted)
    return {
        "success": True,
        "message": "All data cleared successfully.",
        "deleted": deleted,
    }
