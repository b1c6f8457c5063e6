"""Sync API routes: SSE progress stream, cooldown and run logs."""

import asyncio
import math
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse

from ...auth import get_access_token
from ...config import get_sync_cooldown_ms, load_settings
from ...db import count_sync_runs, get_connection, get_sync_runs
from ...models import CooldownResponse
from ...processor import PingEvent, SyncOrchestrator, check_cooldown, format_sse, pump_events, start_sync
from ..deps import get_owner_id

router = APIRouter(tags=["sync"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def serialize_sync_run(row) -> dict[str, Any]:
    return {
        "id": row["id"],
        "startedAt": row["started_at"],
        "completedAt": row["completed_at"],
        "status": row["status"],
        "totalFetched": row["total_fetched"],
        "newCount": row["new_count"],
        "duplicatesSkipped": row["duplicates_skipped"],
        "errorMessage": row["error_message"],
        "triggerType": row["trigger_type"],
    }


async def _event_stream(queue: asyncio.Queue, ping_interval: float) -> AsyncIterator[str]:
    """Drain run events as SSE frames, with a ping every *ping_interval* seconds.

    Pings follow a fixed schedule, so a steady stream of events does not
    hold them back.
    """
    loop = asyncio.get_running_loop()
    next_ping = loop.time() + ping_interval
    while True:
        now = loop.time()
        if now >= next_ping:
            yield format_sse(PingEvent())
            next_ping += ping_interval
            if next_ping <= now:
                next_ping = now + ping_interval
            continue
        try:
            event = await asyncio.wait_for(queue.get(), timeout=next_ping - now)
        except asyncio.TimeoutError:
            continue
        if event is None:
            break
        yield format_sse(event)


@router.get("/sync")
async def run_sync(
    request: Request,
    full: bool = Query(False, alias="all"),
    max_pages: int = Query(10, alias="maxPages", ge=1),
    owner_id: str = Depends(get_owner_id),
    x_access_token: str | None = Header(default=None),
):
    """
    Start a sync and stream its progress as Server-Sent Events.

    Events: start, page, duplicate, processing, complete, error, ping.
    Rejected with 429 while the owner's cooldown is active.
    """
    config = request.app.state.config
    db_path: Path = request.app.state.db_path
    cooldown_ms = get_sync_cooldown_ms(config)

    access_token = x_access_token
    if not access_token:
        try:
            access_token = get_access_token(owner_id)
        except ValueError as e:
            raise HTTPException(status_code=401, detail=str(e)) from e

    orchestrator = SyncOrchestrator.from_config(
        config,
        db_path,
        access_token,
        source=request.app.state.post_source,
        enrichment=request.app.state.enrichment_source,
    )
    status, events = start_sync(
        orchestrator,
        owner_id,
        cooldown_ms=cooldown_ms,
        full=full,
        max_pages=max_pages,
        trigger_type="manual",
    )
    if events is None:
        return JSONResponse(
            status_code=429,
            content={"error": "Please wait before syncing again", "cooldownRemaining": status.remaining_ms},
        )

    # The run keeps going if the client disconnects
    queue: asyncio.Queue = asyncio.Queue()
    task = asyncio.create_task(pump_events(events, queue))
    tasks: set = request.app.state.sync_tasks
    tasks.add(task)
    task.add_done_callback(tasks.discard)

    ping_interval = load_settings(config).sync.ping_interval_seconds
    return StreamingResponse(
        _event_stream(queue, ping_interval),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/sync/cooldown")
async def get_cooldown(request: Request, owner_id: str = Depends(get_owner_id)) -> dict[str, Any]:
    """Whether the owner may start a sync now."""
    cooldown_ms = get_sync_cooldown_ms(request.app.state.config)
    with get_connection(request.app.state.db_path) as conn:
        status = check_cooldown(conn, owner_id, cooldown_ms)
    return CooldownResponse(**status.to_dict()).model_dump()


@router.get("/sync/logs")
async def list_sync_logs(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    latest: bool = False,
    owner_id: str = Depends(get_owner_id),
) -> dict[str, Any]:
    """List the owner's sync runs, newest first."""
    with get_connection(request.app.state.db_path) as conn:
        if latest:
            rows = get_sync_runs(conn, owner_id, limit=1)
            return {"log": serialize_sync_run(rows[0]) if rows else None}

        rows = get_sync_runs(conn, owner_id, limit=limit, offset=(page - 1) * limit)
        total = count_sync_runs(conn, owner_id)

    return {
        "logs": [serialize_sync_run(row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
        },
    }
