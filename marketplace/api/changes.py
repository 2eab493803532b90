"""Change notifications for live-updating clients.

GET /v1/changes/version is the polling form.  GET /v1/changes/stream is
Server-Sent Events: a ``hello`` event carrying the current version, then
one ``change`` event per committed mutation.  Clients treat every event as
"re-run the queries that read this table".
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from marketplace.services.change_feed import ChangeFeed, change_feed, format_sse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/changes", tags=["changes"])


class VersionOut(BaseModel):
    version: int


@router.get("/version", response_model=VersionOut)
async def get_version() -> VersionOut:
    return VersionOut(version=await change_feed.current_version())


async def _event_stream(feed: ChangeFeed, request: Request) -> AsyncIterator[str]:
    # Subscribed before the version read: every event after hello is delivered.
    events = await feed.subscribe()
    try:
        version = await feed.current_version()
        yield f'id: {version}\nevent: hello\ndata: {{"version": {version}}}\n\n'

        async for event in events:
            if await request.is_disconnected():
                break
            yield format_sse(event)
    finally:
        await events.aclose()
        logger.debug("Change stream closed")


@router.get("/stream")
async def stream_changes(request: Request) -> StreamingResponse:
    logger.debug("Change stream opened")
    return StreamingResponse(
        _event_stream(change_feed, request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
