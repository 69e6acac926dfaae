from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from quincy.core.security import get_optional_user_id
from quincy.services.access_gate import Decision, gate_snapshot
from quincy.services.progress import (
    ProgressResolver,
    ProgressSnapshot,
    progress_broadcaster,
    progress_events,
)

navigation_router = APIRouter(tags=["Navigation"])

_resolver = ProgressResolver()


def get_progress_resolver() -> ProgressResolver:
    return _resolver


def _sse(data: str, event: str | None = None) -> str:
    if event:
        return f"event: {event}\ndata: {data}\n\n"
    return f"data: {data}\n\n"


@navigation_router.get("/progress", response_model=ProgressSnapshot)
async def read_progress(
    user_id: UUID | None = Depends(get_optional_user_id),
    resolver: ProgressResolver = Depends(get_progress_resolver)
):
    return await resolver.resolve(user_id)


@navigation_router.get("/progress/stream")
async def stream_progress(
    request: Request,
    user_id: UUID | None = Depends(get_optional_user_id),
    resolver: ProgressResolver = Depends(get_progress_resolver)
):
    """Server-sent events: the current snapshot, then one per progress change."""
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    initial = await resolver.resolve(user_id)

    async def event_generator():
        events = progress_events(progress_broadcaster, user_id, initial)
        try:
            async for snapshot in events:
                if await request.is_disconnected():
                    break
                yield _sse(snapshot.model_dump_json(), event="progress")
        finally:
            await events.aclose()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@navigation_router.get("/navigation/resolve", response_model=Decision)
async def resolve_navigation(
    path: str = Query(..., min_length=1),
    user_id: UUID | None = Depends(get_optional_user_id),
    resolver: ProgressResolver = Depends(get_progress_resolver)
):
    snapshot = await resolver.resolve(user_id)
    return gate_snapshot(snapshot, path)
