from __future__ import annotations

from fastapi import APIRouter, Query, Request

from camportal.aggregation import get_list_events

from .deps import backend, settings, split_ids

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
async def list_events(
    request: Request,
    ids: str | None = None,
    limit: int | None = Query(default=None, ge=1),
) -> dict[str, object]:
    events = await get_list_events(
        backend(request),
        split_ids(ids),
        limit=limit or settings(request).event_list_limit,
    )
    return {"items": [event.to_wire() for event in events]}
