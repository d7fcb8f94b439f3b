from __future__ import annotations

from collections.abc import Sequence

from .http import BackendClient, collection, join_ids, query
from .models import EventSnapshots, ObjectTrackingEvent


async def get_object_tracking_events(
    client: BackendClient,
    ids: Sequence[str] = (),
    camera_id: str | None = None,
    limit: int | None = None,
    within: int | None = None,
    latest: bool = False,
) -> list[ObjectTrackingEvent]:
    """GET /api/events/object_tracking.

    ``within`` is a recency window in seconds and ``latest`` asks the backend
    for the most recent event only. Unset filters are left out of the query.
    """
    params = query(
        ids=join_ids(ids),
        camera_id=camera_id,
        limit=limit,
        within=within,
        latest=True if latest else None,
    )
    payload = await client.get("/api/events/object_tracking", params)
    return [ObjectTrackingEvent.model_validate(item) for item in collection(payload, "objectTrackingEvents")]


async def get_snapshots(client: BackendClient, snapshot_ids: Sequence[str] = ()) -> EventSnapshots:
    payload = await client.get("/api/snapshots", query(snapshot_id=join_ids(snapshot_ids)))
    return EventSnapshots.model_validate(payload or {})
