from __future__ import annotations

from camportal.util.security import validate_entity_id

from .http import BackendClient, query
from .models import StreamInfo


async def get_camera_stream_info(client: BackendClient, camera_id: str) -> StreamInfo:
    payload = await client.get(f"/api/cameras/{validate_entity_id(camera_id)}/streams")
    return StreamInfo.model_validate(payload or {})


async def toggle_stream(client: BackendClient, camera_id: str, enabled: bool) -> None:
    await client.put(
        f"/api/cameras/{validate_entity_id(camera_id)}/streams",
        {"enabled": enabled},
        query(enabled=enabled),
    )
