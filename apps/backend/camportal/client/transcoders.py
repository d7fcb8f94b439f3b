from __future__ import annotations

from collections.abc import Sequence

from camportal.util.security import validate_entity_id

from .http import BackendClient, collection, join_ids, query
from .models import Stats, Transcoder, TranscoderStatus, UpdateTranscoder


async def get_transcoders(client: BackendClient, ids: Sequence[str] = ()) -> list[Transcoder]:
    payload = await client.get("/api/devices", query(id=join_ids(ids)))
    return [Transcoder.model_validate(item) for item in collection(payload, "transcoders")]


async def update_transcoder(client: BackendClient, transcoder: UpdateTranscoder) -> None:
    validate_entity_id(transcoder.id)
    await client.put("/api/devices", transcoder.to_wire())


async def get_transcoder_status(
    client: BackendClient,
    transcoder_ids: Sequence[str],
    camera_ids: Sequence[str],
) -> list[TranscoderStatus]:
    params = query(transcoder_id=join_ids(transcoder_ids), camera_id=join_ids(camera_ids))
    payload = await client.get("/api/devices/status", params)
    return [TranscoderStatus.model_validate(item) for item in collection(payload, "status")]


async def do_device_healthcheck(client: BackendClient, transcoder_id: str) -> str:
    payload = await client.get(f"/api/devices/{validate_entity_id(transcoder_id)}/healthcheck")
    if isinstance(payload, dict):
        return str(payload.get("status", "ok"))
    return "ok"


async def get_camera_stats(client: BackendClient, transcoder_id: str, camera_names: Sequence[str]) -> Stats:
    """GET /api/stats for the OpenGate camera names running on one transcoder."""
    params = query(transcoder_id=transcoder_id, camera_name=join_ids(camera_names))
    payload = await client.get("/api/stats", params)
    return Stats.model_validate(payload or {})
