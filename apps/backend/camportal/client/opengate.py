from __future__ import annotations

from collections.abc import Sequence

from camportal.errors import NotFoundError
from camportal.util.security import validate_entity_id

from .http import BackendClient, collection, join_ids, query
from .models import OpenGateCameraSettings, OpenGateIntegration


async def get_open_gate_configurations(client: BackendClient, open_gate_id: str) -> OpenGateIntegration:
    payload = await client.get(f"/api/opengate/{validate_entity_id(open_gate_id)}")
    body = payload.get("openGateIntegration") if isinstance(payload, dict) else None
    if not body:
        raise NotFoundError("OpenGate integration not found")
    return OpenGateIntegration.model_validate(body)


async def get_open_gate_camera_settings(
    client: BackendClient,
    camera_ids: Sequence[str] = (),
) -> list[OpenGateCameraSettings]:
    """Private endpoint; authenticated with the configured basic credentials."""
    payload = await client.get("/private/opengate/cameras", query(camera_id=join_ids(camera_ids)), private=True)
    return [OpenGateCameraSettings.model_validate(item) for item in collection(payload, "openGateCameraSettings")]
