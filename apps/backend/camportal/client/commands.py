from __future__ import annotations

from camportal.util.security import validate_entity_id

from .http import BackendClient
from .models import RemoteControl


async def remote_control(client: BackendClient, rc: RemoteControl) -> None:
    """POST /api/rc: relative pan/tilt move, relayed to the camera's transcoder."""
    validate_entity_id(rc.camera_id)
    await client.post("/api/rc", rc.to_wire())
