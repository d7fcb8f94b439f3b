from __future__ import annotations

from collections.abc import Sequence

from camportal.util.security import validate_entity_id

from .http import BackendClient, collection, join_ids, query
from .models import AddCameraParams, Camera, CameraGroup, DeviceInfo


async def get_cameras(client: BackendClient, ids: Sequence[str] = ()) -> list[Camera]:
    """GET /api/cameras; an empty ``ids`` lists every camera."""
    payload = await client.get("/api/cameras", query(id=join_ids(ids)))
    return [Camera.model_validate(item) for item in collection(payload, "cameras")]


async def add_camera(client: BackendClient, camera: AddCameraParams) -> str | None:
    """POST /api/cameras; returns the server-assigned camera id when given."""
    payload = await client.post("/api/cameras", camera.to_wire())
    if isinstance(payload, dict):
        camera_id = payload.get("cameraId")
        return str(camera_id) if camera_id else None
    return None


async def delete_camera(client: BackendClient, camera_id: str) -> None:
    await client.delete("/api/cameras", query(id=validate_entity_id(camera_id)))


async def get_camera_groups(client: BackendClient, ids: Sequence[str] = ()) -> list[CameraGroup]:
    payload = await client.get("/api/groups", query(ids=join_ids(ids)))
    return [CameraGroup.model_validate(item) for item in collection(payload, "cameraGroups")]


async def get_device_info(client: BackendClient, camera_id: str) -> DeviceInfo:
    """GET /api/cameras/info/{id}: ISAPI details reported by the camera itself."""
    payload = await client.get(f"/api/cameras/info/{validate_entity_id(camera_id)}")
    return DeviceInfo.model_validate(payload or {})
