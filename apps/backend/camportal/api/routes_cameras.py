from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from camportal.aggregation import (
    CameraRef,
    PTZDirection,
    do_ptz_ctrl,
    get_camera_view_info,
    get_list_cameras,
    get_updated_info,
)
from camportal.client import add_camera, delete_camera, get_cameras, get_device_info, toggle_stream
from camportal.client.models import AddCameraParams
from camportal.config.defaults import PTZ_LIMIT
from camportal.errors import NotFoundError
from camportal.util.security import mask_camera_password

from .deps import backend, path_id, settings, split_ids

router = APIRouter(prefix="/cameras", tags=["cameras"])


class StreamPayload(BaseModel):
    enabled: bool


class PTZPayload(BaseModel):
    direction: PTZDirection
    step: int | None = Field(default=None, ge=1, le=PTZ_LIMIT)


@router.get("")
async def list_cameras(request: Request, ids: str | None = None) -> dict[str, object]:
    view = (await get_list_cameras(backend(request), split_ids(ids))).to_wire()
    for item in view["items"]:
        item["camera"] = mask_camera_password(item["camera"])
    return view


@router.post("")
async def create_camera(payload: AddCameraParams, request: Request) -> dict[str, object]:
    camera_id = await add_camera(backend(request), payload)
    return {"ok": True, "camera_id": camera_id}


@router.get("/{camera_id}")
async def get_camera(camera_id: str, request: Request) -> dict[str, object]:
    view = (await get_camera_view_info(backend(request), path_id(camera_id))).to_wire()
    view["camera"] = mask_camera_password(view["camera"])
    return view


@router.delete("/{camera_id}")
async def remove_camera(camera_id: str, request: Request) -> dict[str, object]:
    camera_id = path_id(camera_id)
    await delete_camera(backend(request), camera_id)
    return {"ok": True, "camera_id": camera_id}


@router.get("/{camera_id}/updates")
async def get_updates(
    camera_id: str,
    request: Request,
    limit: int | None = None,
    latest: bool | None = None,
    within: int | None = None,
) -> dict[str, object]:
    camera_id = path_id(camera_id)
    client = backend(request)
    defaults = settings(request)
    cameras = await get_cameras(client, [camera_id])
    if not cameras:
        raise NotFoundError("Camera not found")
    view = await get_updated_info(
        client,
        CameraRef.from_camera(cameras[0]),
        limit=limit if limit is not None else defaults.update_limit,
        latest=latest if latest is not None else defaults.update_latest,
        within=within if within is not None else defaults.update_within_seconds,
    )
    return view.to_wire()


@router.put("/{camera_id}/stream")
async def set_stream(camera_id: str, payload: StreamPayload, request: Request) -> dict[str, object]:
    camera_id = path_id(camera_id)
    await toggle_stream(backend(request), camera_id, payload.enabled)
    return {"ok": True, "camera_id": camera_id, "enabled": payload.enabled}


@router.post("/{camera_id}/ptz")
async def move_camera(camera_id: str, payload: PTZPayload, request: Request) -> dict[str, object]:
    camera_id = path_id(camera_id)
    step = payload.step or settings(request).ptz_step
    command = await do_ptz_ctrl(backend(request), payload.direction, camera_id, step)
    return {"ok": True, "camera_id": camera_id, "pan": command.pan, "tilt": command.tilt}


@router.get("/{camera_id}/info")
async def get_info(camera_id: str, request: Request) -> dict[str, object]:
    info = await get_device_info(backend(request), path_id(camera_id))
    return info.to_wire()
