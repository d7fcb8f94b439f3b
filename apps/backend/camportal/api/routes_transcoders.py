from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel

from camportal.aggregation import get_list_transcoders
from camportal.client import do_device_healthcheck, update_transcoder
from camportal.client.models import UpdateTranscoder

from .deps import backend, path_id, split_ids

router = APIRouter(prefix="/transcoders", tags=["transcoders"])


class TranscoderPayload(BaseModel):
    name: str = ""
    log_level: Literal["debug", "info", "warning"] = "info"
    hardware_acceleration_type: Literal["cpu", "vaapi", "quicksync"] = "cpu"
    edge_tpu_enabled: bool = False


@router.get("")
async def list_transcoders(request: Request, ids: str | None = None) -> dict[str, object]:
    view = await get_list_transcoders(backend(request), split_ids(ids))
    return view.to_wire()


@router.put("/{transcoder_id}")
async def put_transcoder(transcoder_id: str, payload: TranscoderPayload, request: Request) -> dict[str, object]:
    transcoder_id = path_id(transcoder_id)
    await update_transcoder(backend(request), UpdateTranscoder(id=transcoder_id, **payload.model_dump()))
    return {"ok": True, "transcoder_id": transcoder_id}


@router.post("/{transcoder_id}/healthcheck")
async def healthcheck(transcoder_id: str, request: Request) -> dict[str, object]:
    transcoder_id = path_id(transcoder_id)
    status = await do_device_healthcheck(backend(request), transcoder_id)
    return {"ok": True, "transcoder_id": transcoder_id, "status": status}
