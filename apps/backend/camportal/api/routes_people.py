from __future__ import annotations

from fastapi import APIRouter, Request

from camportal.aggregation import get_list_people, get_person_history_summary, get_person_info
from camportal.client import add_detectable_person, delete_person
from camportal.client.models import AddDetectablePerson

from .deps import backend, path_id, split_ids

router = APIRouter(prefix="/people", tags=["people"])


@router.get("")
async def list_people(request: Request, ids: str | None = None) -> dict[str, object]:
    view = await get_list_people(backend(request), split_ids(ids))
    return view.to_wire()


@router.post("")
async def create_person(payload: AddDetectablePerson, request: Request) -> dict[str, object]:
    await add_detectable_person(backend(request), payload)
    return {"ok": True, "name": payload.name}


@router.get("/{person_id}")
async def get_person(person_id: str, request: Request) -> dict[str, object]:
    view = await get_person_info(backend(request), path_id(person_id))
    return view.to_wire()


@router.get("/{person_id}/history")
async def get_history(person_id: str, request: Request) -> dict[str, object]:
    view = await get_person_history_summary(backend(request), path_id(person_id))
    return view.to_wire()


@router.delete("/{person_id}")
async def remove_person(person_id: str, request: Request) -> dict[str, object]:
    person_id = path_id(person_id)
    await delete_person(backend(request), person_id)
    return {"ok": True, "person_id": person_id}
