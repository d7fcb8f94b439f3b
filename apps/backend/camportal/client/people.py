from __future__ import annotations

from collections.abc import Sequence

from camportal.util.security import validate_entity_id

from .http import BackendClient, collection, join_ids, query
from .models import AddDetectablePerson, Person, PersonHistory, PersonImage


async def get_people(client: BackendClient, ids: Sequence[str] = ()) -> list[Person]:
    payload = await client.get("/api/people", query(ids=join_ids(ids)))
    return [Person.model_validate(item) for item in collection(payload, "people")]


async def get_people_image(client: BackendClient, person_id: str) -> PersonImage:
    """Short-lived presigned URL for the person's reference image."""
    payload = await client.get("/api/people/presigned", query(id=validate_entity_id(person_id)))
    return PersonImage.model_validate(payload or {})


async def add_detectable_person(client: BackendClient, person: AddDetectablePerson) -> None:
    await client.post("/api/people", person.to_wire())


async def delete_person(client: BackendClient, person_id: str) -> None:
    await client.delete("/api/people", query(id=validate_entity_id(person_id)))


async def get_person_history(client: BackendClient, person_ids: Sequence[str]) -> list[PersonHistory]:
    payload = await client.get("/api/people/history", query(person_id=join_ids(person_ids)))
    return [PersonHistory.model_validate(item) for item in collection(payload, "histories")]
