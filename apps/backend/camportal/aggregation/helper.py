"""Page-level views joined from several backend calls.

Every function here takes the shared ``BackendClient`` and returns a
view-model from ``camportal.aggregation.views``. Fetch ordering is declared
through ``FetchPipeline`` so a missing primary entity stops the call before
dependent requests are issued.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable, Mapping, Sequence
from enum import Enum
from typing import Any, NamedTuple, TypeVar

from camportal.client import (
    BackendClient,
    get_camera_stats,
    get_camera_stream_info,
    get_cameras,
    get_object_tracking_events,
    get_open_gate_camera_settings,
    get_open_gate_configurations,
    get_people,
    get_people_image,
    get_person_history,
    get_snapshots,
    get_transcoder_status,
    get_transcoders,
    remote_control,
)
from camportal.client.models import (
    Camera,
    EventSnapshots,
    ObjectTrackingEvent,
    OpenGateCameraSettings,
    OpenGateIntegration,
    PersonImage,
    RemoteControl,
    Stats,
    StreamInfo,
    Transcoder,
    TranscoderStatus,
)
from camportal.config.defaults import DEFAULT_EVENT_LIST_LIMIT, DEFAULT_PTZ_STEP
from camportal.errors import NotFoundError
from camportal.util.logging import get_logger
from camportal.util.security import validate_entity_id
from camportal.util.time import elapsed_seconds

from .pipeline import FetchPipeline, Step
from .views import (
    AggregatedEvent,
    CameraAggregatedInfo,
    CameraItem,
    HistoryEntry,
    ListResult,
    PersonHistorySummary,
    PersonInfo,
    PersonItem,
    SummarizedEvent,
    TranscoderInfo,
    UpdatedInfo,
)

logger = get_logger(__name__)

T = TypeVar("T")

_NO_SNAPSHOTS = EventSnapshots()


class CameraRef(NamedTuple):
    """What the live update view needs to know about a camera."""

    camera_id: str
    camera_name: str
    transcoder_id: str

    @classmethod
    def from_camera(cls, camera: Camera) -> "CameraRef":
        return cls(camera.camera_id, camera.open_gate_camera_name, camera.transcoder_id)


class PTZDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


def _first(items: Sequence[T], message: str) -> T:
    if not items:
        raise NotFoundError(message)
    return items[0]


def _distinct(values: Iterable[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)


async def _or_none(awaitable: Awaitable[T]) -> T | None:
    try:
        return await awaitable
    except NotFoundError:
        return None


async def _integrations(client: BackendClient, ids: Sequence[str]) -> dict[str, OpenGateIntegration]:
    found = await asyncio.gather(*(_or_none(get_open_gate_configurations(client, item)) for item in ids))
    return {item: integration for item, integration in zip(ids, found) if integration is not None}


async def _snapshots_for(client: BackendClient, snapshot_ids: Sequence[str]) -> EventSnapshots:
    # An empty snapshot filter means "all snapshots" on the backend.
    if not snapshot_ids:
        return _NO_SNAPSHOTS
    return await get_snapshots(client, snapshot_ids)


async def get_camera_view_info(client: BackendClient, camera_id: str) -> CameraAggregatedInfo:
    """Everything the camera viewer page shows, or NotFoundError naming the missing piece."""
    validate_entity_id(camera_id)

    async def camera(_: Mapping[str, Any]) -> Camera:
        return _first(await get_cameras(client, [camera_id]), "Camera not found")

    async def transcoder(results: Mapping[str, Any]) -> Transcoder:
        transcoder_id = results["camera"].transcoder_id
        if not transcoder_id:
            raise NotFoundError("Transcoder not found")
        return _first(await get_transcoders(client, [transcoder_id]), "Transcoder not found")

    async def settings(_: Mapping[str, Any]) -> OpenGateCameraSettings:
        return _first(await get_open_gate_camera_settings(client, [camera_id]), "Camera settings not found")

    async def stream_info(_: Mapping[str, Any]) -> StreamInfo:
        return await get_camera_stream_info(client, camera_id)

    async def transcoder_status(results: Mapping[str, Any]) -> TranscoderStatus:
        statuses = await get_transcoder_status(client, [results["camera"].transcoder_id], [camera_id])
        return _first(statuses, "Transcoder status not found")

    async def integration(results: Mapping[str, Any]) -> OpenGateIntegration:
        integration_id = results["transcoder"].open_gate_integration_id
        if not integration_id:
            raise NotFoundError("OpenGate integration not found")
        return await get_open_gate_configurations(client, integration_id)

    pipeline = FetchPipeline(
        [
            Step("camera", camera),
            Step("transcoder", transcoder, after=("camera",)),
            Step("settings", settings, after=("camera",)),
            Step("stream_info", stream_info, after=("camera",)),
            Step("transcoder_status", transcoder_status, after=("camera",)),
            Step("integration", integration, after=("transcoder",)),
        ]
    )
    try:
        results = await pipeline.run()
    except NotFoundError as exc:
        logger.info("Camera view for %s aborted: %s", camera_id, exc.message)
        raise
    return CameraAggregatedInfo(**results)


async def get_updated_info(
    client: BackendClient,
    camera: CameraRef,
    limit: int | None = None,
    latest: bool = False,
    within: int | None = None,
) -> UpdatedInfo:
    """Recent tracking events for a camera joined with snapshots, plus current stats."""
    validate_entity_id(camera.camera_id)

    async def events(_: Mapping[str, Any]) -> list[ObjectTrackingEvent]:
        return await get_object_tracking_events(
            client,
            camera_id=camera.camera_id,
            limit=limit,
            within=within,
            latest=latest,
        )

    async def snapshots(results: Mapping[str, Any]) -> EventSnapshots:
        return await _snapshots_for(client, _distinct(event.snapshot_id for event in results["events"]))

    async def stats(_: Mapping[str, Any]) -> Stats:
        # Either filter left empty would widen the query to other cameras.
        if not camera.transcoder_id or not camera.camera_name:
            return Stats()
        return await get_camera_stats(client, camera.transcoder_id, [camera.camera_name])

    pipeline = FetchPipeline(
        [
            Step("events", events),
            Step("snapshots", snapshots, after=("events",)),
            Step("stats", stats, after=("events",)),
        ]
    )
    results = await pipeline.run()

    found: EventSnapshots = results["snapshots"]
    by_id = {snapshot.snapshot_id: snapshot for snapshot in found.snapshot}
    aggregated = [
        AggregatedEvent(
            tracking=event,
            snapshot=by_id.get(event.snapshot_id or ""),
            presigned_url=found.presigned_url.get(event.snapshot_id or ""),
            elapsed_seconds=elapsed_seconds(event.start_time, event.end_time),
        )
        for event in results["events"]
    ]
    current: Stats = results["stats"]
    return UpdatedInfo(
        events=aggregated,
        stats=current.camera_stats[0] if current.camera_stats else None,
        detector_stats=current.detector_stats[0] if current.detector_stats else None,
    )


async def get_list_cameras(client: BackendClient, ids: Sequence[str] = ()) -> ListResult[CameraItem]:
    """Every camera row, with whatever transcoder, integration and settings could be found."""

    async def cameras(_: Mapping[str, Any]) -> list[Camera]:
        return await get_cameras(client, ids)

    async def transcoders(results: Mapping[str, Any]):
        transcoder_ids = _distinct(camera.transcoder_id for camera in results["cameras"])
        if not transcoder_ids:
            return []
        return await get_transcoders(client, transcoder_ids)

    async def settings(results: Mapping[str, Any]):
        camera_ids = [camera.camera_id for camera in results["cameras"]]
        if not camera_ids:
            return []
        return await get_open_gate_camera_settings(client, camera_ids)

    async def integrations(results: Mapping[str, Any]) -> dict[str, OpenGateIntegration]:
        return await _integrations(
            client,
            _distinct(transcoder.open_gate_integration_id for transcoder in results["transcoders"]),
        )

    pipeline = FetchPipeline(
        [
            Step("cameras", cameras),
            Step("transcoders", transcoders, after=("cameras",)),
            Step("settings", settings, after=("cameras",)),
            Step("integrations", integrations, after=("transcoders",)),
        ]
    )
    results = await pipeline.run()

    transcoders_by_id = {transcoder.device_id: transcoder for transcoder in results["transcoders"]}
    settings_by_camera = {item.camera_id: item for item in results["settings"]}
    items = []
    for camera in results["cameras"]:
        transcoder = transcoders_by_id.get(camera.transcoder_id)
        items.append(
            CameraItem(
                camera=camera,
                transcoder=transcoder,
                configs=results["integrations"].get(transcoder.open_gate_integration_id) if transcoder else None,
                settings=settings_by_camera.get(camera.camera_id),
            )
        )
    return ListResult[CameraItem](items=items)


async def get_list_transcoders(client: BackendClient, ids: Sequence[str] = ()) -> ListResult[TranscoderInfo]:
    transcoders = await get_transcoders(client, ids)
    integrations = await _integrations(
        client,
        _distinct(transcoder.open_gate_integration_id for transcoder in transcoders),
    )
    return ListResult[TranscoderInfo](
        items=[
            TranscoderInfo(
                transcoder=transcoder,
                integration=integrations.get(transcoder.open_gate_integration_id),
            )
            for transcoder in transcoders
        ]
    )


async def get_list_people(client: BackendClient, ids: Sequence[str] = ()) -> ListResult[PersonItem]:
    people = await get_people(client, ids)
    if not people:
        return ListResult[PersonItem](items=[])

    person_ids = [person.person_id for person in people]
    images, histories = await asyncio.gather(
        asyncio.gather(*(_or_none(get_people_image(client, person_id)) for person_id in person_ids)),
        get_person_history(client, person_ids),
    )
    by_person: dict[str, list] = {}
    for entry in histories:
        by_person.setdefault(entry.person_id, []).append(entry)

    return ListResult[PersonItem](
        items=[
            PersonItem(person=person, image=image, history=by_person.get(person.person_id, []))
            for person, image in zip(people, images)
        ]
    )


async def get_list_events(
    client: BackendClient,
    ids: Sequence[str] = (),
    limit: int = DEFAULT_EVENT_LIST_LIMIT,
) -> list[SummarizedEvent]:
    """Tracking events with their snapshot and, where one was recognised, the person."""

    async def events(_: Mapping[str, Any]):
        return await get_object_tracking_events(client, ids=ids, limit=limit)

    async def snapshots(results: Mapping[str, Any]) -> EventSnapshots:
        return await _snapshots_for(client, _distinct(event.snapshot_id for event in results["events"]))

    async def people(results: Mapping[str, Any]):
        person_ids = _distinct(snapshot.detected_people_id for snapshot in results["snapshots"].snapshot)
        if not person_ids:
            return []
        return await get_people(client, person_ids)

    pipeline = FetchPipeline(
        [
            Step("events", events),
            Step("snapshots", snapshots, after=("events",)),
            Step("people", people, after=("snapshots",)),
        ]
    )
    results = await pipeline.run()

    found: EventSnapshots = results["snapshots"]
    snapshots_by_id = {snapshot.snapshot_id: snapshot for snapshot in found.snapshot}
    people_by_id = {person.person_id: person for person in results["people"]}

    summarized = []
    for event in results["events"]:
        snapshot = snapshots_by_id.get(event.snapshot_id or "")
        person_id = snapshot.detected_people_id if snapshot else None
        summarized.append(
            SummarizedEvent(
                event=event,
                snapshot=snapshot,
                presigned_url=found.presigned_url.get(event.snapshot_id or ""),
                person=people_by_id.get(person_id) if person_id else None,
                ongoing=not event.end_time,
            )
        )
    return summarized


def _person_steps(client: BackendClient, person_id: str) -> list[Step]:
    async def person(_: Mapping[str, Any]):
        return _first(await get_people(client, [person_id]), "Person not found")

    async def image(_: Mapping[str, Any]) -> PersonImage | None:
        return await _or_none(get_people_image(client, person_id))

    async def history(_: Mapping[str, Any]):
        return await get_person_history(client, [person_id])

    return [
        Step("person", person),
        Step("image", image, after=("person",)),
        Step("history", history, after=("person",)),
    ]


async def get_person_info(client: BackendClient, person_id: str) -> PersonInfo:
    validate_entity_id(person_id)
    try:
        results = await FetchPipeline(_person_steps(client, person_id)).run()
    except NotFoundError as exc:
        logger.info("Person view for %s aborted: %s", person_id, exc.message)
        raise
    return PersonInfo(person=results["person"], image=results["image"], history=results["history"])


async def get_person_history_summary(client: BackendClient, person_id: str) -> PersonHistorySummary:
    """Person info plus each sighting resolved to its event and snapshot.

    Sightings whose event or snapshot no longer exists are left out.
    """
    validate_entity_id(person_id)

    async def events(results: Mapping[str, Any]):
        event_ids = _distinct(entry.event_id for entry in results["history"])
        if not event_ids:
            return []
        return await get_object_tracking_events(client, ids=event_ids)

    async def snapshots(results: Mapping[str, Any]) -> EventSnapshots:
        return await _snapshots_for(client, _distinct(event.snapshot_id for event in results["events"]))

    steps = _person_steps(client, person_id)
    steps.append(Step("events", events, after=("history",)))
    steps.append(Step("snapshots", snapshots, after=("events",)))
    try:
        results = await FetchPipeline(steps).run()
    except NotFoundError as exc:
        logger.info("Person history for %s aborted: %s", person_id, exc.message)
        raise

    events_by_id = {event.event_id: event for event in results["events"]}
    found: EventSnapshots = results["snapshots"]
    snapshots_by_id = {snapshot.snapshot_id: snapshot for snapshot in found.snapshot}

    entries = []
    for entry in results["history"]:
        event = events_by_id.get(entry.event_id)
        if event is None:
            continue
        snapshot = snapshots_by_id.get(event.snapshot_id or "")
        if snapshot is None:
            continue
        entries.append(
            HistoryEntry(
                history=entry,
                event=event,
                snapshot=snapshot,
                presigned_url=found.presigned_url.get(snapshot.snapshot_id),
            )
        )
    return PersonHistorySummary(
        person=results["person"],
        image=results["image"],
        history=results["history"],
        entries=entries,
    )


async def do_ptz_ctrl(
    client: BackendClient,
    direction: PTZDirection | str,
    camera_id: str,
    step: int = DEFAULT_PTZ_STEP,
) -> RemoteControl:
    """Move the camera one step in ``direction`` and return the command sent."""
    if not isinstance(direction, PTZDirection):
        try:
            direction = PTZDirection(str(direction).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown PTZ direction: {direction}") from None
    if step <= 0:
        raise ValueError("PTZ step must be positive")

    pan = tilt = 0
    if direction is PTZDirection.UP:
        tilt = step
    elif direction is PTZDirection.DOWN:
        tilt = -step
    elif direction is PTZDirection.LEFT:
        pan = -step
    else:
        pan = step

    command = RemoteControl(camera_id=validate_entity_id(camera_id), pan=pan, tilt=tilt)
    await remote_control(client, command)
    return command
