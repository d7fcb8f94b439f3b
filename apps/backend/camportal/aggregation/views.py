"""View-models assembled from several backend calls."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from camportal.client.models import (
    Camera,
    CameraStats,
    DetectorStats,
    ObjectTrackingEvent,
    OpenGateCameraSettings,
    OpenGateIntegration,
    Person,
    PersonHistory,
    PersonImage,
    Snapshot,
    StreamInfo,
    Transcoder,
    TranscoderStatus,
)

T = TypeVar("T")


class ViewModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class CameraAggregatedInfo(ViewModel):
    camera: Camera
    transcoder: Transcoder
    integration: OpenGateIntegration
    settings: OpenGateCameraSettings
    stream_info: StreamInfo
    transcoder_status: TranscoderStatus


class AggregatedEvent(ViewModel):
    tracking: ObjectTrackingEvent
    snapshot: Snapshot | None = None
    presigned_url: str | None = None
    elapsed_seconds: float | None = None


class UpdatedInfo(ViewModel):
    events: list[AggregatedEvent] = Field(default_factory=list)
    stats: CameraStats | None = None
    detector_stats: DetectorStats | None = None


class CameraItem(ViewModel):
    camera: Camera
    transcoder: Transcoder | None = None
    configs: OpenGateIntegration | None = None
    settings: OpenGateCameraSettings | None = None


class TranscoderInfo(ViewModel):
    transcoder: Transcoder
    integration: OpenGateIntegration | None = None


class PersonItem(ViewModel):
    person: Person
    image: PersonImage | None = None
    history: list[PersonHistory] = Field(default_factory=list)


class PersonInfo(ViewModel):
    person: Person
    image: PersonImage | None = None
    history: list[PersonHistory] = Field(default_factory=list)


class SummarizedEvent(ViewModel):
    event: ObjectTrackingEvent
    snapshot: Snapshot | None = None
    presigned_url: str | None = None
    person: Person | None = None
    ongoing: bool = False


class HistoryEntry(ViewModel):
    history: PersonHistory
    event: ObjectTrackingEvent
    snapshot: Snapshot
    presigned_url: str | None = None


class PersonHistorySummary(PersonInfo):
    entries: list[HistoryEntry] = Field(default_factory=list)


class ListResult(ViewModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
