"""Wire models for the camera backend.

The backend speaks camelCase JSON; attributes here are snake_case and the
original names are kept as aliases so ``model_dump(by_alias=True)`` yields the
same shape the backend sent.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from camportal.config.defaults import PTZ_LIMIT


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Camera(WireModel):
    camera_id: str
    name: str = ""
    ip: str = ""
    port: int = 0
    username: str = ""
    password: str = ""
    enabled: bool = Field(default=False, validation_alias=AliasChoices("enabled", "started"))
    open_gate_camera_name: str = ""
    group_id: str | None = None
    transcoder_id: str = ""
    settings_id: str | None = None


class CameraGroup(WireModel):
    group_id: str
    name: str = ""
    created_date: str | None = None


class Transcoder(WireModel):
    device_id: str
    name: str = ""
    open_gate_integration_id: str = ""


class OpenGateIntegration(WireModel):
    open_gate_id: str
    log_level: str = "info"
    snapshot_retention_days: int = 0
    hardware_acceleration_type: str = "cpu"
    with_edge_tpu: bool = False
    mqtt_id: str | None = None
    transcoder_id: str = ""


class OpenGateCameraSettings(WireModel):
    settings_id: str
    height: int = 0
    width: int = 0
    fps: int = 0
    mqtt_enabled: bool = False
    timestamp: bool = False
    bounding_box: bool = False
    crop: bool = False
    open_gate_id: str = ""
    camera_id: str = ""


class StreamInfo(WireModel):
    stream_url: str = ""
    protocol: str = ""
    transcoder_id: str = ""
    transcoder_name: str = ""
    enabled: bool = False


class TranscoderStatus(WireModel):
    status_id: str = ""
    transcoder_id: str
    camera_id: str
    object_detection: bool = False
    audio_detection: bool = False
    open_gate_recordings: bool = False
    snapshots: bool = False
    motion_detection: bool = False
    improve_contrast: bool = False
    autotracker: bool = False
    birdseye_view: bool = False
    open_gate_status: bool = False
    transcoder_status: bool = False


class CameraStats(WireModel):
    camera_stat_id: str = ""
    transcoder_id: str = ""
    camera_name: str = ""
    camera_fps: float | None = None
    detection_fps: float | None = None
    capture_pid: int | None = None
    process_id: int | None = None
    process_fps: float | None = None
    skipped_fps: float | None = None
    timestamp: str | None = None


class DetectorStats(WireModel):
    detector_stat_id: str = ""
    detector_name: str = ""
    transcoder_id: str = ""
    detector_start: float | None = None
    inference_speed: float | None = None
    process_id: int | None = None
    timestamp: str | None = None


class Stats(WireModel):
    camera_stats: list[CameraStats] = Field(default_factory=list)
    detector_stats: list[DetectorStats] = Field(default_factory=list)

    @field_validator("camera_stats", "detector_stats", mode="before")
    @classmethod
    def wrap_single(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return value


class ObjectTrackingEvent(WireModel):
    event_id: str
    open_gate_event_id: str = ""
    event_type: str = ""
    camera_id: str = ""
    camera_name: str = Field(default="", validation_alias=AliasChoices("CameraName", "cameraName"), serialization_alias="CameraName")
    frame_time: str | None = None
    label: str = ""
    top_score: float = 0.0
    score: float = 0.0
    has_snapshot: bool = False
    has_clip: bool = False
    stationary: bool = False
    false_positive: bool = False
    start_time: str | None = None
    end_time: str | None = None
    snapshot_id: str | None = None


class Snapshot(WireModel):
    snapshot_id: str
    timestamp: str | None = None
    transcoder_id: str = ""
    open_gate_event_id: str = ""
    detected_people_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("detectedPeopleId", "detectedPersonId"),
    )


class EventSnapshots(WireModel):
    snapshot: list[Snapshot] = Field(default_factory=list)
    presigned_url: dict[str, str] = Field(default_factory=dict)

    @field_validator("snapshot", "presigned_url", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return [] if info.field_name == "snapshot" else {}
        return value


class Person(WireModel):
    person_id: str
    name: str = ""
    age: str = ""
    image_path: str = ""

    @field_validator("age", mode="before")
    @classmethod
    def age_as_text(cls, value: Any) -> Any:
        return "" if value is None else str(value)


class PersonImage(WireModel):
    presigned_url: str = ""
    expires: str | None = None


class PersonHistory(WireModel):
    history_id: str
    timestamp: str | None = None
    event_id: str = ""
    person_id: str = ""


class CameraAbnormality(WireModel):
    hard_disk_full: bool = False
    hard_disk_error: bool = False
    ethernet_broken: bool = False
    ip_addr_conflict: bool = Field(default=False, validation_alias=AliasChoices("ipAddrConflict", "ipaddrConflict"))
    illegal_access: bool = False
    record_error: bool = False
    raid_logic_disk_error: bool = False
    spare_work_device_error: bool = False


class DeviceStatus(WireModel):
    status: str = ""
    detail_abnormal_status: CameraAbnormality = Field(default_factory=CameraAbnormality)


class DeviceInfo(WireModel):
    camera_id: str = ""
    device_name: str = ""
    device_location: str = ""
    model: str = ""
    serial_number: str = ""
    firmware_version: str = ""
    firmware_released_date: str = ""
    capacity: int = 0
    used_capacity: int = 0
    status: DeviceStatus = Field(
        default_factory=DeviceStatus,
        validation_alias=AliasChoices("deviceStatus", "status"),
    )


class AddCameraParams(WireModel):
    name: str = Field(min_length=1)
    ip: str = Field(min_length=1)
    port: int = Field(default=80, ge=1, le=65535)
    username: str = ""
    password: str = ""
    transcoder_id: str = Field(min_length=1)
    autotracking: bool = False


class UpdateTranscoder(WireModel):
    id: str
    name: str = ""
    log_level: Literal["debug", "info", "warning"] = "info"
    hardware_acceleration_type: Literal["cpu", "vaapi", "quicksync"] = "cpu"
    edge_tpu_enabled: bool = False


class AddDetectablePerson(WireModel):
    name: str = Field(min_length=1)
    age: str = ""
    base64_image: str = Field(min_length=1)

    @classmethod
    def from_image_file(cls, name: str, age: str, image_path: str | Path) -> "AddDetectablePerson":
        data = Path(image_path).read_bytes()
        return cls(name=name, age=age, base64_image=base64.b64encode(data).decode("ascii"))


class RemoteControl(WireModel):
    camera_id: str
    pan: int = Field(default=0, ge=-PTZ_LIMIT, le=PTZ_LIMIT)
    tilt: int = Field(default=0, ge=-PTZ_LIMIT, le=PTZ_LIMIT)
