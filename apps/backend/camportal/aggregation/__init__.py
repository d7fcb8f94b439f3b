"""View aggregation over the camera backend API."""

from .helper import (
    CameraRef,
    PTZDirection,
    do_ptz_ctrl,
    get_camera_view_info,
    get_list_cameras,
    get_list_events,
    get_list_people,
    get_list_transcoders,
    get_person_history_summary,
    get_person_info,
    get_updated_info,
)
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

__all__ = [
    "CameraRef",
    "PTZDirection",
    "FetchPipeline",
    "Step",
    "do_ptz_ctrl",
    "get_camera_view_info",
    "get_list_cameras",
    "get_list_events",
    "get_list_people",
    "get_list_transcoders",
    "get_person_history_summary",
    "get_person_info",
    "get_updated_info",
    "AggregatedEvent",
    "CameraAggregatedInfo",
    "CameraItem",
    "HistoryEntry",
    "ListResult",
    "PersonHistorySummary",
    "PersonInfo",
    "PersonItem",
    "SummarizedEvent",
    "TranscoderInfo",
    "UpdatedInfo",
]
