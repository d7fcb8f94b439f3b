"""HTTP client for the camera backend API."""

from .cameras import add_camera, delete_camera, get_camera_groups, get_cameras, get_device_info
from .commands import remote_control
from .events import get_object_tracking_events, get_snapshots
from .http import BackendClient
from .opengate import get_open_gate_camera_settings, get_open_gate_configurations
from .people import add_detectable_person, delete_person, get_people, get_people_image, get_person_history
from .streams import get_camera_stream_info, toggle_stream
from .transcoders import (
    do_device_healthcheck,
    get_camera_stats,
    get_transcoder_status,
    get_transcoders,
    update_transcoder,
)

__all__ = [
    "BackendClient",
    "add_camera",
    "add_detectable_person",
    "delete_camera",
    "delete_person",
    "do_device_healthcheck",
    "get_camera_groups",
    "get_camera_stats",
    "get_camera_stream_info",
    "get_cameras",
    "get_device_info",
    "get_object_tracking_events",
    "get_open_gate_camera_settings",
    "get_open_gate_configurations",
    "get_people",
    "get_people_image",
    "get_person_history",
    "get_snapshots",
    "get_transcoder_status",
    "get_transcoders",
    "remote_control",
    "toggle_stream",
    "update_transcoder",
]
