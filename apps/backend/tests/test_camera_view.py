from __future__ import annotations

import asyncio

import pytest

from camportal.aggregation import get_camera_view_info
from camportal.client import (
    get_camera_stream_info,
    get_cameras,
    get_open_gate_camera_settings,
    get_open_gate_configurations,
    get_transcoder_status,
    get_transcoders,
)
from camportal.errors import NotFoundError
from fake_backend import FakeBackend


def _view(backend: FakeBackend, camera_id: str):
    async def scenario():
        async with backend.client() as client:
            return await get_camera_view_info(client, camera_id)

    return asyncio.run(scenario())


def test_detail_view_matches_individual_calls() -> None:
    backend = FakeBackend().seed()

    async def individually():
        async with backend.client() as client:
            camera = (await get_cameras(client, ["cam-1"]))[0]
            transcoder = (await get_transcoders(client, [camera.transcoder_id]))[0]
            return {
                "camera": camera,
                "transcoder": transcoder,
                "integration": await get_open_gate_configurations(client, transcoder.open_gate_integration_id),
                "settings": (await get_open_gate_camera_settings(client, ["cam-1"]))[0],
                "stream_info": await get_camera_stream_info(client, "cam-1"),
                "transcoder_status": (await get_transcoder_status(client, ["tr-1"], ["cam-1"]))[0],
            }

    expected = asyncio.run(individually())
    view = _view(backend, "cam-1")

    assert view.camera == expected["camera"]
    assert view.transcoder == expected["transcoder"]
    assert view.integration == expected["integration"]
    assert view.settings == expected["settings"]
    assert view.stream_info == expected["stream_info"]
    assert view.transcoder_status == expected["transcoder_status"]


def test_detail_view_fetch_order() -> None:
    backend = FakeBackend().seed()
    _view(backend, "cam-1")

    paths = backend.paths()
    assert paths[0] == "/api/cameras"
    assert paths[-1] == "/api/opengate/og-1"
    assert sorted(paths[1:5]) == sorted(
        ["/api/devices", "/private/opengate/cameras", "/api/cameras/cam-1/streams", "/api/devices/status"]
    )


def test_missing_camera_stops_before_other_fetches() -> None:
    backend = FakeBackend().seed()

    with pytest.raises(NotFoundError, match="Camera not found"):
        _view(backend, "cam-404")
    assert backend.paths() == ["/api/cameras"]


def test_missing_transcoder_aborts_without_integration_fetch() -> None:
    backend = FakeBackend().seed()
    backend.transcoders.clear()

    with pytest.raises(NotFoundError, match="Transcoder not found"):
        _view(backend, "cam-1")
    assert backend.count("/api/opengate/og-1") == 0


def test_missing_settings_aborts() -> None:
    backend = FakeBackend().seed()
    backend.camera_settings.clear()

    with pytest.raises(NotFoundError, match="Camera settings not found"):
        _view(backend, "cam-1")
    assert backend.count("/api/opengate/og-1") == 0


def test_missing_status_aborts() -> None:
    backend = FakeBackend().seed()
    backend.statuses.clear()

    with pytest.raises(NotFoundError, match="Transcoder status not found"):
        _view(backend, "cam-1")


def test_detail_view_serialises_with_wire_names() -> None:
    backend = FakeBackend().seed()
    payload = _view(backend, "cam-1").to_wire()

    assert payload["camera"]["cameraId"] == "cam-1"
    assert payload["streamInfo"]["protocol"] == "hls"
    assert payload["transcoderStatus"]["objectDetection"] is True
    assert payload["integration"]["snapshotRetentionDays"] == 7


def test_empty_integration_id_is_not_found() -> None:
    backend = FakeBackend().seed()
    backend.transcoders["tr-1"]["openGateIntegrationId"] = ""

    with pytest.raises(NotFoundError, match="OpenGate integration not found"):
        _view(backend, "cam-1")
    assert not any(path.startswith("/api/opengate/") for path in backend.paths())


def test_camera_without_transcoder_is_not_found() -> None:
    backend = FakeBackend().seed()
    backend.cameras["cam-1"]["transcoderId"] = ""

    with pytest.raises(NotFoundError, match="Transcoder not found"):
        _view(backend, "cam-1")
    assert backend.count("/api/devices") == 0
