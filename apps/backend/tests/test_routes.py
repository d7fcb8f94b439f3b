from __future__ import annotations

from fastapi.testclient import TestClient

from camportal.config.schema import PortalSettings
from camportal.main import create_app
from fake_backend import FakeBackend


def _client(backend: FakeBackend, **settings: object) -> TestClient:
    portal_settings = PortalSettings(
        backend_base_url="http://backend.test",
        private_base_url="http://private.test",
        log_level="warning",
        **settings,
    )
    return TestClient(create_app(settings=portal_settings, transport=backend.transport()))


def test_health_reports_backend() -> None:
    with _client(FakeBackend()) as client:
        response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["backend"] == "http://backend.test"
    assert body["private_backend"] == "http://private.test"


def test_camera_payloads_never_include_passwords() -> None:
    backend = FakeBackend().seed()
    with _client(backend) as client:
        listing = client.get("/api/cameras").json()
        detail = client.get("/api/cameras/cam-1").json()

    assert listing["items"][0]["camera"]["password"] == "***"
    assert detail["camera"]["password"] == "***"
    assert "camsecret" not in str(listing)
    assert "camsecret" not in str(detail)
    assert detail["streamInfo"]["streamUrl"] == "http://media.test/cam-1/index.m3u8"


def test_not_found_maps_to_404() -> None:
    with _client(FakeBackend().seed()) as client:
        response = client.get("/api/cameras/cam-404")
    assert response.status_code == 404
    assert response.json() == {"detail": "Camera not found"}


def test_backend_failure_maps_to_502() -> None:
    backend = FakeBackend().seed()
    backend.fail("/api/devices", 500, "transcoder registry offline")
    with _client(backend) as client:
        response = client.get("/api/transcoders")
    assert response.status_code == 502
    assert response.json() == {"detail": "transcoder registry offline"}


def test_invalid_ids_are_rejected() -> None:
    backend = FakeBackend().seed()
    with _client(backend) as client:
        detail = client.get("/api/cameras/cam$bad")
        listing = client.get("/api/cameras", params={"ids": "cam-1,../etc"})
        person = client.delete("/api/people/p$1")

    for response in (detail, listing, person):
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid id"
    assert backend.requests == []


def test_add_camera_then_filter_then_delete_twice() -> None:
    backend = FakeBackend().seed()
    payload = {
        "name": "Porch",
        "ip": "10.0.0.30",
        "port": 8000,
        "username": "admin",
        "password": "porchsecret",
        "transcoderId": "tr-1",
    }
    with _client(backend) as client:
        created = client.post("/api/cameras", json=payload)
        camera_id = created.json()["camera_id"]
        listing = client.get("/api/cameras", params={"ids": camera_id})
        first_delete = client.delete(f"/api/cameras/{camera_id}")
        second_delete = client.delete(f"/api/cameras/{camera_id}")

    assert created.status_code == 200
    items = listing.json()["items"]
    assert [item["camera"]["cameraId"] for item in items] == [camera_id]
    assert items[0]["camera"]["password"] == "***"
    assert first_delete.status_code == 200
    assert second_delete.status_code == 404


def test_add_camera_validates_payload() -> None:
    with _client(FakeBackend()) as client:
        response = client.post("/api/cameras", json={"name": "", "ip": "10.0.0.1", "transcoderId": "tr-1"})
    assert response.status_code == 422


def test_updates_use_configured_defaults() -> None:
    backend = FakeBackend().seed()
    with _client(backend, update_limit=10, update_latest=False, update_within_seconds=600) as client:
        response = client.get("/api/cameras/cam-1/updates")

    assert response.status_code == 200
    body = response.json()
    assert [event["tracking"]["eventId"] for event in body["events"]] == ["ev-1", "ev-2"]
    assert body["stats"]["cameraName"] == "front_door"
    events_request = next(r for r in backend.requests if r.url.path == "/api/events/object_tracking")
    assert events_request.url.params["limit"] == "10"
    assert events_request.url.params["within"] == "600"
    assert "latest" not in events_request.url.params


def test_updates_for_unknown_camera_is_404() -> None:
    with _client(FakeBackend()) as client:
        response = client.get("/api/cameras/cam-9/updates")
    assert response.status_code == 404


def test_ptz_uses_configured_step() -> None:
    backend = FakeBackend().seed()
    with _client(backend, ptz_step=15) as client:
        response = client.post("/api/cameras/cam-1/ptz", json={"direction": "left"})
        bad = client.post("/api/cameras/cam-1/ptz", json={"direction": "forward"})

    assert response.status_code == 200
    assert response.json()["pan"] == -15
    assert backend.rc_commands == [{"cameraId": "cam-1", "pan": -15, "tilt": 0}]
    assert bad.status_code == 422


def test_stream_toggle_and_device_info() -> None:
    backend = FakeBackend().seed()
    with _client(backend) as client:
        toggled = client.put("/api/cameras/cam-1/stream", json={"enabled": False})
        info = client.get("/api/cameras/cam-1/info")

    assert toggled.json() == {"ok": True, "camera_id": "cam-1", "enabled": False}
    assert backend.streams["cam-1"]["enabled"] is False
    assert info.json()["status"]["status"] == "ok"


def test_transcoder_routes() -> None:
    backend = FakeBackend().seed()
    with _client(backend) as client:
        listing = client.get("/api/transcoders")
        updated = client.put("/api/transcoders/tr-1", json={"name": "edge-1", "log_level": "debug"})
        health = client.post("/api/transcoders/tr-1/healthcheck")
        missing = client.post("/api/transcoders/tr-9/healthcheck")

    assert listing.json()["items"][0]["integration"]["openGateId"] == "og-1"
    assert updated.status_code == 200
    assert backend.transcoder_updates[0]["id"] == "tr-1"
    assert backend.transcoder_updates[0]["logLevel"] == "debug"
    assert health.json()["status"] == "healthy"
    assert missing.status_code == 404


def test_event_route() -> None:
    backend = FakeBackend().seed()
    with _client(backend) as client:
        response = client.get("/api/events", params={"limit": 5})

    items = response.json()["items"]
    assert [item["event"]["eventId"] for item in items] == ["ev-1", "ev-2"]
    assert items[0]["person"]["name"] == "Alice"
    assert items[1]["ongoing"] is True
    assert backend.requests[0].url.params["limit"] == "5"


def test_people_routes() -> None:
    backend = FakeBackend().seed()
    with _client(backend) as client:
        listing = client.get("/api/people")
        person = client.get("/api/people/p-1")
        history = client.get("/api/people/p-1/history")
        created = client.post("/api/people", json={"name": "Bob", "age": "41", "base64Image": "aGVsbG8="})
        removed = client.delete("/api/people/p-1")
        missing = client.get("/api/people/p-1")

    assert listing.json()["items"][0]["person"]["name"] == "Alice"
    assert person.json()["image"]["presignedUrl"] == "http://media.test/people/p-1.jpg"
    assert history.json()["entries"][0]["event"]["eventId"] == "ev-1"
    assert created.status_code == 200
    assert any(p["name"] == "Bob" for p in backend.people.values())
    assert removed.status_code == 200
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Person not found"}


def test_spa_shell_without_bundle() -> None:
    with _client(FakeBackend()) as client:
        response = client.get("/")
    assert response.status_code == 200
    assert "Frontend bundle missing" in response.text


def test_spa_serves_files_inside_ui_dir_only(tmp_path) -> None:
    ui_dir = tmp_path / "ui"
    ui_dir.mkdir()
    (ui_dir / "index.html").write_text("<html>portal</html>", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("nope", encoding="utf-8")

    with _client(FakeBackend(), ui_dir=str(ui_dir)) as client:
        index = client.get("/cameras/cam-1")
        escaped = client.get("/..%2Fsecret.txt")

    assert index.text == "<html>portal</html>"
    assert "nope" not in escaped.text


def test_empty_integration_id_maps_to_404() -> None:
    backend = FakeBackend().seed()
    backend.transcoders["tr-1"]["openGateIntegrationId"] = ""
    with _client(backend) as client:
        response = client.get("/api/cameras/cam-1")
    assert response.status_code == 404
    assert response.json() == {"detail": "OpenGate integration not found"}


def test_updates_for_camera_without_open_gate_name_omit_stats() -> None:
    backend = FakeBackend().seed()
    backend.cameras["cam-1"]["openGateCameraName"] = ""
    with _client(backend) as client:
        response = client.get("/api/cameras/cam-1/updates")
    assert response.status_code == 200
    assert response.json().get("stats") is None
    assert backend.count("/api/stats") == 0
