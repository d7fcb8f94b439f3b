from __future__ import annotations

import argparse
import json
from types import SimpleNamespace

from camportal import cli
from fake_backend import FakeBackend


def _parsed(tmp_path) -> argparse.Namespace:
    return cli._build_parser("camportal").parse_args(
        ["--no-open", "--bind", "127.0.0.1", "--port", "8877", "--config", str(tmp_path / "missing.json")]
    )


def _fake_app(shutdown_calls: list[int]) -> object:
    async def shutdown() -> None:
        shutdown_calls.append(1)

    portal = SimpleNamespace(closed=False, shutdown=shutdown)
    return SimpleNamespace(state=SimpleNamespace(portal=portal))


def _use_backend(monkeypatch, backend: FakeBackend) -> None:
    monkeypatch.setattr(cli, "_open_client", lambda settings: backend.client())


def _config_args(tmp_path) -> list[str]:
    return ["--config", str(tmp_path / "missing.json")]


def test_cli_returns_zero_on_keyboard_interrupt(monkeypatch, tmp_path) -> None:
    shutdown_calls: list[int] = []
    monkeypatch.setattr(cli, "create_app", lambda **kwargs: _fake_app(shutdown_calls))
    monkeypatch.setattr(cli.uvicorn, "Config", lambda *args, **kwargs: object())

    class _InterruptServer:
        def __init__(self, _config: object) -> None:
            self.should_exit = False
            self.started = True

        def run(self) -> None:
            raise KeyboardInterrupt

    monkeypatch.setattr(cli.uvicorn, "Server", _InterruptServer)

    assert cli._run(_parsed(tmp_path)) == 0
    assert len(shutdown_calls) == 1


def test_cli_returns_nonzero_when_server_never_starts(monkeypatch, tmp_path) -> None:
    shutdown_calls: list[int] = []
    monkeypatch.setattr(cli, "create_app", lambda **kwargs: _fake_app(shutdown_calls))
    monkeypatch.setattr(cli.uvicorn, "Config", lambda *args, **kwargs: object())

    class _NeverStartedServer:
        def __init__(self, _config: object) -> None:
            self.should_exit = False
            self.started = False

        def run(self) -> None:
            return None

    monkeypatch.setattr(cli.uvicorn, "Server", _NeverStartedServer)

    assert cli._run(_parsed(tmp_path)) == 1
    assert len(shutdown_calls) == 1


def test_cli_forces_single_uvicorn_worker(monkeypatch, tmp_path) -> None:
    shutdown_calls: list[int] = []
    monkeypatch.setattr(cli, "create_app", lambda **kwargs: _fake_app(shutdown_calls))
    captured: dict[str, object] = {}

    def _capture_config(*_args, **kwargs):
        captured.update(kwargs)
        return object()

    monkeypatch.setattr(cli.uvicorn, "Config", _capture_config)

    class _StartedServer:
        def __init__(self, _config: object) -> None:
            self.should_exit = False
            self.started = True

        def run(self) -> None:
            return None

    monkeypatch.setattr(cli.uvicorn, "Server", _StartedServer)

    assert cli._run(_parsed(tmp_path)) == 0
    assert captured["workers"] == 1
    assert captured["port"] == 8877
    assert len(shutdown_calls) == 1


def test_main_returns_zero_on_interrupt(monkeypatch) -> None:
    def _raise_interrupt(_parsed: argparse.Namespace, force_open: bool | None = None) -> int:
        _ = force_open
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "_run", _raise_interrupt)
    assert cli.main(["--no-open"]) == 0


def test_cli_treats_system_exit_after_should_exit_as_clean(monkeypatch, tmp_path) -> None:
    shutdown_calls: list[int] = []
    monkeypatch.setattr(cli, "create_app", lambda **kwargs: _fake_app(shutdown_calls))
    monkeypatch.setattr(cli.uvicorn, "Config", lambda *args, **kwargs: object())

    class _SystemExitServer:
        def __init__(self, _config: object) -> None:
            self.should_exit = True
            self.started = True

        def run(self) -> None:
            raise SystemExit(1)

    monkeypatch.setattr(cli.uvicorn, "Server", _SystemExitServer)

    assert cli._run(_parsed(tmp_path)) == 0
    assert len(shutdown_calls) == 1


def test_cameras_command_prints_redacted_view(monkeypatch, tmp_path, capsys) -> None:
    backend = FakeBackend().seed()
    _use_backend(monkeypatch, backend)

    assert cli.main(["cameras", *_config_args(tmp_path)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["items"][0]["camera"]["cameraId"] == "cam-1"
    assert payload["items"][0]["camera"]["password"] == "***"


def test_missing_camera_prints_error(monkeypatch, tmp_path, capsys) -> None:
    _use_backend(monkeypatch, FakeBackend().seed())

    assert cli.main(["camera", "cam-404", *_config_args(tmp_path)]) == 2
    assert "[error] Camera not found" in capsys.readouterr().out


def test_ptz_command_sends_one_step(monkeypatch, tmp_path, capsys) -> None:
    backend = FakeBackend().seed()
    _use_backend(monkeypatch, backend)

    assert cli.main(["ptz", "cam-1", "down", "--step", "20", *_config_args(tmp_path)]) == 0
    assert backend.rc_commands == [{"cameraId": "cam-1", "pan": 0, "tilt": -20}]
    assert json.loads(capsys.readouterr().out)["tilt"] == -20


def test_watch_refreshes_one_sequence_at_a_time(monkeypatch, tmp_path, capsys) -> None:
    backend = FakeBackend().seed()
    _use_backend(monkeypatch, backend)

    assert cli.main(["watch", "cam-1", "--interval", "0", "--count", "2", *_config_args(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "camsecret" not in out
    assert backend.count("/api/stats") == 2
    assert backend.count("/api/events/object_tracking") == 2
    stats_positions = [i for i, path in enumerate(backend.paths()) if path == "/api/stats"]
    events_positions = [i for i, path in enumerate(backend.paths()) if path == "/api/events/object_tracking"]
    assert events_positions[0] < stats_positions[0] < events_positions[1] < stats_positions[1]


def test_person_history_command(monkeypatch, tmp_path, capsys) -> None:
    _use_backend(monkeypatch, FakeBackend().seed())

    assert cli.main(["person", "p-1", "--history", *_config_args(tmp_path)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["entries"][0]["event"]["eventId"] == "ev-1"


def test_delete_camera_twice_reports_not_found(monkeypatch, tmp_path, capsys) -> None:
    backend = FakeBackend().seed()
    _use_backend(monkeypatch, backend)

    assert cli.main(["delete-camera", "cam-1", *_config_args(tmp_path)]) == 0
    assert cli.main(["delete-camera", "cam-1", *_config_args(tmp_path)]) == 2
    assert "[error] Camera not found" in capsys.readouterr().out


def test_add_person_reads_image_file(monkeypatch, tmp_path, capsys) -> None:
    backend = FakeBackend()
    _use_backend(monkeypatch, backend)
    image = tmp_path / "face.jpg"
    image.write_bytes(b"hello")

    args = ["add-person", "--name", "Bob", "--age", "41", "--image", str(image), *_config_args(tmp_path)]
    assert cli.main(args) == 0
    sent = json.loads(backend.requests[0].content)
    assert sent == {"name": "Bob", "age": "41", "base64Image": "aGVsbG8="}


def test_groups_command(monkeypatch, tmp_path, capsys) -> None:
    _use_backend(monkeypatch, FakeBackend().seed())

    assert cli.main(["groups", *_config_args(tmp_path)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload == [{"groupId": "grp-1", "name": "Entrances", "createdDate": "2026-10-01T08:00:00Z"}]
