from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys
import threading
import webbrowser
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import uvicorn
from pydantic import BaseModel

from camportal.aggregation import (
    CameraRef,
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
from camportal.client import (
    BackendClient,
    add_camera,
    add_detectable_person,
    delete_camera,
    delete_person,
    do_device_healthcheck,
    get_camera_groups,
    toggle_stream,
)
from camportal.client.models import AddCameraParams, AddDetectablePerson
from camportal.config.defaults import DEFAULT_BIND, DEFAULT_LOG_LEVEL, DEFAULT_PORT
from camportal.config.migrate import load_settings
from camportal.config.schema import PortalSettings
from camportal.main import create_app
from camportal.util.logging import setup_logging
from camportal.util.security import mask_camera_password

_KNOWN_COMMANDS = {
    "serve",
    "cameras",
    "camera",
    "watch",
    "groups",
    "transcoders",
    "events",
    "people",
    "person",
    "ptz",
    "add-camera",
    "delete-camera",
    "add-person",
    "delete-person",
    "toggle-stream",
    "healthcheck",
}


def _url_for_browser(bind: str, port: int) -> str:
    host = "127.0.0.1" if bind == "0.0.0.0" else bind
    return f"http://{host}:{port}"


def _add_backend_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=None, help="Path to the portal config JSON")
    parser.add_argument("--backend-url", default=None, help="Backend API base URL (overrides config)")


def _add_serve_options(parser: argparse.ArgumentParser) -> None:
    _add_backend_options(parser)
    parser.add_argument("--bind", default=None, help=f"Bind host (default {DEFAULT_BIND})")
    parser.add_argument("--port", type=int, default=None, help=f"Bind port (default {DEFAULT_PORT})")
    parser.add_argument("--no-open", action="store_true", help="Do not auto-open browser")
    parser.add_argument("--log-level", default=None, help=f"Log level (default {DEFAULT_LOG_LEVEL})")


def _build_parser(prog: str) -> argparse.ArgumentParser:
    """Parser used when no command is given; behaves like ``serve``."""
    parser = argparse.ArgumentParser(prog=prog, description="Camera management portal")
    _add_serve_options(parser)
    return parser


def _build_command_parser(prog: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Camera management portal")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the portal API + UI server")
    _add_serve_options(serve)

    cameras = subparsers.add_parser("cameras", help="List cameras with transcoder and settings")
    _add_backend_options(cameras)
    cameras.add_argument("--ids", default=None, help="Comma-separated camera ids")

    camera = subparsers.add_parser("camera", help="Show everything known about one camera")
    _add_backend_options(camera)
    camera.add_argument("camera_id")

    watch = subparsers.add_parser("watch", help="Show a camera, then poll its recent events and stats")
    _add_backend_options(watch)
    watch.add_argument("camera_id")
    watch.add_argument("--interval", type=float, default=None, help="Seconds between refreshes")
    watch.add_argument("--count", type=int, default=None, help="Stop after this many refreshes")

    groups = subparsers.add_parser("groups", help="List camera groups")
    _add_backend_options(groups)
    groups.add_argument("--ids", default=None, help="Comma-separated group ids")

    transcoders = subparsers.add_parser("transcoders", help="List transcoders with their OpenGate integration")
    _add_backend_options(transcoders)
    transcoders.add_argument("--ids", default=None, help="Comma-separated transcoder ids")

    events = subparsers.add_parser("events", help="List tracking events with snapshots and people")
    _add_backend_options(events)
    events.add_argument("--ids", default=None, help="Comma-separated event ids")
    events.add_argument("--limit", type=int, default=None, help="Maximum number of events")

    people = subparsers.add_parser("people", help="List detectable people")
    _add_backend_options(people)
    people.add_argument("--ids", default=None, help="Comma-separated person ids")

    person = subparsers.add_parser("person", help="Show one person")
    _add_backend_options(person)
    person.add_argument("person_id")
    person.add_argument("--history", action="store_true", help="Resolve sightings to events and snapshots")

    ptz = subparsers.add_parser("ptz", help="Pan or tilt a camera one step")
    _add_backend_options(ptz)
    ptz.add_argument("camera_id")
    ptz.add_argument("direction", choices=["up", "down", "left", "right"])
    ptz.add_argument("--step", type=int, default=None, help="Degrees per step")

    add_cam = subparsers.add_parser("add-camera", help="Register a camera")
    _add_backend_options(add_cam)
    add_cam.add_argument("--name", required=True)
    add_cam.add_argument("--ip", required=True)
    add_cam.add_argument("--port", dest="camera_port", type=int, default=80)
    add_cam.add_argument("--username", default="")
    add_cam.add_argument("--password", default="")
    add_cam.add_argument("--transcoder-id", required=True)
    add_cam.add_argument("--autotracking", action="store_true")

    delete_cam = subparsers.add_parser("delete-camera", help="Remove a camera")
    _add_backend_options(delete_cam)
    delete_cam.add_argument("camera_id")

    add_person = subparsers.add_parser("add-person", help="Register a detectable person from an image")
    _add_backend_options(add_person)
    add_person.add_argument("--name", required=True)
    add_person.add_argument("--age", default="")
    add_person.add_argument("--image", required=True, help="Path to a face image")

    delete_pers = subparsers.add_parser("delete-person", help="Remove a detectable person")
    _add_backend_options(delete_pers)
    delete_pers.add_argument("person_id")

    stream = subparsers.add_parser("toggle-stream", help="Start or stop a camera stream")
    _add_backend_options(stream)
    stream.add_argument("camera_id")
    stream.add_argument("state", choices=["on", "off"])

    health = subparsers.add_parser("healthcheck", help="Ask a transcoder for its health")
    _add_backend_options(health)
    health.add_argument("transcoder_id")

    return parser


def _split_ids(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _load(parsed: argparse.Namespace) -> PortalSettings:
    return load_settings(
        parsed.config,
        backend_base_url=parsed.backend_url,
        bind=getattr(parsed, "bind", None),
        port=getattr(parsed, "port", None),
        log_level=getattr(parsed, "log_level", None),
    )


def _open_client(settings: PortalSettings) -> BackendClient:
    return BackendClient.from_settings(settings)


def _run(parsed: argparse.Namespace, force_open: bool | None = None) -> int:
    should_open = not parsed.no_open if force_open is None else force_open
    settings = _load(parsed)
    if settings.bind == "0.0.0.0":
        print("[warning] LAN access enabled. Keep the portal on trusted networks and do not expose publicly.")

    app = create_app(settings=settings)
    url = _url_for_browser(settings.bind, settings.port)
    browser_timer: threading.Timer | None = None

    if should_open:
        browser_timer = threading.Timer(0.9, lambda: webbrowser.open(url))
        browser_timer.start()

    print(f"Camera portal running at {url}")
    config = uvicorn.Config(
        app,
        host=settings.bind,
        port=settings.port,
        log_level=settings.log_level,
        workers=1,
        timeout_graceful_shutdown=2,
        timeout_keep_alive=1,
    )
    server = uvicorn.Server(config)
    previous_handlers: dict[int, object] = {}
    run_exit_code: int | None = None

    def _finalize_state_shutdown() -> None:
        app_state = getattr(app, "state", None)
        portal_state = getattr(app_state, "portal", None)
        if portal_state is None or portal_state.closed:
            return
        asyncio.run(portal_state.shutdown())

    def _request_exit(signum: int, _frame: object) -> None:
        if signum in {signal.SIGINT, signal.SIGTERM}:
            server.should_exit = True

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            previous_handlers[sig] = signal.getsignal(sig)
            signal.signal(sig, _request_exit)
        except (AttributeError, ValueError):
            continue

    try:
        try:
            server.run()
        except KeyboardInterrupt:
            server.should_exit = True
        except SystemExit as exc:
            if server.should_exit:
                run_exit_code = 0
            else:
                code = exc.code
                run_exit_code = code if isinstance(code, int) else 1
    finally:
        _finalize_state_shutdown()
        if browser_timer is not None:
            browser_timer.cancel()
            browser_timer.join(timeout=0.5)
        for sig, handler in previous_handlers.items():
            try:
                signal.signal(sig, handler)
            except (AttributeError, ValueError):
                continue
    if run_exit_code is not None:
        return run_exit_code
    if bool(getattr(server, "started", False)) or server.should_exit:
        return 0
    return 1


def _to_payload(result: object) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(by_alias=True, mode="json")
    if isinstance(result, list):
        return [_to_payload(item) for item in result]
    return result


def _print_result(result: object) -> None:
    print(json.dumps(_to_payload(result), indent=2, sort_keys=True))


async def _watch(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> None:
    info = await get_camera_view_info(client, parsed.camera_id)
    detail = info.model_dump(by_alias=True, mode="json")
    detail["camera"] = mask_camera_password(detail["camera"])
    _print_result(detail)

    camera = CameraRef.from_camera(info.camera)
    interval = parsed.interval if parsed.interval is not None else settings.poll_interval_seconds
    refreshes = 0
    # One refresh at a time: the next sequence starts only after the previous one printed.
    while parsed.count is None or refreshes < parsed.count:
        updated = await get_updated_info(
            client,
            camera,
            limit=settings.update_limit,
            latest=settings.update_latest,
            within=settings.update_within_seconds,
        )
        _print_result(updated)
        refreshes += 1
        if parsed.count is not None and refreshes >= parsed.count:
            break
        await asyncio.sleep(interval)


async def _cameras(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    view = (await get_list_cameras(client, _split_ids(parsed.ids))).model_dump(by_alias=True, mode="json")
    for item in view["items"]:
        item["camera"] = mask_camera_password(item["camera"])
    return view


async def _camera(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    view = (await get_camera_view_info(client, parsed.camera_id)).model_dump(by_alias=True, mode="json")
    view["camera"] = mask_camera_password(view["camera"])
    return view


async def _person(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    if parsed.history:
        return await get_person_history_summary(client, parsed.person_id)
    return await get_person_info(client, parsed.person_id)


async def _ptz(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    return await do_ptz_ctrl(client, parsed.direction, parsed.camera_id, parsed.step or settings.ptz_step)


async def _add_camera(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    params = AddCameraParams(
        name=parsed.name,
        ip=parsed.ip,
        port=parsed.camera_port,
        username=parsed.username,
        password=parsed.password,
        transcoder_id=parsed.transcoder_id,
        autotracking=parsed.autotracking,
    )
    return {"ok": True, "camera_id": await add_camera(client, params)}


async def _delete_camera(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    await delete_camera(client, parsed.camera_id)
    return {"ok": True, "camera_id": parsed.camera_id}


async def _add_person(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    await add_detectable_person(client, AddDetectablePerson.from_image_file(parsed.name, parsed.age, parsed.image))
    return {"ok": True, "name": parsed.name}


async def _delete_person(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    await delete_person(client, parsed.person_id)
    return {"ok": True, "person_id": parsed.person_id}


async def _toggle_stream(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    enabled = parsed.state == "on"
    await toggle_stream(client, parsed.camera_id, enabled)
    return {"ok": True, "camera_id": parsed.camera_id, "enabled": enabled}


async def _healthcheck(client: BackendClient, parsed: argparse.Namespace, settings: PortalSettings) -> object:
    status = await do_device_healthcheck(client, parsed.transcoder_id)
    return {"ok": True, "transcoder_id": parsed.transcoder_id, "status": status}


Handler = Callable[[BackendClient, argparse.Namespace, PortalSettings], Awaitable[object]]

_HANDLERS: dict[str, Handler] = {
    "cameras": _cameras,
    "camera": _camera,
    "groups": lambda client, parsed, settings: get_camera_groups(client, _split_ids(parsed.ids)),
    "transcoders": lambda client, parsed, settings: get_list_transcoders(client, _split_ids(parsed.ids)),
    "events": lambda client, parsed, settings: get_list_events(
        client,
        _split_ids(parsed.ids),
        limit=parsed.limit or settings.event_list_limit,
    ),
    "people": lambda client, parsed, settings: get_list_people(client, _split_ids(parsed.ids)),
    "person": _person,
    "ptz": _ptz,
    "add-camera": _add_camera,
    "delete-camera": _delete_camera,
    "add-person": _add_person,
    "delete-person": _delete_person,
    "toggle-stream": _toggle_stream,
    "healthcheck": _healthcheck,
}


async def _execute(parsed: argparse.Namespace, settings: PortalSettings) -> None:
    async with _open_client(settings) as client:
        if parsed.command == "watch":
            await _watch(client, parsed, settings)
            return
        handler = _HANDLERS.get(parsed.command)
        if handler is None:
            raise ValueError(f"Unknown command: {parsed.command}")
        _print_result(await handler(client, parsed, settings))


def _dispatch_command(parsed: argparse.Namespace) -> int:
    if parsed.command == "serve":
        return _run(parsed)
    settings = _load(parsed)
    setup_logging(settings.log_level, Path(settings.log_dir) if settings.log_dir else None)
    asyncio.run(_execute(parsed, settings))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = list(argv or [])
    try:
        if args and args[0] in _KNOWN_COMMANDS:
            parser = _build_command_parser("camportal")
            parsed = parser.parse_args(args)
            return _dispatch_command(parsed)
        parser = _build_parser("camportal")
        parsed = parser.parse_args(args)
        return _run(parsed)
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        print(f"[error] {exc}")
        return 2


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
