from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from camportal.api import (
    routes_cameras,
    routes_events,
    routes_health,
    routes_people,
    routes_transcoders,
)
from camportal.client import BackendClient
from camportal.config.defaults import APP_VERSION
from camportal.config.migrate import load_settings
from camportal.config.schema import PortalSettings
from camportal.errors import BackendError, NotFoundError
from camportal.util.logging import get_logger, setup_logging
from camportal.util.security import resolve_path_within_base, sanitize_url

logger = get_logger(__name__)

_MISSING_UI = "<h1>Camera Portal</h1><p>Frontend bundle missing.</p>"


@dataclass
class PortalState:
    settings: PortalSettings
    client: BackendClient
    _closed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def create(
        cls,
        settings: PortalSettings | None = None,
        config_path: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **overrides: Any,
    ) -> "PortalState":
        if settings is None:
            settings = load_settings(config_path, **overrides)
        setup_logging(settings.log_level, Path(settings.log_dir) if settings.log_dir else None)
        client = BackendClient.from_settings(settings, transport=transport)
        logger.info("Using backend %s", sanitize_url(settings.backend_base_url))
        return cls(settings=settings, client=client)

    @property
    def closed(self) -> bool:
        return self._closed

    async def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.client.aclose()


def _packaged_ui_dir() -> Path:
    return Path(__file__).resolve().parent / "web"


def create_app(
    settings: PortalSettings | None = None,
    config_path: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    **overrides: Any,
) -> FastAPI:
    state = PortalState.create(settings=settings, config_path=config_path, transport=transport, **overrides)
    ui_dir = Path(state.settings.ui_dir) if state.settings.ui_dir else _packaged_ui_dir()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await app.state.portal.shutdown()

    app = FastAPI(title="Camera Portal", version=APP_VERSION, lifespan=lifespan)
    app.state.portal = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(BackendError)
    async def backend_failed(request: Request, exc: BackendError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": exc.message})

    app.include_router(routes_health.router, prefix="/api")
    app.include_router(routes_cameras.router, prefix="/api")
    app.include_router(routes_transcoders.router, prefix="/api")
    app.include_router(routes_events.router, prefix="/api")
    app.include_router(routes_people.router, prefix="/api")

    assets = ui_dir / "assets"
    if assets.exists():
        app.mount("/assets", StaticFiles(directory=assets), name="assets")

    @app.get("/", response_model=None)
    def root():
        index_path = ui_dir / "index.html"
        if index_path.exists():
            return FileResponse(index_path)
        return HTMLResponse(_MISSING_UI)

    @app.get("/{full_path:path}", response_model=None)
    def spa(full_path: str):
        candidate = resolve_path_within_base(ui_dir, full_path)
        if candidate is not None and candidate.exists() and candidate.is_file():
            return FileResponse(candidate)
        index_path = ui_dir / "index.html"
        if index_path.exists():
            return FileResponse(index_path)
        return HTMLResponse(_MISSING_UI)

    return app
