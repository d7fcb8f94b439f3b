from __future__ import annotations

from fastapi import APIRouter, Request

from camportal.config.defaults import APP_VERSION
from camportal.util.security import sanitize_url

from .deps import settings as portal_settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def get_health(request: Request) -> dict[str, object]:
    settings = portal_settings(request)
    return {
        "ok": True,
        "version": APP_VERSION,
        "bind": settings.bind,
        "port": settings.port,
        "backend": sanitize_url(settings.backend_base_url),
        "private_backend": sanitize_url(settings.private_base_url or settings.backend_base_url),
    }
