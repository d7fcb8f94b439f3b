from __future__ import annotations

from fastapi import HTTPException, Request

from camportal.client import BackendClient
from camportal.config.schema import PortalSettings
from camportal.util.security import validate_entity_id


def backend(request: Request) -> BackendClient:
    return request.app.state.portal.client


def settings(request: Request) -> PortalSettings:
    return request.app.state.portal.settings


def path_id(value: str) -> str:
    try:
        return validate_entity_id(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def split_ids(value: str | None) -> list[str]:
    """Comma-separated ``ids`` query parameter; absent or blank means no filter."""
    if not value:
        return []
    return [path_id(item.strip()) for item in value.split(",") if item.strip()]
