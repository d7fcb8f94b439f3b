from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from camportal.util.logging import get_logger
from camportal.util.paths import resolve_config_path

from .schema import PortalSettings

logger = get_logger(__name__)

# Keys written by the browser build (dev.configs.json) mapped to settings names.
LEGACY_KEYS = {
    "backendBaseUrl": "backend_base_url",
    "privateBaseUrl": "private_base_url",
    "privateUsername": "private_username",
    "privatePassword": "private_password",
}


def load_settings(config_path: str | None = None, **overrides: Any) -> PortalSettings:
    path = resolve_config_path(config_path)
    raw = _read_json(path)
    migrated = migrate_settings(raw)
    for key, value in overrides.items():
        if value is None or value == "":
            continue
        migrated[key] = value
    settings = PortalSettings.model_validate(migrated)
    logger.debug("Loaded settings from %s (exists=%s)", path, path.exists())
    return settings


def migrate_settings(raw: dict[str, Any]) -> dict[str, Any]:
    if not raw:
        return {}

    out: dict[str, Any] = {}
    for key, value in raw.items():
        target = LEGACY_KEYS.get(key, key)
        if target in out and key in LEGACY_KEYS:
            continue
        out[target] = value
    return out


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid config file {path}: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid config file {path}: expected a JSON object")
    return payload
