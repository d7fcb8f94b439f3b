from __future__ import annotations

import re
from pathlib import Path
from typing import Any
from urllib.parse import SplitResult, urlsplit, urlunsplit

URL_CREDENTIALS_RE = re.compile(r"([a-z][a-z0-9+.-]*://[^:@/\s]+:)([^@/\s]+)(@)", re.IGNORECASE)
PASSWORD_PAIR_RE = re.compile(r"(password\s*[=:]\s*)([^\s,;&]+)", re.IGNORECASE)
TOKEN_RE = re.compile(r"(token\s*[=:]\s*)([^\s,;&]+)", re.IGNORECASE)
AUTH_HEADER_RE = re.compile(r"(authorization\s*[=:]\s*basic\s+)([A-Za-z0-9+/=]+)", re.IGNORECASE)
ENTITY_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,63}$")

SENSITIVE_KEY_PARTS = ("password", "token", "secret")


def sanitize_url(url: str) -> str:
    try:
        parts: SplitResult = urlsplit(url)
        if not parts.scheme or not (parts.username or parts.password):
            return url
        hostname = parts.hostname or ""
        port = f":{parts.port}" if parts.port else ""
        netloc = f"{parts.username or 'user'}:***@{hostname}{port}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
    except ValueError:
        return URL_CREDENTIALS_RE.sub(r"\1***\3", url)


def resolve_path_within_base(base_dir: Path, untrusted_path: str | Path) -> Path | None:
    try:
        resolved_base = base_dir.resolve()
        target = (resolved_base / Path(untrusted_path)).resolve()
    except (OSError, RuntimeError, ValueError):
        return None

    try:
        target.relative_to(resolved_base)
    except ValueError:
        return None
    return target


def validate_entity_id(entity_id: str) -> str:
    value = str(entity_id)
    if not ENTITY_ID_RE.fullmatch(value):
        raise ValueError("Invalid id")
    return value


def redact_secrets(text: str) -> str:
    text = URL_CREDENTIALS_RE.sub(r"\1***\3", text)
    text = PASSWORD_PAIR_RE.sub(r"\1***", text)
    text = TOKEN_RE.sub(r"\1***", text)
    text = AUTH_HEADER_RE.sub(r"\1***", text)
    return text


def scrub_sensitive(obj: Any) -> Any:
    if isinstance(obj, dict):
        out: dict[str, Any] = {}
        for key, value in obj.items():
            lowered = str(key).lower()
            if any(part in lowered for part in SENSITIVE_KEY_PARTS):
                out[key] = "***"
            elif lowered.endswith("url") and isinstance(value, str):
                out[key] = sanitize_url(value)
            else:
                out[key] = scrub_sensitive(value)
        return out
    if isinstance(obj, list):
        return [scrub_sensitive(v) for v in obj]
    if isinstance(obj, str):
        return redact_secrets(obj)
    return obj


def mask_camera_password(camera: dict[str, Any]) -> dict[str, Any]:
    out = dict(camera)
    if out.get("password"):
        out["password"] = "***"
    return out
