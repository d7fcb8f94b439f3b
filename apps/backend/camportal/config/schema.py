from __future__ import annotations

from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator, model_validator

from .defaults import (
    DEFAULT_BACKEND_URL,
    DEFAULT_BIND,
    DEFAULT_EVENT_LIST_LIMIT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_PORT,
    DEFAULT_PRIVATE_PASSWORD,
    DEFAULT_PRIVATE_USERNAME,
    DEFAULT_PTZ_STEP,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_UPDATE_LATEST,
    DEFAULT_UPDATE_LIMIT,
    DEFAULT_UPDATE_WITHIN_SECONDS,
    PTZ_LIMIT,
)


def _normalize_base_url(value: str) -> str:
    value = value.strip()
    parts = urlsplit(value)
    if parts.scheme.lower() not in {"http", "https"} or not parts.hostname:
        msg = f"Invalid base URL: {value!r}"
        raise ValueError(msg)
    return value.rstrip("/")


class PortalSettings(BaseModel):
    backend_base_url: str = DEFAULT_BACKEND_URL
    private_base_url: str | None = None
    private_username: str = DEFAULT_PRIVATE_USERNAME
    private_password: str = DEFAULT_PRIVATE_PASSWORD
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    bind: str = DEFAULT_BIND
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: str | None = None
    ui_dir: str | None = None
    ptz_step: int = Field(default=DEFAULT_PTZ_STEP, ge=1, le=PTZ_LIMIT)
    event_list_limit: int = Field(default=DEFAULT_EVENT_LIST_LIMIT, ge=1)
    update_limit: int | None = DEFAULT_UPDATE_LIMIT
    update_within_seconds: int | None = DEFAULT_UPDATE_WITHIN_SECONDS
    update_latest: bool = DEFAULT_UPDATE_LATEST
    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0)

    @field_validator("backend_base_url")
    @classmethod
    def check_backend_url(cls, value: str) -> str:
        return _normalize_base_url(value)

    @field_validator("private_base_url")
    @classmethod
    def check_private_url(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return _normalize_base_url(value)

    @field_validator("log_level")
    @classmethod
    def lower_log_level(cls, value: str) -> str:
        return value.strip().lower() or DEFAULT_LOG_LEVEL

    @model_validator(mode="after")
    def default_private_url(self) -> "PortalSettings":
        if self.private_base_url is None:
            self.private_base_url = self.backend_base_url
        return self
