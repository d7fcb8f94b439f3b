from __future__ import annotations

APP_VERSION = "0.1.0"
DEFAULT_BIND = "127.0.0.1"
DEFAULT_PORT = 8780
DEFAULT_LOG_LEVEL = "info"
DEFAULT_BACKEND_URL = "http://127.0.0.1:8080"
DEFAULT_PRIVATE_USERNAME = "admin"
DEFAULT_PRIVATE_PASSWORD = "admin"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_PTZ_STEP = 10
PTZ_LIMIT = 360
DEFAULT_EVENT_LIST_LIMIT = 99
DEFAULT_UPDATE_LIMIT = 10
DEFAULT_UPDATE_WITHIN_SECONDS = 600
DEFAULT_UPDATE_LATEST = True
DEFAULT_POLL_INTERVAL_SECONDS = 10.0
