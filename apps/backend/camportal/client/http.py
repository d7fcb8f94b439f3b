from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from camportal.config.schema import PortalSettings
from camportal.errors import BackendError, NotFoundError
from camportal.util.logging import get_logger
from camportal.util.security import sanitize_url, scrub_sensitive

logger = get_logger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def join_ids(ids: Iterable[str] | None) -> str | None:
    """Comma-join ids for a filter parameter; None means no filter."""
    values = [str(item) for item in ids or () if str(item)]
    if not values:
        return None
    return ",".join(values)


def query(**params: Any) -> dict[str, str]:
    out: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            out[key] = "true" if value else "false"
        else:
            out[key] = str(value)
    return out


class BackendClient:
    """Async access to the public and private halves of the backend API."""

    def __init__(
        self,
        base_url: str,
        private_base_url: str | None = None,
        private_auth: tuple[str, str] | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.private_base_url = private_base_url or base_url
        self._public = httpx.AsyncClient(
            base_url=self.base_url,
            headers=JSON_HEADERS,
            timeout=timeout_seconds,
            transport=transport,
        )
        self._private = httpx.AsyncClient(
            base_url=self.private_base_url,
            headers=JSON_HEADERS,
            timeout=timeout_seconds,
            transport=transport,
            auth=httpx.BasicAuth(*private_auth) if private_auth else None,
        )

    @classmethod
    def from_settings(
        cls,
        settings: PortalSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "BackendClient":
        return cls(
            base_url=settings.backend_base_url,
            private_base_url=settings.private_base_url,
            private_auth=(settings.private_username, settings.private_password),
            timeout_seconds=settings.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._public.aclose()
        await self._private.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        private: bool = False,
    ) -> Any:
        http = self._private if private else self._public
        url = str(http.base_url).rstrip("/") + path
        logger.debug("%s %s params=%s", method, sanitize_url(url), scrub_sensitive(dict(params or {})))
        try:
            response = await http.request(method, path, params=params or None, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, sanitize_url(url), exc)
            raise BackendError(f"Backend unreachable: {exc}", method=method, url=url) from exc

        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise BackendError(
                    "Backend returned invalid JSON",
                    status_code=response.status_code,
                    method=method,
                    url=str(response.url),
                ) from exc

        message = _error_message(response)
        logger.warning("%s %s -> %s: %s", method, sanitize_url(str(response.url)), response.status_code, message)
        if response.status_code == 404:
            raise NotFoundError(message)
        raise BackendError(
            message,
            status_code=response.status_code,
            method=method,
            url=str(response.url),
        )

    async def get(self, path: str, params: Mapping[str, str] | None = None, *, private: bool = False) -> Any:
        return await self.request("GET", path, params=params, private=private)

    async def post(self, path: str, body: Any = None, params: Mapping[str, str] | None = None) -> Any:
        return await self.request("POST", path, params=params, json=body)

    async def put(self, path: str, body: Any = None, params: Mapping[str, str] | None = None) -> Any:
        return await self.request("PUT", path, params=params, json=body)

    async def delete(self, path: str, params: Mapping[str, str] | None = None) -> Any:
        return await self.request("DELETE", path, params=params)


def collection(payload: Any, key: str) -> list[Any]:
    if not isinstance(payload, dict):
        return []
    items = payload.get(key)
    if not isinstance(items, list):
        return []
    return items


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail", "msg"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    text = response.text.strip()
    if text and len(text) <= 200:
        return text
    return f"Backend request failed with status {response.status_code}"
