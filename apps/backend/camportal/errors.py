from __future__ import annotations


class PortalError(Exception):
    """Base class for failures surfaced by the portal."""


class BackendError(PortalError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str = "",
        url: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.method = method
        self.url = url


class NotFoundError(PortalError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
