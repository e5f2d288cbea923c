# woosync/errors.py
from typing import Any, Optional

import httpx


class WooSyncError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigError(WooSyncError, RuntimeError):
    pass


class ValidationError(WooSyncError, ValueError):
    """Product data rejected locally, before any request is made."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class RemoteStoreError(WooSyncError):
    """
    A non-2xx answer from WooCommerce, or a transport failure (status_code None).
    `message` is Woo's own `message` field when the body carries one.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        payload: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.payload = payload
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"

    @classmethod
    def from_response(cls, response: httpx.Response) -> "RemoteStoreError":
        try:
            body = response.json()
        except ValueError:
            body = response.text

        message, code = None, None
        if isinstance(body, dict):
            message = body.get("message")
            code = body.get("code")
        if not message:
            message = (body if isinstance(body, str) else "") or response.reason_phrase
        return cls(message, status_code=response.status_code, code=code, payload=body)

    @classmethod
    def from_transport(cls, exc: httpx.RequestError) -> "RemoteStoreError":
        # httpx timeouts often carry an empty message
        return cls(str(exc) or exc.__class__.__name__)
