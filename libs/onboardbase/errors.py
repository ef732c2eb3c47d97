"""Error taxonomy for the Onboardbase API client."""
from __future__ import annotations

from enum import Enum

import httpx


class ErrorKind(str, Enum):
    """Category of a failure surfaced by the client."""

    CONFIG_INVALID = "config_invalid"
    MALFORMED_URL = "malformed_url"
    TRANSPORT = "transport"
    IO = "io"
    DECODE = "decode"
    API_REJECTED = "api_rejected"
    DECRYPT_FAILED = "decrypt_failed"
    NOT_FOUND = "not_found"


class APIError(RuntimeError):
    """Raised for every failure returned to callers of the client.

    ``data`` holds a raw fragment (response body, envelope or plaintext) that
    helps diagnose the failure. It is never populated with non-JSON error
    bodies.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        cause: BaseException | None = None,
        data: str | None = None,
        status_code: int | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.cause = cause
        self.data = data
        self.status_code = status_code
        self.response = response
        super().__init__(self._render())

    def _render(self) -> str:
        text = f"Onboardbase API Client Error: {self.message}"
        if self.cause is not None:
            text = f"{text}\n{self.cause}"
        if self.data:
            text = f"{text}\nData: {self.data}"
        return text


__all__ = ["APIError", "ErrorKind"]
