"""Authenticated HTTP transport for the Onboardbase public API."""
from __future__ import annotations

import logging
import time

import httpx

from libs.observability import observe_request

from .config import ClientConfig
from .errors import APIError, ErrorKind
from .schemas import ErrorEnvelope, Headers, QueryParams

logger = logging.getLogger(__name__)

API_KEY_HEADER = "api_key"
IDENTITY_HEADERS = frozenset({"user-agent", API_KEY_HEADER})
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def is_success(status_code: int) -> bool:
    """Return ``True`` for 2xx and 3xx statuses.

    Redirects are reported as success and never followed.
    """

    return 200 <= status_code <= 399


class Transport:
    """Executes a single signed request per call, without retries."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(
            timeout=config.timeout,
            verify=config.ssl_context(),
            limits=httpx.Limits(max_keepalive_connections=0),
            follow_redirects=False,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    def close(self) -> None:
        self._client.close()

    def build_headers(self, method: str, headers: Headers) -> dict[str, str]:
        merged: dict[str, str] = {"accept": "application/json"}
        if method.upper() in BODY_METHODS and "content-type" not in headers:
            merged["content-type"] = "application/json"
        for key, value in headers:
            if key not in IDENTITY_HEADERS:
                merged[key] = value
        merged["user-agent"] = self._config.user_agent
        merged[API_KEY_HEADER] = self._config.api_key
        return merged

    def perform_request(
        self,
        path: str,
        method: str = "GET",
        headers: Headers = Headers(),
        params: QueryParams = QueryParams(),
        body: bytes = b"",
    ) -> httpx.Response:
        """Send ``method path`` and return the fully read response.

        Raises :class:`APIError` for malformed URLs, network failures,
        unreadable bodies and unsuccessful statuses.
        """

        method = method.upper()
        started = time.perf_counter()
        try:
            response = self._perform(path, method, headers, params, body)
        except APIError as exc:
            outcome = str(exc.status_code) if exc.status_code else exc.kind.value
            observe_request(method, path, outcome, time.perf_counter() - started)
            raise
        observe_request(method, path, str(response.status_code), time.perf_counter() - started)
        return response

    def _perform(
        self,
        path: str,
        method: str,
        headers: Headers,
        params: QueryParams,
        body: bytes,
    ) -> httpx.Response:
        url_text = f"{self._config.base_url}{path}"
        try:
            url = httpx.URL(url_text)
        except httpx.InvalidURL as exc:
            raise APIError(
                f"invalid API URL: {url_text}", kind=ErrorKind.MALFORMED_URL, cause=exc
            ) from exc
        if not url.is_absolute_url or not url.host:
            raise APIError(f"invalid API URL: {url_text}", kind=ErrorKind.MALFORMED_URL)

        request = self._client.build_request(
            method,
            url,
            params=params.as_dict() or None,
            headers=self.build_headers(method, headers),
            content=body or None,
        )

        try:
            response = self._client.send(request, stream=True)
        except httpx.TransportError as exc:
            logger.warning("Onboardbase request %s %s failed: %s", request.method, path, exc)
            raise APIError("unable to load response", kind=ErrorKind.TRANSPORT, cause=exc) from exc

        try:
            response.read()
        except (httpx.TransportError, httpx.StreamError) as exc:
            raise APIError(
                "unable to read entire response body",
                kind=ErrorKind.IO,
                cause=exc,
                status_code=response.status_code,
                response=response,
            ) from exc
        finally:
            response.close()

        logger.debug(
            "Onboardbase request %s %s returned %s", request.method, path, response.status_code
        )
        if is_success(response.status_code):
            return response
        raise self._rejection(response)

    @staticmethod
    def _rejection(response: httpx.Response) -> APIError:
        status_code = response.status_code
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            try:
                envelope = ErrorEnvelope.model_validate_json(response.content)
            except ValueError as exc:
                logger.warning("Onboardbase returned %s with an unreadable error body", status_code)
                return APIError(
                    "unable to unmarshal error JSON payload",
                    kind=ErrorKind.DECODE,
                    cause=exc,
                    status_code=status_code,
                    response=response,
                )
            logger.warning("Onboardbase rejected the request with status %s", status_code)
            return APIError(
                "\n".join(envelope.messages),
                kind=ErrorKind.API_REJECTED,
                status_code=status_code,
                response=response,
            )

        logger.warning("Onboardbase returned %s with a non JSON body", status_code)
        return APIError(
            f"unable to load response: {status_code} status code; {len(response.content)} bytes",
            kind=ErrorKind.API_REJECTED,
            status_code=status_code,
        )


__all__ = ["API_KEY_HEADER", "Transport", "is_success"]
