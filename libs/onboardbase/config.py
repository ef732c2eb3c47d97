"""Configuration for the Onboardbase API client."""
from __future__ import annotations

import ssl
from dataclasses import dataclass, field
from functools import lru_cache

import httpx
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import APIError, ErrorKind

DEFAULT_BASE_URL = "https://public.onboardbase.com/api/v1/"
DEFAULT_USER_AGENT = "onboardbase-external-secrets"
DEFAULT_TIMEOUT = 10.0


class OnboardbaseSettings(BaseSettings):
    """Settings loaded from ``ONBOARDBASE_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="ONBOARDBASE_", case_sensitive=False)

    api_key: str = Field("", description="API key sent in the api_key header", repr=False)
    passcode: str = Field("", description="Passcode used to decrypt secret envelopes", repr=False)
    base_url: str = Field(DEFAULT_BASE_URL, description="Root of the Onboardbase public API")
    project: str = Field("", description="Default project scope")
    environment: str = Field("", description="Default environment scope")
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds")
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header value")
    verify_tls: bool = Field(True, description="Verify the server certificate chain")


@lru_cache
def get_settings() -> OnboardbaseSettings:
    return OnboardbaseSettings()


def _normalize_base_url(value: str) -> str:
    candidate = value.strip()
    if candidate and "://" not in candidate:
        candidate = f"https://{candidate}"
    candidate = candidate.rstrip("/")
    try:
        url = httpx.URL(candidate)
    except httpx.InvalidURL as exc:
        raise APIError("setting base URL failed", kind=ErrorKind.CONFIG_INVALID, cause=exc) from exc
    if url.scheme != "https" or not url.host:
        raise APIError(
            f"base URL must be an absolute https URL, got {value!r}",
            kind=ErrorKind.CONFIG_INVALID,
        )
    return candidate


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Immutable connection settings shared by every request of a client."""

    api_key: str = field(repr=False)
    passcode: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT
    verify_tls: bool = True
    minimum_tls_version: ssl.TLSVersion = ssl.TLSVersion.TLSv1_2

    def __post_init__(self) -> None:
        if not self.api_key:
            raise APIError("api key must not be empty", kind=ErrorKind.CONFIG_INVALID)
        if not self.passcode:
            raise APIError("passcode must not be empty", kind=ErrorKind.CONFIG_INVALID)
        if self.timeout <= 0:
            raise APIError("timeout must be positive", kind=ErrorKind.CONFIG_INVALID)
        object.__setattr__(self, "base_url", _normalize_base_url(self.base_url))

    @classmethod
    def from_settings(cls, settings: OnboardbaseSettings) -> "ClientConfig":
        return cls(
            api_key=settings.api_key,
            passcode=settings.passcode,
            base_url=settings.base_url,
            user_agent=settings.user_agent,
            timeout=settings.timeout,
            verify_tls=settings.verify_tls,
        )

    def ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        context.minimum_version = self.minimum_tls_version
        if not self.verify_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context


__all__ = [
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "OnboardbaseSettings",
    "get_settings",
]
