"""Provider contract exposed to the host process."""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from libs.onboardbase import OnboardbaseClient, OnboardbaseSettings, get_settings

from .base import (
    CredentialResolver,
    ProviderError,
    SecretKeySelector,
    SecretProvider,
    SecretStoreCapabilities,
    SecretsClient,
)
from .providers import OnboardbaseProvider, OnboardbaseSecretsClient, OnboardbaseStoreSpec


def build_capability_table(*providers: SecretProvider) -> Mapping[str, SecretStoreCapabilities]:
    """Return a read-only ``provider name -> capabilities`` table.

    The host builds this once at startup and passes it to whatever needs to
    know which providers accept writes.
    """

    table: dict[str, SecretStoreCapabilities] = {}
    for provider in providers or (OnboardbaseProvider(),):
        if provider.name in table:
            raise ProviderError(f"provider {provider.name!r} registered twice")
        table[provider.name] = provider.capabilities()
    return MappingProxyType(table)


def client_from_settings(settings: OnboardbaseSettings | None = None) -> OnboardbaseSecretsClient:
    """Build a scoped client from ``ONBOARDBASE_*`` settings."""

    settings = settings or get_settings()
    credentials = {"api-key": settings.api_key, "passcode": settings.passcode}
    spec = OnboardbaseStoreSpec(
        api_key_ref=SecretKeySelector(name="onboardbase-env", key="api-key"),
        passcode_ref=SecretKeySelector(name="onboardbase-env", key="passcode"),
        project=settings.project or "development",
        environment=settings.environment or "development",
    )
    return OnboardbaseProvider().new_client(
        spec,
        lambda selector: credentials[selector.key],
        base_url=settings.base_url,
        timeout=settings.timeout,
        user_agent=settings.user_agent,
        verify_tls=settings.verify_tls,
    )


__all__ = [
    "CredentialResolver",
    "OnboardbaseClient",
    "OnboardbaseProvider",
    "OnboardbaseSecretsClient",
    "OnboardbaseStoreSpec",
    "ProviderError",
    "SecretKeySelector",
    "SecretProvider",
    "SecretStoreCapabilities",
    "SecretsClient",
    "build_capability_table",
    "client_from_settings",
]
