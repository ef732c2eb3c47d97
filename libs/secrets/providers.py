"""Secret store providers available to the host process."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from libs.onboardbase import APIError, OnboardbaseClient, SecretIdentity

from .base import (
    CredentialResolver,
    ProviderError,
    SecretKeySelector,
    SecretStoreCapabilities,
)

logger = logging.getLogger(__name__)

ERR_NEW_CLIENT = "unable to create OnboardbaseClient : {}"
ERR_INVALID_STORE = "invalid store: {}"


@dataclass(frozen=True, slots=True)
class OnboardbaseStoreSpec:
    """Store definition: where the credentials live and which scope to read."""

    api_key_ref: SecretKeySelector
    passcode_ref: SecretKeySelector
    project: str = "development"
    environment: str = "development"


class OnboardbaseSecretsClient:
    """Read-only secrets client bound to one project/environment scope."""

    def __init__(self, client: OnboardbaseClient, *, project: str, environment: str) -> None:
        self._client = client
        self._project = project
        self._environment = environment

    @property
    def project(self) -> str:
        return self._project

    @property
    def environment(self) -> str:
        return self._environment

    def get_secret(self, key: str) -> str:
        identity = SecretIdentity(project=self._project, environment=self._environment, name=key)
        return self._client.get_secret(identity).value

    def get_secret_map(self, key: str) -> Mapping[str, str]:
        raw = self.get_secret(key)
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProviderError(f"secret {key} is not valid JSON") from exc
        if not isinstance(parsed, dict):
            raise ProviderError(f"secret {key} must be a JSON object")
        return {
            name: value if isinstance(value, str) else json.dumps(value)
            for name, value in parsed.items()
        }

    def get_all_secrets(self) -> Mapping[str, str]:
        identity = SecretIdentity(project=self._project, environment=self._environment)
        return self._client.get_secrets(identity).secrets

    def validate(self) -> None:
        self._client.authenticate()

    def close(self) -> None:
        self._client.close()


class OnboardbaseProvider:
    """Builds :class:`OnboardbaseSecretsClient` instances from a store spec."""

    name = "onboardbase"

    def capabilities(self) -> SecretStoreCapabilities:
        return SecretStoreCapabilities.READ_ONLY

    def validate_store(self, spec: OnboardbaseStoreSpec) -> None:
        for field_name, selector in (
            ("onboardbaseAPIKey", spec.api_key_ref),
            ("onboardbasePasscode", spec.passcode_ref),
        ):
            if not selector.name:
                raise ProviderError(ERR_INVALID_STORE.format(f"{field_name}.name cannot be empty"))
            if not selector.key:
                raise ProviderError(ERR_INVALID_STORE.format(f"{field_name}.key cannot be empty"))

    def new_client(
        self,
        spec: OnboardbaseStoreSpec,
        resolve_credential: CredentialResolver,
        **client_options: Any,
    ) -> OnboardbaseSecretsClient:
        """Resolve both credentials and return a client bound to the store scope.

        ``client_options`` are forwarded to
        :meth:`OnboardbaseClient.from_credentials`.
        """

        self.validate_store(spec)
        api_key = resolve_credential(spec.api_key_ref)
        passcode = resolve_credential(spec.passcode_ref)
        try:
            client = OnboardbaseClient.from_credentials(api_key, passcode, **client_options)
        except APIError as exc:
            raise ProviderError(ERR_NEW_CLIENT.format(exc.message)) from exc
        logger.debug(
            "Created Onboardbase client for project=%r environment=%r",
            spec.project,
            spec.environment,
        )
        return OnboardbaseSecretsClient(
            client, project=spec.project, environment=spec.environment
        )


__all__ = [
    "OnboardbaseProvider",
    "OnboardbaseSecretsClient",
    "OnboardbaseStoreSpec",
]
