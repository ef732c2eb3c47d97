"""Read-only client for secrets stored in Onboardbase."""
from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx
from pydantic import ValidationError

from . import crypto
from .config import ClientConfig
from .errors import APIError, ErrorKind
from .schemas import (
    DecryptedSecretRecord,
    SecretIdentity,
    SecretResponse,
    SecretsEnvelope,
    SecretsResponse,
)
from .transport import Transport

logger = logging.getLogger(__name__)

SECRETS_PATH = "/secrets"
TEAM_MEMBERS_PATH = "/team/members"


class OnboardbaseClient:
    """Fetch and decrypt secrets for a project/environment scope.

    The client holds no state besides its immutable configuration. Every call
    authenticates with the static API key and opens a fresh connection, so a
    single instance can be shared between threads.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = Transport(config, transport=transport)

    @classmethod
    def from_credentials(
        cls,
        api_key: str,
        passcode: str,
        *,
        transport: httpx.BaseTransport | None = None,
        **options: Any,
    ) -> "OnboardbaseClient":
        """Build a client from the two credentials supplied by the host.

        ``options`` are forwarded to :class:`ClientConfig` (``base_url``,
        ``timeout``, ``user_agent``, ``verify_tls``).
        """

        config = ClientConfig(api_key=api_key, passcode=passcode, **options)
        return cls(config, transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> httpx.URL:
        return httpx.URL(self._config.base_url)

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "OnboardbaseClient":
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.close()

    def authenticate(self) -> None:
        """Check the credentials against the team membership endpoint."""

        self._transport.perform_request(TEAM_MEMBERS_PATH, "GET")

    def get_secret(self, identity: SecretIdentity) -> SecretResponse:
        if not identity.name:
            raise APIError("a secret name is required", kind=ErrorKind.CONFIG_INVALID)

        secrets, _ = self._fetch(identity)
        value = secrets.get(identity.name, "")
        if not value:
            raise APIError(
                f"secret {identity.name} for project '{identity.project}' "
                f"and environment '{identity.environment}' not found",
                kind=ErrorKind.NOT_FOUND,
            )
        return SecretResponse(name=identity.name, value=value)

    def get_secrets(self, identity: SecretIdentity) -> SecretsResponse:
        secrets, body = self._fetch(identity)
        return SecretsResponse(secrets=secrets, body=body)

    def _fetch(self, identity: SecretIdentity) -> tuple[dict[str, str], bytes]:
        response = self._transport.perform_request(
            SECRETS_PATH, "GET", params=identity.query_params()
        )
        body = response.content
        try:
            envelope = SecretsEnvelope.model_validate_json(body)
        except ValidationError as exc:
            raise APIError(
                "unable to unmarshal secret payload",
                kind=ErrorKind.DECODE,
                cause=exc,
                data=body.decode("utf-8", errors="replace"),
            ) from exc
        secrets = self.decrypt_secrets(envelope.data.secrets)
        logger.debug(
            "Decrypted %d secrets for project=%r environment=%r",
            len(secrets),
            identity.project,
            identity.environment,
        )
        return secrets, body

    def decrypt_secrets(self, envelopes: Iterable[str]) -> dict[str, str]:
        """Decrypt ``envelopes`` into a name to value mapping.

        The first envelope that fails to decrypt or parse aborts the batch.
        """

        secrets: dict[str, str] = {}
        for envelope in envelopes:
            try:
                plaintext = crypto.decrypt(envelope, self._config.passcode)
            except crypto.DecryptionError as exc:
                raise APIError(
                    "unable to decrypt secret payload",
                    kind=ErrorKind.DECRYPT_FAILED,
                    cause=exc,
                    data=envelope,
                ) from exc
            try:
                record = DecryptedSecretRecord.model_validate_json(plaintext)
            except ValidationError as exc:
                raise APIError(
                    "unable to unmarshal secret payload",
                    kind=ErrorKind.DECODE,
                    cause=exc,
                    data=plaintext,
                ) from exc
            secrets[record.key] = record.value
        return secrets


__all__ = ["OnboardbaseClient", "SECRETS_PATH", "TEAM_MEMBERS_PATH"]
