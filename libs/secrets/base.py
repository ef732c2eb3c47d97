"""Common types for secret store providers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Protocol


class SecretStoreCapabilities(str, Enum):
    """Operations a provider supports against its backend."""

    READ_ONLY = "ReadOnly"
    WRITE_ONLY = "WriteOnly"
    READ_WRITE = "ReadWrite"


class ProviderError(RuntimeError):
    """Raised when a provider cannot build a client or validate a store."""


@dataclass(frozen=True, slots=True)
class SecretKeySelector:
    """Points at one key of a secret held by the host credential store."""

    name: str
    key: str
    namespace: str | None = None


CredentialResolver = Callable[[SecretKeySelector], str]


class SecretsClient(Protocol):
    """Interface implemented by every provider client."""

    def get_secret(self, key: str) -> str:
        """Return the value stored under ``key``."""

    def get_secret_map(self, key: str) -> Mapping[str, str]:
        """Return the JSON object stored under ``key`` as a mapping."""

    def get_all_secrets(self) -> Mapping[str, str]:
        """Return every secret visible to the client."""

    def validate(self) -> None:
        """Raise when the client cannot reach its backend."""

    def close(self) -> None:
        ...


class SecretProvider(Protocol):
    """Factory for :class:`SecretsClient` instances."""

    name: str

    def capabilities(self) -> SecretStoreCapabilities:
        ...


__all__ = [
    "CredentialResolver",
    "ProviderError",
    "SecretKeySelector",
    "SecretProvider",
    "SecretStoreCapabilities",
    "SecretsClient",
]
