"""Request value objects and response schemas for the Onboardbase API."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True, slots=True)
class _Pairs:
    """Ordered, immutable collection of unique string key/value pairs."""

    items: tuple[tuple[str, str], ...] = ()

    @classmethod
    def _normalize_key(cls, key: str) -> str:
        return key

    @classmethod
    def from_mapping(cls, values: Mapping[str, str] | None = None, **extra: str):
        merged: dict[str, str] = {}
        for key, value in {**dict(values or {}), **extra}.items():
            merged[cls._normalize_key(key)] = str(value)
        return cls(tuple(merged.items()))

    def get(self, key: str, default: str | None = None) -> str | None:
        wanted = self._normalize_key(key)
        for name, value in self.items:
            if name == wanted:
                return value
        return default

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def as_dict(self) -> dict[str, str]:
        return dict(self.items)


class Headers(_Pairs):
    """HTTP headers, keys compared case-insensitively."""

    __slots__ = ()

    @classmethod
    def _normalize_key(cls, key: str) -> str:
        return key.lower()


class QueryParams(_Pairs):
    """URL query parameters."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class SecretIdentity:
    """Scope of a secret request. ``name`` unset means every secret in scope."""

    project: str = ""
    environment: str = ""
    name: str | None = None

    def query_params(self) -> QueryParams:
        params: dict[str, str] = {}
        if self.project:
            params["project"] = self.project
        if self.environment:
            params["environment"] = self.environment
        return QueryParams.from_mapping(params)


class ResourceRef(BaseModel):
    """Project, environment or team reference embedded in responses."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    id: str = ""


class SecretsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project: ResourceRef = Field(default_factory=ResourceRef)
    environment: ResourceRef = Field(default_factory=ResourceRef)
    team: ResourceRef = Field(default_factory=ResourceRef)
    secrets: list[str] = []

    @field_validator("project", "environment", "team", "secrets", mode="before")
    @classmethod
    def _null_as_default(cls, value, info):
        if value is None:
            return [] if info.field_name == "secrets" else {}
        return value


class SecretsEnvelope(BaseModel):
    """Body returned by ``GET /secrets``."""

    model_config = ConfigDict(extra="ignore")

    data: SecretsPayload = Field(default_factory=SecretsPayload)
    message: str = ""
    status: str = ""

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, value):
        return {} if value is None else value


class ErrorEnvelope(BaseModel):
    """Body returned by the API alongside a failing status code."""

    model_config = ConfigDict(extra="ignore")

    messages: list[str] = []
    success: bool = False


class DecryptedSecretRecord(BaseModel):
    """Plaintext content of one envelope."""

    model_config = ConfigDict(extra="ignore")

    key: str = ""
    value: str = ""


@dataclass(frozen=True, slots=True)
class SecretResponse:
    name: str
    value: str


@dataclass(frozen=True, slots=True)
class SecretsResponse:
    secrets: dict[str, str]
    body: bytes


__all__ = [
    "DecryptedSecretRecord",
    "ErrorEnvelope",
    "Headers",
    "QueryParams",
    "ResourceRef",
    "SecretIdentity",
    "SecretResponse",
    "SecretsEnvelope",
    "SecretsPayload",
    "SecretsResponse",
]
