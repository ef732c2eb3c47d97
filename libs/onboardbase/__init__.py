"""Client for reading decrypted secrets from Onboardbase."""

from .client import OnboardbaseClient
from .config import ClientConfig, OnboardbaseSettings, get_settings
from .errors import APIError, ErrorKind
from .schemas import Headers, QueryParams, SecretIdentity, SecretResponse, SecretsResponse

__all__ = [
    "APIError",
    "ClientConfig",
    "ErrorKind",
    "Headers",
    "OnboardbaseClient",
    "OnboardbaseSettings",
    "QueryParams",
    "SecretIdentity",
    "SecretResponse",
    "SecretsResponse",
    "get_settings",
]
