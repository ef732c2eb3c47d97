"""Shared fixtures: a fake Onboardbase backend and envelope encryption."""
from __future__ import annotations

import base64
import hashlib
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from libs.onboardbase import ClientConfig, OnboardbaseClient  # noqa: E402

BASE_URL = "https://onboardbase.test/api/v1"
API_KEY = "test-api-key"
PASSCODE = "p1"


def encrypt_envelope(plaintext: str, passphrase: str, *, salt: bytes | None = None) -> str:
    """Encrypt ``plaintext`` the way ``CryptoJS.AES.encrypt(text, passphrase)`` does."""

    salt = salt if salt is not None else os.urandom(8)
    material = b""
    previous = b""
    while len(material) < 48:
        previous = hashlib.md5(previous + passphrase.encode() + salt).digest()
        material += previous
    key, iv = material[:32], material[32:48]

    padder = padding.PKCS7(128).padder()
    padded = padder.update(plaintext.encode()) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(b"Salted__" + salt + ciphertext).decode("ascii")


def secret_envelope(key: str, value: str, passphrase: str = PASSCODE) -> str:
    return encrypt_envelope(json.dumps({"key": key, "value": value}), passphrase)


def secrets_body(envelopes: list[str], **data: Any) -> dict[str, Any]:
    payload = {
        "project": {"title": "backend", "id": "prj-1"},
        "environment": {"title": "development", "id": "env-1"},
        "team": {"title": "acme", "id": "team-1"},
        "secrets": envelopes,
    }
    payload.update(data)
    return {"data": payload, "message": "Secrets fetched", "status": "success"}


class FakeOnboardbase:
    """Records requests and answers them with a configurable response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responder: Callable[[httpx.Request], httpx.Response] = lambda _: httpx.Response(
            200, json=secrets_body([])
        )

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def respond_with(self, status_code: int = 200, **kwargs: Any) -> None:
        self._responder = lambda _: httpx.Response(status_code, **kwargs)

    def respond_with_secrets(self, secrets: dict[str, str], passphrase: str = PASSCODE) -> None:
        envelopes = [secret_envelope(name, value, passphrase) for name, value in secrets.items()]
        self.respond_with(200, json=secrets_body(envelopes))

    def raise_error(self, exception: Exception) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise exception

        self._responder = responder

    def set_handler(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._responder = handler

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def backend() -> FakeOnboardbase:
    return FakeOnboardbase()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_key=API_KEY, passcode=PASSCODE, base_url=BASE_URL)


@pytest.fixture
def client(config: ClientConfig, backend: FakeOnboardbase):
    with OnboardbaseClient(config, transport=backend.transport()) as instance:
        yield instance
