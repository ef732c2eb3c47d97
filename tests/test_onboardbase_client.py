from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from conftest import (
    API_KEY,
    BASE_URL,
    PASSCODE,
    FakeOnboardbase,
    encrypt_envelope,
    secret_envelope,
    secrets_body,
)
from libs.onboardbase import (
    APIError,
    ErrorKind,
    OnboardbaseClient,
    SecretIdentity,
    SecretResponse,
)


def test_get_secret_returns_the_decrypted_value(
    client: OnboardbaseClient, backend: FakeOnboardbase
) -> None:
    backend.respond_with(200, json=secrets_body([secret_envelope("DB_URL", "postgres://x")]))

    secret = client.get_secret(SecretIdentity(name="DB_URL"))

    assert secret == SecretResponse(name="DB_URL", value="postgres://x")


def test_get_secrets_returns_every_decrypted_entry(
    client: OnboardbaseClient, backend: FakeOnboardbase
) -> None:
    expected = {f"KEY_{index}": f"value-{index}" for index in range(5)}
    backend.respond_with_secrets(expected)

    response = client.get_secrets(SecretIdentity(project="backend", environment="development"))

    assert response.secrets == expected
    assert json.loads(response.body)["data"]["project"]["title"] == "backend"


def test_get_secrets_accepts_an_empty_scope(client: OnboardbaseClient, backend: FakeOnboardbase) -> None:
    backend.respond_with(200, json={"data": {"secrets": None}, "message": "", "status": "success"})

    assert client.get_secrets(SecretIdentity(project="empty")).secrets == {}


def test_requests_target_the_secrets_resource_with_scope(
    client: OnboardbaseClient, backend: FakeOnboardbase
) -> None:
    backend.respond_with_secrets({"A": "1"})

    client.get_secrets(SecretIdentity(project="backend", environment="staging"))

    request = backend.last_request
    assert request.method == "GET"
    assert request.url.path == "/api/v1/secrets"
    assert dict(request.url.params) == {"project": "backend", "environment": "staging"}
    assert request.headers["api_key"] == API_KEY


@pytest.mark.parametrize(
    "identity, expected",
    [
        (SecretIdentity(project="", environment=""), {}),
        (SecretIdentity(project="backend", environment=""), {"project": "backend"}),
        (SecretIdentity(project="", environment="prod"), {"environment": "prod"}),
    ],
)
def test_empty_scope_values_are_omitted_from_the_query(
    client: OnboardbaseClient,
    backend: FakeOnboardbase,
    identity: SecretIdentity,
    expected: dict[str, str],
) -> None:
    backend.respond_with_secrets({"A": "1"})

    client.get_secrets(identity)

    assert dict(backend.last_request.url.params) == expected
    if not expected:
        assert backend.last_request.url.query == b""


def test_missing_secret_is_not_found(client: OnboardbaseClient, backend: FakeOnboardbase) -> None:
    backend.respond_with_secrets({"OTHER": "value"})

    with pytest.raises(APIError) as excinfo:
        client.get_secret(SecretIdentity(project="backend", environment="prod", name="DB_URL"))

    error = excinfo.value
    assert error.kind is ErrorKind.NOT_FOUND
    assert error.message == "secret DB_URL for project 'backend' and environment 'prod' not found"


def test_empty_secret_value_is_not_found(client: OnboardbaseClient, backend: FakeOnboardbase) -> None:
    backend.respond_with_secrets({"DB_URL": ""})

    with pytest.raises(APIError) as excinfo:
        client.get_secret(SecretIdentity(name="DB_URL"))

    assert excinfo.value.kind is ErrorKind.NOT_FOUND


def test_get_secret_requires_a_name(client: OnboardbaseClient, backend: FakeOnboardbase) -> None:
    with pytest.raises(APIError) as excinfo:
        client.get_secret(SecretIdentity(project="backend"))

    assert excinfo.value.kind is ErrorKind.CONFIG_INVALID
    assert backend.requests == []


def test_unparseable_secrets_body_is_a_decode_error_with_raw_body(
    client: OnboardbaseClient, backend: FakeOnboardbase
) -> None:
    backend.respond_with(200, content=b'{"data": {"secrets": "oops"}}')

    with pytest.raises(APIError) as excinfo:
        client.get_secrets(SecretIdentity())

    assert excinfo.value.kind is ErrorKind.DECODE
    assert excinfo.value.data == '{"data": {"secrets": "oops"}}'


def test_undecryptable_envelope_fails_the_whole_batch(
    client: OnboardbaseClient, backend: FakeOnboardbase
) -> None:
    bad = secret_envelope("B", "2", passphrase="another passcode entirely")
    backend.respond_with(200, json=secrets_body([secret_envelope("A", "1"), "garbage==", bad]))

    with pytest.raises(APIError) as excinfo:
        client.get_secrets(SecretIdentity())

    error = excinfo.value
    assert error.kind is ErrorKind.DECRYPT_FAILED
    assert error.data == "garbage=="


def test_malformed_plaintext_is_a_decode_error(client: OnboardbaseClient, backend: FakeOnboardbase) -> None:
    backend.respond_with(200, json=secrets_body([encrypt_envelope("key=value", PASSCODE)]))

    with pytest.raises(APIError) as excinfo:
        client.get_secret(SecretIdentity(name="key"))

    assert excinfo.value.kind is ErrorKind.DECODE
    assert excinfo.value.data == "key=value"


def test_api_rejection_propagates_from_get_secret(
    client: OnboardbaseClient, backend: FakeOnboardbase
) -> None:
    backend.respond_with(404, json={"messages": ["not found"], "success": False})

    with pytest.raises(APIError) as excinfo:
        client.get_secret(SecretIdentity(name="DB_URL"))

    assert excinfo.value.kind is ErrorKind.API_REJECTED
    assert excinfo.value.message == "not found"


def test_server_error_with_plain_body_reports_size_only(
    client: OnboardbaseClient, backend: FakeOnboardbase
) -> None:
    backend.respond_with(500, text="upstream exploded")

    with pytest.raises(APIError) as excinfo:
        client.get_secrets(SecretIdentity())

    error = excinfo.value
    assert error.kind is ErrorKind.API_REJECTED
    assert error.message == "unable to load response: 500 status code; 17 bytes"
    assert "exploded" not in str(error)


def test_authenticate_probes_team_members(client: OnboardbaseClient, backend: FakeOnboardbase) -> None:
    backend.respond_with(200, json={"data": [{"name": "someone"}]})

    assert client.authenticate() is None
    assert backend.last_request.url.path == "/api/v1/team/members"


def test_authenticate_surfaces_rejected_credentials(
    client: OnboardbaseClient, backend: FakeOnboardbase
) -> None:
    backend.respond_with(401, json={"messages": ["invalid api key"], "success": False})

    with pytest.raises(APIError) as excinfo:
        client.authenticate()

    assert excinfo.value.message == "invalid api key"


def test_from_credentials_rejects_empty_credentials_before_any_request(backend: FakeOnboardbase) -> None:
    for api_key, passcode in (("", PASSCODE), (API_KEY, "")):
        with pytest.raises(APIError) as excinfo:
            OnboardbaseClient.from_credentials(api_key, passcode, transport=backend.transport())
        assert excinfo.value.kind is ErrorKind.CONFIG_INVALID
    assert backend.requests == []


def test_base_url_returns_a_copy(client: OnboardbaseClient) -> None:
    url = client.base_url

    assert str(url) == BASE_URL
    assert url is not client.base_url
    assert client.config.base_url == BASE_URL


def test_client_can_be_shared_between_threads(client: OnboardbaseClient, backend: FakeOnboardbase) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.params["project"]
        return httpx.Response(200, json=secrets_body([secret_envelope(name, name.upper())]))

    backend.set_handler(handler)
    projects = [f"project-{index}" for index in range(8)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(
            pool.map(
                lambda project: client.get_secret(SecretIdentity(project=project, name=project)),
                projects,
            )
        )

    assert [result.value for result in results] == [project.upper() for project in projects]
