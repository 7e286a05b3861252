"""Unit tests for FlagDashAPIClient."""

# type: ignore - test uses httpx.MockTransport

import json

import httpx
import pytest

from flagdash.cli.api_client import (
    FlagDashAPIClient,
    ForbiddenError,
    HTTPStatusAPIError,
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitedError,
    UnauthorizedError,
    ValidationAPIError,
)
from flagdash.cli.models import CreateFlagRequest, CreateScheduleRequest, UpdateWebhookRequest, VariationInput

pytestmark = pytest.mark.unit

FLAG_JSON = {
    "id": "flag-1",
    "key": "new-checkout",
    "name": "New checkout",
    "flag_type": "boolean",
    "created_at": "2026-03-01T12:00:00Z",
    "updated_at": "2026-03-01T12:00:00Z",
    "default_value": False,
    "environments": [
        {"id": "fe-1", "environment_id": "env-1", "enabled": True, "rollout_percentage": 50},
    ],
}

WEBHOOK_JSON = {
    "id": "wh 1",
    "url": "https://example.com/hook",
    "environment_id": "env-1",
    "event_types": ["flag.updated"],
    "is_active": True,
    "created_at": "2026-03-01T12:00:00Z",
    "updated_at": "2026-03-01T12:00:00Z",
}


async def _client(handler, token="session_abc"):
    client = FlagDashAPIClient("https://flagdash.test/", token)
    await client.connect(transport=httpx.MockTransport(handler))
    return client


@pytest.mark.asyncio
async def test_connect_and_close_idempotent():
    """close() can be called repeatedly."""
    client = FlagDashAPIClient("https://flagdash.test")
    assert client.is_connected is False
    await client.connect()
    assert client.is_connected is True
    await client.close()
    await client.close()
    assert client.is_connected is False


@pytest.mark.asyncio
async def test_list_flags_sends_bearer_and_parses_envelope():
    """Authenticated calls carry the bearer token and unwrap the envelope."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"flags": [FLAG_JSON]})

    client = await _client(handler)
    flags = await client.list_flags("proj-1")
    await client.close()

    assert seen["auth"] == "Bearer session_abc"
    assert seen["url"] == "https://flagdash.test/api/v1/manage/flags?project_id=proj-1"
    assert flags[0].key == "new-checkout"
    assert flags[0].env_data[0].rollout_percentage == 50


@pytest.mark.asyncio
async def test_path_segments_are_escaped():
    """Resource keys are percent-encoded in the path."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.raw_path.decode()
        return httpx.Response(200, json={"endpoint": WEBHOOK_JSON})

    client = await _client(handler)
    webhook = await client.get_webhook("wh 1")
    await client.close()

    assert seen["path"] == "/api/v1/manage/webhooks/wh%201"
    assert webhook.id == "wh 1"


@pytest.mark.asyncio
async def test_create_flag_omits_unset_fields():
    """None fields are left out of request bodies."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"flag": FLAG_JSON})

    client = await _client(handler)
    await client.create_flag(CreateFlagRequest(project_id="proj-1", key="k", name="K", flag_type="boolean"))
    await client.close()

    assert seen["body"] == {"project_id": "proj-1", "key": "k", "name": "K", "flag_type": "boolean"}


@pytest.mark.asyncio
async def test_mutation_endpoints_send_expected_requests():
    """Rollout, variations, schedules and webhook updates hit the right routes."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        requests.append((request.method, request.url.path, dict(request.url.params), body))
        path = request.url.path
        if path.endswith("/rollout"):
            return httpx.Response(
                200,
                json={
                    "flag_environment": {
                        "id": "fe-1",
                        "enabled": True,
                        "environment_id": "env-1",
                        "feature_flag_id": "flag-1",
                        "rollout_percentage": 25,
                    }
                },
            )
        if path.endswith("/variations"):
            return httpx.Response(
                200, json={"variations": [{"id": "v1", "key": "a", "name": "A", "value": 1, "weight": 100}]}
            )
        if path.endswith("/schedules"):
            return httpx.Response(
                201,
                json={
                    "schedule": {
                        "id": "sch-1",
                        "action": "enable",
                        "scheduled_at": "2026-03-02T12:00:00Z",
                        "status": "pending",
                        "created_at": "2026-03-01T12:00:00Z",
                    }
                },
            )
        return httpx.Response(200, json={"endpoint": WEBHOOK_JSON})

    client = await _client(handler)
    result = await client.set_rollout("k", "proj-1", "env-1", 25)
    variations = await client.set_variations("k", "proj-1", [VariationInput(key="a", name="A", value=1, weight=100)])
    schedule = await client.create_schedule(
        "k", "proj-1", "env-1", CreateScheduleRequest(action="enable", scheduled_at="2026-03-02T12:00:00Z")
    )
    await client.update_webhook("wh-1", UpdateWebhookRequest(is_active=False))
    await client.close()

    assert result.rollout_percentage == 25
    assert variations[0].weight == 100
    assert schedule.status == "pending"
    assert requests[0] == (
        "PUT",
        "/api/v1/manage/flags/k/rollout",
        {"project_id": "proj-1", "environment_id": "env-1"},
        {"rollout_percentage": 25},
    )
    assert requests[1][3] == {"variations": [{"key": "a", "name": "A", "value": 1, "weight": 100}]}
    assert requests[2][3] == {"action": "enable", "scheduled_at": "2026-03-02T12:00:00Z"}
    assert requests[3][:2] == ("PUT", "/api/v1/manage/webhooks/wh-1")
    assert requests[3][3] == {"is_active": False}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "error_type"),
    [
        (401, UnauthorizedError),
        (403, ForbiddenError),
        (404, NotFoundError),
        (422, ValidationAPIError),
        (429, RateLimitedError),
        (500, HTTPStatusAPIError),
    ],
)
async def test_status_codes_map_to_error_taxonomy(status, error_type):
    """Each non-2xx class raises its own error type."""
    client = await _client(lambda request: httpx.Response(status, json={"message": "nope"}))
    with pytest.raises(error_type) as excinfo:
        await client.list_projects()
    await client.close()
    assert excinfo.value.status_code == status
    assert excinfo.value.detail == "nope"


@pytest.mark.asyncio
async def test_malformed_body_raises_parse_error():
    """Bodies that do not match the schema raise ParseError."""
    client = await _client(lambda request: httpx.Response(200, json={"unexpected": []}))
    with pytest.raises(ParseError):
        await client.list_projects()
    await client.close()


@pytest.mark.asyncio
async def test_transport_failure_raises_network_error():
    """Connection failures surface as NetworkError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = await _client(handler)
    with pytest.raises(NetworkError):
        await client.list_projects()
    await client.close()


@pytest.mark.asyncio
async def test_device_auth_is_unauthenticated():
    """The device-auth request never sends a bearer token."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "device_code": "dc",
                "user_code": "ABCD-EFGH",
                "verification_url": "https://flagdash.test/device",
                "expires_in": 900,
                "interval": 5,
            },
        )

    client = await _client(handler, token="session_should_not_leak")
    auth = await client.request_device_auth("laptop")
    await client.close()

    assert seen["auth"] is None
    assert seen["body"] == {"device_name": "laptop"}
    assert auth.user_code == "ABCD-EFGH"


@pytest.mark.asyncio
async def test_poll_device_token_reads_protocol_errors_from_4xx():
    """Pending and denial codes come back as results, not exceptions."""
    client = await _client(lambda request: httpx.Response(400, json={"error": "authorization_pending"}))
    result = await client.poll_device_token("dc")
    await client.close()
    assert result.error == "authorization_pending"
    assert result.session_token is None


@pytest.mark.asyncio
async def test_poll_device_token_returns_token():
    """A granted token carries the user identity."""
    body = {
        "session_token": "session_new",
        "user": {"id": "u1", "name": "Ada", "email": "ada@example.com", "role": "admin"},
        "expires_at": "2026-04-01T00:00:00Z",
    }
    client = await _client(lambda request: httpx.Response(200, json=body))
    result = await client.poll_device_token("dc")
    await client.close()
    assert result.session_token == "session_new"
    assert result.user.role == "admin"


@pytest.mark.asyncio
async def test_poll_device_token_unclassifiable_error_raises():
    """A 5xx during polling is an error, not a protocol result."""
    client = await _client(lambda request: httpx.Response(502, text="bad gateway"))
    with pytest.raises(HTTPStatusAPIError):
        await client.poll_device_token("dc")
    await client.close()
