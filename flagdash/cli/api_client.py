"""HTTP client for the FlagDash management API."""

import json
import logging
from dataclasses import asdict
from http import HTTPMethod
from typing import TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from flagdash.cli.models import (
    AiConfigEnvelope,
    AiConfigsEnvelope,
    ConfigEnvelope,
    ConfigEnvironmentEnvelope,
    ConfigEnvironmentResult,
    ConfigsEnvelope,
    CreateAiConfigRequest,
    CreateConfigRequest,
    CreateFlagRequest,
    CreateScheduleRequest,
    CreateWebhookRequest,
    DeliveriesEnvelope,
    DeviceAuthResponse,
    DeviceTokenResponse,
    Environment,
    EnvironmentsEnvelope,
    FlagEnvelope,
    FlagEnvironmentEnvelope,
    FlagEnvironmentResult,
    FlagsEnvelope,
    JsonValue,
    ManagedAiConfig,
    ManagedConfig,
    ManagedFlag,
    Project,
    ProjectsEnvelope,
    Schedule,
    ScheduleEnvelope,
    SchedulesEnvelope,
    UpdateAiConfigRequest,
    UpdateConfigRequest,
    UpdateFlagRequest,
    Variation,
    VariationInput,
    VariationsEnvelope,
    WebhookDelivery,
    WebhookEndpoint,
    WebhookEnvelope,
    WebhooksEnvelope,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
DEFAULT_TIMEOUT_S = 30.0
PARSE_PREVIEW_CHARS = 200

__all__ = [
    "APIError",
    "FlagDashAPIClient",
    "ForbiddenError",
    "HTTPStatusAPIError",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "RateLimitedError",
    "UnauthorizedError",
    "ValidationAPIError",
]

T = TypeVar("T")


class APIError(Exception):
    """API request failed with structured error info."""

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail or message  # Fallback to full message if no detail


class NetworkError(APIError):
    """Transport failure: connection refused, DNS, TLS, timeout."""


class ParseError(APIError):
    """Response body did not match the expected schema."""


class UnauthorizedError(APIError):
    """401 from the API."""


class ForbiddenError(APIError):
    """403 from the API."""


class NotFoundError(APIError):
    """404 from the API."""


class ValidationAPIError(APIError):
    """422 from the API."""


class RateLimitedError(APIError):
    """429 from the API."""


class HTTPStatusAPIError(APIError):
    """Any other non-2xx status."""


def _error_detail(resp: httpx.Response) -> str:
    """Extract a human-friendly message from an error body."""
    try:
        body = resp.json()
    except (json.JSONDecodeError, ValueError):
        return resp.text.strip() or "Unknown error"
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return resp.text.strip() or "Unknown error"


def error_for_response(resp: httpx.Response) -> APIError:
    """Map a non-2xx response onto the error taxonomy."""
    status = resp.status_code
    detail = _error_detail(resp)
    if status == 401:
        return UnauthorizedError("Unauthorized: invalid or missing session", status_code=status, detail=detail)
    if status == 403:
        return ForbiddenError("Forbidden: insufficient permissions", status_code=status, detail=detail)
    if status == 404:
        return NotFoundError(f"Not found: {detail}", status_code=status, detail=detail)
    if status == 422:
        return ValidationAPIError(f"Validation error: {detail}", status_code=status, detail=detail)
    if status == 429:
        return RateLimitedError("Rate limited: try again later", status_code=status, detail=detail)
    return HTTPStatusAPIError(f"HTTP {status}: {detail}", status_code=status, detail=detail)


def _payload(request: object) -> dict[str, JsonValue]:
    """Serialize a request dataclass, dropping unset (None) fields."""
    return {k: v for k, v in asdict(request).items() if v is not None}  # type: ignore[call-overload]


def _seg(value: str) -> str:
    return quote(value, safe="")


class FlagDashAPIClient:
    """Async HTTP client for the FlagDash management API.

    Holds only a base address and a bearer credential. One instance is shared
    by all concurrently running background tasks.
    """

    def __init__(self, base_url: str, session_token: str | None = None, timeout: float = DEFAULT_TIMEOUT_S):
        """Initialize client.

        Args:
            base_url: Server address, e.g. https://flagdash.io
            session_token: Bearer credential (None for device-auth only use)
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.session_token = session_token or ""
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._transport: httpx.AsyncBaseTransport | None = None

    async def connect(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Create the underlying httpx client.

        Args:
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        if transport is not None:
            self._transport = transport
        self._client = httpx.AsyncClient(
            transport=self._transport,
            base_url=f"{self.base_url}{API_PREFIX}",
            timeout=self.timeout,
        )

    @property
    def is_connected(self) -> bool:
        """Check if client is connected.

        Returns:
            True if client is connected
        """
        return self._client is not None

    async def close(self) -> None:
        """Close connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json_body: object | None = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        """Send a request without status handling.

        Raises:
            APIError: On unsupported method or transport failure
        """
        if not self._client:
            await self.connect()
        assert self._client is not None

        try:
            method_enum = HTTPMethod(method)
        except ValueError as e:
            raise APIError(f"Unsupported HTTP method: {method}") from e

        headers: dict[str, str] = {}
        if authenticated and self.session_token:
            headers["Authorization"] = f"Bearer {self.session_token}"

        try:
            return await self._client.request(
                method_enum.value,
                url,
                params=params,
                json=json_body,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise NetworkError(f"Network error: request timed out ({e})") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}") from e

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json_body: object | None = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        """Make HTTP request with error handling.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            url: URL path relative to /api/v1
            params: Query parameters
            json_body: JSON request body
            authenticated: Send the bearer credential

        Returns:
            Response object (2xx only)

        Raises:
            APIError: If request fails (see error taxonomy subclasses)
        """
        resp = await self._send(method, url, params=params, json_body=json_body, authenticated=authenticated)
        if not resp.is_success:
            error = error_for_response(resp)
            logger.debug("%s %s failed: %s", method, url, error)
            raise error
        return resp

    @staticmethod
    def _parse(resp: httpx.Response, model: type[T]) -> T:
        """Validate a response body into a typed model.

        Raises:
            ParseError: If the body does not match
        """
        try:
            return TypeAdapter(model).validate_json(resp.text)
        except ValidationError as e:
            preview = resp.text[:PARSE_PREVIEW_CHARS]
            if len(resp.text) > PARSE_PREVIEW_CHARS:
                preview += "..."
            raise ParseError(f"Failed to parse response: {e}; body: {preview}") from e

    # --- Device authorization (unauthenticated) ---

    async def request_device_auth(self, device_name: str | None = None) -> DeviceAuthResponse:
        """Start the device-authorization flow.

        Args:
            device_name: Label shown to the user when approving the login

        Returns:
            Device and user codes plus polling parameters

        Raises:
            APIError: If request fails
        """
        body = {"device_name": device_name} if device_name else {}
        resp = await self._request("POST", "/auth/device", json_body=body, authenticated=False)
        return self._parse(resp, DeviceAuthResponse)

    async def poll_device_token(self, device_code: str) -> DeviceTokenResponse:
        """Poll once for the session token.

        Protocol-level outcomes (authorization_pending, slow_down, expired_token,
        access_denied) are returned in `error`, whether the server reports them
        with a 2xx or a 4xx status.

        Raises:
            APIError: On transport failure or an unclassifiable error response
        """
        resp = await self._send(
            "POST", "/auth/device/token", json_body={"device_code": device_code}, authenticated=False
        )
        if resp.is_success:
            return self._parse(resp, DeviceTokenResponse)
        if 400 <= resp.status_code < 500:
            try:
                body = resp.json()
            except (json.JSONDecodeError, ValueError):
                body = None
            if isinstance(body, dict) and isinstance(body.get("error"), str):
                return DeviceTokenResponse(error=body["error"])
        raise error_for_response(resp)

    # --- Flags ---

    async def list_flags(self, project_id: str) -> list[ManagedFlag]:
        """List flags of a project.

        Raises:
            APIError: If request fails
        """
        resp = await self._request("GET", "/manage/flags", params={"project_id": project_id})
        return self._parse(resp, FlagsEnvelope).flags

    async def get_flag(self, key: str, project_id: str) -> ManagedFlag:
        resp = await self._request("GET", f"/manage/flags/{_seg(key)}", params={"project_id": project_id})
        return self._parse(resp, FlagEnvelope).flag

    async def create_flag(self, req: CreateFlagRequest) -> ManagedFlag:
        resp = await self._request("POST", "/manage/flags", json_body=_payload(req))
        return self._parse(resp, FlagEnvelope).flag

    async def update_flag(self, key: str, project_id: str, req: UpdateFlagRequest) -> ManagedFlag:
        resp = await self._request(
            "PUT", f"/manage/flags/{_seg(key)}", params={"project_id": project_id}, json_body=_payload(req)
        )
        return self._parse(resp, FlagEnvelope).flag

    async def delete_flag(self, key: str, project_id: str) -> None:
        await self._request("DELETE", f"/manage/flags/{_seg(key)}", params={"project_id": project_id})

    async def toggle_flag(self, key: str, project_id: str, environment_id: str) -> FlagEnvironmentResult:
        """Flip a flag's enabled state in one environment.

        Raises:
            APIError: If request fails
        """
        resp = await self._request(
            "POST",
            f"/manage/flags/{_seg(key)}/toggle",
            params={"project_id": project_id, "environment_id": environment_id},
        )
        return self._parse(resp, FlagEnvironmentEnvelope).flag_environment

    async def set_rollout(
        self, key: str, project_id: str, environment_id: str, percentage: int
    ) -> FlagEnvironmentResult:
        resp = await self._request(
            "PUT",
            f"/manage/flags/{_seg(key)}/rollout",
            params={"project_id": project_id, "environment_id": environment_id},
            json_body={"rollout_percentage": percentage},
        )
        return self._parse(resp, FlagEnvironmentEnvelope).flag_environment

    async def update_rules(
        self, key: str, project_id: str, environment_id: str, rules: JsonValue
    ) -> FlagEnvironmentResult:
        resp = await self._request(
            "PUT",
            f"/manage/flags/{_seg(key)}/rules",
            params={"project_id": project_id, "environment_id": environment_id},
            json_body={"rules": rules},
        )
        return self._parse(resp, FlagEnvironmentEnvelope).flag_environment

    async def set_variations(self, key: str, project_id: str, variations: list[VariationInput]) -> list[Variation]:
        resp = await self._request(
            "PUT",
            f"/manage/flags/{_seg(key)}/variations",
            params={"project_id": project_id},
            json_body={"variations": [asdict(v) for v in variations]},
        )
        return self._parse(resp, VariationsEnvelope).variations

    async def delete_variations(self, key: str, project_id: str) -> None:
        await self._request("DELETE", f"/manage/flags/{_seg(key)}/variations", params={"project_id": project_id})

    async def list_schedules(self, key: str, project_id: str, environment_id: str) -> list[Schedule]:
        resp = await self._request(
            "GET",
            f"/manage/flags/{_seg(key)}/schedules",
            params={"project_id": project_id, "environment_id": environment_id},
        )
        return self._parse(resp, SchedulesEnvelope).schedules

    async def create_schedule(
        self, key: str, project_id: str, environment_id: str, req: CreateScheduleRequest
    ) -> Schedule:
        resp = await self._request(
            "POST",
            f"/manage/flags/{_seg(key)}/schedules",
            params={"project_id": project_id, "environment_id": environment_id},
            json_body=_payload(req),
        )
        return self._parse(resp, ScheduleEnvelope).schedule

    async def cancel_schedule(self, key: str, project_id: str, schedule_id: str) -> None:
        await self._request(
            "DELETE",
            f"/manage/flags/{_seg(key)}/schedules/{_seg(schedule_id)}",
            params={"project_id": project_id},
        )

    # --- Remote configs ---

    async def list_configs(self, project_id: str) -> list[ManagedConfig]:
        resp = await self._request("GET", "/manage/configs", params={"project_id": project_id})
        return self._parse(resp, ConfigsEnvelope).configs

    async def get_config(self, key: str, project_id: str) -> ManagedConfig:
        resp = await self._request("GET", f"/manage/configs/{_seg(key)}", params={"project_id": project_id})
        return self._parse(resp, ConfigEnvelope).config

    async def create_config(self, req: CreateConfigRequest) -> ManagedConfig:
        resp = await self._request("POST", "/manage/configs", json_body=_payload(req))
        return self._parse(resp, ConfigEnvelope).config

    async def update_config(self, key: str, project_id: str, req: UpdateConfigRequest) -> ManagedConfig:
        resp = await self._request(
            "PUT", f"/manage/configs/{_seg(key)}", params={"project_id": project_id}, json_body=_payload(req)
        )
        return self._parse(resp, ConfigEnvelope).config

    async def delete_config(self, key: str, project_id: str) -> None:
        await self._request("DELETE", f"/manage/configs/{_seg(key)}", params={"project_id": project_id})

    async def set_config_value(
        self, key: str, project_id: str, environment_id: str, value: JsonValue
    ) -> ConfigEnvironmentResult:
        """Set a config's value for one environment.

        Raises:
            APIError: If request fails
        """
        resp = await self._request(
            "PUT",
            f"/manage/configs/{_seg(key)}/value",
            params={"project_id": project_id, "environment_id": environment_id},
            json_body={"value": value},
        )
        return self._parse(resp, ConfigEnvironmentEnvelope).config_environment

    # --- AI configs ---

    async def list_ai_configs(self, project_id: str, environment_id: str) -> list[ManagedAiConfig]:
        resp = await self._request(
            "GET", "/manage/ai-configs", params={"project_id": project_id, "environment_id": environment_id}
        )
        return self._parse(resp, AiConfigsEnvelope).ai_configs

    async def get_ai_config(self, file_name: str, project_id: str, environment_id: str) -> ManagedAiConfig:
        resp = await self._request(
            "GET",
            f"/manage/ai-configs/{_seg(file_name)}",
            params={"project_id": project_id, "environment_id": environment_id},
        )
        return self._parse(resp, AiConfigEnvelope).ai_config

    async def create_ai_config(self, req: CreateAiConfigRequest) -> ManagedAiConfig:
        resp = await self._request("POST", "/manage/ai-configs", json_body=_payload(req))
        return self._parse(resp, AiConfigEnvelope).ai_config

    async def update_ai_config(
        self, file_name: str, project_id: str, environment_id: str, req: UpdateAiConfigRequest
    ) -> ManagedAiConfig:
        resp = await self._request(
            "PUT",
            f"/manage/ai-configs/{_seg(file_name)}",
            params={"project_id": project_id, "environment_id": environment_id},
            json_body=_payload(req),
        )
        return self._parse(resp, AiConfigEnvelope).ai_config

    async def delete_ai_config(self, file_name: str, project_id: str, environment_id: str) -> None:
        await self._request(
            "DELETE",
            f"/manage/ai-configs/{_seg(file_name)}",
            params={"project_id": project_id, "environment_id": environment_id},
        )

    async def initialize_ai_configs(self, project_id: str, environment_id: str) -> list[ManagedAiConfig]:
        """Create the default AI config files for a project environment.

        Raises:
            APIError: If request fails
        """
        resp = await self._request(
            "POST",
            "/manage/ai-configs/initialize",
            json_body={"project_id": project_id, "environment_id": environment_id},
        )
        return self._parse(resp, AiConfigsEnvelope).ai_configs

    # --- Webhooks ---

    async def list_webhooks(self, project_id: str) -> list[WebhookEndpoint]:
        resp = await self._request("GET", "/manage/webhooks", params={"project_id": project_id})
        return self._parse(resp, WebhooksEnvelope).endpoints

    async def get_webhook(self, webhook_id: str) -> WebhookEndpoint:
        resp = await self._request("GET", f"/manage/webhooks/{_seg(webhook_id)}")
        return self._parse(resp, WebhookEnvelope).endpoint

    async def create_webhook(self, req: CreateWebhookRequest) -> WebhookEndpoint:
        resp = await self._request("POST", "/manage/webhooks", json_body=_payload(req))
        return self._parse(resp, WebhookEnvelope).endpoint

    async def update_webhook(self, webhook_id: str, req: object) -> WebhookEndpoint:
        resp = await self._request("PUT", f"/manage/webhooks/{_seg(webhook_id)}", json_body=_payload(req))
        return self._parse(resp, WebhookEnvelope).endpoint

    async def delete_webhook(self, webhook_id: str) -> None:
        await self._request("DELETE", f"/manage/webhooks/{_seg(webhook_id)}")

    async def regenerate_webhook_secret(self, webhook_id: str) -> WebhookEndpoint:
        resp = await self._request("POST", f"/manage/webhooks/{_seg(webhook_id)}/regenerate-secret")
        return self._parse(resp, WebhookEnvelope).endpoint

    async def reactivate_webhook(self, webhook_id: str) -> WebhookEndpoint:
        resp = await self._request("POST", f"/manage/webhooks/{_seg(webhook_id)}/reactivate")
        return self._parse(resp, WebhookEnvelope).endpoint

    async def list_webhook_deliveries(
        self, webhook_id: str, limit: int = 50, offset: int = 0
    ) -> list[WebhookDelivery]:
        resp = await self._request(
            "GET",
            f"/manage/webhooks/{_seg(webhook_id)}/deliveries",
            params={"limit": str(limit), "offset": str(offset)},
        )
        return self._parse(resp, DeliveriesEnvelope).deliveries

    # --- Projects & environments ---

    async def list_projects(self) -> list[Project]:
        resp = await self._request("GET", "/manage/projects")
        return self._parse(resp, ProjectsEnvelope).projects

    async def list_environments(self, project_id: str) -> list[Environment]:
        resp = await self._request("GET", "/manage/environments", params={"project_id": project_id})
        return self._parse(resp, EnvironmentsEnvelope).environments

    async def validate_session(self) -> None:
        """Cheap authenticated call used to verify the credential.

        Raises:
            APIError: If the credential is rejected or the server is unreachable
        """
        await self.list_projects()
