"""Typed models for the FlagDash management API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeAlias

from pydantic import JsonValue as _PydanticJsonValue

JsonValue: TypeAlias = _PydanticJsonValue
JsonObject: TypeAlias = dict[str, JsonValue]


# --- Resources ---


@dataclass(frozen=True)
class FlagEnvironmentData:
    id: str
    environment_id: str
    enabled: bool
    value: JsonValue = None
    rules: JsonValue = None
    rollout_percentage: int = 0


@dataclass(frozen=True)
class ManagedFlag:
    id: str
    key: str
    name: str
    flag_type: str
    created_at: datetime
    updated_at: datetime
    default_value: JsonValue = None
    description: str | None = ""
    tags: list[str] | None = None
    is_archived: bool | None = False
    environments: list[FlagEnvironmentData] | None = None

    @property
    def env_data(self) -> list[FlagEnvironmentData]:
        return self.environments or []


@dataclass(frozen=True)
class FlagEnvironmentResult:
    id: str
    enabled: bool
    environment_id: str
    feature_flag_id: str
    rules: JsonValue = None
    rollout_percentage: int = 0


@dataclass(frozen=True)
class Variation:
    id: str
    key: str
    name: str
    value: JsonValue
    weight: int


@dataclass(frozen=True)
class Schedule:
    id: str
    action: str
    scheduled_at: datetime
    status: str
    created_at: datetime
    executed_at: datetime | None = None
    payload: JsonValue = None
    error_message: str | None = ""


@dataclass(frozen=True)
class ConfigEnvironmentValue:
    id: str
    environment_id: str
    value: JsonValue
    is_active: bool


@dataclass(frozen=True)
class ManagedConfig:
    id: str
    key: str
    name: str
    config_type: str
    created_at: datetime
    updated_at: datetime
    default_value: JsonValue = None
    description: str | None = ""
    tags: list[str] | None = None
    is_archived: bool | None = False
    environments: list[ConfigEnvironmentValue] | None = None

    @property
    def env_values(self) -> list[ConfigEnvironmentValue]:
        return self.environments or []


@dataclass(frozen=True)
class ConfigEnvironmentResult:
    id: str
    value: JsonValue
    environment_id: str
    remote_config_id: str


@dataclass(frozen=True)
class ManagedAiConfig:
    id: str
    file_name: str
    file_type: str
    content: str
    created_at: datetime
    updated_at: datetime
    project_id: str
    environment_id: str
    is_active: bool | None = False
    metadata: JsonValue = None
    folder: str | None = ""


@dataclass(frozen=True)
class WebhookEndpoint:
    id: str
    url: str
    environment_id: str
    event_types: list[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime
    description: str | None = ""
    consecutive_failures: int | None = 0
    disabled_at: datetime | None = None
    disabled_reason: str | None = ""
    signing_secret: str | None = ""


@dataclass(frozen=True)
class WebhookDelivery:
    id: str
    event_type: str
    status: str
    http_status: int
    attempt_count: int
    max_attempts: int
    created_at: datetime
    error_message: str | None = ""
    completed_at: datetime | None = None


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    slug: str
    created_at: datetime


@dataclass(frozen=True)
class Environment:
    id: str
    name: str
    slug: str
    created_at: datetime
    is_default: bool | None = False


# --- Device authorization ---


@dataclass(frozen=True)
class DeviceAuthResponse:
    device_code: str
    user_code: str
    verification_url: str
    expires_in: int
    interval: int


@dataclass(frozen=True)
class DeviceAccount:
    id: str
    name: str


@dataclass(frozen=True)
class DeviceUser:
    id: str
    name: str
    email: str
    role: str = ""


@dataclass(frozen=True)
class DeviceTokenResponse:
    session_token: str | None = None
    account: DeviceAccount | None = None
    user: DeviceUser | None = None
    expires_at: str | None = None
    error: str | None = None


# --- Response envelopes ---


@dataclass(frozen=True)
class FlagsEnvelope:
    flags: list[ManagedFlag]


@dataclass(frozen=True)
class FlagEnvelope:
    flag: ManagedFlag


@dataclass(frozen=True)
class FlagEnvironmentEnvelope:
    flag_environment: FlagEnvironmentResult


@dataclass(frozen=True)
class VariationsEnvelope:
    variations: list[Variation]


@dataclass(frozen=True)
class SchedulesEnvelope:
    schedules: list[Schedule]


@dataclass(frozen=True)
class ScheduleEnvelope:
    schedule: Schedule


@dataclass(frozen=True)
class ConfigsEnvelope:
    configs: list[ManagedConfig]


@dataclass(frozen=True)
class ConfigEnvelope:
    config: ManagedConfig


@dataclass(frozen=True)
class ConfigEnvironmentEnvelope:
    config_environment: ConfigEnvironmentResult


@dataclass(frozen=True)
class AiConfigsEnvelope:
    ai_configs: list[ManagedAiConfig]


@dataclass(frozen=True)
class AiConfigEnvelope:
    ai_config: ManagedAiConfig


@dataclass(frozen=True)
class WebhooksEnvelope:
    endpoints: list[WebhookEndpoint]


@dataclass(frozen=True)
class WebhookEnvelope:
    endpoint: WebhookEndpoint


@dataclass(frozen=True)
class DeliveriesEnvelope:
    deliveries: list[WebhookDelivery]


@dataclass(frozen=True)
class ProjectsEnvelope:
    projects: list[Project]


@dataclass(frozen=True)
class EnvironmentsEnvelope:
    environments: list[Environment]


# --- Requests (None fields are omitted from the JSON body) ---


@dataclass(frozen=True)
class CreateFlagRequest:
    project_id: str
    key: str
    name: str
    flag_type: str
    description: str | None = None
    tags: list[str] | None = None
    default_value: JsonValue = None


@dataclass(frozen=True)
class UpdateFlagRequest:
    name: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    default_value: JsonValue = None
    is_archived: bool | None = None


@dataclass(frozen=True)
class UpdateRulesRequest:
    rules: JsonValue


@dataclass(frozen=True)
class UpdateRolloutRequest:
    rollout_percentage: int


@dataclass(frozen=True)
class VariationInput:
    key: str
    name: str
    value: JsonValue
    weight: int


@dataclass(frozen=True)
class SetVariationsRequest:
    variations: list[VariationInput] = field(default_factory=list)


@dataclass(frozen=True)
class CreateScheduleRequest:
    action: str
    scheduled_at: str
    payload: JsonValue = None


@dataclass(frozen=True)
class CreateConfigRequest:
    project_id: str
    key: str
    name: str
    config_type: str
    description: str | None = None
    default_value: JsonValue = None
    tags: list[str] | None = None


@dataclass(frozen=True)
class UpdateConfigRequest:
    name: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    default_value: JsonValue = None
    is_archived: bool | None = None


@dataclass(frozen=True)
class UpdateConfigValueRequest:
    value: JsonValue


@dataclass(frozen=True)
class CreateAiConfigRequest:
    project_id: str
    environment_id: str
    file_name: str
    file_type: str
    content: str
    folder: str | None = None
    is_active: bool | None = None
    metadata: JsonValue = None


@dataclass(frozen=True)
class UpdateAiConfigRequest:
    content: str | None = None
    is_active: bool | None = None
    metadata: JsonValue = None
    folder: str | None = None


@dataclass(frozen=True)
class InitializeAiConfigsRequest:
    project_id: str
    environment_id: str


@dataclass(frozen=True)
class CreateWebhookRequest:
    project_id: str
    environment_id: str
    url: str
    event_types: list[str]
    description: str | None = None


@dataclass(frozen=True)
class UpdateWebhookRequest:
    url: str | None = None
    description: str | None = None
    event_types: list[str] | None = None
    is_active: bool | None = None
