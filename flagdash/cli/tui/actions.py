"""The Action vocabulary.

Every user intent, background result and UI side-effect request travels
through the action queue as one of these immutable values. Mutation results
carry the natural key of the resource they touched so follow-up navigation
never depends on what the screen shows when the result arrives.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeAlias

from flagdash.cli.models import (
    DeviceAuthResponse,
    DeviceTokenResponse,
    Environment,
    ManagedAiConfig,
    ManagedConfig,
    ManagedFlag,
    Project,
    Schedule,
    Variation,
    WebhookDelivery,
    WebhookEndpoint,
)
from flagdash.cli.tui.navigation import View
from flagdash.cli.tui.types import NotificationLevel, SidebarSection

# --- Confirmable (irreversible) operations ---


@dataclass(frozen=True)
class DeleteFlag:
    key: str


@dataclass(frozen=True)
class DeleteConfig:
    key: str


@dataclass(frozen=True)
class DeleteAiConfig:
    file_name: str


@dataclass(frozen=True)
class DeleteWebhook:
    webhook_id: str


@dataclass(frozen=True)
class CancelSchedule:
    flag_key: str
    schedule_id: str


@dataclass(frozen=True)
class DeleteVariations:
    flag_key: str


ConfirmAction: TypeAlias = (
    DeleteFlag | DeleteConfig | DeleteAiConfig | DeleteWebhook | CancelSchedule | DeleteVariations
)


def confirm_message(action: ConfirmAction) -> str:
    """Return the question shown in the confirmation dialog."""
    if isinstance(action, DeleteFlag):
        return f"Delete flag '{action.key}'?"
    if isinstance(action, DeleteConfig):
        return f"Delete config '{action.key}'?"
    if isinstance(action, DeleteAiConfig):
        return f"Delete AI config '{action.file_name}'?"
    if isinstance(action, DeleteWebhook):
        return f"Delete webhook '{action.webhook_id}'?"
    if isinstance(action, CancelSchedule):
        return f"Cancel schedule '{action.schedule_id}'?"
    return f"Delete all variations for '{action.flag_key}'?"


# --- Dashboard payload ---


@dataclass(frozen=True)
class DashboardFlag:
    key: str
    flag_type: str
    rollout: int | None
    value: str
    enabled: bool
    updated_at: datetime


@dataclass(frozen=True)
class DashboardData:
    flag_count: int
    config_count: int
    webhook_count: int
    ai_config_count: int
    flag_subtitle: str
    config_subtitle: str
    ai_config_subtitle: str
    webhook_subtitle: str
    recent_flags: list[DashboardFlag] = field(default_factory=list)


# --- Navigation ---


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Navigate:
    view: View


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class SelectSection:
    section: SidebarSection


@dataclass(frozen=True)
class OpenEnvironmentSwitcher:
    pass


@dataclass(frozen=True)
class OpenProjectPicker:
    pass


# --- UI requests ---


@dataclass(frozen=True)
class Toast:
    message: str
    level: NotificationLevel = NotificationLevel.INFO


@dataclass(frozen=True)
class ShowConfirm:
    action: ConfirmAction


@dataclass(frozen=True)
class ConfirmAccepted:
    pass


@dataclass(frozen=True)
class ConfirmDismissed:
    pass


@dataclass(frozen=True)
class ApiError:
    message: str


@dataclass(frozen=True)
class SetLoading:
    loading: bool


# --- Auth / session ---


@dataclass(frozen=True)
class BrowserLoginRequested:
    pass


@dataclass(frozen=True)
class LoginCancelled:
    pass


@dataclass(frozen=True)
class DeviceAuthReceived:
    device_auth: DeviceAuthResponse


@dataclass(frozen=True)
class DeviceTokenPollResult:
    response: DeviceTokenResponse


@dataclass(frozen=True)
class DeviceTokenPollFailed:
    """Polling stopped on a transport or server failure."""

    message: str


@dataclass(frozen=True)
class LoginSuccess:
    pass


@dataclass(frozen=True)
class Logout:
    pass


# --- Project picker & environment switcher ---


@dataclass(frozen=True)
class ProjectsLoaded:
    projects: list[Project]


@dataclass(frozen=True)
class PickerProjectChosen:
    project_id: str


@dataclass(frozen=True)
class PickerEnvironmentsLoaded:
    environments: list[Environment]


@dataclass(frozen=True)
class ProjectSelected:
    project_id: str
    environment_id: str
    project_name: str
    environment_name: str


@dataclass(frozen=True)
class SwitcherEnvironmentsLoaded:
    environments: list[Environment]


@dataclass(frozen=True)
class EnvironmentSwitched:
    environment_id: str
    environment_name: str


@dataclass(frozen=True)
class EnvironmentSwitcherDismissed:
    pass


# --- Data loaded ---


@dataclass(frozen=True)
class DashboardLoaded:
    data: DashboardData


@dataclass(frozen=True)
class FlagsLoaded:
    flags: list[ManagedFlag]


@dataclass(frozen=True)
class FlagLoaded:
    flag: ManagedFlag


@dataclass(frozen=True)
class ConfigsLoaded:
    configs: list[ManagedConfig]


@dataclass(frozen=True)
class ConfigLoaded:
    config: ManagedConfig


@dataclass(frozen=True)
class AiConfigsLoaded:
    ai_configs: list[ManagedAiConfig]


@dataclass(frozen=True)
class AiConfigLoaded:
    ai_config: ManagedAiConfig


@dataclass(frozen=True)
class WebhooksLoaded:
    webhooks: list[WebhookEndpoint]


@dataclass(frozen=True)
class WebhookLoaded:
    webhook: WebhookEndpoint


@dataclass(frozen=True)
class DeliveriesLoaded:
    webhook_id: str
    deliveries: list[WebhookDelivery]


@dataclass(frozen=True)
class EnvironmentsLoaded:
    environments: list[Environment]


@dataclass(frozen=True)
class SchedulesLoaded:
    flag_key: str
    schedules: list[Schedule]


# --- Form submissions (payload is read from the live editor) ---


@dataclass(frozen=True)
class SubmitFlagCreate:
    pass


@dataclass(frozen=True)
class SubmitFlagUpdate:
    key: str


@dataclass(frozen=True)
class SubmitFlagToggle:
    key: str


@dataclass(frozen=True)
class SubmitRolloutUpdate:
    key: str


@dataclass(frozen=True)
class SubmitRulesUpdate:
    key: str


@dataclass(frozen=True)
class SubmitVariationsUpdate:
    key: str


@dataclass(frozen=True)
class SubmitConfigCreate:
    pass


@dataclass(frozen=True)
class SubmitConfigUpdate:
    key: str


@dataclass(frozen=True)
class SubmitConfigValueUpdate:
    key: str


@dataclass(frozen=True)
class SubmitAiConfigCreate:
    pass


@dataclass(frozen=True)
class SubmitAiConfigUpdate:
    file_name: str


@dataclass(frozen=True)
class SubmitAiConfigsInitialize:
    pass


@dataclass(frozen=True)
class SubmitWebhookCreate:
    pass


@dataclass(frozen=True)
class SubmitWebhookUpdate:
    webhook_id: str


@dataclass(frozen=True)
class SubmitWebhookSecretRegenerate:
    webhook_id: str


@dataclass(frozen=True)
class SubmitWebhookReactivate:
    webhook_id: str


# --- Mutation completed ---


@dataclass(frozen=True)
class FlagCreated:
    flag: ManagedFlag


@dataclass(frozen=True)
class FlagUpdated:
    flag: ManagedFlag


@dataclass(frozen=True)
class FlagDeleted:
    key: str


@dataclass(frozen=True)
class FlagToggled:
    key: str


@dataclass(frozen=True)
class RolloutUpdated:
    key: str


@dataclass(frozen=True)
class RulesUpdated:
    key: str


@dataclass(frozen=True)
class VariationsUpdated:
    key: str
    variations: list[Variation]


@dataclass(frozen=True)
class VariationsDeleted:
    key: str


@dataclass(frozen=True)
class ScheduleCancelled:
    flag_key: str
    schedule_id: str


@dataclass(frozen=True)
class ConfigCreated:
    config: ManagedConfig


@dataclass(frozen=True)
class ConfigUpdated:
    config: ManagedConfig


@dataclass(frozen=True)
class ConfigDeleted:
    key: str


@dataclass(frozen=True)
class ConfigValueUpdated:
    key: str


@dataclass(frozen=True)
class AiConfigCreated:
    ai_config: ManagedAiConfig


@dataclass(frozen=True)
class AiConfigUpdated:
    ai_config: ManagedAiConfig


@dataclass(frozen=True)
class AiConfigDeleted:
    file_name: str


@dataclass(frozen=True)
class AiConfigsInitialized:
    ai_configs: list[ManagedAiConfig]


@dataclass(frozen=True)
class WebhookCreated:
    webhook: WebhookEndpoint


@dataclass(frozen=True)
class WebhookUpdated:
    webhook: WebhookEndpoint


@dataclass(frozen=True)
class WebhookDeleted:
    webhook_id: str


@dataclass(frozen=True)
class WebhookSecretRegenerated:
    webhook: WebhookEndpoint


@dataclass(frozen=True)
class WebhookReactivated:
    webhook: WebhookEndpoint


Action: TypeAlias = (
    Quit
    | Navigate
    | Back
    | SelectSection
    | OpenEnvironmentSwitcher
    | OpenProjectPicker
    | Toast
    | ShowConfirm
    | ConfirmAccepted
    | ConfirmDismissed
    | ApiError
    | SetLoading
    | BrowserLoginRequested
    | LoginCancelled
    | DeviceAuthReceived
    | DeviceTokenPollResult
    | DeviceTokenPollFailed
    | LoginSuccess
    | Logout
    | ProjectsLoaded
    | PickerProjectChosen
    | PickerEnvironmentsLoaded
    | ProjectSelected
    | SwitcherEnvironmentsLoaded
    | EnvironmentSwitched
    | EnvironmentSwitcherDismissed
    | DashboardLoaded
    | FlagsLoaded
    | FlagLoaded
    | ConfigsLoaded
    | ConfigLoaded
    | AiConfigsLoaded
    | AiConfigLoaded
    | WebhooksLoaded
    | WebhookLoaded
    | DeliveriesLoaded
    | EnvironmentsLoaded
    | SchedulesLoaded
    | SubmitFlagCreate
    | SubmitFlagUpdate
    | SubmitFlagToggle
    | SubmitRolloutUpdate
    | SubmitRulesUpdate
    | SubmitVariationsUpdate
    | SubmitConfigCreate
    | SubmitConfigUpdate
    | SubmitConfigValueUpdate
    | SubmitAiConfigCreate
    | SubmitAiConfigUpdate
    | SubmitAiConfigsInitialize
    | SubmitWebhookCreate
    | SubmitWebhookUpdate
    | SubmitWebhookSecretRegenerate
    | SubmitWebhookReactivate
    | FlagCreated
    | FlagUpdated
    | FlagDeleted
    | FlagToggled
    | RolloutUpdated
    | RulesUpdated
    | VariationsUpdated
    | VariationsDeleted
    | ScheduleCancelled
    | ConfigCreated
    | ConfigUpdated
    | ConfigDeleted
    | ConfigValueUpdated
    | AiConfigCreated
    | AiConfigUpdated
    | AiConfigDeleted
    | AiConfigsInitialized
    | WebhookCreated
    | WebhookUpdated
    | WebhookDeleted
    | WebhookSecretRegenerated
    | WebhookReactivated
)
