"""Application state aggregate.

One `AppState` owns every piece of UI state. Only the controller mutates it;
background tasks talk back exclusively through the action queue.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TypeAlias

from flagdash.cli.api_client import FlagDashAPIClient
from flagdash.cli.tui.actions import ConfirmAction
from flagdash.cli.tui.navigation import LOGIN, View
from flagdash.cli.tui.types import NotificationLevel, ViewKind
from flagdash.cli.tui.views.ai_configs import AiConfigDetailView, AiConfigListView
from flagdash.cli.tui.views.base import BaseView
from flagdash.cli.tui.views.configs import ConfigDetailView, ConfigListView, ConfigValueEditorView
from flagdash.cli.tui.views.dashboard import DashboardView
from flagdash.cli.tui.views.environments import EnvironmentListView
from flagdash.cli.tui.views.flag_editors import (
    FlagRolloutView,
    FlagRulesView,
    FlagSchedulesView,
    FlagToggleView,
    FlagVariationsView,
)
from flagdash.cli.tui.views.flags import FlagDetailView, FlagListView
from flagdash.cli.tui.views.forms import AiConfigFormView, ConfigFormView, FlagFormView, WebhookFormView
from flagdash.cli.tui.views.login import LoginView
from flagdash.cli.tui.views.project_picker import ProjectPickerView
from flagdash.cli.tui.views.webhooks import WebhookDetailView, WebhookListView
from flagdash.cli.tui.widgets.header import Header
from flagdash.cli.tui.widgets.modal import ConfirmDialog, EnvironmentSwitcher
from flagdash.cli.tui.widgets.notification import Notification
from flagdash.cli.tui.widgets.sidebar import Sidebar
from flagdash.cli.tui.widgets.status_bar import StatusBar
from flagdash.config import AppConfig, ConfigStore, KeyTier

logger = logging.getLogger(__name__)

# The one live editing screen. Only a single editor exists at a time, and the
# view kind tells which variant it must be.
Editor: TypeAlias = (
    FlagFormView
    | ConfigFormView
    | AiConfigFormView
    | WebhookFormView
    | FlagToggleView
    | FlagRolloutView
    | FlagRulesView
    | FlagVariationsView
    | FlagSchedulesView
    | ConfigValueEditorView
)

_EDITOR_TYPES: dict[ViewKind, type] = {
    ViewKind.FLAG_CREATE: FlagFormView,
    ViewKind.FLAG_EDIT: FlagFormView,
    ViewKind.FLAG_TOGGLE: FlagToggleView,
    ViewKind.FLAG_ROLLOUT: FlagRolloutView,
    ViewKind.FLAG_RULES: FlagRulesView,
    ViewKind.FLAG_VARIATIONS: FlagVariationsView,
    ViewKind.FLAG_SCHEDULES: FlagSchedulesView,
    ViewKind.CONFIG_CREATE: ConfigFormView,
    ViewKind.CONFIG_EDIT: ConfigFormView,
    ViewKind.CONFIG_VALUE_EDITOR: ConfigValueEditorView,
    ViewKind.AI_CONFIG_CREATE: AiConfigFormView,
    ViewKind.AI_CONFIG_EDIT: AiConfigFormView,
    ViewKind.WEBHOOK_CREATE: WebhookFormView,
    ViewKind.WEBHOOK_EDIT: WebhookFormView,
}


@dataclass
class AppState:
    """Shared state for all TUI views."""

    config: AppConfig
    config_store: ConfigStore
    view: View = LOGIN
    api: FlagDashAPIClient | None = None
    key_tier: KeyTier = KeyTier.UNKNOWN
    running: bool = True
    pending_confirm: ConfirmAction | None = None
    notification: Notification | None = None
    editor: Editor | None = None

    header: Header = field(default_factory=Header)
    status_bar: StatusBar = field(default_factory=StatusBar)
    sidebar: Sidebar = field(default_factory=Sidebar)
    confirm: ConfirmDialog = field(default_factory=ConfirmDialog)
    switcher: EnvironmentSwitcher = field(default_factory=EnvironmentSwitcher)

    login: LoginView = field(default_factory=LoginView)
    picker: ProjectPickerView = field(default_factory=ProjectPickerView)
    dashboard: DashboardView = field(default_factory=DashboardView)
    flag_list: FlagListView = field(default_factory=FlagListView)
    flag_detail: FlagDetailView = field(default_factory=FlagDetailView)
    config_list: ConfigListView = field(default_factory=ConfigListView)
    config_detail: ConfigDetailView = field(default_factory=ConfigDetailView)
    ai_config_list: AiConfigListView = field(default_factory=AiConfigListView)
    ai_config_detail: AiConfigDetailView = field(default_factory=AiConfigDetailView)
    webhook_list: WebhookListView = field(default_factory=WebhookListView)
    webhook_detail: WebhookDetailView = field(default_factory=WebhookDetailView)
    environment_list: EnvironmentListView = field(default_factory=EnvironmentListView)

    def __post_init__(self) -> None:
        self.status_bar.base_url = self.config.connection.base_url

    @property
    def project_id(self) -> str:
        return self.config.defaults.project_id

    @property
    def environment_id(self) -> str:
        return self.config.defaults.environment_id

    def set_connected(self, connected: bool) -> None:
        self.header.connected = connected
        self.status_bar.connected = connected

    def set_key_tier(self, tier: KeyTier) -> None:
        """Propagate the permission tier to every tier-aware view."""
        self.key_tier = tier
        for view in (
            self.flag_list,
            self.flag_detail,
            self.config_list,
            self.config_detail,
            self.ai_config_list,
            self.ai_config_detail,
            self.webhook_list,
            self.webhook_detail,
        ):
            view.key_tier = tier
        logger.debug("Key tier set to %s", tier.value)

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
        """Show a toast, replacing any visible one."""
        self.notification = Notification.create(message, level)

    def is_searching(self) -> bool:
        return self.flag_list.search.active or self.config_list.search.active or self.ai_config_list.search.active

    def current_editor(self) -> Editor | None:
        """Return the editor if it is the variant the current view expects."""
        expected = _EDITOR_TYPES.get(self.view.kind)
        if expected is None or not isinstance(self.editor, expected):
            return None
        return self.editor

    def active_view(self) -> BaseView | None:
        """Return the screen object that handles keys and draws the content area."""
        persistent: dict[ViewKind, BaseView] = {
            ViewKind.LOGIN: self.login,
            ViewKind.PROJECT_PICKER: self.picker,
            ViewKind.DASHBOARD: self.dashboard,
            ViewKind.FLAG_LIST: self.flag_list,
            ViewKind.FLAG_DETAIL: self.flag_detail,
            ViewKind.CONFIG_LIST: self.config_list,
            ViewKind.CONFIG_DETAIL: self.config_detail,
            ViewKind.AI_CONFIG_LIST: self.ai_config_list,
            ViewKind.AI_CONFIG_DETAIL: self.ai_config_detail,
            ViewKind.WEBHOOK_LIST: self.webhook_list,
            ViewKind.WEBHOOK_DETAIL: self.webhook_detail,
            ViewKind.ENVIRONMENT_LIST: self.environment_list,
        }
        view = persistent.get(self.view.kind)
        if view is not None:
            return view
        return self.current_editor()
