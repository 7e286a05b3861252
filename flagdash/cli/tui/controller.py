"""Action reducer.

`AppController.apply()` is the single consumer of the action queue. It
mutates `AppState` synchronously and hands slow work to the dispatcher.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Callable

from flagdash.cli.api_client import FlagDashAPIClient
from flagdash.cli.models import DeviceTokenResponse
from flagdash.cli.tui import actions as a
from flagdash.cli.tui.dispatcher import EXPIRED_TOKEN, POLL_CONTINUE_CODES, Dispatcher
from flagdash.cli.tui.navigation import (
    AI_CONFIG_LIST,
    CONFIG_LIST,
    DASHBOARD,
    FLAG_LIST,
    FLAG_SUBEDITOR_KINDS,
    LOGIN,
    PROJECT_PICKER,
    WEBHOOK_LIST,
    View,
    back_target,
    section_for_view,
    section_view,
)
from flagdash.cli.tui.state import AppState
from flagdash.cli.tui.types import LoginPhase, NotificationLevel, ViewKind
from flagdash.cli.tui.views.configs import ConfigValueEditorView
from flagdash.cli.tui.views.flag_editors import (
    EnvironmentCursor,
    FlagRolloutView,
    FlagRulesView,
    FlagSchedulesView,
    FlagToggleView,
    FlagVariationsView,
)
from flagdash.cli.tui.views.forms import AiConfigFormView, ConfigFormView, FlagFormView, WebhookFormView
from flagdash.config import ConfigError

logger = logging.getLogger(__name__)


class AppController:
    """Applies actions to the application state, one at a time, in arrival order."""

    def __init__(self, state: AppState, dispatcher: Dispatcher) -> None:
        self.state = state
        self.dispatcher = dispatcher
        self._poll_task: asyncio.Task[None] | None = None
        self._handlers: dict[type, Callable[..., None]] = {
            a.Quit: self._on_quit,
            a.Navigate: lambda action: self.navigate(action.view),
            a.Back: lambda _action: self.go_back(),
            a.SelectSection: lambda action: self.navigate(section_view(action.section)),
            a.OpenEnvironmentSwitcher: self._on_open_switcher,
            a.OpenProjectPicker: self._on_open_picker,
            a.Toast: lambda action: self.state.notify(action.message, action.level),
            a.ShowConfirm: self._on_show_confirm,
            a.ConfirmAccepted: self._on_confirm_accepted,
            a.ConfirmDismissed: self._on_confirm_dismissed,
            a.ApiError: self._on_api_error,
            a.SetLoading: self._on_set_loading,
            a.BrowserLoginRequested: self._on_browser_login_requested,
            a.LoginCancelled: lambda _action: self._cancel_polling(),
            a.DeviceAuthReceived: self._on_device_auth_received,
            a.DeviceTokenPollResult: lambda action: self._on_poll_result(action.response),
            a.DeviceTokenPollFailed: self._on_poll_failed,
            a.LoginSuccess: self._on_login_success,
            a.Logout: self._on_logout,
            a.ProjectsLoaded: lambda action: self.state.picker.set_projects(action.projects),
            a.PickerProjectChosen: self._on_picker_project_chosen,
            a.PickerEnvironmentsLoaded: lambda action: self.state.picker.set_environments(action.environments),
            a.ProjectSelected: self._on_project_selected,
            a.SwitcherEnvironmentsLoaded: self._on_switcher_environments_loaded,
            a.EnvironmentSwitched: self._on_environment_switched,
            a.EnvironmentSwitcherDismissed: lambda _action: None,
            a.DashboardLoaded: lambda action: self.state.dashboard.set_data(action.data),
            a.FlagsLoaded: lambda action: self.state.flag_list.set_flags(action.flags),
            a.FlagLoaded: self._on_flag_loaded,
            a.ConfigsLoaded: lambda action: self.state.config_list.set_configs(action.configs),
            a.ConfigLoaded: self._on_config_loaded,
            a.AiConfigsLoaded: lambda action: self.state.ai_config_list.set_ai_configs(action.ai_configs),
            a.AiConfigLoaded: self._on_ai_config_loaded,
            a.WebhooksLoaded: lambda action: self.state.webhook_list.set_webhooks(action.webhooks),
            a.WebhookLoaded: self._on_webhook_loaded,
            a.DeliveriesLoaded: self._on_deliveries_loaded,
            a.EnvironmentsLoaded: self._on_environments_loaded,
            a.SchedulesLoaded: self._on_schedules_loaded,
            a.SubmitFlagCreate: self._submit_flag_create,
            a.SubmitFlagUpdate: self._submit_flag_update,
            a.SubmitFlagToggle: self._submit_flag_toggle,
            a.SubmitRolloutUpdate: self._submit_rollout,
            a.SubmitRulesUpdate: self._submit_rules,
            a.SubmitVariationsUpdate: self._submit_variations,
            a.SubmitConfigCreate: self._submit_config_create,
            a.SubmitConfigUpdate: self._submit_config_update,
            a.SubmitConfigValueUpdate: self._submit_config_value,
            a.SubmitAiConfigCreate: self._submit_ai_config_create,
            a.SubmitAiConfigUpdate: self._submit_ai_config_update,
            a.SubmitAiConfigsInitialize: self._submit_ai_configs_initialize,
            a.SubmitWebhookCreate: self._submit_webhook_create,
            a.SubmitWebhookUpdate: self._submit_webhook_update,
            a.SubmitWebhookSecretRegenerate: self._submit_webhook_regenerate,
            a.SubmitWebhookReactivate: self._submit_webhook_reactivate,
            a.FlagCreated: lambda _action: self._finish_edit(FLAG_LIST),
            a.FlagUpdated: lambda _action: self._finish_edit(FLAG_LIST),
            a.FlagDeleted: lambda _action: self.navigate(FLAG_LIST),
            a.FlagToggled: lambda action: self._return_to_flag_detail(action.key),
            a.RolloutUpdated: lambda action: self._return_to_flag_detail(action.key),
            a.RulesUpdated: lambda action: self._return_to_flag_detail(action.key),
            a.VariationsUpdated: lambda action: self._return_to_flag_detail(action.key),
            a.VariationsDeleted: lambda action: self._return_to_flag_detail(action.key),
            a.ScheduleCancelled: self._on_schedule_cancelled,
            a.ConfigCreated: lambda _action: self._finish_edit(CONFIG_LIST),
            a.ConfigUpdated: lambda _action: self._finish_edit(CONFIG_LIST),
            a.ConfigDeleted: lambda _action: self.navigate(CONFIG_LIST),
            a.ConfigValueUpdated: self._on_config_value_updated,
            a.AiConfigCreated: lambda _action: self._finish_edit(AI_CONFIG_LIST),
            a.AiConfigUpdated: lambda _action: self._finish_edit(AI_CONFIG_LIST),
            a.AiConfigDeleted: lambda _action: self.navigate(AI_CONFIG_LIST),
            a.AiConfigsInitialized: lambda _action: self.navigate(AI_CONFIG_LIST),
            a.WebhookCreated: lambda _action: self._finish_edit(WEBHOOK_LIST),
            a.WebhookUpdated: lambda _action: self._finish_edit(WEBHOOK_LIST),
            a.WebhookDeleted: lambda _action: self.navigate(WEBHOOK_LIST),
            a.WebhookSecretRegenerated: lambda action: self._replace_webhook(action.webhook),
            a.WebhookReactivated: lambda action: self._replace_webhook(action.webhook),
        }

    # --- Entry points ---

    def start(self) -> None:
        """Pick the first screen: the project picker with a stored session, else login."""
        state = self.state
        if not state.config.has_session_token():
            logger.info("No stored session, starting at login")
            state.view = LOGIN
            return
        state.api = self._build_client()
        state.set_connected(True)
        state.set_key_tier(state.config.user_role_tier())
        state.header.project_name = state.config.defaults.project_name
        state.header.environment_name = state.config.defaults.environment_name
        state.picker.set_saved_defaults(state.project_id, state.environment_id)
        self.navigate(PROJECT_PICKER)

    def apply(self, action: a.Action) -> None:
        """Apply one action. Unknown actions are ignored."""
        handler = self._handlers.get(type(action))
        if handler is None:
            logger.warning("No handler for action %s", type(action).__name__)
            return
        logger.debug("Applying %s", type(action).__name__)
        handler(action)

    async def shutdown(self) -> None:
        await self.dispatcher.cancel_all()
        if self.state.api is not None:
            await self.state.api.close()

    # --- Navigation ---

    def navigate(self, view: View) -> None:
        """Switch to a view and start whatever it needs to show live data."""
        state = self.state
        logger.debug("Navigate %s -> %s", state.view, view)
        state.view = view
        # Editors live only while their screen is shown.
        state.editor = None
        section = section_for_view(view)
        if section is not None:
            state.sidebar.active = section

        kind = view.kind
        key = view.key or ""
        if kind is ViewKind.PROJECT_PICKER:
            self._load_projects()
        elif kind is ViewKind.DASHBOARD:
            self._load_dashboard()
        elif kind is ViewKind.FLAG_LIST:
            self._load_flags()
        elif kind is ViewKind.FLAG_DETAIL:
            if state.flag_detail.flag is not None and state.flag_detail.flag.key != key:
                state.flag_detail.flag = None
            self._load_flag(key)
        elif kind is ViewKind.CONFIG_LIST:
            self._load_configs()
        elif kind is ViewKind.CONFIG_DETAIL:
            if state.config_detail.config is not None and state.config_detail.config.key != key:
                state.config_detail.config = None
            self._load_config(key)
        elif kind is ViewKind.AI_CONFIG_LIST:
            self._load_ai_configs()
        elif kind is ViewKind.AI_CONFIG_DETAIL:
            detail = state.ai_config_detail
            if detail.ai_config is not None and detail.ai_config.file_name != key:
                detail.ai_config = None
            self._load_ai_config(key)
        elif kind is ViewKind.WEBHOOK_LIST:
            self._load_webhooks()
        elif kind is ViewKind.WEBHOOK_DETAIL:
            if state.webhook_detail.webhook is not None and state.webhook_detail.webhook.id != key:
                state.webhook_detail.webhook = None
                state.webhook_detail.deliveries = []
            self._load_webhook(key)
        elif kind is ViewKind.ENVIRONMENT_LIST:
            self._load_environments()
        elif kind is ViewKind.FLAG_CREATE:
            state.editor = FlagFormView.for_create(state.project_id)
        elif kind is ViewKind.CONFIG_CREATE:
            state.editor = ConfigFormView.for_create(state.project_id)
        elif kind is ViewKind.AI_CONFIG_CREATE:
            state.editor = AiConfigFormView.for_create(state.project_id, state.environment_id)
        elif kind is ViewKind.WEBHOOK_CREATE:
            state.editor = WebhookFormView.for_create(state.project_id, state.environment_id)
        elif kind in (ViewKind.FLAG_EDIT, ViewKind.CONFIG_EDIT, ViewKind.AI_CONFIG_EDIT, ViewKind.WEBHOOK_EDIT):
            if not self._build_edit_form():
                self._load_edit_subject(view)
        elif kind is ViewKind.FLAG_TOGGLE:
            state.editor = FlagToggleView(key)
            self._load_flag(key)
            self._load_environments()
        elif kind in (ViewKind.FLAG_ROLLOUT, ViewKind.FLAG_RULES):
            held = self._held_flag(key)
            editor_type = FlagRolloutView if kind is ViewKind.FLAG_ROLLOUT else FlagRulesView
            state.editor = editor_type(key, held)
            if held is None:
                self._load_flag(key)
            self._load_environments()
        elif kind is ViewKind.FLAG_VARIATIONS:
            state.editor = FlagVariationsView(key, state.key_tier)
            self._load_environments()
        elif kind is ViewKind.FLAG_SCHEDULES:
            state.editor = FlagSchedulesView(key, state.key_tier)
            self._load_environments()
            self._load_schedules(key)
        elif kind is ViewKind.CONFIG_VALUE_EDITOR:
            editor = ConfigValueEditorView(key)
            config = state.config_detail.config
            if config is not None and config.key == key:
                editor.set_value(config.env_values[0].value if config.env_values else config.default_value)
            state.editor = editor
            self._load_environments()

    def go_back(self) -> None:
        self.navigate(back_target(self.state.view))

    def reload_current_view(self) -> None:
        """Reload the data the current view shows, keyed only on the view."""
        view = self.state.view
        key = view.key or ""
        loaders: dict[ViewKind, Callable[[], None]] = {
            ViewKind.DASHBOARD: self._load_dashboard,
            ViewKind.FLAG_LIST: self._load_flags,
            ViewKind.FLAG_DETAIL: partial(self._load_flag, key),
            ViewKind.FLAG_SCHEDULES: partial(self._load_schedules, key),
            ViewKind.CONFIG_LIST: self._load_configs,
            ViewKind.CONFIG_DETAIL: partial(self._load_config, key),
            ViewKind.AI_CONFIG_LIST: self._load_ai_configs,
            ViewKind.AI_CONFIG_DETAIL: partial(self._load_ai_config, key),
            ViewKind.WEBHOOK_LIST: self._load_webhooks,
            ViewKind.WEBHOOK_DETAIL: partial(self._load_webhook, key),
            ViewKind.ENVIRONMENT_LIST: self._load_environments,
        }
        loader = loaders.get(view.kind)
        if loader is not None:
            loader()

    def _held_flag(self, key: str):
        flag = self.state.flag_detail.flag
        return flag if flag is not None and flag.key == key else None

    def _build_edit_form(self) -> bool:
        """Build the edit form for the current view from held detail state."""
        state = self.state
        kind = state.view.kind
        key = state.view.key
        if kind is ViewKind.FLAG_EDIT:
            flag = state.flag_detail.flag
            if flag is not None and flag.key == key:
                state.editor = FlagFormView.for_edit(state.project_id, flag)
                return True
        elif kind is ViewKind.CONFIG_EDIT:
            config = state.config_detail.config
            if config is not None and config.key == key:
                state.editor = ConfigFormView.for_edit(state.project_id, config)
                return True
        elif kind is ViewKind.AI_CONFIG_EDIT:
            ai_config = state.ai_config_detail.ai_config
            if ai_config is not None and ai_config.file_name == key:
                state.editor = AiConfigFormView.for_edit(state.project_id, state.environment_id, ai_config)
                return True
        elif kind is ViewKind.WEBHOOK_EDIT:
            webhook = state.webhook_detail.webhook
            if webhook is not None and webhook.id == key:
                state.editor = WebhookFormView.for_edit(state.project_id, state.environment_id, webhook)
                return True
        return False

    def _load_edit_subject(self, view: View) -> None:
        key = view.key or ""
        if view.kind is ViewKind.FLAG_EDIT:
            self._load_flag(key)
        elif view.kind is ViewKind.CONFIG_EDIT:
            self._load_config(key)
        elif view.kind is ViewKind.AI_CONFIG_EDIT:
            self._load_ai_config(key)
        elif view.kind is ViewKind.WEBHOOK_EDIT:
            self._load_webhook(key)

    def _maybe_build_pending_form(self) -> None:
        if self.state.editor is None and self.state.view.kind in (
            ViewKind.FLAG_EDIT,
            ViewKind.CONFIG_EDIT,
            ViewKind.AI_CONFIG_EDIT,
            ViewKind.WEBHOOK_EDIT,
        ):
            self._build_edit_form()

    def _finish_edit(self, target: View) -> None:
        self.state.editor = None
        self.navigate(target)

    def _return_to_flag_detail(self, key: str) -> None:
        view = self.state.view
        if view.kind in FLAG_SUBEDITOR_KINDS and view.key == key:
            self.state.editor = None
            self.navigate(View(ViewKind.FLAG_DETAIL, key))

    # --- Loaders ---

    def _build_client(self) -> FlagDashAPIClient:
        config = self.state.config
        return FlagDashAPIClient(config.connection.base_url, config.auth.session_token)

    def _api(self) -> FlagDashAPIClient | None:
        return self.state.api

    def _load_projects(self) -> None:
        api = self._api()
        if api is not None:
            self.dispatcher.load("list_projects", api.list_projects, a.ProjectsLoaded)

    def _load_dashboard(self) -> None:
        api = self._api()
        if api is not None:
            self.state.status_bar.loading = True
            self.dispatcher.load_dashboard(api, self.state.project_id, self.state.environment_id)

    def _load_flags(self) -> None:
        api = self._api()
        if api is not None:
            self.dispatcher.load("list_flags", partial(api.list_flags, self.state.project_id), a.FlagsLoaded)

    def _load_flag(self, key: str) -> None:
        api = self._api()
        if api is not None:
            self.dispatcher.load("get_flag", partial(api.get_flag, key, self.state.project_id), a.FlagLoaded)

    def _load_configs(self) -> None:
        api = self._api()
        if api is not None:
            self.dispatcher.load("list_configs", partial(api.list_configs, self.state.project_id), a.ConfigsLoaded)

    def _load_config(self, key: str) -> None:
        api = self._api()
        if api is not None:
            self.dispatcher.load("get_config", partial(api.get_config, key, self.state.project_id), a.ConfigLoaded)

    def _load_ai_configs(self) -> None:
        api = self._api()
        if api is not None:
            call = partial(api.list_ai_configs, self.state.project_id, self.state.environment_id)
            self.dispatcher.load("list_ai_configs", call, a.AiConfigsLoaded)

    def _load_ai_config(self, file_name: str) -> None:
        api = self._api()
        if api is not None:
            call = partial(api.get_ai_config, file_name, self.state.project_id, self.state.environment_id)
            self.dispatcher.load("get_ai_config", call, a.AiConfigLoaded)

    def _load_webhooks(self) -> None:
        api = self._api()
        if api is not None:
            self.dispatcher.load("list_webhooks", partial(api.list_webhooks, self.state.project_id), a.WebhooksLoaded)

    def _load_webhook(self, webhook_id: str) -> None:
        api = self._api()
        if api is not None:
            self.dispatcher.load_webhook(api, webhook_id)

    def _load_environments(self) -> None:
        api = self._api()
        if api is not None:
            call = partial(api.list_environments, self.state.project_id)
            self.dispatcher.load("list_environments", call, a.EnvironmentsLoaded)

    def _load_schedules(self, flag_key: str) -> None:
        api = self._api()
        if api is None:
            return
        call = partial(api.list_schedules, flag_key, self.state.project_id, self.state.environment_id)
        self.dispatcher.load("list_schedules", call, partial(a.SchedulesLoaded, flag_key))

    # --- UI handlers ---

    def _on_quit(self, _action: a.Quit) -> None:
        logger.info("Quit requested")
        self.state.running = False

    def _on_open_switcher(self, _action: a.OpenEnvironmentSwitcher) -> None:
        state = self.state
        api = self._api()
        if api is None or not state.project_id:
            state.notify("No project selected", NotificationLevel.ERROR)
            return
        state.switcher.show(state.environment_id)
        call = partial(api.list_environments, state.project_id)
        self.dispatcher.load("list_environments", call, a.SwitcherEnvironmentsLoaded)

    def _on_open_picker(self, _action: a.OpenProjectPicker) -> None:
        self.state.picker.set_saved_defaults(self.state.project_id, self.state.environment_id)
        self.navigate(PROJECT_PICKER)

    def _on_show_confirm(self, action: a.ShowConfirm) -> None:
        # Single slot: a second request replaces the first.
        self.state.pending_confirm = action.action
        self.state.confirm.show(action.action)

    def _on_confirm_accepted(self, _action: a.ConfirmAccepted) -> None:
        pending = self.state.pending_confirm
        self.state.pending_confirm = None
        self.state.confirm.hide()
        if pending is not None:
            self.execute_confirm(pending)

    def _on_confirm_dismissed(self, _action: a.ConfirmDismissed) -> None:
        self.state.pending_confirm = None
        self.state.confirm.hide()

    def _on_api_error(self, action: a.ApiError) -> None:
        logger.error("API error: %s", action.message)
        self.state.notify(action.message, NotificationLevel.ERROR)

    def _on_set_loading(self, action: a.SetLoading) -> None:
        self.state.status_bar.loading = action.loading

    # --- Login / session ---

    def _on_browser_login_requested(self, _action: a.BrowserLoginRequested) -> None:
        logger.info("Starting device login")
        self.dispatcher.request_login(self.state.config.connection.base_url)

    def _on_device_auth_received(self, action: a.DeviceAuthReceived) -> None:
        self._cancel_polling()
        self.state.login.set_waiting(action.device_auth)
        self._poll_task = self.dispatcher.start_polling(self.state.config.connection.base_url, action.device_auth)

    def _cancel_polling(self) -> None:
        if self._poll_task is not None and not self._poll_task.done():
            self._poll_task.cancel()
            logger.info("Device login polling cancelled")
        self._poll_task = None

    def _on_poll_result(self, response: DeviceTokenResponse) -> None:
        state = self.state
        if state.login.phase is not LoginPhase.WAITING:
            logger.debug("Ignoring poll result outside the waiting phase")
            return
        if response.session_token:
            auth = state.config.auth
            auth.session_token = response.session_token
            if response.user is not None:
                auth.user_name = response.user.name
                auth.user_email = response.user.email
                auth.user_role = response.user.role
            if response.expires_at:
                auth.token_expires_at = response.expires_at
            self._save_config()
            old = state.api
            state.api = self._build_client()
            if old is not None:
                self.dispatcher.spawn(old.close(), "close_client")
            state.set_key_tier(state.config.user_role_tier())
            state.set_connected(True)
            state.login.set_success()
            logger.info("Logged in as %s", auth.user_email or "unknown user")
            self.apply(a.LoginSuccess())
            return
        error = response.error
        if error is None or error in POLL_CONTINUE_CODES:
            return
        if error == EXPIRED_TOKEN:
            state.login.set_error("Login expired. Press Enter to try again.")
        elif error == "access_denied":
            state.login.set_error("Login denied. Press Enter to try again.")
        else:
            state.login.set_error(f"Login error: {error}. Press Enter to retry.")
        logger.info("Device login ended: %s", error)

    def _on_poll_failed(self, action: a.DeviceTokenPollFailed) -> None:
        self._poll_task = None
        self.state.notify(action.message, NotificationLevel.ERROR)
        if self.state.login.phase is LoginPhase.WAITING:
            self.state.login.set_error(f"{action.message}. Press Enter to retry.")

    def _on_login_success(self, _action: a.LoginSuccess) -> None:
        self.state.picker.set_saved_defaults(self.state.project_id, self.state.environment_id)
        self.navigate(PROJECT_PICKER)

    def _on_logout(self, _action: a.Logout) -> None:
        state = self.state
        self._cancel_polling()
        state.config_store.clear_credentials(state.config)
        self._save_config()
        if state.api is not None:
            self.dispatcher.spawn(state.api.close(), "close_client")
        state.api = None
        state.set_connected(False)
        state.header.clear()
        state.login.reset()
        state.editor = None
        state.notify("Logged out", NotificationLevel.INFO)
        state.view = LOGIN
        logger.info("Logged out")

    def _save_config(self) -> None:
        try:
            self.state.config_store.save(self.state.config)
        except ConfigError as e:
            logger.warning("Failed to persist config: %s", e)

    # --- Project picker & environment switcher ---

    def _on_picker_project_chosen(self, action: a.PickerProjectChosen) -> None:
        api = self._api()
        if api is not None:
            call = partial(api.list_environments, action.project_id)
            self.dispatcher.load("list_environments", call, a.PickerEnvironmentsLoaded)

    def _on_project_selected(self, action: a.ProjectSelected) -> None:
        state = self.state
        defaults = state.config.defaults
        defaults.project_id = action.project_id
        defaults.environment_id = action.environment_id
        defaults.project_name = action.project_name
        defaults.environment_name = action.environment_name
        self._save_config()
        state.header.project_name = action.project_name
        state.header.environment_name = action.environment_name
        state.set_connected(True)
        logger.info("Selected project %s / environment %s", action.project_id, action.environment_id)
        self.navigate(DASHBOARD)

    def _on_switcher_environments_loaded(self, action: a.SwitcherEnvironmentsLoaded) -> None:
        if self.state.switcher.visible:
            self.state.switcher.set_environments(action.environments)

    def _on_environment_switched(self, action: a.EnvironmentSwitched) -> None:
        state = self.state
        state.config.defaults.environment_id = action.environment_id
        state.config.defaults.environment_name = action.environment_name
        self._save_config()
        state.header.environment_name = action.environment_name
        state.notify(f"Switched to {action.environment_name}", NotificationLevel.SUCCESS)
        logger.info("Switched to environment %s", action.environment_id)
        self.reload_current_view()

    # --- Loaded data ---

    def _is_stale(self, key: str) -> bool:
        """A detail result for another resource than the keyed view on screen."""
        view_key = self.state.view.key
        if view_key is not None and view_key != key:
            logger.debug("Dropping stale result for %s on %s", key, self.state.view)
            return True
        return False

    def _on_flag_loaded(self, action: a.FlagLoaded) -> None:
        flag = action.flag
        if self._is_stale(flag.key):
            return
        self.state.flag_detail.flag = flag
        editor = self.state.editor
        if isinstance(editor, FlagToggleView) and editor.flag_key == flag.key:
            editor.flag = flag
        elif isinstance(editor, (FlagRolloutView, FlagRulesView)) and editor.flag_key == flag.key and editor.flag is None:
            editor.flag = flag
            editor.set_environments(editor.environments, editor.selected_environment_id() or "")
        self._maybe_build_pending_form()

    def _on_config_loaded(self, action: a.ConfigLoaded) -> None:
        if self._is_stale(action.config.key):
            return
        self.state.config_detail.config = action.config
        self._maybe_build_pending_form()

    def _on_ai_config_loaded(self, action: a.AiConfigLoaded) -> None:
        if self._is_stale(action.ai_config.file_name):
            return
        self.state.ai_config_detail.set_ai_config(action.ai_config)
        self._maybe_build_pending_form()

    def _on_webhook_loaded(self, action: a.WebhookLoaded) -> None:
        if self._is_stale(action.webhook.id):
            return
        self.state.webhook_detail.set_webhook(action.webhook)
        self._maybe_build_pending_form()

    def _on_deliveries_loaded(self, action: a.DeliveriesLoaded) -> None:
        detail = self.state.webhook_detail
        if detail.webhook is not None and detail.webhook.id == action.webhook_id:
            detail.deliveries = action.deliveries

    def _on_environments_loaded(self, action: a.EnvironmentsLoaded) -> None:
        state = self.state
        state.environment_list.set_environments(action.environments)
        state.environment_list.current_id = state.environment_id
        if isinstance(state.editor, EnvironmentCursor):
            state.editor.set_environments(action.environments, preferred_id=state.environment_id)

    def _on_schedules_loaded(self, action: a.SchedulesLoaded) -> None:
        editor = self.state.editor
        if isinstance(editor, FlagSchedulesView) and editor.flag_key == action.flag_key:
            editor.set_schedules(action.schedules)

    def _on_schedule_cancelled(self, action: a.ScheduleCancelled) -> None:
        view = self.state.view
        if view.kind is ViewKind.FLAG_SCHEDULES and view.key == action.flag_key:
            self._load_schedules(action.flag_key)

    def _on_config_value_updated(self, action: a.ConfigValueUpdated) -> None:
        view = self.state.view
        if view.kind is ViewKind.CONFIG_VALUE_EDITOR and view.key == action.key:
            self.state.editor = None
            self.navigate(View(ViewKind.CONFIG_DETAIL, action.key))

    def _replace_webhook(self, webhook) -> None:
        detail = self.state.webhook_detail
        if detail.webhook is not None and detail.webhook.id == webhook.id:
            detail.set_webhook(webhook)

    # --- Confirmed operations ---

    def execute_confirm(self, pending: a.ConfirmAction) -> None:
        """Run an irreversible operation the user just confirmed."""
        api = self._api()
        if api is None:
            return
        project_id = self.state.project_id
        environment_id = self.state.environment_id
        mutate = self.dispatcher.mutate
        if isinstance(pending, a.DeleteFlag):
            mutate(
                "delete_flag",
                partial(api.delete_flag, pending.key, project_id),
                lambda _r: a.FlagDeleted(pending.key),
                "Flag deleted",
            )
        elif isinstance(pending, a.DeleteConfig):
            mutate(
                "delete_config",
                partial(api.delete_config, pending.key, project_id),
                lambda _r: a.ConfigDeleted(pending.key),
                "Config deleted",
            )
        elif isinstance(pending, a.DeleteAiConfig):
            mutate(
                "delete_ai_config",
                partial(api.delete_ai_config, pending.file_name, project_id, environment_id),
                lambda _r: a.AiConfigDeleted(pending.file_name),
                "AI config deleted",
            )
        elif isinstance(pending, a.DeleteWebhook):
            mutate(
                "delete_webhook",
                partial(api.delete_webhook, pending.webhook_id),
                lambda _r: a.WebhookDeleted(pending.webhook_id),
                "Webhook deleted",
            )
        elif isinstance(pending, a.CancelSchedule):
            mutate(
                "cancel_schedule",
                partial(api.cancel_schedule, pending.flag_key, project_id, pending.schedule_id),
                lambda _r: a.ScheduleCancelled(pending.flag_key, pending.schedule_id),
                "Schedule cancelled",
            )
        elif isinstance(pending, a.DeleteVariations):
            mutate(
                "delete_variations",
                partial(api.delete_variations, pending.flag_key, project_id),
                lambda _r: a.VariationsDeleted(pending.flag_key),
                "Variations deleted",
            )

    # --- Submissions (payload comes from the live editor) ---

    def _editor(self, expected: type):
        editor = self.state.current_editor()
        return editor if isinstance(editor, expected) else None

    def _invalid_json(self, error: ValueError) -> None:
        self.state.notify(f"Invalid JSON: {error}", NotificationLevel.ERROR)

    def _submit_flag_create(self, _action: a.SubmitFlagCreate) -> None:
        form = self._editor(FlagFormView)
        api = self._api()
        if form is None or api is None:
            return
        self.dispatcher.mutate("create_flag", partial(api.create_flag, form.create_request()), a.FlagCreated, "Flag created")

    def _submit_flag_update(self, action: a.SubmitFlagUpdate) -> None:
        form = self._editor(FlagFormView)
        api = self._api()
        if form is None or api is None:
            return
        call = partial(api.update_flag, action.key, self.state.project_id, form.update_request())
        self.dispatcher.mutate("update_flag", call, a.FlagUpdated, "Flag updated")

    def _submit_flag_toggle(self, action: a.SubmitFlagToggle) -> None:
        editor = self._editor(FlagToggleView)
        api = self._api()
        environment_id = editor.selected_environment_id() if editor else None
        if api is None or environment_id is None:
            return
        call = partial(api.toggle_flag, action.key, self.state.project_id, environment_id)
        self.dispatcher.mutate("toggle_flag", call, lambda _r: a.FlagToggled(action.key), "Flag toggled")

    def _submit_rollout(self, action: a.SubmitRolloutUpdate) -> None:
        editor = self._editor(FlagRolloutView)
        api = self._api()
        environment_id = editor.selected_environment_id() if editor else None
        if editor is None or api is None or environment_id is None:
            return
        percentage = editor.percentage
        call = partial(api.set_rollout, action.key, self.state.project_id, environment_id, percentage)
        self.dispatcher.mutate(
            "set_rollout", call, lambda _r: a.RolloutUpdated(action.key), f"Rollout set to {percentage}%"
        )

    def _submit_rules(self, action: a.SubmitRulesUpdate) -> None:
        editor = self._editor(FlagRulesView)
        api = self._api()
        environment_id = editor.selected_environment_id() if editor else None
        if editor is None or api is None or environment_id is None:
            return
        try:
            rules = editor.parse_rules()
        except ValueError as e:
            self._invalid_json(e)
            return
        call = partial(api.update_rules, action.key, self.state.project_id, environment_id, rules)
        self.dispatcher.mutate("update_rules", call, lambda _r: a.RulesUpdated(action.key), "Rules updated")

    def _submit_variations(self, action: a.SubmitVariationsUpdate) -> None:
        editor = self._editor(FlagVariationsView)
        api = self._api()
        if editor is None or api is None or not editor.edited:
            return
        try:
            variations = editor.parse_variations()
        except ValueError as e:
            self._invalid_json(e)
            return
        call = partial(api.set_variations, action.key, self.state.project_id, variations)
        self.dispatcher.mutate(
            "set_variations", call, partial(a.VariationsUpdated, action.key), "Variations updated"
        )

    def _submit_config_create(self, _action: a.SubmitConfigCreate) -> None:
        form = self._editor(ConfigFormView)
        api = self._api()
        if form is None or api is None:
            return
        call = partial(api.create_config, form.create_request())
        self.dispatcher.mutate("create_config", call, a.ConfigCreated, "Config created")

    def _submit_config_update(self, action: a.SubmitConfigUpdate) -> None:
        form = self._editor(ConfigFormView)
        api = self._api()
        if form is None or api is None:
            return
        call = partial(api.update_config, action.key, self.state.project_id, form.update_request())
        self.dispatcher.mutate("update_config", call, a.ConfigUpdated, "Config updated")

    def _submit_config_value(self, action: a.SubmitConfigValueUpdate) -> None:
        editor = self._editor(ConfigValueEditorView)
        api = self._api()
        environment_id = editor.selected_environment_id() if editor else None
        if editor is None or api is None or environment_id is None:
            return
        try:
            value = editor.parse_value()
        except ValueError as e:
            self._invalid_json(e)
            return
        call = partial(api.set_config_value, action.key, self.state.project_id, environment_id, value)
        self.dispatcher.mutate(
            "set_config_value", call, lambda _r: a.ConfigValueUpdated(action.key), "Config value updated"
        )

    def _submit_ai_config_create(self, _action: a.SubmitAiConfigCreate) -> None:
        form = self._editor(AiConfigFormView)
        api = self._api()
        if form is None or api is None:
            return
        call = partial(api.create_ai_config, form.create_request())
        self.dispatcher.mutate("create_ai_config", call, a.AiConfigCreated, "AI config created")

    def _submit_ai_config_update(self, action: a.SubmitAiConfigUpdate) -> None:
        form = self._editor(AiConfigFormView)
        api = self._api()
        if form is None or api is None:
            return
        call = partial(
            api.update_ai_config, action.file_name, form.project_id, form.environment_id, form.update_request()
        )
        self.dispatcher.mutate("update_ai_config", call, a.AiConfigUpdated, "AI config updated")

    def _submit_ai_configs_initialize(self, _action: a.SubmitAiConfigsInitialize) -> None:
        api = self._api()
        if api is None:
            return
        call = partial(api.initialize_ai_configs, self.state.project_id, self.state.environment_id)
        self.dispatcher.mutate("initialize_ai_configs", call, a.AiConfigsInitialized, "AI configs initialized")

    def _submit_webhook_create(self, _action: a.SubmitWebhookCreate) -> None:
        form = self._editor(WebhookFormView)
        api = self._api()
        if form is None or api is None:
            return
        call = partial(api.create_webhook, form.create_request())
        self.dispatcher.mutate("create_webhook", call, a.WebhookCreated, "Webhook created")

    def _submit_webhook_update(self, action: a.SubmitWebhookUpdate) -> None:
        form = self._editor(WebhookFormView)
        api = self._api()
        if form is None or api is None:
            return
        call = partial(api.update_webhook, action.webhook_id, form.update_request())
        self.dispatcher.mutate("update_webhook", call, a.WebhookUpdated, "Webhook updated")

    def _submit_webhook_regenerate(self, action: a.SubmitWebhookSecretRegenerate) -> None:
        api = self._api()
        if api is None:
            return
        call = partial(api.regenerate_webhook_secret, action.webhook_id)
        self.dispatcher.mutate("regenerate_webhook_secret", call, a.WebhookSecretRegenerated, "Secret regenerated")

    def _submit_webhook_reactivate(self, action: a.SubmitWebhookReactivate) -> None:
        api = self._api()
        if api is None:
            return
        call = partial(api.reactivate_webhook, action.webhook_id)
        self.dispatcher.mutate("reactivate_webhook", call, a.WebhookReactivated, "Webhook reactivated")
