"""Unit tests for view and widget key handling and render lines."""

import curses
from datetime import datetime, timedelta

import pytest

from flagdash.cli.tui.actions import (
    Back,
    BrowserLoginRequested,
    CancelSchedule,
    ConfirmAccepted,
    ConfirmDismissed,
    DeleteFlag,
    DeleteVariations,
    EnvironmentSwitched,
    LoginCancelled,
    Navigate,
    PickerProjectChosen,
    ProjectSelected,
    Quit,
    SelectSection,
    ShowConfirm,
    SubmitAiConfigCreate,
    SubmitAiConfigsInitialize,
    SubmitAiConfigUpdate,
    SubmitConfigValueUpdate,
    SubmitFlagCreate,
    SubmitFlagToggle,
    SubmitFlagUpdate,
    SubmitRolloutUpdate,
    SubmitRulesUpdate,
    SubmitVariationsUpdate,
    SubmitWebhookCreate,
    SubmitWebhookReactivate,
    SubmitWebhookSecretRegenerate,
    SubmitWebhookUpdate,
)
from flagdash.cli.tui.dispatcher import build_dashboard_data
from flagdash.cli.tui.navigation import View
from flagdash.cli.tui.types import (
    KEY_CTRL_S,
    KEY_ESCAPE,
    KEY_TAB,
    LoginPhase,
    NotificationLevel,
    SidebarSection,
    ViewKind,
)
from flagdash.cli.tui.views.ai_configs import AiConfigDetailView, AiConfigListView
from flagdash.cli.tui.views.base import cell, format_relative_time, format_timestamp, wrap_index
from flagdash.cli.tui.views.configs import ConfigDetailView, ConfigValueEditorView, config_status
from flagdash.cli.tui.views.dashboard import DashboardView, format_rollout
from flagdash.cli.tui.views.environments import EnvironmentListView
from flagdash.cli.tui.views.flag_editors import (
    FlagRolloutView,
    FlagRulesView,
    FlagSchedulesView,
    FlagToggleView,
    FlagVariationsView,
    parse_variations,
)
from flagdash.cli.tui.views.flags import FlagDetailView, FlagListView, flag_status
from flagdash.cli.tui.views.forms import AiConfigFormView, FlagFormView, WebhookFormView
from flagdash.cli.tui.views.login import LoginView
from flagdash.cli.tui.views.project_picker import PickerPhase, ProjectPickerView
from flagdash.cli.tui.views.webhooks import WebhookDetailView, mask_secret, webhook_health
from flagdash.cli.tui.widgets.header import Header
from flagdash.cli.tui.widgets.input_field import InputField
from flagdash.cli.tui.widgets.modal import ConfirmDialog, EnvironmentSwitcher
from flagdash.cli.tui.widgets.notification import NOTIFICATION_DURATION_ERROR, Notification
from flagdash.cli.tui.widgets.search_bar import SearchBar
from flagdash.cli.tui.widgets.sidebar import Sidebar
from flagdash.cli.tui.widgets.status_bar import StatusBar
from flagdash.cli.tui.widgets.text_area import TextArea
from flagdash.config import KeyTier
from tests.factories import (
    NOW,
    make_ai_config,
    make_config,
    make_delivery,
    make_device_auth,
    make_environment,
    make_flag,
    make_project,
    make_schedule,
    make_webhook,
)

ENTER = 10
BACKSPACE = 127


def _type(target, text: str) -> None:
    for ch in text:
        target.handle_key(ord(ch))


def _environments():
    return [make_environment(), make_environment("env-2", "Staging", is_default=True)]


@pytest.mark.unit
class TestInputWidgets:
    def test_input_field_editing(self):
        field = InputField("Name")
        _type(field, "abc")
        field.handle_key(curses.KEY_LEFT)
        field.handle_key(BACKSPACE)

        assert field.value == "ac"
        assert field.render_line(True) == "> Name: a_c"

    def test_input_field_clear_line(self):
        field = InputField("Name", "hello")
        assert field.handle_key(21) is True
        assert field.value == ""

    def test_read_only_field_ignores_keys(self):
        field = InputField("Key", "beta", read_only=True)
        assert field.handle_key(ord("x")) is False
        assert field.value == "beta"
        assert field.render_line(False) == "  Key: beta (read-only)"

    def test_placeholder_shown_when_empty(self):
        field = InputField("URL", placeholder="https://example.com")
        assert field.render_line(False) == "  URL: https://example.com"

    def test_text_area_split_and_join_lines(self):
        area = TextArea("Rules", "ab")
        area.handle_key(curses.KEY_RIGHT)
        area.handle_key(curses.KEY_RIGHT)
        area.handle_key(ENTER)
        _type(area, "c")
        assert area.content() == "ab\nc"

        area.handle_key(BACKSPACE)
        area.handle_key(BACKSPACE)
        assert area.content() == "ab"
        assert (area.row, area.col) == (0, 2)

    def test_text_area_tab_can_be_refused(self):
        area = TextArea("Content")
        assert area.handle_key(KEY_TAB, allow_tab=False) is False
        assert area.handle_key(KEY_TAB) is True
        assert area.content() == "  "

    def test_text_area_scrolls_to_cursor(self):
        area = TextArea("Value", "\n".join(str(i) for i in range(10)))
        for _ in range(9):
            area.handle_key(curses.KEY_DOWN)

        assert area.render_lines(20, 3) == ["  │ 7", "  │ 8", "  │ _9"]

    def test_search_bar_keeps_filter_on_enter_and_clears_on_escape(self):
        search = SearchBar()
        assert search.handle_key(ord("a")) is False

        search.activate()
        _type(search, "Ab")
        assert search.matches("xaBy")
        assert not search.matches("zzz", None)

        search.handle_key(ENTER)
        assert search.active is False
        assert search.render_line() == "filter: Ab  (/ to edit)"

        search.activate()
        search.handle_key(KEY_ESCAPE)
        assert search.query == ""
        assert search.matches("anything")


@pytest.mark.unit
class TestChromeWidgets:
    def test_sidebar_digits_and_wrapping(self):
        sidebar = Sidebar()
        assert sidebar.handle_key(ord("3")) == SelectSection(SidebarSection.CONFIGS)
        assert "<[3] Config>" in sidebar.get_render_lines(120)[0]

        sidebar.active = SidebarSection.DASHBOARD
        assert sidebar.handle_key(curses.KEY_LEFT) == SelectSection(SidebarSection.ENVIRONMENTS)
        assert sidebar.handle_key(ord("x")) is None

    def test_header_context_label(self):
        header = Header()
        assert header.context_label() == "no project"
        header.project_name = "Acme"
        assert header.context_label() == "Acme"
        header.environment_name = "Production"
        header.connected = True

        line = header.get_render_lines(60)[0]
        assert "Acme › Production" in line
        assert line.endswith("● connected")

        header.clear()
        assert header.get_render_lines(60)[0].endswith("○ disconnected")

    def test_status_bar_shows_server_and_loading(self):
        bar = StatusBar("https://flagdash.io")
        bar.loading = True
        bar.hints = "q quit"
        assert bar.get_render_lines(80)[1] == " https://flagdash.io (offline) [loading…]  q quit"

    def test_error_toasts_outlive_info_toasts(self):
        info = Notification.create("saved", NotificationLevel.INFO, now=100)
        error = Notification.create("boom", NotificationLevel.ERROR, now=100)
        assert error.expires_at > info.expires_at
        assert not error.is_expired(now=100)
        assert error.is_expired(now=100 + NOTIFICATION_DURATION_ERROR + 1)


@pytest.mark.unit
class TestModals:
    def test_confirm_defaults_to_no(self):
        dialog = ConfirmDialog()
        dialog.show(DeleteFlag("beta"))
        assert dialog.message == "Delete flag 'beta'?"

        assert isinstance(dialog.handle_key(ENTER), ConfirmDismissed)
        assert dialog.visible is False

    def test_confirm_selection_moves_to_yes(self):
        dialog = ConfirmDialog()
        dialog.show(DeleteFlag("beta"))
        assert dialog.handle_key(curses.KEY_RIGHT) is None
        assert "[ Yes ]" in dialog.get_render_lines()[2]
        assert isinstance(dialog.handle_key(ENTER), ConfirmAccepted)

    def test_confirm_letter_shortcuts(self):
        dialog = ConfirmDialog()
        dialog.show(DeleteFlag("beta"))
        assert isinstance(dialog.handle_key(ord("Y")), ConfirmAccepted)
        dialog.show(DeleteFlag("beta"))
        assert isinstance(dialog.handle_key(KEY_ESCAPE), ConfirmDismissed)

    def test_switcher_ignores_keys_while_loading(self):
        switcher = EnvironmentSwitcher()
        switcher.show("env-2")
        assert switcher.handle_key(ENTER) is None
        assert switcher.get_render_lines() == ["Loading environments…"]

    def test_switcher_preselects_current_and_switches(self):
        switcher = EnvironmentSwitcher()
        switcher.show("env-2")
        switcher.set_environments(_environments())
        assert switcher.selected == 1
        assert switcher.get_render_lines()[1] == "Staging [staging] (current)"

        switcher.handle_key(ord("j"))
        assert switcher.selected == 1
        switcher.handle_key(ord("k"))

        assert switcher.handle_key(ENTER) == EnvironmentSwitched("env-1", "Production")
        assert switcher.visible is False


@pytest.mark.unit
class TestLoginView:
    def test_idle_keys(self):
        view = LoginView()
        assert isinstance(view.handle_key(ENTER), BrowserLoginRequested)
        assert isinstance(view.handle_key(KEY_ESCAPE), Quit)

    def test_waiting_shows_code_and_cancels(self):
        view = LoginView()
        view.set_waiting(make_device_auth())
        lines = view.get_render_lines(80, 24)
        assert "  ABCD-EFGH  " in lines
        assert any("https://flagdash.io/device?code=ABCD-EFGH" in line for line in lines)

        assert isinstance(view.handle_key(KEY_ESCAPE), LoginCancelled)
        assert view.phase is LoginPhase.IDLE

    def test_error_retry(self):
        view = LoginView()
        view.set_error("Login denied. Press Enter to try again.")
        assert "Login denied. Press Enter to try again." in view.get_render_lines(80, 24)

        assert isinstance(view.handle_key(ENTER), BrowserLoginRequested)
        assert view.phase is LoginPhase.IDLE
        assert view.error_message == ""


@pytest.mark.unit
class TestProjectPicker:
    def test_escape_quits_without_saved_project(self):
        view = ProjectPickerView()
        assert isinstance(view.handle_key(KEY_ESCAPE), Quit)

    def test_saved_project_is_preselected_and_escape_goes_back(self):
        view = ProjectPickerView()
        view.set_saved_defaults("proj-2", "env-2")
        view.set_projects([make_project(), make_project("proj-2", "Beta Co")])

        assert view.selected_project_idx == 1
        assert "  Beta Co [beta co]  (last used)" in view.get_render_lines(80, 24)
        assert isinstance(view.handle_key(KEY_ESCAPE), Back)

    def test_two_phase_selection(self):
        view = ProjectPickerView()
        view.set_saved_defaults("proj-2", "env-1")
        view.set_projects([make_project(), make_project("proj-2", "Beta Co")])

        assert view.handle_key(ENTER) == PickerProjectChosen("proj-2")
        assert view.loading is True
        assert view.handle_key(ENTER) is None

        view.set_environments(_environments())
        assert view.phase is PickerPhase.SELECT_ENVIRONMENT
        assert view.selected_env_idx == 0
        assert view.handle_key(ENTER) == ProjectSelected("proj-2", "env-1", "Beta Co", "Production")

    def test_default_environment_used_when_saved_one_is_gone(self):
        view = ProjectPickerView()
        view.set_saved_defaults("proj-1", "env-gone")
        view.set_environments(_environments())
        assert view.selected_env_idx == 1

    def test_escape_in_environment_phase_returns_to_projects(self):
        view = ProjectPickerView()
        view.set_projects([make_project()])
        view.handle_key(ENTER)
        view.set_environments(_environments())

        assert view.handle_key(KEY_ESCAPE) is None
        assert view.phase is PickerPhase.SELECT_PROJECT


@pytest.mark.unit
class TestDashboardView:
    def test_loading_placeholder(self):
        assert DashboardView().get_render_lines(80, 24) == ["Dashboard", "", "Loading..."]

    def test_enter_opens_selected_recent_flag(self):
        view = DashboardView()
        flags = [make_flag("a"), make_flag("b", updated_at=NOW + timedelta(hours=1))]
        view.set_data(build_dashboard_data(flags, [], [], []))

        view.handle_key(ord("j"))
        assert view.handle_key(ENTER) == Navigate(View(ViewKind.FLAG_DETAIL, "a"))
        view.handle_key(ord("j"))
        assert view.selected == 0

    @pytest.mark.parametrize(("rollout", "expected"), [(None, "—"), (0, "—"), (30, "30%")])
    def test_format_rollout(self, rollout, expected):
        assert format_rollout(rollout) == expected


@pytest.mark.unit
class TestFlagViews:
    @pytest.mark.parametrize(
        ("enabled", "expected"),
        [((True, True), "ON"), ((False, False), "OFF"), ((True, False), "1/2"), ((), "—")],
    )
    def test_flag_status(self, enabled, expected):
        assert flag_status(make_flag(enabled=enabled)) == expected

    def test_search_filters_then_enter_opens(self):
        view = FlagListView(KeyTier.MANAGEMENT)
        view.set_flags([make_flag("alpha"), make_flag("beta")])

        view.handle_key(ord("/"))
        view.handle_key(ord("b"))
        assert [f.key for f in view.visible_items()] == ["beta"]
        view.handle_key(ENTER)
        assert view.search.active is False

        assert view.handle_key(ENTER) == Navigate(View(ViewKind.FLAG_DETAIL, "beta"))

    def test_mutations_gated_on_tier(self):
        view = FlagListView(KeyTier.CLIENT)
        view.set_flags([make_flag("alpha")])
        assert view.handle_key(ord("c")) is None
        assert view.handle_key(ord("d")) is None
        assert "c create" not in view.get_hints()

        view.key_tier = KeyTier.MANAGEMENT
        assert view.handle_key(ord("c")) == Navigate(View(ViewKind.FLAG_CREATE))
        assert view.handle_key(ord("t")) == Navigate(View(ViewKind.FLAG_TOGGLE, "alpha"))
        assert view.handle_key(ord("d")) == ShowConfirm(DeleteFlag("alpha"))

    def test_empty_list_render(self):
        view = FlagListView()
        assert view.get_render_lines(80, 24)[-1] == "  (no flags found)"
        assert view.highlighted_line() is None

    def test_detail_keys(self):
        view = FlagDetailView(KeyTier.CLIENT)
        assert isinstance(view.handle_key(KEY_ESCAPE), Back)
        assert view.handle_key(ord("s")) is None

        view.flag = make_flag("beta")
        assert view.handle_key(ord("s")) == Navigate(View(ViewKind.FLAG_SCHEDULES, "beta"))
        assert view.handle_key(ord("r")) is None

        view.key_tier = KeyTier.SESSION
        assert view.handle_key(ord("r")) == Navigate(View(ViewKind.FLAG_ROLLOUT, "beta"))
        assert view.handle_key(ord("u")) == Navigate(View(ViewKind.FLAG_RULES, "beta"))

    def test_detail_render_lists_environments(self):
        view = FlagDetailView()
        view.flag = make_flag("beta", rollout=25)
        lines = view.get_render_lines(120, 40)
        assert lines[0] == "Flag: beta"
        assert any("rollout  25%" in line for line in lines)


@pytest.mark.unit
class TestFlagEditors:
    def test_toggle_picks_environment(self):
        view = FlagToggleView("abc")
        assert view.handle_key(ENTER) is None

        view.flag = make_flag("abc", enabled=(True, False))
        view.set_environments(_environments())
        lines = view.get_render_lines(80, 24)
        assert lines[2].endswith("ON ")
        assert lines[3].endswith("OFF")

        view.handle_key(ord("j"))
        assert view.selected_environment_id() == "env-2"
        assert view.handle_key(ord("t")) == SubmitFlagToggle("abc")

    def test_rollout_adjustments_are_clamped(self):
        view = FlagRolloutView("abc", make_flag("abc", rollout=30))
        assert view.handle_key(ENTER) is None

        view.set_environments(_environments(), "env-1")
        assert view.percentage == 30
        view.handle_key(curses.KEY_RIGHT)
        assert view.percentage == 35
        view.handle_key(ord("9"))
        view.handle_key(curses.KEY_UP)
        assert view.percentage == 100
        view.handle_key(ord("0"))
        view.handle_key(curses.KEY_LEFT)
        assert view.percentage == 0
        assert view.get_render_lines(80, 24)[-1].endswith("  0%")

        assert view.handle_key(ENTER) == SubmitRolloutUpdate("abc")

    def test_rollout_environment_without_data_starts_at_zero(self):
        view = FlagRolloutView("abc", make_flag("abc", rollout=30))
        view.set_environments(_environments(), "env-1")
        view.handle_key(KEY_TAB)
        assert view.selected_environment_id() == "env-2"
        assert view.percentage == 0

    def test_rules_load_from_selected_environment(self):
        view = FlagRulesView("abc", make_flag("abc", rules=[{"attribute": "plan", "value": "pro"}]))
        view.set_environments(_environments(), "env-1")
        assert view.parse_rules() == [{"attribute": "plan", "value": "pro"}]

        view.handle_key(curses.KEY_BTAB)
        assert view.editor.content() == "[]"
        assert view.handle_key(KEY_CTRL_S) == SubmitRulesUpdate("abc")

    def test_rules_invalid_json_raises_value_error(self):
        view = FlagRulesView("abc")
        view.editor.set_content("{")
        with pytest.raises(ValueError):
            view.parse_rules()

    def test_variations_draft_starts_empty(self):
        view = FlagVariationsView("abc", KeyTier.MANAGEMENT)
        lines = view.get_render_lines(200, 30)
        assert lines[0] == "Draft variations: abc"
        assert "  Nothing drafted. Saving replaces all of the flag's variations." in lines
        assert view.handle_key(KEY_CTRL_S) is None

    def test_variations_preview_and_edit_mode(self):
        view = FlagVariationsView("abc", KeyTier.MANAGEMENT)
        view.handle_key(ord("e"))
        assert view.editing is True
        view.handle_key(curses.KEY_RIGHT)
        assert view.edited is False
        view.editor.set_content("")
        for ch in '[{"key": "a", "name": "A", "weight": 100}]':
            view.handle_key(ord(ch))
        view.handle_key(KEY_ESCAPE)
        assert view.editing is False
        assert view.edited is True

        assert "  Total weight: 100" in view.get_render_lines(100, 30)
        assert view.handle_key(KEY_CTRL_S) == SubmitVariationsUpdate("abc")

        view.handle_key(ord("e"))
        assert view.handle_key(ord("q")) is None
        view.handle_key(KEY_ESCAPE)
        assert any(line.startswith("  Invalid JSON:") for line in view.get_render_lines(100, 30))
        assert isinstance(view.handle_key(KEY_ESCAPE), Back)

    def test_variations_delete_needs_confirmation(self):
        view = FlagVariationsView("abc", KeyTier.MANAGEMENT)
        assert view.handle_key(ord("d")) == ShowConfirm(DeleteVariations("abc"))

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ('{"key": "a"}', "expected a JSON array"),
            ('[{"key": "a", "name": "A"}]', "missing weight"),
            ('[{"key": "a", "name": "A", "weight": "50"}]', "must be an integer"),
            ("[1]", "is not an object"),
        ],
    )
    def test_parse_variations_rejects_malformed_input(self, text, message):
        with pytest.raises(ValueError, match=message):
            parse_variations(text)

    def test_parse_variations_accepts_missing_value(self):
        variations = parse_variations('[{"key": "a", "name": "A", "weight": 100}]')
        assert variations[0].value is None
        assert variations[0].weight == 100

    def test_schedules_cancel_is_gated(self):
        view = FlagSchedulesView("abc", KeyTier.CLIENT)
        assert view.get_render_lines(80, 24)[-1] == "Loading schedules..."

        view.set_schedules([make_schedule()])
        assert view.handle_key(ord("x")) is None
        view.key_tier = KeyTier.MANAGEMENT
        assert view.handle_key(ord("x")) == ShowConfirm(CancelSchedule("abc", "sch-1"))


@pytest.mark.unit
class TestForms:
    def test_flag_create_form(self):
        form = FlagFormView.for_create("proj-1")
        _type(form, "beta")
        form.handle_key(ENTER)
        _type(form, "Beta")
        form.handle_key(KEY_TAB)
        form.handle_key(KEY_TAB)
        form.handle_key(curses.KEY_RIGHT)

        assert form.handle_key(ENTER) == SubmitFlagCreate()
        request = form.create_request()
        assert (request.project_id, request.key, request.name, request.flag_type) == (
            "proj-1",
            "beta",
            "Beta",
            "string",
        )
        assert request.description is None

    def test_flag_form_requires_key_and_name(self):
        form = FlagFormView.for_create("proj-1")
        form.focus = 3
        assert form.handle_key(ENTER) is None
        assert "Key and name are required" in form.get_render_lines(80, 24)

    def test_flag_edit_form_fixes_key_and_type(self):
        form = FlagFormView.for_edit("proj-1", make_flag("beta"))
        assert form.focus == 1
        assert form.get_render_lines(80, 24)[0] == "Edit flag 'beta'"

        form.focus = 3
        form.handle_key(curses.KEY_RIGHT)
        assert form.type_name == "boolean"
        assert form.handle_key(ENTER) == SubmitFlagUpdate("beta")
        assert form.update_request().name == "Beta"

    def test_ai_config_form_create(self):
        form = AiConfigFormView.for_create("proj-1", "env-1")
        assert form.handle_key(KEY_CTRL_S) is None

        _type(form, "a.md")
        form.handle_key(KEY_TAB)
        form.handle_key(KEY_TAB)
        form.handle_key(curses.KEY_RIGHT)
        form.handle_key(KEY_TAB)
        _type(form, "x")
        assert form.handle_key(KEY_ESCAPE) is None
        assert form.focus == 0

        assert form.handle_key(KEY_CTRL_S) == SubmitAiConfigCreate()
        request = form.create_request()
        assert (request.file_name, request.file_type, request.content, request.folder) == ("a.md", "rule", "x", None)

    def test_ai_config_form_edit(self):
        form = AiConfigFormView.for_edit("proj-1", "env-1", make_ai_config())
        assert form.type_index == 1
        assert form.content.content() == "# Rules\nBe terse.\n"
        assert form.handle_key(KEY_CTRL_S) == SubmitAiConfigUpdate("CLAUDE.md")

    def test_webhook_form_create(self):
        form = WebhookFormView.for_create("proj-1", "env-1")
        assert form.handle_key(ENTER) is None

        _type(form, "https://example.com/h")
        form.handle_key(KEY_TAB)
        form.handle_key(KEY_TAB)
        _type(form, "flag.updated, ,config.updated")

        assert form.event_types() == ["flag.updated", "config.updated"]
        assert form.handle_key(ENTER) == SubmitWebhookCreate()
        assert form.create_request().environment_id == "env-1"

    def test_webhook_form_edit(self):
        form = WebhookFormView.for_edit("proj-1", "env-1", make_webhook("wh-1"))
        assert form.handle_key(ENTER) == SubmitWebhookUpdate("wh-1")
        assert form.update_request().event_types == ["flag.updated"]


@pytest.mark.unit
class TestConfigViews:
    def test_config_status(self):
        assert config_status(make_config()) == "active"
        assert config_status(make_config(values=(("env-1", 1, True), ("env-2", 2, False)))) == "1/2"
        assert config_status(make_config(values=())) == "—"

    def test_detail_value_editor_binding(self):
        view = ConfigDetailView(KeyTier.MANAGEMENT)
        assert view.handle_key(ord("v")) is None
        view.config = make_config("theme")
        assert view.handle_key(ord("v")) == Navigate(View(ViewKind.CONFIG_VALUE_EDITOR, "theme"))

    def test_value_editor_round_trip(self):
        view = ConfigValueEditorView("theme")
        view.set_value({"color": "red"})
        assert view.parse_value() == {"color": "red"}
        assert view.handle_key(KEY_CTRL_S) == SubmitConfigValueUpdate("theme")


@pytest.mark.unit
class TestAiConfigViews:
    def test_initialize_defaults_binding(self):
        view = AiConfigListView(KeyTier.MANAGEMENT)
        assert view.handle_key(ord("i")) == SubmitAiConfigsInitialize()
        assert "press i" in view.get_render_lines(80, 24)[-1]

    def test_search_matches_type_and_folder(self):
        view = AiConfigListView()
        view.set_ai_configs([make_ai_config("A.md"), make_ai_config("B.md")])
        view.search.activate()
        _type(view.search, "b.")
        assert [a.file_name for a in view.visible_items()] == ["B.md"]

    def test_detail_scroll_is_bounded(self):
        view = AiConfigDetailView()
        view.set_ai_config(make_ai_config())
        for _ in range(5):
            view.handle_key(ord("j"))
        assert view.scroll == 1
        view.handle_key(ord("k"))
        view.handle_key(ord("k"))
        assert view.scroll == 0


@pytest.mark.unit
class TestWebhookViews:
    def test_health(self):
        assert webhook_health(make_webhook()) == "healthy"
        assert webhook_health(make_webhook(failures=3)) == "failing (3)"
        assert webhook_health(make_webhook(is_active=False, failures=3)) == "disabled"

    @pytest.mark.parametrize(("secret", "masked"), [(None, "-"), ("", "-"), ("abc", "…"), ("whsec_0123", "whsec_…")])
    def test_mask_secret(self, secret, masked):
        assert mask_secret(secret) == masked

    def test_detail_actions(self):
        view = WebhookDetailView(KeyTier.MANAGEMENT)
        view.set_webhook(make_webhook("wh-1"))
        assert view.handle_key(ord("a")) is None
        assert view.handle_key(ord("r")) == SubmitWebhookSecretRegenerate("wh-1")

        view.set_webhook(make_webhook("wh-1", is_active=False))
        assert view.handle_key(ord("a")) == SubmitWebhookReactivate("wh-1")

    def test_detail_render_masks_secret_and_lists_deliveries(self):
        view = WebhookDetailView()
        view.set_webhook(make_webhook("wh-1"))
        lines = view.get_render_lines(120, 40)
        assert "  Secret:      whsec_…" in lines
        assert lines[-1] == "  (none)"

        view.deliveries = [make_delivery()]
        assert "1/3" in view.get_render_lines(120, 40)[-1]

    def test_switching_webhook_drops_deliveries(self):
        view = WebhookDetailView()
        view.set_webhook(make_webhook("wh-1"))
        view.deliveries = [make_delivery()]
        view.set_webhook(make_webhook("wh-1"))
        assert len(view.deliveries) == 1
        view.set_webhook(make_webhook("wh-2"))
        assert view.deliveries == []


@pytest.mark.unit
class TestEnvironmentsAndHelpers:
    def test_environment_list_marks_current(self):
        view = EnvironmentListView()
        view.set_environments(_environments())
        view.current_id = "env-2"
        lines = view.get_render_lines(120, 24)
        assert lines[-1].endswith("← current")
        assert "yes" in lines[-1]

    def test_cell_truncates_with_ellipsis(self):
        assert cell("abcdef", 4) == "abc…"
        assert cell(None, 3) == "   "
        assert cell(42, 4) == "42  "

    def test_wrap_index(self):
        assert wrap_index(0, -1, 3) == 2
        assert wrap_index(5, 1, 0) == 0

    def test_relative_time(self):
        assert format_relative_time(NOW - timedelta(seconds=90), now=NOW) == "1m ago"
        assert format_relative_time(NOW - timedelta(days=3), now=NOW) == "3d ago"
        assert format_relative_time(datetime(2026, 3, 1, 11, 0), now=NOW) == "1h ago"
        assert format_relative_time(NOW + timedelta(minutes=5), now=NOW) == "0s ago"

    def test_timestamp(self):
        assert format_timestamp(None) == "-"
        assert format_timestamp(NOW) == "2026-03-01 12:00"
