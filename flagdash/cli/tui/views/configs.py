"""Remote config list, detail and per-environment value editor."""

from __future__ import annotations

import curses
import json

from flagdash.cli.models import JsonValue, ManagedConfig
from flagdash.cli.tui.actions import Action, Back, DeleteConfig, Navigate, ShowConfirm, SubmitConfigValueUpdate
from flagdash.cli.tui.navigation import View
from flagdash.cli.tui.types import KEY_BACKSPACE_CODES, KEY_CTRL_S, KEY_ENTER_CODES, KEY_ESCAPE, ViewKind
from flagdash.cli.tui.views.base import BaseView, SelectableListMixin, cell, format_timestamp
from flagdash.cli.tui.views.flag_editors import EnvironmentCursor
from flagdash.cli.tui.widgets.search_bar import SearchBar
from flagdash.cli.tui.widgets.text_area import TextArea
from flagdash.config.schema import KeyTier


def config_status(config: ManagedConfig) -> str:
    envs = config.env_values
    if not envs:
        return "—"
    active = sum(1 for env in envs if env.is_active)
    return "active" if active == len(envs) else f"{active}/{len(envs)}"


class ConfigListView(SelectableListMixin[ManagedConfig], BaseView):
    """All remote configs of the current project."""

    def __init__(self, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.configs: list[ManagedConfig] = []
        self.search = SearchBar()
        self.selected_index = 0
        self.key_tier = key_tier
        self._highlight: int | None = None

    def set_configs(self, configs: list[ManagedConfig]) -> None:
        self.configs = configs
        self.selected_index = min(self.selected_index, max(0, len(self.visible_items()) - 1))

    def visible_items(self) -> list[ManagedConfig]:
        return [c for c in self.configs if self.search.matches(c.key, c.name)]

    def handle_key(self, key: int) -> Action | None:
        if self.search.handle_key(key):
            self.selected_index = 0
            return None
        if key == ord("/"):
            self.search.activate()
            return None
        if key in (curses.KEY_DOWN, ord("j")):
            self.move_down()
            return None
        if key in (curses.KEY_UP, ord("k")):
            self.move_up()
            return None
        if key == ord("c") and self.key_tier.can_mutate():
            return Navigate(View(ViewKind.CONFIG_CREATE))
        config = self.selected_item()
        if config is None:
            return None
        if key in KEY_ENTER_CODES:
            return Navigate(View(ViewKind.CONFIG_DETAIL, config.key))
        if key == ord("d") and self.key_tier.can_mutate():
            return ShowConfirm(DeleteConfig(config.key))
        return None

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        if self.search.active:
            return "type to filter · Enter keep · Esc clear"
        hints = "j/k move · Enter open · / search"
        if self.key_tier.can_mutate():
            hints += " · c create · d delete"
        return hints

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        items = self.visible_items()
        lines = [f"Remote configs ({len(items)}/{len(self.configs)})", self.search.render_line()]
        if not items:
            lines.append("  (no configs found)")
            return lines
        lines.append(f"  {cell('Key', 28)} {cell('Name', 24)} {cell('Type', 8)} {cell('Status', 7)} Updated"[:width])
        visible_rows = max(1, height - len(lines))
        first = max(0, self.selected_index - visible_rows + 1)
        for i, config in enumerate(items[first : first + visible_rows], start=first):
            if i == self.selected_index:
                self._highlight = len(lines)
            lines.append(
                f"  {cell(config.key, 28)} {cell(config.name, 24)} {cell(config.config_type, 8)} "
                f"{cell(config_status(config), 7)} {format_timestamp(config.updated_at)}"[:width]
            )
        return lines


class ConfigDetailView(BaseView):
    def __init__(self, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.config: ManagedConfig | None = None
        self.key_tier = key_tier

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE or key in KEY_BACKSPACE_CODES:
            return Back()
        if self.config is None or not self.key_tier.can_mutate():
            return None
        if key == ord("e"):
            return Navigate(View(ViewKind.CONFIG_EDIT, self.config.key))
        if key == ord("v"):
            return Navigate(View(ViewKind.CONFIG_VALUE_EDITOR, self.config.key))
        return None

    def get_hints(self) -> str:
        if self.key_tier.can_mutate():
            return "e edit · v edit value · Esc back"
        return "Esc back"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        config = self.config
        if config is None:
            return ["Config", "", "Loading..."]
        lines = [
            f"Config: {config.key}",
            "",
            f"  Name:        {config.name}",
            f"  Type:        {config.config_type}",
            f"  Description: {config.description or '-'}",
            f"  Default:     {json.dumps(config.default_value)}",
            f"  Tags:        {', '.join(config.tags or []) or '-'}",
            f"  Updated:     {format_timestamp(config.updated_at)}",
            "",
            "Environment values",
        ]
        if not config.env_values:
            lines.append("  (no environment values)")
        for env in config.env_values:
            state = "active" if env.is_active else "inactive"
            lines.append(f"  {cell(env.environment_id, 28)} {cell(state, 8)} {json.dumps(env.value)}")
        return [line[:width] for line in lines]


class ConfigValueEditorView(EnvironmentCursor, BaseView):
    """JSON editor for a config's value in one environment."""

    def __init__(self, config_key: str):
        super().__init__()
        self.config_key = config_key
        self.editor = TextArea("Value", "null")

    def set_value(self, value: JsonValue) -> None:
        self.editor.set_content(json.dumps(value, indent=2))

    def parse_value(self) -> JsonValue:
        """Parse the editor buffer.

        Raises:
            ValueError: If the buffer is not valid JSON
        """
        return json.loads(self.editor.content())

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE:
            return Back()
        if key == KEY_CTRL_S:
            return SubmitConfigValueUpdate(self.config_key)
        if key == curses.KEY_BTAB:
            self.cycle_environment(1)
            return None
        self.editor.handle_key(key)
        return None

    def get_hints(self) -> str:
        return "Ctrl+S save · Shift+Tab environment · Esc back"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        lines = [f"Value: {self.config_key}", self.environment_label(), ""]
        lines += self.editor.render_lines(width, max(1, height - len(lines)))
        return [line[:width] for line in lines]
