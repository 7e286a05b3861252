"""AI assistant config files: list and detail."""

from __future__ import annotations

import curses

from flagdash.cli.models import ManagedAiConfig
from flagdash.cli.tui.actions import (
    Action,
    Back,
    DeleteAiConfig,
    Navigate,
    ShowConfirm,
    SubmitAiConfigsInitialize,
)
from flagdash.cli.tui.navigation import View
from flagdash.cli.tui.types import KEY_BACKSPACE_CODES, KEY_ENTER_CODES, KEY_ESCAPE, ViewKind
from flagdash.cli.tui.views.base import BaseView, SelectableListMixin, cell, format_timestamp
from flagdash.cli.tui.widgets.search_bar import SearchBar
from flagdash.config.schema import KeyTier


class AiConfigListView(SelectableListMixin[ManagedAiConfig], BaseView):
    """AI config files of the current project environment."""

    def __init__(self, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.ai_configs: list[ManagedAiConfig] = []
        self.search = SearchBar()
        self.selected_index = 0
        self.key_tier = key_tier
        self._highlight: int | None = None

    def set_ai_configs(self, ai_configs: list[ManagedAiConfig]) -> None:
        self.ai_configs = ai_configs
        self.selected_index = min(self.selected_index, max(0, len(self.visible_items()) - 1))

    def visible_items(self) -> list[ManagedAiConfig]:
        return [a for a in self.ai_configs if self.search.matches(a.file_name, a.file_type, a.folder)]

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
        can_mutate = self.key_tier.can_mutate()
        if key == ord("c") and can_mutate:
            return Navigate(View(ViewKind.AI_CONFIG_CREATE))
        if key == ord("i") and can_mutate:
            return SubmitAiConfigsInitialize()
        ai_config = self.selected_item()
        if ai_config is None:
            return None
        if key in KEY_ENTER_CODES:
            return Navigate(View(ViewKind.AI_CONFIG_DETAIL, ai_config.file_name))
        if key == ord("d") and can_mutate:
            return ShowConfirm(DeleteAiConfig(ai_config.file_name))
        return None

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        if self.search.active:
            return "type to filter · Enter keep · Esc clear"
        hints = "j/k move · Enter open · / search"
        if self.key_tier.can_mutate():
            hints += " · c create · d delete · i initialize defaults"
        return hints

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        items = self.visible_items()
        lines = [f"AI configs ({len(items)}/{len(self.ai_configs)})", self.search.render_line()]
        if not items:
            lines.append("  (no AI configs found; press i to create the defaults)")
            return lines
        lines.append(f"  {cell('File', 28)} {cell('Type', 6)} {cell('Folder', 16)} {cell('Active', 6)} Updated"[:width])
        visible_rows = max(1, height - len(lines))
        first = max(0, self.selected_index - visible_rows + 1)
        for i, ai_config in enumerate(items[first : first + visible_rows], start=first):
            if i == self.selected_index:
                self._highlight = len(lines)
            active = "yes" if ai_config.is_active else "no"
            lines.append(
                f"  {cell(ai_config.file_name, 28)} {cell(ai_config.file_type, 6)} {cell(ai_config.folder or '-', 16)} "
                f"{cell(active, 6)} {format_timestamp(ai_config.updated_at)}"[:width]
            )
        return lines


class AiConfigDetailView(BaseView):
    """Metadata plus scrollable file content."""

    def __init__(self, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.ai_config: ManagedAiConfig | None = None
        self.key_tier = key_tier
        self.scroll = 0

    def set_ai_config(self, ai_config: ManagedAiConfig) -> None:
        self.ai_config = ai_config
        self.scroll = 0

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE or key in KEY_BACKSPACE_CODES:
            return Back()
        if self.ai_config is None:
            return None
        if key in (curses.KEY_DOWN, ord("j")):
            max_scroll = max(0, len(self.ai_config.content.splitlines()) - 1)
            self.scroll = min(max_scroll, self.scroll + 1)
        elif key in (curses.KEY_UP, ord("k")):
            self.scroll = max(0, self.scroll - 1)
        elif key == ord("e") and self.key_tier.can_mutate():
            return Navigate(View(ViewKind.AI_CONFIG_EDIT, self.ai_config.file_name))
        return None

    def get_hints(self) -> str:
        hints = "j/k scroll · Esc back"
        if self.key_tier.can_mutate():
            hints = "e edit · " + hints
        return hints

    def get_render_lines(self, width: int, height: int) -> list[str]:
        ai_config = self.ai_config
        if ai_config is None:
            return ["AI config", "", "Loading..."]
        lines = [
            f"AI config: {ai_config.file_name}",
            "",
            f"  Type:    {ai_config.file_type}",
            f"  Folder:  {ai_config.folder or '-'}",
            f"  Active:  {'yes' if ai_config.is_active else 'no'}",
            f"  Updated: {format_timestamp(ai_config.updated_at)}",
            "",
            "Content",
        ]
        content = ai_config.content.splitlines()
        room = max(1, height - len(lines))
        lines += [f"  │ {line}" for line in content[self.scroll : self.scroll + room]]
        return [line[:width] for line in lines]
