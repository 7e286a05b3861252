"""Feature flag list and detail views."""

from __future__ import annotations

import curses
import json

from flagdash.cli.models import ManagedFlag
from flagdash.cli.tui.actions import Action, Back, DeleteFlag, Navigate, ShowConfirm
from flagdash.cli.tui.navigation import View
from flagdash.cli.tui.types import KEY_BACKSPACE_CODES, KEY_ENTER_CODES, KEY_ESCAPE, ViewKind
from flagdash.cli.tui.views.base import BaseView, SelectableListMixin, cell, format_timestamp
from flagdash.cli.tui.widgets.search_bar import SearchBar
from flagdash.config.schema import KeyTier


def flag_status(flag: ManagedFlag) -> str:
    """Summarize per-environment enablement: ON, OFF, x/y or — when unconfigured."""
    envs = flag.env_data
    if not envs:
        return "—"
    enabled = sum(1 for env in envs if env.enabled)
    if enabled == len(envs):
        return "ON"
    if enabled == 0:
        return "OFF"
    return f"{enabled}/{len(envs)}"


class FlagListView(SelectableListMixin[ManagedFlag], BaseView):
    """All flags of the current project, filterable with `/`."""

    def __init__(self, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.flags: list[ManagedFlag] = []
        self.search = SearchBar()
        self.selected_index = 0
        self.key_tier = key_tier
        self._highlight: int | None = None

    def set_flags(self, flags: list[ManagedFlag]) -> None:
        self.flags = flags
        self.selected_index = min(self.selected_index, max(0, len(self.visible_items()) - 1))

    def visible_items(self) -> list[ManagedFlag]:
        return [f for f in self.flags if self.search.matches(f.key, f.name)]

    def handle_key(self, key: int) -> Action | None:
        if self.search.handle_key(key):
            self.selected_index = 0
            return None
        if key == ord("/"):
            self.search.activate()
        elif key in (curses.KEY_DOWN, ord("j")):
            self.move_down()
        elif key in (curses.KEY_UP, ord("k")):
            self.move_up()
        else:
            return self._action_for(key)
        return None

    def _action_for(self, key: int) -> Action | None:
        can_mutate = self.key_tier.can_mutate()
        if key == ord("c") and can_mutate:
            return Navigate(View(ViewKind.FLAG_CREATE))
        flag = self.selected_item()
        if flag is None:
            return None
        if key in KEY_ENTER_CODES:
            return Navigate(View(ViewKind.FLAG_DETAIL, flag.key))
        if key == ord("t") and can_mutate:
            return Navigate(View(ViewKind.FLAG_TOGGLE, flag.key))
        if key == ord("d") and can_mutate:
            return ShowConfirm(DeleteFlag(flag.key))
        return None

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        if self.search.active:
            return "type to filter · Enter keep · Esc clear"
        hints = "j/k move · Enter open · / search"
        if self.key_tier.can_mutate():
            hints += " · c create · t toggle · d delete"
        return hints

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        items = self.visible_items()
        lines = [f"Flags ({len(items)}/{len(self.flags)})", self.search.render_line()]
        if not items:
            lines.append("  (no flags found)")
            return lines
        lines.append(f"  {cell('Key', 28)} {cell('Name', 24)} {cell('Type', 8)} {cell('Status', 6)} Updated"[:width])
        visible_rows = max(1, height - len(lines))
        first = max(0, self.selected_index - visible_rows + 1)
        for i, flag in enumerate(items[first : first + visible_rows], start=first):
            if i == self.selected_index:
                self._highlight = len(lines)
            lines.append(
                f"  {cell(flag.key, 28)} {cell(flag.name, 24)} {cell(flag.flag_type, 8)} "
                f"{cell(flag_status(flag), 6)} {format_timestamp(flag.updated_at)}"[:width]
            )
        return lines


class FlagDetailView(BaseView):
    """Flag attributes and per-environment state."""

    def __init__(self, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.flag: ManagedFlag | None = None
        self.key_tier = key_tier

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE or key in KEY_BACKSPACE_CODES:
            return Back()
        if self.flag is None:
            return None
        flag_key = self.flag.key
        if key == ord("s"):
            return Navigate(View(ViewKind.FLAG_SCHEDULES, flag_key))
        if not self.key_tier.can_mutate():
            return None
        targets = {
            ord("e"): ViewKind.FLAG_EDIT,
            ord("t"): ViewKind.FLAG_TOGGLE,
            ord("r"): ViewKind.FLAG_ROLLOUT,
            ord("u"): ViewKind.FLAG_RULES,
            ord("v"): ViewKind.FLAG_VARIATIONS,
        }
        kind = targets.get(key)
        if kind is None:
            return None
        return Navigate(View(kind, flag_key))

    def get_hints(self) -> str:
        if self.key_tier.can_mutate():
            return "e edit · t toggle · r rollout · u rules · v variations · s schedules · Esc back"
        return "s schedules · Esc back"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        flag = self.flag
        if flag is None:
            return ["Flag", "", "Loading..."]
        lines = [
            f"Flag: {flag.key}",
            "",
            f"  Name:        {flag.name}",
            f"  Type:        {flag.flag_type}",
            f"  Description: {flag.description or '-'}",
            f"  Default:     {json.dumps(flag.default_value)}",
            f"  Tags:        {', '.join(flag.tags or []) or '-'}",
            f"  Archived:    {'yes' if flag.is_archived else 'no'}",
            f"  Created:     {format_timestamp(flag.created_at)}",
            f"  Updated:     {format_timestamp(flag.updated_at)}",
            "",
            "Environments",
        ]
        if not flag.env_data:
            lines.append("  (not configured in any environment)")
        for env in flag.env_data:
            state = "ON " if env.enabled else "OFF"
            rules = json.dumps(env.rules) if env.rules is not None else "-"
            lines.append(f"  {cell(env.environment_id, 28)} {state} rollout {env.rollout_percentage:>3}%  rules {rules}")
        return [line[:width] for line in lines]
