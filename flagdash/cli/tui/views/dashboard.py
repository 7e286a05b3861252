"""Dashboard: resource counts and recently updated flags."""

from __future__ import annotations

import curses

from flagdash.cli.tui.actions import Action, DashboardData, Navigate
from flagdash.cli.tui.navigation import View
from flagdash.cli.tui.types import KEY_ENTER_CODES, ViewKind
from flagdash.cli.tui.views.base import BaseView, cell, format_relative_time, wrap_index


def format_rollout(rollout: int | None) -> str:
    if not rollout:
        return "—"
    return f"{rollout}%"


class DashboardView(BaseView):
    """Summary cards and a table of recent flags."""

    def __init__(self) -> None:
        self.data: DashboardData | None = None
        self.selected = 0
        self._highlight: int | None = None

    def set_data(self, data: DashboardData) -> None:
        self.data = data
        if data.recent_flags:
            self.selected = min(self.selected, len(data.recent_flags) - 1)
        else:
            self.selected = 0

    def select_next(self) -> None:
        if self.data:
            self.selected = wrap_index(self.selected, 1, len(self.data.recent_flags))

    def select_prev(self) -> None:
        if self.data:
            self.selected = wrap_index(self.selected, -1, len(self.data.recent_flags))

    def handle_key(self, key: int) -> Action | None:
        if key in (curses.KEY_DOWN, ord("j")):
            self.select_next()
        elif key in (curses.KEY_UP, ord("k")):
            self.select_prev()
        elif key in KEY_ENTER_CODES and self.data and self.data.recent_flags:
            flag = self.data.recent_flags[self.selected]
            return Navigate(View(ViewKind.FLAG_DETAIL, flag.key))
        return None

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        return "j/k select · Enter open · 1-6 sections · E env · p project · l logout · q quit"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        if self.data is None:
            return ["Dashboard", "", "Loading..."]
        d = self.data
        cards = [
            ("Flags", d.flag_count, d.flag_subtitle),
            ("Configs", d.config_count, d.config_subtitle),
            ("AI Configs", d.ai_config_count, d.ai_config_subtitle),
            ("Webhooks", d.webhook_count, d.webhook_subtitle),
        ]
        lines = ["Dashboard", ""]
        lines.append("  ".join(cell(title, 18) for title, _, _ in cards)[:width])
        lines.append("  ".join(cell(count, 18) for _, count, _ in cards)[:width])
        lines.append("  ".join(cell(subtitle, 18) for _, _, subtitle in cards)[:width])
        lines += ["", "Recent flags"]
        if not d.recent_flags:
            lines.append("  (no flags yet)")
            return lines
        lines.append(
            f"  {cell('Key', 28)} {cell('Type', 8)} {cell('Status', 6)} {cell('Rollout', 8)} "
            f"{cell('Value', 16)} Updated"[:width]
        )
        for i, flag in enumerate(d.recent_flags):
            if i == self.selected:
                self._highlight = len(lines)
            status = "ON" if flag.enabled else "OFF"
            lines.append(
                f"  {cell(flag.key, 28)} {cell(flag.flag_type, 8)} {cell(status, 6)} "
                f"{cell(format_rollout(flag.rollout), 8)} {cell(flag.value, 16)} "
                f"{format_relative_time(flag.updated_at)}"[:width]
            )
        return lines
