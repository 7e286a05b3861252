"""Read-only list of the project's environments."""

from __future__ import annotations

import curses

from flagdash.cli.models import Environment
from flagdash.cli.tui.views.base import BaseView, SelectableListMixin, cell, format_timestamp


class EnvironmentListView(SelectableListMixin[Environment], BaseView):
    def __init__(self) -> None:
        self.environments: list[Environment] = []
        self.selected_index = 0
        self.current_id = ""
        self._highlight: int | None = None

    def set_environments(self, environments: list[Environment]) -> None:
        self.environments = environments
        self.selected_index = min(self.selected_index, max(0, len(environments) - 1))

    def visible_items(self) -> list[Environment]:
        return self.environments

    def handle_key(self, key: int) -> None:
        if key in (curses.KEY_DOWN, ord("j")):
            self.move_down()
        elif key in (curses.KEY_UP, ord("k")):
            self.move_up()

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        return "j/k move · E switch environment"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        lines = [f"Environments ({len(self.environments)})", ""]
        if not self.environments:
            lines.append("  (no environments)")
            return lines
        lines.append(f"  {cell('Name', 24)} {cell('Slug', 20)} {cell('Default', 8)} Created"[:width])
        for i, env in enumerate(self.environments):
            if i == self.selected_index:
                self._highlight = len(lines)
            default = "yes" if env.is_default else ""
            current = "  ← current" if env.id == self.current_id else ""
            lines.append(
                f"  {cell(env.name, 24)} {cell(env.slug, 20)} {cell(default, 8)} "
                f"{format_timestamp(env.created_at)}{current}"[:width]
            )
        return lines
