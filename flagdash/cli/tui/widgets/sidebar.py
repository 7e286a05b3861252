"""Section tab bar shared by the main views."""

from __future__ import annotations

import curses

from flagdash.cli.tui.actions import SelectSection
from flagdash.cli.tui.types import CursesWindow, SidebarSection


class Sidebar:
    """Numbered section tabs; 1-6 jump, Left/Right cycle."""

    SECTIONS = [
        (SidebarSection.DASHBOARD, "[1] Dashboard"),
        (SidebarSection.FLAGS, "[2] Flags"),
        (SidebarSection.CONFIGS, "[3] Config"),
        (SidebarSection.AI_CONFIGS, "[4] AI Config"),
        (SidebarSection.WEBHOOKS, "[5] Webhooks"),
        (SidebarSection.ENVIRONMENTS, "[6] Environments"),
    ]
    HEIGHT = 2

    def __init__(self) -> None:
        self.active = SidebarSection.DASHBOARD

    def _index(self) -> int:
        for i, (section, _) in enumerate(self.SECTIONS):
            if section is self.active:
                return i
        return 0

    def _select(self, index: int) -> SelectSection:
        self.active = self.SECTIONS[index % len(self.SECTIONS)][0]
        return SelectSection(self.active)

    def handle_key(self, key: int) -> SelectSection | None:
        """Map a key to a section change.

        Args:
            key: Key code from getch()

        Returns:
            SelectSection action, or None if the key is not a tab key
        """
        if ord("1") <= key <= ord("6"):
            return self._select(key - ord("1"))
        if key == curses.KEY_LEFT:
            return self._select(self._index() - 1)
        if key == curses.KEY_RIGHT:
            return self._select(self._index() + 1)
        return None

    def get_render_lines(self, width: int) -> list[str]:
        parts = []
        for section, title in self.SECTIONS:
            parts.append(f"<{title}>" if section is self.active else f" {title} ")
        return [" ".join(parts)[:width], "─" * width]

    def render(self, stdscr: CursesWindow, row: int, width: int) -> None:
        """Render the tab line with the active tab in bold."""
        col = 1
        try:
            for section, title in self.SECTIONS:
                label = f" {title} "
                if col + len(label) >= width:
                    break
                attr = curses.A_BOLD | curses.A_REVERSE if section is self.active else curses.A_NORMAL
                stdscr.addstr(row, col, label, attr)
                col += len(label) + 1
            stdscr.addstr(row + 1, 0, "─" * (width - 1), curses.A_DIM)
        except curses.error:
            pass
