"""Top header: product name, project › environment, connection state."""

from __future__ import annotations

import curses

from flagdash.cli.tui.types import CursesWindow

HEADER_TITLE = "FlagDash"


class Header:
    """One-line header plus a rule."""

    HEIGHT = 2

    def __init__(self) -> None:
        self.project_name = ""
        self.environment_name = ""
        self.connected = False

    def clear(self) -> None:
        self.project_name = ""
        self.environment_name = ""
        self.connected = False

    def context_label(self) -> str:
        if not self.project_name:
            return "no project"
        if not self.environment_name:
            return self.project_name
        return f"{self.project_name} › {self.environment_name}"

    def get_render_lines(self, width: int) -> list[str]:
        status = "● connected" if self.connected else "○ disconnected"
        left = f" {HEADER_TITLE}  {self.context_label()}"
        gap = max(1, width - len(left) - len(status) - 1)
        return [(left + " " * gap + status)[:width], "─" * width]

    def render(self, stdscr: CursesWindow, row: int, width: int) -> None:
        status = "● connected" if self.connected else "○ disconnected"
        status_attr = curses.color_pair(2) if self.connected else curses.color_pair(1)
        try:
            stdscr.addstr(row, 1, HEADER_TITLE, curses.A_BOLD)
            stdscr.addstr(row, len(HEADER_TITLE) + 3, self.context_label()[: max(0, width - 30)])
            if width > len(status) + 2:
                stdscr.addstr(row, width - len(status) - 2, status, status_attr)
            stdscr.addstr(row + 1, 0, "─" * (width - 1), curses.A_DIM)
        except curses.error:
            pass
