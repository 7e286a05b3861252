"""Bottom status bar: server address, loading marker and key hints."""

from __future__ import annotations

import curses

from flagdash.cli.tui.types import CursesWindow


class StatusBar:
    """Two-row footer."""

    HEIGHT = 2

    def __init__(self, base_url: str = "") -> None:
        self.base_url = base_url
        self.connected = False
        self.loading = False
        self.hints = ""

    def get_render_lines(self, width: int) -> list[str]:
        marker = " [loading…]" if self.loading else ""
        state = "online" if self.connected else "offline"
        return ["─" * width, f" {self.base_url} ({state}){marker}  {self.hints}"[:width]]

    def render(self, stdscr: CursesWindow, row: int, width: int) -> None:
        rule, text = self.get_render_lines(width - 1)
        try:
            stdscr.addstr(row, 0, rule, curses.A_DIM)
            stdscr.addstr(row + 1, 0, text)
        except curses.error:
            pass
