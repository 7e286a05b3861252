"""Base classes and helpers for TUI views."""

from __future__ import annotations

import curses
from datetime import datetime, timezone
from typing import Generic, TypeVar

from flagdash.cli.tui.types import CursesWindow


class BaseView:
    """Base class for all TUI views.

    Views keep their own presentation state, translate keys into actions via
    `handle_key()`, and describe their frame via `get_render_lines()`, which is
    testable without curses.
    """

    def get_render_lines(self, width: int, height: int) -> list[str]:
        """Return lines this view would render (testable without curses).

        Args:
            width: Terminal width
            height: Terminal height

        Returns:
            List of strings representing rendered output
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement get_render_lines()")

    def highlighted_line(self) -> int | None:
        """Index into get_render_lines() drawn in reverse video, if any."""
        return None

    def get_hints(self) -> str:
        """Key hints shown in the status bar."""
        return ""

    def render(self, stdscr: CursesWindow, row_start: int, height: int, width: int) -> None:
        """Render the view.

        Args:
            stdscr: Curses screen object
            row_start: Starting row
            height: Available height
            width: Screen width
        """
        lines = self.get_render_lines(width - 2, height)
        highlight = self.highlighted_line()
        for i, line in enumerate(lines[:height]):
            attr = curses.A_REVERSE if i == highlight else curses.A_NORMAL
            if i == 0:
                attr |= curses.A_BOLD
            try:
                stdscr.addstr(row_start + i, 1, line[: width - 2], attr)
            except curses.error:
                pass


T = TypeVar("T")


class SelectableListMixin(Generic[T]):
    """Cursor over a (possibly filtered) list of items.

    Requires `visible_items()` and `selected_index` on the class.
    """

    selected_index: int

    def visible_items(self) -> list[T]:
        raise NotImplementedError

    def selected_item(self) -> T | None:
        items = self.visible_items()
        if not items:
            return None
        self.selected_index = min(self.selected_index, len(items) - 1)
        return items[self.selected_index]

    def move_up(self) -> None:
        self.selected_index = max(0, self.selected_index - 1)

    def move_down(self) -> None:
        items = self.visible_items()
        if items:
            self.selected_index = min(len(items) - 1, self.selected_index + 1)


def wrap_index(index: int, delta: int, count: int) -> int:
    """Move an index by delta, wrapping within count (0 if empty)."""
    if count <= 0:
        return 0
    return (index + delta) % count


def format_relative_time(moment: datetime, now: datetime | None = None) -> str:
    """Render a timestamp as `Ns/m/h/d ago`."""
    if now is None:
        now = datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    seconds = max(0, int((now - moment).total_seconds()))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def format_timestamp(moment: datetime | None) -> str:
    if moment is None:
        return "-"
    return moment.strftime("%Y-%m-%d %H:%M")


def cell(text: object, width: int) -> str:
    """Left-align text in a fixed-width column, truncating with an ellipsis."""
    value = "" if text is None else str(text)
    if len(value) > width:
        value = value[: max(0, width - 1)] + "…"
    return f"{value:<{width}}"
