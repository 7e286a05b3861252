"""Transient toast notification."""

from __future__ import annotations

import curses
import time
from dataclasses import dataclass

from flagdash.cli.tui.types import CursesWindow, NotificationLevel

# Notification durations in seconds
NOTIFICATION_DURATION_INFO = 3.0
NOTIFICATION_DURATION_ERROR = 5.0


@dataclass
class Notification:
    """A temporary notification message."""

    text: str
    level: NotificationLevel
    expires_at: float  # timestamp when it should disappear

    @classmethod
    def create(cls, text: str, level: NotificationLevel, now: float | None = None) -> "Notification":
        duration = NOTIFICATION_DURATION_ERROR if level is NotificationLevel.ERROR else NOTIFICATION_DURATION_INFO
        return cls(text=text, level=level, expires_at=(now if now is not None else time.time()) + duration)

    def is_expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.time()) > self.expires_at


def render_notification(stdscr: CursesWindow, notification: Notification, width: int, row: int) -> None:
    """Render a boxed toast centered on the given row.

    Args:
        stdscr: Curses screen object
        notification: Active notification
        width: Screen width
        row: Row of the top border
    """
    text = notification.text[: max(0, width - 6)]
    box_width = len(text) + 4  # 2 padding + 2 border
    start_col = max(0, (width - box_width) // 2)

    if notification.level is NotificationLevel.ERROR:
        attr = curses.color_pair(1) | curses.A_BOLD  # Red
    elif notification.level is NotificationLevel.SUCCESS:
        attr = curses.color_pair(2) | curses.A_BOLD  # Green
    else:
        attr = curses.A_BOLD

    try:
        stdscr.addstr(row, start_col, "┌" + "─" * (box_width - 2) + "┐", attr)
        stdscr.addstr(row + 1, start_col, f"│ {text} │", attr)
        stdscr.addstr(row + 2, start_col, "└" + "─" * (box_width - 2) + "┘", attr)
    except curses.error:
        pass  # Ignore if can't render (screen too small)
