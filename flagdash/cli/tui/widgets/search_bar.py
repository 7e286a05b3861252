"""Inline `/` search box for list views."""

from __future__ import annotations

from flagdash.cli.tui.types import KEY_BACKSPACE_CODES, KEY_ENTER_CODES, KEY_ESCAPE
from flagdash.cli.tui.widgets.input_field import is_printable


class SearchBar:
    """Captures typed characters while active and filters case-insensitively."""

    def __init__(self) -> None:
        self.active = False
        self.query = ""

    def activate(self) -> None:
        self.active = True

    def deactivate(self) -> None:
        self.active = False
        self.query = ""

    def handle_key(self, key: int) -> bool:
        """Consume a key while active.

        Enter keeps the filter and stops capturing; Esc clears it.

        Returns:
            True if the key was consumed
        """
        if not self.active:
            return False
        if key == KEY_ESCAPE:
            self.deactivate()
        elif key in KEY_ENTER_CODES:
            self.active = False
        elif key in KEY_BACKSPACE_CODES:
            self.query = self.query[:-1]
        elif is_printable(key):
            self.query += chr(key)
        return True

    def matches(self, *texts: str | None) -> bool:
        if not self.query:
            return True
        needle = self.query.lower()
        return any(needle in (text or "").lower() for text in texts)

    def render_line(self) -> str:
        if self.active:
            return f"/{self.query}_"
        if self.query:
            return f"filter: {self.query}  (/ to edit)"
        return ""
