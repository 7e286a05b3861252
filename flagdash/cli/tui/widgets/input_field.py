"""Single-line text input."""

from __future__ import annotations

import curses

from flagdash.cli.tui.types import KEY_BACKSPACE_CODES

KEY_CTRL_U = 21


def is_printable(key: int) -> bool:
    """Whether a getch() code is a printable ASCII character."""
    return 32 <= key < 127


class InputField:
    """Editable single-line field with a cursor."""

    def __init__(self, label: str, value: str = "", placeholder: str = "", read_only: bool = False):
        self.label = label
        self.value = value
        self.placeholder = placeholder
        self.read_only = read_only
        self.cursor = len(value)

    def set_value(self, value: str) -> None:
        self.value = value
        self.cursor = len(value)

    def handle_key(self, key: int) -> bool:
        """Apply an editing key.

        Args:
            key: Key code from getch()

        Returns:
            True if the key was consumed
        """
        if self.read_only:
            return False
        if key == KEY_CTRL_U:
            self.value = ""
            self.cursor = 0
            return True
        if is_printable(key):
            self.value = self.value[: self.cursor] + chr(key) + self.value[self.cursor :]
            self.cursor += 1
            return True
        if key in KEY_BACKSPACE_CODES:
            if self.cursor > 0:
                self.value = self.value[: self.cursor - 1] + self.value[self.cursor :]
                self.cursor -= 1
            return True
        if key == curses.KEY_DC:
            self.value = self.value[: self.cursor] + self.value[self.cursor + 1 :]
            return True
        if key == curses.KEY_LEFT:
            self.cursor = max(0, self.cursor - 1)
            return True
        if key == curses.KEY_RIGHT:
            self.cursor = min(len(self.value), self.cursor + 1)
            return True
        if key == curses.KEY_HOME:
            self.cursor = 0
            return True
        if key == curses.KEY_END:
            self.cursor = len(self.value)
            return True
        return False

    def render_line(self, focused: bool) -> str:
        """Return the field as `label: value`, with a cursor mark when focused."""
        if not self.value and not focused:
            shown = self.placeholder
        elif focused and not self.read_only:
            shown = self.value[: self.cursor] + "_" + self.value[self.cursor :]
        else:
            shown = self.value
        marker = ">" if focused else " "
        suffix = " (read-only)" if self.read_only else ""
        return f"{marker} {self.label}: {shown}{suffix}"
