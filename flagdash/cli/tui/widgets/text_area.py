"""Multi-line text editor used for JSON and content editing."""

from __future__ import annotations

import curses

from flagdash.cli.tui.types import KEY_BACKSPACE_CODES, KEY_ENTER_CODES, KEY_TAB
from flagdash.cli.tui.widgets.input_field import is_printable

TAB_SPACES = "  "


class TextArea:
    """Line-based editor with a row/column cursor and vertical scrolling."""

    def __init__(self, label: str, content: str = ""):
        self.label = label
        self.lines: list[str] = [""]
        self.row = 0
        self.col = 0
        self.scroll = 0
        self.set_content(content)

    def content(self) -> str:
        return "\n".join(self.lines)

    def set_content(self, content: str) -> None:
        self.lines = content.split("\n") if content else [""]
        self.row = 0
        self.col = 0
        self.scroll = 0

    def handle_key(self, key: int, *, allow_tab: bool = True) -> bool:
        """Apply an editing key.

        Args:
            key: Key code from getch()
            allow_tab: Insert spaces for Tab instead of ignoring it

        Returns:
            True if the key was consumed
        """
        line = self.lines[self.row]
        if is_printable(key):
            self.lines[self.row] = line[: self.col] + chr(key) + line[self.col :]
            self.col += 1
            return True
        if key == KEY_TAB and allow_tab:
            self.lines[self.row] = line[: self.col] + TAB_SPACES + line[self.col :]
            self.col += len(TAB_SPACES)
            return True
        if key in KEY_ENTER_CODES:
            self.lines[self.row] = line[: self.col]
            self.lines.insert(self.row + 1, line[self.col :])
            self.row += 1
            self.col = 0
            return True
        if key in KEY_BACKSPACE_CODES:
            if self.col > 0:
                self.lines[self.row] = line[: self.col - 1] + line[self.col :]
                self.col -= 1
            elif self.row > 0:
                previous = self.lines[self.row - 1]
                self.lines[self.row - 1] = previous + line
                del self.lines[self.row]
                self.row -= 1
                self.col = len(previous)
            return True
        if key == curses.KEY_DC:
            if self.col < len(line):
                self.lines[self.row] = line[: self.col] + line[self.col + 1 :]
            elif self.row + 1 < len(self.lines):
                self.lines[self.row] = line + self.lines.pop(self.row + 1)
            return True
        if key == curses.KEY_LEFT:
            if self.col > 0:
                self.col -= 1
            elif self.row > 0:
                self.row -= 1
                self.col = len(self.lines[self.row])
            return True
        if key == curses.KEY_RIGHT:
            if self.col < len(line):
                self.col += 1
            elif self.row + 1 < len(self.lines):
                self.row += 1
                self.col = 0
            return True
        if key == curses.KEY_UP:
            if self.row > 0:
                self.row -= 1
                self.col = min(self.col, len(self.lines[self.row]))
            return True
        if key == curses.KEY_DOWN:
            if self.row + 1 < len(self.lines):
                self.row += 1
                self.col = min(self.col, len(self.lines[self.row]))
            return True
        return False

    def render_lines(self, width: int, height: int, focused: bool = True) -> list[str]:
        """Return the visible window of the buffer.

        Args:
            width: Available width
            height: Number of text rows available
            focused: Draw the cursor mark

        Returns:
            Rendered rows, each prefixed with a gutter
        """
        height = max(1, height)
        if self.row < self.scroll:
            self.scroll = self.row
        elif self.row >= self.scroll + height:
            self.scroll = self.row - height + 1

        out: list[str] = []
        for idx in range(self.scroll, min(len(self.lines), self.scroll + height)):
            text = self.lines[idx]
            if focused and idx == self.row:
                text = text[: self.col] + "_" + text[self.col :]
            out.append(f"  │ {text}"[:width])
        return out
