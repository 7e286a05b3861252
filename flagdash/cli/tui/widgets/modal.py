"""Modal overlays: confirmation dialog and environment switcher."""

from __future__ import annotations

import curses

from flagdash.cli.models import Environment
from flagdash.cli.tui.actions import (
    ConfirmAccepted,
    ConfirmAction,
    ConfirmDismissed,
    EnvironmentSwitched,
    EnvironmentSwitcherDismissed,
    confirm_message,
)
from flagdash.cli.tui.types import KEY_ENTER_CODES, KEY_ESCAPE, KEY_TAB, CursesWindow


def draw_modal(stdscr: CursesWindow, title: str, body: list[str], highlight: int | None = None) -> None:
    """Draw a centered bordered box over the current frame.

    Args:
        stdscr: Curses screen object
        title: Text set into the top border
        body: Content rows
        highlight: Index into body to draw reversed
    """
    height, width = stdscr.getmaxyx()
    modal_w = max(40, len(title) + 6, max((len(line) for line in body), default=0) + 6)
    modal_w = min(modal_w, width - 4)  # Don't exceed screen
    modal_h = len(body) + 4
    start_y = max(0, (height - modal_h) // 2)
    start_x = max(0, (width - modal_w) // 2)
    inner_w = modal_w - 2

    try:
        top = f"┏━ {title} " + "━" * max(0, modal_w - len(title) - 5) + "┓"
        stdscr.addstr(start_y, start_x, top[:modal_w], curses.A_BOLD)
        stdscr.addstr(start_y + 1, start_x, "┃" + " " * inner_w + "┃", curses.A_BOLD)
        for i, line in enumerate(body):
            row = start_y + 2 + i
            stdscr.addstr(row, start_x, "┃", curses.A_BOLD)
            attr = curses.A_REVERSE if i == highlight else curses.A_NORMAL
            stdscr.addstr(row, start_x + 1, f"  {line}".ljust(inner_w)[:inner_w], attr)
            stdscr.addstr(row, start_x + modal_w - 1, "┃", curses.A_BOLD)
        stdscr.addstr(start_y + modal_h - 2, start_x, "┃" + " " * inner_w + "┃", curses.A_BOLD)
        stdscr.addstr(start_y + modal_h - 1, start_x, "┗" + "━" * inner_w + "┛", curses.A_BOLD)
    except curses.error:
        pass


class ConfirmDialog:
    """Yes/No dialog for one pending irreversible operation."""

    def __init__(self) -> None:
        self.visible = False
        self.message = ""
        self.selected_yes = False

    def show(self, action: ConfirmAction) -> None:
        self.visible = True
        self.message = confirm_message(action)
        self.selected_yes = False

    def hide(self) -> None:
        self.visible = False
        self.message = ""

    def handle_key(self, key: int) -> ConfirmAccepted | ConfirmDismissed | None:
        """Handle key press while visible.

        Y accepts, N/Esc dismiss, Left/Right/Tab move the selection and
        Enter follows it.
        """
        if key in (curses.KEY_LEFT, curses.KEY_RIGHT, KEY_TAB):
            self.selected_yes = not self.selected_yes
            return None
        if key in (ord("y"), ord("Y")):
            self.hide()
            return ConfirmAccepted()
        if key in (ord("n"), ord("N"), KEY_ESCAPE):
            self.hide()
            return ConfirmDismissed()
        if key in KEY_ENTER_CODES:
            accepted = self.selected_yes
            self.hide()
            return ConfirmAccepted() if accepted else ConfirmDismissed()
        return None

    def get_render_lines(self) -> list[str]:
        yes = "[ Yes ]" if self.selected_yes else "  Yes  "
        no = "  No  " if self.selected_yes else "[ No ]"
        return [self.message, "", f"{yes}    {no}", "", "y/n · ←/→ select · Enter confirm"]

    def render(self, stdscr: CursesWindow) -> None:
        if self.visible:
            draw_modal(stdscr, "Confirm", self.get_render_lines())


class EnvironmentSwitcher:
    """Overlay listing the project's environments."""

    def __init__(self) -> None:
        self.visible = False
        self.loading = False
        self.environments: list[Environment] = []
        self.selected = 0
        self.current_id = ""

    def show(self, current_id: str) -> None:
        self.visible = True
        self.loading = True
        self.environments = []
        self.selected = 0
        self.current_id = current_id

    def hide(self) -> None:
        self.visible = False
        self.loading = False

    def set_environments(self, environments: list[Environment]) -> None:
        """Fill the list and pre-select the current environment."""
        self.environments = environments
        self.loading = False
        self.selected = 0
        for i, env in enumerate(environments):
            if env.id == self.current_id:
                self.selected = i
                break

    def handle_key(self, key: int) -> EnvironmentSwitched | EnvironmentSwitcherDismissed | None:
        """Handle key press while visible. Only Esc works while loading."""
        if key == KEY_ESCAPE:
            self.hide()
            return EnvironmentSwitcherDismissed()
        if self.loading:
            return None
        if key in (curses.KEY_UP, ord("k")):
            self.selected = max(0, self.selected - 1)
        elif key in (curses.KEY_DOWN, ord("j")):
            self.selected = min(max(0, len(self.environments) - 1), self.selected + 1)
        elif key in KEY_ENTER_CODES and self.environments:
            env = self.environments[self.selected]
            self.hide()
            return EnvironmentSwitched(environment_id=env.id, environment_name=env.name)
        return None

    def get_render_lines(self) -> list[str]:
        if self.loading:
            return ["Loading environments…"]
        if not self.environments:
            return ["No environments found"]
        lines = []
        for env in self.environments:
            current = " (current)" if env.id == self.current_id else ""
            lines.append(f"{env.name} [{env.slug}]{current}")
        return lines

    def render(self, stdscr: CursesWindow) -> None:
        if not self.visible:
            return
        highlight = None if self.loading or not self.environments else self.selected
        draw_modal(stdscr, "Switch environment", self.get_render_lines(), highlight)
