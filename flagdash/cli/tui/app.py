"""Main TUI application: curses frame loop on top of an asyncio event loop."""

from __future__ import annotations

import asyncio
import curses
import logging
import time

from flagdash.cli.tui.actions import Action
from flagdash.cli.tui.controller import AppController
from flagdash.cli.tui.dispatcher import Dispatcher
from flagdash.cli.tui.router import route_event
from flagdash.cli.tui.state import AppState
from flagdash.cli.tui.types import CursesWindow, Event, KeyEvent, ResizeEvent, TickEvent, ViewKind
from flagdash.cli.tui.widgets.header import Header
from flagdash.cli.tui.widgets.notification import render_notification
from flagdash.cli.tui.widgets.sidebar import Sidebar
from flagdash.cli.tui.widgets.status_bar import StatusBar

logger = logging.getLogger(__name__)

TICK_INTERVAL_S = 0.25
QUEUE_WAIT_S = 0.05
ESC_DELAY_MS = 25


def init_colors() -> None:
    """Pair 1 is red (errors, offline), pair 2 is green (success, online)."""
    try:
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, curses.COLOR_RED, -1)
        curses.init_pair(2, curses.COLOR_GREEN, -1)
    except curses.error:
        pass  # Monochrome terminal


class FlagDashApp:
    """Owns the action queue and runs input, actions and rendering in one loop."""

    def __init__(self, state: AppState):
        self.state = state
        self.queue: asyncio.Queue[Action] = asyncio.Queue()
        self.dispatcher = Dispatcher(self.queue)
        self.controller = AppController(state, self.dispatcher)
        self._last_tick = 0.0

    def handle_event(self, event: Event) -> None:
        """Route one input event; the resulting action joins the queue."""
        action = route_event(self.state, event)
        if action is not None:
            self.dispatcher.send(action)

    def drain(self) -> int:
        """Apply every queued action in arrival order. Returns how many ran."""
        count = 0
        while True:
            try:
                action = self.queue.get_nowait()
            except asyncio.QueueEmpty:
                return count
            self.controller.apply(action)
            count += 1

    async def _wait_for_actions(self) -> None:
        try:
            action = await asyncio.wait_for(self.queue.get(), timeout=QUEUE_WAIT_S)
        except asyncio.TimeoutError:
            return
        self.controller.apply(action)
        self.drain()

    def _read_input(self, stdscr: CursesWindow) -> None:
        while True:
            key = stdscr.getch()
            if key == -1:
                return
            if key == curses.KEY_RESIZE:
                self.handle_event(ResizeEvent())
            else:
                self.handle_event(KeyEvent(key))

    def _maybe_tick(self, now: float) -> None:
        if now - self._last_tick >= TICK_INTERVAL_S:
            self._last_tick = now
            self.handle_event(TickEvent())

    async def run(self, stdscr: CursesWindow) -> None:
        """Main event loop.

        Args:
            stdscr: Curses screen object
        """
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        init_colors()
        stdscr.nodelay(True)
        stdscr.keypad(True)

        self.controller.start()
        self.render(stdscr)
        try:
            while self.state.running:
                self._read_input(stdscr)
                self._maybe_tick(time.monotonic())
                self.drain()
                if not self.state.running:
                    break
                await self._wait_for_actions()
                self.render(stdscr)
        finally:
            await self.controller.shutdown()
            logger.info("TUI stopped")

    def render(self, stdscr: CursesWindow) -> None:
        """Draw one frame: header, section tabs, content, toast, status bar, overlays."""
        state = self.state
        stdscr.erase()
        height, width = stdscr.getmaxyx()
        view = state.active_view()
        kind = state.view.kind

        content_start = 0
        if kind is not ViewKind.LOGIN:
            state.header.render(stdscr, 0, width)
            content_start = Header.HEIGHT
            if kind is not ViewKind.PROJECT_PICKER:
                state.sidebar.render(stdscr, content_start, width)
                content_start += Sidebar.HEIGHT

        status_row = height - StatusBar.HEIGHT
        content_height = status_row - content_start
        if content_height > 0:
            if view is not None:
                view.render(stdscr, content_start + 1, content_height - 1, width)
            else:
                try:
                    stdscr.addstr(content_start + 1, 1, "Loading…"[: max(0, width - 2)])
                except curses.error:
                    pass

        state.status_bar.hints = view.get_hints() if view is not None else "Esc back"
        state.status_bar.render(stdscr, status_row, width)

        if state.notification is not None:
            render_notification(stdscr, state.notification, width, max(0, status_row - 3))

        state.confirm.render(stdscr)
        state.switcher.render(stdscr)

        stdscr.refresh()


def run_tui(state: AppState) -> None:
    """Run the dashboard until the user quits."""

    def _main(stdscr: CursesWindow) -> None:
        curses.set_escdelay(ESC_DELAY_MS)
        asyncio.run(FlagDashApp(state).run(stdscr))

    curses.wrapper(_main)
