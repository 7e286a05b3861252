"""Input routing: one event in, at most one action out.

Priority, first match wins:
1. tick: expire the toast and advance the login spinner, nothing else
2. environment switcher overlay
3. confirmation overlay
4. global bindings, on main views while no inline search is capturing
5. the current view, then the section tabs for views that fall back to them
"""

from __future__ import annotations

import logging
import time

from flagdash.cli.tui.actions import Action, Back, Logout, OpenEnvironmentSwitcher, OpenProjectPicker, Quit
from flagdash.cli.tui.navigation import MAIN_KINDS, SECTION_FALLBACK_KINDS
from flagdash.cli.tui.state import AppState
from flagdash.cli.tui.types import KEY_BACKSPACE_CODES, KEY_ESCAPE, Event, KeyEvent, LoginPhase, TickEvent

logger = logging.getLogger(__name__)

GLOBAL_BINDINGS: dict[int, type[Action]] = {
    ord("q"): Quit,
    ord("E"): OpenEnvironmentSwitcher,
    ord("p"): OpenProjectPicker,
    ord("l"): Logout,
}


def on_tick(state: AppState, now: float | None = None) -> None:
    """Advance timers: drop an expired toast, spin the login spinner."""
    now = now if now is not None else time.time()
    if state.notification is not None and state.notification.is_expired(now):
        state.notification = None
    if state.login.phase is LoginPhase.WAITING:
        state.login.tick()


def global_binding(state: AppState, key: int) -> Action | None:
    """Return the global action for a key, if bindings are live on this screen."""
    if state.view.kind not in MAIN_KINDS or state.is_searching():
        return None
    factory = GLOBAL_BINDINGS.get(key)
    return factory() if factory else None


def route_event(state: AppState, event: Event) -> Action | None:
    """Translate one input event into at most one action.

    Args:
        state: Application state (overlays and views may update their own
            presentation state while handling the key)
        event: Key, resize or tick event

    Returns:
        The resulting action, or None when the event was consumed locally
    """
    if isinstance(event, TickEvent):
        on_tick(state)
        return None
    if not isinstance(event, KeyEvent):
        return None
    key = event.key

    if state.switcher.visible:
        return state.switcher.handle_key(key)
    if state.confirm.visible:
        return state.confirm.handle_key(key)

    action = global_binding(state, key)
    if action is not None:
        return action

    # Sampled before the view sees the key: Esc/Enter end the search inside it.
    searching = state.is_searching()
    view = state.active_view()
    if view is None:
        # Editor not built yet (its data is still loading).
        if key == KEY_ESCAPE or key in KEY_BACKSPACE_CODES:
            return Back()
        return None
    action = view.handle_key(key)
    if action is None and state.view.kind in SECTION_FALLBACK_KINDS and not searching:
        action = state.sidebar.handle_key(key)
    return action
