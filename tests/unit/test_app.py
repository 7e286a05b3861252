"""Unit tests for the frame loop, frame layout and the command-line entry point."""

# type: ignore - test uses a mocked curses window

import curses
from unittest.mock import MagicMock

import pytest

from flagdash.cli import main as cli_main
from flagdash.cli.tui.actions import DeleteFlag, Quit
from flagdash.cli.tui.app import FlagDashApp
from flagdash.cli.tui.navigation import DASHBOARD, LOGIN, View
from flagdash.cli.tui.types import KeyEvent, TickEvent, ViewKind
from flagdash.config import AppConfig, save_config
from tests.factories import make_state

pytestmark = pytest.mark.unit


@pytest.fixture
def stdscr(monkeypatch):
    """Curses window double with a 40x120 screen."""
    monkeypatch.setattr(curses, "color_pair", lambda n: 0)
    window = MagicMock()
    window.getmaxyx.return_value = (40, 120)
    window.getch.return_value = -1
    return window


def _drawn(window) -> list[tuple]:
    return [c.args for c in window.addstr.call_args_list]


@pytest.mark.asyncio
async def test_key_becomes_queued_action(tmp_path):
    """Keys are routed to actions, which the drain applies."""
    state = make_state(tmp_path)
    state.view = DASHBOARD
    app = FlagDashApp(state)

    app.handle_event(KeyEvent(ord("q")))
    assert app.queue.qsize() == 1
    assert app.drain() == 1
    assert state.running is False


@pytest.mark.asyncio
async def test_read_input_maps_resize_and_stops_at_no_key(tmp_path, stdscr):
    """getch() is drained until it reports no input."""
    state = make_state(tmp_path)
    state.view = DASHBOARD
    app = FlagDashApp(state)
    stdscr.getch.side_effect = [curses.KEY_RESIZE, ord("q"), -1]

    app._read_input(stdscr)

    assert app.queue.get_nowait() == Quit()
    assert app.queue.empty()


@pytest.mark.asyncio
async def test_ticks_are_rate_limited(tmp_path):
    """At most one tick per interval reaches the router."""
    state = make_state(tmp_path)
    app = FlagDashApp(state)
    seen = []
    app.handle_event = seen.append

    app._maybe_tick(10.0)
    app._maybe_tick(10.1)
    app._maybe_tick(10.3)

    assert seen == [TickEvent(), TickEvent()]


@pytest.mark.asyncio
async def test_login_frame_has_no_chrome(tmp_path, stdscr):
    """The login screen draws its content from the top, without tabs."""
    state = make_state(tmp_path)
    state.view = LOGIN
    app = FlagDashApp(state)

    app.render(stdscr)

    drawn = _drawn(stdscr)
    assert (1, 1, "FlagDash") == drawn[0][:3]
    assert not any("[1] Dashboard" in str(args[2]) for args in drawn if len(args) > 2)
    stdscr.refresh.assert_called_once()


@pytest.mark.asyncio
async def test_main_frame_layout_and_overlays(tmp_path, stdscr):
    """Header, tabs, content, toast, status bar and confirm dialog are all drawn."""
    state = make_state(tmp_path)
    state.view = DASHBOARD
    state.notify("Flag created")
    state.confirm.show(DeleteFlag("beta"))
    app = FlagDashApp(state)

    app.render(stdscr)

    texts = [str(args[2]) for args in _drawn(stdscr) if len(args) > 2]
    assert "FlagDash" in texts
    assert " [1] Dashboard " in texts
    assert any("Flag created" in text for text in texts)
    assert any("Delete flag 'beta'?" in text for text in texts)
    assert (5, 1, "Dashboard") in [args[:3] for args in _drawn(stdscr)]
    assert state.status_bar.hints == state.dashboard.get_hints()


@pytest.mark.asyncio
async def test_editor_waiting_for_data_shows_loading(tmp_path, stdscr):
    """An edit screen without its form yet shows a placeholder and the Esc hint."""
    state = make_state(tmp_path)
    state.view = View(ViewKind.FLAG_EDIT, "beta")
    app = FlagDashApp(state)

    app.render(stdscr)

    assert (5, 1, "Loading…") in [args[:3] for args in _drawn(stdscr)]
    assert state.status_bar.hints == "Esc back"


@pytest.mark.asyncio
async def test_run_stops_on_quit_and_shuts_down(tmp_path, stdscr):
    """Esc on the idle login screen quits the loop cleanly."""
    state = make_state(tmp_path, token="", role="")
    app = FlagDashApp(state)
    keys = iter([27])
    stdscr.getch.side_effect = lambda: next(keys, -1)

    await app.run(stdscr)

    assert state.running is False
    assert state.view == LOGIN
    assert app.dispatcher.pending == 0


def test_cli_flags_override_environment_and_file(tmp_path, monkeypatch):
    """Command line beats FLAGDASH_* variables, which beat the file."""
    path = tmp_path / "config.yml"
    config = AppConfig()
    config.defaults.project_id = "from-file"
    config.defaults.environment_id = "env-file"
    save_config(config, path)
    monkeypatch.setenv("FLAGDASH_PROJECT_ID", "from-env")
    monkeypatch.setenv("FLAGDASH_SESSION_TOKEN", "session_env")
    monkeypatch.delenv("FLAGDASH_ENVIRONMENT_ID", raising=False)

    args = cli_main.build_parser().parse_args(["--config", str(path), "--api-key", "management_cli"])
    loaded, store = cli_main.load_startup_config(args)

    assert store.path == path
    assert loaded.auth.session_token == "management_cli"
    assert loaded.defaults.project_id == "from-env"
    assert loaded.defaults.environment_id == "env-file"


def test_main_impl_runs_tui_with_resolved_state(tmp_path, monkeypatch):
    """The entry point wires config into the TUI and returns 0."""
    started = []
    monkeypatch.setattr(cli_main, "load_env_file", lambda: None)
    monkeypatch.setattr(cli_main, "setup_logging", lambda level=None: None)
    monkeypatch.setattr(cli_main, "run_tui", started.append)

    code = cli_main._main_impl(["--config", str(tmp_path / "c.yml"), "--base-url", "http://localhost:4000/"])

    assert code == 0
    assert started[0].config.connection.base_url == "http://localhost:4000"
    assert started[0].config_store.path == tmp_path / "c.yml"


def test_main_impl_reraises_tui_crash(tmp_path, monkeypatch):
    """A crash inside the TUI is logged and propagated."""
    monkeypatch.setattr(cli_main, "load_env_file", lambda: None)
    monkeypatch.setattr(cli_main, "setup_logging", lambda level=None: None)

    def crash(state):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli_main, "run_tui", crash)

    with pytest.raises(RuntimeError, match="boom"):
        cli_main._main_impl(["--config", str(tmp_path / "c.yml")])


def test_version_flag(capsys):
    """--version prints the package version and exits."""
    with pytest.raises(SystemExit) as excinfo:
        cli_main.build_parser().parse_args(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("flagdash ")


def test_keyboard_interrupt_exits_130(monkeypatch):
    """Ctrl+C outside curses exits with the conventional status."""

    def interrupted():
        raise KeyboardInterrupt

    monkeypatch.setattr(cli_main, "_main_impl", interrupted)

    with pytest.raises(SystemExit) as excinfo:
        cli_main.main()
    assert excinfo.value.code == 130
