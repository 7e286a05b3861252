"""flagdash: terminal dashboard for the FlagDash management API."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from flagdash import __version__
from flagdash.cli.tui.app import run_tui
from flagdash.cli.tui.state import AppState
from flagdash.config import (
    AppConfig,
    ConfigStore,
    apply_cli_overrides,
    apply_env_overrides,
    load_env_file,
    resolve_config_path,
)
from flagdash.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flagdash", description="Terminal dashboard for FlagDash.")
    parser.add_argument("--session-token", default=None, help="Session token (overrides config and env).")
    # Legacy alias, stored as the session token.
    parser.add_argument("--api-key", default=None, help=argparse.SUPPRESS)
    parser.add_argument("--base-url", default=None, help="API base URL.")
    parser.add_argument("--project-id", default=None, help="Project to open.")
    parser.add_argument("--environment-id", default=None, help="Environment to open.")
    parser.add_argument("--config", default=None, help="Config file path (default: ~/.flagdash/config.yml).")
    parser.add_argument("--log-level", default=None, help="Log level (default: FLAGDASH_LOG_LEVEL or DEBUG).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_startup_config(args: argparse.Namespace) -> tuple[AppConfig, ConfigStore]:
    """Resolve config with precedence file < environment < command line."""
    store = ConfigStore(resolve_config_path(args.config))
    config = store.load()
    apply_env_overrides(config, os.environ)
    apply_cli_overrides(
        config,
        session_token=args.session_token or args.api_key,
        base_url=args.base_url,
        project_id=args.project_id,
        environment_id=args.environment_id,
    )
    return config, store


def _main_impl(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_env_file()
    setup_logging(args.log_level)
    config, store = load_startup_config(args)
    logger.info("Starting flagdash %s against %s", __version__, config.connection.base_url)

    try:
        run_tui(AppState(config=config, config_store=store))
    except Exception:
        logger.exception("TUI crashed")
        raise
    return 0


def main() -> None:
    try:
        sys.exit(_main_impl())
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
