"""Configuration loading.

Precedence, lowest to highest: config file < environment < command line.
Each value is overridden independently.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from flagdash.config.loader import (
    ConfigError,
    ConfigStore,
    apply_cli_overrides,
    apply_env_overrides,
    load_config,
    save_config,
)
from flagdash.config.schema import AppConfig, KeyTier
from flagdash.paths import CONFIG_PATH


def load_env_file(path: Optional[Path] = None) -> None:
    """Load a .env file (FLAGDASH_ENV_PATH or ./.env) without clobbering real env vars."""
    env_path = os.getenv("FLAGDASH_ENV_PATH")
    dotenv_path = path or (Path(env_path).expanduser() if env_path else Path.cwd() / ".env")
    load_dotenv(dotenv_path, override=False)


def resolve_config_path(cli_path: Optional[str] = None) -> Path:
    if cli_path:
        return Path(cli_path).expanduser()
    env_path = os.getenv("FLAGDASH_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return CONFIG_PATH


__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigStore",
    "KeyTier",
    "apply_cli_overrides",
    "apply_env_overrides",
    "load_config",
    "load_env_file",
    "resolve_config_path",
    "save_config",
]
