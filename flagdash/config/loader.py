import logging
import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError

from flagdash.config.schema import AppConfig

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration could not be read or written."""


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Path) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if model.model_extra:
        logger.warning("Unknown keys in %s at %s: %s", path, config_path, list(model.model_extra.keys()))

    for field_name, field_value in model.__dict__.items():
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)


def load_config(path: Path) -> AppConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Path to the config.yml file.

    Returns:
        The validated configuration model. Defaults when the file is missing
        or unreadable.
    """
    if not path.exists():
        return AppConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to read config file %s: %s", path, e)
        return AppConfig()

    try:
        model = AppConfig.model_validate(raw)
    except ValidationError as e:
        logger.warning("Invalid config file %s, using defaults: %s", path, e)
        return AppConfig()
    _warn_unknown_keys(model, "root", path)
    return model


def save_config(config: AppConfig, path: Path) -> None:
    """Write configuration atomically with owner-only permissions.

    Raises:
        ConfigError: If the file cannot be written
    """
    data = config.model_dump(mode="json", exclude_none=True)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=".config.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=False)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise ConfigError(f"Failed to write config file {path}: {e}") from e


def apply_env_overrides(config: AppConfig, environ: Mapping[str, str]) -> AppConfig:
    """Override file values with FLAGDASH_* environment variables."""
    token = environ.get("FLAGDASH_SESSION_TOKEN") or environ.get("FLAGDASH_API_KEY")
    if token:
        config.auth.session_token = token
    if environ.get("FLAGDASH_BASE_URL"):
        config.connection.base_url = environ["FLAGDASH_BASE_URL"].rstrip("/")
    if environ.get("FLAGDASH_PROJECT_ID"):
        config.defaults.project_id = environ["FLAGDASH_PROJECT_ID"]
    if environ.get("FLAGDASH_ENVIRONMENT_ID"):
        config.defaults.environment_id = environ["FLAGDASH_ENVIRONMENT_ID"]
    return config


def apply_cli_overrides(
    config: AppConfig,
    *,
    session_token: Optional[str] = None,
    base_url: Optional[str] = None,
    project_id: Optional[str] = None,
    environment_id: Optional[str] = None,
) -> AppConfig:
    """Override file and environment values with command-line flags."""
    if session_token:
        config.auth.session_token = session_token
    if base_url:
        config.connection.base_url = base_url.rstrip("/")
    if project_id:
        config.defaults.project_id = project_id
    if environment_id:
        config.defaults.environment_id = environment_id
    return config


class ConfigStore:
    """Load/save of credentials and last-used project/environment."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> AppConfig:
        return load_config(self.path)

    def save(self, config: AppConfig) -> None:
        save_config(config, self.path)
        logger.debug("Saved config to %s", self.path)

    def clear_credentials(self, config: AppConfig) -> None:
        config.clear_auth()
