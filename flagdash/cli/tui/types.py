"""Shared TUI types."""

from __future__ import annotations

import curses
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias


class NotificationLevel(str, Enum):
    """Notification severity levels."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class SidebarSection(str, Enum):
    """Top-level sections reachable from the section tabs."""

    DASHBOARD = "dashboard"
    FLAGS = "flags"
    CONFIGS = "configs"
    AI_CONFIGS = "ai_configs"
    WEBHOOKS = "webhooks"
    ENVIRONMENTS = "environments"


class ViewKind(str, Enum):
    """Screen identifiers. Keyed kinds carry a resource key in `View.key`."""

    LOGIN = "login"
    PROJECT_PICKER = "project_picker"
    DASHBOARD = "dashboard"
    FLAG_LIST = "flag_list"
    FLAG_DETAIL = "flag_detail"
    FLAG_CREATE = "flag_create"
    FLAG_EDIT = "flag_edit"
    FLAG_TOGGLE = "flag_toggle"
    FLAG_ROLLOUT = "flag_rollout"
    FLAG_RULES = "flag_rules"
    FLAG_VARIATIONS = "flag_variations"
    FLAG_SCHEDULES = "flag_schedules"
    CONFIG_LIST = "config_list"
    CONFIG_DETAIL = "config_detail"
    CONFIG_CREATE = "config_create"
    CONFIG_EDIT = "config_edit"
    CONFIG_VALUE_EDITOR = "config_value_editor"
    AI_CONFIG_LIST = "ai_config_list"
    AI_CONFIG_DETAIL = "ai_config_detail"
    AI_CONFIG_CREATE = "ai_config_create"
    AI_CONFIG_EDIT = "ai_config_edit"
    WEBHOOK_LIST = "webhook_list"
    WEBHOOK_DETAIL = "webhook_detail"
    WEBHOOK_CREATE = "webhook_create"
    WEBHOOK_EDIT = "webhook_edit"
    ENVIRONMENT_LIST = "environment_list"


class LoginPhase(str, Enum):
    """Device-authorization login screen phases."""

    IDLE = "idle"
    WAITING = "waiting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class KeyEvent:
    """A single key press as returned by getch()."""

    key: int


@dataclass(frozen=True)
class ResizeEvent:
    """Terminal was resized."""


@dataclass(frozen=True)
class TickEvent:
    """Periodic timer tick."""


Event: TypeAlias = KeyEvent | ResizeEvent | TickEvent

# Key codes
KEY_ENTER_CODES = (curses.KEY_ENTER, 10, 13)
KEY_BACKSPACE_CODES = (curses.KEY_BACKSPACE, 127, 8)
KEY_ESCAPE = 27
KEY_TAB = 9
KEY_CTRL_S = 19

CursesWindow: TypeAlias = curses.window
