"""FlagDash logging configuration.

The dashboard owns the terminal through curses, so log records never go to
stdout/stderr. They are written to a rotating file (default:
`~/.flagdash/logs/flagdash.log`). Level comes from `FLAGDASH_LOG_LEVEL` unless
overridden on the command line.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from flagdash.paths import LOG_PATH

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> None:
    """Configure FlagDash logging.

    Args:
        level: Optional override for `FLAGDASH_LOG_LEVEL`.
        log_file: Optional override for the log file location.
    """
    if level:
        os.environ["FLAGDASH_LOG_LEVEL"] = level
    level_name = os.environ.get("FLAGDASH_LOG_LEVEL", "DEBUG").upper()

    path = log_file or LOG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger("flagdash")
    root.setLevel(getattr(logging, level_name, logging.DEBUG))
    root.propagate = False
    if any(isinstance(handler, RotatingFileHandler) for handler in root.handlers):
        return

    handler = RotatingFileHandler(
        str(path),
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root.addHandler(handler)
