from __future__ import annotations

from pathlib import Path

FLAGDASH_HOME = Path("~/.flagdash").expanduser()
CONFIG_PATH = FLAGDASH_HOME / "config.yml"
LOG_DIR = FLAGDASH_HOME / "logs"
LOG_PATH = LOG_DIR / "flagdash.log"
