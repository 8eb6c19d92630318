"""Runtime configuration read from the environment.

Settings are read once at startup (by ``create_app_context`` or the CLI) and
passed down explicitly; nothing below reads the environment on its own.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DB_PATH_ENV = "POCKETLEDGER_DB_PATH"
DATA_CLEAR_ENV = "POCKETLEDGER_DATA_CLEAR"
LOG_LEVEL_ENV = "POCKETLEDGER_LOG_LEVEL"

DEFAULT_DB_DIR = Path.home() / ".pocketledger"
DEFAULT_DB_NAME = "pocketledger.db"
DEFAULT_LOG_LEVEL = "INFO"

# Spending ratio (percent of budget) at which a budget shows up as an alert
BUDGET_ALERT_THRESHOLD = 90

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Process-wide settings."""

    database_path: str
    data_clear: bool = False
    log_level: str = DEFAULT_LOG_LEVEL


def parse_bool(value: Optional[str]) -> bool:
    """Interpret an environment string as a boolean flag."""
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


def default_database_path() -> str:
    """Return ~/.pocketledger/pocketledger.db, creating the directory."""
    DEFAULT_DB_DIR.mkdir(parents=True, exist_ok=True)
    return str(DEFAULT_DB_DIR / DEFAULT_DB_NAME)


def load_settings(
    database_path: Optional[str] = None,
    data_clear: Optional[bool] = None,
    log_level: Optional[str] = None,
) -> Settings:
    """Build settings, letting explicit arguments override the environment.

    Args:
        database_path: Path to SQLite database file. If None, checks
            POCKETLEDGER_DB_PATH, then defaults to ~/.pocketledger/pocketledger.db
        data_clear: Wipe every table before initializing. If None, reads
            POCKETLEDGER_DATA_CLEAR. Meant for development resets only.
        log_level: Log level name. If None, reads POCKETLEDGER_LOG_LEVEL.

    Returns:
        Settings instance
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV)
    if database_path is None:
        database_path = default_database_path()

    if data_clear is None:
        data_clear = parse_bool(os.environ.get(DATA_CLEAR_ENV))

    if log_level is None:
        log_level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)

    return Settings(database_path=database_path, data_clear=data_clear, log_level=log_level.upper())
