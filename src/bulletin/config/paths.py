"""Centralized path management for Bulletin.

All local state (config, SQLite database, logs) is stored under a single base
directory. The base directory can be overridden with the BULLETIN_HOME
environment variable.

Default locations:
- Linux/macOS: ~/.bulletin
- Windows: %USERPROFILE%\\.bulletin
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "BULLETIN_HOME"


@lru_cache(maxsize=1)
def get_bulletin_home() -> Path:
    """Get the base directory for all Bulletin data.

    Resolution order:
    1. BULLETIN_HOME environment variable (if set)
    2. Platform default (~/.bulletin)
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".bulletin"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_bulletin_home() / "config.toml"


def get_database_path() -> Path:
    """Get the default SQLite database path."""
    return get_bulletin_home() / "bulletin.db"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_bulletin_home() / "logs"


def ensure_bulletin_home() -> Path:
    """Ensure the Bulletin home directory exists."""
    home = get_bulletin_home()
    home.mkdir(parents=True, exist_ok=True)
    return home


def get_all_paths() -> dict[str, Path]:
    """Get all standard paths for debugging/display."""
    return {
        "home": get_bulletin_home(),
        "config": get_config_path(),
        "database": get_database_path(),
        "logs": get_logs_path(),
    }
