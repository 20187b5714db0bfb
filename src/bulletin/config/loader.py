"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from bulletin.config.models import BulletinConfig, ConfigError
from bulletin.config.paths import get_config_path

DATABASE_URL_ENV = "BULLETIN_DATABASE_URL"


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("config.toml"),  # Current directory
        get_config_path(),  # ~/.bulletin/config.toml (or BULLETIN_HOME)
        Path("/etc/bulletin/config.toml"),  # System-wide
    ]


def _resolve_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment overrides that take precedence over the file."""
    if url := os.environ.get(DATABASE_URL_ENV):
        database = config.setdefault("database", {})
        database["url"] = SecretStr(url)
    return config


def load_config(path: Path | None = None) -> BulletinConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated BulletinConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigError: If the config file is not valid TOML.
        ValidationError: If the config values are invalid.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in _get_default_config_paths():
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        try:
            with config_path.open("rb") as f:
                raw_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    raw_config = _resolve_env_overrides(raw_config)

    return BulletinConfig.model_validate(raw_config)


def get_default_config() -> BulletinConfig:
    """Get a default configuration for development/testing."""
    return BulletinConfig.model_validate(_resolve_env_overrides({}))
