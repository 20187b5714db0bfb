"""Configuration module."""

from bulletin.config.loader import get_default_config, load_config
from bulletin.config.models import (
    BulletinConfig,
    ConfigError,
    DatabaseConfig,
    LoggingConfig,
    RevisionsConfig,
    SchedulerConfig,
)
from bulletin.config.paths import (
    get_bulletin_home,
    get_config_path,
    get_database_path,
    get_logs_path,
)

__all__ = [
    "BulletinConfig",
    "ConfigError",
    "DatabaseConfig",
    "LoggingConfig",
    "RevisionsConfig",
    "SchedulerConfig",
    "get_bulletin_home",
    "get_config_path",
    "get_database_path",
    "get_default_config",
    "get_logs_path",
    "load_config",
]
