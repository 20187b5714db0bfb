"""Configuration models using Pydantic."""

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, model_validator

from bulletin.config.paths import get_database_path

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error."""

    pass


class DatabaseConfig(BaseModel):
    """Configuration for the announcement database.

    Either a full SQLAlchemy async URL or a path to a SQLite file. The URL
    takes precedence and is treated as a secret since it may carry
    credentials.
    """

    url: SecretStr | None = None
    path: Path = Field(default_factory=get_database_path)
    echo: bool = False

    def resolve_url(self) -> str:
        """Return the SQLAlchemy URL to connect with."""
        if self.url is not None:
            return self.url.get_secret_value()
        return f"sqlite+aiosqlite:///{self.path.expanduser()}"


class SchedulerConfig(BaseModel):
    """Configuration for the publish/takedown sweep."""

    # Minimum seconds between two throttled sweeps
    interval_seconds: float = Field(default=60.0, ge=0)
    # Seconds between watcher polls (the throttle still applies)
    poll_interval: float = Field(default=15.0, gt=0)


class RevisionsConfig(BaseModel):
    """Configuration for revision history."""

    page_size: int = Field(default=20, gt=0)
    # Attempts at assigning a version number before giving up on conflicts
    max_attempts: int = Field(default=3, ge=1)


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None
    to_file: bool = False
    retention_days: int = Field(default=7, ge=1)


class BulletinConfig(BaseModel):
    """Root configuration model."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    revisions: RevisionsConfig = Field(default_factory=RevisionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def _warn_slow_polling(self) -> "BulletinConfig":
        """Warn when the watcher polls less often than the throttle allows."""
        if self.scheduler.poll_interval > self.scheduler.interval_seconds > 0:
            logger.warning(
                "poll_interval (%ss) exceeds interval_seconds (%ss); "
                "sweeps will run every poll_interval",
                self.scheduler.poll_interval,
                self.scheduler.interval_seconds,
            )
        return self
