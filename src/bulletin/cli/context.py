"""Shared runtime bootstrap helpers for CLI commands."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import typer

from bulletin.announcements import AnnouncementService, AnnouncementStore
from bulletin.cli.console import console, error
from bulletin.config import BulletinConfig, ConfigError, load_config
from bulletin.db import Database
from bulletin.errors import BulletinError
from bulletin.logging import configure_logging
from bulletin.revisions import RevisionStore
from bulletin.scheduling import Scheduler, ThrottledScheduler

T = TypeVar("T")


def get_config(config_path: Path | None = None) -> BulletinConfig:
    """Load configuration, exiting with a message if it cannot be read."""
    from pydantic import ValidationError

    try:
        return load_config(config_path)
    except (FileNotFoundError, ConfigError) as e:
        error(str(e))
        raise typer.Exit(1) from None
    except ValidationError as e:
        error("Configuration validation failed:")
        for err in e.errors():
            loc = ".".join(str(x) for x in err["loc"])
            console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
        raise typer.Exit(1) from None


@dataclass(slots=True)
class Runtime:
    """Wired stores and services for CLI command handlers."""

    config: BulletinConfig
    database: Database
    announcements: AnnouncementStore
    revisions: RevisionStore
    service: AnnouncementService
    scheduler: ThrottledScheduler


def _create_database(config: BulletinConfig) -> Database:
    if config.database.url is not None:
        return Database(
            database_url=config.database.url.get_secret_value(),
            echo=config.database.echo,
        )
    return Database(
        database_path=config.database.path.expanduser(),
        echo=config.database.echo,
    )


@asynccontextmanager
async def open_runtime(config: BulletinConfig) -> AsyncIterator[Runtime]:
    """Connect to the database and build the stores on top of it."""
    database = _create_database(config)
    await database.connect()
    try:
        announcements = AnnouncementStore(database)
        revisions = RevisionStore(
            database, max_attempts=config.revisions.max_attempts
        )
        yield Runtime(
            config=config,
            database=database,
            announcements=announcements,
            revisions=revisions,
            service=AnnouncementService(announcements, revisions),
            scheduler=ThrottledScheduler(
                Scheduler(announcements),
                interval_seconds=config.scheduler.interval_seconds,
            ),
        )
    finally:
        await database.disconnect()


def bootstrap(config_path: Path | None = None, verbose: bool = False) -> BulletinConfig:
    """Load configuration and configure logging from it."""
    config = get_config(config_path)
    configure_logging(
        level="DEBUG" if verbose else config.logging.level,
        use_rich=True,
        log_to_file=config.logging.to_file,
        retention_days=config.logging.retention_days,
    )
    return config


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, turning domain errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except BulletinError as e:
        error(str(e))
        raise typer.Exit(1) from None
