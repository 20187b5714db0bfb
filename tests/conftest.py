"""Shared test fixtures and factories."""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from rich.logging import RichHandler

from bulletin.announcements import (
    AnnouncementEntry,
    AnnouncementService,
    AnnouncementStore,
)
from bulletin.config.paths import ENV_VAR, get_bulletin_home
from bulletin.db.engine import Database
from bulletin.db.models import Base
from bulletin.logging import JSONLHandler
from bulletin.revisions import RevisionStore
from bulletin.scheduling import Scheduler, ThrottledScheduler

# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, tmp_path: Path) -> Generator[Path, None, None]:
    """Point BULLETIN_HOME at a temporary directory for every test."""
    home = tmp_path / "bulletin-home"
    monkeypatch.setenv(ENV_VAR, str(home))
    monkeypatch.delenv("BULLETIN_DATABASE_URL", raising=False)
    monkeypatch.delenv("BULLETIN_LOG_LEVEL", raising=False)
    get_bulletin_home.cache_clear()
    yield home
    get_bulletin_home.cache_clear()


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """Undo configure_logging() calls made by CLI commands under test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        # pytest's capture handlers subclass StreamHandler, so match exactly
        if (
            isinstance(handler, RichHandler | JSONLHandler)
            or type(handler) is logging.StreamHandler
        ):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config_toml_content(tmp_path: Path) -> str:
    """Valid TOML config content."""
    return f"""
[database]
path = "{tmp_path / "configured.db"}"

[scheduler]
interval_seconds = 30
poll_interval = 5

[revisions]
page_size = 10
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Create a temporary test database."""
    db_path = tmp_path / "test.db"
    db = Database(database_path=db_path)
    await db.connect()

    # Create all tables
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield db

    await db.disconnect()


@pytest.fixture
def announcement_store(database: Database) -> AnnouncementStore:
    return AnnouncementStore(database)


@pytest.fixture
def revision_store(database: Database) -> RevisionStore:
    return RevisionStore(database)


@pytest.fixture
def service(
    announcement_store: AnnouncementStore, revision_store: RevisionStore
) -> AnnouncementService:
    return AnnouncementService(announcement_store, revision_store)


@pytest.fixture
def scheduler(announcement_store: AnnouncementStore) -> Scheduler:
    return Scheduler(announcement_store)


# =============================================================================
# Clock Fixtures
# =============================================================================


@pytest.fixture
def now() -> datetime:
    """Fixed wall-clock time for sweeps."""
    return datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def throttled(scheduler: Scheduler, clock: FakeClock) -> ThrottledScheduler:
    return ThrottledScheduler(scheduler, interval_seconds=60, clock=clock)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_announcement(
    announcement_store: AnnouncementStore,
) -> Callable[..., Awaitable[AnnouncementEntry]]:
    """Factory inserting an announcement with a unique slug."""
    counter = 0

    async def factory(**overrides):
        nonlocal counter
        counter += 1
        fields = {
            "title": f"Announcement {counter}",
            "slug": f"announcement-{counter}",
            "content": f"Body of announcement {counter}",
        }
        fields.update(overrides)
        return await announcement_store.create(**fields)

    return factory


# =============================================================================
# CLI Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
