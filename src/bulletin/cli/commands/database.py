"""Database management commands.

Provides commands for:
- migrate / rollback / status: manage schema migrations with alembic
- init: create the schema directly from the ORM models
"""

from __future__ import annotations

import subprocess
import sys
from typing import Annotated

import typer

from bulletin.cli.console import ConfigOption, console, error, success


def _alembic(*args: str) -> int:
    result = subprocess.run(
        [sys.executable, "-m", "alembic", *args],
        capture_output=False,
    )
    return result.returncode


def register(app: typer.Typer) -> None:
    """Register the db command group."""
    db_app = typer.Typer(help="Database management commands")

    @db_app.command("migrate")
    def db_migrate(
        revision: Annotated[
            str,
            typer.Option(
                "--revision",
                "-r",
                help="Target revision",
            ),
        ] = "head",
    ) -> None:
        """Run database migrations."""
        console.print(f"[bold]Running migrations to {revision}...[/bold]")
        if _alembic("upgrade", revision) == 0:
            success("Migrations completed successfully")
        else:
            error("Migration failed")
            raise typer.Exit(1)

    @db_app.command("rollback")
    def db_rollback(
        revision: Annotated[
            str,
            typer.Option(
                "--revision",
                "-r",
                help="Target revision",
            ),
        ] = "-1",
    ) -> None:
        """Rollback database migrations."""
        console.print(f"[bold]Rolling back to {revision}...[/bold]")
        if _alembic("downgrade", revision) == 0:
            success("Rollback completed successfully")
        else:
            error("Rollback failed")
            raise typer.Exit(1)

    @db_app.command("status")
    def db_status() -> None:
        """Show migration status."""
        console.print("[bold]Migration status:[/bold]")
        _alembic("current")
        console.print("\n[bold]Pending migrations:[/bold]")
        _alembic("history", "--indicate-current")

    @db_app.command("init")
    def db_init(config_path: ConfigOption = None) -> None:
        """Create all tables from the models (no migration history).

        Intended for development databases and installs without the
        migrations directory. Existing tables are left alone.
        """
        from bulletin.cli.context import bootstrap, open_runtime, run_async

        config = bootstrap(config_path)

        async def do_init() -> str:
            async with open_runtime(config) as runtime:
                await runtime.database.create_all()
                return runtime.database.url

        from bulletin.logging import redact

        url = run_async(do_init())
        success(f"Database initialized: {redact(url)}")

    # Register the subcommand group
    app.add_typer(db_app, name="db")
