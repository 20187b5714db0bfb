"""Configuration management commands."""

from pathlib import Path
from typing import Annotated

import typer

from bulletin.cli.console import console, error, success


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        ctx: typer.Context,
        action: Annotated[
            str | None,
            typer.Argument(help="Action: show, validate"),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $BULLETIN_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Manage configuration."""
        if action is None:
            typer.echo(ctx.get_help())
            raise typer.Exit(0)

        from pydantic import ValidationError
        from rich.syntax import Syntax

        from bulletin.cli.console import create_table
        from bulletin.config import ConfigError, load_config
        from bulletin.config.paths import get_config_path
        from bulletin.logging import redact

        expanded_path = path.expanduser() if path else get_config_path()

        if action == "show":
            if not expanded_path.exists():
                error(f"Config file not found: {expanded_path}")
                console.print("Built-in defaults are in effect")
                raise typer.Exit(1)

            # Display raw TOML with syntax highlighting, secrets masked
            content = redact(expanded_path.read_text())
            syntax = Syntax(content, "toml", theme="monokai", line_numbers=True)
            console.print(f"[bold]Config file: {expanded_path}[/bold]\n")
            console.print(syntax)

        elif action == "validate":
            if not expanded_path.exists():
                error(f"Config file not found: {expanded_path}")
                raise typer.Exit(1)

            try:
                config_obj = load_config(expanded_path)
            except ConfigError as e:
                error(str(e))
                raise typer.Exit(1) from None
            except ValidationError as e:
                error("Configuration validation failed:")
                console.print()
                for err in e.errors():
                    loc = ".".join(str(x) for x in err["loc"])
                    console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
                raise typer.Exit(1) from None

            table = create_table(
                "Configuration Summary", [("Setting", "cyan"), ("Value", "green")]
            )
            table.add_row("Database", redact(config_obj.database.resolve_url()))
            table.add_row(
                "Sweep interval", f"{config_obj.scheduler.interval_seconds:g}s"
            )
            table.add_row("Watcher poll", f"{config_obj.scheduler.poll_interval:g}s")
            table.add_row("History page size", str(config_obj.revisions.page_size))
            table.add_row(
                "Version retry attempts", str(config_obj.revisions.max_attempts)
            )
            table.add_row("Log level", config_obj.logging.level or "[dim]env/INFO[/dim]")
            table.add_row(
                "Log files",
                "enabled" if config_obj.logging.to_file else "[dim]disabled[/dim]",
            )

            success("Configuration is valid!")
            console.print()
            console.print(table)

        else:
            error(f"Unknown action: {action}")
            console.print("Valid actions: show, validate")
            raise typer.Exit(1)
