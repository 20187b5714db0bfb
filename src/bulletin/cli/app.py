"""Main CLI application."""

import typer

from bulletin.cli.commands import config, database, revisions, scheduler

app = typer.Typer(
    name="bulletin",
    help="Bulletin - announcement scheduling and revision history",
    no_args_is_help=True,
)

scheduler.register(app)
revisions.register(app)
database.register(app)
config.register(app)


if __name__ == "__main__":
    app()
