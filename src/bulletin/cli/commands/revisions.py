"""Revision history commands."""

from __future__ import annotations

from typing import Annotated

import typer

from bulletin.cli.console import (
    ConfigOption,
    confirm_or_cancel,
    console,
    create_table,
    dim,
    format_timestamp,
    success,
)
from bulletin.revisions import RevisionComparison, RevisionHistory


def _preview(text: str | None, length: int = 40) -> str:
    if not text:
        return "[dim]-[/dim]"
    text = " ".join(text.split())
    return text if len(text) <= length else text[: length - 3] + "..."


def _print_history(announcement_id: str, history: RevisionHistory) -> None:
    if not history.revisions:
        dim(f"No revisions for {announcement_id}")
        return

    table = create_table(
        f"Revisions for {announcement_id}",
        [
            ("Version", {"justify": "right", "style": "cyan"}),
            ("ID", "dim"),
            ("Type", ""),
            ("Title", "bold"),
            ("Summary", ""),
            ("Author", ""),
            ("Created", "dim"),
        ],
    )
    for revision in history.revisions:
        table.add_row(
            str(revision.version),
            revision.id,
            revision.change_type.value,
            _preview(revision.title),
            revision.change_summary or "[dim]-[/dim]",
            revision.author_id,
            format_timestamp(revision.created_at),
        )
    console.print(table)

    shown_to = history.offset + len(history.revisions)
    dim(f"Showing {history.offset + 1}-{shown_to} of {history.total}")
    if history.has_more:
        dim(f"More available: --offset {shown_to}")


def _print_comparison(comparison: RevisionComparison) -> None:
    a, b = comparison.revision_a, comparison.revision_b
    table = create_table(
        f"Version {a.version} vs version {b.version}",
        [("Field", "cyan"), ("Changed", ""), (f"v{a.version}", ""), (f"v{b.version}", "")],
    )
    changes = comparison.changes
    for field_name, changed in (
        ("title", changes.title),
        ("content", changes.content),
        ("excerpt", changes.excerpt),
        ("image_path", changes.image_path),
    ):
        table.add_row(
            field_name,
            "[yellow]yes[/yellow]" if changed else "[dim]no[/dim]",
            _preview(getattr(a, field_name)),
            _preview(getattr(b, field_name)),
        )
    console.print(table)
    if not changes.any:
        dim("Revisions are identical")


def register(app: typer.Typer) -> None:
    """Register the revisions command group."""
    revisions_app = typer.Typer(help="Announcement revision history")

    @revisions_app.command("history")
    def history(
        announcement_id: Annotated[str, typer.Argument(help="Announcement ID")],
        limit: Annotated[
            int | None,
            typer.Option("--limit", "-n", help="Revisions per page", min=1),
        ] = None,
        offset: Annotated[
            int,
            typer.Option("--offset", help="Revisions to skip", min=0),
        ] = 0,
        config_path: ConfigOption = None,
    ) -> None:
        """List revisions of an announcement, newest first."""
        from bulletin.cli.context import bootstrap, open_runtime, run_async

        config = bootstrap(config_path)
        page_size = limit or config.revisions.page_size

        async def do_history() -> RevisionHistory:
            async with open_runtime(config) as runtime:
                return await runtime.revisions.get_history(
                    announcement_id, limit=page_size, offset=offset
                )

        _print_history(announcement_id, run_async(do_history()))

    @revisions_app.command("restore")
    def restore(
        revision_id: Annotated[str, typer.Argument(help="Revision ID to restore")],
        author: Annotated[
            str,
            typer.Option("--author", "-a", help="User performing the restore"),
        ],
        force: Annotated[
            bool,
            typer.Option("--force", "-f", help="Skip confirmation"),
        ] = False,
        config_path: ConfigOption = None,
    ) -> None:
        """Restore an announcement to a previous revision."""
        from bulletin.cli.context import bootstrap, open_runtime, run_async

        config = bootstrap(config_path)

        async def load_target():
            async with open_runtime(config) as runtime:
                return await runtime.revisions.get_revision(revision_id)

        target = run_async(load_target())
        if not confirm_or_cancel(
            f"Restore announcement {target.announcement_id} "
            f"to version {target.version}?",
            force,
        ):
            raise typer.Exit(0)

        async def do_restore():
            async with open_runtime(config) as runtime:
                return await runtime.revisions.restore_revision(revision_id, author)

        restored = run_async(do_restore())
        success(f"Restored '{restored.title}' to version {target.version}")

    @revisions_app.command("compare")
    def compare(
        revision_a: Annotated[str, typer.Argument(help="First revision ID")],
        revision_b: Annotated[str, typer.Argument(help="Second revision ID")],
        config_path: ConfigOption = None,
    ) -> None:
        """Show which fields differ between two revisions."""
        from bulletin.cli.context import bootstrap, open_runtime, run_async

        config = bootstrap(config_path)

        async def do_compare() -> RevisionComparison:
            async with open_runtime(config) as runtime:
                return await runtime.revisions.compare_revisions(
                    revision_a, revision_b
                )

        _print_comparison(run_async(do_compare()))

    app.add_typer(revisions_app, name="revisions")
