"""Publish/takedown sweep commands."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

import typer

from bulletin.cli.console import (
    ConfigOption,
    console,
    create_table,
    dim,
    success,
    warning,
)
from bulletin.scheduling import SweepResult


def print_sweep_result(result: SweepResult) -> None:
    if result.skipped:
        dim("Sweep skipped: another sweep ran within the throttle window")
        return

    table = create_table(
        "Sweep",
        [("Transition", "cyan"), ("Count", {"justify": "right", "style": "green"})],
    )
    table.add_row("Published", str(result.published_count))
    table.add_row("Taken down", str(result.taken_down_count))
    console.print(table)

    if result.failed_ids:
        warning(f"{len(result.failed_ids)} announcement(s) failed to update:")
        for announcement_id in result.failed_ids:
            console.print(f"  {announcement_id}")


def register(app: typer.Typer) -> None:
    """Register the sweep and watch commands."""

    @app.command()
    def sweep(
        force: Annotated[
            bool,
            typer.Option(
                "--force",
                "-f",
                help="Ignore the throttle window",
            ),
        ] = False,
        config_path: ConfigOption = None,
        verbose: Annotated[
            bool, typer.Option("--verbose", "-v", help="Enable debug logging")
        ] = False,
    ) -> None:
        """Publish due announcements and take down expired ones."""
        from bulletin.cli.context import bootstrap, open_runtime, run_async

        config = bootstrap(config_path, verbose)

        async def do_sweep() -> SweepResult:
            async with open_runtime(config) as runtime:
                return await runtime.scheduler.maybe_run(datetime.now(UTC), force=force)

        result = run_async(do_sweep())
        print_sweep_result(result)
        if result.failed_ids:
            raise typer.Exit(1)

    @app.command()
    def watch(
        config_path: ConfigOption = None,
        verbose: Annotated[
            bool, typer.Option("--verbose", "-v", help="Enable debug logging")
        ] = False,
    ) -> None:
        """Run the sweep on a timer until interrupted."""
        from bulletin.cli.context import bootstrap, open_runtime, run_async

        config = bootstrap(config_path, verbose)

        async def do_watch() -> None:
            import asyncio
            import signal

            from bulletin.scheduling import SweepWatcher

            async with open_runtime(config) as runtime:
                watcher = SweepWatcher(
                    runtime.scheduler,
                    poll_interval=config.scheduler.poll_interval,
                )

                @watcher.on_sweep
                async def report(result: SweepResult) -> None:
                    if result.changed or result.failed_ids:
                        print_sweep_result(result)

                stop_event = asyncio.Event()
                loop = asyncio.get_running_loop()
                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, stop_event.set)

                console.print(
                    f"[bold]Watching schedule[/bold] "
                    f"(poll every {config.scheduler.poll_interval:g}s, "
                    f"sweep at most every {config.scheduler.interval_seconds:g}s)"
                )
                await watcher.start()
                try:
                    await stop_event.wait()
                finally:
                    await watcher.stop()

        run_async(do_watch())
        success("Watcher stopped")
