"""
nextcron CLI entry point.

Modes:
    nextcron --url URL              — watch mode, runs jobs on their schedules
    nextcron --url URL --once       — run every job once and exit
    nextcron --url URL --execute P  — run one job once and exit
    nextcron --list                 — print configured jobs and exit
"""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from nextcron.core.config import RunnerConfig
from nextcron.core.errors import NextCronError
from nextcron.core.log import setup_logging
from nextcron.scheduler.engine import CronRunner

app = typer.Typer(
    name="nextcron",
    help="nextcron — Run Next.js Vercel cron jobs locally.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

# list mode never sends requests, but the runner still wants a valid URL
LIST_PLACEHOLDER_URL = "http://localhost:3000"


def _version_callback(value: bool) -> None:
    if value:
        from nextcron import __version__

        console.print(f"nextcron v{__version__}")
        raise typer.Exit(0)


def _make_runner(config: RunnerConfig) -> CronRunner:
    return CronRunner.from_config(config)


@app.command()
def main(
    url_arg: str = typer.Argument(None, metavar="[URL]", help="Base URL of your Next.js app"),
    url: str = typer.Option(None, "--url", "-u", help="Base URL of your Next.js app"),
    secret: str = typer.Option(None, "--secret", "-s", help="Cron secret token (or use CRON_SECRET env var)"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to vercel.json (default: ./vercel.json)"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Verbose logging; -vv adds response bodies and error details"),
    filter: str = typer.Option(None, "--filter", "-f", help="Filter crons by path pattern (supports *)"),
    once: bool = typer.Option(False, "--once", "-o", help="Execute all crons once and exit"),
    list_jobs: bool = typer.Option(False, "--list", "-l", help="List all configured cron jobs and exit"),
    execute: str = typer.Option(None, "--execute", "-e", help="Execute a specific cron job once and exit"),
    log_dir: Path = typer.Option(None, "--log-dir", help="Also write a daily log file here"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Run the crons declared in vercel.json against a running app."""
    setup_logging(console_level=logging.INFO, log_dir=log_dir)

    try:
        config = RunnerConfig.load(
            overrides={
                "base_url": url or url_arg,
                "cron_secret": secret,
                "config_path": config_path,
                "verbose": min(verbose, 2) if verbose else None,
                "filter": filter,
            }
        )

        if list_jobs:
            _list(config)
            raise typer.Exit(0)

        if not config.base_url:
            err_console.print("Error: --url is required\n")
            console.print("Run [bold]nextcron --help[/bold] for usage.")
            raise typer.Exit(1)

        runner = _make_runner(config)

        if execute:
            raise typer.Exit(asyncio.run(_execute_one(runner, execute)))

        if once:
            raise typer.Exit(asyncio.run(_execute_all(runner)))

        asyncio.run(_watch(runner))
    except NextCronError as e:
        err_console.print(f"Error: {escape(e.message)}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        pass


def _list(config: RunnerConfig) -> None:
    runner = _make_runner(config.model_copy(update={"base_url": LIST_PLACEHOLDER_URL}))
    jobs = runner.list_jobs()

    console.print(f"\nFound {len(jobs)} cron job(s):\n")
    for job in jobs:
        console.print(f"  {escape(job.path)}")
        console.print(f"    Schedule: {escape(job.schedule)}")
        console.print("")


async def _execute_one(runner: CronRunner, path: str) -> int:
    console.print(f"Executing cron: {escape(path)}")
    async with runner:
        result = await runner.execute_one(path)

    if result.success:
        console.print(f"[green]✓ Success ({result.status_code}) - {result.duration}ms[/green]")
        return 0
    reason = result.error or f"Status {result.status_code}"
    err_console.print(f"[red]✗ Failed: {escape(reason)}[/red]")
    return 1


async def _execute_all(runner: CronRunner) -> int:
    async with runner:
        results = await runner.execute_all()
    stats = runner.get_stats()

    console.print("\nExecution completed:")
    console.print(f"  Total: {len(results)}")
    console.print(f"  Success: {stats.successful_executions}")
    console.print(f"  Failed: {stats.failed_executions}")
    return 1 if stats.failed_executions > 0 else 0


async def _watch(runner: CronRunner) -> None:
    async with runner:
        await runner.start()
        console.print("\nCron runner is active. Press Ctrl+C to stop.\n")

        stop_requested = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_requested.set)
            except NotImplementedError:
                # Windows: Ctrl+C surfaces as KeyboardInterrupt instead
                continue

        try:
            await stop_requested.wait()
        finally:
            console.print("\n\nShutting down...")
            runner.stop()

            stats = runner.get_stats()
            console.print("\nFinal statistics:")
            console.print(f"  Total jobs: {stats.total_jobs}")
            console.print(f"  Successful executions: {stats.successful_executions}")
            console.print(f"  Failed executions: {stats.failed_executions}")


if __name__ == "__main__":
    app()
