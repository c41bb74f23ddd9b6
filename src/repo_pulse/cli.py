"""CLI interface for Repo Pulse."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from repo_pulse import __version__
from repo_pulse.config import get_config, parse_repository
from repo_pulse.exceptions import RepoPulseError
from repo_pulse.output.console import Console as OutputConsole
from repo_pulse.output.json_writer import build_report, write_json_report

app = typer.Typer(
    name="repo-pulse",
    help="Repository summary, clock and battery feeds for a dashboard home screen",
    add_completion=False,
)

console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"repo-pulse version {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool = False):
    """Configure logging based on verbosity level."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Repo Pulse - data feeds for a repository dashboard."""
    pass


@app.command()
def summary(
    repository: Optional[str] = typer.Argument(
        None, help="Repository as OWNER/NAME (default: REPO_PULSE_REPO)"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write a JSON report to this path",
    ),
    per_page: int = typer.Option(
        100,
        "--per-page",
        min=1,
        max=100,
        help="Page size for commits and pull requests",
    ),
    link_header: bool = typer.Option(
        False,
        "--link-header",
        help="Use the Link header to detect the last page",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output"),
):
    """Fetch commit, closed PR, branch and contributor counts for a repository.

    Examples:
        repo-pulse summary octocat/Hello-World
        repo-pulse summary octocat/Hello-World --output report.json
    """
    setup_logging(verbose)
    config = get_config()

    repository = repository or config.repository
    if not repository:
        console.print("[red]No repository given. Pass OWNER/NAME or set REPO_PULSE_REPO[/red]")
        raise typer.Exit(1)
    try:
        parse_repository(repository)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    try:
        asyncio.run(
            _run_summary(
                repository=repository,
                output_path=output,
                per_page=per_page,
                link_header=link_header,
                quiet=quiet,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        raise typer.Exit(1)
    except RepoPulseError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


async def _run_summary(
    repository: str,
    output_path: Optional[Path],
    per_page: int,
    link_header: bool,
    quiet: bool,
):
    """Fetch and print the summary."""
    from repo_pulse.sdk import RepoPulse
    from repo_pulse.utils.rate_limiter import (
        check_and_report_rate_limit,
        check_rate_limit_from_api,
    )

    output_console = OutputConsole(quiet=quiet)
    config = get_config()

    output_console.print_header(repository)

    if not config.is_authenticated:
        output_console.print_warning(
            "No GitHub token found. Using unauthenticated access (60 requests/hour).\n"
            "Set REPO_PULSE_TOKEN or GITHUB_TOKEN for higher rate limits."
        )
        output_console.print()

    rate_state = await check_rate_limit_from_api(
        api_url=config.github_api_url,
        token=config.github_token,
    )
    if not check_and_report_rate_limit(rate_state, config.is_authenticated):
        return

    async with RepoPulse(
        repository,
        config=config,
        per_page=per_page,
        follow_link_header=link_header,
    ) as pulse:
        with output_console.create_progress() as progress:
            progress.add_task("Fetching repository data...", total=None)
            result = await pulse.fetch_repo_summary()

    output_console.print_summary(result)

    if output_path is not None:
        written = write_json_report(build_report(result), output_path, repository)
        output_console.print_output_path(str(written))


@app.command()
def clock(
    seconds: float = typer.Option(5.0, "--seconds", "-s", min=0.0, help="How long to run"),
):
    """Print the clock once per second."""
    from repo_pulse.services.clock import ClockTicker

    config = get_config()
    output_console = OutputConsole()

    async def run():
        ticker = ClockTicker(
            interval=config.clock_interval,
            fmt=config.clock_format,
            on_tick=output_console.print_clock,
        )
        ticker.start()
        try:
            await asyncio.sleep(seconds)
        finally:
            ticker.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


@app.command()
def battery(
    seconds: float = typer.Option(
        0.0, "--seconds", "-s", min=0.0, help="Keep printing changes for this long"
    ),
):
    """Print the battery status, then every change while watching."""
    from repo_pulse.services.battery import BatteryMonitor, PsutilBatteryProvider

    config = get_config()
    output_console = OutputConsole()

    async def run():
        monitor = BatteryMonitor(PsutilBatteryProvider(config.battery_poll_interval))
        output_console.print_battery(monitor.snapshot())
        if seconds <= 0:
            return
        monitor.start(output_console.print_battery)
        try:
            await asyncio.sleep(seconds)
        finally:
            monitor.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


@app.command()
def check_token():
    """Check GitHub token configuration and rate limits."""
    config = get_config()

    if config.is_authenticated:
        console.print("[green]GitHub token is configured[/green]")
        console.print(f"Rate limit: {config.effective_rate_limit} requests/hour")
    else:
        console.print("[yellow]No GitHub token configured[/yellow]")
        console.print(f"Rate limit: {config.effective_rate_limit} requests/hour")
        console.print()
        console.print("To configure a token:")
        console.print("  export REPO_PULSE_TOKEN=your_token_here")
        console.print()
        console.print("Create a token at: https://github.com/settings/tokens")
        console.print("No special scopes needed for public repositories.")


if __name__ == "__main__":
    app()
