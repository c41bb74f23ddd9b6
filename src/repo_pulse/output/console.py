"""Rich console output for the home screen feeds."""

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from repo_pulse.models.battery import BatteryColor, BatteryStatus
from repo_pulse.models.repository import RepoSummary

_BATTERY_STYLES = {
    BatteryColor.GREEN: "green",
    BatteryColor.YELLOW: "yellow",
    BatteryColor.RED: "red",
    BatteryColor.GRAY: "dim",
}


class Console:
    """Wrapper for rich console output."""

    def __init__(self, verbose: bool = False, quiet: bool = False):
        self.console = RichConsole()
        self.verbose = verbose
        self.quiet = quiet

    def print(self, *args, **kwargs):
        """Print to console (respects quiet mode)."""
        if not self.quiet:
            self.console.print(*args, **kwargs)

    def print_error(self, message: str):
        """Print error message."""
        self.console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str):
        """Print warning message."""
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str):
        """Print success message."""
        if not self.quiet:
            self.console.print(f"[green]{message}[/green]")

    def create_progress(self) -> Progress:
        """Create a spinner for long-running fetches."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=True,
            disable=self.quiet,
        )

    def print_header(self, repository: str):
        if self.quiet:
            return

        self.console.print()
        self.console.print(
            Panel(
                f"[bold blue]Repository Summary[/bold blue]\n[dim]{repository}[/dim]",
                expand=False,
            )
        )
        self.console.print()

    def print_summary(self, summary: RepoSummary, max_contributors: int = 10):
        """Print counts and top contributors."""
        if self.quiet:
            return

        table = Table(title="Overview", show_header=False, expand=False)
        table.add_column("Metric", style="dim")
        table.add_column("Value", justify="right")
        table.add_row("Commits", f"{summary.commit_count:,}")
        table.add_row("Closed pull requests", f"{summary.closed_pr_count:,}")
        table.add_row("Branches", f"{summary.branch_count:,}")
        table.add_row("Contributors", f"{summary.contributor_count:,}")
        self.console.print(table)

        if summary.contributors:
            top = sorted(summary.contributors, key=lambda c: c.contributions, reverse=True)
            contributors = Table(title="Top Contributors", expand=False)
            contributors.add_column("Login")
            contributors.add_column("Contributions", justify="right")
            for contributor in top[:max_contributors]:
                contributors.add_row(contributor.login, f"{contributor.contributions:,}")
            self.console.print(contributors)

        for resource, message in sorted(summary.errors.items()):
            self.print_warning(f"{resource} incomplete: {message}")

    def print_battery(self, status: BatteryStatus):
        style = _BATTERY_STYLES[status.color]
        level = f"{status.percent}%" if status.percent is not None else "--"
        self.print(f"Battery: [{style}]{level}[/{style}] {status.description}")

    def print_clock(self, value: str):
        self.print(f"[bold]{value}[/bold]")

    def print_output_path(self, path: str):
        if not self.quiet:
            self.console.print(f"\n[dim]Report saved to:[/dim] {path}")
