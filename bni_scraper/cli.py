"""CLI entry point for the BNI profile scraper.

Provides both TUI and command-line interfaces for scraping a directory.
"""

import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from . import __version__
from .core.config import OUTPUT_FORMATS, ScraperConfig, get_config
from .core.errors import ConfigError, ScraperError
from .orchestration import (
    ProgressAggregator,
    ProgressSnapshot,
    ScrapeSession,
    SessionResult,
    format_duration,
    initial_estimate,
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# CLI app
app = typer.Typer(
    name="bni-scraper",
    help="BNI Profile Scraper - Export member profiles from a BNI directory search",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"bni-scraper version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        help="Show version and exit",
    ),
) -> None:
    """BNI Profile Scraper - Export member profiles from a BNI directory search."""
    pass


def _load_config(**overrides) -> ScraperConfig:
    """Load configuration, apply CLI overrides and validate."""
    try:
        config = get_config().with_overrides(**overrides)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    errors = config.validate()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        console.print("\nCheck your environment variables or .env file.")
        console.print("See .env.example for the available settings.")
        raise typer.Exit(1)
    return config


def _resolve_url(url: Optional[str], config: ScraperConfig) -> str:
    resolved = url or config.directory_url
    if not resolved:
        console.print("[red]No directory URL given.[/red]")
        console.print("Pass the search results URL or set BNI_DIRECTORY_URL.")
        raise typer.Exit(1)
    return resolved


@app.command()
def run(
    url: Optional[str] = typer.Argument(
        None,
        help="Directory search results URL (defaults to BNI_DIRECTORY_URL)",
    ),
    batch_size: Optional[int] = typer.Option(
        None,
        "--batch-size",
        "-b",
        help="Profiles scraped in parallel per batch",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Only scrape the first N profiles",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Output directory (defaults to your downloads folder)",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help=f"Output format: {', '.join(OUTPUT_FORMATS)}",
    ),
    headed: bool = typer.Option(
        False,
        "--headed",
        help="Show the browser window",
    ),
    tui: bool = typer.Option(
        False,
        "--tui",
        help="Show progress in the interactive TUI",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """Scrape every member profile linked from a directory search."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = _load_config(
        batch_size=batch_size,
        output_dir=output_dir,
        output_format=output_format.lower() if output_format else None,
        headless=False if headed else None,
    )
    target_url = _resolve_url(url, config)

    if limit is not None and limit < 1:
        console.print("[red]--limit must be at least 1[/red]")
        raise typer.Exit(1)

    if tui:
        from .tui import run_tui

        result = run_tui(target_url, config, limit=limit)
        if result is None:
            raise typer.Exit(1)
        _print_summary(result)
    else:
        try:
            result = asyncio.run(run_cli_scrape(target_url, config, limit))
        except ScraperError as e:
            console.print(f"[red]Scraping failed:[/red] {e}")
            raise typer.Exit(1)

    if not result.success:
        raise typer.Exit(1)


async def run_cli_scrape(
    url: str,
    config: ScraperConfig,
    limit: Optional[int] = None,
) -> SessionResult:
    """Run a scrape in CLI mode with progress display."""
    console.print("\n[bold]BNI Profile Scraper[/bold]")
    console.print(f"Directory: {url}")
    console.print(f"Batch size: {config.batch_size}")
    console.print(f"Save location: {config.output_dir}")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("{task.fields[stats]}"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Reading directory...", total=None, stats="")

        def on_update(snapshot: ProgressSnapshot) -> None:
            average = (
                f"{snapshot.average_seconds:.1f}s/profile"
                if snapshot.average_seconds is not None
                else ""
            )
            progress.update(
                task,
                description=f"Profile {snapshot.current_profile}",
                total=snapshot.total,
                completed=snapshot.resolved,
                stats=(
                    f"[green]{snapshot.succeeded} ok[/green] "
                    f"[red]{snapshot.failed} failed[/red] {average} "
                    f"ETA {format_duration(snapshot.eta_seconds)}"
                ),
            )

        session = ScrapeSession(config, aggregator=ProgressAggregator(on_update=on_update))

        def request_cancel() -> None:
            if session.is_active:
                console.print(
                    "[yellow]Cancelling after the current batch, please wait...[/yellow]"
                )
            session.cancel()

        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, request_cancel)
            handler_installed = True
        except NotImplementedError:
            # Not supported on Windows event loops
            handler_installed = False

        try:
            result = await session.run(url, limit=limit)
        finally:
            if handler_installed:
                loop.remove_signal_handler(signal.SIGINT)

        progress.update(task, description="Done")

    _print_summary(result)
    return result


def _print_summary(result: SessionResult) -> None:
    """Print the run summary, failures and written files."""
    run_result = result.run
    stats = run_result.get_statistics()

    console.print()
    if run_result.cancelled:
        console.print("[yellow]Scraping cancelled; partial results were saved.[/yellow]")
    elif not result.success:
        console.print(f"[red]Scraping aborted:[/red] {run_result.error}")
    else:
        console.print("[green]Scraping complete![/green]")

    failures = run_result.get_failures()
    if failures:
        table = Table(title="Failed Profiles")
        table.add_column("#", justify="right", style="cyan")
        table.add_column("URL")
        table.add_column("Error", style="red")
        table.add_column("Attempts", justify="right")
        for failure in failures:
            table.add_row(
                str(failure.profile_number),
                failure.url,
                f"{failure.error_type or 'Error'}: {failure.message or ''}",
                str(failure.attempts),
            )
        console.print(table)

    console.print()
    console.print(f"[bold]Profiles:[/bold] {stats.total_targets}")
    console.print(f"[bold]Scraped:[/bold] {stats.succeeded}")
    console.print(f"[bold]Failed:[/bold] {stats.failed}")
    if stats.unresolved:
        console.print(f"[bold]Not scraped:[/bold] {stats.unresolved}")
    console.print(f"[bold]Duration:[/bold] {format_duration(stats.duration_seconds)}")
    if stats.average_seconds_per_profile:
        console.print(
            f"[bold]Average:[/bold] {stats.average_seconds_per_profile:.1f}s per profile"
        )
    for name, path in result.files.items():
        console.print(f"[bold]Saved ({name}):[/bold] {path}")


@app.command()
def check(
    url: Optional[str] = typer.Argument(
        None,
        help="Directory search results URL (defaults to BNI_DIRECTORY_URL)",
    ),
    batch_size: Optional[int] = typer.Option(
        None,
        "--batch-size",
        "-b",
        help="Profiles scraped in parallel per batch",
    ),
    headed: bool = typer.Option(
        False,
        "--headed",
        help="Show the browser window",
    ),
) -> None:
    """Count the profiles on a directory page and estimate the run time."""
    config = _load_config(batch_size=batch_size, headless=False if headed else None)
    target_url = _resolve_url(url, config)

    session = ScrapeSession(config)
    try:
        with console.status("Reading directory..."):
            listing = asyncio.run(session.discover(target_url))
    except ScraperError as e:
        console.print(f"[red]Could not read directory:[/red] {e}")
        raise typer.Exit(1)

    targets = listing.targets
    if not targets:
        console.print("[yellow]No profiles found on this page.[/yellow]")
        console.print("Make sure the search results have finished loading.")
        raise typer.Exit(1)

    estimate = initial_estimate(
        len(targets), config.batch_size, config.estimated_seconds_per_profile
    )

    table = Table(title="Directory Check")
    table.add_column("Item", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Rows on page", str(len(listing.rows)))
    table.add_row("Profiles found", str(estimate.profiles))
    table.add_row("Batches", f"{estimate.batches} x {config.batch_size}")
    table.add_row("Estimated time", f"{estimate.minutes} min")
    table.add_row("Output file", listing.filename(prefix=config.filename_prefix))
    console.print(table)

    if listing.filters:
        console.print("\n[bold]Active filters:[/bold]")
        for name, value in listing.filters.items():
            console.print(f"  {name}: {value}")


@app.command()
def check_config() -> None:
    """Check configuration and the browser installation."""
    config = _load_config()

    console.print("[bold]Configuration Check[/bold]\n")
    console.print(f"[green]Directory URL:[/green] {config.directory_url or '(not set)'}")
    console.print(f"[green]Batch size:[/green] {config.batch_size}")
    console.print(
        f"[green]Pacing:[/green] {config.dispatch_spacing:.1f}s between opens, "
        f"{config.group_delay:.1f}s between batches, "
        f"{config.long_pause:.0f}s every {config.long_pause_every} batches"
    )
    console.print(
        f"[green]Retries:[/green] {config.max_attempts} attempts, "
        f"{config.inter_attempt_delay:.1f}s apart"
    )
    console.print(
        f"[green]Timeouts:[/green] load {config.load_timeout:.0f}s, "
        f"extract {config.extract_timeout:.0f}s"
    )
    console.print(f"[green]Output:[/green] {config.output_dir} ({config.output_format})")

    console.print("\n[bold]Testing browser launch...[/bold]")

    async def probe() -> None:
        from .extractors import PlaywrightPort

        async with PlaywrightPort(config):
            pass

    try:
        with console.status("Launching Chromium..."):
            asyncio.run(probe())
        console.print("[green]Browser launch successful![/green]")
    except ScraperError as e:
        console.print(f"[red]Browser launch failed:[/red] {e}")
        console.print("Run 'playwright install chromium' to install the browser.")
        raise typer.Exit(1)


# Alias commands
app.command("config")(check_config)


if __name__ == "__main__":
    app()
