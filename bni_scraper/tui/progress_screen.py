"""Progress screen for a scraping run.

Shows one row per resolved profile, the overall progress bar, counters,
elapsed time and time remaining, with a button to cancel the run.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import Screen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Label,
    ProgressBar,
    Static,
)

from ..core.config import ScraperConfig
from ..orchestration import (
    OutcomeEvent,
    ProgressAggregator,
    ProgressSnapshot,
    ScrapeSession,
    SessionResult,
    format_duration,
)

logger = logging.getLogger(__name__)


class ProgressScreen(Screen):
    """Screen for displaying scraping progress."""

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("c", "cancel", "Cancel run"),
    ]

    CSS = """
    ProgressScreen {
        background: $surface;
    }

    #main-container {
        width: 100%;
        height: 100%;
        padding: 1 2;
    }

    #status-label {
        height: 3;
        content-align: center middle;
        text-style: bold;
    }

    #stats-line {
        height: 1;
    }

    #profile-table {
        height: 1fr;
        margin: 1 0;
    }

    #overall-progress {
        height: 3;
        padding: 0 1;
    }

    #elapsed-time {
        height: 1;
        text-align: right;
    }

    #button-bar {
        height: 3;
        align: center middle;
    }

    #summary-container {
        height: auto;
        padding: 1;
        border: solid $primary;
        margin: 1 0;
    }
    """

    def __init__(
        self,
        url: str,
        config: ScraperConfig,
        limit: Optional[int] = None,
        **kwargs: Any,
    ):
        """Initialize the progress screen.

        Args:
            url: Directory listing page to scrape.
            config: Scraper configuration.
            limit: Only scrape the first N profiles.
        """
        super().__init__(**kwargs)
        self._url = url
        self._config = config
        self._limit = limit

        self._start_time: Optional[datetime] = None
        self._result: Optional[SessionResult] = None
        self._is_running = False
        self._last_snapshot: Optional[ProgressSnapshot] = None

        self._session = ScrapeSession(
            config, aggregator=ProgressAggregator(on_update=self._on_progress)
        )
        self._session.channel.subscribe(self._on_outcome)

    @property
    def session(self) -> ScrapeSession:
        return self._session

    def compose(self) -> ComposeResult:
        """Create child widgets."""
        yield Header()

        with Container(id="main-container"):
            yield Static("Reading directory...", id="status-label")
            yield Static("", id="stats-line")

            table = DataTable(id="profile-table")
            table.add_columns("#", "Profile", "Status", "Detail")
            yield table

            with Horizontal(id="overall-progress"):
                yield Label("Overall: ")
                yield ProgressBar(total=None, id="overall-bar")

            yield Static("Elapsed: 0:00", id="elapsed-time")

            with Container(id="summary-container"):
                yield Static(f"Save location: {self._config.output_dir}", id="summary-text")

            with Horizontal(id="button-bar"):
                yield Button("Cancel", id="btn-cancel", variant="warning")
                yield Button("Open Folder", id="btn-view", disabled=True)
                yield Button("Exit", id="btn-exit")

        yield Footer()

    def on_mount(self) -> None:
        """Called when screen is mounted."""
        self._is_running = True
        self._start_time = datetime.now()
        self.set_interval(1, self._update_elapsed)
        asyncio.create_task(self._run_scrape())

    async def _run_scrape(self) -> None:
        try:
            self._result = await self._session.run(self._url, limit=self._limit)
            self._on_complete()
        except Exception as e:
            logger.exception("Scraping run failed")
            self._on_error(str(e))

    def _on_outcome(self, event: OutcomeEvent) -> None:
        """Add a table row for a resolved profile."""
        table = self.query_one("#profile-table", DataTable)
        key = str(event.target_index)
        if key in table.rows:
            return

        if event.succeeded:
            status = Text("Scraped", style="green")
            detail = ""
        else:
            status = Text("Failed", style="red")
            detail = event.error_reason or ""
        table.add_row(str(event.profile_number), event.url, status, detail, key=key)

    def _on_progress(self, snapshot: ProgressSnapshot) -> None:
        """Refresh counters and the progress bar."""
        self._last_snapshot = snapshot

        self.query_one("#status-label", Static).update(
            f"Scraping profile {snapshot.current_profile} of {snapshot.total}..."
        )
        progress_bar = self.query_one("#overall-bar", ProgressBar)
        progress_bar.update(total=snapshot.total, progress=snapshot.resolved)

        average = (
            f"{snapshot.average_seconds:.1f}s" if snapshot.average_seconds is not None else "-"
        )
        self.query_one("#stats-line", Static).update(
            f"Scraped: {snapshot.succeeded}  Failed: {snapshot.failed}  "
            f"Avg/profile: {average}  "
            f"Remaining: {format_duration(snapshot.eta_seconds)}"
        )

    def _update_elapsed(self) -> None:
        """Update elapsed time display."""
        if self._start_time and self._is_running:
            elapsed = datetime.now() - self._start_time
            minutes = int(elapsed.total_seconds() // 60)
            seconds = int(elapsed.total_seconds() % 60)
            self.query_one("#elapsed-time", Static).update(
                f"Elapsed: {minutes}:{seconds:02d}"
            )

    def _on_complete(self) -> None:
        """Handle run completion."""
        self._is_running = False
        result = self._result
        if result is None:
            return

        status_label = self.query_one("#status-label", Static)
        if result.run.cancelled:
            status_label.update("Scraping Cancelled")
        elif result.success:
            status_label.update("Scraping Complete!")
        else:
            status_label.update(f"Scraping Aborted: {result.run.error}")

        stats = result.run.get_statistics()
        files = "\n".join(f"  {path}" for path in result.files.values()) or "  (none)"
        summary = f"""
Profiles: {stats.total_targets}
Scraped: {stats.succeeded}
Failed: {stats.failed}
Not scraped: {stats.unresolved}
Duration: {format_duration(stats.duration_seconds)}
Saved:
{files}
        """.strip()
        self.query_one("#summary-text", Static).update(summary)

        self.query_one("#btn-cancel", Button).disabled = True
        self.query_one("#btn-view", Button).disabled = False

    def _on_error(self, message: str) -> None:
        """Handle run error."""
        self._is_running = False
        self.query_one("#status-label", Static).update(f"Error: {message}")
        self.query_one("#btn-cancel", Button).disabled = True

    def action_cancel(self) -> None:
        """Cancel the run after the current group."""
        if self._is_running:
            self._session.cancel()
            self.query_one("#status-label", Static).update(
                "Cancelling after the current batch..."
            )
            self.query_one("#btn-cancel", Button).disabled = True

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        button_id = event.button.id

        if button_id == "btn-exit":
            self.action_quit()
        elif button_id == "btn-cancel":
            self.action_cancel()
        elif button_id == "btn-view":
            import subprocess
            import sys

            output_path = Path(self._config.output_dir)
            if output_path.exists():
                if sys.platform == "darwin":
                    subprocess.run(["open", str(output_path)])
                elif sys.platform == "linux":
                    subprocess.run(["xdg-open", str(output_path)])
                else:
                    subprocess.run(["explorer", str(output_path)])

    def action_quit(self) -> None:
        """Quit the application."""
        if self._is_running:
            self.notify("Scraping in progress, cancel it first", severity="warning")
        else:
            self.app.exit(self._result)
