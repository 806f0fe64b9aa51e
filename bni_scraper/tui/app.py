"""Textual application for the BNI profile scraper."""

from typing import Optional

from textual.app import App

from ..core.config import ScraperConfig
from ..orchestration import SessionResult
from .progress_screen import ProgressScreen


class ScraperApp(App):
    """BNI Profile Scraper TUI Application."""

    TITLE = "BNI Profile Scraper"
    SUB_TITLE = "Scrape member profiles from a directory search"

    CSS = """
    Screen {
        background: $surface;
    }
    """

    BINDINGS = [
        ("d", "toggle_dark", "Toggle Dark Mode"),
    ]

    def __init__(self, url: str, config: ScraperConfig, limit: Optional[int] = None):
        super().__init__()
        self._url = url
        self._config = config
        self._limit = limit

    def on_mount(self) -> None:
        """Called when the app is mounted."""
        self.push_screen(ProgressScreen(self._url, self._config, limit=self._limit))

    def action_toggle_dark(self) -> None:
        """Toggle dark mode."""
        self.theme = "textual-light" if self.theme == "textual-dark" else "textual-dark"


def run_tui(
    url: str, config: ScraperConfig, limit: Optional[int] = None
) -> Optional[SessionResult]:
    """Run the TUI application.

    Returns:
        The session result, or None if the run did not finish.
    """
    app = ScraperApp(url, config, limit=limit)
    return app.run()
