"""Terminal UI for the BNI profile scraper."""

from .app import ScraperApp, run_tui
from .progress_screen import ProgressScreen

__all__ = [
    "ScraperApp",
    "run_tui",
    "ProgressScreen",
]
