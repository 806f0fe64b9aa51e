"""Error taxonomy for scraping runs.

Per-target errors are retryable and are converted into failed outcomes by
the retry policy. Only RunInfrastructureFailure is allowed to end a run.
"""

from typing import Optional


class ScraperError(Exception):
    """Base class for all scraper errors."""


class ConfigError(ScraperError):
    """Invalid or incomplete configuration."""


class TargetError(ScraperError):
    """A single profile could not be scraped on this attempt."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url

    @property
    def error_type(self) -> str:
        return type(self).__name__


class TargetTimeout(TargetError):
    """The page or the extraction exceeded its time budget."""


class TargetNoData(TargetError):
    """Extraction finished but produced no usable record."""


class TargetTransportError(TargetError):
    """The browser could not open, drive or read the page."""


class RunInfrastructureFailure(ScraperError):
    """The extraction substrate is gone (e.g. the browser disconnected)."""


class RunAlreadyActiveError(ScraperError):
    """A run was started while another one is still active."""
