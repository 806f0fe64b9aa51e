"""End-to-end scraping session.

Reads the directory listing, scrapes the linked profiles through a
RunController, and exports the merged rows. Shared by the CLI and the TUI.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from ..core.config import ScraperConfig
from ..core.errors import ScraperError
from ..extractors.directory import DirectoryListing
from ..extractors.playwright_port import PlaywrightPort
from ..output.csv_exporter import CSVExporter
from ..output.merger import merge_profiles
from ..output.snapshot_writer import SnapshotWriter, build_snapshot
from ..output.xlsx_exporter import XLSXExporter
from ..types.profiles import MergedProfile
from .controller import RunController
from .events import NotificationChannel
from .progress import ProgressAggregator
from .scheduler import RunConfig, RunResult, RunStatus

logger = logging.getLogger(__name__)

_SINKS = {
    "csv": (CSVExporter,),
    "xlsx": (XLSXExporter,),
    "both": (CSVExporter, XLSXExporter),
}


@dataclass
class SessionResult:
    """Everything a session produced."""

    listing: DirectoryListing
    run: RunResult
    rows: list[MergedProfile] = field(default_factory=list)
    files: dict[str, Path] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.run.success


class ScrapeSession:
    """Discover, scrape and export one directory page.

    Usage:
        session = ScrapeSession(config)
        session.aggregator  # subscribe UIs before running
        result = await session.run(url, limit=20)
    """

    def __init__(
        self,
        config: ScraperConfig,
        port_factory: Callable[[ScraperConfig], Any] = PlaywrightPort,
        channel: Optional[NotificationChannel] = None,
        aggregator: Optional[ProgressAggregator] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the session.

        Args:
            config: Scraper configuration.
            port_factory: Builds the extraction port; the port must be an
                async context manager providing ``read_directory``.
            channel: Notification channel for outcome events.
            aggregator: Progress aggregator subscribed to the channel.
            sleep: Sleep coroutine, injectable for tests.
        """
        self._config = config
        self._port_factory = port_factory
        self._channel = channel or NotificationChannel()
        self._aggregator = aggregator or ProgressAggregator()
        self._sleep = sleep
        self._controller: Optional[RunController] = None
        self._cancel_requested = False

    @property
    def config(self) -> ScraperConfig:
        return self._config

    @property
    def channel(self) -> NotificationChannel:
        return self._channel

    @property
    def aggregator(self) -> ProgressAggregator:
        return self._aggregator

    @property
    def is_active(self) -> bool:
        return self._controller is not None and self._controller.is_active

    def cancel(self) -> None:
        """Stop the session at the next group boundary."""
        self._cancel_requested = True
        if self._controller is not None:
            self._controller.cancel_run()

    async def discover(self, url: str) -> DirectoryListing:
        """Read the directory listing without scraping profiles."""
        async with self._port_factory(self._config) as port:
            return await port.read_directory(url)

    async def run(self, url: str, limit: Optional[int] = None) -> SessionResult:
        """Scrape every profile linked from ``url`` and export the result.

        Args:
            url: Directory listing page.
            limit: Only scrape the first N profiles.

        Returns:
            SessionResult with the run outcome and written files.

        Raises:
            ScraperError: If the listing has no profile links.
            RunInfrastructureFailure: If the browser cannot be started.
        """
        async with self._port_factory(self._config) as port:
            listing = await port.read_directory(url)
            targets = listing.limited(limit)
            if not targets:
                raise ScraperError(f"No profile links found on {url}")

            logger.info(f"Found {len(listing.targets)} profiles, scraping {len(targets)}")

            self._controller = RunController(
                port,
                RunConfig.from_config(self._config),
                channel=self._channel,
                aggregator=self._aggregator,
                sleep=self._sleep,
            )
            if self._cancel_requested:
                logger.info("Cancelled before scraping started")
                run_result = RunResult(
                    total_targets=len(targets),
                    status=RunStatus.CANCELLED,
                    completed_at=datetime.now(),
                )
            else:
                run_result = await self._controller.start_run(targets)

        rows = merge_profiles(listing, run_result.outcomes)
        files = await self.export(listing, run_result, rows)
        return SessionResult(listing=listing, run=run_result, rows=rows, files=files)

    async def export(
        self,
        listing: DirectoryListing,
        result: RunResult,
        rows: list[MergedProfile],
    ) -> dict[str, Path]:
        """Write rows and the run summary to the output directory.

        Returns:
            Mapping of format name to written path.
        """
        output_dir = self._config.output_dir
        when = result.completed_at or result.started_at
        files: dict[str, Path] = {}

        if not rows:
            logger.warning("No data to export")
        else:
            for sink_class in _SINKS[self._config.output_format]:
                sink = sink_class(output_dir)
                filename = listing.filename(
                    prefix=self._config.filename_prefix,
                    extension=sink.extension,
                    when=when,
                )
                files[sink.extension] = sink.write(rows, filename)

        if self._config.write_snapshot:
            filename = listing.filename(
                prefix=self._config.filename_prefix, extension="json", when=when
            )
            snapshot = build_snapshot(
                result,
                batch_size=self._config.batch_size,
                directory_url=listing.url,
                files={name: path.name for name, path in files.items()},
            )
            files["summary"] = await SnapshotWriter(output_dir).write(snapshot, filename)

        return files
