"""Run control API.

Owns the notification channel and progress aggregator shared by the UI
layers, and starts at most one scheduler run at a time.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Optional

from ..core.errors import RunAlreadyActiveError
from ..extractors.base_port import ExtractionPort
from ..types.targets import Target
from .events import NotificationChannel
from .progress import ProgressAggregator
from .scheduler import BatchScheduler, RunConfig, RunResult

logger = logging.getLogger(__name__)


class RunController:
    """Starts and cancels scraping runs."""

    def __init__(
        self,
        port: ExtractionPort,
        config: Optional[RunConfig] = None,
        channel: Optional[NotificationChannel] = None,
        aggregator: Optional[ProgressAggregator] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._port = port
        self._config = config or RunConfig()
        self._channel = channel or NotificationChannel()
        self._aggregator = aggregator or ProgressAggregator()
        self._sleep = sleep
        self._active: Optional[BatchScheduler] = None
        self._last_result: Optional[RunResult] = None

    @property
    def channel(self) -> NotificationChannel:
        return self._channel

    @property
    def aggregator(self) -> ProgressAggregator:
        return self._aggregator

    @property
    def is_active(self) -> bool:
        return self._active is not None

    @property
    def last_result(self) -> Optional[RunResult]:
        return self._last_result

    async def start_run(
        self, targets: list[Target], batch_size: Optional[int] = None
    ) -> RunResult:
        """Run targets to completion, cancellation, or abort.

        Args:
            targets: Targets to scrape.
            batch_size: Concurrency width override for this run.

        Returns:
            RunResult of the run.

        Raises:
            RunAlreadyActiveError: If a run is already in progress.
        """
        if self._active is not None:
            raise RunAlreadyActiveError("A scraping run is already in progress")

        config = self._config
        if batch_size is not None:
            config = replace(config, batch_size=batch_size)

        scheduler = BatchScheduler(
            self._port, config, channel=self._channel, sleep=self._sleep
        )
        self._active = scheduler
        self._aggregator.reset(len(targets))
        unsubscribe = self._channel.subscribe(self._aggregator.on_outcome)

        try:
            result = await scheduler.run(targets)
        finally:
            unsubscribe()
            self._active = None

        self._last_result = result
        return result

    def cancel_run(self) -> bool:
        """Request cancellation of the active run.

        Returns:
            True if a run was active, False otherwise.
        """
        if self._active is None:
            return False
        self._active.cancel()
        return True
