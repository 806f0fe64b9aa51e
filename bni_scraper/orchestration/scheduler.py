"""Batch scheduler for profile scraping.

Splits targets into dispatch groups of ``batch_size``, runs every target of
a group concurrently through the retry policy, and waits for the whole
group before pacing and moving on. Cancellation is honoured only at group
boundaries; in-flight attempts always run to their own end.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from ..core.config import ScraperConfig
from ..core.errors import RunInfrastructureFailure
from ..extractors.base_port import ExtractionPort
from ..types.run import ProfileFailure, RunStatistics
from ..types.targets import Target, TargetOutcome
from .events import NotificationChannel, OutcomeEvent
from .rate_limiter import Pacer
from .retry_policy import RetryConfig, RetryPolicy

logger = logging.getLogger(__name__)


class RunStatus(str, Enum):
    """Lifecycle of a scheduler run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RunConfig:
    """Configuration for a scheduler run."""

    # Concurrency width of a dispatch group
    batch_size: int = 5

    # Pacing
    dispatch_spacing: float = 2.0
    group_delay: float = 3.0
    long_pause_every: int = 15
    long_pause: float = 15.0

    retry: RetryConfig = field(default_factory=RetryConfig)

    @classmethod
    def from_config(cls, config: ScraperConfig) -> "RunConfig":
        return cls(
            batch_size=config.batch_size,
            dispatch_spacing=config.dispatch_spacing,
            group_delay=config.group_delay,
            long_pause_every=config.long_pause_every,
            long_pause=config.long_pause,
            retry=RetryConfig.from_config(config),
        )


@dataclass
class RunState:
    """Mutable state of one run, owned by a single scheduler."""

    targets: list[Target] = field(default_factory=list)
    resolved: set[int] = field(default_factory=set)
    succeeded: int = 0
    failed: int = 0
    started_at: Optional[datetime] = None
    status: RunStatus = RunStatus.IDLE

    def record(self, outcome: TargetOutcome) -> bool:
        """Mark a target resolved. Returns False if it already was."""
        index = outcome.target.index
        if index in self.resolved:
            return False
        self.resolved.add(index)
        if outcome.succeeded:
            self.succeeded += 1
        else:
            self.failed += 1
        return True

    @property
    def is_complete(self) -> bool:
        return len(self.resolved) == len(self.targets)


@dataclass
class RunResult:
    """Result of a scheduler run."""

    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    total_targets: int = 0
    outcomes: list[TargetOutcome] = field(default_factory=list)
    status: RunStatus = RunStatus.IDLE
    error: Optional[str] = None
    groups_dispatched: int = 0
    pacing: dict[str, Any] = field(default_factory=dict)

    @property
    def cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    @property
    def success(self) -> bool:
        """True unless the run was aborted by an infrastructure failure."""
        return self.error is None and self.status is not RunStatus.FAILED

    @property
    def succeeded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)

    @property
    def unresolved_count(self) -> int:
        return max(0, self.total_targets - len(self.outcomes))

    @property
    def failures(self) -> list[TargetOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def duration_seconds(self) -> float:
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return 0.0

    def get_statistics(self) -> RunStatistics:
        """Generate statistics from outcomes."""
        resolved = len(self.outcomes)
        return RunStatistics(
            total_targets=self.total_targets,
            succeeded=self.succeeded_count,
            failed=self.failed_count,
            unresolved=self.unresolved_count,
            total_attempts=sum(o.attempts for o in self.outcomes),
            cancelled=self.cancelled,
            error=self.error,
            duration_seconds=self.duration_seconds,
            average_seconds_per_profile=(
                self.duration_seconds / resolved if resolved else 0.0
            ),
        )

    def get_failures(self) -> list[ProfileFailure]:
        return [
            ProfileFailure(
                profile_number=o.target.profile_number,
                url=o.target.url,
                error_type=o.error_type,
                message=o.error,
                attempts=o.attempts,
            )
            for o in self.failures
        ]


def partition(targets: list[Target], batch_size: int) -> list[list[Target]]:
    """Split targets into consecutive dispatch groups."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [targets[i:i + batch_size] for i in range(0, len(targets), batch_size)]


class BatchScheduler:
    """Runs one batch of targets with bounded concurrency.

    A scheduler instance runs exactly once. Create a new one per run.

    Features:
    - Dispatch groups with a barrier between them
    - Pacing between dispatches and between groups
    - Per-target retries via RetryPolicy
    - Exactly one outcome per target, published on a NotificationChannel
    - Cancellation at group boundaries
    """

    def __init__(
        self,
        port: ExtractionPort,
        config: Optional[RunConfig] = None,
        channel: Optional[NotificationChannel] = None,
        pacer: Optional[Pacer] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the scheduler.

        Args:
            port: Extraction port used by the retry policy.
            config: Run configuration.
            channel: Channel to publish outcome events on.
            pacer: Pacer override, built from config if None.
            retry_policy: Retry policy override, built from config if None.
            sleep: Sleep coroutine passed to the default pacer and policy.
        """
        self._config = config or RunConfig()
        if self._config.batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self._channel = channel or NotificationChannel()
        self._pacer = pacer or Pacer(
            dispatch_spacing=self._config.dispatch_spacing,
            group_delay=self._config.group_delay,
            long_pause_every=self._config.long_pause_every,
            long_pause=self._config.long_pause,
            sleep=sleep,
        )
        self._policy = retry_policy or RetryPolicy(port, self._config.retry, sleep=sleep)

        self._state = RunState()
        self._cancel_requested = False
        self._error: Optional[str] = None
        self._sequence = 0
        self._groups_dispatched = 0
        self._result = RunResult()

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def channel(self) -> NotificationChannel:
        return self._channel

    @property
    def pacer(self) -> Pacer:
        return self._pacer

    @property
    def groups_dispatched(self) -> int:
        return self._groups_dispatched

    @property
    def result(self) -> RunResult:
        """Result of the run so far; final once iteration has ended."""
        return self._result

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def cancel(self) -> None:
        """Stop dispatching after the current group finishes."""
        if not self._cancel_requested:
            logger.info("Cancellation requested; stopping at the next group boundary")
        self._cancel_requested = True

    async def run(self, targets: list[Target]) -> RunResult:
        """Run all targets and collect their outcomes.

        Args:
            targets: Targets in listing order.

        Returns:
            RunResult with outcomes ordered by target index.
        """
        async for _ in self.iter_outcomes(targets):
            pass
        return self._result

    async def iter_outcomes(self, targets: list[Target]) -> AsyncIterator[TargetOutcome]:
        """Yield each target's outcome as soon as it resolves.

        Outcomes within a group arrive in completion order; groups are
        processed in input order.

        Raises:
            RuntimeError: If this scheduler has already been started.
            ValueError: If two targets share an index.
        """
        self._begin(targets)
        groups = partition(self._state.targets, self._config.batch_size)

        try:
            for group_index, group in enumerate(groups):
                if self._cancel_requested:
                    break
                if group_index > 0:
                    await self._pacer.wait_group(group_index)
                    if self._cancel_requested:
                        break

                self._groups_dispatched += 1
                logger.info(
                    f"Dispatching group {group_index + 1}/{len(groups)} "
                    f"({len(group)} profiles)"
                )
                async for outcome in self._run_group(group):
                    yield outcome

                if self._error is not None:
                    break
        finally:
            self._finish()

    def _begin(self, targets: list[Target]) -> None:
        if self._state.status is not RunStatus.IDLE:
            raise RuntimeError("Scheduler already started; create a new one for another run")

        seen: set[int] = set()
        for target in targets:
            if target.index in seen:
                raise ValueError(f"Duplicate target index {target.index}")
            seen.add(target.index)

        self._state = RunState(
            targets=list(targets),
            started_at=datetime.now(),
            status=RunStatus.RUNNING,
        )
        self._result = RunResult(
            started_at=self._state.started_at,
            total_targets=len(targets),
            status=RunStatus.RUNNING,
        )
        logger.info(
            f"Starting run: {len(targets)} profiles, batch size {self._config.batch_size}"
        )

    def _finish(self) -> None:
        if self._error is not None:
            status = RunStatus.FAILED
        elif self._cancel_requested and not self._state.is_complete:
            status = RunStatus.CANCELLED
        elif self._state.is_complete:
            status = RunStatus.COMPLETED
        else:
            # Consumer stopped iterating early
            status = RunStatus.CANCELLED
        self._state.status = status

        self._result.status = status
        self._result.error = self._error
        self._result.completed_at = datetime.now()
        self._result.groups_dispatched = self._groups_dispatched
        self._result.pacing = self._pacer.get_stats()
        self._result.outcomes.sort(key=lambda o: o.target.index)

        logger.info(
            f"Run {status.value}: {self._state.succeeded} succeeded, "
            f"{self._state.failed} failed, "
            f"{len(self._state.targets) - len(self._state.resolved)} not scraped"
        )

    async def _run_group(self, group: list[Target]) -> AsyncIterator[TargetOutcome]:
        tasks = [asyncio.ensure_future(self._dispatch(target)) for target in group]
        try:
            for next_done in asyncio.as_completed(tasks):
                try:
                    outcome = await next_done
                except RunInfrastructureFailure as e:
                    if self._error is None:
                        logger.error(f"Aborting run: {e}")
                        self._error = str(e)
                    continue

                if self._record(outcome):
                    yield outcome
        finally:
            pending = [t for t in tasks if not t.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

    async def _dispatch(self, target: Target) -> TargetOutcome:
        sequence_index = self._sequence
        self._sequence += 1
        await self._pacer.wait_slot(sequence_index)

        logger.debug(f"Scraping profile {target.profile_number}: {target.url}")
        try:
            return await self._policy.execute(target)
        except RunInfrastructureFailure:
            raise
        except Exception as e:
            logger.exception(f"Profile {target.profile_number} failed with exception")
            return TargetOutcome.failure(
                target, error=str(e), error_type=type(e).__name__, attempts=0
            )

    def _record(self, outcome: TargetOutcome) -> bool:
        if not self._state.record(outcome):
            logger.warning(
                f"Ignoring duplicate outcome for profile {outcome.target.profile_number}"
            )
            return False

        self._result.outcomes.append(outcome)
        self._channel.publish(OutcomeEvent.from_outcome(outcome))
        return True
