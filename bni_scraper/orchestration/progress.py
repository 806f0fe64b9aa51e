"""Progress aggregation for scraping runs.

Counts each target's resolution exactly once, however many times its
notification is delivered, and derives average time per profile and time
remaining from wall-clock elapsed time.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .events import OutcomeEvent


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time view of run progress."""

    total: int
    succeeded: int
    failed: int
    current_profile: int
    elapsed_seconds: float
    average_seconds: Optional[float]
    eta_seconds: Optional[float]

    @property
    def resolved(self) -> int:
        return self.succeeded + self.failed

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.resolved)

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.resolved / self.total * 100)

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.resolved >= self.total


class ProgressAggregator:
    """Idempotent consumer of outcome events.

    Subscribe ``on_outcome`` to a NotificationChannel. Deduplication is
    keyed on the target index.
    """

    def __init__(
        self,
        total: int = 0,
        on_update: Optional[Callable[[ProgressSnapshot], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the aggregator.

        Args:
            total: Number of targets in the run.
            on_update: Called with a fresh snapshot after each counted event.
            clock: Monotonic clock, injectable for tests.
        """
        self._on_update = on_update
        self._clock = clock
        self._lock = threading.Lock()
        self.reset(total)

    def reset(self, total: int) -> None:
        """Start counting a new run."""
        with self._lock:
            self._total = total
            self._counted: set[int] = set()
            self._succeeded = 0
            self._failed = 0
            self._current_profile = 0
            self._started_at = self._clock()

    def on_outcome(self, event: OutcomeEvent) -> bool:
        """Count an outcome event.

        Returns:
            True if the event was counted, False if it was a duplicate.
        """
        with self._lock:
            if event.target_index in self._counted:
                return False
            self._counted.add(event.target_index)

            if event.succeeded:
                self._succeeded += 1
            else:
                self._failed += 1
            self._current_profile = event.profile_number
            snapshot = self._snapshot_locked()

        if self._on_update:
            self._on_update(snapshot)
        return True

    def snapshot(self) -> ProgressSnapshot:
        """Get current progress."""
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> ProgressSnapshot:
        elapsed = max(0.0, self._clock() - self._started_at)
        resolved = self._succeeded + self._failed

        average = None
        eta = None
        if resolved > 0:
            average = elapsed / resolved
            eta = max(0.0, average * (self._total - resolved))

        return ProgressSnapshot(
            total=self._total,
            succeeded=self._succeeded,
            failed=self._failed,
            current_profile=self._current_profile,
            elapsed_seconds=elapsed,
            average_seconds=average,
            eta_seconds=eta,
        )

    @property
    def succeeded(self) -> int:
        with self._lock:
            return self._succeeded

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    @property
    def resolved(self) -> int:
        with self._lock:
            return len(self._counted)


def format_duration(seconds: Optional[float]) -> str:
    """Format seconds as ``42s``, ``3m 5s`` or ``1h 2m``."""
    if seconds is None:
        return "Calculating..."
    if seconds < 60:
        return f"{round(seconds)}s"
    if seconds < 3600:
        minutes = int(seconds // 60)
        return f"{minutes}m {round(seconds % 60)}s"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours}h {minutes}m"


@dataclass(frozen=True)
class RunEstimate:
    """Up-front estimate shown before a run starts."""

    profiles: int
    batches: int
    minutes: int


def initial_estimate(
    profiles: int, batch_size: int, seconds_per_profile: float = 8.0
) -> RunEstimate:
    """Estimate batches and whole minutes for ``profiles`` targets."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    batches = math.ceil(profiles / batch_size) if profiles > 0 else 0
    minutes = math.ceil(profiles * seconds_per_profile / 60) if profiles > 0 else 0
    return RunEstimate(profiles=profiles, batches=batches, minutes=minutes)
