"""Batch scraping orchestration."""

from .rate_limiter import Pacer, PauseKind
from .retry_policy import RetryConfig, RetryPolicy
from .events import NotificationChannel, OutcomeEvent
from .progress import (
    ProgressAggregator,
    ProgressSnapshot,
    RunEstimate,
    format_duration,
    initial_estimate,
)
from .scheduler import (
    BatchScheduler,
    RunConfig,
    RunResult,
    RunState,
    RunStatus,
    partition,
)
from .controller import RunController
from .session import ScrapeSession, SessionResult

__all__ = [
    # Pacing
    "Pacer",
    "PauseKind",
    # Retries
    "RetryConfig",
    "RetryPolicy",
    # Notifications
    "NotificationChannel",
    "OutcomeEvent",
    # Progress
    "ProgressAggregator",
    "ProgressSnapshot",
    "format_duration",
    "RunEstimate",
    "initial_estimate",
    # Scheduler
    "BatchScheduler",
    "RunConfig",
    "RunResult",
    "RunState",
    "RunStatus",
    "partition",
    # Control
    "RunController",
    "ScrapeSession",
    "SessionResult",
]
