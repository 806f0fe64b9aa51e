"""Dispatch pacing toward the directory site.

Spaces out page opens within a dispatch group and pauses between groups,
with a longer break every N groups to stay clear of remote throttling.
Pacing depends only on dispatch counts, never on success or failure.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class PauseKind(str, Enum):
    """Kind of pause taken before a dispatch group."""

    NONE = "none"
    SHORT = "short"
    LONG = "long"


@dataclass
class PacerStats:
    """Counters for pacing activity."""

    dispatches: int = 0
    short_pauses: int = 0
    long_pauses: int = 0
    total_wait_seconds: float = 0.0


class Pacer:
    """Gate for dispatch timing.

    Features:
    - Minimum spacing between consecutive dispatch starts
    - Short pause between dispatch groups
    - Long pause every ``long_pause_every`` groups
    """

    def __init__(
        self,
        dispatch_spacing: float = 2.0,
        group_delay: float = 3.0,
        long_pause_every: int = 15,
        long_pause: float = 15.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the pacer.

        Args:
            dispatch_spacing: Seconds between consecutive dispatch starts.
            group_delay: Seconds to pause between dispatch groups.
            long_pause_every: Take a long pause before every Nth group.
            long_pause: Seconds for the long pause.
            sleep: Sleep coroutine, injectable for tests.
            clock: Monotonic clock, injectable for tests.
        """
        if long_pause_every < 1:
            raise ValueError("long_pause_every must be at least 1")

        self._dispatch_spacing = dispatch_spacing
        self._group_delay = group_delay
        self._long_pause_every = long_pause_every
        self._long_pause = long_pause
        self._sleep = sleep
        self._clock = clock

        self._slot_lock = asyncio.Lock()
        self._stats_lock = threading.Lock()
        self._stats = PacerStats()
        self._next_slot_at = 0.0

    async def wait_slot(self, sequence_index: int) -> float:
        """Suspend until the next dispatch may start.

        Concurrent callers are queued in the order they reserve a slot.

        Args:
            sequence_index: Overall dispatch number, for logging.

        Returns:
            Seconds waited.
        """
        async with self._slot_lock:
            now = self._clock()
            start_at = max(now, self._next_slot_at)
            self._next_slot_at = start_at + self._dispatch_spacing

        delay = start_at - now
        if delay > 0:
            logger.debug(f"Dispatch {sequence_index} waits {delay:.1f}s for its slot")
            await self._sleep(delay)

        with self._stats_lock:
            self._stats.dispatches += 1
            self._stats.total_wait_seconds += max(delay, 0.0)
        return max(delay, 0.0)

    def pause_kind(self, group_index: int) -> PauseKind:
        """Pause to take before dispatch group ``group_index`` (0-based)."""
        if group_index <= 0:
            return PauseKind.NONE
        if group_index % self._long_pause_every == 0:
            return PauseKind.LONG
        return PauseKind.SHORT

    async def wait_group(self, group_index: int) -> PauseKind:
        """Pause at a group boundary before dispatching ``group_index``.

        Returns:
            The kind of pause taken.
        """
        kind = self.pause_kind(group_index)
        if kind is PauseKind.NONE:
            return kind

        if kind is PauseKind.LONG:
            delay = self._long_pause
            logger.info(
                f"Taking extended break ({delay:.0f}s) before group {group_index + 1} "
                "to avoid rate limits"
            )
        else:
            delay = self._group_delay
            logger.debug(f"Waiting {delay:.1f}s before group {group_index + 1}")

        if delay > 0:
            await self._sleep(delay)

        with self._stats_lock:
            if kind is PauseKind.LONG:
                self._stats.long_pauses += 1
            else:
                self._stats.short_pauses += 1
            self._stats.total_wait_seconds += delay

        # A new group starts its own spacing sequence
        async with self._slot_lock:
            self._next_slot_at = self._clock()
        return kind

    def get_stats(self) -> dict[str, Any]:
        """Get pacing statistics."""
        with self._stats_lock:
            return {
                "dispatches": self._stats.dispatches,
                "short_pauses": self._stats.short_pauses,
                "long_pauses": self._stats.long_pauses,
                "total_wait_seconds": self._stats.total_wait_seconds,
                "dispatch_spacing": self._dispatch_spacing,
                "group_delay": self._group_delay,
                "long_pause_every": self._long_pause_every,
                "long_pause": self._long_pause,
            }

    def reset(self) -> None:
        """Reset counters and spacing state."""
        with self._stats_lock:
            self._stats = PacerStats()
        self._next_slot_at = 0.0
