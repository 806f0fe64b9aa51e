"""Outcome notification channel.

Delivery contract for subscribers: events may arrive more than once, in any
order, and may be missed entirely by a listener that fails or has been
detached. Consumers must therefore be idempotent, and nothing that affects
the exported result may depend on them.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from ..types.targets import TargetOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutcomeEvent:
    """Notification that one target was resolved."""

    target_index: int
    profile_number: int
    url: str
    succeeded: bool
    error_reason: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: TargetOutcome) -> "OutcomeEvent":
        return cls(
            target_index=outcome.target.index,
            profile_number=outcome.target.profile_number,
            url=outcome.target.url,
            succeeded=outcome.succeeded,
            error_reason=outcome.error,
        )


Listener = Callable[[OutcomeEvent], None]


class NotificationChannel:
    """Fan-out of outcome events to any number of listeners."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A callable that detaches the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def publish(self, event: OutcomeEvent) -> int:
        """Deliver an event to every listener.

        A failing listener loses this event; the others still receive it.

        Returns:
            Number of listeners that accepted the event.
        """
        with self._lock:
            listeners = list(self._listeners)

        delivered = 0
        for listener in listeners:
            try:
                listener(event)
                delivered += 1
            except Exception:
                logger.exception(
                    f"Listener dropped event for profile {event.profile_number}"
                )
        return delivered
