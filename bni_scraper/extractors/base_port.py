"""Extraction port contract.

The orchestrator only depends on this interface: allocate an isolated
execution context for a target, wait for it to load, ask it for a record,
and release it. Implementations decide what a context is (a browser page,
a fake in tests).
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from ..types.profiles import ProfileRecord
from ..types.targets import Target

logger = logging.getLogger(__name__)


class ExtractionPort(ABC):
    """Abstract base class for profile extraction backends."""

    name: str = "base"

    @abstractmethod
    async def allocate_context(self, target: Target) -> Any:
        """Allocate a fresh, isolated context for one attempt.

        Raises:
            TargetTransportError: If a context could not be created.
            RunInfrastructureFailure: If the backend is gone for good.
        """

    @abstractmethod
    async def wait_loaded(self, context: Any, timeout: float) -> bool:
        """Wait for the target page to load.

        Returns:
            True when loaded, False when ``timeout`` elapsed first.
        """

    @abstractmethod
    async def extract(self, context: Any, timeout: float) -> Optional[ProfileRecord]:
        """Read the profile record from a loaded context.

        Returns:
            The record, or None when the page held no profile data.

        Raises:
            TargetTimeout: If the page did not answer within ``timeout``.
            TargetTransportError: If the page could not be read.
        """

    @abstractmethod
    async def release(self, context: Any) -> None:
        """Tear the context down. Must tolerate already-closed contexts."""

    @asynccontextmanager
    async def open_context(self, target: Target) -> AsyncIterator[Any]:
        """Allocate a context and release it on every exit path."""
        context = await self.allocate_context(target)
        try:
            yield context
        finally:
            try:
                await self.release(context)
            except Exception as e:
                logger.warning(f"Failed to release context for {target.url}: {e}")
