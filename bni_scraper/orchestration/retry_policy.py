"""Per-target retry policy.

Runs up to ``max_attempts`` attempts against one target. Each attempt gets
its own freshly allocated context which is released on every exit path.
Per-target errors become a failed TargetOutcome; only
RunInfrastructureFailure escapes.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ..core.config import ScraperConfig
from ..core.errors import (
    RunInfrastructureFailure,
    TargetNoData,
    TargetTimeout,
    TargetTransportError,
)
from ..extractors.base_port import ExtractionPort
from ..types.profiles import ProfileRecord
from ..types.targets import Attempt, AttemptStatus, Target, TargetOutcome

logger = logging.getLogger(__name__)

_ERROR_TYPES = {
    AttemptStatus.TIMEOUT: TargetTimeout.__name__,
    AttemptStatus.EXTRACTION_FAILED: TargetNoData.__name__,
    AttemptStatus.TRANSPORT_FAILED: TargetTransportError.__name__,
}


@dataclass
class RetryConfig:
    """Attempt budget and per-stage time budgets (seconds)."""

    max_attempts: int = 3
    load_timeout: float = 15.0
    render_settle: float = 2.0
    extract_timeout: float = 12.0
    inter_attempt_delay: float = 2.0

    @classmethod
    def from_config(cls, config: ScraperConfig) -> "RetryConfig":
        return cls(
            max_attempts=config.max_attempts,
            load_timeout=config.load_timeout,
            render_settle=config.render_settle,
            extract_timeout=config.extract_timeout,
            inter_attempt_delay=config.inter_attempt_delay,
        )


class RetryPolicy:
    """Executes one target with bounded retries."""

    def __init__(
        self,
        port: ExtractionPort,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the policy.

        Args:
            port: Extraction port that provides contexts and records.
            config: Retry configuration.
            sleep: Sleep coroutine, injectable for tests.
        """
        if config is not None and config.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._port = port
        self._config = config or RetryConfig()
        self._sleep = sleep

    @property
    def config(self) -> RetryConfig:
        return self._config

    async def execute(self, target: Target) -> TargetOutcome:
        """Scrape one target, retrying until success or budget exhaustion.

        Raises:
            RunInfrastructureFailure: If the port is no longer usable.
        """
        max_attempts = self._config.max_attempts
        last: Optional[Attempt] = None

        for ordinal in range(max_attempts):
            attempt = Attempt(target=target, ordinal=ordinal)
            await self._run_attempt(attempt)

            if attempt.status is AttemptStatus.SUCCESS and attempt.record is not None:
                if ordinal > 0:
                    logger.info(
                        f"Profile {target.profile_number} succeeded on attempt "
                        f"{ordinal + 1}/{max_attempts}"
                    )
                return TargetOutcome.success(target, attempt.record, attempts=ordinal + 1)

            last = attempt
            logger.warning(
                f"Attempt {ordinal + 1}/{max_attempts} failed for "
                f"{target.url}: {attempt.reason}"
            )

            if ordinal + 1 < max_attempts:
                delay = self._config.inter_attempt_delay
                logger.debug(f"Retrying {target.url} in {delay:.1f}s")
                if delay > 0:
                    await self._sleep(delay)

        return TargetOutcome.failure(
            target,
            error=last.reason if last else "No attempts made",
            error_type=_ERROR_TYPES.get(last.status) if last else None,
            attempts=max_attempts,
        )

    async def _run_attempt(self, attempt: Attempt) -> None:
        """Run a single attempt and record its status on ``attempt``."""
        target = attempt.target
        try:
            async with self._port.open_context(target) as context:
                loaded = await self._wait_loaded(context)
                if not loaded:
                    logger.debug(
                        f"Page load for {target.url} exceeded "
                        f"{self._config.load_timeout:.0f}s, extracting anyway"
                    )
                if self._config.render_settle > 0:
                    await self._sleep(self._config.render_settle)
                record = await self._extract(context, target)

            if record is None or record.is_empty:
                raise TargetNoData("No data extracted", target.url)

            attempt.status = AttemptStatus.SUCCESS
            attempt.record = record

        except TargetTimeout as e:
            attempt.status = AttemptStatus.TIMEOUT
            attempt.reason = str(e)
        except TargetNoData as e:
            attempt.status = AttemptStatus.EXTRACTION_FAILED
            attempt.reason = str(e)
        except TargetTransportError as e:
            attempt.status = AttemptStatus.TRANSPORT_FAILED
            attempt.reason = str(e)
        except RunInfrastructureFailure:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error scraping {target.url}")
            attempt.status = AttemptStatus.TRANSPORT_FAILED
            attempt.reason = f"{type(e).__name__}: {e}"

    async def _wait_loaded(self, context: Any) -> bool:
        timeout = self._config.load_timeout
        try:
            return await asyncio.wait_for(
                self._port.wait_loaded(context, timeout), timeout=timeout
            )
        except asyncio.TimeoutError:
            return False

    async def _extract(self, context: Any, target: Target) -> Optional[ProfileRecord]:
        timeout = self._config.extract_timeout
        try:
            return await asyncio.wait_for(
                self._port.extract(context, timeout), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise TargetTimeout("Timeout waiting for profile data", target.url) from e
