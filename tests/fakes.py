"""Fake ports, timers and builders shared by the scraper tests."""

import asyncio
from typing import Any, Optional

from bni_scraper.core.errors import (
    RunInfrastructureFailure,
    TargetTimeout,
    TargetTransportError,
)
from bni_scraper.extractors.base_port import ExtractionPort
from bni_scraper.extractors.directory import DirectoryListing
from bni_scraper.orchestration.retry_policy import RetryConfig
from bni_scraper.orchestration.scheduler import RunConfig
from bni_scraper.types.profiles import DashboardProfile, ProfileRecord
from bni_scraper.types.targets import Target, build_targets


def profile_url(index: int) -> str:
    return f"https://www.bni.example/en-US/memberdetails?userId={index}"


def make_targets(count: int) -> list[Target]:
    return build_targets([profile_url(i) for i in range(count)])


LISTING_URL = "https://www.bni.example/en-US/findamember?chapter=Downtown"


def make_listing(count: int, url: str = LISTING_URL) -> DirectoryListing:
    rows = [
        DashboardProfile(
            name=f"Member {i}",
            profile_link=profile_url(i),
            chapter="Downtown",
            company=f"Company {i}",
            city="Springfield",
            industry="Consulting",
        )
        for i in range(count)
    ]
    return DirectoryListing(url=url, rows=rows)


class FakeSleep:
    """Records requested delays without waiting for them."""

    def __init__(self, clock: Optional["FakeClock"] = None):
        self.calls: list[float] = []
        self._clock = clock

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self._clock is not None:
            self._clock.now += seconds
        # Still yield to the loop like a real sleep
        await asyncio.sleep(0)


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class FakeContext:
    def __init__(self, target: Target, ordinal: int):
        self.target = target
        self.ordinal = ordinal


class FakePort(ExtractionPort):
    """Scriptable extraction port.

    ``script`` maps a target index to one behaviour per attempt; the last
    behaviour repeats. Behaviours:

    - ``ok``: return a record
    - ``empty``: return no data
    - ``timeout``: raise TargetTimeout from extract
    - ``hang``: never finish extracting
    - ``slow_load``: never finish loading, then return a record
    - ``transport``: raise TargetTransportError while loading
    - ``boom``: raise an unexpected RuntimeError while loading
    - ``infra``: raise RunInfrastructureFailure on allocation
    """

    name = "fake"

    def __init__(
        self,
        script: Optional[dict[int, list[str]]] = None,
        delays: Optional[dict[int, float]] = None,
        listing: Optional[DirectoryListing] = None,
    ):
        self.script = script or {}
        self.delays = delays or {}
        self.listing = listing
        self.allocated: list[tuple[int, int]] = []
        self.released: list[tuple[int, int]] = []
        self.events: list[tuple[str, int]] = []
        self.open_contexts = 0
        self.max_open_contexts = 0
        self.entered = False
        self.exited = False

    def behaviour(self, index: int, ordinal: int) -> str:
        steps = self.script.get(index, ["ok"])
        return steps[min(ordinal, len(steps) - 1)]

    def attempts_for(self, index: int) -> int:
        return sum(1 for i, _ in self.allocated if i == index)

    async def __aenter__(self) -> "FakePort":
        self.entered = True
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.exited = True

    async def read_directory(self, url: str) -> DirectoryListing:
        if self.listing is None:
            return DirectoryListing(url=url)
        return self.listing

    async def allocate_context(self, target: Target) -> FakeContext:
        ordinal = self.attempts_for(target.index)
        if self.behaviour(target.index, ordinal) == "infra":
            raise RunInfrastructureFailure("Browser disconnected")
        self.allocated.append((target.index, ordinal))
        self.events.append(("allocate", target.index))
        self.open_contexts += 1
        self.max_open_contexts = max(self.max_open_contexts, self.open_contexts)
        return FakeContext(target, ordinal)

    async def wait_loaded(self, context: FakeContext, timeout: float) -> bool:
        behaviour = self.behaviour(context.target.index, context.ordinal)
        if behaviour == "transport":
            raise TargetTransportError("Navigation failed", context.target.url)
        if behaviour == "boom":
            raise RuntimeError("unexpected")
        if behaviour == "slow_load":
            await asyncio.Event().wait()
        return True

    async def extract(self, context: FakeContext, timeout: float) -> Optional[ProfileRecord]:
        index = context.target.index
        delay = self.delays.get(index)
        if delay:
            await asyncio.sleep(delay)

        behaviour = self.behaviour(index, context.ordinal)
        if behaviour == "timeout":
            raise TargetTimeout("Timeout waiting for profile data", context.target.url)
        if behaviour == "hang":
            await asyncio.Event().wait()
        if behaviour == "empty":
            return None
        return ProfileRecord(
            name=f"Member {index}",
            email=f"member{index}@example.com",
            phone1="555-0100",
        )

    async def release(self, context: FakeContext) -> None:
        self.released.append((context.target.index, context.ordinal))
        self.events.append(("release", context.target.index))
        self.open_contexts -= 1


def fast_run_config(batch_size: int = 5, **retry: Any) -> RunConfig:
    """Run configuration with real timeouts short enough for tests."""
    retry_config = RetryConfig(
        max_attempts=retry.get("max_attempts", 3),
        load_timeout=retry.get("load_timeout", 0.05),
        render_settle=retry.get("render_settle", 0.5),
        extract_timeout=retry.get("extract_timeout", 1.0),
        inter_attempt_delay=retry.get("inter_attempt_delay", 2.0),
    )
    return RunConfig(batch_size=batch_size, retry=retry_config)
