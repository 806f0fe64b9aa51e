"""Playwright-backed extraction port.

Runs one headless Chromium per scraper run and opens a new page for every
attempt, so a page left in a bad state by a failed attempt is never reused.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from ..core.config import ScraperConfig
from ..core.errors import (
    RunInfrastructureFailure,
    TargetTimeout,
    TargetTransportError,
)
from ..types.profiles import DashboardProfile, ProfileRecord
from ..types.targets import Target
from .base_port import ExtractionPort
from .directory import DirectoryListing
from .selectors import (
    FILTERS_SCRIPT,
    LISTING_SCRIPT,
    LISTING_SELECTORS,
    PROFILE_SCRIPT,
    PROFILE_SCRIPT_ARGS,
)

logger = logging.getLogger(__name__)

# Profile pages often render the name a moment after the rest
NAME_REPOLL_DELAY = 1.5

BROWSER_ARGS = ["--disable-dev-shm-usage", "--no-sandbox"]


@dataclass
class PageContext:
    """A browser page dedicated to one attempt."""

    target: Target
    page: Page


class PlaywrightPort(ExtractionPort):
    """Extraction port that drives Chromium through Playwright.

    Usage:
        async with PlaywrightPort(config) as port:
            listing = await port.read_directory(url)
    """

    name = "playwright"

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the port.

        Args:
            config: Scraper configuration.
            sleep: Sleep coroutine, injectable for tests.
        """
        self._config = config or ScraperConfig()
        self._sleep = sleep
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> "PlaywrightPort":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def start(self) -> None:
        """Launch the browser."""
        if self._browser is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._config.headless,
                args=BROWSER_ARGS,
            )
            self._context = await self._browser.new_context(
                user_agent=self._config.user_agent,
            )
        except PlaywrightError as e:
            await self.close()
            raise RunInfrastructureFailure(f"Could not launch browser: {e}") from e
        logger.info(f"Browser started (headless={self._config.headless})")

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        if self._context is not None:
            try:
                await self._context.close()
            except PlaywrightError as e:
                logger.debug(f"Browser context already closed: {e}")
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.debug(f"Browser already closed: {e}")
        if self._playwright is not None:
            await self._playwright.stop()
        self._context = None
        self._browser = None
        self._playwright = None

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    def _ensure_running(self) -> BrowserContext:
        if not self.is_running or self._context is None:
            raise RunInfrastructureFailure("Browser is not running")
        return self._context

    # --- ExtractionPort ---

    async def allocate_context(self, target: Target) -> PageContext:
        context = self._ensure_running()
        try:
            page = await context.new_page()
        except PlaywrightError as e:
            if not self.is_running:
                raise RunInfrastructureFailure(f"Browser disconnected: {e}") from e
            raise TargetTransportError(f"Could not open page: {e}", target.url) from e
        return PageContext(target=target, page=page)

    async def wait_loaded(self, context: PageContext, timeout: float) -> bool:
        try:
            response = await context.page.goto(
                context.target.url,
                wait_until="load",
                timeout=timeout * 1000,
            )
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as e:
            raise TargetTransportError(
                f"Navigation failed: {e}", context.target.url
            ) from e

        if response is not None and response.status >= 500:
            raise TargetTransportError(
                f"Server responded with HTTP {response.status}", context.target.url
            )
        return True

    async def extract(self, context: PageContext, timeout: float) -> Optional[ProfileRecord]:
        record = await self._read_profile(context)
        if record is not None and not record.name and timeout > NAME_REPOLL_DELAY:
            logger.debug(f"Name not rendered yet on {context.target.url}, reading again")
            await self._sleep(NAME_REPOLL_DELAY)
            record = await self._read_profile(context)
        return record

    async def release(self, context: PageContext) -> None:
        if not context.page.is_closed():
            await context.page.close()

    async def _read_profile(self, context: PageContext) -> Optional[ProfileRecord]:
        try:
            data = await context.page.evaluate(PROFILE_SCRIPT, PROFILE_SCRIPT_ARGS)
        except PlaywrightTimeoutError as e:
            raise TargetTimeout(f"Profile script timed out: {e}", context.target.url) from e
        except PlaywrightError as e:
            raise TargetTransportError(
                f"Could not read profile: {e}", context.target.url
            ) from e
        if not data:
            return None
        return ProfileRecord.model_validate(data)

    # --- Directory listing ---

    async def read_directory(self, url: str) -> DirectoryListing:
        """Read member rows and search filters from a directory page.

        Args:
            url: Directory listing URL.

        Returns:
            DirectoryListing with one row per rendered member.

        Raises:
            RunInfrastructureFailure: If the page could not be opened.
        """
        context = self._ensure_running()
        timeout_ms = self._config.listing_timeout * 1000

        try:
            page = await context.new_page()
        except PlaywrightError as e:
            raise RunInfrastructureFailure(f"Could not open directory page: {e}") from e

        try:
            try:
                await page.goto(url, wait_until="load", timeout=timeout_ms)
            except PlaywrightTimeoutError:
                logger.warning(f"Directory page did not finish loading in time: {url}")

            try:
                await page.wait_for_selector(LISTING_SELECTORS["name"], timeout=timeout_ms)
            except PlaywrightTimeoutError:
                logger.warning("No member rows rendered on the directory page")

            await self._sleep(self._config.render_settle)

            raw_rows = await page.evaluate(LISTING_SCRIPT, LISTING_SELECTORS)
            filters = await page.evaluate(FILTERS_SCRIPT)
        except PlaywrightError as e:
            raise RunInfrastructureFailure(f"Could not read directory page: {e}") from e
        finally:
            if not page.is_closed():
                await page.close()

        rows = [DashboardProfile.model_validate(row) for row in raw_rows or []]
        logger.info(
            f"Directory page has {len(rows)} rows, "
            f"{sum(1 for r in rows if r.profile_link)} with profile links"
        )
        return DirectoryListing(
            url=url,
            rows=rows,
            filters={str(k): str(v) for k, v in (filters or {}).items()},
        )
