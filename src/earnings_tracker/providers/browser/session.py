"""Shared headless-browser session.

One Chromium instance is launched per refresh run and reused by every site
adapter. Each lookup gets its own browsing context, opened and closed inside
the session's lifetime.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Literal

from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from earnings_tracker.core.constants import DEFAULT_BROWSER_USER_AGENT, DEFAULT_VIEWPORT
from earnings_tracker.core.exceptions import BrowserLaunchError, NavigationTimeoutError
from earnings_tracker.core.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page, Playwright

    from earnings_tracker.config import Settings

logger = get_logger(__name__)

WaitUntil = Literal["load", "domcontentloaded", "networkidle", "commit"]

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
]


class BrowserSession:
    """Reusable Playwright Chromium session.

    Usage:
        async with BrowserSession.from_settings(settings) as session:
            async with session.page() as page:
                await session.goto(page, "https://example.com")
    """

    def __init__(
        self,
        headless: bool = True,
        user_agent: str = DEFAULT_BROWSER_USER_AGENT,
        navigation_timeout: float = 30.0,
        wait_until: WaitUntil = "networkidle",
    ) -> None:
        self._headless = headless
        self._user_agent = user_agent
        self._navigation_timeout_ms = navigation_timeout * 1000
        self._wait_until: WaitUntil = wait_until
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> BrowserSession:
        return cls(
            headless=settings.browser_headless,
            user_agent=settings.browser_user_agent,
            navigation_timeout=settings.browser_navigation_timeout,
            wait_until=settings.browser_wait_until,
        )

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    async def open(self) -> None:
        """Launch the browser.

        Raises:
            BrowserLaunchError: Playwright or Chromium could not be started
        """
        if self._browser is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                args=_LAUNCH_ARGS,
            )
        except Exception as e:
            await self.close()
            raise BrowserLaunchError(f"Failed to launch browser: {e}") from e
        logger.info("Browser session opened", headless=self._headless)

    async def close(self) -> None:
        """Close the browser and stop Playwright. Safe to call repeatedly."""
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning("Error closing browser", error=str(e))
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning("Error stopping Playwright", error=str(e))
            logger.info("Browser session closed")

    async def __aenter__(self) -> BrowserSession:
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Open a fresh browsing context and page for one lookup."""
        if self._browser is None:
            raise RuntimeError("Browser session not open. Call open() first.")
        context = await self._browser.new_context(
            user_agent=self._user_agent,
            viewport=DEFAULT_VIEWPORT,  # type: ignore[arg-type]
            locale="en-US",
            timezone_id="America/New_York",
        )
        try:
            page = await context.new_page()
            page.set_default_navigation_timeout(self._navigation_timeout_ms)
            yield page
        finally:
            await context.close()

    async def goto(self, page: Page, url: str) -> None:
        """Navigate and wait for the page to settle.

        Raises:
            NavigationTimeoutError: The page did not settle within the navigation timeout
        """
        try:
            await page.goto(url, wait_until=self._wait_until, timeout=self._navigation_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(
                f"Navigation timeout of {int(self._navigation_timeout_ms)} ms exceeded: {url}"
            ) from e
