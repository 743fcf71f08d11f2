"""Site adapter base classes and the extraction-strategy runner."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from functools import cached_property
from typing import TYPE_CHECKING, ClassVar, TypeVar

from bs4 import BeautifulSoup, Tag

from earnings_tracker.core.logging import get_logger
from earnings_tracker.providers.browser.overlay import dismiss_consent_overlay
from earnings_tracker.providers.browser.waits import wait_for_content

if TYPE_CHECKING:
    from playwright.async_api import Page

    from earnings_tracker.providers.browser.session import BrowserSession

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class SourceResult:
    """Raw output of one adapter run for one ticker. Missing values are None."""

    source: str
    ticker: str
    earnings_date: date | None = None
    earnings_date_range: str | None = None
    earnings_time: str | None = None
    market_timing: str | None = None
    eps_estimate: float | None = None
    year_ago_eps: float | None = None
    company_name: str | None = None
    error: str | None = None

    @property
    def has_timing_signal(self) -> bool:
        return self.earnings_time is not None or self.market_timing is not None

    @property
    def has_data(self) -> bool:
        return (
            self.earnings_date is not None
            or self.eps_estimate is not None
            or self.year_ago_eps is not None
        )

    @classmethod
    def failed(cls, source: str, ticker: str, error: str) -> SourceResult:
        return cls(source=source, ticker=ticker, error=error)


@dataclass
class PageSnapshot:
    """Rendered HTML of a page, parsed once for the extraction strategies."""

    url: str
    html: str
    soup: BeautifulSoup = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.soup = BeautifulSoup(self.html, "html.parser")

    @cached_property
    def text(self) -> str:
        return self.soup.get_text(" ", strip=True)

    def select_text(self, selector: str) -> str | None:
        """Stripped text of the first match, or None if missing or blank."""
        element = self.soup.select_one(selector)
        if element is None:
            return None
        text = element.get_text(" ", strip=True)
        return text or None

    def elements(self, *names: str) -> list[Tag]:
        """All elements with the given tag names, or every element."""
        return list(self.soup.find_all(list(names) if names else True))


Strategy = Callable[[PageSnapshot, str], T | None]


def first_result(
    strategies: Sequence[Strategy[T]],
    snapshot: PageSnapshot,
    ticker: str,
) -> T | None:
    """Run strategies in order and return the first non-None value."""
    for strategy in strategies:
        try:
            value = strategy(snapshot, ticker)
        except Exception as e:
            logger.debug("Extraction strategy failed", strategy=strategy.__name__, error=str(e))
            continue
        if value is not None:
            return value
    return None


class BrowserSiteAdapter(ABC):
    """Base for adapters that read one finance site through the shared browser.

    Subclasses declare the URL and content region and implement ``parse``,
    a pure function of the rendered page. Navigation, overlay dismissal,
    waiting and re-extraction are handled here, and every failure is turned
    into a ``SourceResult`` with ``error`` set.
    """

    name: ClassVar[str]
    url_template: ClassVar[str]
    content_selector: ClassVar[str | None] = None
    trigger_selectors: ClassVar[tuple[str, ...]] = ()

    def __init__(self, extraction_attempts: int = 3, retry_delay: float = 2.0) -> None:
        self._extraction_attempts = max(1, extraction_attempts)
        self._retry_delay = retry_delay

    def url_for(self, ticker: str) -> str:
        return self.url_template.format(ticker=ticker)

    async def extract(self, ticker: str, session: BrowserSession) -> SourceResult:
        """Run the adapter for one ticker. Never raises."""
        try:
            async with session.page() as page:
                result = await self._extract_from_page(page, ticker, session)
        except Exception as e:
            logger.warning("Source extraction failed", source=self.name, ticker=ticker, error=str(e))
            return SourceResult.failed(self.name, ticker, str(e) or type(e).__name__)

        logger.debug(
            "Source extracted",
            source=self.name,
            ticker=ticker,
            date=result.earnings_date,
            time=result.earnings_time,
            timing=result.market_timing,
        )
        return result

    async def _load(self, page: Page, url: str, session: BrowserSession) -> None:
        await session.goto(page, url)
        await dismiss_consent_overlay(page)
        if self.content_selector:
            await wait_for_content(page, self.content_selector, self.trigger_selectors)

    async def _extract_from_page(
        self, page: Page, ticker: str, session: BrowserSession
    ) -> SourceResult:
        url = self.url_for(ticker)
        await self._load(page, url, session)
        return await self._parse_until_complete(page, url, ticker, self.parse, self.is_complete)

    async def _parse_until_complete(
        self,
        page: Page,
        url: str,
        ticker: str,
        parser: Callable[[PageSnapshot, str], SourceResult],
        complete: Callable[[SourceResult], bool],
    ) -> SourceResult:
        """Snapshot and parse the page, re-trying while nothing useful is found."""
        result = SourceResult(source=self.name, ticker=ticker)
        for attempt in range(1, self._extraction_attempts + 1):
            snapshot = PageSnapshot(url=url, html=await page.content())
            result = parser(snapshot, ticker)
            if complete(result):
                break
            if attempt < self._extraction_attempts:
                logger.debug("Nothing extracted, retrying", source=self.name, attempt=attempt)
                await asyncio.sleep(self._retry_delay)
        return result

    def is_complete(self, result: SourceResult) -> bool:
        return result.has_timing_signal

    @abstractmethod
    def parse(self, snapshot: PageSnapshot, ticker: str) -> SourceResult:
        """Extract fields from a rendered page."""
