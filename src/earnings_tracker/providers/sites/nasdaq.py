"""Nasdaq earnings page adapter."""

from __future__ import annotations

from earnings_tracker.core.constants import NASDAQ_EARNINGS_URL
from earnings_tracker.providers.sites.base import (
    BrowserSiteAdapter,
    PageSnapshot,
    SourceResult,
    Strategy,
    first_result,
)
from earnings_tracker.providers.sites.parsing import (
    classify_timing,
    find_time,
    parse_earnings_date,
    timing_from_keywords,
)


def _earnings_row(snapshot: PageSnapshot, ticker: str) -> str | None:
    for row in snapshot.soup.select("table tr"):
        cells = row.find_all(["td", "th"])
        if len(cells) >= 2 and "earnings date" in cells[0].get_text(strip=True).lower():
            return cells[1].get_text(" ", strip=True) or None
    return None


def _earnings_test_id(snapshot: PageSnapshot, ticker: str) -> str | None:
    return snapshot.select_text('[data-testid="earnings-date"]')


def _earnings_announcement(snapshot: PageSnapshot, ticker: str) -> str | None:
    return snapshot.select_text(".earnings-forecast__announcement") or snapshot.select_text(
        '[class*="announcement"]'
    )


EARNINGS_TEXT_STRATEGIES: tuple[Strategy[str], ...] = (
    _earnings_row,
    _earnings_test_id,
    _earnings_announcement,
)


class NasdaqAdapter(BrowserSiteAdapter):
    name = "nasdaq"
    url_template = NASDAQ_EARNINGS_URL

    def url_for(self, ticker: str) -> str:
        return self.url_template.format(ticker=ticker.lower())

    def parse(self, snapshot: PageSnapshot, ticker: str) -> SourceResult:
        text = first_result(EARNINGS_TEXT_STRATEGIES, snapshot, ticker)
        if not text:
            return SourceResult(source=self.name, ticker=ticker)

        earnings_date, _ = parse_earnings_date(text)
        time_text = find_time(text)
        if time_text:
            classification = classify_timing(time_text)
            earnings_time, market_timing = classification.time_text, classification.market_timing
        else:
            earnings_time, market_timing = None, timing_from_keywords(text)

        return SourceResult(
            source=self.name,
            ticker=ticker,
            earnings_date=earnings_date,
            earnings_time=earnings_time,
            market_timing=market_timing,
        )
