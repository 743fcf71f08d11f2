"""Benzinga earnings page adapter."""

from __future__ import annotations

from earnings_tracker.core.constants import BENZINGA_EARNINGS_URL
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


def _next_earnings_block(snapshot: PageSnapshot, ticker: str) -> str | None:
    return snapshot.select_text(".next-earnings-date")


def _earnings_table_row(snapshot: PageSnapshot, ticker: str) -> str | None:
    for row in snapshot.soup.select(".earnings-table tr"):
        text = row.get_text(" ", strip=True)
        if find_time(text) or timing_from_keywords(text):
            return text
    return None


EARNINGS_TEXT_STRATEGIES: tuple[Strategy[str], ...] = (
    _next_earnings_block,
    _earnings_table_row,
)


class BenzingaAdapter(BrowserSiteAdapter):
    name = "benzinga"
    url_template = BENZINGA_EARNINGS_URL

    def url_for(self, ticker: str) -> str:
        return self.url_template.format(ticker=ticker.upper())

    def parse(self, snapshot: PageSnapshot, ticker: str) -> SourceResult:
        text = first_result(EARNINGS_TEXT_STRATEGIES, snapshot, ticker)
        if not text:
            return SourceResult(source=self.name, ticker=ticker)

        time_text = find_time(text)
        classification = classify_timing(time_text) if time_text else None
        return SourceResult(
            source=self.name,
            ticker=ticker,
            earnings_date=parse_earnings_date(text)[0],
            earnings_time=classification.time_text if classification else None,
            market_timing=(
                classification.market_timing if classification else timing_from_keywords(text)
            ),
        )
