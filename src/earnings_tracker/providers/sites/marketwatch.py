"""MarketWatch quote page adapter."""

from __future__ import annotations

from earnings_tracker.core.constants import MARKETWATCH_QUOTE_URL
from earnings_tracker.providers.sites.base import BrowserSiteAdapter, PageSnapshot, SourceResult
from earnings_tracker.providers.sites.parsing import (
    classify_timing,
    find_time,
    parse_earnings_date,
    timing_from_keywords,
)


class MarketWatchAdapter(BrowserSiteAdapter):
    name = "marketwatch"
    url_template = MARKETWATCH_QUOTE_URL

    def url_for(self, ticker: str) -> str:
        return self.url_template.format(ticker=ticker.lower())

    def parse(self, snapshot: PageSnapshot, ticker: str) -> SourceResult:
        for item in snapshot.soup.select(".key-data li, .list--kv li"):
            text = item.get_text(" ", strip=True)
            lowered = text.lower()
            if "earnings" not in lowered and "reports" not in lowered:
                continue

            time_text = find_time(text)
            if time_text:
                classification = classify_timing(time_text)
                earnings_time, market_timing = classification.time_text, classification.market_timing
            else:
                earnings_time, market_timing = None, timing_from_keywords(text)

            return SourceResult(
                source=self.name,
                ticker=ticker,
                earnings_date=parse_earnings_date(text)[0],
                earnings_time=earnings_time,
                market_timing=market_timing,
            )
        return SourceResult(source=self.name, ticker=ticker)
