"""EarningsWhispers adapter (first secondary timing source).

The calendar widget (``#caldata``) renders late and sits behind a consent
banner for many visitors, so this adapter leans on the overlay and wait
helpers before running its extraction strategies.
"""

from __future__ import annotations

import re

from earnings_tracker.core.constants import EARNINGS_WHISPERS_URL
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
    is_strict_time,
    parse_compact_date,
    parse_earnings_date,
    timing_from_keywords,
    timing_near_ticker,
)

_GOTOCAL = re.compile(r"gotocal\((\d{8})\s*,")

# ─────────────────────────────────────────────────────────────
# Time strategies (return the raw time text)
# ─────────────────────────────────────────────────────────────


def _time_from_known_selectors(snapshot: PageSnapshot, ticker: str) -> str | None:
    for selector in ("#epsdate-time", ".epsdate-time", "#caldata .time"):
        text = snapshot.select_text(selector)
        if text and find_time(text):
            return text
    return None


def _time_from_strict_elements(snapshot: PageSnapshot, ticker: str) -> str | None:
    candidates = snapshot.elements("div", "span") + snapshot.soup.select(".row .col-12")
    for element in candidates:
        text = element.get_text(" ", strip=True)
        if text and is_strict_time(text) and find_time(text):
            return text
    return None


def _time_from_calendar_text(snapshot: PageSnapshot, ticker: str) -> str | None:
    text = snapshot.select_text("#caldata")
    return find_time(text) if text else None


def _time_from_page_html(snapshot: PageSnapshot, ticker: str) -> str | None:
    return find_time(snapshot.html)


TIME_STRATEGIES: tuple[Strategy[str], ...] = (
    _time_from_known_selectors,
    _time_from_strict_elements,
    _time_from_calendar_text,
    _time_from_page_html,
)

# ─────────────────────────────────────────────────────────────
# Keyword timing strategies (return "before" / "after")
# ─────────────────────────────────────────────────────────────


def _timing_from_calendar_keywords(snapshot: PageSnapshot, ticker: str) -> str | None:
    return timing_from_keywords(snapshot.select_text("#caldata"))


def _timing_near_ticker(snapshot: PageSnapshot, ticker: str) -> str | None:
    return timing_near_ticker(snapshot.text, ticker)


def _timing_from_page_keywords(snapshot: PageSnapshot, ticker: str) -> str | None:
    return timing_from_keywords(snapshot.text)


KEYWORD_TIMING_STRATEGIES: tuple[Strategy[str], ...] = (
    _timing_from_calendar_keywords,
    _timing_near_ticker,
    _timing_from_page_keywords,
)

# ─────────────────────────────────────────────────────────────
# Date strategies
# ─────────────────────────────────────────────────────────────


def _date_from_onclick(snapshot: PageSnapshot, ticker: str) -> str | None:
    for element in snapshot.soup.select("[onclick]"):
        match = _GOTOCAL.search(str(element.get("onclick", "")))
        if match:
            return match.group(1)
    return None


def _date_from_epsdate(snapshot: PageSnapshot, ticker: str) -> str | None:
    return snapshot.select_text("#epsdate-act") or snapshot.select_text("#epsdate")


DATE_STRATEGIES: tuple[Strategy[str], ...] = (
    _date_from_onclick,
    _date_from_epsdate,
)


class EarningsWhispersAdapter(BrowserSiteAdapter):
    name = "earningswhispers"
    url_template = EARNINGS_WHISPERS_URL
    content_selector = "#caldata"
    trigger_selectors = ("#caldata", ".calendar-icon", '[class*="earnings"]')

    def url_for(self, ticker: str) -> str:
        return self.url_template.format(ticker=ticker.lower())

    def parse(self, snapshot: PageSnapshot, ticker: str) -> SourceResult:
        earnings_time: str | None = None
        market_timing: str | None = None

        raw_time = first_result(TIME_STRATEGIES, snapshot, ticker)
        if raw_time:
            classification = classify_timing(find_time(raw_time) or raw_time)
            earnings_time = classification.time_text
            market_timing = classification.market_timing
        if market_timing is None:
            market_timing = first_result(KEYWORD_TIMING_STRATEGIES, snapshot, ticker)

        raw_date = first_result(DATE_STRATEGIES, snapshot, ticker)
        earnings_date = None
        if raw_date:
            earnings_date = parse_compact_date(raw_date) if raw_date.isdigit() else None
            if earnings_date is None:
                earnings_date = parse_earnings_date(raw_date)[0]

        return SourceResult(
            source=self.name,
            ticker=ticker,
            earnings_date=earnings_date,
            earnings_time=earnings_time,
            market_timing=market_timing,
        )
