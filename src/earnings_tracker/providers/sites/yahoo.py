"""Yahoo Finance adapter (primary source).

Reads the next earnings date (or date range) and company name from the quote
page, then the consensus estimate and year-ago EPS from the analysis page.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import date
from typing import TYPE_CHECKING

from earnings_tracker.core.constants import YAHOO_ANALYSIS_URL, YAHOO_QUOTE_URL
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
    parse_eps,
)

if TYPE_CHECKING:
    from playwright.async_api import Page

    from earnings_tracker.providers.browser.session import BrowserSession

_TICKER_SUFFIX = re.compile(r"\s*\([A-Z0-9.\-^=]+\)\s*$")

# ─────────────────────────────────────────────────────────────
# Quote page strategies
# ─────────────────────────────────────────────────────────────


def _date_from_title_sibling(snapshot: PageSnapshot, ticker: str) -> str | None:
    return snapshot.select_text('span[title="Earnings Date"] + span')


def _date_from_data_test(snapshot: PageSnapshot, ticker: str) -> str | None:
    return snapshot.select_text('[data-test="EARNINGS_DATE-value"]')


def _date_from_label_scan(snapshot: PageSnapshot, ticker: str) -> str | None:
    for label in snapshot.elements("span", "td", "div"):
        if label.get_text(strip=True).startswith("Earnings Date") and len(label.get_text()) < 40:
            value = label.find_next_sibling()
            if value is not None:
                text = value.get_text(" ", strip=True)
                if text:
                    return text
    return None


EARNINGS_DATE_STRATEGIES: tuple[Strategy[str], ...] = (
    _date_from_title_sibling,
    _date_from_data_test,
    _date_from_label_scan,
)


def _name_from_heading(snapshot: PageSnapshot, ticker: str) -> str | None:
    heading = snapshot.select_text("h1")
    if not heading or heading.upper() == ticker.upper():
        return None
    return _TICKER_SUFFIX.sub("", heading).strip() or None


def _name_from_title(snapshot: PageSnapshot, ticker: str) -> str | None:
    title = snapshot.select_text("title")
    if not title or f"({ticker.upper()})" not in title:
        return None
    name = title.split(f"({ticker.upper()})")[0].strip()
    return name or None


COMPANY_NAME_STRATEGIES: tuple[Strategy[str], ...] = (
    _name_from_heading,
    _name_from_title,
)

# ─────────────────────────────────────────────────────────────
# Analysis page strategies
# ─────────────────────────────────────────────────────────────


def _table_row_value(snapshot: PageSnapshot, scope: str, label: str) -> float | None:
    for row in snapshot.soup.select(f"{scope} tr"):
        cells = row.find_all(["td", "th"])
        if len(cells) >= 2 and cells[0].get_text(strip=True) == label:
            return parse_eps(cells[1].get_text(strip=True))
    return None


def _current_qtr_value(snapshot: PageSnapshot, label: str) -> float | None:
    for table in snapshot.soup.find_all("table"):
        header = table.find("tr")
        if header is None or "Current Qtr" not in header.get_text(" ", strip=True):
            continue
        for row in table.find_all("tr")[1:]:
            cells = row.find_all(["td", "th"])
            if len(cells) >= 2 and cells[0].get_text(strip=True) == label:
                return parse_eps(cells[1].get_text(strip=True))
    return None


def _estimate_from_section(snapshot: PageSnapshot, ticker: str) -> float | None:
    return _table_row_value(snapshot, 'section[data-testid="earningsEstimate"]', "Avg. Estimate")


def _estimate_from_tooltip(snapshot: PageSnapshot, ticker: str) -> float | None:
    return parse_eps(
        snapshot.select_text(
            'div[title="Estimate"] span.txt-positive, div[title="Estimate"] span.txt-negative'
        )
    )


def _estimate_from_current_qtr(snapshot: PageSnapshot, ticker: str) -> float | None:
    return _current_qtr_value(snapshot, "Avg. Estimate")


def _year_ago_from_section(snapshot: PageSnapshot, ticker: str) -> float | None:
    return _table_row_value(snapshot, 'section[data-testid="earningsEstimate"]', "Year Ago EPS")


def _year_ago_from_current_qtr(snapshot: PageSnapshot, ticker: str) -> float | None:
    return _current_qtr_value(snapshot, "Year Ago EPS")


EPS_ESTIMATE_STRATEGIES: tuple[Strategy[float], ...] = (
    _estimate_from_section,
    _estimate_from_tooltip,
    _estimate_from_current_qtr,
)
YEAR_AGO_STRATEGIES: tuple[Strategy[float], ...] = (
    _year_ago_from_section,
    _year_ago_from_current_qtr,
)


class YahooFinanceAdapter(BrowserSiteAdapter):
    """Primary adapter: event date, consensus estimate, year-ago EPS, company name."""

    name = "yahoo"
    url_template = YAHOO_QUOTE_URL
    analysis_url_template = YAHOO_ANALYSIS_URL

    def url_for(self, ticker: str) -> str:
        return self.url_template.format(ticker=ticker.upper())

    def analysis_url_for(self, ticker: str) -> str:
        return self.analysis_url_template.format(ticker=ticker.upper())

    async def _extract_from_page(
        self, page: Page, ticker: str, session: BrowserSession
    ) -> SourceResult:
        quote_url = self.url_for(ticker)
        await self._load(page, quote_url, session)
        quote = await self._parse_until_complete(
            page, quote_url, ticker, self.parse, lambda r: r.earnings_date is not None
        )

        analysis_url = self.analysis_url_for(ticker)
        await self._load(page, analysis_url, session)
        analysis = await self._parse_until_complete(
            page,
            analysis_url,
            ticker,
            self.parse_analysis,
            lambda r: r.eps_estimate is not None or r.year_ago_eps is not None,
        )
        return replace(quote, eps_estimate=analysis.eps_estimate, year_ago_eps=analysis.year_ago_eps)

    def parse(self, snapshot: PageSnapshot, ticker: str) -> SourceResult:
        """Parse the quote page: earnings date, optional time, company name."""
        raw_date = first_result(EARNINGS_DATE_STRATEGIES, snapshot, ticker)
        earnings_date: date | None = None
        date_range: str | None = None
        earnings_time: str | None = None
        market_timing: str | None = None
        if raw_date:
            earnings_date, date_range = parse_earnings_date(raw_date)
            time_text = find_time(raw_date)
            if time_text:
                classification = classify_timing(time_text)
                earnings_time = classification.time_text
                market_timing = classification.market_timing

        return SourceResult(
            source=self.name,
            ticker=ticker,
            earnings_date=earnings_date,
            earnings_date_range=date_range,
            earnings_time=earnings_time,
            market_timing=market_timing,
            company_name=first_result(COMPANY_NAME_STRATEGIES, snapshot, ticker),
        )

    def parse_analysis(self, snapshot: PageSnapshot, ticker: str) -> SourceResult:
        """Parse the analysis page: current-quarter estimate and year-ago EPS."""
        return SourceResult(
            source=self.name,
            ticker=ticker,
            eps_estimate=first_result(EPS_ESTIMATE_STRATEGIES, snapshot, ticker),
            year_ago_eps=first_result(YEAR_AGO_STRATEGIES, snapshot, ticker),
        )
