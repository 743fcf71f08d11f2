"""Finance-site extraction adapters.

The primary adapter supplies the event date, estimate and year-ago figure.
Secondary adapters only contribute release time and market timing, and are
consulted in the order returned by ``default_secondary_adapters``.
"""

from earnings_tracker.providers.sites.base import (
    BrowserSiteAdapter,
    PageSnapshot,
    SourceResult,
    first_result,
)
from earnings_tracker.providers.sites.benzinga import BenzingaAdapter
from earnings_tracker.providers.sites.earnings_whispers import EarningsWhispersAdapter
from earnings_tracker.providers.sites.marketwatch import MarketWatchAdapter
from earnings_tracker.providers.sites.nasdaq import NasdaqAdapter
from earnings_tracker.providers.sites.parsing import TimingClassification, classify_timing
from earnings_tracker.providers.sites.yahoo import YahooFinanceAdapter


def default_secondary_adapters(extraction_attempts: int = 3) -> list[BrowserSiteAdapter]:
    """Secondary timing sources in priority order."""
    return [
        EarningsWhispersAdapter(extraction_attempts=extraction_attempts),
        NasdaqAdapter(extraction_attempts=1),
        MarketWatchAdapter(extraction_attempts=1),
        BenzingaAdapter(extraction_attempts=1),
    ]


__all__ = [
    "BenzingaAdapter",
    "BrowserSiteAdapter",
    "EarningsWhispersAdapter",
    "MarketWatchAdapter",
    "NasdaqAdapter",
    "PageSnapshot",
    "SourceResult",
    "TimingClassification",
    "YahooFinanceAdapter",
    "classify_timing",
    "default_secondary_adapters",
    "first_result",
]
