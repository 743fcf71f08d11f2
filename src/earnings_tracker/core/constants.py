"""Application-wide constants.

These are fixed values that don't change between environments.
For configurable values, see config.py Settings.
"""

# ─────────────────────────────────────────────────────────────
# SEC EDGAR (external constraints)
# ─────────────────────────────────────────────────────────────
SEC_WWW_URL = "https://www.sec.gov"
SEC_DATA_URL = "https://data.sec.gov"
SEC_TICKER_MAP_URL = f"{SEC_WWW_URL}/files/company_tickers.json"
SEC_EDGAR_MIN_INTERVAL_SECONDS = 0.1  # SEC fair-access policy: 10 req/sec
SEC_EDGAR_CACHE_TTL_CIK_MAP = 86400  # 24 hours for ticker→CIK mapping

# Per-share earnings concepts, most preferred first
EPS_CONCEPTS: tuple[str, ...] = (
    "EarningsPerShareDiluted",
    "EarningsPerShareBasic",
    "EarningsPerShareBasicAndDiluted",
)
EPS_UNIT = "USD/shares"
QUARTERLY_FORM = "10-Q"
QUARTERLY_MIN_DAYS = 80
QUARTERLY_MAX_DAYS = 100

# ─────────────────────────────────────────────────────────────
# US market session (minutes since midnight, Eastern)
# ─────────────────────────────────────────────────────────────
MARKET_OPEN_MINUTES = 9 * 60 + 30
MARKET_CLOSE_MINUTES = 16 * 60

DEFAULT_MARKET_TIMING = "after"

# ─────────────────────────────────────────────────────────────
# Site URLs
# ─────────────────────────────────────────────────────────────
YAHOO_QUOTE_URL = "https://finance.yahoo.com/quote/{ticker}/"
YAHOO_ANALYSIS_URL = "https://finance.yahoo.com/quote/{ticker}/analysis/"
EARNINGS_WHISPERS_URL = "https://www.earningswhispers.com/stocks/{ticker}"
NASDAQ_EARNINGS_URL = "https://www.nasdaq.com/market-activity/stocks/{ticker}/earnings"
MARKETWATCH_QUOTE_URL = "https://www.marketwatch.com/investing/stock/{ticker}"
BENZINGA_EARNINGS_URL = "https://www.benzinga.com/quote/{ticker}/earnings"

DEFAULT_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_VIEWPORT = {"width": 1920, "height": 1080}

# ─────────────────────────────────────────────────────────────
# Consent overlays
# ─────────────────────────────────────────────────────────────
CONSENT_OVERLAY_SELECTORS: tuple[str, ...] = (
    '[class*="cookie"]',
    '[id*="cookie"]',
    '[class*="consent"]',
    '[id*="consent"]',
    '[class*="gdpr"]',
    '[class*="privacy"]',
    '[role="dialog"]',
)
CONSENT_MIN_WIDTH = 100
CONSENT_MIN_HEIGHT = 50

CONSENT_ACCEPT_PHRASES: tuple[str, ...] = (
    "accept",
    "accept all",
    "accept cookies",
    "i agree",
    "got it",
    "ok",
    "continue",
)
CONSENT_ACCEPT_SELECTORS: tuple[str, ...] = (
    'button[class*="accept"]',
    'button[id*="accept"]',
    'a[class*="accept"]',
    ".accept-button",
    "#accept-button",
    'button[class*="agree"]',
    'button[class*="consent"]',
    '[onclick*="accept"]',
)

# ─────────────────────────────────────────────────────────────
# Timing keywords
# ─────────────────────────────────────────────────────────────
BEFORE_MARKET_KEYWORDS: tuple[str, ...] = (
    "before market open",
    "before the market",
    "before market",
    "pre-market",
    "premarket",
    "before the bell",
)
AFTER_MARKET_KEYWORDS: tuple[str, ...] = (
    "after market close",
    "after the market",
    "after market",
    "post-market",
    "postmarket",
    "after the bell",
    "after hours",
)
