"""SEC EDGAR provider for ticker resolution and quarterly EPS facts.

Uses the free SEC EDGAR API (data.sec.gov), no API key required.
"""

from earnings_tracker.providers.sec_edgar.client import SECEdgarClient
from earnings_tracker.providers.sec_edgar.models import HistoricalEPSRecord

__all__ = [
    "HistoricalEPSRecord",
    "SECEdgarClient",
]
