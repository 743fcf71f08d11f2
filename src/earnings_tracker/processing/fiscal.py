"""Fiscal-quarter label arithmetic.

Labels look like ``"Q2 2024"``. Anything else is treated as malformed and
every function here returns None for it instead of raising.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from earnings_tracker.providers.sec_edgar.models import HistoricalEPSRecord

_QUARTER_LABEL = re.compile(r"^Q([1-4]) (\d{4})$")


def parse_quarter(label: str | None) -> tuple[int, int] | None:
    """Split a label into (quarter, year)."""
    if not label:
        return None
    match = _QUARTER_LABEL.match(label.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def format_quarter(quarter: int, year: int) -> str:
    return f"Q{quarter} {year}"


def next_quarter(label: str | None) -> str | None:
    """The fiscal quarter after ``label``; Q4 rolls over to Q1 of the next year."""
    parsed = parse_quarter(label)
    if parsed is None:
        return None
    quarter, year = parsed
    if quarter == 4:
        return format_quarter(1, year + 1)
    return format_quarter(quarter + 1, year)


def year_ago_quarter(label: str | None) -> str | None:
    """The same fiscal quarter one year earlier."""
    parsed = parse_quarter(label)
    if parsed is None:
        return None
    quarter, year = parsed
    return format_quarter(quarter, year - 1)


def comparator_quarter(latest_reported: str | None) -> str | None:
    """Year-ago quarter for the quarter about to be reported.

    The upcoming release covers ``next_quarter(latest_reported)``, so the
    year-over-year comparison is against that quarter a year earlier, not
    against the latest reported one.
    """
    return year_ago_quarter(next_quarter(latest_reported))


def latest_fiscal_period(records: Iterable[HistoricalEPSRecord]) -> str | None:
    """Fiscal period of the most recently filed record."""
    latest = max(records, key=lambda r: r.filing_date, default=None)
    return latest.fiscal_period if latest is not None else None


def find_eps(records: Iterable[HistoricalEPSRecord], fiscal_period: str | None) -> float | None:
    if fiscal_period is None:
        return None
    for record in records:
        if record.fiscal_period == fiscal_period:
            return record.eps_actual
    return None
