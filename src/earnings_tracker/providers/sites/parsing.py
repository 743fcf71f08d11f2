"""Text parsing helpers shared by the site adapters.

Everything here is pure: strings in, values (or None) out.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Literal, NamedTuple

from earnings_tracker.core.constants import (
    AFTER_MARKET_KEYWORDS,
    BEFORE_MARKET_KEYWORDS,
    MARKET_CLOSE_MINUTES,
    MARKET_OPEN_MINUTES,
)

Timing = Literal["before", "during", "after", "unknown"]

_ZONES = "ET|EST|EDT|PT|PST|PDT|CT|CST|CDT|MT|MST|MDT"

# Whole-element match: "4:30 PM", "8:00 AM ET"
STRICT_TIME_PATTERN = re.compile(
    rf"^\d{{1,2}}:\d{{2}}\s*(AM|PM)(\s*({_ZONES}))?$",
    re.IGNORECASE,
)
# Embedded match for free-text scans
TIME_PATTERN = re.compile(
    rf"\b(\d{{1,2}}:\d{{2}}\s*(?:AM|PM)(?:\s*(?:{_ZONES})\b)?)",
    re.IGNORECASE,
)
PLACEHOLDER_TIMES = frozenset({"12:00AM"})

_TZ_SUFFIX = re.compile(rf"\s*\b({_ZONES})\s*$", re.IGNORECASE)
_TIME_PARTS = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}  # fmt: skip
_MONTH_DAY = re.compile(r"\b([A-Za-z]{3,9})\.?\s+(\d{1,2})(?:,?\s+(\d{4}))?\b")
_NUMERIC_DATE = re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b")
_ISO_DATE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
_YEAR = re.compile(r"\b(\d{4})\b")
_RANGE_SEPARATOR = re.compile(r"\s[-–—]\s")
_COMPACT_DATE = re.compile(r"\b(\d{4})(\d{2})(\d{2})\b")

_EPS = re.compile(r"^\(?-?\$?\s*\d+(?:\.\d+)?\)?$")


class TimingClassification(NamedTuple):
    timing: Timing
    time_text: str | None

    @property
    def market_timing(self) -> str | None:
        """Storable timing, None when unknown."""
        return None if self.timing == "unknown" else self.timing


def classify_timing(text: str | None) -> TimingClassification:
    """Classify a release-time string against the US market session.

    The timezone suffix is dropped and the time converted to minutes since
    midnight. Before 09:30 is ``before``, 16:00 or later is ``after``,
    anything in between is ``during``. Text without an AM/PM marker is
    ``unknown`` and kept verbatim.
    """
    raw = (text or "").strip()
    if not raw:
        return TimingClassification("unknown", None)

    stripped = _TZ_SUFFIX.sub("", raw).strip()
    match = _TIME_PARTS.search(stripped)
    if not match:
        return TimingClassification("unknown", raw)

    hour = int(match.group(1)) % 12
    if match.group(3).upper() == "PM":
        hour += 12
    minutes = hour * 60 + int(match.group(2))

    if minutes < MARKET_OPEN_MINUTES:
        return TimingClassification("before", raw)
    if minutes >= MARKET_CLOSE_MINUTES:
        return TimingClassification("after", raw)
    return TimingClassification("during", raw)


def is_strict_time(text: str) -> bool:
    """True when the whole string is a clock time, optionally zoned."""
    return bool(STRICT_TIME_PATTERN.match(text.strip()))


def find_time(text: str) -> str | None:
    """First clock time embedded in free text, skipping midnight placeholders."""
    for match in TIME_PATTERN.finditer(text):
        value = " ".join(match.group(1).split())
        if re.sub(r"\s+", "", _TZ_SUFFIX.sub("", value)).upper() in PLACEHOLDER_TIMES:
            continue
        return value
    return None


def _keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    alternation = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"(?<![a-z])({alternation})(?![a-z])", re.IGNORECASE)


_BEFORE_RE = _keyword_pattern(BEFORE_MARKET_KEYWORDS)
_AFTER_RE = _keyword_pattern(AFTER_MARKET_KEYWORDS)


def timing_from_keywords(text: str | None) -> str | None:
    """``before``/``after`` from phrases like "pre-market" or "after the bell".

    When both kinds appear the earliest mention wins.
    """
    if not text:
        return None
    before = _BEFORE_RE.search(text)
    after = _AFTER_RE.search(text)
    if before and after:
        return "before" if before.start() < after.start() else "after"
    if before:
        return "before"
    if after:
        return "after"
    return None


def timing_near_ticker(text: str, ticker: str, window: int = 200) -> str | None:
    """Keyword timing found within ``window`` characters of the ticker symbol."""
    pattern = re.compile(rf"(?<![A-Za-z]){re.escape(ticker)}(?![A-Za-z])", re.IGNORECASE)
    for match in pattern.finditer(text):
        start = max(0, match.start() - window)
        timing = timing_from_keywords(text[start : match.end() + window])
        if timing:
            return timing
    return None


def _month_number(word: str) -> int | None:
    key = word[:3].lower()
    month = _MONTHS.get(key)
    if month is None:
        return None
    # Accept "Sep", "Sept", "September"; reject words that merely share a prefix
    if len(word) > 3 and not ("september".startswith(word.lower()) or _full_month(word)):
        return None
    return month


def _full_month(word: str) -> bool:
    try:
        datetime.strptime(word.capitalize(), "%B")
    except ValueError:
        return False
    return True


def parse_earnings_date(text: str | None) -> tuple[date | None, str | None]:
    """Parse an earnings date, keeping range text when the site shows one.

    Handles "Oct 30, 2025", "Jul 28 - Aug 1, 2025", "10/30/2025" and ISO
    dates. For a range the first date is used and the original text is
    returned alongside it.

    Returns:
        (date, range_text); range_text is None for a single date
    """
    if not text:
        return None, None
    cleaned = " ".join(text.split())
    range_text = cleaned if _RANGE_SEPARATOR.search(cleaned) else None

    iso = _ISO_DATE.search(cleaned)
    if iso:
        try:
            return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3))), range_text
        except ValueError:
            pass

    numeric = _NUMERIC_DATE.search(cleaned)
    if numeric:
        try:
            month, day, year = (int(g) for g in numeric.groups())
            return date(year, month, day), range_text
        except ValueError:
            pass

    months = [
        (m, month_no)
        for m in _MONTH_DAY.finditer(cleaned)
        if (month_no := _month_number(m.group(1))) is not None
    ]
    if not months:
        return None, None

    first, first_month = months[0]
    if first.group(3):
        year = int(first.group(3))
    else:
        year_match = _YEAR.search(cleaned, first.end())
        if year_match is None:
            return None, None
        year = int(year_match.group(1))
        # "Dec 29 - Jan 2, 2026": the trailing year belongs to the later date
        if range_text and len(months) > 1 and first_month > months[1][1]:
            year -= 1
    try:
        return date(year, first_month, int(first.group(2))), range_text
    except ValueError:
        return None, None


def parse_compact_date(text: str | None) -> date | None:
    """Parse a YYYYMMDD token, e.g. from ``gotocal(20250801, ...)``."""
    if not text:
        return None
    match = _COMPACT_DATE.search(text)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def parse_eps(text: str | None) -> float | None:
    """Parse a per-share figure like "1.25", "-0.12", "$0.45" or "(0.30)"."""
    if text is None:
        return None
    value = text.strip().replace(",", "")
    if not value or not _EPS.match(value):
        return None
    negative = value.startswith("(") or "-" in value
    number = float(re.sub(r"[^\d.]", "", value))
    return -number if negative else number
