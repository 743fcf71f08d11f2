"""SEC EDGAR API client.

Free API, no key required, just a User-Agent header that names a contact.
- Ticker→CIK mapping: https://www.sec.gov/files/company_tickers.json
- Company facts (XBRL): https://data.sec.gov/api/xbrl/companyfacts/CIK{cik}.json
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

import orjson

from earnings_tracker.core.constants import (
    EPS_CONCEPTS,
    EPS_UNIT,
    QUARTERLY_FORM,
    QUARTERLY_MAX_DAYS,
    QUARTERLY_MIN_DAYS,
    SEC_DATA_URL,
    SEC_EDGAR_CACHE_TTL_CIK_MAP,
    SEC_TICKER_MAP_URL,
)
from earnings_tracker.core.logging import get_logger
from earnings_tracker.providers.sec_edgar.models import HistoricalEPSRecord
from earnings_tracker.storage.redis import cache_get, cache_set

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from earnings_tracker.providers.http import RateLimitedClient

logger = get_logger(__name__)

CACHE_PREFIX = "earnings_tracker:sec_edgar"

_FISCAL_QUARTERS = ("Q1", "Q2", "Q3")


def _parse_date(value: Any) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        return None


def _is_quarterly_duration(fact: dict[str, Any]) -> bool:
    """True when a fact covers roughly three months (or carries no start date)."""
    start = _parse_date(fact.get("start"))
    end = _parse_date(fact.get("end"))
    if start is None or end is None:
        return True
    return QUARTERLY_MIN_DAYS <= (end - start).days <= QUARTERLY_MAX_DAYS


class SECEdgarClient:
    """Client for SEC EDGAR ticker resolution and quarterly EPS facts.

    Usage:
        client = SECEdgarClient(http=rate_limited_client, redis=redis_client)
        cik = await client.resolve_cik("AAPL")
        history = await client.get_quarterly_eps(cik)
    """

    def __init__(
        self,
        http: RateLimitedClient,
        redis: Redis | None = None,
        cik_cache_ttl: int = SEC_EDGAR_CACHE_TTL_CIK_MAP,
    ) -> None:
        self._http = http
        self._redis = redis
        self._cik_cache_ttl = cik_cache_ttl
        self._cik_map: dict[str, str] | None = None

    # ─────────────────────────────────────────────────────────────
    # CIK Mapping
    # ─────────────────────────────────────────────────────────────

    async def _load_cik_mapping(self) -> dict[str, str]:
        """Load ticker→CIK mapping, with Redis caching when available."""
        cache_key = f"{CACHE_PREFIX}:cik_map"

        cached = await cache_get(self._redis, cache_key)
        if cached:
            self._cik_map = orjson.loads(cached)
            return self._cik_map

        try:
            resp = await self._http.fetch(SEC_TICKER_MAP_URL)
            resp.raise_for_status()
            data: dict[str, Any] = orjson.loads(resp.content)
        except Exception as e:
            logger.warning("Failed to fetch SEC CIK mapping", error=str(e))
            return {}

        # {TICKER: "CIK_padded_to_10"}
        cik_map: dict[str, str] = {}
        for entry in data.values():
            ticker = str(entry.get("ticker", "")).upper()
            cik = entry.get("cik_str")
            if ticker and cik is not None:
                cik_map[ticker] = str(cik).zfill(10)

        await cache_set(self._redis, cache_key, orjson.dumps(cik_map), self._cik_cache_ttl)
        self._cik_map = cik_map
        logger.debug("Loaded SEC CIK mapping", count=len(cik_map))
        return cik_map

    async def resolve_cik(self, ticker: str) -> str | None:
        """Get the zero-padded CIK for a ticker.

        Args:
            ticker: Stock ticker symbol

        Returns:
            10-digit CIK string, or None when the ticker is unknown or the
            mapping could not be loaded
        """
        ticker = ticker.strip().upper()
        if self._cik_map is None:
            await self._load_cik_mapping()
        if not self._cik_map:
            return None
        cik = self._cik_map.get(ticker)
        if cik is None:
            logger.debug("No CIK found for ticker", ticker=ticker)
        return cik

    # ─────────────────────────────────────────────────────────────
    # Quarterly EPS
    # ─────────────────────────────────────────────────────────────

    async def get_quarterly_eps(self, cik: str) -> list[HistoricalEPSRecord]:
        """Get reported quarterly EPS from 10-Q filings.

        Concepts are tried in priority order and the first one with
        per-share data wins. Within a fiscal quarter the current-period
        value is kept over prior-year comparatives, and restatements
        resolve to the latest filing.

        Args:
            cik: 10-digit CIK

        Returns:
            Records newest filing first, or an empty list on any failure
        """
        url = f"{SEC_DATA_URL}/api/xbrl/companyfacts/CIK{cik}.json"
        try:
            resp = await self._http.fetch(url)
            if resp.status_code == 404:
                logger.debug("No company facts for CIK", cik=cik)
                return []
            resp.raise_for_status()
            data: dict[str, Any] = orjson.loads(resp.content)
        except Exception as e:
            logger.warning("Failed to fetch SEC company facts", cik=cik, error=str(e))
            return []

        try:
            return self._parse_company_facts(data)
        except Exception as e:
            logger.warning("Failed to parse SEC company facts", cik=cik, error=str(e))
            return []

    def _parse_company_facts(self, data: dict[str, Any]) -> list[HistoricalEPSRecord]:
        us_gaap: dict[str, Any] = data.get("facts", {}).get("us-gaap", {})

        for concept in EPS_CONCEPTS:
            facts = us_gaap.get(concept, {}).get("units", {}).get(EPS_UNIT)
            if not facts:
                continue
            records = self._select_quarterly(facts, concept)
            if records:
                return records
        return []

    def _select_quarterly(
        self, facts: list[dict[str, Any]], concept: str
    ) -> list[HistoricalEPSRecord]:
        # (fy, fp) -> best fact; later period end wins, then later filing
        best: dict[tuple[int, str], dict[str, Any]] = {}
        for fact in facts:
            fp = fact.get("fp")
            fy = fact.get("fy")
            if fact.get("form") != QUARTERLY_FORM or fp not in _FISCAL_QUARTERS or not fy:
                continue
            if fact.get("val") is None or not _is_quarterly_duration(fact):
                continue
            key = (int(fy), fp)
            current = best.get(key)
            if current is None or (
                str(fact.get("end", "")),
                str(fact.get("filed", "")),
            ) > (str(current.get("end", "")), str(current.get("filed", ""))):
                best[key] = fact

        records: list[HistoricalEPSRecord] = []
        for (fy, fp), fact in best.items():
            filed = _parse_date(fact.get("filed"))
            if filed is None:
                continue
            records.append(
                HistoricalEPSRecord(
                    fiscal_period=f"{fp} {fy}",
                    eps_actual=float(fact["val"]),
                    filing_date=filed,
                    period_end=_parse_date(fact.get("end")),
                    concept=concept,
                )
            )

        records.sort(key=lambda r: (r.filing_date, r.fiscal_period), reverse=True)
        return records
