"""Refresh orchestration for one ticker or a batch.

Per ticker: resolve company → sync historical EPS (best effort) → primary
site → secondary sites while no timing is known → reconcile → persist.
Tickers are processed strictly one after another on a single browser
session; the session is always closed when the run ends.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Sequence
from datetime import date
from typing import TYPE_CHECKING

from earnings_tracker.core.exceptions import (
    EarningsTrackerError,
    NavigationTimeoutError,
    NoEarningsDataError,
    PersistenceError,
)
from earnings_tracker.core.logging import bind_ticker, get_logger
from earnings_tracker.processing.fiscal import comparator_quarter, find_eps, latest_fiscal_period
from earnings_tracker.processing.models import YearAgoComparator
from earnings_tracker.processing.reconciliation import reconcile
from earnings_tracker.providers.browser.session import BrowserSession
from earnings_tracker.refresh.models import BatchResult, RefreshResult

if TYPE_CHECKING:
    from earnings_tracker.config import Settings
    from earnings_tracker.processing.models import Company
    from earnings_tracker.providers.sec_edgar.client import SECEdgarClient
    from earnings_tracker.providers.sec_edgar.models import HistoricalEPSRecord
    from earnings_tracker.providers.sites.base import BrowserSiteAdapter, SourceResult
    from earnings_tracker.storage.database import Database

logger = get_logger(__name__)

_NAVIGATION_TIMEOUT = re.compile(r"timeout|timed out|TimeoutError", re.IGNORECASE)


def is_navigation_timeout(error: BaseException | str | None) -> bool:
    """True when a failure looks like a page-load timeout worth retrying."""
    if error is None:
        return False
    if isinstance(error, NavigationTimeoutError):
        return True
    if isinstance(error, BaseException):
        error = f"{type(error).__name__}: {error}"
    return bool(_NAVIGATION_TIMEOUT.search(error))


class RefreshOrchestrator:
    """Drives the acquisition pipeline for tracked tickers.

    Usage:
        orchestrator = RefreshOrchestrator(db, sec_client, primary, secondaries)
        result = await orchestrator.refresh_one("AAPL")
        batch = await orchestrator.refresh_batch(["AAPL", "MSFT"])
    """

    def __init__(
        self,
        db: Database,
        sec_client: SECEdgarClient,
        primary: BrowserSiteAdapter,
        secondaries: Sequence[BrowserSiteAdapter],
        session_factory: Callable[[], BrowserSession] = BrowserSession,
        *,
        batch_ticker_delay: float = 3.0,
        ticker_timeout: float | None = 120.0,
        retry_max_attempts: int = 2,
        retry_backoff: float = 10.0,
        secondary_source_delay: float = 1.0,
        fallback_tickers: Sequence[str] = (),
    ) -> None:
        self._db = db
        self._sec = sec_client
        self._primary = primary
        self._secondaries = list(secondaries)
        self._session_factory = session_factory
        self._batch_ticker_delay = batch_ticker_delay
        self._ticker_timeout = ticker_timeout
        self._retry_max_attempts = retry_max_attempts
        self._retry_backoff = retry_backoff
        self._secondary_source_delay = secondary_source_delay
        self._fallback_tickers = list(fallback_tickers)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        db: Database,
        sec_client: SECEdgarClient,
        primary: BrowserSiteAdapter,
        secondaries: Sequence[BrowserSiteAdapter],
    ) -> RefreshOrchestrator:
        return cls(
            db,
            sec_client,
            primary,
            secondaries,
            session_factory=lambda: BrowserSession.from_settings(settings),
            batch_ticker_delay=settings.batch_ticker_delay,
            ticker_timeout=settings.ticker_timeout,
            retry_max_attempts=settings.retry_max_attempts,
            retry_backoff=settings.retry_backoff,
            secondary_source_delay=settings.secondary_source_delay,
            fallback_tickers=settings.tracked_tickers,
        )

    # ─────────────────────────────────────────────────────────────
    # Public entry points
    # ─────────────────────────────────────────────────────────────

    async def refresh_one(self, ticker: str) -> RefreshResult:
        """Refresh a single ticker on its own browser session.

        Args:
            ticker: Stock ticker symbol

        Returns:
            RefreshResult; failures are reported, never raised
        """
        ticker = ticker.strip().upper()
        session = self._session_factory()
        try:
            await session.open()
            with bind_ticker(ticker):
                return await self._refresh_with_retry(ticker, session)
        except EarningsTrackerError as e:
            logger.error("Refresh failed", ticker=ticker, error=e.message)
            return RefreshResult(success=False, message=e.message)
        finally:
            await session.close()

    async def refresh_batch(
        self,
        tickers: Sequence[str] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchResult:
        """Refresh tickers sequentially on one shared browser session.

        Args:
            tickers: Tickers to refresh; None refreshes every tracked company
            cancel_event: When set, the run stops before the next ticker

        Returns:
            BatchResult with per-ticker errors as ``"{ticker}: {reason}"``

        Raises:
            BrowserLaunchError: The browser could not be started
        """
        symbols = await self._resolve_batch_tickers(tickers)
        result = BatchResult(total=len(symbols))
        logger.info("Batch refresh started", total=len(symbols))

        session = self._session_factory()
        try:
            await session.open()
            for index, ticker in enumerate(symbols):
                if cancel_event is not None and cancel_event.is_set():
                    result.cancelled = True
                    logger.info("Batch refresh cancelled", processed=index, total=len(symbols))
                    break

                with bind_ticker(ticker):
                    outcome = await self._refresh_bounded(ticker, session)
                result.record(ticker, outcome)

                if index < len(symbols) - 1 and self._batch_ticker_delay > 0:
                    await asyncio.sleep(self._batch_ticker_delay)
        finally:
            await session.close()

        logger.info(
            "Batch refresh finished",
            total=result.total,
            successful=result.successful,
            failed=result.failed,
            cancelled=result.cancelled,
        )
        return result

    async def cleanup_past_estimates(self, today: date | None = None) -> int:
        """Delete estimates for earnings dates that have already passed."""
        return await self._db.delete_past_earnings_estimates(today or date.today())

    # ─────────────────────────────────────────────────────────────
    # Per-ticker pipeline
    # ─────────────────────────────────────────────────────────────

    async def _resolve_batch_tickers(self, tickers: Sequence[str] | None) -> list[str]:
        if tickers is not None:
            symbols = [t.strip().upper() for t in tickers if t.strip()]
        else:
            companies = await self._db.get_tracked_companies()
            symbols = [c.ticker for c in companies] or list(self._fallback_tickers)
        # Preserve order, drop duplicates
        return list(dict.fromkeys(symbols))

    async def _refresh_bounded(self, ticker: str, session: BrowserSession) -> RefreshResult:
        if self._ticker_timeout is None:
            return await self._refresh_with_retry(ticker, session)
        try:
            return await asyncio.wait_for(
                self._refresh_with_retry(ticker, session), timeout=self._ticker_timeout
            )
        except asyncio.TimeoutError:
            logger.error("Ticker refresh timed out", ticker=ticker, timeout=self._ticker_timeout)
            return RefreshResult(
                success=False, message=f"Refresh exceeded {self._ticker_timeout:.0f}s limit"
            )

    async def _refresh_with_retry(self, ticker: str, session: BrowserSession) -> RefreshResult:
        attempts = self._retry_max_attempts + 1
        last_error = ""
        for attempt in range(1, attempts + 1):
            try:
                return await self._refresh_ticker(ticker, session)
            except (NoEarningsDataError, PersistenceError) as e:
                logger.warning("Ticker refresh failed", ticker=ticker, error=e.message)
                return RefreshResult(success=False, message=e.message)
            except Exception as e:
                if not is_navigation_timeout(e):
                    logger.exception("Ticker refresh failed", ticker=ticker)
                    return RefreshResult(success=False, message=str(e) or type(e).__name__)
                last_error = str(e)
                if attempt < attempts:
                    logger.warning(
                        "Navigation timeout, retrying",
                        ticker=ticker,
                        attempt=attempt,
                        backoff=self._retry_backoff,
                    )
                    await asyncio.sleep(self._retry_backoff)
        return RefreshResult(
            success=False, message=f"Failed after {attempts} attempts: {last_error}"
        )

    async def _refresh_ticker(self, ticker: str, session: BrowserSession) -> RefreshResult:
        company = await self._db.get_or_create_company(ticker)
        comparator = await self._sync_historical(company)

        primary = await self._primary.extract(ticker, session)
        if primary.error and is_navigation_timeout(primary.error):
            raise NavigationTimeoutError(primary.error)

        secondaries = await self._collect_secondaries(ticker, session, primary)
        merged = reconcile(primary, secondaries, comparator)
        if merged is None:
            reason = "No earnings data found"
            if primary.error:
                reason = f"{reason} ({primary.source}: {primary.error})"
            raise NoEarningsDataError(reason)

        if merged.company_name and merged.company_name != company.company_name:
            try:
                await self._db.update_company_name(company.id, merged.company_name)
            except Exception as e:
                logger.warning("Company name update failed", ticker=ticker, error=str(e))

        try:
            await self._db.replace_earnings_estimate(company.id, merged)
        except Exception as e:
            raise PersistenceError(f"Failed to save earnings estimate: {e}") from e

        logger.info(
            "Ticker refreshed",
            ticker=ticker,
            earnings_date=merged.earnings_date,
            market_timing=merged.market_timing,
            provenance=merged.provenance,
        )
        return RefreshResult(success=True, message=f"Updated: {merged.summary()}")

    async def _sync_historical(self, company: Company) -> YearAgoComparator | None:
        """Fetch filed EPS, store it, and derive the year-ago comparator.

        Every step is best effort; a failure only costs the comparator.
        """
        fresh: list[HistoricalEPSRecord] = []
        cik = await self._sec.resolve_cik(company.ticker)
        if cik is None:
            logger.debug("Historical EPS skipped, no CIK", ticker=company.ticker)
        else:
            fresh = await self._sec.get_quarterly_eps(cik)

        if fresh:
            try:
                await self._db.upsert_historical_eps(company.id, fresh)
            except Exception as e:
                logger.warning("Historical EPS write failed", ticker=company.ticker, error=str(e))

        try:
            stored = await self._db.get_historical_eps(company.id)
            latest = await self._db.get_latest_fiscal_period(company.id)
        except Exception as e:
            logger.warning("Historical EPS read failed", ticker=company.ticker, error=str(e))
            stored, latest = [], None

        history = {r.fiscal_period: r for r in stored}
        history.update({r.fiscal_period: r for r in fresh})
        records = list(history.values())
        if not records:
            return None

        latest = latest_fiscal_period(fresh) or latest or latest_fiscal_period(records)
        quarter = comparator_quarter(latest)
        return YearAgoComparator(fiscal_period=quarter, year_ago_eps=find_eps(records, quarter))

    async def _collect_secondaries(
        self, ticker: str, session: BrowserSession, primary: SourceResult
    ) -> list[SourceResult]:
        if primary.has_timing_signal:
            return []
        results: list[SourceResult] = []
        for index, adapter in enumerate(self._secondaries):
            if index > 0 and self._secondary_source_delay > 0:
                await asyncio.sleep(self._secondary_source_delay)
            result = await adapter.extract(ticker, session)
            results.append(result)
            if result.has_timing_signal:
                logger.debug("Timing found", ticker=ticker, source=result.source)
                break
        return results
