"""PostgreSQL database connection using raw asyncpg."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, cast
from uuid import UUID

import asyncpg

from earnings_tracker.core.exceptions import DatabaseConnectionError
from earnings_tracker.core.logging import get_logger
from earnings_tracker.processing.models import Company
from earnings_tracker.providers.sec_edgar.models import HistoricalEPSRecord

if TYPE_CHECKING:
    from earnings_tracker.processing.models import MergedEarnings

logger = get_logger(__name__)


def _affected_rows(status: str) -> int:
    """Row count from an asyncpg status string like ``"DELETE 3"``."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, IndexError):
        return 0


def dedupe_historical(records: Sequence[HistoricalEPSRecord]) -> list[HistoricalEPSRecord]:
    """One record per fiscal period, keeping the latest filing."""
    latest: dict[str, HistoricalEPSRecord] = {}
    for record in records:
        current = latest.get(record.fiscal_period)
        if current is None or record.filing_date > current.filing_date:
            latest[record.fiscal_period] = record
    return list(latest.values())


class Database:
    """Async PostgreSQL database wrapper using asyncpg."""

    def __init__(self, dsn: str, min_size: int = 1, max_size: int = 5) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._pool: asyncpg.Pool[asyncpg.Record] | None = None

    async def connect(self) -> None:
        """Create connection pool."""
        # Accept SQLAlchemy-style DSNs
        dsn = self._dsn.replace("postgresql+asyncpg://", "postgresql://")
        try:
            self._pool = await asyncpg.create_pool(
                dsn,
                min_size=self._min_size,
                max_size=self._max_size,
            )
        except (OSError, asyncpg.PostgresError) as e:
            raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e
        logger.debug("Database pool created", min_size=self._min_size, max_size=self._max_size)

    async def disconnect(self) -> None:
        """Close connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.debug("Database pool closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection[asyncpg.Record]]:
        """Acquire a connection from the pool."""
        if not self._pool:
            raise RuntimeError("Database not connected. Call connect() first.")
        async with self._pool.acquire() as conn:
            yield conn

    async def execute(self, query: str, *args: Any) -> str:
        """Execute a query and return status."""
        async with self.acquire() as conn:
            result = await conn.execute(query, *args)
            return cast(str, result)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Fetch multiple rows."""
        async with self.acquire() as conn:
            result = await conn.fetch(query, *args)
            return list(result)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """Fetch a single row."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        """Fetch a single value."""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    # -------------------------------------------------------------------------
    # Companies
    # -------------------------------------------------------------------------

    async def get_tracked_companies(self, tickers: Sequence[str] | None = None) -> list[Company]:
        """Get tracked companies, optionally restricted to a ticker set.

        Args:
            tickers: Tickers to include; None returns every company

        Returns:
            Companies ordered by ticker
        """
        if tickers is None:
            rows = await self.fetch(
                "SELECT id, ticker, company_name FROM companies ORDER BY ticker"
            )
        else:
            rows = await self.fetch(
                """
                SELECT id, ticker, company_name FROM companies
                WHERE ticker = ANY($1::text[])
                ORDER BY ticker
                """,
                [t.strip().upper() for t in tickers],
            )
        return [Company(**dict(row)) for row in rows]

    async def get_or_create_company(self, ticker: str) -> Company:
        """Get a company by ticker, creating it with the ticker as its name."""
        ticker = ticker.strip().upper()
        row = await self.fetchrow(
            """
            INSERT INTO companies (ticker, company_name)
            VALUES ($1, $1)
            ON CONFLICT (ticker) DO UPDATE SET ticker = EXCLUDED.ticker
            RETURNING id, ticker, company_name
            """,
            ticker,
        )
        if row is None:
            raise RuntimeError(f"Company upsert returned no row for {ticker}")
        return Company(**dict(row))

    async def update_company_name(self, company_id: UUID, company_name: str) -> None:
        await self.execute(
            "UPDATE companies SET company_name = $2 WHERE id = $1",
            company_id,
            company_name,
        )
        logger.debug("Company name updated", company_id=str(company_id), name=company_name)

    # -------------------------------------------------------------------------
    # Historical EPS
    # -------------------------------------------------------------------------

    async def get_latest_fiscal_period(self, company_id: UUID) -> str | None:
        """Fiscal period of the most recently filed historical record."""
        result = await self.fetchval(
            """
            SELECT fiscal_period FROM historical_eps
            WHERE company_id = $1
            ORDER BY filing_date DESC, fiscal_period DESC
            LIMIT 1
            """,
            company_id,
        )
        return cast("str | None", result)

    async def get_historical_eps(self, company_id: UUID) -> list[HistoricalEPSRecord]:
        """Historical EPS for a company, newest filing first."""
        rows = await self.fetch(
            """
            SELECT fiscal_period, eps_actual, filing_date FROM historical_eps
            WHERE company_id = $1
            ORDER BY filing_date DESC
            """,
            company_id,
        )
        return [
            HistoricalEPSRecord(
                fiscal_period=row["fiscal_period"],
                eps_actual=float(row["eps_actual"]),
                filing_date=row["filing_date"],
            )
            for row in rows
        ]

    async def upsert_historical_eps(
        self, company_id: UUID, records: Sequence[HistoricalEPSRecord]
    ) -> int:
        """Write historical EPS, inserting new periods and updating changed ones.

        Records sharing a fiscal period are collapsed to the latest filing
        first. Existing rows are never deleted.

        Returns:
            Number of distinct fiscal periods written
        """
        unique = dedupe_historical(records)
        if not unique:
            return 0

        async with self.acquire() as conn:
            await conn.executemany(
                """
                INSERT INTO historical_eps (company_id, fiscal_period, eps_actual, filing_date)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (company_id, fiscal_period) DO UPDATE
                SET eps_actual = EXCLUDED.eps_actual,
                    filing_date = EXCLUDED.filing_date
                WHERE historical_eps.eps_actual IS DISTINCT FROM EXCLUDED.eps_actual
                   OR historical_eps.filing_date IS DISTINCT FROM EXCLUDED.filing_date
                """,
                [(company_id, r.fiscal_period, r.eps_actual, r.filing_date) for r in unique],
            )
        logger.debug("Historical EPS upserted", company_id=str(company_id), count=len(unique))
        return len(unique)

    # -------------------------------------------------------------------------
    # Earnings estimates
    # -------------------------------------------------------------------------

    async def replace_earnings_estimate(self, company_id: UUID, merged: MergedEarnings) -> None:
        """Replace every estimate row for a company with one new row.

        Delete and insert share a transaction, so readers never see zero or
        two rows for the company. The company row is locked first, which
        serializes overlapping refreshes of the same ticker.
        """
        async with self.acquire() as conn:
            async with conn.transaction():
                await conn.execute(
                    "SELECT 1 FROM companies WHERE id = $1 FOR UPDATE",
                    company_id,
                )
                await conn.execute(
                    "DELETE FROM earnings_estimates WHERE company_id = $1",
                    company_id,
                )
                await conn.execute(
                    """
                    INSERT INTO earnings_estimates (
                        company_id, earnings_date, earnings_date_range, earnings_time,
                        market_timing, eps_estimate, year_ago_eps, last_updated
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    """,
                    company_id,
                    merged.earnings_date,
                    merged.earnings_date_range,
                    merged.earnings_time,
                    merged.market_timing,
                    merged.eps_estimate,
                    merged.year_ago_eps,
                    datetime.now(timezone.utc),
                )

    async def delete_past_earnings_estimates(self, today: date) -> int:
        """Delete estimates whose earnings date is before ``today``.

        Returns:
            Number of rows deleted
        """
        status = await self.execute(
            "DELETE FROM earnings_estimates WHERE earnings_date < $1",
            today,
        )
        deleted = _affected_rows(status)
        logger.info("Past earnings estimates deleted", count=deleted, before=today.isoformat())
        return deleted


# Global database instance (initialized in lifespan)
_db: Database | None = None


def get_database() -> Database:
    """Get the global database instance."""
    if _db is None:
        raise RuntimeError("Database not initialized")
    return _db


async def init_database(dsn: str, min_size: int = 1, max_size: int = 5) -> Database:
    """Initialize the global database instance."""
    global _db
    _db = Database(dsn, min_size=min_size, max_size=max_size)
    await _db.connect()
    return _db


async def close_database() -> None:
    """Close the global database instance."""
    global _db
    if _db:
        await _db.disconnect()
        _db = None
