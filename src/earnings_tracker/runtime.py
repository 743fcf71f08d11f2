"""Runtime wiring: builds and tears down everything a refresh needs."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from earnings_tracker.core.logging import get_logger
from earnings_tracker.providers.http import HostRateLimiter, RateLimitedClient
from earnings_tracker.providers.sec_edgar.client import SECEdgarClient
from earnings_tracker.providers.sites import YahooFinanceAdapter, default_secondary_adapters
from earnings_tracker.refresh.orchestrator import RefreshOrchestrator
from earnings_tracker.storage.database import close_database, init_database
from earnings_tracker.storage.redis import close_redis, init_redis

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from earnings_tracker.config import Settings
    from earnings_tracker.storage.database import Database

logger = get_logger(__name__)


@dataclass
class TrackerState:
    """Shared resources for one process run."""

    db: Database
    redis: Redis | None
    http: RateLimitedClient
    sec_client: SECEdgarClient
    orchestrator: RefreshOrchestrator


@asynccontextmanager
async def tracker_lifespan(settings: Settings) -> AsyncIterator[TrackerState]:
    """Connect storage, build providers and the orchestrator; close them on exit."""
    db = await init_database(
        settings.database_url,
        min_size=settings.database_pool_min_size,
        max_size=settings.database_pool_max_size,
    )
    redis: Redis | None = None
    http: RateLimitedClient | None = None
    try:
        if settings.redis_url:
            try:
                redis = await init_redis(settings.redis_url)
            except Exception as e:
                logger.warning("Redis unavailable, CIK map will not be cached", error=str(e))
                redis = None

        limiter = HostRateLimiter(min_interval=settings.sec_edgar_min_interval)
        http = RateLimitedClient(
            limiter,
            user_agent=settings.sec_edgar_user_agent,
            timeout=settings.sec_edgar_timeout,
        )
        sec_client = SECEdgarClient(
            http, redis=redis, cik_cache_ttl=settings.sec_edgar_cache_ttl_cik_map
        )
        orchestrator = RefreshOrchestrator.from_settings(
            settings,
            db,
            sec_client,
            primary=YahooFinanceAdapter(extraction_attempts=settings.extraction_attempts),
            secondaries=default_secondary_adapters(settings.extraction_attempts),
        )
        yield TrackerState(
            db=db,
            redis=redis,
            http=http,
            sec_client=sec_client,
            orchestrator=orchestrator,
        )
    finally:
        if http is not None:
            await http.close()
        if redis is not None:
            await close_redis()
        await close_database()
