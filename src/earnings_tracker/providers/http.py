"""Rate-limited HTTP fetching.

Upstreams are keyed by their registrable domain, so ``www.sec.gov`` and
``data.sec.gov`` share one request slot. The limiter is a plain object with an
injectable clock; the runtime owns one instance and hands it to every
client that talks to a throttled upstream.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import urlsplit

import httpx

from earnings_tracker.core.logging import get_logger

logger = get_logger(__name__)


def upstream_key(url: str) -> str:
    """Return the rate-limit key for a URL (last two host labels)."""
    host = (urlsplit(url).hostname or "").lower()
    labels = [label for label in host.split(".") if label]
    if len(labels) <= 2:
        return host
    return ".".join(labels[-2:])


class HostRateLimiter:
    """Minimum spacing between requests to the same upstream."""

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_interval = min_interval
        self._clock = clock
        self._last_request: dict[str, float] = {}

    @property
    def min_interval(self) -> float:
        return self._min_interval

    def delay_for(self, upstream: str, now: float) -> float:
        """Seconds to wait before the next request to ``upstream`` may go out."""
        last = self._last_request.get(upstream)
        if last is None:
            return 0.0
        return max(0.0, self._min_interval - (now - last))

    def record(self, upstream: str, at: float) -> None:
        self._last_request[upstream] = at

    async def wait(self, upstream: str) -> None:
        """Sleep until ``upstream`` is clear, then claim the slot."""
        delay = self.delay_for(upstream, self._clock())
        if delay > 0:
            logger.debug("Rate limit pause", upstream=upstream, delay=round(delay, 3))
            await asyncio.sleep(delay)
        self.record(upstream, self._clock())


class RateLimitedClient:
    """Thin httpx wrapper that spaces requests per upstream.

    Non-2xx responses are returned to the caller untouched; only transport
    failures raise.

    Usage:
        limiter = HostRateLimiter(min_interval=0.1)
        http = RateLimitedClient(limiter, user_agent="MyApp me@example.com")
        resp = await http.fetch("https://data.sec.gov/...")
        await http.close()
    """

    def __init__(
        self,
        limiter: HostRateLimiter,
        user_agent: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._limiter = limiter
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
                headers={
                    "User-Agent": self._user_agent,
                    "Accept-Encoding": "gzip, deflate",
                },
            )
        return self._http_client

    async def fetch(self, url: str, **kwargs: Any) -> httpx.Response:
        """Rate-limited HTTP GET."""
        await self._limiter.wait(upstream_key(url))
        client = self._get_http_client()
        return await client.get(url, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
