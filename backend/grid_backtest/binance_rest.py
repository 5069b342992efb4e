"""Binance spot REST client for historical candles."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import httpx

from grid_core.models.candle import Candle

# Binance spot caps /api/v3/klines at 1000 rows per request
MAX_LIMIT = 1000


class RateLimiter:
    """Enforce a minimum delay between consecutive API calls."""

    def __init__(self, interval: float = 0.2):
        self.interval = interval
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect the rate limit."""
        async with self._lock:
            loop = asyncio.get_running_loop()
            wait_time = self.last_call + self.interval - loop.time()
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self.last_call = loop.time()


class BinanceRestClient:
    """Binance spot REST API client."""

    def __init__(
        self,
        base_url: str = "https://api.binance.com",
        request_interval: float = 0.2,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.rate_limiter = RateLimiter(request_interval)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=30.0,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Make an API request with rate limiting."""
        await self.rate_limiter.acquire()
        client = await self._get_client()
        response = await client.request(method, endpoint, params=params)
        response.raise_for_status()
        return response.json()

    async def get_candles(
        self,
        symbol: str,
        interval: str,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        limit: int = MAX_LIMIT,
    ) -> list[Candle]:
        """
        Fetch one page of candles.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")
            interval: Candle interval (e.g., "1m", "1h")
            start_time: Start time (inclusive)
            end_time: End time (inclusive)
            limit: Maximum number of candles (max 1000)

        Returns:
            List of Candle objects, ascending
        """
        params: dict[str, Any] = {
            "symbol": symbol,
            "interval": interval,
            "limit": min(limit, MAX_LIMIT),
        }
        if start_time:
            params["startTime"] = int(start_time.timestamp() * 1000)
        if end_time:
            params["endTime"] = int(end_time.timestamp() * 1000)

        data = await self._request("GET", "/api/v3/klines", params)

        return [
            Candle(
                symbol=symbol,
                interval=interval,
                open_time=datetime.fromtimestamp(item[0] / 1000, tz=timezone.utc),
                open=Decimal(str(item[1])),
                high=Decimal(str(item[2])),
                low=Decimal(str(item[3])),
                close=Decimal(str(item[4])),
                volume=Decimal(str(item[5])),
            )
            for item in data
        ]
