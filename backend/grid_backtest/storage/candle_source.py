"""Candle data source for backtesting.

The simulator only sees the CandleSource protocol, so tests can inject
synthetic candles and the application injects the PostgreSQL reader.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Protocol

import asyncpg

from grid_core.models.candle import Candle

logger = logging.getLogger(__name__)


class CandleSource(Protocol):
    """Protocol for candle data access."""

    async def fetch_candles(
        self, symbol: str, interval: str, start: datetime, end: datetime
    ) -> list[Candle]:
        """Candles with ``start <= open_time < end``, ascending."""
        ...


class PostgresCandleSource:
    """Read candles from PostgreSQL via the shared asyncpg pool.

    asyncpg returns NUMERIC columns as Decimal natively. Missing periods are
    simply absent; nothing is interpolated.
    """

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def fetch_candles(
        self, symbol: str, interval: str, start: datetime, end: datetime
    ) -> list[Candle]:
        """Fetch candles in ascending time order."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT symbol, interval, open_time,
                          open, high, low, close, volume
                   FROM klines
                   WHERE symbol=$1 AND interval=$2
                     AND open_time >= $3 AND open_time < $4
                   ORDER BY open_time ASC""",
                symbol,
                interval,
                start,
                end,
            )
        logger.debug(f"[{symbol}] {len(rows)} {interval} candles from {start:%Y-%m-%d %H:%M}")

        return [
            Candle(
                symbol=row["symbol"],
                interval=row["interval"],
                open_time=row["open_time"],
                open=row["open"],
                high=row["high"],
                low=row["low"],
                close=row["close"],
                volume=row["volume"],
            )
            for row in rows
        ]
