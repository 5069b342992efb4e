"""Historical candle ingestion.

Pages through the Binance spot klines endpoint and upserts every page into
PostgreSQL, so re-running a range is idempotent. The REST client's rate
limiter spaces consecutive pages.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import asyncpg

from grid_core.models.candle import Candle

from grid_backtest.binance_rest import MAX_LIMIT, BinanceRestClient

logger = logging.getLogger(__name__)


class CandleDownloader:
    """Download candles from Binance and store them in the klines table."""

    def __init__(self, client: BinanceRestClient, pool: asyncpg.Pool):
        self._client = client
        self._pool = pool

    async def _save_batch(self, candles: list[Candle]) -> int:
        """Batch upsert candles via asyncpg executemany."""
        records = [
            (
                c.symbol,
                c.interval,
                c.open_time,
                c.open,
                c.high,
                c.low,
                c.close,
                c.volume,
            )
            for c in candles
        ]
        async with self._pool.acquire() as conn:
            await conn.executemany(
                """INSERT INTO klines
                       (symbol, interval, open_time, open, high, low, close, volume)
                   VALUES ($1,$2,$3,$4,$5,$6,$7,$8)
                   ON CONFLICT (symbol, interval, open_time) DO UPDATE SET
                       open=EXCLUDED.open, high=EXCLUDED.high,
                       low=EXCLUDED.low, close=EXCLUDED.close,
                       volume=EXCLUDED.volume""",
                records,
            )
        return len(records)

    async def sync(
        self, symbol: str, interval: str, start: datetime, end: datetime
    ) -> int:
        """Import candles with ``start <= open_time < end``.

        Returns total number of candles written.
        """
        total = 0
        current = start
        last_ms = end - timedelta(milliseconds=1)

        while current < end:
            page = await self._client.get_candles(
                symbol, interval, start_time=current, end_time=last_ms
            )
            if not page:
                break

            total += await self._save_batch(page)
            logger.debug(
                f"[{symbol}/{interval}] {len(page)} candles up to "
                f"{page[-1].open_time:%Y-%m-%d %H:%M}"
            )

            if len(page) < MAX_LIMIT:
                break
            current = page[-1].open_time + timedelta(milliseconds=1)

        logger.info(
            f"[{symbol}/{interval}] Synced {total:,} candles "
            f"{start:%Y-%m-%d} → {end:%Y-%m-%d}"
        )
        return total
