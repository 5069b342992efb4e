#!/usr/bin/env python3
"""
Historical candle download script
=================================

Pages candles from the Binance spot REST API into the klines table.

Usage:
    # Last 7 days of BTCUSDT 1m candles
    python scripts/download_candles.py --symbol BTCUSDT --days 7

    # A full year
    python scripts/download_candles.py --symbol ETHUSDT --start 2024-01-01 --end 2024-12-31
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from grid_backtest.binance_rest import BinanceRestClient
from grid_backtest.config import get_backtest_settings
from grid_backtest.downloader import CandleDownloader
from grid_backtest.storage.database import CandleDatabase

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def parse_date(date_str: str) -> datetime:
    try:
        dt = datetime.strptime(date_str, "%Y-%m-%d")
        return dt.replace(tzinfo=timezone.utc)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: {date_str} (expected YYYY-MM-DD)"
        )


async def main():
    parser = argparse.ArgumentParser(description="Download historical candles")
    parser.add_argument("--symbol", type=str, default="BTCUSDT")
    parser.add_argument("--interval", type=str, default=None)
    parser.add_argument("--days", type=int, default=None, help="Download the last N days")
    parser.add_argument("--start", type=parse_date, default=None, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=parse_date, default=None, help="End date, inclusive (YYYY-MM-DD)")
    args = parser.parse_args()

    settings = get_backtest_settings()
    interval = args.interval or settings.default_interval

    if args.days:
        end = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        start = end - timedelta(days=args.days)
    elif args.start and args.end:
        start, end = args.start, args.end + timedelta(days=1)
    else:
        parser.error("either --days or both --start and --end are required")

    db = CandleDatabase(settings.database_url)
    await db.init()
    client = BinanceRestClient(
        base_url=settings.binance_base_url,
        request_interval=settings.request_interval,
    )
    try:
        count = await CandleDownloader(client, db.pool).sync(
            args.symbol, interval, start, end
        )
        logger.info(f"{args.symbol}: {count:,} candles stored")
    finally:
        await client.close()
        await db.close()


if __name__ == "__main__":
    asyncio.run(main())
