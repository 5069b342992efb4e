#!/usr/bin/env python3
"""Initialize the candle database and create the klines table."""

import asyncio
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from grid_backtest.config import get_backtest_settings
from grid_backtest.storage.database import CandleDatabase


async def main():
    print("Initializing database...")
    db = CandleDatabase(get_backtest_settings().database_url)
    await db.init()
    print("Database initialized successfully!")
    print("Tables created: klines")
    await db.close()


if __name__ == "__main__":
    asyncio.run(main())
