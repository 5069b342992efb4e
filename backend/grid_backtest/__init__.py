"""Day-streamed backtesting application for spot grid strategies.

Only depends on grid_core/ for the simulation itself.

Storage:
- Candles: read from PostgreSQL via asyncpg, one calendar day per query
- Ingestion: Binance spot REST pages upserted into the same table

Usage:
    python -m grid_backtest --symbol BTC --min-price 40000 --max-price 50000 --years 2024
"""

from grid_backtest.runner import (
    GridBacktestConfig,
    GridBacktestRunner,
    NoHistoricalDataError,
)
from grid_backtest.streaming import DateRange, StreamSummary, stream_candles_by_day

__all__ = [
    "DateRange",
    "GridBacktestConfig",
    "GridBacktestRunner",
    "NoHistoricalDataError",
    "StreamSummary",
    "stream_candles_by_day",
]
