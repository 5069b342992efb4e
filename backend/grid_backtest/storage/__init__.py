"""Candle storage for the backtest application.

A single asyncpg pool serves both candle reads and ingestion writes.
"""

from grid_backtest.storage.candle_source import CandleSource, PostgresCandleSource
from grid_backtest.storage.database import CandleDatabase

__all__ = [
    "CandleDatabase",
    "CandleSource",
    "PostgresCandleSource",
]
