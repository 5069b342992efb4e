"""Backtest application configuration.

Loaded from GRID_BACKTEST_* environment variables (or a .env file).
Candle reading and ingestion share the same PostgreSQL database.
"""

from __future__ import annotations

import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class BacktestSettings(BaseSettings):
    """Backtest configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GRID_BACKTEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # PostgreSQL candle store
    database_url: str = os.environ.get(
        "DATABASE_URL", "postgresql://localhost/grid_backtest"
    )

    # Candle ingestion (Binance spot REST)
    binance_base_url: str = "https://api.binance.com"
    request_interval: float = 0.2  # seconds between paginated requests
    default_interval: str = "1m"
    quote_asset: str = "USDT"

    # Finished progress entries are dropped after this many seconds
    progress_ttl: float = 300.0


_settings: BacktestSettings | None = None


def get_backtest_settings() -> BacktestSettings:
    """Get cached backtest settings instance."""
    global _settings
    if _settings is None:
        _settings = BacktestSettings()
    return _settings
