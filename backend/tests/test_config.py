"""Tests for settings loading and CLI argument handling."""

import pytest
from datetime import date

from grid_backtest import config as config_module
from grid_backtest.__main__ import build_time_range, parse_args
from grid_backtest.config import BacktestSettings, get_backtest_settings
from grid_backtest.streaming import DateRange


class TestBacktestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GRID_BACKTEST_DEFAULT_INTERVAL", raising=False)
        settings = BacktestSettings(_env_file=None)
        assert settings.default_interval == "1m"
        assert settings.quote_asset == "USDT"
        assert settings.progress_ttl == 300.0

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("GRID_BACKTEST_DATABASE_URL", "postgresql://db/test")
        monkeypatch.setenv("GRID_BACKTEST_REQUEST_INTERVAL", "0.5")
        settings = BacktestSettings(_env_file=None)
        assert settings.database_url == "postgresql://db/test"
        assert settings.request_interval == 0.5

    def test_cached_instance(self, monkeypatch):
        monkeypatch.setattr(config_module, "_settings", None)
        assert get_backtest_settings() is get_backtest_settings()


class TestCli:

    BASE = ["--symbol", "BTC", "--min-price", "40000", "--max-price", "50000"]

    def test_years(self):
        args = parse_args(self.BASE + ["--years", "2023,2024"])
        assert build_time_range(args) == [2023, 2024]
        assert args.grids == 10
        assert args.investment == 10000

    def test_end_date_is_inclusive(self):
        args = parse_args(self.BASE + ["--start", "2024-01-01", "--end", "2024-01-31"])
        assert build_time_range(args) == DateRange(date(2024, 1, 1), date(2024, 2, 1))

    def test_missing_range(self):
        args = parse_args(self.BASE + ["--start", "2024-01-01"])
        assert build_time_range(args) is None

    def test_bad_date(self):
        with pytest.raises(SystemExit):
            parse_args(self.BASE + ["--start", "01/02/2024", "--end", "2024-01-31"])
