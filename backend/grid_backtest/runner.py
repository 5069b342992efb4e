"""GridBacktestRunner — orchestrates a day-streamed grid backtest.

Uses:
- grid_backtest/streaming to walk the range one day at a time
- grid_core for the simulation (init → process per day → finalize)
- grid_backtest/progress for optional progress reporting
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date

from grid_core.finalizer import BacktestResult, finalize_backtest
from grid_core.models.candle import Candle
from grid_core.models.params import GridParams
from grid_core.processor import process_batch
from grid_core.state import BacktestState, init_backtest_state

from grid_backtest.progress import DailySnapshot, ProgressTracker
from grid_backtest.storage.candle_source import CandleSource
from grid_backtest.streaming import (
    TimeRange,
    count_days,
    resolve_time_range,
    stream_candles_by_day,
)

logger = logging.getLogger(__name__)


class NoHistoricalDataError(LookupError):
    """The requested range holds no candles, so no state was ever created."""


def to_exchange_symbol(symbol: str, quote_asset: str = "USDT") -> str:
    """Map a base asset such as ``BTC`` to its quote pair ``BTCUSDT``."""
    symbol = symbol.strip().upper()
    if symbol.endswith(quote_asset):
        return symbol
    return f"{symbol}{quote_asset}"


@dataclass
class GridBacktestConfig:
    """Configuration for a streamed grid backtest run."""

    symbol: str
    params: GridParams
    time_range: TimeRange
    interval: str = "1m"
    user_id: str = "cli"


class GridBacktestRunner:
    """Stream a symbol's candles day by day through one grid backtest."""

    def __init__(
        self,
        config: GridBacktestConfig,
        candle_source: CandleSource,
        progress: ProgressTracker | None = None,
    ):
        self.config = config
        self._candle_source = candle_source
        self._progress = progress
        self._state: BacktestState | None = None

    async def run(self) -> BacktestResult:
        """Execute the backtest and return its summary.

        Raises:
            NoHistoricalDataError: if no candle exists in the range
        """
        started = time.time()
        symbol = self.config.symbol
        start, end = resolve_time_range(self.config.time_range)
        self._state = None

        logger.info(
            f"[{symbol}] Starting grid backtest "
            f"{self.config.params.min_price}–{self.config.params.max_price} "
            f"x{self.config.params.grid_count}, "
            f"{start:%Y-%m-%d} → {end:%Y-%m-%d}"
        )
        if self._progress is not None:
            self._progress.start(self.config.user_id, symbol, count_days(start, end))

        try:
            summary = await stream_candles_by_day(
                self._candle_source,
                symbol,
                self.config.interval,
                self.config.time_range,
                self._on_batch,
            )
            if self._state is None:
                raise NoHistoricalDataError(
                    f"No historical data available for {symbol} "
                    f"{start:%Y-%m-%d} → {end:%Y-%m-%d}"
                )
            result = finalize_backtest(
                self._state, self.config.params, summary.total_days
            )
        except asyncio.CancelledError:
            if self._progress is not None:
                self._progress.fail(self.config.user_id, symbol, "cancelled")
            raise
        except Exception as e:
            if self._progress is not None:
                self._progress.fail(self.config.user_id, symbol, str(e))
            raise

        if self._progress is not None:
            self._progress.complete(self.config.user_id, symbol, result)

        elapsed = time.time() - started
        logger.info(
            f"[{symbol}] Done in {elapsed:.1f}s: {summary.total_records:,} candles, "
            f"{result.arbitrage_times} arbitrages, profit {result.total_profit:+.2f}"
        )
        return result

    async def _on_batch(
        self, batch: list[Candle], day_index: int, total_days: int, day: date
    ) -> None:
        if batch:
            if self._state is None:
                self._state = init_backtest_state(self.config.params, batch[0])
                logger.info(
                    f"[{self.config.symbol}] Grid activated at {self._state.start_price} "
                    f"with {self._state.buy_count} seed buys"
                )
            process_batch(self._state, batch)

        if self._progress is not None:
            self._record_day(day_index, day)

    def _record_day(self, day_index: int, day: date) -> None:
        state = self._state
        snapshot = None
        profit = 0.0
        if state is not None:
            floating = state.base_balance * (state.last_price - state.start_price)
            profit = state.realized_grid_profit + floating
            snapshot = DailySnapshot(
                date=day.isoformat(),
                balance=state.asset_value(),
                total_profit=profit,
                grid_triggers=state.sell_count,
                floating_profit=floating,
                max_drawdown=state.max_asset_seen - state.min_asset_seen,
            )
        self._progress.update(
            self.config.user_id,
            self.config.symbol,
            processed_days=day_index + 1,
            current_date=day.isoformat(),
            current_profit=profit,
            snapshot=snapshot,
        )
