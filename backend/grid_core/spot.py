"""Single-shot spot grid backtest over an in-memory candle list.

Runs the same state machine as the day-streamed path, so both agree on
profit and arbitrage counts for the same candles. Only the day count
differs: here it is the span between the first and last candle.
"""

from __future__ import annotations

from collections.abc import Sequence

from grid_core.finalizer import BacktestResult, finalize_backtest
from grid_core.models.candle import Candle
from grid_core.models.params import GridParams
from grid_core.processor import process_batch
from grid_core.state import init_backtest_state

SECONDS_PER_DAY = 86_400


def backtest_spot_grid(params: GridParams, candles: Sequence[Candle]) -> BacktestResult:
    """Backtest a spot grid over ``candles`` (ascending open time)."""
    if not candles:
        return BacktestResult(
            min_asset=params.investment,
            max_asset=params.investment,
        )

    state = init_backtest_state(params, candles[0])
    process_batch(state, candles)

    span = candles[-1].open_time - candles[0].open_time
    total_days = span.total_seconds() / SECONDS_PER_DAY
    return finalize_backtest(state, params, total_days)
