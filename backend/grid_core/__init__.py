"""Core grid-trading backtest logic.

This package contains pure simulation logic with no I/O dependencies
(no database or network access). The backtesting application in
grid_backtest/ feeds it candles and collects its results.
"""

from grid_core.finalizer import BacktestResult, finalize_backtest
from grid_core.ladder import GridLadder, build_ladder
from grid_core.models import Candle, GridParams, StrategyType
from grid_core.processor import process_batch
from grid_core.spot import backtest_spot_grid
from grid_core.state import BacktestState, EquityPoint, Trade, init_backtest_state

__all__ = [
    "BacktestResult",
    "BacktestState",
    "Candle",
    "EquityPoint",
    "GridLadder",
    "GridParams",
    "StrategyType",
    "Trade",
    "backtest_spot_grid",
    "build_ladder",
    "finalize_backtest",
    "init_backtest_state",
    "process_batch",
]
