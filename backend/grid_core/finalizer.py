"""Summary statistics for a finished grid backtest.

Profit convention:
  grid profit       = sum of booked per-close profits (one ladder gap at
                      unit size, net of the 0.2% fee share)
  unrealized profit = open inventory marked from the activation price to
                      the last price (a whole-inventory mark, not per lot)
  total profit      = grid profit + unrealized profit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from grid_core.models.params import GridParams
from grid_core.state import BacktestState, EquityPoint, Trade


@dataclass(frozen=True)
class BacktestResult:
    """Complete grid backtest results."""

    total_profit: float = 0.0
    grid_profit: float = 0.0
    unrealized_profit: float = 0.0
    profit_rate: float = 0.0
    annualized_return: float = 0.0

    arbitrage_times: int = 0
    daily_arbitrage_times: float = 0.0
    total_trades: int = 0
    fees_paid: float = 0.0

    max_drawdown: float = 0.0
    max_drawdown_rate: float = 0.0
    min_asset: float = 0.0
    max_asset: float = 0.0

    start_price: float = 0.0
    current_price: float = 0.0
    total_days: float = 0.0

    # Most recent entries only (ring buffers in the state)
    profit_curve: tuple[EquityPoint, ...] = field(default_factory=tuple)
    trades: tuple[Trade, ...] = field(default_factory=tuple)

    @property
    def start_time(self) -> datetime | None:
        return self.profit_curve[0].time if self.profit_curve else None


def finalize_backtest(
    state: BacktestState, params: GridParams, total_days: float
) -> BacktestResult:
    """Summarize ``state`` without modifying it.

    Args:
        state: State after the last processed batch
        params: Parameters the state was created from
        total_days: Calendar days covered by the run; annualized and daily
            figures are 0 when this is not positive
    """
    unrealized = state.base_balance * (state.last_price - state.start_price)
    total_profit = state.realized_grid_profit + unrealized
    profit_rate = total_profit / params.investment * 100

    annualized = profit_rate / total_days * 365 if total_days > 0 else 0.0
    arbitrage_times = state.sell_count
    daily_arbitrage = arbitrage_times / total_days if total_days > 0 else 0.0

    max_drawdown = state.max_asset_seen - state.min_asset_seen
    max_drawdown_rate = (
        max_drawdown / state.max_asset_seen * 100 if state.max_asset_seen > 0 else 0.0
    )

    return BacktestResult(
        total_profit=total_profit,
        grid_profit=state.realized_grid_profit,
        unrealized_profit=unrealized,
        profit_rate=profit_rate,
        annualized_return=annualized,
        arbitrage_times=arbitrage_times,
        daily_arbitrage_times=daily_arbitrage,
        total_trades=state.buy_count + state.sell_count,
        fees_paid=state.fees_paid,
        max_drawdown=max_drawdown,
        max_drawdown_rate=max_drawdown_rate,
        min_asset=state.min_asset_seen,
        max_asset=state.max_asset_seen,
        start_price=state.start_price,
        current_price=state.last_price,
        total_days=total_days,
        profit_curve=tuple(state.equity_curve),
        trades=tuple(state.trades),
    )
