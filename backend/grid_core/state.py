"""Mutable simulation state for one grid backtest run.

A BacktestState has a single owner for its whole lifetime:

    state = init_backtest_state(params, first_candle)
    process_batch(state, day_1)          # grid_core.processor
    process_batch(state, day_2)
    ...
    result = finalize_backtest(state, params, total_days)

Parallel runs (e.g. a parameter sweep) must build one state each; nothing
is shared between states.

Prices and balances use float, like the hot-path models of the signal
engine, since a long run touches every ladder level for every candle.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal

from grid_core.ladder import GridLadder, build_ladder
from grid_core.models.candle import Candle
from grid_core.models.params import GridParams

logger = logging.getLogger(__name__)

TradeSide = Literal["buy", "sell"]

# Ring buffer sizes. Older entries are evicted, so for long backtests the
# trade log and equity curve only cover the most recent activity.
TRADE_LOG_CAPACITY = 1000
EQUITY_CURVE_CAPACITY = 1000

# Round-trip fee share deducted from every booked grid profit
FEE_RATE = 0.002

# Minimum candle-time distance between two equity samples
EQUITY_SAMPLE_INTERVAL = timedelta(hours=1)

# Relative slack when checking that a balance covers a trade
_BALANCE_TOLERANCE = 1e-9


@dataclass(slots=True)
class Trade:
    time: datetime
    side: TradeSide
    price: float
    amount: float
    profit: float | None = None  # sells only


@dataclass(slots=True)
class EquityPoint:
    time: datetime
    profit: float
    asset: float


def _covers(balance: float, amount: float) -> bool:
    return balance >= amount * (1 - _BALANCE_TOLERANCE)


@dataclass
class BacktestState:
    """Wallet, ladder positions and running statistics of a run."""

    ladder: GridLadder
    quote_balance: float
    base_balance: float
    position_flags: list[bool]
    start_price: float
    last_price: float
    max_asset_seen: float
    min_asset_seen: float
    realized_grid_profit: float = 0.0
    fees_paid: float = 0.0
    buy_count: int = 0
    sell_count: int = 0
    candles_processed: int = 0
    last_sample_time: datetime | None = None
    trades: deque[Trade] = field(
        default_factory=lambda: deque(maxlen=TRADE_LOG_CAPACITY)
    )
    equity_curve: deque[EquityPoint] = field(
        default_factory=lambda: deque(maxlen=EQUITY_CURVE_CAPACITY)
    )

    @property
    def open_positions(self) -> int:
        return sum(self.position_flags)

    def asset_value(self, price: float | None = None) -> float:
        """Wallet value in quote currency, marked at ``price`` (default: last price)."""
        if price is None:
            price = self.last_price
        return self.quote_balance + self.base_balance * price

    def buy_level(self, index: int, time: datetime) -> bool:
        """Buy one unit at ladder level ``index``.

        Returns False (and changes nothing) when the quote balance cannot
        fund the unit; a dry grid skips the trade instead of failing.
        """
        price = self.ladder.levels[index]
        amount = self.ladder.unit_size
        cost = price * amount
        if not _covers(self.quote_balance, cost):
            return False

        self.quote_balance = max(self.quote_balance - cost, 0.0)
        self.base_balance += amount
        self.position_flags[index] = True
        self.buy_count += 1
        self.trades.append(Trade(time=time, side="buy", price=price, amount=amount))
        return True

    def sell_level(self, index: int, time: datetime) -> bool:
        """Sell the unit held at ladder level ``index``.

        Each close books one ladder gap of spread capture at unit size,
        net of the round-trip fee share. Returns False when the base
        balance cannot cover the unit.
        """
        price = self.ladder.levels[index]
        amount = self.ladder.unit_size
        if not _covers(self.base_balance, amount):
            return False

        self.quote_balance += price * amount
        self.base_balance = max(self.base_balance - amount, 0.0)
        self.position_flags[index] = False

        gross = self.ladder.gap * amount
        profit = gross * (1 - FEE_RATE)
        self.realized_grid_profit += profit
        self.fees_paid += gross - profit
        self.sell_count += 1
        self.trades.append(
            Trade(time=time, side="sell", price=price, amount=amount, profit=profit)
        )
        return True

    def sample_equity(self, time: datetime) -> EquityPoint:
        """Append an equity point at ``time`` and widen the asset extrema."""
        asset = self.asset_value()
        point = EquityPoint(time=time, profit=self.realized_grid_profit, asset=asset)
        self.equity_curve.append(point)
        self.last_sample_time = time
        if asset > self.max_asset_seen:
            self.max_asset_seen = asset
        if asset < self.min_asset_seen:
            self.min_asset_seen = asset
        return point

    def sample_due(self, time: datetime) -> bool:
        """Whether an equity sample should be taken at candle time ``time``."""
        if self.last_sample_time is None:
            return True
        return time - self.last_sample_time >= EQUITY_SAMPLE_INTERVAL


def init_backtest_state(params: GridParams, first_candle: Candle) -> BacktestState:
    """Create the state of a run activated at ``first_candle``'s open.

    Every level strictly above the opening price is bought immediately, as
    if price had always been below those rungs. The seeded equity point
    carries zero profit.
    """
    ladder = build_ladder(params)
    start_price = float(first_candle.open)

    state = BacktestState(
        ladder=ladder,
        quote_balance=params.investment,
        base_balance=0.0,
        position_flags=[False] * len(ladder),
        start_price=start_price,
        last_price=start_price,
        max_asset_seen=params.investment,
        min_asset_seen=params.investment,
    )

    for i, price in enumerate(ladder.levels):
        if price > start_price:
            state.buy_level(i, first_candle.open_time)

    # Nothing is realized yet, so the seed point carries zero profit
    state.sample_equity(first_candle.open_time)

    logger.debug(
        f"Grid activated at {start_price}: {state.buy_count} seed buys, "
        f"{len(ladder)} levels, unit={ladder.unit_size:.8f}"
    )
    return state
