"""Tests for process_batch (per-candle grid triggers and equity sampling)."""

import random
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from grid_core.models.candle import Candle
from grid_core.models.params import GridParams
from grid_core.processor import process_batch
from grid_core.state import FEE_RATE, init_backtest_state


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

T0 = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
PARAMS = GridParams(min_price=1000, max_price=2000, grid_count=10, investment=10000)
UNIT = 10000 / 16500
GAP_PROFIT = 100 * UNIT * (1 - FEE_RATE)


def make_candle(
    low: float,
    high: float,
    close: float | None = None,
    open: float | None = None,
    open_time: datetime | None = None,
) -> Candle:
    """Build a 1m Candle from floats."""
    close = close if close is not None else (low + high) / 2
    open = open if open is not None else close
    return Candle(
        symbol="ETHUSDT",
        interval="1m",
        open_time=open_time or T0 + timedelta(minutes=1),
        open=Decimal(str(open)),
        high=Decimal(str(high)),
        low=Decimal(str(low)),
        close=Decimal(str(close)),
        volume=Decimal("1"),
    )


def seeded_state(start: float = 1500):
    """State activated at ``start``; at 1500 levels 1600..2000 are held."""
    return init_backtest_state(PARAMS, make_candle(start, start, open_time=T0))


def open_cost(state) -> float:
    return sum(
        price * state.ladder.unit_size
        for price, held in zip(state.ladder.levels, state.position_flags)
        if held
    )


def random_walk(n: int, seed: int = 7, start: float = 1500.0) -> list[Candle]:
    """Deterministic 1m candle walk inside roughly 900–2100."""
    rng = random.Random(seed)
    candles = []
    price = start
    for i in range(n):
        open_ = price
        price = min(max(price + rng.uniform(-60, 60), 900), 2100)
        high = max(open_, price) + rng.uniform(0, 30)
        low = min(open_, price) - rng.uniform(0, 30)
        candles.append(
            make_candle(
                low=round(low, 2),
                high=round(high, 2),
                close=round(price, 2),
                open=round(open_, 2),
                open_time=T0 + timedelta(minutes=i),
            )
        )
    return candles


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------

class TestBuyTrigger:

    def test_low_touching_free_level_buys(self):
        state = seeded_state()
        process_batch(state, [make_candle(low=1450, high=1480, close=1470)])

        trade = state.trades[-1]
        assert trade.side == "buy"
        assert trade.price == pytest.approx(1500)
        assert trade.amount == pytest.approx(UNIT)
        assert state.position_flags[5] is True
        assert state.last_price == 1470

    def test_exact_touch_counts(self):
        state = seeded_state()
        process_batch(state, [make_candle(low=1500, high=1520)])
        assert [t.side for t in state.trades][5:] == ["buy", "sell"]

    def test_no_buy_when_quote_is_short(self):
        state = seeded_state()
        state.quote_balance = 0.0
        process_batch(state, [make_candle(low=1450, high=1480)])

        assert len(state.trades) == 5
        assert state.position_flags[5] is False
        assert state.buy_count == 5


class TestSellTrigger:

    def test_high_touching_held_level_sells(self):
        state = seeded_state()
        process_batch(state, [make_candle(low=1450, high=1480)])
        process_batch(state, [make_candle(low=1490, high=1550)])

        trade = state.trades[-1]
        assert trade.side == "sell"
        assert trade.price == pytest.approx(1500)
        assert trade.profit == pytest.approx(GAP_PROFIT)
        assert state.position_flags[5] is False
        assert state.realized_grid_profit == pytest.approx(GAP_PROFIT)
        assert state.fees_paid == pytest.approx(100 * UNIT * FEE_RATE)

    def test_seeded_level_sells_when_price_rises(self):
        state = seeded_state()
        process_batch(state, [make_candle(low=1590, high=1620)])

        assert state.trades[-1].side == "sell"
        assert state.trades[-1].price == pytest.approx(1600)
        assert state.position_flags[6] is False

    def test_no_sell_when_base_is_short(self):
        state = seeded_state()
        state.base_balance = 0.0
        process_batch(state, [make_candle(low=1590, high=1650)])

        assert state.sell_count == 0
        assert state.position_flags[6] is True
        assert state.realized_grid_profit == 0


class TestLevelOrdering:
    """One candle spanning several levels trades them in ascending order."""

    def test_wide_candle_event_order(self):
        state = seeded_state()
        process_batch(state, [make_candle(low=1350, high=1650)])

        events = [(t.side, round(t.price)) for t in state.trades][5:]
        assert events == [
            ("buy", 1400),
            ("sell", 1400),
            ("buy", 1500),
            ("sell", 1500),
            ("sell", 1600),
        ]
        assert state.sell_count == 3
        assert state.realized_grid_profit == pytest.approx(3 * GAP_PROFIT)

    def test_repeated_runs_are_identical(self):
        candles = random_walk(500, seed=11)
        a = seeded_state()
        b = seeded_state()
        process_batch(a, candles)
        process_batch(b, candles)

        assert list(a.trades) == list(b.trades)
        assert list(a.equity_curve) == list(b.equity_curve)
        assert a.realized_grid_profit == b.realized_grid_profit


# ---------------------------------------------------------------------------
# Equity sampling
# ---------------------------------------------------------------------------

class TestEquitySampling:

    def test_at_most_one_sample_per_hour(self):
        state = seeded_state()
        candles = [
            make_candle(low=1545, high=1555, open_time=T0 + timedelta(minutes=i))
            for i in range(180)
        ]
        process_batch(state, candles)

        times = [p.time for p in state.equity_curve]
        assert times == [T0, T0 + timedelta(hours=1), T0 + timedelta(hours=2)]
        assert state.candles_processed == 180

    def test_sample_values(self):
        state = seeded_state()
        process_batch(state, [make_candle(low=1350, high=1650, close=1550,
                                          open_time=T0 + timedelta(hours=1))])
        point = state.equity_curve[-1]
        assert point.profit == pytest.approx(state.realized_grid_profit)
        assert point.asset == pytest.approx(
            state.quote_balance + state.base_balance * 1550
        )

    def test_extrema_follow_samples(self):
        state = seeded_state()
        state.last_price = 1000
        low_asset = state.sample_equity(T0 + timedelta(hours=1)).asset
        assert state.min_asset_seen == pytest.approx(low_asset)

        state.quote_balance += 5000
        high_asset = state.sample_equity(T0 + timedelta(hours=2)).asset
        assert high_asset > 10000
        assert state.max_asset_seen == pytest.approx(high_asset)

    def test_batch_boundaries_do_not_change_results(self):
        candles = random_walk(1500, seed=3)
        whole = seeded_state()
        process_batch(whole, candles)

        split = seeded_state()
        for i in range(0, len(candles), 97):
            process_batch(split, candles[i:i + 97])

        assert list(split.trades) == list(whole.trades)
        assert list(split.equity_curve) == list(whole.equity_curve)
        assert split.realized_grid_profit == whole.realized_grid_profit


# ---------------------------------------------------------------------------
# Memory bounds
# ---------------------------------------------------------------------------

class TestBoundedMemory:

    def test_trade_log_and_curve_are_capped(self):
        state = seeded_state()
        # Each candle buys and sells both 1400 and 1500
        candles = [
            make_candle(low=1350, high=1550, close=1450,
                        open_time=T0 + timedelta(hours=i + 1))
            for i in range(2500)
        ]
        process_batch(state, candles)

        assert state.sell_count == 5000
        assert state.buy_count == 5 + 5000
        assert len(state.trades) == 1000
        assert len(state.equity_curve) == 1000
        # Oldest entries are evicted
        assert state.trades[-1].side == "sell"
        assert state.equity_curve[0].time == T0 + timedelta(hours=1501)
        assert state.equity_curve[-1].time == T0 + timedelta(hours=2500)


# ---------------------------------------------------------------------------
# Funds conservation
# ---------------------------------------------------------------------------

class TestFundsConservation:
    """Trades exchange value at level prices; nothing is created or lost."""

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_wallet_matches_cost_of_open_levels(self, seed):
        state = seeded_state()
        for i, candle in enumerate(random_walk(3000, seed=seed)):
            process_batch(state, [candle])
            if i % 250 == 0:
                assert state.quote_balance + open_cost(state) == pytest.approx(10000)

        assert state.quote_balance + open_cost(state) == pytest.approx(10000)
        assert state.base_balance == pytest.approx(state.open_positions * UNIT)

    def test_asset_is_investment_less_open_level_gaps(self):
        state = seeded_state()
        process_batch(state, random_walk(2000, seed=5))

        price = state.last_price
        gaps = sum(
            (level - price) * UNIT
            for level, held in zip(state.ladder.levels, state.position_flags)
            if held
        )
        assert state.asset_value() == pytest.approx(10000 - gaps)

    def test_realized_profit_is_gap_per_close_net_of_fees(self):
        state = seeded_state()
        process_batch(state, random_walk(2000, seed=9))

        assert state.sell_count > 0
        gross = state.sell_count * 100 * UNIT
        assert state.realized_grid_profit == pytest.approx(gross * (1 - FEE_RATE))
        assert state.realized_grid_profit + state.fees_paid == pytest.approx(gross)
