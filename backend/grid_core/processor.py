"""Apply a batch of candles to a BacktestState.

Processing order for each candle:
1. Record the close as the last price
2. Walk the ladder in ascending index order; for each level evaluate the
   buy trigger (low touches the level) then the sell trigger (high touches
   the level)
3. Take an equity sample if none was taken in the last simulated hour

Both triggers read the same candle, so one candle may buy and sell the same
level. The ascending walk is the tie-break and must stay stable for runs to
be reproducible.
"""

from __future__ import annotations

from collections.abc import Iterable

from grid_core.models.candle import Candle
from grid_core.state import BacktestState


def process_batch(state: BacktestState, candles: Iterable[Candle]) -> None:
    """Advance ``state`` through ``candles`` (in time order), in place."""
    levels = state.ladder.levels
    flags = state.position_flags

    for candle in candles:
        high = float(candle.high)
        low = float(candle.low)
        state.last_price = float(candle.close)

        for i, price in enumerate(levels):
            if low <= price and not flags[i]:
                state.buy_level(i, candle.open_time)
            if high >= price and flags[i]:
                state.sell_level(i, candle.open_time)

        state.candles_processed += 1
        if state.sample_due(candle.open_time):
            state.sample_equity(candle.open_time)
