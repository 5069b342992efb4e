"""Day-windowed candle streaming.

Walks a time range one UTC calendar day at a time, issuing one query per
day against the candle source and handing each day's candles to the
caller before the next day is fetched. Only one day of candles is alive at
any time, however long the range.

Source errors propagate unchanged and abort the walk; retries belong to
the source.
"""

from __future__ import annotations

import logging
import math
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from grid_core.models.candle import Candle

from grid_backtest.storage.candle_source import CandleSource

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DateRange:
    """Half-open range of calendar days ``[start, end)``."""

    start: date
    end: date

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(f"empty date range: {self.start} → {self.end}")


# A list of years, or an explicit date range
TimeRange = Sequence[int] | DateRange

OnBatch = Callable[[list[Candle], int, int, date], Awaitable[None]]


@dataclass(frozen=True)
class DayBatch:
    day_index: int
    total_days: int
    day: date
    candles: list[Candle]


@dataclass(frozen=True)
class StreamSummary:
    total_records: int
    total_days: int


def _midnight(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def resolve_time_range(time_range: TimeRange) -> tuple[datetime, datetime]:
    """Normalize years or a DateRange to UTC ``[start, end)`` instants.

    Years cover January 1st of the earliest year up to January 1st after
    the latest year.
    """
    if isinstance(time_range, DateRange):
        return _midnight(time_range.start), _midnight(time_range.end)

    years = list(time_range)
    if not years:
        raise ValueError("at least one year is required")
    start = datetime(min(years), 1, 1, tzinfo=timezone.utc)
    end = datetime(max(years) + 1, 1, 1, tzinfo=timezone.utc)
    return start, end


def count_days(start: datetime, end: datetime) -> int:
    return math.ceil((end - start) / ONE_DAY)


async def iter_day_batches(
    source: CandleSource,
    symbol: str,
    interval: str,
    time_range: TimeRange,
) -> AsyncIterator[DayBatch]:
    """Yield one DayBatch per calendar day of ``time_range``, oldest first.

    Days without data are yielded with an empty candle list so callers can
    track progress over the full range.
    """
    start, end = resolve_time_range(time_range)
    total_days = count_days(start, end)

    logger.info(
        f"[{symbol}] Streaming {interval} candles "
        f"{start:%Y-%m-%d} → {end:%Y-%m-%d} ({total_days} days)"
    )

    day_start = start
    day_index = 0
    while day_start < end:
        day_end = min(day_start + ONE_DAY, end)
        candles = await source.fetch_candles(symbol, interval, day_start, day_end)
        yield DayBatch(
            day_index=day_index,
            total_days=total_days,
            day=day_start.date(),
            candles=candles,
        )
        del candles

        day_index += 1
        day_start = day_end


async def stream_candles_by_day(
    source: CandleSource,
    symbol: str,
    interval: str,
    time_range: TimeRange,
    on_batch: OnBatch,
) -> StreamSummary:
    """Feed each day's candles to ``on_batch(batch, day_index, total_days, day)``.

    The callback is awaited before the next day is fetched.

    Returns:
        StreamSummary with the number of candles delivered and the number
        of calendar days in the range
    """
    start, end = resolve_time_range(time_range)
    total_days = count_days(start, end)
    total_records = 0

    async for day_batch in iter_day_batches(source, symbol, interval, time_range):
        await on_batch(
            day_batch.candles, day_batch.day_index, day_batch.total_days, day_batch.day
        )
        total_records += len(day_batch.candles)
        del day_batch

    logger.info(f"[{symbol}] Streamed {total_records:,} candles over {total_days} days")
    return StreamSummary(total_records=total_records, total_days=total_days)
