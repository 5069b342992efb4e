"""Candle (OHLC) data model."""

from decimal import Decimal
from pydantic import AwareDatetime, BaseModel, ConfigDict


class Candle(BaseModel):
    """One OHLC candle of a symbol/interval series."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    interval: str
    open_time: AwareDatetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal = Decimal("0")
