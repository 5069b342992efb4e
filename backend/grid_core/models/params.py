"""Grid strategy parameters."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StrategyType(str, Enum):
    SPOT = "spot"
    CONTRACT = "contract"


class GridParams(BaseModel):
    """Arithmetic grid parameters.

    Invalid combinations raise ``pydantic.ValidationError`` at construction,
    before any simulation state exists.
    """

    model_config = ConfigDict(frozen=True)

    min_price: float = Field(gt=0)
    max_price: float = Field(gt=0)
    grid_count: int = Field(gt=0)
    investment: float = Field(gt=0)
    strategy_type: StrategyType = StrategyType.SPOT
    # Only meaningful for contract grids, which are not supported
    leverage: int | None = Field(default=None, ge=1, le=100)

    @model_validator(mode="after")
    def _validate(self):
        if self.min_price >= self.max_price:
            raise ValueError(
                f"min_price must be below max_price, got "
                f"{self.min_price} >= {self.max_price}"
            )
        if self.strategy_type is StrategyType.CONTRACT:
            raise ValueError("contract grids are not supported, use 'spot'")
        return self
