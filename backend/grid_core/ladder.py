"""Arithmetic price ladder with a fixed coin amount per rung.

Levels are spaced evenly between min_price and max_price. Every rung trades
the same base-asset quantity, sized so that buying the whole ladder costs
exactly the investment:

    unit_size = investment / sum(levels)
"""

from __future__ import annotations

from dataclasses import dataclass

from grid_core.models.params import GridParams


@dataclass(frozen=True, slots=True)
class GridLadder:
    """Immutable ladder of ``grid_count + 1`` ascending price levels."""

    levels: tuple[float, ...]
    unit_size: float

    @property
    def gap(self) -> float:
        """Price distance between two adjacent levels."""
        return self.levels[1] - self.levels[0]

    @property
    def full_cost(self) -> float:
        """Quote amount needed to hold a unit at every level."""
        return sum(price * self.unit_size for price in self.levels)

    def __len__(self) -> int:
        return len(self.levels)


def build_ladder(params: GridParams) -> GridLadder:
    """Build the price ladder for validated grid parameters."""
    gap = (params.max_price - params.min_price) / params.grid_count
    levels = tuple(params.min_price + i * gap for i in range(params.grid_count + 1))
    unit_size = params.investment / sum(levels)
    return GridLadder(levels=levels, unit_size=unit_size)
