"""Boundary data models shared by the simulator and the application layer."""

from grid_core.models.candle import Candle
from grid_core.models.params import GridParams, StrategyType

__all__ = ["Candle", "GridParams", "StrategyType"]
