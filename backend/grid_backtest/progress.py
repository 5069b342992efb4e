"""In-memory progress of running grid backtests.

Keyed by (user_id, symbol) so a front end can poll a long streamed run.
Completed and failed entries stay readable for ``ttl`` seconds and are
purged lazily on the next access.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Literal

from grid_core.finalizer import BacktestResult

from grid_backtest.config import get_backtest_settings

logger = logging.getLogger(__name__)

ProgressStatus = Literal["running", "completed", "failed"]


@dataclass
class DailySnapshot:
    date: str  # YYYY-MM-DD
    balance: float
    total_profit: float
    grid_triggers: int
    floating_profit: float
    max_drawdown: float


@dataclass
class BacktestProgress:
    user_id: str
    symbol: str
    total_days: int
    processed_days: int = 0
    current_date: str = ""
    current_profit: float = 0.0
    status: ProgressStatus = "running"
    started_at: float = field(default_factory=time.time)
    finished_at: float | None = None
    # Monotonic finish time, used only for TTL expiry
    expires_from: float | None = field(default=None, repr=False)
    error: str | None = None
    daily: list[DailySnapshot] = field(default_factory=list)
    result: BacktestResult | None = None

    @property
    def percent(self) -> float:
        if self.total_days <= 0:
            return 0.0
        return self.processed_days / self.total_days * 100


class ProgressTracker:
    """Track backtest progress per (user, symbol)."""

    def __init__(self, ttl: float | None = None):
        if ttl is None:
            ttl = get_backtest_settings().progress_ttl
        self._ttl = ttl
        self._entries: dict[tuple[str, str], BacktestProgress] = {}

    def _purge(self) -> None:
        now = time.monotonic()
        expired = [
            key
            for key, p in self._entries.items()
            if p.expires_from is not None and now - p.expires_from >= self._ttl
        ]
        for key in expired:
            del self._entries[key]

    def start(self, user_id: str, symbol: str, total_days: int) -> BacktestProgress:
        """Register a new run, replacing any previous one for the same key."""
        self._purge()
        progress = BacktestProgress(user_id=user_id, symbol=symbol, total_days=total_days)
        self._entries[(user_id, symbol)] = progress
        return progress

    def update(
        self,
        user_id: str,
        symbol: str,
        *,
        processed_days: int,
        current_date: str,
        current_profit: float,
        snapshot: DailySnapshot | None = None,
    ) -> BacktestProgress | None:
        progress = self._entries.get((user_id, symbol))
        if progress is None:
            return None
        progress.processed_days = processed_days
        progress.current_date = current_date
        progress.current_profit = current_profit
        if snapshot is not None:
            progress.daily.append(snapshot)
        return progress

    def complete(self, user_id: str, symbol: str, result: BacktestResult) -> None:
        progress = self._entries.get((user_id, symbol))
        if progress is None:
            return
        progress.status = "completed"
        progress.processed_days = progress.total_days
        progress.current_profit = result.total_profit
        progress.result = result
        progress.finished_at = time.time()
        progress.expires_from = time.monotonic()

    def fail(self, user_id: str, symbol: str, error: str) -> None:
        progress = self._entries.get((user_id, symbol))
        if progress is None:
            return
        progress.status = "failed"
        progress.error = error
        progress.finished_at = time.time()
        progress.expires_from = time.monotonic()
        logger.warning(f"[{symbol}] Backtest for user {user_id} failed: {error}")

    def get(self, user_id: str, symbol: str) -> BacktestProgress | None:
        self._purge()
        return self._entries.get((user_id, symbol))

    def clear(self, user_id: str, symbol: str) -> None:
        self._entries.pop((user_id, symbol), None)

    def __len__(self) -> int:
        self._purge()
        return len(self._entries)
