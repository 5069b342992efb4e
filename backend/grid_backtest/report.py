"""Report formatting for grid backtest results.

Outputs results to console (formatted summary) and JSON files.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal

from grid_core.finalizer import BacktestResult
from grid_core.models.params import GridParams


class DecimalEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


class ReportFormatter:
    """Format backtest results for display and export."""

    @staticmethod
    def print_console(result: BacktestResult, symbol: str, params: GridParams) -> None:
        """Print formatted report to console."""
        print("\n" + "=" * 70)
        print(f"  GRID BACKTEST RESULTS — {symbol} (spot)")
        print("=" * 70)
        print(
            f"  Range: {params.min_price:,.2f} → {params.max_price:,.2f}  "
            f"Grids: {params.grid_count}  Investment: {params.investment:,.2f}"
        )
        if result.start_time is not None:
            print(f"  From: {result.start_time:%Y-%m-%d %H:%M}  Days: {result.total_days:.1f}")

        print("\n" + "-" * 70)
        print("  PROFIT")
        print("-" * 70)
        print(f"  Total profit:      {result.total_profit:+,.2f} ({result.profit_rate:+.2f}%)")
        print(f"  Grid profit:       {result.grid_profit:+,.2f}")
        print(f"  Unrealized:        {result.unrealized_profit:+,.2f}")
        print(f"  Fees:              {result.fees_paid:,.2f}")
        print(f"  Annualized return: {result.annualized_return:+.2f}%")

        print("\n" + "-" * 70)
        print("  ACTIVITY")
        print("-" * 70)
        print(f"  Arbitrages:        {result.arbitrage_times} ({result.daily_arbitrage_times:.2f}/day)")
        print(f"  Trades:            {result.total_trades}")
        print(f"  Start price:       {result.start_price:,.2f}")
        print(f"  Current price:     {result.current_price:,.2f}")

        print("\n" + "-" * 70)
        print("  RISK")
        print("-" * 70)
        print(f"  Max drawdown:      {result.max_drawdown:,.2f} ({result.max_drawdown_rate:.2f}%)")
        print(f"  Asset range:       {result.min_asset:,.2f} → {result.max_asset:,.2f}")

        if result.trades:
            print("\n" + "-" * 70)
            print("  RECENT TRADES (last 10)")
            print("-" * 70)
            print(f"  {'Time':<18} {'Side':<5} {'Price':>12} {'Amount':>12} {'Profit':>10}")
            for t in result.trades[-10:]:
                profit = f"{t.profit:+.4f}" if t.profit is not None else ""
                print(
                    f"  {t.time:%Y-%m-%d %H:%M} {t.side:<5} {t.price:>12,.2f} "
                    f"{t.amount:>12.6f} {profit:>10}"
                )

        print("\n" + "=" * 70)

    @staticmethod
    def to_dict(result: BacktestResult, symbol: str, params: GridParams) -> dict:
        """Convert results to JSON-serializable dict."""
        return {
            "metadata": {
                "symbol": symbol,
                "params": params.model_dump(mode="json"),
                "total_days": result.total_days,
            },
            "overall": {
                "total_profit": round(result.total_profit, 4),
                "grid_profit": round(result.grid_profit, 4),
                "unrealized_profit": round(result.unrealized_profit, 4),
                "profit_rate": round(result.profit_rate, 4),
                "annualized_return": round(result.annualized_return, 4),
                "arbitrage_times": result.arbitrage_times,
                "daily_arbitrage_times": round(result.daily_arbitrage_times, 4),
                "total_trades": result.total_trades,
                "fees_paid": round(result.fees_paid, 4),
                "max_drawdown": round(result.max_drawdown, 4),
                "max_drawdown_rate": round(result.max_drawdown_rate, 4),
                "min_asset": round(result.min_asset, 4),
                "max_asset": round(result.max_asset, 4),
                "start_price": result.start_price,
                "current_price": result.current_price,
            },
            "profit_curve": [
                {"time": p.time, "profit": p.profit, "asset": p.asset}
                for p in result.profit_curve
            ],
            "trades": [
                {
                    "time": t.time,
                    "type": t.side,
                    "price": t.price,
                    "amount": t.amount,
                    "profit": t.profit,
                }
                for t in result.trades
            ],
        }

    @staticmethod
    def save_json(
        result: BacktestResult, symbol: str, params: GridParams, filepath: str
    ) -> None:
        """Save results to JSON file."""
        data = ReportFormatter.to_dict(result, symbol, params)
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2, cls=DecimalEncoder)
        print(f"\nResults saved to {filepath}")
