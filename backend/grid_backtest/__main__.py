"""CLI entry point for the grid backtesting system.

Usage:
    python -m grid_backtest --symbol BTC --min-price 40000 --max-price 50000 --years 2024
    python -m grid_backtest --symbol ETH --min-price 1500 --max-price 2500 --grids 20 \\
        --start 2024-01-01 --end 2024-03-31
    python -m grid_backtest --symbol BTC ... --years 2024 --download
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime, timedelta

from pydantic import ValidationError

from grid_core.models.params import GridParams

from grid_backtest.binance_rest import BinanceRestClient
from grid_backtest.config import get_backtest_settings
from grid_backtest.downloader import CandleDownloader
from grid_backtest.report import ReportFormatter
from grid_backtest.runner import (
    GridBacktestConfig,
    GridBacktestRunner,
    NoHistoricalDataError,
    to_exchange_symbol,
)
from grid_backtest.storage.candle_source import PostgresCandleSource
from grid_backtest.storage.database import CandleDatabase
from grid_backtest.streaming import DateRange, TimeRange, resolve_time_range


def parse_date(date_str: str) -> date:
    """Parse YYYY-MM-DD to a date."""
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: {date_str} (expected YYYY-MM-DD)"
        )


def parse_years(years_str: str) -> list[int]:
    """Parse a comma-separated list of years."""
    try:
        return [int(y) for y in years_str.split(",") if y.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid years: {years_str}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Backtest an arithmetic spot grid on historical candles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m grid_backtest --symbol BTC --min-price 40000 --max-price 50000 --years 2024
  python -m grid_backtest --symbol BTC --min-price 40000 --max-price 50000 --grids 20 \\
      --investment 5000 --start 2024-01-01 --end 2024-01-31
        """,
    )

    parser.add_argument("--symbol", type=str, required=True, help="Base asset or pair (BTC, BTCUSDT)")
    parser.add_argument("--min-price", type=float, required=True, help="Lowest grid price")
    parser.add_argument("--max-price", type=float, required=True, help="Highest grid price")
    parser.add_argument("--grids", type=int, default=10, help="Number of grids (default: 10)")
    parser.add_argument(
        "--investment",
        type=float,
        default=10_000.0,
        help="Investment in quote currency (default: 10000)",
    )
    parser.add_argument(
        "--type",
        dest="strategy_type",
        choices=["spot", "contract"],
        default="spot",
        help="Grid type (only spot is supported)",
    )
    parser.add_argument("--leverage", type=int, default=None, help="Leverage (contract only)")
    parser.add_argument("--interval", type=str, default=None, help="Candle interval (default: settings)")

    parser.add_argument("--years", type=parse_years, default=None, help="Comma-separated years, e.g. 2023,2024")
    parser.add_argument("--start", type=parse_date, default=None, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=parse_date, default=None, help="End date, inclusive (YYYY-MM-DD)")

    parser.add_argument(
        "--download",
        action="store_true",
        help="Download candles from the Binance REST API first",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file path for JSON results",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def build_time_range(args: argparse.Namespace) -> TimeRange | None:
    if args.years:
        return args.years
    if args.start is None or args.end is None:
        return None
    # --end includes the full day
    return DateRange(args.start, args.end + timedelta(days=1))


async def cmd_run_backtest(args: argparse.Namespace, db: CandleDatabase) -> int:
    """Run a backtest. Returns the process exit code."""
    settings = get_backtest_settings()
    time_range = build_time_range(args)
    if time_range is None:
        print("Error: either --years or both --start and --end are required")
        return 1

    try:
        params = GridParams(
            min_price=args.min_price,
            max_price=args.max_price,
            grid_count=args.grids,
            investment=args.investment,
            strategy_type=args.strategy_type,
            leverage=args.leverage,
        )
    except ValidationError as e:
        print(f"Error: invalid grid parameters\n{e}")
        return 1

    symbol = to_exchange_symbol(args.symbol, settings.quote_asset)
    interval = args.interval or settings.default_interval
    start, end = resolve_time_range(time_range)

    print(f"\nGrid backtest: {symbol} {interval}")
    print(f"Period: {start:%Y-%m-%d} → {end - timedelta(days=1):%Y-%m-%d}")

    if args.download:
        print("\nDownloading candles from Binance...")
        client = BinanceRestClient(
            base_url=settings.binance_base_url,
            request_interval=settings.request_interval,
        )
        try:
            count = await CandleDownloader(client, db.pool).sync(
                symbol, interval, start, end
            )
        finally:
            await client.close()
        print(f"  {symbol}: {count:,} candles")

    runner = GridBacktestRunner(
        config=GridBacktestConfig(
            symbol=symbol,
            params=params,
            time_range=time_range,
            interval=interval,
        ),
        candle_source=PostgresCandleSource(db.pool),
    )

    print("\nRunning backtest...")
    try:
        result = await runner.run()
    except NoHistoricalDataError as e:
        print(f"Error: {e}. Download history first (--download).")
        return 1

    ReportFormatter.print_console(result, symbol, params)

    if args.output:
        ReportFormatter.save_json(result, symbol, params, args.output)
    return 0


async def main() -> int:
    args = parse_args()

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    settings = get_backtest_settings()

    db = CandleDatabase(settings.database_url)
    await db.init()

    try:
        return await cmd_run_backtest(args, db)
    finally:
        await db.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
