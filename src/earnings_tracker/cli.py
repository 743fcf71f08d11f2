"""CLI entry point for Earnings Tracker."""

import argparse
import asyncio
import sys
from datetime import date

from earnings_tracker.config import get_settings
from earnings_tracker.core.exceptions import EarningsTrackerError
from earnings_tracker.core.logging import get_logger, setup_logging
from earnings_tracker.runtime import tracker_lifespan

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="earnings-tracker",
        description="Fetch and reconcile upcoming earnings data",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    refresh = subparsers.add_parser("refresh", help="Refresh one ticker")
    refresh.add_argument("ticker", help="Stock ticker symbol")

    refresh_all = subparsers.add_parser("refresh-all", help="Refresh tracked tickers in sequence")
    refresh_all.add_argument(
        "tickers",
        nargs="*",
        help="Tickers to refresh (default: every tracked company)",
    )

    cleanup = subparsers.add_parser("cleanup", help="Delete estimates for past earnings dates")
    cleanup.add_argument(
        "--before",
        type=date.fromisoformat,
        default=None,
        help="Cutoff date, YYYY-MM-DD (default: today)",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    async with tracker_lifespan(settings) as state:
        if args.command == "refresh":
            result = await state.orchestrator.refresh_one(args.ticker)
            print(f"{args.ticker.upper()}: {result.message}")
            return 0 if result.success else 1

        if args.command == "refresh-all":
            batch = await state.orchestrator.refresh_batch(args.tickers or None)
            print(f"Processed {batch.total}: {batch.successful} succeeded, {batch.failed} failed")
            for error in batch.errors:
                print(f"  {error}")
            return 0 if batch.failed == 0 else 1

        if args.command == "cleanup":
            deleted = await state.orchestrator.cleanup_past_estimates(args.before)
            print(f"Deleted {deleted} past earnings estimate(s)")
            return 0

    return 2


def main() -> None:
    args = build_parser().parse_args()
    setup_logging(get_settings())
    try:
        code = asyncio.run(run(args))
    except EarningsTrackerError as e:
        logger.error("Run aborted", error=e.message)
        code = 1
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
