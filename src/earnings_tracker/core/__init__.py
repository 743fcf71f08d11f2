"""Core utilities: logging, exceptions, constants."""

from earnings_tracker.core.exceptions import EarningsTrackerError
from earnings_tracker.core.logging import bind_ticker, get_logger, setup_logging

__all__ = [
    "EarningsTrackerError",
    "bind_ticker",
    "get_logger",
    "setup_logging",
]
