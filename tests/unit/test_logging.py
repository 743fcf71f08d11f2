"""Tests for logging setup and per-ticker log context."""

from __future__ import annotations

import logging

import structlog

from earnings_tracker.config import Settings
from earnings_tracker.core.logging import NOISY_LOGGERS, bind_ticker, setup_logging


def test_bind_ticker_scopes_context() -> None:
    structlog.contextvars.clear_contextvars()

    with bind_ticker("ACME"):
        assert structlog.contextvars.get_contextvars() == {"ticker": "ACME"}

    assert structlog.contextvars.get_contextvars() == {}


def test_setup_quiets_third_party_loggers() -> None:
    settings = Settings(_env_file=None, EARNINGS_TRACKER_ENV="production")  # type: ignore[call-arg]

    setup_logging(settings)

    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
    assert logging.getLogger().level == logging.INFO


def test_debug_level_still_quiets_third_party() -> None:
    settings = Settings(_env_file=None, EARNINGS_TRACKER_LOG_LEVEL="DEBUG")  # type: ignore[call-arg]

    setup_logging(settings)

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger().level == logging.DEBUG
