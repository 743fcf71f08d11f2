"""Unit tests for Settings validators and env-var loading in config.py."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from earnings_tracker.config import Settings


class TestParseTrackedTickers:
    """Tests for parse_tracked_tickers validator."""

    def test_none_returns_empty_list(self) -> None:
        assert Settings.parse_tracked_tickers(None) == []

    def test_csv_string(self) -> None:
        assert Settings.parse_tracked_tickers("aapl, msft ,nvda") == ["AAPL", "MSFT", "NVDA"]

    def test_json_array_string(self) -> None:
        assert Settings.parse_tracked_tickers('["aapl", "tsla"]') == ["AAPL", "TSLA"]

    def test_list_passthrough_uppercases(self) -> None:
        assert Settings.parse_tracked_tickers(["a", "B"]) == ["A", "B"]


class TestSecUserAgent:
    def test_requires_contact_email(self) -> None:
        with pytest.raises(ValidationError):
            Settings(sec_edgar_user_agent="EarningsTracker")

    def test_accepts_contact_email(self) -> None:
        settings = Settings(sec_edgar_user_agent="  Acme Research ops@acme.test ")
        assert settings.sec_edgar_user_agent == "Acme Research ops@acme.test"


class TestEnvLoading:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("EARNINGS_TRACKER_ENV", raising=False)
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.env == "development"
        assert settings.sec_edgar_min_interval == 0.1
        assert settings.batch_ticker_delay == 3.0
        assert settings.ticker_timeout == 120.0
        assert settings.retry_max_attempts == 2
        assert settings.retry_backoff == 10.0
        assert settings.browser_navigation_timeout == 30.0
        assert settings.redis_url is None

    def test_aliased_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EARNINGS_TRACKER_ENV", "production")
        monkeypatch.setenv("EARNINGS_TRACKER_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("TRACKED_TICKERS", '["aapl", "msft"]')
        monkeypatch.setenv("BATCH_TICKER_DELAY", "5")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.env == "production"
        assert settings.log_level == "DEBUG"
        assert settings.tracked_tickers == ["AAPL", "MSFT"]
        assert settings.batch_ticker_delay == 5.0

    def test_tracked_tickers_csv_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRACKED_TICKERS", "aapl,msft")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.tracked_tickers == ["AAPL", "MSFT"]
