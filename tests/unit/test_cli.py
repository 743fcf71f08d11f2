"""Tests for the command-line entry point and runtime wiring."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from earnings_tracker import cli
from earnings_tracker.config import Settings
from earnings_tracker.refresh.models import BatchResult, RefreshResult
from earnings_tracker.runtime import tracker_lifespan


def _patched_lifespan(orchestrator: MagicMock):
    @asynccontextmanager
    async def lifespan(settings):
        yield MagicMock(orchestrator=orchestrator)

    return lifespan


class TestParser:
    def test_refresh(self) -> None:
        args = cli.build_parser().parse_args(["refresh", "aapl"])
        assert args.command == "refresh"
        assert args.ticker == "aapl"

    def test_refresh_all_defaults_to_tracked(self) -> None:
        args = cli.build_parser().parse_args(["refresh-all"])
        assert args.tickers == []

    def test_cleanup_date(self) -> None:
        args = cli.build_parser().parse_args(["cleanup", "--before", "2025-08-02"])
        assert args.before == date(2025, 8, 2)

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestRun:
    async def test_refresh_one(self, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.refresh_one = AsyncMock(
            return_value=RefreshResult(success=True, message="Updated: Date=2025-08-01")
        )
        args = cli.build_parser().parse_args(["refresh", "aapl"])

        with patch.object(cli, "tracker_lifespan", _patched_lifespan(orchestrator)):
            code = await cli.run(args)

        assert code == 0
        assert capsys.readouterr().out.strip() == "AAPL: Updated: Date=2025-08-01"

    async def test_refresh_all_reports_failures(self, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.refresh_batch = AsyncMock(
            return_value=BatchResult(
                total=3, successful=2, failed=1, errors=["TICKER2: No earnings data found"]
            )
        )
        args = cli.build_parser().parse_args(["refresh-all", "TICKER1", "TICKER2", "TICKER3"])

        with patch.object(cli, "tracker_lifespan", _patched_lifespan(orchestrator)):
            code = await cli.run(args)

        assert code == 1
        orchestrator.refresh_batch.assert_awaited_once_with(["TICKER1", "TICKER2", "TICKER3"])
        out = capsys.readouterr().out
        assert "Processed 3: 2 succeeded, 1 failed" in out
        assert "TICKER2: No earnings data found" in out

    async def test_cleanup(self, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.cleanup_past_estimates = AsyncMock(return_value=4)
        args = cli.build_parser().parse_args(["cleanup"])

        with patch.object(cli, "tracker_lifespan", _patched_lifespan(orchestrator)):
            code = await cli.run(args)

        assert code == 0
        orchestrator.cleanup_past_estimates.assert_awaited_once_with(None)
        assert "Deleted 4" in capsys.readouterr().out


class TestTrackerLifespan:
    @pytest.fixture()
    def settings(self) -> Settings:
        return Settings(
            _env_file=None,
            database_url="postgresql://localhost/earnings",
            redis_url="redis://localhost:6379",
            sec_edgar_user_agent="Acme Research ops@acme.test",
        )

    async def test_wires_and_tears_down(self, settings: Settings) -> None:
        db = MagicMock()
        with (
            patch("earnings_tracker.runtime.init_database", AsyncMock(return_value=db)),
            patch("earnings_tracker.runtime.close_database", AsyncMock()) as close_db,
            patch("earnings_tracker.runtime.init_redis", AsyncMock(return_value=MagicMock())),
            patch("earnings_tracker.runtime.close_redis", AsyncMock()) as close_redis,
        ):
            async with tracker_lifespan(settings) as state:
                assert state.db is db
                assert state.redis is not None
                assert state.sec_client is not None

        close_redis.assert_awaited_once()
        close_db.assert_awaited_once()

    async def test_redis_failure_is_non_fatal(self, settings: Settings) -> None:
        with (
            patch("earnings_tracker.runtime.init_database", AsyncMock(return_value=MagicMock())),
            patch("earnings_tracker.runtime.close_database", AsyncMock()) as close_db,
            patch(
                "earnings_tracker.runtime.init_redis",
                AsyncMock(side_effect=ConnectionError("refused")),
            ),
            patch("earnings_tracker.runtime.close_redis", AsyncMock()) as close_redis,
        ):
            async with tracker_lifespan(settings) as state:
                assert state.redis is None

        close_redis.assert_not_awaited()
        close_db.assert_awaited_once()
