"""Tests for merging source results into one earnings record."""

from __future__ import annotations

from datetime import date

from earnings_tracker.processing.models import YearAgoComparator
from earnings_tracker.processing.reconciliation import FieldRule, reconcile
from earnings_tracker.providers.sites.base import SourceResult


def _primary(**kwargs) -> SourceResult:
    return SourceResult(source="yahoo", ticker="ACME", **kwargs)


def _secondary(source: str, **kwargs) -> SourceResult:
    return SourceResult(source=source, ticker="ACME", **kwargs)


class TestReconcile:
    def test_no_primary_data_returns_none(self) -> None:
        secondary = _secondary("nasdaq", earnings_date=date(2025, 8, 1), market_timing="after")
        assert reconcile(_primary(), [secondary]) is None

    def test_failed_primary_returns_none(self) -> None:
        failed = SourceResult.failed("yahoo", "ACME", "Navigation timeout of 30000 ms exceeded")
        assert reconcile(failed) is None

    def test_primary_date_beats_secondary_date(self) -> None:
        primary = _primary(earnings_date=date(2025, 8, 1))
        secondary = _secondary(
            "earningswhispers",
            earnings_date=date(2025, 8, 5),
            earnings_time="4:05 PM ET",
            market_timing="after",
        )

        merged = reconcile(primary, [secondary])

        assert merged is not None
        assert merged.earnings_date == date(2025, 8, 1)
        assert merged.earnings_time == "4:05 PM ET"
        assert merged.provenance["earnings_date"] == "yahoo"
        assert merged.provenance["earnings_time"] == "earningswhispers"

    def test_secondary_date_never_used(self) -> None:
        primary = _primary(eps_estimate=1.25)
        secondary = _secondary("nasdaq", earnings_date=date(2025, 8, 5))

        merged = reconcile(primary, [secondary])

        assert merged is not None
        assert merged.earnings_date is None

    def test_primary_timing_wins(self) -> None:
        primary = _primary(earnings_date=date(2025, 8, 1), market_timing="before")
        secondary = _secondary("nasdaq", market_timing="after")

        merged = reconcile(primary, [secondary])

        assert merged is not None
        assert merged.market_timing == "before"

    def test_first_secondary_with_value_wins(self) -> None:
        primary = _primary(earnings_date=date(2025, 8, 1))
        first = _secondary("earningswhispers")
        second = _secondary("nasdaq", market_timing="before")
        third = _secondary("marketwatch", market_timing="after")

        merged = reconcile(primary, [first, second, third])

        assert merged is not None
        assert merged.market_timing == "before"
        assert merged.provenance["market_timing"] == "nasdaq"

    def test_failed_secondaries_ignored(self) -> None:
        primary = _primary(earnings_date=date(2025, 8, 1))
        broken = _secondary("earningswhispers", market_timing="before", error="boom")

        merged = reconcile(primary, [broken])

        assert merged is not None
        assert merged.market_timing == "after"

    def test_default_timing_is_after(self) -> None:
        merged = reconcile(_primary(earnings_date=date(2025, 8, 1)))

        assert merged is not None
        assert merged.market_timing == "after"
        assert merged.earnings_time is None
        assert merged.provenance["market_timing"] == "default"

    def test_year_ago_falls_back_to_regulatory(self) -> None:
        primary = _primary(earnings_date=date(2025, 8, 1), eps_estimate=1.25)
        comparator = YearAgoComparator(fiscal_period="Q2 2024", year_ago_eps=1.10)

        merged = reconcile(primary, regulatory=comparator)

        assert merged is not None
        assert merged.year_ago_eps == 1.10
        assert merged.year_ago_quarter == "Q2 2024"
        assert merged.provenance["year_ago_eps"] == "sec_edgar"

    def test_primary_year_ago_beats_regulatory(self) -> None:
        primary = _primary(earnings_date=date(2025, 8, 1), year_ago_eps=1.08)
        comparator = YearAgoComparator(fiscal_period="Q2 2024", year_ago_eps=1.10)

        merged = reconcile(primary, regulatory=comparator)

        assert merged is not None
        assert merged.year_ago_eps == 1.08
        assert merged.provenance["year_ago_eps"] == "yahoo"

    def test_regulatory_without_eps(self) -> None:
        primary = _primary(earnings_date=date(2025, 8, 1))
        comparator = YearAgoComparator(fiscal_period="Q2 2024", year_ago_eps=None)

        merged = reconcile(primary, regulatory=comparator)

        assert merged is not None
        assert merged.year_ago_eps is None
        assert "year_ago_eps" not in merged.provenance

    def test_custom_rules(self) -> None:
        primary = _primary(earnings_date=date(2025, 8, 1))
        secondary = _secondary("nasdaq", market_timing="before")
        rules = (FieldRule("earnings_date", ("primary",)), FieldRule("market_timing", ("primary",)))

        merged = reconcile(primary, [secondary], rules=rules)

        assert merged is not None
        assert merged.market_timing is None

    def test_summary(self) -> None:
        primary = _primary(
            earnings_date=date(2025, 8, 1),
            earnings_date_range="Aug 1, 2025 - Aug 5, 2025",
            eps_estimate=1.25,
        )
        comparator = YearAgoComparator(fiscal_period="Q2 2024", year_ago_eps=1.1)

        merged = reconcile(primary, regulatory=comparator)

        assert merged is not None
        assert merged.summary() == "Date=2025-08-01, Time=after, Est=1.25, YearAgo=1.1"
