"""Merge adapter outputs into one earnings record.

Precedence lives in ``MERGE_RULES``: for every field an ordered list of
source kinds and an optional default. The first source with a non-None
value wins. Secondary sites never contribute a date.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from earnings_tracker.core.constants import DEFAULT_MARKET_TIMING
from earnings_tracker.core.logging import get_logger
from earnings_tracker.processing.models import MergedEarnings

if TYPE_CHECKING:
    from earnings_tracker.processing.models import YearAgoComparator
    from earnings_tracker.providers.sites.base import SourceResult

logger = get_logger(__name__)

PRIMARY = "primary"
SECONDARY = "secondary"
REGULATORY = "regulatory"


@dataclass(frozen=True)
class FieldRule:
    field: str
    sources: tuple[str, ...]
    default: Any = None


MERGE_RULES: tuple[FieldRule, ...] = (
    FieldRule("earnings_date", (PRIMARY,)),
    FieldRule("earnings_date_range", (PRIMARY,)),
    FieldRule("eps_estimate", (PRIMARY,)),
    FieldRule("year_ago_eps", (PRIMARY, REGULATORY)),
    FieldRule("earnings_time", (PRIMARY, SECONDARY)),
    FieldRule("market_timing", (PRIMARY, SECONDARY), default=DEFAULT_MARKET_TIMING),
    FieldRule("company_name", (PRIMARY,)),
)


def _candidates(
    kind: str,
    primary: SourceResult,
    secondaries: Sequence[SourceResult],
    regulatory: YearAgoComparator | None,
) -> list[tuple[str, Any]]:
    if kind == PRIMARY:
        return [(primary.source, primary)]
    if kind == SECONDARY:
        return [(s.source, s) for s in secondaries if s.error is None]
    if kind == REGULATORY:
        return [("sec_edgar", regulatory)] if regulatory is not None else []
    raise ValueError(f"Unknown source kind: {kind}")


def reconcile(
    primary: SourceResult,
    secondaries: Sequence[SourceResult] = (),
    regulatory: YearAgoComparator | None = None,
    rules: Sequence[FieldRule] = MERGE_RULES,
) -> MergedEarnings | None:
    """Merge one ticker's source results.

    Args:
        primary: Result of the primary site adapter
        secondaries: Results of the secondary adapters, in priority order
        regulatory: Year-ago comparator derived from filed quarterly EPS
        rules: Field precedence table

    Returns:
        The merged record, or None when the primary site yielded no date,
        no estimate and no year-ago figure
    """
    if not primary.has_data:
        logger.debug("No usable earnings data", ticker=primary.ticker, error=primary.error)
        return None

    values: dict[str, Any] = {}
    provenance: dict[str, str] = {}
    for rule in rules:
        value = None
        for kind in rule.sources:
            for source_name, candidate in _candidates(kind, primary, secondaries, regulatory):
                value = getattr(candidate, rule.field, None)
                if value is not None:
                    provenance[rule.field] = source_name
                    break
            if value is not None:
                break
        if value is None and rule.default is not None:
            value = rule.default
            provenance[rule.field] = "default"
        values[rule.field] = value

    return MergedEarnings(
        ticker=primary.ticker,
        provenance=provenance,
        year_ago_quarter=regulatory.fiscal_period if regulatory is not None else None,
        **values,
    )
