"""Fiscal-quarter arithmetic and source reconciliation."""

from earnings_tracker.processing.fiscal import comparator_quarter, next_quarter, year_ago_quarter
from earnings_tracker.processing.models import Company, MergedEarnings, YearAgoComparator
from earnings_tracker.processing.reconciliation import MERGE_RULES, FieldRule, reconcile

__all__ = [
    "MERGE_RULES",
    "Company",
    "FieldRule",
    "MergedEarnings",
    "YearAgoComparator",
    "comparator_quarter",
    "next_quarter",
    "reconcile",
    "year_ago_quarter",
]
