"""Pydantic models for SEC EDGAR data."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class HistoricalEPSRecord(BaseModel):
    """One reported quarterly EPS figure from a 10-Q filing."""

    fiscal_period: str  # "Q2 2024"
    eps_actual: float
    filing_date: date
    period_end: date | None = None
    concept: str | None = None  # XBRL tag the value came from
