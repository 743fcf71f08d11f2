"""Data models for companies and reconciled earnings records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field


class Company(BaseModel):
    """A tracked issuer."""

    id: UUID
    ticker: str
    company_name: str | None = None


@dataclass(frozen=True)
class YearAgoComparator:
    """Regulatory year-over-year comparison for the upcoming quarter."""

    fiscal_period: str | None
    year_ago_eps: float | None


class MergedEarnings(BaseModel):
    """The single next-earnings record persisted for a company."""

    ticker: str
    earnings_date: date | None = None
    earnings_date_range: str | None = None
    earnings_time: str | None = None
    market_timing: str | None = None
    eps_estimate: float | None = None
    year_ago_eps: float | None = None
    company_name: str | None = None

    # Which source supplied each populated field
    provenance: dict[str, str] = Field(default_factory=dict)
    year_ago_quarter: str | None = None

    def summary(self) -> str:
        """One-line description used in refresh results."""
        parts = [f"Date={self.earnings_date.isoformat() if self.earnings_date else 'N/A'}"]
        if self.earnings_time or self.market_timing:
            parts.append(f"Time={self.earnings_time or self.market_timing}")
        if self.eps_estimate is not None:
            parts.append(f"Est={self.eps_estimate}")
        if self.year_ago_eps is not None:
            parts.append(f"YearAgo={self.year_ago_eps}")
        return ", ".join(parts)
