"""Refresh outcome models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RefreshResult:
    """Outcome of refreshing one ticker."""

    success: bool
    message: str


@dataclass
class BatchResult:
    """Outcome of a batch refresh. ``errors`` holds ``"{ticker}: {reason}"`` strings."""

    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False

    def record(self, ticker: str, result: RefreshResult) -> None:
        if result.success:
            self.successful += 1
        else:
            self.failed += 1
            self.errors.append(f"{ticker}: {result.message}")
