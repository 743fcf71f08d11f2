"""Refresh orchestration."""

from earnings_tracker.refresh.models import BatchResult, RefreshResult
from earnings_tracker.refresh.orchestrator import RefreshOrchestrator

__all__ = [
    "BatchResult",
    "RefreshOrchestrator",
    "RefreshResult",
]
