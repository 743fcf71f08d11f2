"""Custom exceptions for Earnings Tracker."""


class EarningsTrackerError(Exception):
    """Base exception for all Earnings Tracker errors."""

    def __init__(self, message: str, *args: object) -> None:
        self.message = message
        super().__init__(message, *args)


# Provider errors
class ProviderError(EarningsTrackerError):
    """Base error for data providers."""


class BrowserLaunchError(ProviderError):
    """The headless browser could not be started."""


class NavigationTimeoutError(ProviderError):
    """A page navigation timed out."""


# Processing errors
class ProcessingError(EarningsTrackerError):
    """Base error for processing layer."""


class NoEarningsDataError(ProcessingError):
    """No source produced a date, an estimate or a year-ago figure."""


# Storage errors
class StorageError(EarningsTrackerError):
    """Base error for storage layer."""


class DatabaseConnectionError(StorageError):
    """Failed to connect to database."""


class PersistenceError(StorageError):
    """A write to the earnings tables failed."""
