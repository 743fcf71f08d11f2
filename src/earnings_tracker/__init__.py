"""Earnings Tracker: earnings-data acquisition and reconciliation pipeline."""

__version__ = "0.1.0"
