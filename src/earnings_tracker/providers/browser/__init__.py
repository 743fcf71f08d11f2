"""Headless-browser session and page helpers (Playwright)."""

from earnings_tracker.providers.browser.overlay import dismiss_consent_overlay
from earnings_tracker.providers.browser.session import BrowserSession
from earnings_tracker.providers.browser.waits import wait_for_content

__all__ = [
    "BrowserSession",
    "dismiss_consent_overlay",
    "wait_for_content",
]
