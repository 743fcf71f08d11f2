"""Cookie/consent overlay detection and dismissal."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from earnings_tracker.core.constants import (
    CONSENT_ACCEPT_PHRASES,
    CONSENT_ACCEPT_SELECTORS,
    CONSENT_MIN_HEIGHT,
    CONSENT_MIN_WIDTH,
    CONSENT_OVERLAY_SELECTORS,
)
from earnings_tracker.core.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page

logger = get_logger(__name__)

DismissStrategy = Callable[["Page", "ElementHandle"], Awaitable[bool]]

_CLICKABLE = 'button, a, [role="button"], input[type="button"], input[type="submit"]'


async def _is_blocking(element: ElementHandle) -> bool:
    if not await element.is_visible():
        return False
    box = await element.bounding_box()
    return bool(box and box["width"] > CONSENT_MIN_WIDTH and box["height"] > CONSENT_MIN_HEIGHT)


async def find_consent_overlay(page: Page) -> ElementHandle | None:
    """Return the first visible consent element large enough to block the page."""
    for selector in CONSENT_OVERLAY_SELECTORS:
        for element in await page.query_selector_all(selector):
            try:
                if await _is_blocking(element):
                    return element
            except Exception as e:
                logger.debug("Overlay probe failed", selector=selector, error=str(e))
    return None


async def _click_accept_phrase(page: Page, overlay: ElementHandle) -> bool:
    """Click a button whose whole label is a known accept phrase."""
    for element in await page.query_selector_all(_CLICKABLE):
        label = (await element.inner_text()).strip().lower()
        if label in CONSENT_ACCEPT_PHRASES and await element.is_visible():
            await element.click()
            return True
    return False


async def _click_accept_selector(page: Page, overlay: ElementHandle) -> bool:
    for selector in CONSENT_ACCEPT_SELECTORS:
        element = await page.query_selector(selector)
        if element is not None and await element.is_visible():
            await element.click()
            return True
    return False


async def _click_first_in_overlay(page: Page, overlay: ElementHandle) -> bool:
    element = await overlay.query_selector(_CLICKABLE)
    if element is None:
        return False
    await element.click()
    return True


DISMISS_STRATEGIES: tuple[DismissStrategy, ...] = (
    _click_accept_phrase,
    _click_accept_selector,
    _click_first_in_overlay,
)


async def dismiss_consent_overlay(
    page: Page,
    strategies: tuple[DismissStrategy, ...] = DISMISS_STRATEGIES,
    settle: float = 1.0,
) -> bool:
    """Dismiss a blocking consent overlay if one is showing.

    Strategies run in order and stop at the first that clicks something.

    Args:
        page: Page to inspect
        strategies: Ordered dismissal strategies
        settle: Seconds to wait after a successful click

    Returns:
        True if an overlay was found and a dismissal click landed
    """
    overlay = await find_consent_overlay(page)
    if overlay is None:
        return False

    for strategy in strategies:
        try:
            clicked = await strategy(page, overlay)
        except Exception as e:
            logger.debug("Overlay strategy failed", strategy=strategy.__name__, error=str(e))
            continue
        if clicked:
            logger.debug("Consent overlay dismissed", strategy=strategy.__name__)
            if settle > 0:
                await asyncio.sleep(settle)
            return True

    logger.debug("Consent overlay could not be dismissed")
    return False
