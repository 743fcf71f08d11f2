"""Fallback wait chain for late-rendering content regions."""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING, Any

from earnings_tracker.core.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = get_logger(__name__)

_CONTENT_PATTERN = re.compile(
    r"\d{1,2}:\d{2}\s*(AM|PM)|\d{1,2}/\d{1,2}/\d{2,4}|[A-Z][a-z]{2,8}\.? \d{1,2},? \d{4}",
    re.IGNORECASE,
)

_REGION_STATE_JS = """
(selector) => {
    const el = document.querySelector(selector);
    if (!el) return null;
    return {text: (el.innerText || '').trim(), children: el.children.length};
}
"""

_REGION_READY_JS = """
(selector) => {
    const el = document.querySelector(selector);
    if (!el) return false;
    return el.querySelectorAll('span').length > 0 || (el.innerText || '').trim().length > 10;
}
"""


def region_has_content(state: dict[str, Any] | None) -> bool:
    """True when a region's text looks like a date/time or it has real children."""
    if not state:
        return False
    text = str(state.get("text") or "")
    return bool(_CONTENT_PATTERN.search(text)) or int(state.get("children") or 0) > 2


async def _region_state(page: Page, selector: str) -> dict[str, Any] | None:
    result: dict[str, Any] | None = await page.evaluate(_REGION_STATE_JS, selector)
    return result


async def wait_for_content(
    page: Page,
    selector: str,
    trigger_selectors: tuple[str, ...] = (),
    *,
    selector_timeout: float = 5.0,
    poll_timeout: float = 10.0,
    checks: int = 5,
    check_interval: float = 2.0,
) -> bool:
    """Wait for a content region using progressively more forceful steps.

    1. Wait for the selector to attach, then check it for content.
    2. Poll in-page until the region has spans or non-trivial text.
    3. Click load triggers and re-check after each.
    4. Re-check a fixed number of times with a pause in between.

    Returns:
        True once the region holds date/time-like text or several children
    """
    try:
        await page.wait_for_selector(selector, state="attached", timeout=selector_timeout * 1000)
        if region_has_content(await _region_state(page, selector)):
            return True
    except Exception as e:
        logger.debug("Content selector wait failed", selector=selector, error=str(e))

    try:
        await page.wait_for_function(_REGION_READY_JS, arg=selector, timeout=poll_timeout * 1000)
        if region_has_content(await _region_state(page, selector)):
            return True
    except Exception as e:
        logger.debug("Content poll failed", selector=selector, error=str(e))

    for trigger in trigger_selectors:
        try:
            element = await page.query_selector(trigger)
            if element is None:
                continue
            await element.click()
            await asyncio.sleep(check_interval)
            if region_has_content(await _region_state(page, selector)):
                return True
        except Exception as e:
            logger.debug("Load trigger failed", trigger=trigger, error=str(e))

    for attempt in range(checks):
        try:
            if region_has_content(await _region_state(page, selector)):
                return True
        except Exception as e:
            logger.debug("Content re-check failed", attempt=attempt + 1, error=str(e))
        if attempt < checks - 1:
            await asyncio.sleep(check_interval)

    logger.debug("Content region never populated", selector=selector)
    return False
