"""Bounded waits that never end a crawl.

Deferred navigation and menus render late on marketing sites, so the
harness waits for load-state signals with short timeouts and treats a
timeout as "good enough" instead of an error.
"""

from __future__ import annotations

import logging

from playwright.async_api import Page, Error as PlaywrightError

logger = logging.getLogger(__name__)


_NO_ANIMATIONS_CSS = """
*,
*::before,
*::after {
    animation-duration: 0s !important;
    transition-duration: 0s !important;
}
"""


async def wait_for_load_state_quietly(page: Page, state: str = "networkidle", timeout_ms: int = 10000) -> bool:
    """Wait for a load state. Returns False if it did not arrive in time."""
    try:
        await page.wait_for_load_state(state, timeout=timeout_ms)
        return True
    except PlaywrightError as e:
        logger.debug("Load state %r not reached within %dms: %s", state, timeout_ms, e)
        return False


async def disable_animations(page: Page):
    """Freeze CSS animations and transitions so screenshots are stable."""
    try:
        await page.add_style_tag(content=_NO_ANIMATIONS_CSS)
    except PlaywrightError as e:
        logger.debug("Could not inject animation-freezing styles: %s", e)
