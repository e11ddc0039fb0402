"""Cookie-consent dismissal before link extraction.

Consent overlays can cover the header and swallow hover events, so the
crawler clicks through the usual "accept" buttons first. Every selector
is tried independently; a miss is never an error.
"""

from __future__ import annotations

import logging

from playwright.async_api import Page, Error as PlaywrightError

logger = logging.getLogger(__name__)


COOKIE_BUTTON_SELECTORS = [
    'button:has-text("Accept")',
    'button:has-text("I agree")',
    'button:has-text("Agree")',
    'button:has-text("Allow all")',
    'button:has-text("Got it")',
    '[aria-label*="accept" i]',
]


async def dismiss_cookie_banners(
    page: Page,
    selectors: list[str] | None = None,
    visible_timeout_ms: int = 1000,
    click_timeout_ms: int = 2000,
) -> list[str]:
    """Click every visible consent button.

    Returns the selectors that were clicked.
    """
    clicked = []
    for sel in selectors or COOKIE_BUTTON_SELECTORS:
        candidate = page.locator(sel).first
        try:
            if await candidate.is_visible(timeout=visible_timeout_ms):
                await candidate.click(timeout=click_timeout_ms)
                clicked.append(sel)
        except PlaywrightError as e:
            logger.debug("Consent selector %s failed: %s", sel, e)
            continue

    if clicked:
        logger.info("Dismissed consent overlay via %s", ", ".join(clicked))
    return clicked
