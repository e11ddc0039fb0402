"""Reveal navigation hidden behind dropdowns and hamburger menus.

The link extractor only sees anchors that are attached to the DOM, so
before re-extracting a section we hover (and for button-like triggers,
click) the section's menu entry. Each strategy is an ordered descriptor
tried in isolation: a strategy that cannot find or act on its element is
skipped, and running out of strategies is a normal outcome, not an error.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from playwright.async_api import Page, Locator, Error as PlaywrightError

from sitecheck.utils.smart_wait import wait_for_load_state_quietly

logger = logging.getLogger(__name__)


VISIBLE_TIMEOUT_MS = 1000
ACTION_TIMEOUT_MS = 2000
MOBILE_CLICK_TIMEOUT_MS = 3000
SETTLE_TIMEOUT_MS = 3000


class Interaction(str, Enum):
    HOVER = "hover"
    CLICK = "click"
    HOVER_THEN_CLICK_BUTTON = "hover_then_click_button"


@dataclass(frozen=True)
class ProbeStrategy:
    """How to find a menu trigger and what to do with it.

    kind "css" treats target as a selector template with a {name}
    placeholder; kind "role" treats target as an ARIA role matched by a
    case-insensitive accessible-name regex.
    """

    kind: str
    target: str
    interaction: Interaction

    def locate(self, page: Page, name: str) -> Locator:
        if self.kind == "role":
            pattern = re.compile(re.escape(name), re.IGNORECASE)
            return page.get_by_role(self.target, name=pattern).first
        quoted = name.replace("\\", "\\\\").replace('"', '\\"')
        return page.locator(self.target.format(name=quoted)).first

    def describe(self, name: str) -> str:
        if self.kind == "role":
            return f"role={self.target}[name=/{name}/i]"
        return self.target.format(name=name)


SECTION_MENU_STRATEGIES = [
    ProbeStrategy("css", 'header a:has-text("{name}")', Interaction.HOVER_THEN_CLICK_BUTTON),
    ProbeStrategy("css", 'header button:has-text("{name}")', Interaction.HOVER_THEN_CLICK_BUTTON),
    ProbeStrategy("css", 'nav a:has-text("{name}")', Interaction.HOVER_THEN_CLICK_BUTTON),
    ProbeStrategy("css", 'nav button:has-text("{name}")', Interaction.HOVER_THEN_CLICK_BUTTON),
    ProbeStrategy("css", '[role="button"]:has-text("{name}")', Interaction.HOVER_THEN_CLICK_BUTTON),
    ProbeStrategy("css", 'a:has-text("{name}")', Interaction.HOVER_THEN_CLICK_BUTTON),
    ProbeStrategy("role", "link", Interaction.HOVER),
    ProbeStrategy("role", "button", Interaction.CLICK),
]

HAMBURGER_SELECTORS = [
    'button[aria-label*="menu" i]',
    'button[aria-controls*="menu" i]',
    'button[class*="menu" i]',
    '[data-testid*="menu" i]',
    'button:has-text("Menu")',
    '[role="button"][aria-label*="menu" i]',
]

VISIBLE_MENU_ITEMS = 'nav a:visible, [role="menu"] a:visible, header a:visible'

_IS_BUTTON_LIKE_JS = """(el) => {
    const tag = el.tagName.toLowerCase();
    return tag === 'button' || (tag !== 'a' && el.getAttribute('role') === 'button');
}"""


@dataclass
class ProbeOutcome:
    target: str
    opened: bool
    strategy: str | None = None
    clicked: bool = False

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "opened": self.opened,
            "strategy": self.strategy,
            "clicked": self.clicked,
        }


@dataclass
class MenuProbeResult:
    menu_opened: bool
    notes: str


async def _act(candidate: Locator, interaction: Interaction) -> bool:
    """Perform the interaction. Returns True if a click happened."""
    await candidate.scroll_into_view_if_needed(timeout=ACTION_TIMEOUT_MS)
    if interaction is Interaction.CLICK:
        await candidate.click(timeout=ACTION_TIMEOUT_MS)
        return True

    await candidate.hover(timeout=ACTION_TIMEOUT_MS)
    if interaction is Interaction.HOVER_THEN_CLICK_BUTTON:
        if await candidate.evaluate(_IS_BUTTON_LIKE_JS):
            await candidate.click(timeout=ACTION_TIMEOUT_MS)
            return True
    return False


async def open_section_menu(
    page: Page,
    section_name: str,
    strategies: list[ProbeStrategy] | None = None,
) -> ProbeOutcome:
    """Hover/click the first visible trigger for section_name.

    Never raises on a missing or uncooperative element; the returned
    outcome says which strategy, if any, was acted on.
    """
    for strategy in strategies or SECTION_MENU_STRATEGIES:
        label = strategy.describe(section_name)
        candidate = strategy.locate(page, section_name)
        try:
            if not await candidate.is_visible(timeout=VISIBLE_TIMEOUT_MS):
                continue
            clicked = await _act(candidate, strategy.interaction)
        except PlaywrightError as e:
            logger.debug("Menu strategy %s failed for %r: %s", label, section_name, e)
            continue

        # A timeout here just means the menu opened in place.
        await wait_for_load_state_quietly(page, "domcontentloaded", SETTLE_TIMEOUT_MS)
        return ProbeOutcome(target=section_name, opened=True, strategy=label, clicked=clicked)

    logger.debug("No menu trigger found for %r", section_name)
    return ProbeOutcome(target=section_name, opened=False)


async def open_mobile_menu(page: Page, selectors: list[str] | None = None) -> MenuProbeResult:
    """Click the first visible hamburger button and check that links appear."""
    for sel in selectors or HAMBURGER_SELECTORS:
        candidate = page.locator(sel).first
        try:
            if not await candidate.is_visible(timeout=VISIBLE_TIMEOUT_MS):
                continue
            await candidate.click(timeout=MOBILE_CLICK_TIMEOUT_MS)
            count = await page.locator(VISIBLE_MENU_ITEMS).count()
        except PlaywrightError as e:
            logger.debug("Hamburger selector %s failed: %s", sel, e)
            continue

        if count > 0:
            return MenuProbeResult(menu_opened=True, notes=f"Menu opened; visible items: {count}")
        return MenuProbeResult(menu_opened=False, notes="Hamburger detected but no menu items became visible")

    return MenuProbeResult(menu_opened=False, notes="No hamburger menu detected on this page")
