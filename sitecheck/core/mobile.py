"""Mobile responsiveness: layout overflow and hamburger menu per page."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from playwright.async_api import Page, Error as PlaywrightError

from sitecheck.config import HarnessConfig
from sitecheck.core.discovery import load_or_discover
from sitecheck.core.report import write_mobile_responsive_report
from sitecheck.core.urls import to_slug
from sitecheck.detectors.page_health import ALL_PASSED, PageHealthDetector
from sitecheck.detectors.responsive import collect_layout_metrics
from sitecheck.models.types import CheckResult, DiscoveredUrls, MobileCheck, ProgressCallback, emit_progress
from sitecheck.utils.menu_prober import open_mobile_menu

logger = logging.getLogger(__name__)


@dataclass
class MobileCheckOutcome:
    discovery: DiscoveredUrls
    mobile_checks: list[MobileCheck] = field(default_factory=list)


async def run_mobile_check(
    page: Page,
    config: HarnessConfig,
    on_progress: ProgressCallback | None = None,
    use_cache: bool = True,
) -> MobileCheckOutcome:
    """Check every discovered URL on the mobile page the caller set up.

    Reuses the discovery cache when present, since desktop discovery on the
    same site is normally fresher than a crawl through a hamburger menu.
    """
    discovery = await load_or_discover(
        page, config.base_url, config.discovery_cache,
        use_cache=use_cache,
        on_progress=on_progress,
        navigation_timeout_ms=config.navigation_timeout_ms,
        network_idle_timeout_ms=config.network_idle_timeout_ms,
    )
    outcome = MobileCheckOutcome(discovery=discovery)
    health = PageHealthDetector(check_final_url=False)
    shots_dir = config.screenshots_dir / "mobile"
    shots_dir.mkdir(parents=True, exist_ok=True)

    for i, url in enumerate(discovery.nav_urls, 1):
        emit_progress(on_progress, "visiting_page", {"url": url, "page_number": i, "total": len(discovery.nav_urls), "viewport": "mobile"})

        check = MobileCheck(url=url, final_url=url)
        screenshot = shots_dir / f"{to_slug(url)}.png"
        try:
            response = await page.goto(url, wait_until="domcontentloaded", timeout=config.page_timeout_ms)
            check.status = response.status if response else None
            check.final_url = page.url

            failures = await health.detect(page, check.status, check.final_url)

            layout = await collect_layout_metrics(page)
            check.viewport_width = layout.viewport_width
            check.scroll_width = layout.scroll_width
            check.has_horizontal_scroll = layout.has_horizontal_scroll
            check.offscreen_elements_count = layout.offscreen_elements_count
            failures.extend(layout.failures())

            menu = await open_mobile_menu(page)
            check.menu_opened = menu.menu_opened
            check.notes = menu.notes
            if menu.notes.startswith("Hamburger detected") and not menu.menu_opened:
                failures.append("Hamburger menu not usable after interaction")

            check.result = CheckResult.FAIL if failures else CheckResult.PASS
            check.reason = "; ".join(failures) if failures else ALL_PASSED
        except PlaywrightError as e:
            check.result = CheckResult.FAIL
            check.reason = f"Navigation failed: {str(e)[:300]}"

        if await _screenshot_with_fallback(page, screenshot, config.screenshot_timeout_ms):
            check.screenshot_path = f"screenshots/mobile/{screenshot.name}"
        outcome.mobile_checks.append(check)
        emit_progress(on_progress, "page_checked", {"url": url, "result": check.result.value, "reason": check.reason, "viewport": "mobile"})

    write_mobile_responsive_report(config.mobile_report_html, config.mobile_report_json, outcome.mobile_checks)
    emit_progress(on_progress, "report_written", {"html": str(config.mobile_report_html), "json": str(config.mobile_report_json)})
    return outcome


async def _screenshot_with_fallback(page: Page, path, timeout_ms: int) -> bool:
    """Full-page screenshot, falling back to the viewport on very long pages."""
    try:
        await page.screenshot(path=str(path), full_page=True, timeout=timeout_ms, animations="disabled")
        return True
    except PlaywrightError as e:
        logger.debug("Full-page screenshot of %s failed, retrying viewport only: %s", path.name, e)
    try:
        await page.screenshot(path=str(path), full_page=False, timeout=10000, animations="disabled")
        return True
    except PlaywrightError as e:
        logger.warning("Screenshot %s failed: %s", path.name, e)
        return False
