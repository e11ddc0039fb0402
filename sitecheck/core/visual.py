"""Visual snapshots of a fixed set of pages with animations frozen.

Snapshots are written to disk only; comparing them against a baseline is
left to an external visual-diff service.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

from playwright.async_api import Page, Error as PlaywrightError

from sitecheck.config import HarnessConfig
from sitecheck.models.types import ProgressCallback, VisualSnapshot, emit_progress
from sitecheck.utils.smart_wait import disable_animations, wait_for_load_state_quietly

logger = logging.getLogger(__name__)


async def run_visual_snapshots(
    page: Page,
    config: HarnessConfig,
    on_progress: ProgressCallback | None = None,
) -> list[VisualSnapshot]:
    shots_dir = config.screenshots_dir / "visual"
    shots_dir.mkdir(parents=True, exist_ok=True)
    snapshots = []

    for path, name in config.visual_pages:
        url = urljoin(config.base_url, path)
        snapshot = VisualSnapshot(name=name, url=url)
        target = shots_dir / f"{name}.png"
        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=config.navigation_timeout_ms)
            await wait_for_load_state_quietly(page, "networkidle", config.network_idle_timeout_ms)
            await disable_animations(page)
            await page.screenshot(path=str(target), full_page=True, timeout=config.screenshot_timeout_ms)
            snapshot.screenshot_path = str(target)
        except PlaywrightError as e:
            snapshot.error = str(e)[:300]
            logger.warning("Visual snapshot %s failed: %s", name, e)

        snapshots.append(snapshot)
        emit_progress(on_progress, "snapshot_captured", {"name": name, "url": url, "ok": snapshot.error is None})

    return snapshots
