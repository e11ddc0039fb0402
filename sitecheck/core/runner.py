"""Harness runner: owns the browser and runs the selected checks in order.

URL verification runs first so that the mobile check can reuse the
discovery cache it writes. Each check gets its own browser context.
"""

from __future__ import annotations

import logging
from datetime import datetime

from playwright.async_api import async_playwright, Browser, BrowserContext, Playwright

from sitecheck.config import ALL_CHECKS, HarnessConfig
from sitecheck.core.mobile import run_mobile_check
from sitecheck.core.verifier import run_url_verification
from sitecheck.core.visual import run_visual_snapshots
from sitecheck.models.types import CrawlAbortedError, ProgressCallback, RunResult, emit_progress

logger = logging.getLogger(__name__)


DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class SiteCheckRunner:
    """End-to-end QA run against config.base_url."""

    def __init__(
        self,
        config: HarnessConfig,
        checks: list[str] | None = None,
        on_progress: ProgressCallback | None = None,
        use_cache: bool = False,
    ):
        self.config = config
        self.checks = [c for c in ALL_CHECKS if c in (checks or ALL_CHECKS)]
        self.use_cache = use_cache
        self.result = RunResult(url=config.base_url, checks=list(self.checks))
        self._on_progress = on_progress

    async def run(self) -> RunResult:
        self.result.started_at = datetime.now()
        self.config.reports_dir.mkdir(parents=True, exist_ok=True)

        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=self.config.headless)
            try:
                for check in self.checks:
                    await self._run_check(pw, browser, check)
            finally:
                await browser.close()

        self.result.completed_at = datetime.now()
        self._emit("run_complete", {
            "url": self.config.base_url,
            "failures": self.result.failures,
            "errors": len(self.result.errors),
        })
        return self.result

    async def _run_check(self, pw: Playwright, browser: Browser, check: str):
        self._emit("check_started", {"check": check})
        ctx = await self._new_context(pw, browser, mobile=(check == "mobile"))
        try:
            page = await ctx.new_page()
            if check == "urls":
                outcome = await run_url_verification(page, self.config, self._on_progress, use_cache=self.use_cache)
                self.result.discovery = outcome.discovery
                self.result.pages_checked = outcome.pages_checked
                self.result.footer_links_checked = outcome.footer_links_checked
            elif check == "mobile":
                outcome = await run_mobile_check(page, self.config, self._on_progress, use_cache=True)
                if self.result.discovery is None:
                    self.result.discovery = outcome.discovery
                self.result.mobile_checks = outcome.mobile_checks
            elif check == "visual":
                self.result.visual_snapshots = await run_visual_snapshots(page, self.config, self._on_progress)
        except CrawlAbortedError as e:
            logger.error("%s check aborted: %s", check, e)
            self.result.errors.append(f"{check}: {e}")
            self._emit("check_failed", {"check": check, "error": str(e)})
        finally:
            await ctx.close()

    async def _new_context(self, pw: Playwright, browser: Browser, mobile: bool) -> BrowserContext:
        if mobile:
            device = pw.devices[self.config.mobile_device]
            ctx = await browser.new_context(**device)
        else:
            ctx = await browser.new_context(
                viewport=self.config.desktop_viewport,
                user_agent=DESKTOP_USER_AGENT,
            )
        ctx.set_default_timeout(self.config.action_timeout_ms)
        ctx.set_default_navigation_timeout(self.config.navigation_timeout_ms)
        return ctx

    def _emit(self, event_type: str, data: dict):
        emit_progress(self._on_progress, event_type, data)
