"""URL verification: every discovered page loads, is not an error page and
has real content; every footer link on those pages answers 200-399.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from playwright.async_api import Page, Error as PlaywrightError

from sitecheck.config import HarnessConfig
from sitecheck.core.discovery import load_or_discover
from sitecheck.core.extractor import extract_footer_links
from sitecheck.core.report import write_url_verification_report
from sitecheck.core.urls import to_slug
from sitecheck.detectors.page_health import ALL_PASSED, PageHealthDetector, is_ok_status, status_failure
from sitecheck.models.types import (
    CheckResult, DiscoveredUrls, FooterLink, FooterLinkCheck, ProgressCallback, UrlPageCheck, emit_progress,
)

logger = logging.getLogger(__name__)


@dataclass
class FooterStatus:
    status: int | None
    final_url: str
    result: CheckResult
    reason: str


@dataclass
class UrlVerificationOutcome:
    discovery: DiscoveredUrls
    pages_checked: list[UrlPageCheck] = field(default_factory=list)
    footer_links_checked: list[FooterLinkCheck] = field(default_factory=list)


class UrlVerifier:

    def __init__(self, config: HarnessConfig, on_progress: ProgressCallback | None = None, use_cache: bool = False):
        self.config = config
        self.use_cache = use_cache
        self._progress = on_progress
        self._health = PageHealthDetector(check_final_url=True)
        self._footer_cache: dict[str, FooterStatus] = {}

    async def run(self, page: Page) -> UrlVerificationOutcome:
        cfg = self.config
        discovery = await load_or_discover(
            page, cfg.base_url, cfg.discovery_cache,
            use_cache=self.use_cache,
            on_progress=self._progress,
            navigation_timeout_ms=cfg.navigation_timeout_ms,
            network_idle_timeout_ms=cfg.network_idle_timeout_ms,
        )
        outcome = UrlVerificationOutcome(discovery=discovery)
        shots_dir = cfg.screenshots_dir / "url"

        for i, url in enumerate(discovery.nav_urls, 1):
            self._emit("visiting_page", {"url": url, "page_number": i, "total": len(discovery.nav_urls)})
            status = None
            final_url = url
            try:
                response = await page.goto(url, wait_until="domcontentloaded", timeout=cfg.page_timeout_ms)
                status = response.status if response else None
                final_url = page.url
                check = await self._health.check(page, url, status, final_url)
            except PlaywrightError as e:
                check = UrlPageCheck(
                    url=url,
                    status=status,
                    final_url=final_url,
                    result=CheckResult.FAIL,
                    reason=f"Navigation failed: {str(e)[:300]}",
                )
                outcome.pages_checked.append(check)
                self._emit("page_checked", {"url": url, "result": check.result.value, "reason": check.reason})
                continue

            outcome.pages_checked.append(check)
            self._emit("page_checked", {"url": url, "result": check.result.value, "reason": check.reason})
            await self._screenshot(page, shots_dir / f"{to_slug(final_url)}.png")

            try:
                footer_links = await extract_footer_links(page, final_url, cfg.base_url)
            except PlaywrightError as e:
                logger.warning("Footer extraction failed on %s: %s", final_url, e)
                continue
            for link in footer_links:
                outcome.footer_links_checked.append(await self._check_footer_link(page, url, link))

        write_url_verification_report(
            cfg.url_report_html, cfg.url_report_json,
            outcome.pages_checked, outcome.footer_links_checked,
        )
        await self._screenshot(page, shots_dir / "url-verification-final.png")
        self._emit("report_written", {"html": str(cfg.url_report_html), "json": str(cfg.url_report_json)})
        return outcome

    async def _check_footer_link(self, page: Page, source_page_url: str, link: FooterLink) -> FooterLinkCheck:
        """Request link.href once per run; later pages reuse the first answer."""
        cached = self._footer_cache.get(link.href)
        if cached is None:
            cached = await self._request_status(page, link.href)
            self._footer_cache[link.href] = cached

        return FooterLinkCheck(
            source_page_url=source_page_url,
            link_text=link.link_text,
            href=link.href,
            status=cached.status,
            final_url=cached.final_url,
            result=cached.result,
            reason=cached.reason,
            link_source=link.source,
        )

    async def _request_status(self, page: Page, href: str) -> FooterStatus:
        try:
            response = await page.context.request.get(href, timeout=self.config.footer_request_timeout_ms)
        except PlaywrightError as e:
            return FooterStatus(None, href, CheckResult.FAIL, f"Footer link request failed: {str(e)[:300]}")

        status, final_url = response.status, response.url
        await response.dispose()
        if not is_ok_status(status):
            return FooterStatus(status, final_url, CheckResult.FAIL, status_failure(status))
        return FooterStatus(status, final_url, CheckResult.PASS, ALL_PASSED)

    async def _screenshot(self, page: Page, path: Path):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await page.screenshot(
                path=str(path), full_page=True,
                timeout=self.config.screenshot_timeout_ms, animations="disabled",
            )
        except PlaywrightError as e:
            logger.warning("Screenshot %s failed: %s", path.name, e)

    def _emit(self, event_type: str, data: dict):
        emit_progress(self._progress, event_type, data)


async def run_url_verification(
    page: Page,
    config: HarnessConfig,
    on_progress: ProgressCallback | None = None,
    use_cache: bool = False,
) -> UrlVerificationOutcome:
    return await UrlVerifier(config, on_progress=on_progress, use_cache=use_cache).run(page)
