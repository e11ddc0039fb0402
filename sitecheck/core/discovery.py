"""Navigation discovery: one crawl of the root page into DiscoveredUrls.

Sequence:
- Load the root page, let deferred navigation render, clear consent overlays
- Seed the URL set from header/nav links
- Collect account links (login/signup/forgot password) by label
- Bucket every internal link on the page by section as a fallback source
- For each section, probe its menu, re-extract header links and keep the
  ones that classify to that section (capped per section)

Browser failures abort the crawl with CrawlAbortedError; menu and consent
misses are absorbed by the prober and the popup guard.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from playwright.async_api import Page, Error as PlaywrightError

from sitecheck.core.cache import load_cached_discovered_urls, merge_and_normalize_urls, save_discovered_urls
from sitecheck.core.extractor import collect_all_internal_links, collect_header_links
from sitecheck.core.urls import SECTION_ORDER, classify_section, internal_url
from sitecheck.models.types import (
    CrawlAbortedError, DiscoveredUrls, LinkRow, MAX_LINKS_PER_SECTION, ProgressCallback, Section, emit_progress,
)
from sitecheck.utils.menu_prober import VISIBLE_TIMEOUT_MS, open_section_menu
from sitecheck.utils.popup_guard import dismiss_cookie_banners
from sitecheck.utils.smart_wait import wait_for_load_state_quietly

logger = logging.getLogger(__name__)


DIRECT_LINK_LABELS = ["Login", "Signup", "Sign up", "Forgot Password", "Forgot"]
DIRECT_LINK_KEYWORDS = ["login", "sign up", "signup", "forgot"]


class NavDiscoverer:
    """Drives one page through a full navigation discovery pass."""

    def __init__(
        self,
        base_url: str,
        on_progress: ProgressCallback | None = None,
        navigation_timeout_ms: int = 45000,
        network_idle_timeout_ms: int = 10000,
        sections: list[Section] | None = None,
        max_links_per_section: int = MAX_LINKS_PER_SECTION,
    ):
        self.base_url = base_url
        self.navigation_timeout_ms = navigation_timeout_ms
        self.network_idle_timeout_ms = network_idle_timeout_ms
        self.sections = sections or SECTION_ORDER
        self.max_links_per_section = max_links_per_section
        self._progress = on_progress

    async def discover(self, page: Page) -> DiscoveredUrls:
        self._emit("discovery_started", {"url": self.base_url})
        try:
            result = await self._crawl(page)
        except PlaywrightError as e:
            self._emit("discovery_failed", {"url": self.base_url, "error": str(e)[:300]})
            raise CrawlAbortedError(self.base_url, str(e)[:300]) from e

        self._emit("discovery_complete", {
            "url": self.base_url,
            "nav_urls": len(result.nav_urls),
            "direct_urls": len(result.direct_urls),
            "sections": {name: len(urls) for name, urls in result.section_urls.items()},
        })
        return result

    async def _crawl(self, page: Page) -> DiscoveredUrls:
        nav_urls: set[str] = set()
        section_urls: dict[str, list[str]] = {}

        await page.goto(self.base_url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)
        await wait_for_load_state_quietly(page, "networkidle", self.network_idle_timeout_ms)
        dismissed = await dismiss_cookie_banners(page)
        if dismissed:
            self._emit("popup_dismissed", {"types": ["cookie"], "selectors": dismissed})

        nav_urls.update(await collect_header_links(page, self.base_url))

        direct_urls = await self._collect_direct_links(page)
        nav_urls.update(direct_urls)

        all_links = await collect_all_internal_links(page, self.base_url)
        if not direct_urls:
            nav_urls.update(_keyword_account_links(all_links))

        buckets = _bucket_by_section(all_links)

        for section in self.sections:
            outcome = await open_section_menu(page, section.value)
            revealed = await collect_header_links(page, self.base_url)

            matched = [url for url in revealed if classify_section(url) == section]
            source = "menu"
            if not matched:
                matched = buckets[section]
                source = "page_links"

            kept = matched[:self.max_links_per_section]
            section_urls[section.value] = kept
            nav_urls.update(kept)
            self._emit("section_probed", {
                "section": section.value,
                "menu_opened": outcome.opened,
                "strategy": outcome.strategy,
                "source": source,
                "urls": len(kept),
            })

        return DiscoveredUrls(
            generated_at=datetime.now().isoformat(),
            base_url=self.base_url,
            nav_urls=sorted(nav_urls),
            section_urls=section_urls,
            direct_urls=sorted(direct_urls),
        )

    async def _collect_direct_links(self, page: Page) -> set[str]:
        """Account-entry links found by their visible label."""
        found: set[str] = set()
        for label in DIRECT_LINK_LABELS:
            pattern = re.compile(re.escape(label), re.IGNORECASE)
            candidates = [
                page.locator(f'header a:has-text("{label}")').first,
                page.locator(f'nav a:has-text("{label}")').first,
                page.get_by_role("link", name=pattern).first,
            ]
            for candidate in candidates:
                try:
                    if not await candidate.is_visible(timeout=VISIBLE_TIMEOUT_MS):
                        continue
                    href = await candidate.get_attribute("href")
                except PlaywrightError as e:
                    logger.debug("Direct link candidate for %r failed: %s", label, e)
                    continue
                url = internal_url(href, self.base_url, self.base_url)
                if url:
                    found.add(url)
        return found

    def _emit(self, event_type: str, data: dict):
        emit_progress(self._progress, event_type, data)


def _keyword_account_links(links: list[LinkRow]) -> list[str]:
    hits = []
    for link in links:
        haystack = f"{link.text} {link.url}".lower()
        if any(keyword in haystack for keyword in DIRECT_LINK_KEYWORDS):
            hits.append(link.url)
    if hits:
        logger.info("No labelled account links; matched %d by keyword", len(hits))
    return hits


def _bucket_by_section(links: list[LinkRow]) -> dict[Section, list[str]]:
    buckets: dict[Section, list[str]] = {section: [] for section in Section}
    for link in links:
        section = classify_section(link.url)
        if section is not None:
            buckets[section].append(link.url)
    return buckets


async def discover_nav_urls(
    page: Page,
    base_url: str,
    on_progress: ProgressCallback | None = None,
    **kwargs,
) -> DiscoveredUrls:
    """Crawl base_url's navigation. Raises CrawlAbortedError on browser failure."""
    return await NavDiscoverer(base_url, on_progress=on_progress, **kwargs).discover(page)


async def load_or_discover(
    page: Page,
    base_url: str,
    cache_file: str | Path,
    use_cache: bool = True,
    on_progress: ProgressCallback | None = None,
    **kwargs,
) -> DiscoveredUrls:
    """Reuse the cached result when allowed and present, else crawl and cache.

    The returned nav_urls are re-normalized against base_url.
    """
    cached = load_cached_discovered_urls(cache_file) if use_cache else None
    if cached is not None:
        logger.info("Using cached discovery from %s (generated %s)", cache_file, cached.generated_at)
        emit_progress(on_progress, "discovery_cached", {"path": str(cache_file), "nav_urls": len(cached.nav_urls)})
        discovered = cached
    else:
        discovered = await discover_nav_urls(page, base_url, on_progress=on_progress, **kwargs)

    discovered = replace(discovered, nav_urls=merge_and_normalize_urls(base_url, discovered.nav_urls))
    if cached is None:
        save_discovered_urls(cache_file, discovered)
    return discovered
