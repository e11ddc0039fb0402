"""Tests for URL verification over a cached discovery result."""

from __future__ import annotations

import json

import pytest
from playwright.async_api import Error as PlaywrightError

from fake_browser import FakePage, FakeRequestContext, FakeContext
from sitecheck.config import HarnessConfig
from sitecheck.core.cache import save_discovered_urls
from sitecheck.core.verifier import run_url_verification
from sitecheck.models.types import CheckResult, DiscoveredUrls, LinkSource

BASE = "https://falaya.com"


@pytest.fixture
def config(tmp_path):
    cfg = HarnessConfig(base_url=BASE, reports_dir=tmp_path / "reports")
    save_discovered_urls(cfg.discovery_cache, DiscoveredUrls(
        base_url=BASE,
        nav_urls=[
            "https://falaya.com/",
            "https://falaya.com/pricing",
            "https://falaya.com/missing",
            "https://falaya.com/broken",
        ],
    ))
    return cfg


@pytest.fixture
def page():
    p = FakePage(footer={"source": "footer", "rows": [
        {"text": "Terms", "href": "/terms"},
        {"text": "Careers", "href": "/careers"},
        {"text": "Old blog", "href": "/blog-archive"},
    ]})
    p.statuses["https://falaya.com/missing"] = 404
    p.goto_errors["https://falaya.com/broken"] = PlaywrightError("net::ERR_ABORTED")
    p.context = FakeContext(FakeRequestContext(
        statuses={"https://falaya.com/blog-archive": 410},
        failing={"https://falaya.com/careers"},
    ))
    return p


class TestUrlVerification:
    @pytest.mark.asyncio
    async def test_page_rows(self, config, page):
        outcome = await run_url_verification(page, config, use_cache=True)

        rows = {row.url: row for row in outcome.pages_checked}
        assert list(rows) == [
            "https://falaya.com/",
            "https://falaya.com/broken",
            "https://falaya.com/missing",
            "https://falaya.com/pricing",
        ]
        assert rows["https://falaya.com/"].result is CheckResult.PASS
        assert rows["https://falaya.com/pricing"].reason == "All checks passed"
        assert rows["https://falaya.com/missing"].result is CheckResult.FAIL
        assert rows["https://falaya.com/missing"].reason == "HTTP status 404 is outside 200-399"
        broken = rows["https://falaya.com/broken"]
        assert broken.result is CheckResult.FAIL
        assert broken.status is None
        assert broken.reason.startswith("Navigation failed: ")
        assert "ERR_ABORTED" in broken.reason

    @pytest.mark.asyncio
    async def test_footer_links_requested_once_per_href(self, config, page):
        outcome = await run_url_verification(page, config, use_cache=True)

        # three pages load, each with the same three footer links
        assert len(outcome.footer_links_checked) == 9
        assert sorted(page.context.request.calls) == [
            "https://falaya.com/blog-archive",
            "https://falaya.com/careers",
            "https://falaya.com/terms",
        ]
        by_href = {row.href: row for row in outcome.footer_links_checked}
        assert by_href["https://falaya.com/terms"].result is CheckResult.PASS
        assert by_href["https://falaya.com/blog-archive"].reason == "HTTP status 410 is outside 200-399"
        careers = by_href["https://falaya.com/careers"]
        assert careers.status is None
        assert careers.reason.startswith("Footer link request failed: ")
        assert all(row.link_source is LinkSource.FOOTER for row in outcome.footer_links_checked)

    @pytest.mark.asyncio
    async def test_footer_rows_keep_their_source_page(self, config, page):
        outcome = await run_url_verification(page, config, use_cache=True)
        sources = {row.source_page_url for row in outcome.footer_links_checked}
        assert sources == {"https://falaya.com/", "https://falaya.com/missing", "https://falaya.com/pricing"}

    @pytest.mark.asyncio
    async def test_reports_and_screenshots(self, config, page):
        events = []
        await run_url_verification(page, config, on_progress=lambda t, d: events.append(t), use_cache=True)

        data = json.loads(config.url_report_json.read_text(encoding="utf-8"))
        assert len(data["pagesChecked"]) == 4
        assert len(data["footerLinksChecked"]) == 9
        assert config.url_report_html.is_file()

        shots = [s.rsplit("/", 1)[-1] for s in page.screenshots]
        assert shots == ["home.png", "missing.png", "pricing.png", "url-verification-final.png"]
        assert events[0] == "discovery_cached"
        assert events.count("page_checked") == 4
        assert events[-1] == "report_written"

    @pytest.mark.asyncio
    async def test_redirect_uses_final_url_for_health(self, config, page):
        page.redirects["https://falaya.com/pricing"] = "https://falaya.com/404"
        outcome = await run_url_verification(page, config, use_cache=True)
        pricing = next(r for r in outcome.pages_checked if r.url == "https://falaya.com/pricing")
        assert pricing.final_url == "https://falaya.com/404"
        assert "Unexpected final URL: https://falaya.com/404" in pricing.reason

    @pytest.mark.asyncio
    async def test_broken_progress_callback_does_not_stop_run(self, config, page):
        def explode(event_type, data):
            raise RuntimeError("ui went away")

        outcome = await run_url_verification(page, config, on_progress=explode, use_cache=True)

        assert len(outcome.pages_checked) == 4
        assert config.url_report_json.is_file()
