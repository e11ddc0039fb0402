"""Tests for the page health and responsive layout detectors."""

from __future__ import annotations

import pytest

from fake_browser import FakeElement, FakePage
from sitecheck.detectors.page_health import (
    ALL_PASSED,
    PageHealthDetector,
    has_meaningful_title_or_heading,
    has_obvious_404,
    is_ok_status,
)
from sitecheck.detectors.responsive import LayoutMetrics, collect_layout_metrics
from sitecheck.models.types import CheckResult

HEADINGS = 'h1, h2, [role="heading"]'


class TestStatus:
    @pytest.mark.parametrize("status", [200, 204, 301, 399])
    def test_ok(self, status):
        assert is_ok_status(status)

    @pytest.mark.parametrize("status", [None, 199, 400, 404, 500])
    def test_not_ok(self, status):
        assert not is_ok_status(status)


class TestObvious404:
    @pytest.mark.asyncio
    async def test_title_marker(self):
        assert await has_obvious_404(FakePage(title="Page Not Found | Falaya"))

    @pytest.mark.asyncio
    async def test_heading_marker(self):
        page = FakePage(title="Falaya")
        page.headings[HEADINGS] = "404 - we lost this one"
        assert await has_obvious_404(page)

    @pytest.mark.asyncio
    async def test_heading_timeout_is_not_a_404(self):
        assert not await has_obvious_404(FakePage(title="Falaya | Pricing"))


class TestMeaningfulContent:
    @pytest.mark.asyncio
    async def test_title_is_enough(self):
        assert await has_meaningful_title_or_heading(FakePage(title="Pricing"))

    @pytest.mark.asyncio
    async def test_short_title_with_visible_heading(self):
        page = FakePage(title="  ")
        page.add_element('h1, [role="heading"]', FakeElement(tag="h1"))
        page.headings['h1, [role="heading"]'] = "Sell your home"
        assert await has_meaningful_title_or_heading(page)

    @pytest.mark.asyncio
    async def test_short_title_no_heading(self):
        assert not await has_meaningful_title_or_heading(FakePage(title="abc"))


class TestPageHealthDetector:
    @pytest.mark.asyncio
    async def test_healthy_page(self):
        check = await PageHealthDetector().check(
            FakePage(), "https://falaya.com/pricing", 200, "https://falaya.com/pricing",
        )
        assert check.result is CheckResult.PASS
        assert check.reason == ALL_PASSED

    @pytest.mark.asyncio
    async def test_reasons_accumulate(self):
        page = FakePage(title="404")
        check = await PageHealthDetector().check(page, "https://falaya.com/x", 404, "https://falaya.com/404")
        assert check.result is CheckResult.FAIL
        assert check.reason == (
            "HTTP status 404 is outside 200-399; "
            "Page appears to be an error/404 page; "
            "Unexpected final URL: https://falaya.com/404; "
            "Missing meaningful title and visible heading"
        )

    @pytest.mark.asyncio
    async def test_missing_status(self):
        reasons = await PageHealthDetector().detect(FakePage(), None, "https://falaya.com/")
        assert reasons == ["HTTP status N/A is outside 200-399"]

    @pytest.mark.asyncio
    async def test_final_url_check_can_be_disabled(self):
        detector = PageHealthDetector(check_final_url=False)
        assert await detector.detect(FakePage(), 200, "https://falaya.com/not-found") == []


class TestLayoutMetrics:
    @pytest.mark.asyncio
    async def test_clean_layout(self):
        metrics = await collect_layout_metrics(FakePage())
        assert metrics == LayoutMetrics(viewport_width=428, scroll_width=428)
        assert metrics.failures() == []

    @pytest.mark.asyncio
    async def test_overflowing_layout(self):
        page = FakePage()
        page.layout = {"viewportWidth": 428, "scrollWidth": 610, "hasHorizontalScroll": True, "offscreenElementsCount": 3}
        metrics = await collect_layout_metrics(page)
        assert metrics.failures() == ["Horizontal scroll detected", "Detected 3 off-screen key elements"]

    @pytest.mark.asyncio
    async def test_missing_keys_default_to_zero(self):
        page = FakePage()
        page.layout = {}
        metrics = await collect_layout_metrics(page)
        assert metrics == LayoutMetrics()
