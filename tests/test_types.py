"""Tests for the result types in sitecheck.models.types."""

from __future__ import annotations

import pytest

from sitecheck.models.types import (
    CheckResult, CrawlAbortedError, DiscoveredUrls, MobileCheck, RunResult, SitecheckError, UrlPageCheck,
    emit_progress,
)


class TestDiscoveredUrlsFromDict:
    def test_optional_keys_default(self):
        d = DiscoveredUrls.from_dict({
            "generatedAt": "2026-10-19T09:00:00",
            "baseUrl": "https://falaya.com",
            "navUrls": ["https://falaya.com/"],
        })
        assert d.section_urls == {}
        assert d.direct_urls == []

    def test_rejects_non_object(self):
        with pytest.raises(TypeError):
            DiscoveredUrls.from_dict(["https://falaya.com/"])

    def test_rejects_bad_section_entry(self):
        with pytest.raises(ValueError, match="sectionUrls.Sell"):
            DiscoveredUrls.from_dict({
                "generatedAt": "x", "baseUrl": "https://falaya.com", "navUrls": [],
                "sectionUrls": {"Sell": [1, 2]},
            })

    def test_missing_nav_urls(self):
        with pytest.raises(KeyError):
            DiscoveredUrls.from_dict({"generatedAt": "x", "baseUrl": "https://falaya.com"})


class TestRunResult:
    def test_failures_count_every_row_kind(self):
        fail = UrlPageCheck(url="u", status=500, final_url="u", result=CheckResult.FAIL, reason="r")
        ok = UrlPageCheck(url="v", status=200, final_url="v", result=CheckResult.PASS, reason="All checks passed")
        result = RunResult(
            url="https://falaya.com",
            pages_checked=[fail, ok],
            mobile_checks=[MobileCheck(url="u", result=CheckResult.FAIL, reason="Horizontal scroll detected")],
        )
        assert result.failures == 2
        data = result.to_dict()
        assert data["failures"] == 2
        assert data["completedAt"] is None
        assert data["mobileChecks"][0]["hasHorizontalScroll"] is False


class TestErrors:
    def test_crawl_aborted_is_a_sitecheck_error(self):
        err = CrawlAbortedError("https://falaya.com", "net::ERR_NAME_NOT_RESOLVED")
        assert isinstance(err, SitecheckError)
        assert str(err) == "Crawl of https://falaya.com aborted: net::ERR_NAME_NOT_RESOLVED"
        assert err.reason == "net::ERR_NAME_NOT_RESOLVED"


class TestEmitProgress:
    def test_delivers_event(self):
        events = []
        emit_progress(lambda t, d: events.append((t, d)), "page_checked", {"url": "u"})
        assert events == [("page_checked", {"url": "u"})]

    def test_none_callback(self):
        emit_progress(None, "page_checked", {})

    def test_failing_callback_is_logged(self, caplog):
        def explode(event_type, data):
            raise RuntimeError("ui went away")

        emit_progress(explode, "report_written", {})
        assert "Progress callback failed for report_written" in caplog.text
