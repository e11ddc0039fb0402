"""Page health: HTTP status, error-page markers and meaningful content."""

from __future__ import annotations

from playwright.async_api import Page, Error as PlaywrightError

from sitecheck.models.types import CheckResult, UrlPageCheck


NOT_FOUND_MARKERS = ("404", "not found", "page not found")
ALL_PASSED = "All checks passed"


def is_ok_status(status: int | None) -> bool:
    return status is not None and 200 <= status <= 399


def status_failure(status: int | None) -> str:
    return f"HTTP status {status if status is not None else 'N/A'} is outside 200-399"


async def has_obvious_404(page: Page) -> bool:
    title = (await page.title()).lower()
    if any(marker in title for marker in NOT_FOUND_MARKERS):
        return True

    heading = page.locator('h1, h2, [role="heading"]').first
    try:
        text = ((await heading.text_content(timeout=1000)) or "").lower()
    except PlaywrightError:
        return False
    return any(marker in text for marker in NOT_FOUND_MARKERS)


async def has_meaningful_title_or_heading(page: Page) -> bool:
    if len((await page.title()).strip()) > 3:
        return True

    heading = page.locator('h1, [role="heading"]').first
    try:
        if await heading.is_visible(timeout=1000):
            text = ((await heading.text_content(timeout=1000)) or "").strip()
            return len(text) > 1
    except PlaywrightError:
        pass
    return False


class PageHealthDetector:
    """Collects human-readable failure reasons for the page currently loaded."""

    def __init__(self, check_final_url: bool = True):
        self.check_final_url = check_final_url

    async def detect(self, page: Page, status: int | None, final_url: str) -> list[str]:
        reasons = []
        if not is_ok_status(status):
            reasons.append(status_failure(status))

        if await has_obvious_404(page):
            reasons.append("Page appears to be an error/404 page")

        if self.check_final_url:
            lowered = final_url.lower()
            if "/404" in lowered or lowered.endswith("/not-found"):
                reasons.append(f"Unexpected final URL: {final_url}")

        if not await has_meaningful_title_or_heading(page):
            reasons.append("Missing meaningful title and visible heading")
        return reasons

    async def check(self, page: Page, url: str, status: int | None, final_url: str) -> UrlPageCheck:
        reasons = await self.detect(page, status, final_url)
        return UrlPageCheck(
            url=url,
            status=status,
            final_url=final_url,
            result=CheckResult.FAIL if reasons else CheckResult.PASS,
            reason="; ".join(reasons) if reasons else ALL_PASSED,
        )
