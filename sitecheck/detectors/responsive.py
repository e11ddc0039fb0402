"""Mobile layout metrics: horizontal overflow and off-screen key elements."""

from __future__ import annotations

from dataclasses import dataclass

from playwright.async_api import Page


_LAYOUT_METRICS_JS = """() => {
    const viewportWidth = document.documentElement.clientWidth;
    const scrollWidth = document.documentElement.scrollWidth;
    const hasHorizontalScroll = scrollWidth > viewportWidth + 2;

    const keyElements = [
        document.querySelector('header'),
        document.querySelector('main'),
        document.querySelector('footer'),
    ].filter(Boolean);

    const visibleElements = Array.from(document.querySelectorAll('body *')).filter((el) => {
        const rect = el.getBoundingClientRect();
        if (rect.width <= 50 || rect.height <= 10) return false;
        const style = window.getComputedStyle(el);
        if (style.display === 'none' || style.visibility === 'hidden' || Number(style.opacity) === 0) return false;
        return rect.bottom >= 0 && rect.top <= window.innerHeight;
    });

    let offscreenCount = 0;
    for (const el of [...keyElements, ...visibleElements.slice(0, 10)]) {
        const rect = el.getBoundingClientRect();
        if (rect.left < -2 || rect.right > viewportWidth + 2) offscreenCount += 1;
    }

    return {viewportWidth, scrollWidth, hasHorizontalScroll, offscreenElementsCount: offscreenCount};
}"""


@dataclass
class LayoutMetrics:
    viewport_width: int = 0
    scroll_width: int = 0
    has_horizontal_scroll: bool = False
    offscreen_elements_count: int = 0

    def failures(self) -> list[str]:
        reasons = []
        if self.has_horizontal_scroll:
            reasons.append("Horizontal scroll detected")
        if self.offscreen_elements_count > 0:
            reasons.append(f"Detected {self.offscreen_elements_count} off-screen key elements")
        return reasons


async def collect_layout_metrics(page: Page) -> LayoutMetrics:
    data = await page.evaluate(_LAYOUT_METRICS_JS)
    return LayoutMetrics(
        viewport_width=int(data.get("viewportWidth", 0)),
        scroll_width=int(data.get("scrollWidth", 0)),
        has_horizontal_scroll=bool(data.get("hasHorizontalScroll", False)),
        offscreen_elements_count=int(data.get("offscreenElementsCount", 0)),
    )
