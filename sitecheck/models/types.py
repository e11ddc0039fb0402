import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


MAX_LINKS_PER_SECTION = 15


class Section(str, Enum):
    SELL = "Sell"
    PRICING = "Pricing"
    RESEARCH = "Research"
    WHY_FALAYA = "Why Falaya"


class CheckResult(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


class LinkSource(str, Enum):
    FOOTER = "footer"                        # semantic <footer> landmark
    VIEWPORT_FALLBACK = "viewport_fallback"  # bottom quarter of the viewport


class SitecheckError(Exception):
    """Base class for harness errors."""


class CrawlAbortedError(SitecheckError):
    """Discovery could not finish; no partial result is available."""

    def __init__(self, base_url: str, reason: str):
        super().__init__(f"Crawl of {base_url} aborted: {reason}")
        self.base_url = base_url
        self.reason = reason


@dataclass
class LinkRow:
    text: str
    url: str


@dataclass
class FooterLink:
    link_text: str
    href: str
    source: LinkSource = LinkSource.FOOTER

    def to_dict(self) -> dict:
        return {
            "linkText": self.link_text,
            "href": self.href,
            "source": self.source.value,
        }


@dataclass
class DiscoveredUrls:
    """Result of one discovery crawl. Treat as immutable once returned."""

    base_url: str
    nav_urls: list[str] = field(default_factory=list)
    section_urls: dict[str, list[str]] = field(default_factory=dict)
    direct_urls: list[str] = field(default_factory=list)
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return {
            "generatedAt": self.generated_at,
            "baseUrl": self.base_url,
            "navUrls": list(self.nav_urls),
            "sectionUrls": {name: list(urls) for name, urls in self.section_urls.items()},
            "directUrls": list(self.direct_urls),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DiscoveredUrls":
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
        section_urls = data.get("sectionUrls") or {}
        if not isinstance(section_urls, dict):
            raise TypeError("sectionUrls must be an object")
        return cls(
            generated_at=str(data["generatedAt"]),
            base_url=str(data["baseUrl"]),
            nav_urls=_str_list(data["navUrls"], "navUrls"),
            section_urls={str(k): _str_list(v, f"sectionUrls.{k}") for k, v in section_urls.items()},
            direct_urls=_str_list(data.get("directUrls") or [], "directUrls"),
        )


def _str_list(value, name: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{name} must be a list of strings")
    return list(value)


@dataclass
class UrlPageCheck:
    url: str
    status: int | None
    final_url: str
    result: CheckResult
    reason: str

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "status": self.status,
            "finalUrl": self.final_url,
            "result": self.result.value,
            "reason": self.reason,
        }


@dataclass
class FooterLinkCheck:
    source_page_url: str
    link_text: str
    href: str
    status: int | None
    final_url: str
    result: CheckResult
    reason: str
    link_source: LinkSource = LinkSource.FOOTER

    def to_dict(self) -> dict:
        return {
            "sourcePageUrl": self.source_page_url,
            "linkText": self.link_text,
            "href": self.href,
            "status": self.status,
            "finalUrl": self.final_url,
            "result": self.result.value,
            "reason": self.reason,
            "linkSource": self.link_source.value,
        }


@dataclass
class MobileCheck:
    url: str
    status: int | None = None
    final_url: str = ""
    result: CheckResult = CheckResult.PASS
    reason: str = "All checks passed"
    viewport_width: int = 0
    scroll_width: int = 0
    has_horizontal_scroll: bool = False
    offscreen_elements_count: int = 0
    menu_opened: bool = False
    screenshot_path: str = ""
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "status": self.status,
            "finalUrl": self.final_url,
            "result": self.result.value,
            "reason": self.reason,
            "viewportWidth": self.viewport_width,
            "scrollWidth": self.scroll_width,
            "hasHorizontalScroll": self.has_horizontal_scroll,
            "offscreenElementsCount": self.offscreen_elements_count,
            "menuOpened": self.menu_opened,
            "screenshotPath": self.screenshot_path,
            "notes": self.notes,
        }


@dataclass
class VisualSnapshot:
    name: str
    url: str
    screenshot_path: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "url": self.url,
            "screenshotPath": self.screenshot_path,
            "error": self.error,
        }


@dataclass
class RunResult:
    url: str
    checks: list[str] = field(default_factory=list)
    discovery: DiscoveredUrls | None = None
    pages_checked: list[UrlPageCheck] = field(default_factory=list)
    footer_links_checked: list[FooterLinkCheck] = field(default_factory=list)
    mobile_checks: list[MobileCheck] = field(default_factory=list)
    visual_snapshots: list[VisualSnapshot] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None

    @property
    def failures(self) -> int:
        rows = [*self.pages_checked, *self.footer_links_checked, *self.mobile_checks]
        return sum(1 for row in rows if row.result == CheckResult.FAIL)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "checks": list(self.checks),
            "discovery": self.discovery.to_dict() if self.discovery else None,
            "pagesChecked": [p.to_dict() for p in self.pages_checked],
            "footerLinksChecked": [f.to_dict() for f in self.footer_links_checked],
            "mobileChecks": [m.to_dict() for m in self.mobile_checks],
            "visualSnapshots": [v.to_dict() for v in self.visual_snapshots],
            "errors": list(self.errors),
            "startedAt": self.started_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "failures": self.failures,
        }


ProgressCallback = Callable[[str, dict], None]


def emit_progress(on_progress: ProgressCallback | None, event_type: str, data: dict):
    """Deliver a progress event. A failing callback is logged, never raised."""
    if on_progress is None:
        return
    try:
        on_progress(event_type, data)
    except Exception:
        logger.exception("Progress callback failed for %s", event_type)
