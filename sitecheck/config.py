"""Harness configuration.

Every file location the checks write to is derived from reports_dir and
passed explicitly into the checks and report writers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://falaya.com"

VISUAL_PAGES = [
    ("/", "home"),
    ("/pricing", "pricing"),
    ("/research", "research"),
]

ALL_CHECKS = ["urls", "mobile", "visual"]


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class HarnessConfig:
    base_url: str = DEFAULT_BASE_URL
    reports_dir: Path = Path("reports")
    headless: bool = True
    navigation_timeout_ms: int = 45000
    action_timeout_ms: int = 15000
    page_timeout_ms: int = 20000
    network_idle_timeout_ms: int = 10000
    footer_request_timeout_ms: int = 15000
    screenshot_timeout_ms: int = 30000
    desktop_viewport: dict = field(default_factory=lambda: {"width": 1920, "height": 1080})
    mobile_device: str = "iPhone 13 Pro Max"
    visual_pages: list[tuple[str, str]] = field(default_factory=lambda: list(VISUAL_PAGES))

    def __post_init__(self):
        self.reports_dir = Path(self.reports_dir)
        if not self.base_url.startswith("http"):
            self.base_url = f"https://{self.base_url}"

    @classmethod
    def from_env(cls, **overrides) -> "HarnessConfig":
        """Build a config from SITECHECK_* variables (and a .env file), then apply overrides."""
        local_env = Path.cwd() / ".env"
        if local_env.is_file():
            load_dotenv(local_env)
        values = {
            "base_url": os.environ.get("SITECHECK_BASE_URL", DEFAULT_BASE_URL),
            "reports_dir": Path(os.environ.get("SITECHECK_REPORTS_DIR", "reports")),
            "headless": _env_flag("SITECHECK_HEADLESS", True),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def discovery_cache(self) -> Path:
        return self.reports_dir / "discovered-urls.json"

    @property
    def url_report_html(self) -> Path:
        return self.reports_dir / "url-verification-report.html"

    @property
    def url_report_json(self) -> Path:
        return self.reports_dir / "url-verification-report.json"

    @property
    def mobile_report_html(self) -> Path:
        return self.reports_dir / "mobile-responsive-report.html"

    @property
    def mobile_report_json(self) -> Path:
        return self.reports_dir / "mobile-responsive-report.json"

    @property
    def screenshots_dir(self) -> Path:
        return self.reports_dir / "screenshots"
