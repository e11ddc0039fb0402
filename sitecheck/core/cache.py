"""File-backed cache for discovery results.

One JSON document per path, read once before a run and written once after.
There is no expiry and no locking; callers decide when a cache is stale.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from sitecheck.core.urls import normalize_url
from sitecheck.models.types import DiscoveredUrls

logger = logging.getLogger(__name__)


def ensure_dir(target_dir: str | Path):
    Path(target_dir).mkdir(parents=True, exist_ok=True)


def write_json_file(output_file: str | Path, data) -> Path:
    """Serialize data to output_file, creating parent directories."""
    path = Path(output_file)
    ensure_dir(path.parent)
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def save_discovered_urls(cache_file: str | Path, discovered: DiscoveredUrls) -> Path:
    return write_json_file(cache_file, discovered)


def load_cached_discovered_urls(cache_file: str | Path) -> DiscoveredUrls | None:
    """Load a cached discovery result, or None if there is no usable cache."""
    path = Path(cache_file)
    if not path.is_file():
        return None
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return DiscoveredUrls.from_dict(raw)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.debug("Ignoring unreadable discovery cache %s: %s", path, e)
        return None


def merge_and_normalize_urls(base_url: str, seed_urls: list[str]) -> list[str]:
    """Normalize, drop rejects, dedupe and sort."""
    urls = set()
    for candidate in seed_urls:
        url = normalize_url(candidate, base_url)
        if url:
            urls.add(url)
    return sorted(urls)
