"""URL canonicalization, host filtering and section classification.

normalize_url() is the single definition of URL equality for the harness:
two hrefs point at the same page iff their normalized strings are equal.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlsplit, urlunsplit

from sitecheck.models.types import Section


_INVALID_HREF_PREFIXES = ("javascript:", "mailto:", "tel:")
_DEFAULT_PORTS = {"http": 80, "https": 443}

# Ordered, first match wins. Prefixes are disjoint.
_SECTION_PREFIXES: list[tuple[tuple[str, ...], Section]] = [
    (("/sell",), Section.SELL),
    (("/pricing",), Section.PRICING),
    (("/research",), Section.RESEARCH),
    (("/why-falaya", "/about-falaya", "/features", "/comparison"), Section.WHY_FALAYA),
]

SECTION_ORDER: list[Section] = [section for _, section in _SECTION_PREFIXES]


def normalize_url(raw_url: str, base_url: str) -> str | None:
    """Resolve raw_url against base_url into a comparable absolute URL.

    The host is lower-cased, the scheme's default port dropped and `.`/`..`
    path segments resolved. Returns None for anything that is not an
    http(s) URL with a host.
    """
    try:
        parts = urlsplit(urljoin(base_url, raw_url.strip()))
        scheme = parts.scheme.lower()
        host = parts.hostname
        if scheme not in ("http", "https") or not host:
            return None
        port = parts.port
    except (ValueError, AttributeError, TypeError):
        return None

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    path = _remove_dot_segments(parts.path).rstrip("/") or "/"
    return urlunsplit((scheme, netloc, path, parts.query, ""))


def _remove_dot_segments(path: str) -> str:
    segments: list[str] = []
    for segment in path.split("/")[1:]:
        if segment == "..":
            if segments:
                segments.pop()
        elif segment != ".":
            segments.append(segment)
    return "/" + "/".join(segments)


def is_internal_url(candidate: str, base_url: str) -> bool:
    """True iff candidate lives on the same hostname as base_url."""
    try:
        base_host = urlsplit(base_url).hostname
        host = urlsplit(urljoin(base_url, candidate)).hostname
    except (ValueError, AttributeError, TypeError):
        return False
    return bool(base_host) and host == base_host


def is_invalid_href(href: str | None) -> bool:
    if not href:
        return True
    lowered = href.strip().lower()
    if not lowered or lowered.startswith("#"):
        return True
    return lowered.startswith(_INVALID_HREF_PREFIXES)


def internal_url(href: str | None, resolve_against: str, base_url: str) -> str | None:
    """Normalize href and keep it only if it is valid and internal."""
    if is_invalid_href(href):
        return None
    url = normalize_url(href, resolve_against)
    if not url or not is_internal_url(url, base_url):
        return None
    return url


def classify_section(url: str) -> Section | None:
    try:
        path = urlsplit(url).path.lower()
    except (ValueError, AttributeError, TypeError):
        return None
    for prefixes, section in _SECTION_PREFIXES:
        if path.startswith(prefixes):
            return section
    return None


def to_slug(url: str) -> str:
    """File-name friendly slug for a page URL: '/pricing/teams?a=1' -> 'pricing-teams-a-1'."""
    parts = urlsplit(url)
    path_slug = re.sub(r"[^a-zA-Z0-9]+", "-", parts.path.strip("/"))
    query_slug = re.sub(r"[^a-zA-Z0-9]+", "-", parts.query).strip("-")
    slug = "-".join(s for s in (path_slug or "home", query_slug) if s)
    return slug.lower()
