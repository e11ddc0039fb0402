"""Anchor extraction from specific regions of a rendered page.

The JS snippets run inside the browser and only read raw hrefs and text;
validation, normalization and host filtering happen here in Python.
"""

from __future__ import annotations

import logging

from playwright.async_api import Page

from sitecheck.core.urls import internal_url
from sitecheck.models.types import FooterLink, LinkRow, LinkSource

logger = logging.getLogger(__name__)

NO_TEXT_PLACEHOLDER = "(no text)"
FOOTER_VIEWPORT_RATIO = 0.75


# -> list[str] of raw href attributes
_HEADER_HREFS_JS = """() => {
    const root = document.querySelector('header') || document.querySelector('nav') || document.body;
    if (!root) return [];
    return Array.from(root.querySelectorAll('a[href]')).map((a) => a.getAttribute('href') || '');
}"""

# -> list[{text, href}] in document order
_ALL_ANCHORS_JS = """() => {
    return Array.from(document.querySelectorAll('a[href]')).map((a) => ({
        text: (a.textContent || '').trim(),
        href: a.getAttribute('href') || '',
    }));
}"""

# (ratio) -> {source: 'footer' | 'viewport_fallback', rows: list[{text, href}]}
_FOOTER_ANCHORS_JS = """(ratio) => {
    const toRows = (anchors) => anchors.map((a) => ({
        text: (a.textContent || '').trim(),
        href: a.getAttribute('href') || '',
    }));

    const footer = document.querySelector('footer');
    if (footer) {
        return {source: 'footer', rows: toRows(Array.from(footer.querySelectorAll('a[href]')))};
    }

    const lowerBound = window.innerHeight * ratio;
    const anchors = Array.from(document.querySelectorAll('a[href]')).filter((a) => {
        return a.getBoundingClientRect().top >= lowerBound;
    });
    return {source: 'viewport_fallback', rows: toRows(anchors)};
}"""


async def collect_header_links(page: Page, base_url: str) -> list[str]:
    """Internal links under <header>, else <nav>, else <body>.

    Unique URLs in document order.
    """
    hrefs = await page.evaluate(_HEADER_HREFS_JS)
    links: dict[str, None] = {}
    for href in hrefs or []:
        url = internal_url(href, base_url, base_url)
        if url:
            links.setdefault(url)
    return list(links)


async def collect_all_internal_links(page: Page, base_url: str) -> list[LinkRow]:
    """Every internal link on the page, first occurrence of each URL wins."""
    rows = await page.evaluate(_ALL_ANCHORS_JS)
    seen: set[str] = set()
    output: list[LinkRow] = []
    for row in rows or []:
        url = internal_url(row.get("href"), base_url, base_url)
        if not url or url in seen:
            continue
        seen.add(url)
        output.append(LinkRow(text=row.get("text") or "", url=url))
    return output


async def extract_footer_links(page: Page, page_url: str, base_url: str) -> list[FooterLink]:
    """Footer links of the current page, resolved against page_url.

    Pages without a <footer> fall back to anchors in the bottom quarter of
    the viewport; those links are tagged LinkSource.VIEWPORT_FALLBACK.
    """
    payload = await page.evaluate(_FOOTER_ANCHORS_JS, FOOTER_VIEWPORT_RATIO)
    payload = payload or {}
    try:
        source = LinkSource(payload.get("source", LinkSource.FOOTER.value))
    except ValueError:
        source = LinkSource.VIEWPORT_FALLBACK
    if source is LinkSource.VIEWPORT_FALLBACK:
        logger.info("No <footer> on %s, using bottom-of-viewport anchors", page_url)

    seen: set[tuple[str, str]] = set()
    links: list[FooterLink] = []
    for row in payload.get("rows") or []:
        href = internal_url(row.get("href"), page_url, base_url)
        if not href:
            continue
        text = (row.get("text") or "").strip()
        key = (text, href)
        if key in seen:
            continue
        seen.add(key)
        links.append(FooterLink(link_text=text or NO_TEXT_PLACEHOLDER, href=href, source=source))
    return links
