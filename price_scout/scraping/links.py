"""
Service/pricing link discovery on a business homepage.
"""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from price_scout.scraping.classifier import page_text

SERVICE_LINK_KEYWORDS = (
    "service",
    "services",
    "menu",
    "price",
    "pricing",
    "prices",
    "price-list",
    "nail",
    "nails",
    "manicure",
    "pedicure",
)

# Highest priority first.
SERVICE_PAGE_PRIORITY = (
    "services",
    "pricing",
    "price-list",
    "menu",
    "nails",
    "manicure",
    "service",
)

MENU_PAGE_KEYWORDS = ("menu", "price-list", "prices", "pricing")

DIRECTORY_PHRASES = (
    "directory",
    "find businesses",
    "business listings",
    "review site",
    "write a review",
    "sponsored listing",
    "business directory",
)

_EXCLUDED_SCHEMES = ("javascript:", "mailto:", "tel:", "sms:", "data:")


def _host(url: str) -> str:
    host = (urlparse(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def extract_service_links(html: str, base_url: str) -> list[str]:
    """
    Same-site links whose href mentions services, pricing or a nail keyword.

    Relative links are resolved against `base_url`, fragments dropped and
    duplicates removed in document order.
    """

    soup = BeautifulSoup(html, "html.parser")
    base_host = _host(base_url)
    links: list[str] = []
    seen: set[str] = set()

    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        if not href or href.startswith("#") or href.lower().startswith(_EXCLUDED_SCHEMES):
            continue

        absolute, _fragment = urldefrag(urljoin(base_url, href))
        parsed = urlparse(absolute)
        if parsed.scheme not in {"http", "https"} or _host(absolute) != base_host:
            continue

        target = (parsed.path + ("?" + parsed.query if parsed.query else "")).lower()
        if not any(keyword in target for keyword in SERVICE_LINK_KEYWORDS):
            continue

        normalized = absolute.rstrip("/") if parsed.path not in {"", "/"} else absolute
        if normalized in seen:
            continue
        seen.add(normalized)
        links.append(normalized)

    return links


def _link_path(url: str) -> str:
    return urlparse(url).path.lower()


def select_best_service_page(urls: Sequence[str]) -> str | None:
    """
    Highest-priority link by keyword, else the first link, else None.
    """

    if not urls:
        return None
    for keyword in SERVICE_PAGE_PRIORITY:
        for url in urls:
            if keyword in _link_path(url):
                return url
    return urls[0]


def select_menu_page(urls: Sequence[str], *, exclude: str | None = None) -> str | None:
    """
    A menu or price-list link distinct from the chosen services page.
    """

    for keyword in MENU_PAGE_KEYWORDS:
        for url in urls:
            if url != exclude and keyword in _link_path(url):
                return url
    return None


def is_likely_js_only_page(html: str, min_chars: int = 5000) -> bool:
    """
    Very small documents usually mean client-side rendering.
    """

    return len(html) < min_chars


def contains_directory_patterns(html: str) -> bool:
    text = page_text(html)
    return any(phrase in text for phrase in DIRECTORY_PHRASES)
