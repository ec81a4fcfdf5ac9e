"""
Browser-rendered page scraper for sites that build their menus client-side.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from price_scout.domain.competitor_pricing import ScrapeOutcome
from price_scout.scraping.base import PriceScraperBase
from price_scout.scraping.browser import BrowserSession
from price_scout.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

BOOKING_TEXT_RE = re.compile(
    r"book\s*(?:online|now|appointment)|schedule|reserve|appointment",
    re.IGNORECASE,
)
MAX_BOOKING_LINKS = 2
BOOKING_SETTLE_MS = 8000


def find_booking_links(html: str, base_url: str, limit: int = MAX_BOOKING_LINKS) -> list[str]:
    """
    Links whose label or href looks like an online booking entry point.
    """

    soup = BeautifulSoup(html, "html.parser")
    links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        label = anchor.get_text(" ", strip=True)
        if not href or href.startswith(("#", "tel:", "mailto:", "javascript:")):
            continue
        if not (BOOKING_TEXT_RE.search(label) or BOOKING_TEXT_RE.search(href)):
            continue
        absolute = urljoin(base_url, href)
        if urlparse(absolute).scheme not in {"http", "https"} or absolute in links:
            continue
        links.append(absolute)
        if len(links) >= limit:
            break
    return links


class BrowserPriceScraper(PriceScraperBase):
    """
    Renders pages in headless Chromium and runs the shared extractor on them.

    Booking-platform pages linked from the homepage are tried first, then
    the regular page plan.
    """

    _session: BrowserSession | None = None

    def scrape(
        self,
        url: str,
        *,
        competitor: str,
        extra_pages: Sequence[str] = (),
    ) -> ScrapeOutcome:
        if self.browser_factory is None:
            raise RuntimeError("Browser scraping requested without a browser session factory.")

        with self.browser_factory() as session:
            self._session = session
            try:
                booking = self._scrape_booking_pages(url, competitor=competitor)
                if booking is not None:
                    return booking
                return super().scrape(url, competitor=competitor, extra_pages=extra_pages)
            finally:
                self._session = None

    def load_page(self, url: str) -> str | None:
        if self._session is None:
            raise RuntimeError("Browser session is not open.")
        return self._session.render(url)

    def _scrape_booking_pages(self, url: str, *, competitor: str) -> ScrapeOutcome | None:
        if self._session is None:
            raise RuntimeError("Browser session is not open.")
        homepage = self._session.render(url)
        if homepage is None:
            return None

        attempted = fetched = 1
        for link in find_booking_links(homepage, url):
            attempted += 1
            html = self._session.render(link, settle_ms=BOOKING_SETTLE_MS)
            if html is None:
                continue
            fetched += 1
            services = self.extractor.extract(html)
            log_event(
                logger,
                logging.INFO,
                "booking_page_scraped",
                competitor=competitor,
                page_url=link,
                services_found=len(services),
            )
            if self.extractor.has_enough_signal(services):
                return ScrapeOutcome(
                    services=services,
                    pages_attempted=attempted,
                    pages_fetched=fetched,
                    page_url=link,
                )
        return None
