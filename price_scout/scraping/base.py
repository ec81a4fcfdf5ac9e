"""
Base page scraper: walks a competitor's likely pricing pages and extracts services.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlparse

from price_scout.domain.competitor_pricing import ExtractedService, ScrapeOutcome
from price_scout.scraping.config.models import PricingPipelineSettings
from price_scout.scraping.fetcher import HtmlFetcher
from price_scout.scraping.links import extract_service_links, select_best_service_page
from price_scout.scraping.logging_utils import log_event
from price_scout.scraping.parsing import PriceExtractor

if TYPE_CHECKING:
    from price_scout.scraping.browser import BrowserSession

logger = logging.getLogger(__name__)


def site_root(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}/"


def _same_page(left: str, right: str) -> bool:
    return left.rstrip("/") == right.rstrip("/")


class PriceScraperBase(ABC):
    """
    Base class implementing the page plan and extraction loop.

    Subclasses only decide how a page's HTML is obtained.
    """

    def __init__(
        self,
        *,
        settings: PricingPipelineSettings,
        extractor: PriceExtractor,
        fetcher: HtmlFetcher,
        browser_factory: Callable[[], BrowserSession] | None = None,
    ) -> None:
        self.settings = settings
        self.extractor = extractor
        self.fetcher = fetcher
        self.browser_factory = browser_factory

    def scrape(
        self,
        url: str,
        *,
        competitor: str,
        extra_pages: Sequence[str] = (),
    ) -> ScrapeOutcome:
        """
        Visit planned pages until enough services are found or the page limit is reached.
        """

        plan = deque(self.page_plan(url, extra_pages))
        visited: list[str] = []
        services: list[ExtractedService] = []
        seen: set[tuple[str, float, str]] = set()
        errors: list[str] = []
        fetched = 0
        best_page: str | None = None
        best_count = 0

        while plan and len(visited) < self.settings.scrape.max_pages:
            page_url = plan.popleft()
            if any(_same_page(page_url, done) for done in visited):
                continue
            visited.append(page_url)

            try:
                html = self.load_page(page_url)
                if html is None:
                    errors.append(f"url={page_url} error=unavailable")
                    log_event(
                        logger,
                        logging.INFO,
                        "page_unavailable",
                        competitor=competitor,
                        page_url=page_url,
                    )
                    continue
                fetched += 1

                added = 0
                for service in self.extractor.extract(html):
                    key = self.extractor.dedupe_key(service)
                    if key in seen:
                        continue
                    seen.add(key)
                    services.append(service)
                    added += 1
                if added > best_count:
                    best_page, best_count = page_url, added

                if len(visited) == 1:
                    follow_up = self._follow_up_link(html, page_url)
                    if follow_up is not None:
                        plan.appendleft(follow_up)

                log_event(
                    logger,
                    logging.INFO,
                    "page_scraped",
                    competitor=competitor,
                    page_url=page_url,
                    services_found=added,
                )
            except Exception as exc:
                errors.append(f"url={page_url} error={exc}")
                log_event(
                    logger,
                    logging.ERROR,
                    "page_scrape_failed",
                    competitor=competitor,
                    page_url=page_url,
                    error=str(exc),
                )
                continue

            if self.extractor.has_enough_signal(services):
                break

        return ScrapeOutcome(
            services=services,
            pages_attempted=len(visited),
            pages_fetched=fetched,
            page_url=best_page,
            errors=errors,
        )

    def page_plan(self, url: str, extra_pages: Sequence[str] = ()) -> list[str]:
        """
        Target page first, then known extra pages, then common pricing paths.
        """

        root = site_root(url)
        pages = [url, *extra_pages]
        pages.extend(urljoin(root, path.lstrip("/")) for path in self.settings.scrape.common_paths)
        return list(dict.fromkeys(page for page in pages if page))

    @staticmethod
    def _follow_up_link(html: str, page_url: str) -> str | None:
        best = select_best_service_page(extract_service_links(html, page_url))
        if best is None or _same_page(best, page_url):
            return None
        return best

    @abstractmethod
    def load_page(self, url: str) -> str | None:
        """
        Return the page HTML, or None when it cannot be loaded.
        """
