"""
Page scraper registry and factory.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

from price_scout.scraping.base import PriceScraperBase
from price_scout.scraping.browser import BrowserSession
from price_scout.scraping.config.models import PricingPipelineSettings
from price_scout.scraping.fetcher import HtmlFetcher
from price_scout.scraping.parsing import PriceExtractor
from price_scout.scraping.scrapers import BrowserPriceScraper, StaticPriceScraper


class ScraperRegistry:
    """
    Scraper registry keyed by scraper type.
    """

    def __init__(self, registrations: Mapping[str, type[PriceScraperBase]] | None = None) -> None:
        builtins: dict[str, type[PriceScraperBase]] = {
            "static": StaticPriceScraper,
            "browser": BrowserPriceScraper,
        }
        if registrations:
            builtins.update(registrations)
        self._registrations = builtins

    def register(self, *, scraper_type: str, scraper_class: type[PriceScraperBase]) -> None:
        self._registrations[scraper_type.strip().lower()] = scraper_class

    def create_scraper(
        self,
        scraper_type: str,
        *,
        settings: PricingPipelineSettings,
        extractor: PriceExtractor,
        fetcher: HtmlFetcher,
        browser_factory: Callable[[], BrowserSession] | None = None,
    ) -> PriceScraperBase:
        scraper_class = self._resolve_scraper_class(scraper_type)
        return scraper_class(
            settings=settings,
            extractor=extractor,
            fetcher=fetcher,
            browser_factory=browser_factory,
        )

    def _resolve_scraper_class(self, scraper_type: str) -> type[PriceScraperBase]:
        resolved = self._registrations.get(scraper_type.strip().lower())
        if resolved is None:
            allowed = ", ".join(sorted(self._registrations.keys()))
            raise ValueError(f"Unknown scraper_type='{scraper_type}'. Allowed types: {allowed}.")
        return resolved
