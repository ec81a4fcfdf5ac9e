"""
Plain HTTP page scraper.
"""

from __future__ import annotations

from price_scout.scraping.base import PriceScraperBase


class StaticPriceScraper(PriceScraperBase):
    """
    Loads pages with the shared HTTP fetcher; no JavaScript execution.
    """

    def load_page(self, url: str) -> str | None:
        return self.fetcher.fetch(url)
