"""
price_scout/services/competitor_pricing_service.py

Service orchestration for competitor website discovery and price extraction.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache

import requests

from price_scout.domain.competitor_pricing import CompetitorStub, PriceResult, TierEstimate
from price_scout.scraping.classifier import DomainClassifier
from price_scout.scraping.config import PricingPipelineSettings, get_pricing_pipeline_settings
from price_scout.scraping.discovery import WebsiteDiscoveryEngine
from price_scout.scraping.engine import PricingScrapeEngine
from price_scout.scraping.estimator import estimate_prices
from price_scout.scraping.fetcher import HtmlFetcher
from price_scout.scraping.search import build_search_client


class CompetitorPricingService:
    """
    Wires the pipeline from settings and prices a batch of competitors.
    """

    def __init__(
        self,
        settings: PricingPipelineSettings | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings or get_pricing_pipeline_settings()
        self._session = session or requests.Session()
        self._fetcher = HtmlFetcher(settings=self._settings.http, session=self._session)

        discovery: WebsiteDiscoveryEngine | None = None
        if self._settings.discovery.enabled:
            discovery = WebsiteDiscoveryEngine(
                search_client=build_search_client(self._settings.search, session=self._session),
                fetcher=self._fetcher,
                classifier=DomainClassifier(self._settings.classifier),
                settings=self._settings.discovery,
                search_settings=self._settings.search,
            )
        self._engine = PricingScrapeEngine(
            settings=self._settings,
            discovery=discovery,
            fetcher=self._fetcher,
        )

    @property
    def engine(self) -> PricingScrapeEngine:
        return self._engine

    def price_competitors(self, competitors: Sequence[CompetitorStub]) -> dict[str, PriceResult]:
        if not competitors:
            raise ValueError("At least one competitor is required.")
        return self._engine.scrape_batch(competitors)

    @staticmethod
    def estimate(price_level: int | None) -> TierEstimate:
        return estimate_prices(price_level)


@lru_cache(maxsize=1)
def get_competitor_pricing_service() -> CompetitorPricingService:
    """
    Build and cache the competitor pricing service.
    """

    return CompetitorPricingService()
